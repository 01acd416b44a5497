"""Service registry data models."""

from typing import List, Optional
from pydantic import BaseModel, Field, field_validator, model_validator

REQ_MODES = ["http", "tcp"]


class ServiceDest(BaseModel):
    """One routable destination within a service."""
    port: str = ""
    service_path: List[str] = Field(default_factory=list)
    src_port: int = 0
    # Pre-rendered clause text, appended verbatim (callers include the leading space)
    src_port_acl: str = ""
    src_port_acl_name: str = ""

    @field_validator('port', mode='before')
    @classmethod
    def validate_port(cls, v):
        if v is None:
            return ""
        return str(v).strip()

    @field_validator('src_port')
    @classmethod
    def validate_src_port(cls, v: int) -> int:
        if v < 0 or v > 65535:
            raise ValueError(f"src_port out of range: {v}")
        return v


class Service(BaseModel):
    """A logical routed endpoint."""
    service_name: str
    acl_name: str = ""
    path_type: str = ""
    service_domain: List[str] = Field(default_factory=list)
    req_mode: str = "http"
    https_port: Optional[int] = None
    service_dest: List[ServiceDest] = Field(default_factory=list)

    @field_validator('service_name')
    @classmethod
    def validate_service_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError('service_name cannot be empty')
        return v

    @field_validator('req_mode', mode='before')
    @classmethod
    def validate_req_mode(cls, v):
        if not v:
            return "http"
        v = str(v).strip().lower()
        if v not in REQ_MODES:
            raise ValueError(f"req_mode must be one of {REQ_MODES}")
        return v

    @field_validator('https_port')
    @classmethod
    def validate_https_port(cls, v: Optional[int]) -> Optional[int]:
        # 0 is how callers say "no https split"
        if not v:
            return None
        if v < 0 or v > 65535:
            raise ValueError(f"https_port out of range: {v}")
        return v

    @model_validator(mode='after')
    def validate_tcp_destinations(self):
        if self.req_mode == "tcp" and not any(d.src_port for d in self.service_dest):
            raise ValueError(
                f"tcp service '{self.service_name}' needs at least one destination with src_port"
            )
        return self

    @property
    def effective_acl_name(self) -> str:
        """Backend name prefix, falling back to the service name."""
        return self.acl_name or self.service_name
