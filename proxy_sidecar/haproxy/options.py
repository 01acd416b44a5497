"""Environment-driven options applied to the base template."""

import os
from typing import Dict, List, Mapping, Optional, Tuple
from pydantic import BaseModel, Field, field_validator

# Timeout name in the template -> environment variable holding its override
TIMEOUT_ENV_VARS = {
    "connect": "TIMEOUT_CONNECT",
    "client": "TIMEOUT_CLIENT",
    "server": "TIMEOUT_SERVER",
    "queue": "TIMEOUT_QUEUE",
    "http-request": "TIMEOUT_HTTP_REQUEST",
    "http-keep-alive": "TIMEOUT_HTTP_KEEP_ALIVE",
}


def _split_list(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


class CompilerOptions(BaseModel):
    """Global template overrides. Empty values leave the template untouched."""
    debug: bool = False
    timeouts: Dict[str, str] = Field(default_factory=dict)
    stats_user: str = ""
    stats_pass: str = ""
    extra_frontend: str = ""
    bind_ports: List[str] = Field(default_factory=list)
    users: List[Tuple[str, str]] = Field(default_factory=list)

    @field_validator('timeouts')
    @classmethod
    def validate_timeouts(cls, v: Dict[str, str]) -> Dict[str, str]:
        for name, value in v.items():
            if name not in TIMEOUT_ENV_VARS:
                raise ValueError(f"Unknown timeout '{name}', expected one of {list(TIMEOUT_ENV_VARS)}")
            if not str(value).isdigit():
                raise ValueError(f"Timeout {name} must be a whole number, got {value!r}")
        return {name: str(value) for name, value in v.items()}

    @field_validator('bind_ports')
    @classmethod
    def validate_bind_ports(cls, v: List[str]) -> List[str]:
        for port in v:
            if not str(port).isdigit():
                raise ValueError(f"Invalid bind port: {port!r}")
        return [str(port) for port in v]

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "CompilerOptions":
        """Read options from the process environment (or a given mapping).

        USERS is a comma-separated list of ``user:password`` pairs; entries
        without a colon are rejected.
        """
        env = os.environ if environ is None else environ

        timeouts = {}
        for name, var in TIMEOUT_ENV_VARS.items():
            value = env.get(var, "").strip()
            if value:
                timeouts[name] = value

        users = []
        for entry in _split_list(env.get("USERS")):
            user, sep, password = entry.partition(":")
            if not sep or not user:
                raise ValueError(f"USERS entry must look like user:password, got {entry!r}")
            users.append((user, password))

        return cls(
            debug=env.get("DEBUG", "").strip().lower() == "true",
            timeouts=timeouts,
            stats_user=env.get("STATS_USER", "").strip(),
            stats_pass=env.get("STATS_PASS", "").strip(),
            extra_frontend=env.get("EXTRA_FRONTEND", ""),
            bind_ports=_split_list(env.get("BIND_PORTS")),
            users=users,
        )
