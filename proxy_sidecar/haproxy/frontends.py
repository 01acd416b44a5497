"""Frontend text generated from registered services.

Every generated line starts with a newline so the body can be appended
directly to the template. tcp services get a frontend stanza of their own per
source port; http services contribute ACLs and ``use_backend`` rules to the
shared ``frontend services`` section.
"""

import logging
from typing import Iterable, List

from ..registry.models import Service, ServiceDest

logger = logging.getLogger(__name__)

DEFAULT_PATH_TYPE = "path_beg"
WILDCARD_MARKER = "*"
HTTP_SRC_PORT = 80

DUMMY_BACKEND = """    acl url_dummy path_beg /dummy
    use_backend dummy-be if url_dummy

backend dummy-be
    server dummy 1.1.1.1:1111 check"""


def render_frontends(services: Iterable[Service]) -> str:
    """Render the frontend body for services, in the order given."""
    parts = []
    for service in services:
        if service.req_mode == "tcp":
            parts.append(render_tcp_frontends(service))
        else:
            parts.append(render_http_rules(service))
    return "".join(parts)


def render_tcp_frontends(service: Service) -> str:
    """One ``frontend <name>_<src_port>`` stanza per destination with a source port."""
    stanzas = []
    for dest in service.service_dest:
        if not dest.src_port:
            continue
        stanzas.append(
            f"\n\nfrontend {service.service_name}_{dest.src_port}"
            f"\n    bind *:{dest.src_port}"
            f"\n    mode tcp"
            f"\n    default_backend {service.service_name}-be{dest.port}"
        )
    return "".join(stanzas)


def render_domain_acl(acl_name: str, domains: List[str]) -> str:
    """``hdr_dom`` for exact hosts, ``hdr_end`` once any host carries the wildcard marker."""
    match_func = "hdr_dom"
    if any(domain.startswith(WILDCARD_MARKER) for domain in domains):
        match_func = "hdr_end"
    hosts = " ".join(domain.strip(WILDCARD_MARKER) for domain in domains)
    return f"    acl domain_{acl_name} {match_func}(host) -i {hosts}"


def render_http_rules(service: Service) -> str:
    """ACLs are named after the service; backends after the acl_name (or the service)."""
    acl_name = service.service_name
    backend_name = service.effective_acl_name
    path_type = service.path_type or DEFAULT_PATH_TYPE
    lines = []

    for dest in service.service_dest:
        if dest.service_path:
            clauses = "".join(f" {path_type} {path}" for path in dest.service_path)
            lines.append(f"    acl url_{acl_name}{dest.port}{clauses}{dest.src_port_acl}")

    if service.service_domain:
        lines.append(render_domain_acl(acl_name, service.service_domain))

    if service.https_port:
        lines.append(f"    acl http_{acl_name} src_port {HTTP_SRC_PORT}")
        lines.append(f"    acl https_{acl_name} src_port {service.https_port}")

    for dest in service.service_dest:
        if service.https_port:
            lines.append(_use_backend(f"{backend_name}-be{dest.port}", service, dest, f"http_{acl_name}"))
            lines.append(_use_backend(f"https-{backend_name}-be{dest.port}", service, dest, f"https_{acl_name}"))
        else:
            lines.append(_use_backend(f"{backend_name}-be{dest.port}", service, dest))

    return "".join(f"\n{line}" for line in lines)


def _use_backend(backend: str, service: Service, dest: ServiceDest, protocol_acl: str = "") -> str:
    acl_name = service.service_name
    conditions = []
    if dest.service_path:
        conditions.append(f"url_{acl_name}{dest.port}")
    if service.service_domain:
        conditions.append(f"domain_{acl_name}")
    # src_port_acl_name is pre-rendered by the caller and carries its own spacing
    condition = " ".join(conditions) + dest.src_port_acl_name
    if protocol_acl:
        condition = f"{condition} {protocol_acl}"

    condition = condition.strip()
    if not condition:
        logger.debug(f"Service {service.service_name} destination {dest.port} has no conditions")
        return f"    use_backend {backend}"
    return f"    use_backend {backend} if {condition}"
