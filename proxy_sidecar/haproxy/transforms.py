"""Line-oriented rewrites of the base HAProxy template.

Each function takes the template text and returns the rewritten text; none of
them touch the filesystem. ``apply_template_options`` runs them in a fixed
order: debug, timeouts, stats auth, bind ports, user list, certificates,
extra frontend. The extra frontend text is appended last and never rewritten.
"""

import logging
import re
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from ..shared.python_logger_config import TRACE
from .options import CompilerOptions

logger = logging.getLogger(__name__)

SERVICES_FRONTEND = "frontend services"
USERLIST_NAME = "defaultUsers"
HTTPS_BIND_PORT = "443"

_DH_PARAM_LINE = re.compile(r"^([ \t]*)(tune\.ssl\.default-dh-param\b[^\n]*)$", re.MULTILINE)
_QUIET_LOG_OPTIONS = re.compile(r"^[ \t]*option[ \t]+(?:dontlognull|dontlog-normal)[ \t]*(?:\n|$)", re.MULTILINE)
_STATS_AUTH = re.compile(r"^([ \t]*stats[ \t]+auth[ \t]+)([^:\s]*):(\S*)", re.MULTILINE)
_HTTPS_BIND = re.compile(r"^([ \t]*bind[ \t]+\*:" + HTTPS_BIND_PORT + r")[ \t]*$", re.MULTILINE)
_SERVICES_HEADER = re.compile(r"^" + re.escape(SERVICES_FRONTEND) + r"[ \t]*$", re.MULTILINE)


def apply_debug(template: str) -> str:
    """Turn on the debug directive and drop the options that hide quiet requests."""
    template = _DH_PARAM_LINE.sub(r"\1\2\n\1debug", template, count=1)
    return _QUIET_LOG_OPTIONS.sub("", template)


def apply_timeouts(template: str, timeouts: Dict[str, str]) -> str:
    """Replace the numeric value of each overridden timeout.

    The spacing between the timeout name and its value and the unit suffix
    are kept, so ``timeout client  20s`` becomes ``timeout client  999s``.
    """
    for name, value in timeouts.items():
        pattern = re.compile(
            r"^([ \t]*timeout[ \t]+" + re.escape(name) + r"[ \t]+)\d+",
            re.MULTILINE,
        )
        template, count = pattern.subn(lambda m: m.group(1) + value, template)
        if not count:
            logger.warning(f"Template has no 'timeout {name}' line, override ignored")
    return template


def apply_stats_auth(template: str, user: str = "", password: str = "") -> str:
    """Replace the user and/or password half of ``stats auth user:pass``."""
    if not user and not password:
        return template

    def replace(match):
        return f"{match.group(1)}{user or match.group(2)}:{password or match.group(3)}"

    return _STATS_AUTH.sub(replace, template)


def apply_bind_ports(template: str, ports: Sequence[str]) -> str:
    """Add a ``bind *:<port>`` line per port after the services frontend's own binds.

    Without a services frontend the lines are appended to the end of the
    template.
    """
    if not ports:
        return template

    lines = template.split("\n")
    insert_at, indent = _find_bind_insert_point(lines)
    new_lines = [f"{indent}bind *:{port}" for port in ports]

    if insert_at is None:
        logger.warning(f"Template has no '{SERVICES_FRONTEND}' section, appending bind lines")
        return template + "\n" + "\n".join(new_lines)

    return "\n".join(lines[:insert_at] + new_lines + lines[insert_at:])


def _find_bind_insert_point(lines: List[str]) -> Tuple[Optional[int], str]:
    header = None
    for i, line in enumerate(lines):
        if line.rstrip() == SERVICES_FRONTEND:
            header = i
            break
    if header is None:
        return None, "    "

    insert_at = header + 1
    indent = "    "
    for i in range(header + 1, len(lines)):
        line = lines[i]
        # Next section starts at the first non-indented, non-empty line
        if line and not line[0].isspace():
            break
        if line.strip().startswith("bind "):
            insert_at = i + 1
            indent = line[:len(line) - len(line.lstrip())]
    return insert_at, indent


def render_userlist(users: Iterable[Tuple[str, str]]) -> str:
    """Render the named user list block, followed by a blank line."""
    lines = [f"userlist {USERLIST_NAME}"]
    for user, password in users:
        lines.append(f"    user {user} insecure-password {password}")
    return "\n".join(lines) + "\n\n"


def apply_userlist(template: str, users: Sequence[Tuple[str, str]]) -> str:
    """Insert the user list block right before the services frontend."""
    if not users:
        return template

    block = render_userlist(users)
    template, count = _SERVICES_HEADER.subn(lambda m: block + m.group(0), template, count=1)
    if not count:
        logger.warning(f"Template has no '{SERVICES_FRONTEND}' section, user list not added")
    return template


def apply_certs(template: str, cert_paths: Sequence[str]) -> str:
    """Attach every certificate to the HTTPS bind line.

    ``bind *:443`` becomes ``bind *:443 ssl crt <first> crt <second> ...``.
    With no certificates the line is left as it is.
    """
    if not cert_paths:
        return template

    clause = " ssl" + "".join(f" crt {path}" for path in cert_paths)
    template, count = _HTTPS_BIND.subn(lambda m: m.group(1) + clause, template)
    if not count:
        logger.warning(f"Template has no 'bind *:{HTTPS_BIND_PORT}' line, certificates not attached")
    return template


def apply_extra_frontend(template: str, extra: str) -> str:
    """Append the raw extra frontend text to the template."""
    return template + extra if extra else template


def apply_template_options(template: str, options: CompilerOptions, cert_paths: Sequence[str] = ()) -> str:
    """Run every template rewrite in order."""
    if options.debug:
        template = apply_debug(template)
        logger.log(TRACE, "Debug directive enabled")
    template = apply_timeouts(template, options.timeouts)
    template = apply_stats_auth(template, options.stats_user, options.stats_pass)
    template = apply_bind_ports(template, options.bind_ports)
    template = apply_userlist(template, options.users)
    template = apply_certs(template, cert_paths)
    return apply_extra_frontend(template, options.extra_frontend)
