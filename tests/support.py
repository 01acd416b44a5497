"""Shared test data and doubles."""

from typing import List

from proxy_sidecar.haproxy.options import TIMEOUT_ENV_VARS

TEMPLATE_CONTENT = """global
    pidfile /var/run/haproxy.pid
    tune.ssl.default-dh-param 2048

defaults
    mode    http
    balance roundrobin

    option  dontlognull
    option  dontlog-normal
    option  http-server-close
    option  forwardfor
    option  redispatch

    errorfile 400 /errorfiles/400.http
    errorfile 403 /errorfiles/403.http
    errorfile 405 /errorfiles/405.http
    errorfile 408 /errorfiles/408.http
    errorfile 429 /errorfiles/429.http
    errorfile 500 /errorfiles/500.http
    errorfile 502 /errorfiles/502.http
    errorfile 503 /errorfiles/503.http
    errorfile 504 /errorfiles/504.http

    maxconn 5000
    timeout connect 5s
    timeout client  20s
    timeout server  20s
    timeout queue   30s
    timeout http-request 5s
    timeout http-keep-alive 15s

    stats enable
    stats refresh 30s
    stats realm Strictly\\ Private
    stats auth admin:admin
    stats uri /admin?stats

frontend services
    bind *:80
    bind *:443
    mode http
"""

FRAGMENTS = {
    "config1-fe.cfg": "config1 fe content",
    "config2-fe.cfg": "config2 fe content",
    "config1-be.cfg": "config1 be content",
    "config2-be.cfg": "config2 be content",
}

# What FRAGMENTS contribute after the template and frontend body
FRAGMENTS_CONTENT = """

config1 fe content

config2 fe content

config1 be content

config2 be content"""

DUMMY_CONTENT = """

    acl url_dummy path_beg /dummy
    use_backend dummy-be if url_dummy

backend dummy-be
    server dummy 1.1.1.1:1111 check"""

OPTION_ENV_VARS = list(TIMEOUT_ENV_VARS.values()) + [
    "DEBUG", "STATS_USER", "STATS_PASS", "EXTRA_FRONTEND", "BIND_PORTS", "USERS",
]


class RecordingRunner:
    """Command runner that records argument lists instead of executing them."""

    def __init__(self, error: Exception = None):
        self.calls: List[List[str]] = []
        self.error = error

    def __call__(self, args):
        self.calls.append(list(args))
        if self.error:
            raise self.error


def read_file(path: str) -> str:
    with open(path) as f:
        return f.read()
