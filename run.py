#!/usr/bin/env python3
"""CLI entry point for the proxy sidecar.

Starts the control plane API; the proxy itself is started or reloaded on the
first registry change (or at startup with RELOAD_ON_START=true).

For ASGI deployment, use proxy_sidecar.app:create_app instead.
"""

from proxy_sidecar.main import main

if __name__ == "__main__":
    main()
