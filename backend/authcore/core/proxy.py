"""WSGI proxy middleware configuration helper."""

from __future__ import annotations

from flask import Flask
from werkzeug.middleware.proxy_fix import ProxyFix


def init_app(app: Flask) -> None:
    """Trust ``X-Forwarded-*`` headers from the configured number of proxies.

    ``Secure`` cookies and the per-IP rate limiter both depend on the scheme and
    client address seen by Flask, so behind a load balancer the hop count must
    match the deployment. Controlled by ``USE_PROXYFIX`` (default ``True``) and
    ``PROXY_HOPS`` (default ``1``).
    """
    if not app.config.get("USE_PROXYFIX", True):
        return
    hops = int(app.config.get("PROXY_HOPS", 1))
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=hops, x_proto=hops, x_host=hops, x_prefix=hops)
