"""
Same-origin (CSRF) check for the review write endpoints.

Browsers attach `Origin` (or at least `Referer`) to cross-site writes, so a
write is accepted when the claimed origin equals the origin this server is
reached under. Requests without either header come from non-browser clients
(CLI, scripts) and are allowed unless strict mode is on.

Proxy awareness: `X-Forwarded-Proto`/`X-Forwarded-Host` describe the public
origin only behind a trusted reverse proxy (DASHBOARD_TRUST_PROXY=true).
"""
from __future__ import annotations

from typing import NamedTuple, Optional
from urllib.parse import urlparse

from fastapi import Request

from .config import strict_csrf_enabled, trust_proxy_enabled

_DEFAULT_PORTS = {"http": 80, "https": 443}


class WebOrigin(NamedTuple):
    scheme: str
    host: str
    port: int


def origin_from_url(url: str) -> Optional[WebOrigin]:
    """Reduce a URL (or `scheme://host[:port]`) to its origin; None when malformed."""
    try:
        parts = urlparse(url.strip())
        port = parts.port
    except ValueError:
        return None
    scheme = (parts.scheme or "").lower()
    if scheme not in _DEFAULT_PORTS or not parts.hostname:
        return None
    return WebOrigin(scheme, parts.hostname.lower(), port if port is not None else _DEFAULT_PORTS[scheme])


def _first_forwarded(request: Request, name: str) -> str:
    return (request.headers.get(name) or "").split(",")[0].strip()


def server_origin(request: Request) -> Optional[WebOrigin]:
    """Origin the client used to reach us, honoring forwarded headers when trusted."""
    scheme = (request.url.scheme or "http").lower()
    netloc = request.url.netloc
    if trust_proxy_enabled():
        scheme = (_first_forwarded(request, "x-forwarded-proto") or scheme).lower()
        netloc = _first_forwarded(request, "x-forwarded-host") or request.headers.get("host") or netloc
    return origin_from_url(f"{scheme}://{netloc}")


def _claimed_origin_header(request: Request) -> Optional[str]:
    return request.headers.get("origin") or request.headers.get("referer")


def is_same_origin(request: Request) -> bool:
    """True when the Origin (else Referer) header matches the server origin.

    Without either header the request is treated as same-origin.
    """
    claimed = _claimed_origin_header(request)
    if not claimed:
        return True
    origin = origin_from_url(claimed)
    return origin is not None and origin == server_origin(request)


def csrf_violation(request: Request) -> bool:
    """Return True when a write request must be rejected with 403.

    In production or with STRICT_CSRF_REVIEWS=true the Origin/Referer header
    is mandatory.
    """
    if not _claimed_origin_header(request):
        return strict_csrf_enabled()
    return not is_same_origin(request)


__all__ = ["WebOrigin", "origin_from_url", "server_origin", "is_same_origin", "csrf_violation"]
