"""Client address middleware.

Resolves the caller address used to key the search rate limits and
stores it in request state as `client_address`. Proxy headers are tried
in order (cf-connecting-ip, x-real-ip, first x-forwarded-for entry),
then the socket peer. Every candidate is sanitized (address characters
only, capped length) so a forged header cannot inject into the gate key.
Uses raw ASGI (no BaseHTTPMiddleware) for streaming-safe responses.
"""

from typing import Callable

from slowapi.util import get_remote_address
from starlette.requests import Request

from marketsearch.core.limiter import UNKNOWN_CALLER
from marketsearch.shared.utils.sanitization import InputSanitizer

PROXY_ADDRESS_HEADERS = ("cf-connecting-ip", "x-real-ip", "x-forwarded-for")


def _get_header(scope: dict, name: str) -> str | None:
    """Return first header value for name (case-insensitive). Headers are (bytes, bytes)."""
    want = name.lower().encode()
    for k, v in scope.get("headers", []):
        if k.lower() == want:
            return v.decode("latin-1")
    return None


def resolve_client_address(scope: dict) -> str:
    """Best sanitized caller address for scope, or 'unknown'."""
    for header in PROXY_ADDRESS_HEADERS:
        raw = _get_header(scope, header)
        if raw is None:
            continue
        if header == "x-forwarded-for":
            raw = raw.split(",", 1)[0]
        address = InputSanitizer.sanitize_client_address(raw)
        if address:
            return address
    peer = InputSanitizer.sanitize_client_address(get_remote_address(Request(scope)))
    return peer or UNKNOWN_CALLER


def ClientAddressMiddleware(app: Callable) -> Callable:
    """Set scope['state']['client_address'] on each HTTP request. Raw ASGI."""

    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] == "http":
            scope.setdefault("state", {})["client_address"] = resolve_client_address(scope)
        await app(scope, receive, send)

    return asgi_app
