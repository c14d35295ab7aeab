# character_admin/middleware/api_key.py
from __future__ import annotations

import logging
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from ..settings import settings

log = logging.getLogger(__name__)

# Read-only routes that work without a key (health probe, images, the admin UI shell)
EXEMPT_PATH_PREFIXES: tuple[str, ...] = (
    "/health",
    "/images/",
    "/docs",
    "/redoc",
    "/openapi.json",
    "/favicon.ico",
)

def _is_exempt(path: str) -> bool:
    if not path.startswith("/api/") and path != "/metrics":
        return True
    return any(path.startswith(p) for p in EXEMPT_PATH_PREFIXES)

class APIKeyMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        if _is_exempt(request.url.path):
            return await call_next(request)

        # Local single-operator setup: no key configured means open access
        api_key = settings.api_key
        if not api_key:
            log.debug("API key not configured; allowing request to %s", request.url.path)
            return await call_next(request)

        provided = request.headers.get("x-api-key")
        if provided != api_key:
            return JSONResponse(status_code=401, content={"ok": False, "error": "Invalid or missing API key"})

        return await call_next(request)
