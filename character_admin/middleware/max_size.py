from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse
from fastapi import Request

class MaxSizeMiddleware(BaseHTTPMiddleware):
    """Reject POST bodies whose declared Content-Length exceeds `max_bytes`."""

    def __init__(self, app, max_bytes: int):
        super().__init__(app)
        self.max_bytes = max_bytes

    async def dispatch(self, request: Request, call_next):
        if request.method == "POST":
            declared = request.headers.get("content-length")
            try:
                size = int(declared) if declared is not None else None
            except ValueError:
                size = None
            if size is not None and size > self.max_bytes:
                # must return a response; raising here bypasses the exception handlers
                return JSONResponse({"ok": False, "error": "payload too large"}, status_code=413)
        return await call_next(request)
