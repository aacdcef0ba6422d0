"""
Maintenance mode: while MAINTENANCE_MODE is on every route except the
health and feature probes answers 503.
"""
import logging

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from config.settings import get_settings

logger = logging.getLogger(__name__)

ALWAYS_OPEN = ("/api/health", "/api/features")


class MaintenanceModeMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        path = request.scope.get("path", "")
        if get_settings().features.maintenance_mode and path not in ALWAYS_OPEN:
            # CORS preflight still has to succeed for the client to read the 503
            if request.method != "OPTIONS":
                return JSONResponse(status_code=503, content={"error": "Service is under maintenance"})
        return await call_next(request)
