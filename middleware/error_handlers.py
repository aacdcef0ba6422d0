"""
Global exception handlers. Every error leaves the API as ``{"error": message}``.
"""
import logging
from typing import Any, Dict, List

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from config.settings import get_settings
from utils.errors import AppError, RateLimitError

logger = logging.getLogger(__name__)


def _validation_details(exc: RequestValidationError) -> List[Dict[str, str]]:
    details = []
    for err in exc.errors():
        # drop the "body"/"query" prefix; clients only care about the field
        loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path")]
        details.append({"field": ".".join(loc), "message": err.get("msg", "Invalid value")})
    return details


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(
            "app_error path=%s status=%s error=%s",
            request.url.path, exc.status_code, exc.message,
        )
    content: Dict[str, Any] = {"error": exc.message}
    if exc.details is not None:
        content["details"] = exc.details
    return JSONResponse(status_code=exc.status_code, content=content)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={"error": "Validation failed", "details": _validation_details(exc)},
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": message},
        headers=getattr(exc, "headers", None),
    )


def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    # slowapi's middleware calls this synchronously
    logger.warning("rate_limited path=%s limit=%s", request.url.path, exc.detail)
    err = RateLimitError()
    return JSONResponse(status_code=err.status_code, content={"error": err.message})


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_exception path=%s", request.url.path)
    content: Dict[str, Any] = {"error": "Internal server error"}
    if not get_settings().is_production:
        content["message"] = str(exc)
    return JSONResponse(status_code=500, content=content)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
