# main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi.middleware import SlowAPIMiddleware

from config.logging_config import configure_logging
from config.settings import get_settings
from config.validate_env import validate_environment

configure_logging()

from database import Base, connect_with_retry, engine
import models  # this triggers models/__init__.py which imports all tables
from middleware.error_handlers import register_exception_handlers
from middleware.maintenance import MaintenanceModeMiddleware
from middleware.rate_limit import limiter
from middleware.request_logging import RequestLoggingMiddleware
from routers.auth_routes import router as auth_router
from routers.health_routes import router as health_router
from routers.market_routes import router as market_router
from routers.notification_routes import router as notification_router
from routers.portfolio_routes import router as portfolio_router
from routers.post_routes import router as post_router
from routers.user_routes import router as user_router

logger = logging.getLogger(__name__)

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    for result in validate_environment(settings):
        if result.status != "valid" and result.required:
            logger.warning("env %s: %s", result.category, result.message)
    if not await connect_with_retry():
        logger.error("Starting without a reachable database")
    logger.info("%s started (env=%s, version=%s)", settings.app_name, settings.environment, settings.app_version)
    yield


app = FastAPI(title=settings.app_name, version=settings.app_version, lifespan=lifespan)
app.state.limiter = limiter

register_exception_handlers(app)

# Last added runs first: logging wraps CORS, CORS wraps maintenance and rate limiting
app.add_middleware(SlowAPIMiddleware)
app.add_middleware(MaintenanceModeMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials="*" not in settings.cors_origins,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)
app.add_middleware(RequestLoggingMiddleware)

# Include routers
app.include_router(health_router, prefix="/api", tags=["health"])
app.include_router(auth_router, prefix="/api", tags=["auth"])
app.include_router(user_router, prefix="/api", tags=["users"])
app.include_router(post_router, prefix="/api", tags=["posts"])
app.include_router(portfolio_router, prefix="/api", tags=["portfolios"])
app.include_router(market_router, prefix="/api", tags=["market"])
app.include_router(notification_router, prefix="/api", tags=["notifications"])

# db startup
Base.metadata.create_all(bind=engine)
