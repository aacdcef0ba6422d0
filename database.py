import asyncio
import logging
import time
from typing import Any, Dict

from sqlalchemy import create_engine, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

from config.settings import get_settings
from utils.errors import DatabaseConnectionError

logger = logging.getLogger(__name__)

Base = declarative_base()


def validate_database_url(url: str, environment: str) -> None:
    """Warn on non-Neon URLs; refuse a production URL without sslmode=require."""
    if url.startswith("sqlite"):
        return
    if "neon.tech" not in url:
        logger.warning("DATABASE_URL does not appear to be a Neon database URL")
    if environment == "production" and "sslmode=require" not in url:
        raise DatabaseConnectionError(
            "SSL mode is required for Neon database connections in production"
        )


def _build_engine():
    settings = get_settings()
    cfg = settings.db_config
    validate_database_url(cfg.url, settings.environment)

    if cfg.is_sqlite:
        # One shared connection so in-memory databases survive across sessions/threads.
        engine = create_engine(
            cfg.url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        logger.info("DB engine configured for SQLite")
        return engine

    # ─── Connection-pool tuning ────────────────────────────────────
    # Neon closes idle connections, so recycle well before that and
    # pre-ping on checkout.
    engine = create_engine(
        cfg.url,
        pool_size=cfg.pool_size,
        max_overflow=cfg.max_overflow,
        pool_timeout=cfg.pool_timeout,
        pool_recycle=cfg.pool_recycle,
        pool_pre_ping=True,
    )
    logger.info(
        "DB pool configured: size=%d, max_overflow=%d, recycle=%ds, pre_ping=True",
        cfg.pool_size, cfg.max_overflow, cfg.pool_recycle,
    )
    return engine


engine = _build_engine()

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def check_database_health() -> Dict[str, Any]:
    """Run SELECT 1 and report latency. Never raises."""
    start = time.perf_counter()
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        logger.error("Database health check failed: %s", exc.__class__.__name__)
        return {"connected": False, "error": str(exc.__class__.__name__)}
    latency_ms = round((time.perf_counter() - start) * 1000, 1)
    return {"connected": True, "latency_ms": latency_ms}


async def connect_with_retry(max_retries: int = 3, retry_delay: float = 1.0) -> bool:
    """Probe the database with exponential backoff. Returns True once connected."""
    delay = retry_delay
    for attempt in range(1, max_retries + 1):
        health = await asyncio.to_thread(check_database_health)
        if health["connected"]:
            logger.info("Database connected on attempt %d", attempt)
            return True
        logger.warning("Database connection attempt %d failed", attempt)
        if attempt < max_retries:
            logger.info("Retrying database connection in %.1fs", delay)
            await asyncio.sleep(delay)
            delay *= 2

    logger.error("Failed to connect to database after %d attempts", max_retries)
    return False
