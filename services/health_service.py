# services/health_service.py
"""
Dependency probes behind GET /api/health.

Each probe returns ``{"status": "healthy" | "unhealthy" | "not_configured", ...}``.
database and auth are required; email and storage only count against overall
health when they are configured and failing.
"""
from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Tuple

from config.settings import get_settings
from database import check_database_health
from services import stack_auth

logger = logging.getLogger(__name__)

HEALTHY = "healthy"
UNHEALTHY = "unhealthy"
NOT_CONFIGURED = "not_configured"

REQUIRED_PROBES = ("database", "auth")


async def probe_database() -> Dict[str, Any]:
    result = await asyncio.to_thread(check_database_health)
    status = HEALTHY if result.get("connected") else UNHEALTHY
    return {"status": status, **result}


async def probe_auth() -> Dict[str, Any]:
    settings = get_settings()
    out: Dict[str, Any] = {"credentials": True}

    if settings.is_production and "AUTH_SECRET" in settings.generated_fallbacks:
        out["credentials"] = False
        out["error"] = "AUTH_SECRET is not set"

    if stack_auth.is_configured():
        stack = await stack_auth.check_stack_auth_health()
        out["stack_auth"] = stack
        if not stack.get("can_authenticate"):
            out["status"] = UNHEALTHY
            return out

    out["status"] = HEALTHY if out["credentials"] else UNHEALTHY
    return out


async def probe_email() -> Dict[str, Any]:
    cfg = get_settings().email_config
    if not cfg.configured:
        return {"status": NOT_CONFIGURED}
    return {"status": HEALTHY, "host": cfg.host}


async def probe_storage() -> Dict[str, Any]:
    cfg = get_settings().storage_config
    if cfg.s3_configured:
        return {"status": HEALTHY, "provider": "s3"}
    if cfg.uploadthing_configured:
        return {"status": HEALTHY, "provider": "uploadthing"}
    return {"status": NOT_CONFIGURED}


def overall_status(checks: Dict[str, Dict[str, Any]]) -> str:
    for name, check in checks.items():
        status = check.get("status")
        if name in REQUIRED_PROBES and status != HEALTHY:
            return "degraded"
        if status == UNHEALTHY:
            return "degraded"
    return HEALTHY


async def run_health_checks() -> Tuple[Dict[str, Any], int]:
    """Run every probe concurrently; returns (body, http_status)."""
    settings = get_settings()
    timestamp = datetime.now(timezone.utc).isoformat()
    try:
        database, auth, email, storage = await asyncio.gather(
            probe_database(), probe_auth(), probe_email(), probe_storage()
        )
        checks = {"database": database, "auth": auth, "email": email, "storage": storage}
        status = overall_status(checks)
    except Exception as exc:
        logger.exception("health_check_failed")
        return {"status": "error", "error": str(exc), "timestamp": timestamp}, 500

    body = {
        "status": status,
        "timestamp": timestamp,
        "version": settings.app_version,
        "environment": settings.environment,
        "checks": checks,
        "features": settings.features.as_dict(),
    }
    if status != HEALTHY:
        logger.warning("health_degraded", extra={"meta": {k: v["status"] for k, v in checks.items()}})
    return body, 200 if status == HEALTHY else 503
