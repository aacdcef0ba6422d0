"""
Environment report.

    python -m config.validate_env

Logs one line per checked item and exits with status 1 when a required item
is not valid.
"""
from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from typing import Literal

from config.logging_config import configure_logging
from config.settings import EnvSettings, get_settings

logger = logging.getLogger(__name__)

Status = Literal["valid", "missing", "invalid"]


@dataclass(frozen=True)
class ValidationResult:
    category: str
    status: Status
    message: str
    required: bool


def _check(category: str, ok: bool, valid_msg: str, missing_msg: str, required: bool) -> ValidationResult:
    return ValidationResult(
        category=category,
        status="valid" if ok else "missing",
        message=valid_msg if ok else missing_msg,
        required=required,
    )


def validate_environment(settings: EnvSettings) -> list[ValidationResult]:
    results: list[ValidationResult] = []
    generated = set(settings.generated_fallbacks)

    if "AUTH_SECRET" in generated:
        results.append(
            ValidationResult(
                category="Authentication",
                status="invalid" if settings.is_production else "missing",
                message="AUTH_SECRET is not set; a generated secret is in use",
                required=True,
            )
        )
    else:
        results.append(ValidationResult("Authentication", "valid", "Auth secret configured", True))

    if "DATABASE_URL" in generated:
        results.append(
            ValidationResult("Database", "missing", "DATABASE_URL is required", True)
        )
    else:
        results.append(ValidationResult("Database", "valid", "Database URL configured", True))

    results.append(
        _check(
            "App URL",
            bool(settings.app_url),
            f"App URL: {settings.app_url}",
            "APP_URL recommended for production",
            False,
        )
    )

    stack = settings.stack_auth_config
    results.append(
        _check(
            "Stack Auth",
            bool(stack.project_id),
            f"Stack Auth project id: {stack.project_id}",
            "STACK_PROJECT_ID not set (hosted auth disabled)",
            False,
        )
    )
    results.append(
        _check(
            "Stack Auth",
            bool(stack.publishable_client_key),
            "Stack Auth publishable client key configured",
            "STACK_PUBLISHABLE_CLIENT_KEY not set",
            False,
        )
    )
    results.append(
        _check(
            "Stack Auth",
            bool(stack.secret_server_key),
            "Stack Auth secret server key configured",
            "STACK_SECRET_SERVER_KEY not set",
            False,
        )
    )

    results.append(
        _check("Redis", bool(settings.redis_url), "Redis configured", "Redis not configured (optional)", False)
    )
    results.append(
        _check(
            "Email",
            settings.email_config.configured,
            "Email service configured",
            "Email service not configured (optional)",
            False,
        )
    )
    results.append(
        _check(
            "Storage",
            settings.storage_config.configured,
            f"File storage configured (max upload {settings.file_config.max_size} bytes)",
            "File storage not configured (optional)",
            False,
        )
    )
    results.append(
        _check(
            "OAuth",
            bool(settings.google_client_id and settings.google_client_secret),
            "Google OAuth configured",
            "Google OAuth not configured (optional)",
            False,
        )
    )

    for name, enabled in settings.features.as_dict().items():
        results.append(
            ValidationResult(
                category="Features",
                status="valid",
                message=f"{name}: {'enabled' if enabled else 'disabled'}",
                required=False,
            )
        )

    return results


def main() -> int:
    configure_logging()
    results = validate_environment(get_settings())

    failed = 0
    for r in results:
        line = "[%s] %s: %s"
        if r.status == "valid":
            logger.info(line, r.status.upper(), r.category, r.message)
        elif r.required:
            failed += 1
            logger.error(line, r.status.upper(), r.category, r.message)
        else:
            logger.warning(line, r.status.upper(), r.category, r.message)

    if failed:
        logger.error("Environment validation failed: %d required item(s) not valid", failed)
        return 1
    logger.info("Environment validation passed")
    return 0


if __name__ == "__main__":
    sys.exit(main())
