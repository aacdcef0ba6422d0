# services/features.py
"""
Feature-flag gating.

Usage on a router:
    from services.features import require_feature

    router = APIRouter(dependencies=[Depends(require_feature("investment_tracking"))])

A disabled feature answers 404, as if the routes did not exist.
"""
from __future__ import annotations

from typing import Callable, Dict

from config.settings import get_settings
from utils.errors import NotFoundError


def feature_flags() -> Dict[str, bool]:
    return get_settings().features.as_dict()


def is_enabled(name: str) -> bool:
    flags = feature_flags()
    if name not in flags:
        raise KeyError(f"Unknown feature flag: {name}")
    return flags[name]


def require_feature(name: str) -> Callable[[], None]:
    def _dependency() -> None:
        if not is_enabled(name):
            raise NotFoundError("Not found")

    return _dependency
