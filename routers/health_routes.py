# routers/health_routes.py
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from middleware.rate_limit import limiter
from services.features import feature_flags
from services.health_service import run_health_checks

router = APIRouter()


@router.get("/health")
@limiter.exempt
async def health(request: Request):
    body, status_code = await run_health_checks()
    return JSONResponse(status_code=status_code, content=body)


@router.get("/features")
@limiter.exempt
async def features(request: Request):
    return feature_flags()
