# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Controller: System endpoints — health, readiness, metrics.
Pure HTTP layer — no business logic.
"""

from fastapi import APIRouter, Depends, HTTPException
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.concurrency import run_in_threadpool
from starlette.responses import Response

from cachet_bridge.core.config import Settings
from cachet_bridge.core.dependencies import get_cachet_client

router = APIRouter(tags=["System"])


@router.get("/health")
def health_check():
    """Shallow health check — confirms the process is alive."""
    return {"status": "ok", "service": Settings.SERVICE_NAME}


@router.get("/health/ready")
async def readiness_check(client=Depends(get_cachet_client)):
    """Deep health check — confirms CachetHQ answers its ping endpoint."""
    if not await run_in_threadpool(client.ping):
        raise HTTPException(status_code=503, detail="CachetHQ unavailable")
    return {"status": "ok", "cachethq": "reachable"}


@router.get("/metrics")
def prometheus_metrics():
    """Expose Prometheus metrics in OpenMetrics format."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
