# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Controller: Alertmanager webhook.
Thin HTTP layer — delegates ALL logic to the Synchronizer.
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from cachet_bridge.core.dependencies import get_synchronizer
from cachet_bridge.core.errors import MalformedPayload
from cachet_bridge.core.logging import get_logger
from cachet_bridge.metrics import MALFORMED_PAYLOADS
from cachet_bridge.schemas import ErrorResponse, SyncResponse
from cachet_bridge.services.synchronizer import Synchronizer

logger = get_logger(__name__)

router = APIRouter(prefix="/api/v1", tags=["Alerts"])


@router.post("/alerts/webhook", response_model=SyncResponse,
             summary="Receive an Alertmanager webhook batch",
             responses={
                 400: {"model": ErrorResponse, "description": "Body is not an alert batch"},
                 401: {"model": ErrorResponse, "description": "Missing or invalid bearer token"},
                 422: {"model": SyncResponse, "description": "Some alerts could not be decoded"},
                 502: {"model": SyncResponse, "description": "CachetHQ did not confirm some transitions"},
             })
async def alertmanager_webhook(
    request: Request,
    service: Synchronizer = Depends(get_synchronizer),
):
    """Reflect every alert of the batch onto CachetHQ; 2xx only when all succeeded."""
    body = await request.body()
    try:
        # Sync httpx calls and blocking identity locks stay off the event loop.
        result = await run_in_threadpool(service.synchronize, body)
    except MalformedPayload as exc:
        MALFORMED_PAYLOADS.inc()
        logger.warning("Malformed webhook payload: %s", exc)
        return JSONResponse(
            status_code=400,
            content=ErrorResponse(
                error=exc.kind, detail=str(exc),
                request_id=getattr(request.state, "request_id", None),
            ).model_dump(),
        )

    response = SyncResponse.from_result(result)
    if result.ok:
        status_code = 200
    elif result.has_remote_failures:
        # 5xx makes Alertmanager re-deliver; the failed transitions left the cache untouched.
        status_code = 502
    else:
        status_code = 422
    return JSONResponse(status_code=status_code, content=response.model_dump(mode="json"))
