# type: ignore
# pyright: reportGeneralTypeIssues=false
# pyright: reportOptionalMemberAccess=false
"""
Prometheus → CachetHQ Bridge
============================
Receives Alertmanager webhook notifications and reflects each alert as an
incident lifecycle event on a CachetHQ status page: a firing alert opens an
incident, repeated firing refreshes its message, resolution fixes it.

Port: 8080 (HTTP_PORT)
"""
from contextlib import asynccontextmanager
from typing import List, Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from cachet_bridge.controllers import system_controller, webhook_controller
from cachet_bridge.core.config import Settings, load_settings
from cachet_bridge.core.dependencies import build_container
from cachet_bridge.core.logging import get_logger, setup_logging
from cachet_bridge.middleware import BearerTokenMiddleware, MetricsMiddleware, RequestIDMiddleware
from cachet_bridge.repositories import IdentityCache
from cachet_bridge.schemas import ErrorResponse

logger = get_logger(__name__)


def create_app(settings: Settings, transport: httpx.BaseTransport = None,
               cache: Optional[IdentityCache] = None) -> FastAPI:
    setup_logging(settings.LOG_LEVEL)
    container = build_container(settings, transport=transport, cache=cache)

    # ── Lifespan ──────────────────────────────────────────────────────────
    @asynccontextmanager
    async def lifespan(application: FastAPI):
        """Check CachetHQ reachability at startup; close the HTTP pool on shutdown."""
        if await run_in_threadpool(container.client.ping):
            logger.info("CachetHQ reachable at %s", settings.CACHETHQ_URL)
        else:
            logger.error("CachetHQ NOT reachable at %s, webhooks will fail until it is",
                         settings.CACHETHQ_URL)
        yield
        container.client.close()
        logger.info("CachetHQ client closed, shutting down")

    application = FastAPI(
        title="Prometheus CachetHQ Bridge",
        description="Reflects Alertmanager notifications as CachetHQ incidents.",
        version=Settings.SERVICE_VERSION,
        lifespan=lifespan,
        responses={
            500: {"model": ErrorResponse, "description": "Internal server error"},
        },
    )
    application.state.container = container
    application.state.settings = settings

    # Last added runs first: request id, then metrics, then auth.
    application.add_middleware(
        BearerTokenMiddleware,
        token=settings.PROMETHEUS_TOKEN,
        protected_paths=(Settings.WEBHOOK_PATH,),
    )
    application.add_middleware(MetricsMiddleware)
    application.add_middleware(RequestIDMiddleware)

    # ── Global exception handler ─────────────────────────────────────────
    @application.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        req_id = getattr(request.state, "request_id", None)
        logger.exception("Unhandled exception", extra={"request_id": req_id})
        return JSONResponse(
            status_code=500,
            content={"error": "internal_server_error", "detail": str(exc), "request_id": req_id},
        )

    application.include_router(system_controller.router)
    application.include_router(webhook_controller.router)
    return application


# ── Entrypoint ────────────────────────────────────────────────────────────
def run(argv: Optional[List[str]] = None) -> None:
    import uvicorn

    settings = load_settings(argv)
    application = create_app(settings)
    logger.info("Listening on :%d (tls=%s, auth=%s, label=%s, visible=%s)", settings.HTTP_PORT,
                settings.TLS_ENABLED, settings.AUTH_ENABLED, settings.LABEL_NAME,
                settings.CACHETHQ_VISIBLE)

    options = {
        "host": "0.0.0.0",
        "port": settings.HTTP_PORT,
        "log_level": settings.LOG_LEVEL.lower(),
        "timeout_keep_alive": Settings.KEEP_ALIVE_TIMEOUT_SECONDS,
        "h11_max_incomplete_event_size": 1 << 20,
    }
    if settings.TLS_ENABLED:
        options["ssl_certfile"] = settings.SSL_CERT_FILE
        options["ssl_keyfile"] = settings.SSL_KEY_FILE
    uvicorn.run(application, **options)


if __name__ == "__main__":
    run()
