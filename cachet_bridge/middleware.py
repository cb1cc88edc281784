# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
HTTP Middleware — request ID propagation, Prometheus metrics and webhook bearer auth.
"""

import hmac
import time
import uuid

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from cachet_bridge.metrics import REQUEST_COUNT, REQUEST_LATENCY, HTTP_ERRORS

SKIP_PATHS: tuple[str, ...] = (
    "/health", "/health/ready", "/metrics", "/openapi.json", "/docs", "/redoc",
)


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Propagate or generate X-Request-ID for distributed tracing."""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
        request.state.request_id = request_id
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response


class MetricsMiddleware(BaseHTTPMiddleware):
    """Track request count, latency, and error rate via Prometheus."""

    async def dispatch(self, request: Request, call_next):
        start = time.time()
        response = await call_next(request)
        duration = time.time() - start

        path = request.url.path
        if path not in SKIP_PATHS:
            REQUEST_COUNT.labels(
                method=request.method,
                endpoint=path,
                status=str(response.status_code),
            ).inc()
            REQUEST_LATENCY.labels(
                method=request.method,
                endpoint=path,
            ).observe(duration)
            if response.status_code >= 400:
                HTTP_ERRORS.labels(
                    method=request.method,
                    endpoint=path,
                    status=str(response.status_code),
                ).inc()

        return response


class BearerTokenMiddleware(BaseHTTPMiddleware):
    """Reject webhook calls without the shared Prometheus token. No token configured = open."""

    def __init__(self, app, token: str, protected_paths: tuple[str, ...]):
        super().__init__(app)
        self._token = token
        self._protected = protected_paths

    async def dispatch(self, request: Request, call_next):
        if not self._token or request.url.path not in self._protected:
            return await call_next(request)

        header = request.headers.get("Authorization", "")
        scheme, _, supplied = header.partition(" ")
        if scheme.lower() != "bearer" or not hmac.compare_digest(
            supplied.strip().encode(), self._token.encode()
        ):
            return Response(
                content='{"error":"unauthorized","detail":"Missing or invalid bearer token."}',
                status_code=401, media_type="application/json",
                headers={"WWW-Authenticate": "Bearer"},
            )
        return await call_next(request)
