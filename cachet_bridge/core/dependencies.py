# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
FastAPI dependency injection — wire the cache, adapter and synchronizer.
"""

from typing import NamedTuple

import httpx
from fastapi import Request

from cachet_bridge.core.config import Settings
from cachet_bridge.core.http_client import build_http_client
from cachet_bridge.repositories import IdentityCache
from cachet_bridge.services.alert_parser import AlertParser
from cachet_bridge.services.cachet_client import CachetClient
from cachet_bridge.services.component_resolver import ComponentResolver
from cachet_bridge.services.retry import RetryingCachetClient
from cachet_bridge.services.synchronizer import Synchronizer


class Container(NamedTuple):
    cache: IdentityCache
    client: object
    synchronizer: Synchronizer


def build_container(settings: Settings, transport: httpx.BaseTransport = None,
                    cache: IdentityCache = None) -> Container:
    """One process-wide cache, shared by every request the app serves."""
    cache = cache if cache is not None else IdentityCache()
    client = CachetClient(
        build_http_client(settings, transport=transport),
        cache,
        visible=settings.CACHETHQ_VISIBLE,
    )
    if settings.CACHETHQ_RETRY_ATTEMPTS > 0:
        client = RetryingCachetClient(
            client, settings.CACHETHQ_RETRY_ATTEMPTS, settings.CACHETHQ_RETRY_BACKOFF
        )
    synchronizer = Synchronizer(
        parser=AlertParser(settings.LABEL_NAME),
        resolver=ComponentResolver(cache),
        client=client,
        cache=cache,
    )
    return Container(cache=cache, client=client, synchronizer=synchronizer)


# ── FastAPI dependency functions ──
def get_synchronizer(request: Request) -> Synchronizer:
    return request.app.state.container.synchronizer


def get_cachet_client(request: Request):
    return request.app.state.container.client
