# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Outbound HTTP client for CachetHQ — base URL, auth header, timeouts and TLS trust.
"""

import ssl
from typing import Union

import httpx

from cachet_bridge.core.config import Settings
from cachet_bridge.core.logging import get_logger

logger = get_logger(__name__)


def build_verify(settings: Settings) -> Union[bool, ssl.SSLContext]:
    """Skip-verify wins; a configured root CA becomes the only trusted anchor."""
    if settings.CACHETHQ_SKIP_VERIFY_SSL:
        logger.warning("CachetHQ certificate verification is disabled")
        return False
    if settings.CACHETHQ_ROOT_CA:
        # Raises on a missing or unreadable file: startup must fail loudly.
        return ssl.create_default_context(cafile=settings.CACHETHQ_ROOT_CA)
    return True


def build_http_client(settings: Settings, transport: httpx.BaseTransport = None) -> httpx.Client:
    headers = {"Content-Type": "application/json", "Accept": "application/json"}
    if settings.CACHETHQ_TOKEN:
        headers["X-Cachet-Token"] = settings.CACHETHQ_TOKEN

    base_url = settings.CACHETHQ_URL
    if not base_url.endswith("/"):
        base_url += "/"

    return httpx.Client(
        base_url=base_url,
        headers=headers,
        timeout=httpx.Timeout(settings.CACHETHQ_TIMEOUT),
        verify=build_verify(settings),
        transport=transport,
    )
