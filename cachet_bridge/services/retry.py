# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Retry decorator around the CachetHQ adapter — exponential backoff on retryable failures."""
import time
from typing import Optional

from cachet_bridge.core.errors import RemoteSyncFailure
from cachet_bridge.core.logging import get_logger
from cachet_bridge.metrics import CACHET_RETRIES
from cachet_bridge.models.domain import AlertEvent, TransitionDecision
from cachet_bridge.services.cachet_client import CachetClient

logger = get_logger(__name__)


class RetryingCachetClient:
    """Wraps CachetClient.apply; the adapter itself stays single-attempt."""

    def __init__(self, client: CachetClient, max_attempts: int, backoff_base: float = 0.3,
                 sleep=time.sleep):
        self._client = client
        self._max_attempts = 1 + max(0, max_attempts)
        self._backoff_base = backoff_base
        self._sleep = sleep

    def apply(self, decision: TransitionDecision, event: AlertEvent) -> Optional[str]:
        for attempt in range(1, self._max_attempts + 1):
            try:
                return self._client.apply(decision, event)
            except RemoteSyncFailure as exc:
                if not exc.retryable or attempt >= self._max_attempts:
                    raise
                CACHET_RETRIES.labels(action=decision.value, attempt=str(attempt)).inc()
                delay = self._backoff_base * (2 ** (attempt - 1))
                logger.warning("Retrying %s for %s in %.2fs (attempt %d/%d): %s",
                               decision.value, event.identity, delay, attempt,
                               self._max_attempts, exc.detail)
                self._sleep(delay)

    def ping(self) -> bool:
        return self._client.ping()

    def close(self) -> None:
        self._client.close()
