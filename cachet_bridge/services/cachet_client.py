# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
CachetHQ client adapter — executes one transition as a single attempt.

Failures come back as RemoteSyncFailure and leave the identity cache untouched,
so the next delivery of the same alert state re-attempts the same decision.
"""

import time
from typing import Any, Dict, Optional

import httpx

from cachet_bridge.core.errors import RemoteSyncFailure
from cachet_bridge.core.logging import get_logger
from cachet_bridge.metrics import CACHET_REQUEST_LATENCY
from cachet_bridge.models.domain import AlertEvent, TransitionDecision
from cachet_bridge.repositories import IdentityCache

logger = get_logger(__name__)

# CachetHQ incident statuses (API v1)
INCIDENT_INVESTIGATING = 1
INCIDENT_FIXED = 4

INCIDENTS_PATH = "api/v1/incidents"
PING_PATH = "api/v1/ping"

_RETRYABLE_STATUSES = {429, 500, 502, 503, 504}


class CachetClient:
    """Talks to CachetHQ over an injected httpx.Client (TLS and auth set up by the caller)."""

    def __init__(self, http_client: httpx.Client, cache: IdentityCache, visible: bool = False):
        self._http = http_client
        self._cache = cache
        self._visible = visible

    def apply(self, decision: TransitionDecision, event: AlertEvent) -> Optional[str]:
        """Realise `decision` for `event`; returns the incident id involved, if any."""
        if decision == TransitionDecision.NOOP:
            logger.debug("No open incident for %s, nothing to resolve", event.identity)
            return None

        if decision == TransitionDecision.CREATE_INCIDENT:
            incident_id = self.create_incident(event)
            self._cache.attach(event.identity, incident_id)
            return incident_id

        entry = self._cache.get(event.identity)
        if entry is None or entry.incident_ref is None:
            raise RemoteSyncFailure(event.identity, decision.value, "no cached incident reference")
        incident_id = entry.incident_ref

        if decision == TransitionDecision.UPDATE_INCIDENT:
            self.update_incident(incident_id, event)
        elif decision == TransitionDecision.RESOLVE_INCIDENT:
            self.resolve_incident(incident_id, event)
            self._cache.clear(event.identity)
        return incident_id

    def create_incident(self, event: AlertEvent) -> str:
        action = TransitionDecision.CREATE_INCIDENT.value
        data = self._send("POST", INCIDENTS_PATH, action, event.identity, {
            "name": event.identity,
            "message": event.summary,
            "status": INCIDENT_INVESTIGATING,
            "visible": 1 if self._visible else 0,
        })
        body = data.get("data") if isinstance(data, dict) else None
        incident_id = body.get("id") if isinstance(body, dict) else None
        if incident_id is None:
            raise RemoteSyncFailure(event.identity, action, "response carried no incident id")
        logger.info("Incident created identity=%s incident_id=%s", event.identity, incident_id)
        return str(incident_id)

    def update_incident(self, incident_id: str, event: AlertEvent) -> None:
        # Message refresh only: visibility stays as set at creation.
        self._send("PUT", f"{INCIDENTS_PATH}/{incident_id}",
                   TransitionDecision.UPDATE_INCIDENT.value, event.identity,
                   {"message": event.summary})
        logger.info("Incident updated identity=%s incident_id=%s", event.identity, incident_id)

    def resolve_incident(self, incident_id: str, event: AlertEvent) -> None:
        self._send("PUT", f"{INCIDENTS_PATH}/{incident_id}",
                   TransitionDecision.RESOLVE_INCIDENT.value, event.identity,
                   {"status": INCIDENT_FIXED, "message": event.summary})
        logger.info("Incident resolved identity=%s incident_id=%s", event.identity, incident_id)

    def ping(self) -> bool:
        """Readiness probe — True when CachetHQ answers its ping endpoint."""
        try:
            resp = self._http.get(PING_PATH)
        except httpx.HTTPError as exc:
            logger.warning("CachetHQ unreachable (ping): %s", exc)
            return False
        return resp.is_success

    def close(self) -> None:
        self._http.close()

    def _send(self, method: str, path: str, action: str, identity: str,
              payload: Dict[str, Any]) -> Any:
        start = time.monotonic()
        try:
            resp = self._http.request(method, path, json=payload)
        except httpx.TimeoutException as exc:
            raise RemoteSyncFailure(identity, action, f"timeout: {exc}", retryable=True)
        except httpx.HTTPError as exc:
            raise RemoteSyncFailure(identity, action, f"transport error: {exc}", retryable=True)
        finally:
            CACHET_REQUEST_LATENCY.labels(action=action).observe(time.monotonic() - start)

        if not resp.is_success:
            logger.warning("CachetHQ returned %s for %s %s: %s",
                           resp.status_code, method, path, resp.text[:200])
            raise RemoteSyncFailure(
                identity, action, f"CachetHQ returned {resp.status_code}",
                retryable=resp.status_code in _RETRYABLE_STATUSES,
                status_code=resp.status_code,
            )
        if not resp.content:
            return {}
        try:
            return resp.json()
        except ValueError:
            return {}
