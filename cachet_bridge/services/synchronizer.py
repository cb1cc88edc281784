# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: alert-to-incident synchronisation — parse, resolve, decide, execute.

Events of one batch are handled sequentially in payload order. The identity
lock is held from the cache read through the remote call to the cache write,
so two concurrent firing deliveries for one identity cannot both create.
"""

from typing import Any, List

from cachet_bridge.core.errors import EventError, RemoteSyncFailure
from cachet_bridge.core.logging import get_logger
from cachet_bridge.metrics import ALERTS_RECEIVED, BATCH_PROCESSING, EVENT_ERRORS, TRANSITIONS
from cachet_bridge.models.domain import AlertEvent, EventOutcome, SyncResult
from cachet_bridge.repositories import IdentityCache
from cachet_bridge.services.alert_parser import AlertParser
from cachet_bridge.services.component_resolver import ComponentResolver
from cachet_bridge.services.state_machine import decide

logger = get_logger(__name__)


class Synchronizer:
    def __init__(self, parser: AlertParser, resolver: ComponentResolver, client,
                 cache: IdentityCache):
        self._parser = parser
        self._resolver = resolver
        self._client = client
        self._cache = cache

    def synchronize(self, raw: Any) -> SyncResult:
        """Run one webhook batch. MalformedPayload propagates before anything runs."""
        with BATCH_PROCESSING.time():
            batch = self._parser.parse(raw)

            outcomes: List[EventOutcome] = [self._failure_outcome(err) for err in batch.failures]
            for event in batch.events:
                ALERTS_RECEIVED.labels(status=event.status.value).inc()
                outcomes.append(self.process_event(event))
            outcomes.sort(key=lambda o: o.index)

            result = SyncResult(outcomes=outcomes)
            logger.info(
                "Batch synchronised alerts=%d succeeded=%d failed=%d",
                len(outcomes), len(result.succeeded), len(result.failed),
            )
            return result

    def process_event(self, event: AlertEvent) -> EventOutcome:
        with self._cache.lock(event.identity):
            identity = self._resolver.resolve(event.identity)
            decision = decide(identity.incident_ref, event.status)
            logger.debug("Decision identity=%s status=%s incident=%s action=%s",
                         event.identity, event.status.value, identity.incident_ref, decision.value)
            try:
                incident_id = self._client.apply(decision, event)
            except RemoteSyncFailure as exc:
                TRANSITIONS.labels(action=decision.value, result="failed").inc()
                EVENT_ERRORS.labels(error=exc.kind).inc()
                logger.error("Remote sync failed identity=%s action=%s: %s",
                             event.identity, decision.value, exc.detail)
                return EventOutcome(
                    index=event.index, identity=event.identity, action=decision,
                    ok=False, error=exc.kind, detail=exc.detail,
                )

        TRANSITIONS.labels(action=decision.value, result="ok").inc()
        return EventOutcome(
            index=event.index, identity=event.identity, action=decision,
            ok=True, incident_id=incident_id,
        )

    @staticmethod
    def _failure_outcome(err: EventError) -> EventOutcome:
        EVENT_ERRORS.labels(error=err.kind).inc()
        logger.warning("Alert %s skipped: %s: %s", err.index, err.kind, err.detail)
        return EventOutcome(
            index=err.index, identity=err.identity, ok=False,
            error=err.kind, detail=err.detail,
        )
