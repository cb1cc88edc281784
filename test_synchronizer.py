"""
Synchronizer — behavioural tests for the end-to-end alert → incident flow.
"""
import threading
from concurrent.futures import ThreadPoolExecutor

import httpx
import pytest

from cachet_bridge.core.errors import MalformedPayload
from cachet_bridge.core.http_client import build_http_client
from cachet_bridge.models.domain import TransitionDecision
from cachet_bridge.repositories import IdentityCache
from cachet_bridge.services.alert_parser import AlertParser
from cachet_bridge.services.cachet_client import CachetClient
from cachet_bridge.services.component_resolver import ComponentResolver
from cachet_bridge.services.synchronizer import Synchronizer
from conftest import alert, webhook

CREATE = TransitionDecision.CREATE_INCIDENT
UPDATE = TransitionDecision.UPDATE_INCIDENT
RESOLVE = TransitionDecision.RESOLVE_INCIDENT
NOOP = TransitionDecision.NOOP


def _actions(result):
    return [o.action for o in result.outcomes]


# ═══════════════════════════════════════════════════════════════════════════
# LIFECYCLE
# ═══════════════════════════════════════════════════════════════════════════
class TestLifecycle:
    def test_repeat_firing_creates_then_updates(self, synchronizer, fake_cachet):
        first = synchronizer.synchronize(webhook(alert("X")))
        second = synchronizer.synchronize(webhook(alert("X")))
        assert _actions(first) == [CREATE]
        assert _actions(second) == [UPDATE]
        assert len(fake_cachet.creates()) == 1

    def test_resolution_clears_state(self, synchronizer, fake_cachet, cache):
        results = [
            synchronizer.synchronize(webhook(alert("X", "firing"))),
            synchronizer.synchronize(webhook(alert("X", "resolved"))),
            synchronizer.synchronize(webhook(alert("X", "firing"))),
        ]
        assert [_actions(r)[0] for r in results] == [CREATE, RESOLVE, CREATE]
        assert results[0].outcomes[0].incident_id == "1"
        assert results[2].outcomes[0].incident_id == "2"
        assert cache.get("X").incident_ref == "2"

    def test_resolved_without_firing_is_noop(self, synchronizer, fake_cachet):
        result = synchronizer.synchronize(webhook(alert("X", "resolved")))
        assert result.ok
        assert _actions(result) == [NOOP]
        assert fake_cachet.calls == []

    def test_pre_seeded_cache(self, settings, fake_cachet):
        seeded = IdentityCache(seed={"X": "1"})
        fake_cachet.incidents[1] = {"name": "X"}
        http = build_http_client(settings, transport=httpx.MockTransport(fake_cachet))
        client = CachetClient(http, seeded)
        sync = Synchronizer(AlertParser(), ComponentResolver(seeded), client, seeded)
        assert _actions(sync.synchronize(webhook(alert("X", "resolved")))) == [RESOLVE]
        assert seeded.get("X") is None

    def test_batch_processed_in_payload_order(self, synchronizer, fake_cachet):
        result = synchronizer.synchronize(webhook(
            alert("X", "firing"), alert("X", "firing"), alert("X", "resolved"),
        ))
        assert _actions(result) == [CREATE, UPDATE, RESOLVE]
        assert fake_cachet.methods() == [
            ("POST", "/api/v1/incidents"),
            ("PUT", "/api/v1/incidents/1"),
            ("PUT", "/api/v1/incidents/1"),
        ]


# ═══════════════════════════════════════════════════════════════════════════
# ERROR ISOLATION
# ═══════════════════════════════════════════════════════════════════════════
class TestErrorIsolation:
    def test_partial_batch_isolation(self, synchronizer, fake_cachet):
        result = synchronizer.synchronize(webhook(alert("A"), alert(None), alert("C")))
        assert not result.ok
        assert [o.index for o in result.outcomes] == [0, 1, 2]
        assert [o.identity for o in result.succeeded] == ["A", "C"]
        failed = result.failed
        assert len(failed) == 1
        assert failed[0].index == 1
        assert failed[0].error == "MissingIdentityLabel"
        assert failed[0].action is None
        assert len(fake_cachet.creates()) == 2
        assert not result.has_remote_failures

    def test_malformed_payload_short_circuits(self, synchronizer, fake_cachet, cache):
        with pytest.raises(MalformedPayload):
            synchronizer.synchronize(b"{this is not json")
        assert fake_cachet.calls == []
        assert len(cache) == 0

    def test_remote_failure_reported_and_retry_safe(self, synchronizer, fake_cachet, cache):
        fake_cachet.fail_with = 503
        failed = synchronizer.synchronize(webhook(alert("X")))
        assert not failed.ok
        assert failed.has_remote_failures
        outcome = failed.outcomes[0]
        assert (outcome.identity, outcome.action, outcome.error) == ("X", CREATE, "RemoteSyncFailure")
        assert cache.get("X").incident_ref is None

        # Alertmanager re-delivers the same state: same decision, now applied.
        fake_cachet.fail_with = None
        retried = synchronizer.synchronize(webhook(alert("X")))
        assert retried.ok
        assert _actions(retried) == [CREATE]
        assert cache.get("X").incident_ref == "1"

    def test_remote_failure_does_not_stop_siblings(self, synchronizer, fake_cachet):
        synchronizer.synchronize(webhook(alert("A")))
        fake_cachet.incidents.clear()  # next PUT for A now 404s
        result = synchronizer.synchronize(webhook(alert("A"), alert("B")))
        assert [o.ok for o in result.outcomes] == [False, True]
        assert result.outcomes[0].action == UPDATE
        assert result.outcomes[1].action == CREATE

    def test_unexpected_create_body_does_not_abort_batch(self, synchronizer, fake_cachet, cache):
        fake_cachet.reply_with = (200, {"data": ["created"]})
        result = synchronizer.synchronize(webhook(alert("A"), alert("B")))
        assert [o.identity for o in result.outcomes] == ["A", "B"]
        assert [o.error for o in result.outcomes] == ["RemoteSyncFailure", "RemoteSyncFailure"]
        assert result.has_remote_failures
        assert len(fake_cachet.creates()) == 2
        assert cache.open_incidents() == 0


# ═══════════════════════════════════════════════════════════════════════════
# CONCURRENCY
# ═══════════════════════════════════════════════════════════════════════════
class TestConcurrency:
    def test_concurrent_firing_creates_exactly_once(self, synchronizer, fake_cachet):
        workers = 16
        barrier = threading.Barrier(workers)

        def deliver(_):
            barrier.wait()
            return synchronizer.synchronize(webhook(alert("X")))

        with ThreadPoolExecutor(max_workers=workers) as pool:
            results = list(pool.map(deliver, range(workers)))

        actions = [r.outcomes[0].action for r in results]
        assert all(r.ok for r in results)
        assert actions.count(CREATE) == 1
        assert actions.count(UPDATE) == workers - 1
        assert len(fake_cachet.creates()) == 1
        assert len(fake_cachet.updates()) == workers - 1

    def test_concurrent_distinct_identities_each_create(self, synchronizer, fake_cachet, cache):
        names = [f"alert-{i}" for i in range(8)]
        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(lambda n: synchronizer.synchronize(webhook(alert(n))), names))
        assert all(_actions(r) == [CREATE] for r in results)
        assert cache.open_incidents() == 8

    def test_held_identity_does_not_block_others(self, synchronizer, fake_cachet, cache):
        with cache.lock("A"):
            with ThreadPoolExecutor(max_workers=1) as pool:
                result = pool.submit(synchronizer.synchronize, webhook(alert("B"))).result(timeout=2)
            assert _actions(result) == [CREATE]
            assert fake_cachet.methods() == [("POST", "/api/v1/incidents")]
