"""
Shared fixtures — a fake CachetHQ served through httpx.MockTransport, so the
real httpx.Client code paths run without a network.
"""
import json
import threading

import httpx
import pytest

from cachet_bridge.core.config import Settings
from cachet_bridge.core.http_client import build_http_client
from cachet_bridge.repositories import IdentityCache
from cachet_bridge.services.alert_parser import AlertParser
from cachet_bridge.services.cachet_client import CachetClient
from cachet_bridge.services.component_resolver import ComponentResolver
from cachet_bridge.services.synchronizer import Synchronizer


class FakeCachet:
    """Minimal CachetHQ incidents API. Set `fail_with` to force a status or exception.
    Set `reply_with` to a (status, json) pair to answer every call with it.
    """

    def __init__(self):
        self.calls = []
        self.incidents = {}
        self.fail_with = None
        self.reply_with = None
        self._next_id = 1
        self._lock = threading.Lock()

    def __call__(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content) if request.content else None
        with self._lock:
            self.calls.append((request.method, request.url.path, body, dict(request.headers)))
            if isinstance(self.fail_with, Exception):
                raise self.fail_with
            if isinstance(self.fail_with, int):
                return httpx.Response(self.fail_with, json={"errors": ["boom"]})
            if self.reply_with is not None:
                status, payload = self.reply_with
                return httpx.Response(status, json=payload)

            path = request.url.path
            if request.method == "GET" and path.endswith("/api/v1/ping"):
                return httpx.Response(200, json={"data": "Pong!"})
            if request.method == "POST" and path.endswith("/api/v1/incidents"):
                incident_id = self._next_id
                self._next_id += 1
                self.incidents[incident_id] = dict(body)
                return httpx.Response(200, json={"data": {"id": incident_id, **body}})
            if request.method == "PUT" and "/api/v1/incidents/" in path:
                incident_id = int(path.rsplit("/", 1)[-1])
                if incident_id not in self.incidents:
                    return httpx.Response(404, json={"errors": ["not found"]})
                self.incidents[incident_id].update(body)
                return httpx.Response(200, json={"data": {"id": incident_id, **self.incidents[incident_id]}})
            return httpx.Response(404)

    def methods(self):
        return [(m, p) for m, p, _, _ in self.calls]

    def creates(self):
        return [c for c in self.calls if c[0] == "POST"]

    def updates(self):
        return [c for c in self.calls if c[0] == "PUT"]


def alert(name="HighLatency", status="firing", summary=None, **labels):
    """Build one Alertmanager alert record."""
    record = {
        "status": status,
        "labels": {"alertname": name, "severity": "critical", **labels},
        "annotations": {},
        "startsAt": "2026-02-09T10:00:00Z",
        "endsAt": "0001-01-01T00:00:00Z",
        "generatorURL": "http://prometheus:9090/graph",
        "fingerprint": "abc123",
    }
    if name is None:
        del record["labels"]["alertname"]
    if summary is not None:
        record["annotations"]["summary"] = summary
    return record


def webhook(*alerts):
    """Wrap alert records in an Alertmanager v4 envelope."""
    return {
        "version": "4",
        "groupKey": '{}:{alertname="HighLatency"}',
        "status": "firing",
        "receiver": "cachet",
        "groupLabels": {},
        "commonLabels": {},
        "commonAnnotations": {},
        "externalURL": "http://alertmanager:9093",
        "alerts": list(alerts),
    }


@pytest.fixture
def fake_cachet():
    return FakeCachet()


@pytest.fixture
def settings(monkeypatch):
    for var in ("PROMETHEUS_TOKEN", "CACHETHQ_URL", "CACHETHQ_TOKEN", "CACHETHQ_ROOT_CA",
                "CACHETHQ_SKIP_VERIFY_SSL", "CACHETHQ_VISIBLE", "CACHETHQ_RETRY_ATTEMPTS",
                "CACHETHQ_TIMEOUT", "CACHETHQ_RETRY_BACKOFF", "LABEL_NAME", "LOG_LEVEL",
                "HTTP_PORT", "SSL_CERT_FILE", "SSL_KEY_FILE"):
        monkeypatch.delenv(var, raising=False)
    return Settings(cachethq_url="http://cachet.test/", cachethq_token="secret-token")


@pytest.fixture
def cache():
    return IdentityCache()


@pytest.fixture
def cachet_client(settings, fake_cachet, cache):
    http = build_http_client(settings, transport=httpx.MockTransport(fake_cachet))
    yield CachetClient(http, cache)
    http.close()


@pytest.fixture
def synchronizer(cachet_client, cache):
    return Synchronizer(AlertParser(), ComponentResolver(cache), cachet_client, cache)
