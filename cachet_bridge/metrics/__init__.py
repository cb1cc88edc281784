# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Prometheus metrics — single source of truth for all metric objects.
Imported by services and middleware. Never instantiated in controllers.
"""

from prometheus_client import Counter, Gauge, Histogram

# ── HTTP Metrics (used by middleware) ──
REQUEST_COUNT = Counter(
    "cachet_bridge_requests_total",
    "Total HTTP requests to the bridge",
    ["method", "endpoint", "status"],
)
REQUEST_LATENCY = Histogram(
    "cachet_bridge_request_duration_seconds",
    "Request latency in seconds",
    ["method", "endpoint"],
)
HTTP_ERRORS = Counter(
    "cachet_bridge_http_errors_total",
    "Total HTTP error responses",
    ["method", "endpoint", "status"],
)

# ── Business Metrics (updated by service layer only) ──
ALERTS_RECEIVED = Counter(
    "cachet_bridge_alerts_received_total",
    "Alert events decoded from webhook batches",
    ["status"],
)
TRANSITIONS = Counter(
    "cachet_bridge_transitions_total",
    "Incident transitions attempted against CachetHQ",
    ["action", "result"],
)
EVENT_ERRORS = Counter(
    "cachet_bridge_event_errors_total",
    "Per-event failures by error kind",
    ["error"],
)
MALFORMED_PAYLOADS = Counter(
    "cachet_bridge_malformed_payloads_total",
    "Webhook bodies rejected before any alert was processed",
)
CACHET_REQUEST_LATENCY = Histogram(
    "cachet_bridge_cachet_request_seconds",
    "Latency of CachetHQ API calls",
    ["action"],
    buckets=[0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)
CACHET_RETRIES = Counter(
    "cachet_bridge_cachet_retries_total",
    "Retries of retryable CachetHQ failures",
    ["action", "attempt"],
)
BATCH_PROCESSING = Histogram(
    "cachet_bridge_batch_processing_seconds",
    "Time taken to synchronise one webhook batch end-to-end",
    buckets=[0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)
TRACKED_INCIDENTS = Gauge(
    "cachet_bridge_tracked_incidents",
    "Open incidents currently tracked in the identity cache",
)
