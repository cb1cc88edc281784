# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: decode an Alertmanager webhook body into Alert Events.
Pure transformation — no I/O, no shared state.
"""

import json
from typing import Any, List, NamedTuple, Union

from pydantic import ValidationError

from cachet_bridge.core.errors import (
    EventError,
    InvalidAlertRecord,
    MalformedPayload,
    MissingIdentityLabel,
    UnknownAlertStatus,
)
from cachet_bridge.models.domain import AlertEvent, AlertStatus
from cachet_bridge.schemas import AlertmanagerWebhook, WebhookAlert

_STATUS_MAP = {
    "firing": AlertStatus.FIRING,
    "resolved": AlertStatus.RESOLVED,
}


class ParsedBatch(NamedTuple):
    events: List[AlertEvent]
    failures: List[EventError]


def _first_error(exc: ValidationError) -> str:
    err = exc.errors()[0]
    loc = ".".join(str(p) for p in err.get("loc", ())) or "<root>"
    return f"{loc}: {err.get('msg', 'invalid')}"


class AlertParser:
    def __init__(self, label_name: str = "alertname"):
        self.label_name = label_name

    def decode(self, raw: Union[bytes, str, Any]) -> AlertmanagerWebhook:
        """Validate the batch envelope; any failure here aborts the whole request."""
        if isinstance(raw, (bytes, bytearray, str)):
            try:
                raw = json.loads(raw)
            except (ValueError, UnicodeDecodeError) as exc:
                raise MalformedPayload(f"body is not valid JSON: {exc}")
        if not isinstance(raw, dict):
            raise MalformedPayload(f"expected a JSON object, got {type(raw).__name__}")
        try:
            return AlertmanagerWebhook.model_validate(raw)
        except ValidationError as exc:
            raise MalformedPayload(_first_error(exc))

    def to_event(self, index: int, record: Any) -> AlertEvent:
        try:
            alert = WebhookAlert.model_validate(record)
        except ValidationError as exc:
            raise InvalidAlertRecord(_first_error(exc), index=index)

        identity = alert.labels.get(self.label_name, "")
        if not identity:
            raise MissingIdentityLabel(
                f"label '{self.label_name}' is missing or empty", index=index
            )

        status = _STATUS_MAP.get(alert.status.strip().lower())
        if status is None:
            raise UnknownAlertStatus(
                f"unknown alert status '{alert.status}'", index=index, identity=identity
            )

        summary = (
            alert.annotations.get("summary")
            or alert.annotations.get("description")
            or f"{identity} is {status.value}"
        )
        return AlertEvent(
            index=index,
            identity=identity,
            status=status,
            summary=summary,
            labels=alert.labels,
        )

    def parse(self, raw: Union[bytes, str, Any]) -> ParsedBatch:
        """Convert every record independently; bad records become failures, not aborts."""
        batch = self.decode(raw)
        events: List[AlertEvent] = []
        failures: List[EventError] = []
        for index, record in enumerate(batch.alerts):
            try:
                events.append(self.to_event(index, record))
            except EventError as exc:
                failures.append(exc)
        return ParsedBatch(events=events, failures=failures)
