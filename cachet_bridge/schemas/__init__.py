# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Pydantic schemas — Alertmanager webhook contract and API responses.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from cachet_bridge.models.domain import EventOutcome, SyncResult


# ── Inbound: Alertmanager webhook (version 4) ──

class WebhookAlert(BaseModel):
    """A single alert record inside the webhook batch."""
    model_config = ConfigDict(populate_by_name=True, strict=True)

    status: str
    labels: Dict[str, str]
    annotations: Dict[str, str] = Field(default_factory=dict)
    starts_at: Optional[str] = Field(default=None, alias="startsAt")
    ends_at: Optional[str] = Field(default=None, alias="endsAt")
    generator_url: Optional[str] = Field(default=None, alias="generatorURL")
    fingerprint: Optional[str] = None


class AlertmanagerWebhook(BaseModel):
    """Top-level batch. Alert records stay raw so each one validates on its own."""
    model_config = ConfigDict(populate_by_name=True)

    version: Optional[str] = None
    group_key: Optional[str] = Field(default=None, alias="groupKey")
    status: Optional[str] = None
    receiver: Optional[str] = None
    group_labels: Dict[str, Any] = Field(default_factory=dict, alias="groupLabels")
    common_labels: Dict[str, Any] = Field(default_factory=dict, alias="commonLabels")
    common_annotations: Dict[str, Any] = Field(default_factory=dict, alias="commonAnnotations")
    external_url: Optional[str] = Field(default=None, alias="externalURL")
    truncated_alerts: Optional[int] = Field(default=None, alias="truncatedAlerts")
    alerts: List[Any]


# ── Outbound: webhook responses ──

class SyncResponse(BaseModel):
    """Aggregate outcome of one webhook delivery."""
    status: str
    processed: int
    succeeded: List[EventOutcome]
    failed: List[EventOutcome]

    @classmethod
    def from_result(cls, result: SyncResult) -> "SyncResponse":
        return cls(
            status="ok" if result.ok else "partial_failure",
            processed=len(result.outcomes),
            succeeded=result.succeeded,
            failed=result.failed,
        )


class ErrorResponse(BaseModel):
    error: str
    detail: Optional[str] = None
    request_id: Optional[str] = None
