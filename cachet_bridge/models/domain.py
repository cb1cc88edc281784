# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Domain models — pure data structures, NO FastAPI dependency.
"""

from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class AlertStatus(str, Enum):
    FIRING = "firing"
    RESOLVED = "resolved"


class TransitionDecision(str, Enum):
    CREATE_INCIDENT = "create_incident"
    UPDATE_INCIDENT = "update_incident"
    RESOLVE_INCIDENT = "resolve_incident"
    NOOP = "noop"


class AlertEvent(BaseModel):
    """One alert's state at notification time; immutable, lives for one request."""
    model_config = ConfigDict(frozen=True)

    index: int = Field(..., ge=0, description="Position of the alert in the inbound batch")
    identity: str = Field(..., min_length=1)
    status: AlertStatus
    summary: str = ""
    labels: Dict[str, str] = Field(default_factory=dict)


class IncidentIdentity(BaseModel):
    """Status-page target for an identity; incident_ref is set while an incident is open."""
    component_key: str
    incident_ref: Optional[str] = None

    @property
    def has_open_incident(self) -> bool:
        return self.incident_ref is not None


class EventOutcome(BaseModel):
    index: int
    identity: Optional[str] = None
    action: Optional[TransitionDecision] = None
    ok: bool
    incident_id: Optional[str] = None
    error: Optional[str] = None
    detail: Optional[str] = None


class SyncResult(BaseModel):
    """Per-event outcomes of one webhook batch, in payload order."""
    outcomes: List[EventOutcome] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return all(o.ok for o in self.outcomes)

    @property
    def succeeded(self) -> List[EventOutcome]:
        return [o for o in self.outcomes if o.ok]

    @property
    def failed(self) -> List[EventOutcome]:
        return [o for o in self.outcomes if not o.ok]

    @property
    def has_remote_failures(self) -> bool:
        return any(o.error == "RemoteSyncFailure" for o in self.failed)
