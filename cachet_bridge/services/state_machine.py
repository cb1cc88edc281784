# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Incident state machine.

    (no incident) ── firing ──► create_incident
    (no incident) ── resolved ─► noop
    (open)        ── firing ──► update_incident
    (open)        ── resolved ─► resolve_incident

An identity never gets a second incident while one is open.
"""
from typing import Optional

from cachet_bridge.models.domain import AlertStatus, TransitionDecision

TRANSITIONS = {
    (False, AlertStatus.FIRING): TransitionDecision.CREATE_INCIDENT,
    (False, AlertStatus.RESOLVED): TransitionDecision.NOOP,
    (True, AlertStatus.FIRING): TransitionDecision.UPDATE_INCIDENT,
    (True, AlertStatus.RESOLVED): TransitionDecision.RESOLVE_INCIDENT,
}


def decide(incident_ref: Optional[str], status: AlertStatus) -> TransitionDecision:
    return TRANSITIONS[(incident_ref is not None, AlertStatus(status))]
