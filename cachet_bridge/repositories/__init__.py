# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Repository: in-memory identity cache — the only state the process keeps.

Empty at start. An entry gains an incident reference when CachetHQ confirms a
created incident and loses it when CachetHQ confirms the resolution. Lost on
restart; CachetHQ stays authoritative.
"""

import threading
from contextlib import contextmanager
from typing import Dict, Iterator, Optional

from cachet_bridge.core.logging import get_logger
from cachet_bridge.metrics import TRACKED_INCIDENTS
from cachet_bridge.models.domain import IncidentIdentity

logger = get_logger(__name__)


class IdentityCache:
    """Maps component keys to open incident references, with per-key locking."""

    def __init__(self, seed: Optional[Dict[str, str]] = None):
        self._entries: Dict[str, IncidentIdentity] = {}
        self._key_locks: Dict[str, threading.Lock] = {}
        self._guard = threading.Lock()
        for key, ref in (seed or {}).items():
            self._entries[key] = IncidentIdentity(component_key=key, incident_ref=ref)
        self._publish()

    @contextmanager
    def lock(self, component_key: str) -> Iterator[None]:
        """Serialise decide + remote call + write for one key."""
        with self._guard:
            key_lock = self._key_locks.setdefault(component_key, threading.Lock())
        with key_lock:
            yield

    def get(self, component_key: str) -> Optional[IncidentIdentity]:
        with self._guard:
            return self._entries.get(component_key)

    def get_or_create(self, component_key: str) -> IncidentIdentity:
        with self._guard:
            entry = self._entries.get(component_key)
            if entry is None:
                entry = IncidentIdentity(component_key=component_key)
                self._entries[component_key] = entry
            return entry

    def attach(self, component_key: str, incident_ref: str) -> None:
        with self._guard:
            self._entries[component_key] = IncidentIdentity(
                component_key=component_key, incident_ref=incident_ref
            )
        logger.debug("Cache attach key=%s incident=%s", component_key, incident_ref)
        self._publish()

    def clear(self, component_key: str) -> None:
        with self._guard:
            self._entries.pop(component_key, None)
        logger.debug("Cache clear key=%s", component_key)
        self._publish()

    def open_incidents(self) -> int:
        with self._guard:
            return sum(1 for e in self._entries.values() if e.has_open_incident)

    def __len__(self) -> int:
        with self._guard:
            return len(self._entries)

    def __contains__(self, component_key: str) -> bool:
        with self._guard:
            return component_key in self._entries

    def _publish(self) -> None:
        TRACKED_INCIDENTS.set(self.open_incidents())
