# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Maps an alert identity to its status-page target. Never calls CachetHQ."""

from cachet_bridge.models.domain import IncidentIdentity
from cachet_bridge.repositories import IdentityCache


class ComponentResolver:
    def __init__(self, cache: IdentityCache):
        self._cache = cache

    def resolve(self, identity: str) -> IncidentIdentity:
        return self._cache.get_or_create(identity)
