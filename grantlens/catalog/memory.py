"""In-memory privilege catalog."""

from __future__ import annotations

from grantlens.catalog.models import PrivilegeDefinitionSet
from grantlens.interfaces.catalog import UnknownPrivilegeError


class InMemoryPrivilegeCatalog:
    """Catalog backed by a loaded :class:`PrivilegeDefinitionSet`.

    Action lists are frozen at construction, so lookups stay stable even if
    the source document is mutated afterwards.
    """

    def __init__(self, definitions: PrivilegeDefinitionSet) -> None:
        self._features: dict[str, dict[str, frozenset[str]]] = {
            feature_id: {level: frozenset(actions) for level, actions in levels.items()}
            for feature_id, levels in definitions.features.items()
        }
        self._base: dict[str, frozenset[str]] = {
            level: frozenset(actions) for level, actions in definitions.base.items()
        }

    # -- Protocol methods ------------------------------------------------------

    def get_actions(self, feature_id: str, level: str) -> frozenset[str]:
        try:
            return self._features[feature_id][level]
        except KeyError:
            raise UnknownPrivilegeError(level, feature_id) from None

    def get_base_actions(self, level: str) -> frozenset[str]:
        try:
            return self._base[level]
        except KeyError:
            raise UnknownPrivilegeError(level) from None

    def feature_ids(self) -> list[str]:
        return list(self._features)

    def feature_levels(self, feature_id: str) -> list[str]:
        """Levels in declaration order."""
        if feature_id not in self._features:
            raise UnknownPrivilegeError("*", feature_id)
        return list(self._features[feature_id])

    def base_levels(self) -> list[str]:
        return list(self._base)

    # -- Extensions ------------------------------------------------------------

    @classmethod
    def from_mapping(cls, raw: dict) -> InMemoryPrivilegeCatalog:
        """Build a catalog from a plain ``{"features": ..., "base": ...}`` dict."""
        return cls(PrivilegeDefinitionSet(**raw))
