"""Privilege catalog interface."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from grantlens.calculator.models import PrivilegeCalculatorError


class UnknownPrivilegeError(PrivilegeCalculatorError, KeyError):
    """Raised when a feature or level identifier is not in the catalog."""

    def __init__(self, level: str, feature_id: str | None = None):
        self.level = level
        self.feature_id = feature_id
        if feature_id is None:
            msg = f"Unknown base privilege '{level}'"
        else:
            msg = f"Unknown privilege '{level}' for feature '{feature_id}'"
        super().__init__(msg)

    def __str__(self) -> str:
        return self.args[0]


@runtime_checkable
class PrivilegeCatalog(Protocol):
    """Maps privilege levels to the operations they grant.

    Lookups must be stable for the duration of a resolution call.
    """

    def get_actions(self, feature_id: str, level: str) -> frozenset[str]: ...

    def get_base_actions(self, level: str) -> frozenset[str]: ...

    def feature_ids(self) -> list[str]: ...

    def feature_levels(self, feature_id: str) -> list[str]: ...

    def base_levels(self) -> list[str]: ...
