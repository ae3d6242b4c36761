"""Privileges an operator can still assign without being overridden."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING

from grantlens.calculator.coverage import fully_covers
from grantlens.calculator.models import (
    NO_PRIVILEGE_VALUE,
    AllowedLevels,
    AllowedPrivilege,
    AssignmentSpec,
    CalculatedPrivilege,
    MissingExplanationError,
)

if TYPE_CHECKING:
    from grantlens.calculator.effective import EffectivePrivilegeCalculator
    from grantlens.interfaces.catalog import PrivilegeCatalog


class AllowedPrivilegeCalculator:
    """Works out which levels are worth assigning in each spec.

    Uses effective privileges computed with direct assignments ignored, so
    each result reflects only what is inherited from elsewhere. A level is
    allowed when it grants something the inherited level does not.
    """

    def __init__(
        self,
        catalog: PrivilegeCatalog,
        ranked_base_levels: list[str],
        ranked_feature_levels: Mapping[str, list[str]],
    ) -> None:
        self._catalog = catalog
        self._ranked_base_levels = ranked_base_levels
        self._ranked_feature_levels = ranked_feature_levels

    def calculate_allowed_privileges(
        self, effective_calculator: EffectivePrivilegeCalculator
    ) -> list[AllowedPrivilege]:
        inherited = effective_calculator.calculate_effective_privileges(ignore_assigned=True)
        return [
            self._calculate(spec, calculated)
            for spec, calculated in zip(effective_calculator.role.privileges, inherited, strict=True)
        ]

    def _calculate(self, spec: AssignmentSpec, inherited: CalculatedPrivilege) -> AllowedPrivilege:
        if spec.is_global:
            base = AllowedLevels(privileges=list(self._ranked_base_levels), can_unassign=True)
        else:
            base = self._allowed(
                inherited.base.actual_privilege,
                self._ranked_base_levels,
                self._catalog.get_base_actions,
            )

        feature: dict[str, AllowedLevels] = {}
        for feature_id, levels in self._ranked_feature_levels.items():
            explanation = inherited.feature.get(feature_id)
            if explanation is None:
                raise MissingExplanationError(feature_id)
            feature[feature_id] = self._allowed(
                explanation.actual_privilege,
                levels,
                lambda level, fid=feature_id: self._catalog.get_actions(fid, level),
            )
        return AllowedPrivilege(base=base, feature=feature)

    @staticmethod
    def _allowed(
        inherited_privilege: str,
        ranked_levels: list[str],
        actions_for: Callable[[str], frozenset[str]],
    ) -> AllowedLevels:
        if inherited_privilege == NO_PRIVILEGE_VALUE:
            return AllowedLevels(privileges=list(ranked_levels), can_unassign=True)
        inherited_actions = actions_for(inherited_privilege)
        privileges = [
            level
            for level in ranked_levels
            if level == inherited_privilege
            or not fully_covers(inherited_actions, actions_for(level))
        ]
        return AllowedLevels(privileges=privileges, can_unassign=False)
