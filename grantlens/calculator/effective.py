"""Effective privileges for every space a role touches."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from grantlens.calculator.models import AssignmentSpec, CalculatedPrivilege, PrivilegeExplanation, Role

if TYPE_CHECKING:
    from grantlens.calculator.base import BasePrivilegeCalculator
    from grantlens.calculator.feature import FeaturePrivilegeCalculator

logger = logging.getLogger(__name__)


class EffectivePrivilegeCalculator:
    """Combines base and feature resolution for a single role.

    A space's base explanation is always computed before its features,
    since the feature calculator consumes it.
    """

    def __init__(
        self,
        role: Role,
        feature_ids: list[str],
        base_calculator: BasePrivilegeCalculator,
        feature_calculator: FeaturePrivilegeCalculator,
    ) -> None:
        self._role = role
        self._feature_ids = feature_ids
        self._base = base_calculator
        self._feature = feature_calculator

    @property
    def role(self) -> Role:
        return self._role

    def calculate_effective_privileges(self, ignore_assigned: bool = False) -> list[CalculatedPrivilege]:
        """One result per assignment spec, in the role's order."""
        return [self._calculate(spec, ignore_assigned) for spec in self._role.privileges]

    def explain_space(self, space_id: str, ignore_assigned: bool = False) -> CalculatedPrivilege:
        return self._calculate(self._role.spec_for_space(space_id), ignore_assigned)

    def explain_base(self, space_id: str, ignore_assigned: bool = False) -> PrivilegeExplanation:
        return self._base.most_permissive_base_privilege(
            self._role.spec_for_space(space_id), ignore_assigned
        )

    def resolve(self, feature_id: str, space_id: str, ignore_assigned: bool = False) -> PrivilegeExplanation:
        """Explain the effective privilege of *feature_id* within *space_id*."""
        spec = self._role.spec_for_space(space_id)
        base_explanation = self._base.most_permissive_base_privilege(spec, ignore_assigned)
        return self._feature.most_permissive_feature_privilege(
            spec, base_explanation, feature_id, ignore_assigned
        )

    def _calculate(self, spec: AssignmentSpec, ignore_assigned: bool) -> CalculatedPrivilege:
        base_explanation = self._base.most_permissive_base_privilege(spec, ignore_assigned)
        feature = {
            feature_id: self._feature.most_permissive_feature_privilege(
                spec, base_explanation, feature_id, ignore_assigned
            )
            for feature_id in self._feature_ids
        }
        logger.debug(
            "role=%s spaces=%s base=%s features=%d ignore_assigned=%s",
            self._role.name,
            spec.spaces,
            base_explanation.actual_privilege,
            len(feature),
            ignore_assigned,
        )
        return CalculatedPrivilege(base=base_explanation, feature=feature)
