"""Most permissive feature privilege for a space or the global context."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING

from grantlens.calculator.coverage import fully_covers
from grantlens.calculator.models import (
    NO_PRIVILEGE_VALUE,
    AssignmentSpec,
    PrivilegeExplanation,
    PrivilegeSource,
    Scenario,
    UnsupportedPrivilegeSourceError,
    source_rank,
)

if TYPE_CHECKING:
    from grantlens.interfaces.catalog import PrivilegeCatalog

logger = logging.getLogger(__name__)


def rank_scenarios(scenarios: Iterable[Scenario]) -> list[Scenario]:
    """Order scenarios by source priority, most global first."""
    return sorted(scenarios, key=lambda s: source_rank(s.source))


def space_base_grant_applies(base_explanation: PrivilegeExplanation) -> bool:
    """Whether a space-level base grant takes part in feature resolution.

    True when the space's base privilege resolved to, or was superseded from,
    a space base assignment.
    """
    return (
        base_explanation.actual_privilege_source == PrivilegeSource.SPACE_BASE
        or base_explanation.superseded_privilege_source == PrivilegeSource.SPACE_BASE
    )


class FeaturePrivilegeCalculator:
    """Resolves and explains the effective privilege of one feature.

    *assigned_global_base_actions* are the actions of the global base
    privilege; *ranked_feature_levels* maps each feature to its levels,
    most permissive first.
    """

    def __init__(
        self,
        catalog: PrivilegeCatalog,
        global_spec: AssignmentSpec,
        assigned_global_base_actions: frozenset[str],
        ranked_feature_levels: Mapping[str, list[str]],
    ) -> None:
        self._catalog = catalog
        self._global_spec = global_spec
        self._assigned_global_base_actions = frozenset(assigned_global_base_actions)
        self._ranked_feature_levels = ranked_feature_levels

    def most_permissive_feature_privilege(
        self,
        spec: AssignmentSpec,
        base_explanation: PrivilegeExplanation,
        feature_id: str,
        ignore_assigned: bool = False,
    ) -> PrivilegeExplanation:
        scenarios = self.build_scenarios(spec, base_explanation, feature_id, ignore_assigned)

        # Levels outer, scenarios inner: the first match is the most permissive
        # level any source grants, with ties going to the most global source.
        for level in self._ranked_feature_levels.get(feature_id, []):
            required = self._catalog.get_actions(feature_id, level)
            for scenario in scenarios:
                if fully_covers(scenario.actions, required):
                    explanation = PrivilegeExplanation.from_scenario(level, scenario)
                    logger.debug(
                        "feature=%s spaces=%s resolved %s via %s",
                        feature_id,
                        spec.spaces,
                        level,
                        scenario.source.value,
                    )
                    return explanation

        return PrivilegeExplanation(
            actual_privilege=NO_PRIVILEGE_VALUE,
            actual_privilege_source=(
                PrivilegeSource.GLOBAL_FEATURE if spec.is_global else PrivilegeSource.SPACE_FEATURE
            ),
            is_directly_assigned=True,
        )

    def build_scenarios(
        self,
        spec: AssignmentSpec,
        base_explanation: PrivilegeExplanation,
        feature_id: str,
        ignore_assigned: bool = False,
    ) -> list[Scenario]:
        """Candidate sources for *feature_id* under *spec*, ranked."""
        is_global = spec.is_global
        assigned_global_privilege = self._global_spec.assigned_feature_privilege(feature_id)
        assigned_privilege = spec.assigned_feature_privilege(feature_id)
        has_assigned = not ignore_assigned and assigned_privilege is not None

        scenarios = [
            self._scenario(
                PrivilegeSource.GLOBAL_BASE,
                self._base_actions(PrivilegeSource.GLOBAL_BASE, None),
                is_directly_assigned=False,
                supersedes=has_assigned,
                superseded_privilege=assigned_privilege,
                superseded_source=(
                    PrivilegeSource.GLOBAL_FEATURE if is_global else PrivilegeSource.SPACE_FEATURE
                ),
            )
        ]

        if not is_global or not ignore_assigned:
            scenarios.append(
                self._scenario(
                    PrivilegeSource.GLOBAL_FEATURE,
                    self._feature_actions(feature_id, assigned_global_privilege),
                    is_directly_assigned=is_global and has_assigned,
                    supersedes=has_assigned and not is_global,
                    superseded_privilege=assigned_privilege,
                    superseded_source=PrivilegeSource.SPACE_FEATURE,
                )
            )

        if is_global:
            return rank_scenarios(scenarios)

        if space_base_grant_applies(base_explanation):
            space_base_privilege = (
                base_explanation.superseded_privilege or base_explanation.actual_privilege
            )
            scenarios.append(
                self._scenario(
                    PrivilegeSource.SPACE_BASE,
                    self._base_actions(PrivilegeSource.SPACE_BASE, space_base_privilege),
                    is_directly_assigned=False,
                    supersedes=has_assigned,
                    superseded_privilege=assigned_privilege,
                    superseded_source=PrivilegeSource.SPACE_FEATURE,
                )
            )

        if not ignore_assigned:
            scenarios.append(
                Scenario(
                    source=PrivilegeSource.SPACE_FEATURE,
                    actions=self._feature_actions(feature_id, assigned_privilege),
                    is_directly_assigned=True,
                )
            )

        return rank_scenarios(scenarios)

    @staticmethod
    def _scenario(
        source: PrivilegeSource,
        actions: frozenset[str],
        *,
        is_directly_assigned: bool,
        supersedes: bool,
        superseded_privilege: str | None,
        superseded_source: PrivilegeSource,
    ) -> Scenario:
        if not supersedes:
            return Scenario(source=source, actions=actions, is_directly_assigned=is_directly_assigned)
        return Scenario(
            source=source,
            actions=actions,
            is_directly_assigned=is_directly_assigned,
            superseded_privilege=superseded_privilege,
            superseded_source=superseded_source,
        )

    def _base_actions(self, source: PrivilegeSource, privilege: str | None) -> frozenset[str]:
        if source == PrivilegeSource.GLOBAL_BASE:
            return self._assigned_global_base_actions
        if source == PrivilegeSource.SPACE_BASE:
            if privilege is None or privilege == NO_PRIVILEGE_VALUE:
                return frozenset()
            return self._catalog.get_base_actions(privilege)
        raise UnsupportedPrivilegeSourceError(source, "get base actions")

    def _feature_actions(self, feature_id: str, privilege: str | None) -> frozenset[str]:
        if privilege is None:
            return frozenset()
        return self._catalog.get_actions(feature_id, privilege)
