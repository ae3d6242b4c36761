"""Most permissive base privilege for a space or the global context."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from grantlens.calculator.coverage import fully_covers
from grantlens.calculator.feature import rank_scenarios
from grantlens.calculator.models import (
    NO_PRIVILEGE_VALUE,
    AssignmentSpec,
    PrivilegeExplanation,
    PrivilegeSource,
    Scenario,
)

if TYPE_CHECKING:
    from grantlens.interfaces.catalog import PrivilegeCatalog

logger = logging.getLogger(__name__)


class BasePrivilegeCalculator:
    """Explains which base privilege is in effect.

    The global base privilege always applies as assigned. A space's base
    privilege competes with the global one, and the global privilege wins
    whenever it grants at least as much. Only assigned levels take part,
    so a level that requires no actions is never granted by default.
    """

    def __init__(
        self,
        catalog: PrivilegeCatalog,
        assigned_global_base: str | None,
        ranked_base_levels: list[str],
    ) -> None:
        self._catalog = catalog
        self._assigned_global_base = assigned_global_base
        self._assigned_global_base_actions = (
            catalog.get_base_actions(assigned_global_base)
            if assigned_global_base is not None
            else frozenset()
        )
        self._ranked_base_levels = ranked_base_levels

    def most_permissive_base_privilege(
        self, spec: AssignmentSpec, ignore_assigned: bool = False
    ) -> PrivilegeExplanation:
        assigned_privilege = None if ignore_assigned else spec.base

        if spec.is_global:
            return PrivilegeExplanation(
                actual_privilege=assigned_privilege or NO_PRIVILEGE_VALUE,
                actual_privilege_source=PrivilegeSource.GLOBAL_BASE,
                is_directly_assigned=True,
            )

        scenarios: list[Scenario] = []
        if self._assigned_global_base is not None:
            if assigned_privilege is None:
                scenarios.append(
                    Scenario(
                        source=PrivilegeSource.GLOBAL_BASE,
                        actions=self._assigned_global_base_actions,
                        is_directly_assigned=False,
                    )
                )
            else:
                scenarios.append(
                    Scenario(
                        source=PrivilegeSource.GLOBAL_BASE,
                        actions=self._assigned_global_base_actions,
                        is_directly_assigned=False,
                        superseded_privilege=assigned_privilege,
                        superseded_source=PrivilegeSource.SPACE_BASE,
                    )
                )
        if assigned_privilege is not None:
            scenarios.append(
                Scenario(
                    source=PrivilegeSource.SPACE_BASE,
                    actions=self._catalog.get_base_actions(assigned_privilege),
                    is_directly_assigned=True,
                )
            )
        scenarios = rank_scenarios(scenarios)

        for level in self._ranked_base_levels:
            required = self._catalog.get_base_actions(level)
            for scenario in scenarios:
                if fully_covers(scenario.actions, required):
                    logger.debug(
                        "base spaces=%s resolved %s via %s",
                        spec.spaces,
                        level,
                        scenario.source.value,
                    )
                    return PrivilegeExplanation.from_scenario(level, scenario)

        return PrivilegeExplanation(
            actual_privilege=NO_PRIVILEGE_VALUE,
            actual_privilege_source=PrivilegeSource.SPACE_BASE,
            is_directly_assigned=True,
        )
