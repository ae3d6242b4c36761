"""Builds calculators for a role against one catalog."""

from __future__ import annotations

from typing import TYPE_CHECKING

from grantlens.calculator.allowed import AllowedPrivilegeCalculator
from grantlens.calculator.base import BasePrivilegeCalculator
from grantlens.calculator.coverage import rank_levels
from grantlens.calculator.effective import EffectivePrivilegeCalculator
from grantlens.calculator.feature import FeaturePrivilegeCalculator
from grantlens.calculator.models import Role

if TYPE_CHECKING:
    from grantlens.interfaces.catalog import PrivilegeCatalog


class PrivilegeCalculatorFactory:
    """Ranks the catalog's levels once and hands out calculators."""

    def __init__(self, catalog: PrivilegeCatalog):
        self._catalog = catalog
        self.ranked_base_levels = rank_levels(catalog.base_levels(), catalog.get_base_actions)
        self.ranked_feature_levels: dict[str, list[str]] = {
            feature_id: rank_levels(
                catalog.feature_levels(feature_id),
                lambda level, fid=feature_id: catalog.get_actions(fid, level),
            )
            for feature_id in catalog.feature_ids()
        }

    def get_calculator(self, role: Role) -> EffectivePrivilegeCalculator:
        global_spec = role.global_spec
        global_base_actions = (
            self._catalog.get_base_actions(global_spec.base)
            if global_spec.base is not None
            else frozenset()
        )
        return EffectivePrivilegeCalculator(
            role,
            list(self.ranked_feature_levels),
            BasePrivilegeCalculator(self._catalog, global_spec.base, self.ranked_base_levels),
            FeaturePrivilegeCalculator(
                self._catalog, global_spec, global_base_actions, self.ranked_feature_levels
            ),
        )

    def get_allowed_calculator(self) -> AllowedPrivilegeCalculator:
        return AllowedPrivilegeCalculator(
            self._catalog, self.ranked_base_levels, self.ranked_feature_levels
        )
