from .allowed import AllowedPrivilegeCalculator
from .base import BasePrivilegeCalculator
from .coverage import compare_actions, fully_covers, rank_levels
from .effective import EffectivePrivilegeCalculator
from .factory import PrivilegeCalculatorFactory
from .feature import FeaturePrivilegeCalculator, rank_scenarios, space_base_grant_applies
from .models import (
    GLOBAL_SPACE_ID,
    NO_PRIVILEGE_VALUE,
    AllowedLevels,
    AllowedPrivilege,
    AssignmentSpec,
    CalculatedPrivilege,
    IncomparableActionsError,
    MissingExplanationError,
    PrivilegeCalculatorError,
    PrivilegeExplanation,
    PrivilegeSource,
    Role,
    Scenario,
    UnsupportedPrivilegeSourceError,
    source_rank,
)

__all__ = [
    "AllowedLevels",
    "AllowedPrivilege",
    "AllowedPrivilegeCalculator",
    "AssignmentSpec",
    "BasePrivilegeCalculator",
    "CalculatedPrivilege",
    "EffectivePrivilegeCalculator",
    "FeaturePrivilegeCalculator",
    "GLOBAL_SPACE_ID",
    "IncomparableActionsError",
    "MissingExplanationError",
    "NO_PRIVILEGE_VALUE",
    "PrivilegeCalculatorError",
    "PrivilegeCalculatorFactory",
    "PrivilegeExplanation",
    "PrivilegeSource",
    "Role",
    "Scenario",
    "UnsupportedPrivilegeSourceError",
    "compare_actions",
    "fully_covers",
    "rank_levels",
    "rank_scenarios",
    "source_rank",
    "space_base_grant_applies",
]
