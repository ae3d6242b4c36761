"""grantlens - resolve and explain effective feature privileges across spaces."""

from grantlens.calculator import (
    AssignmentSpec,
    PrivilegeCalculatorFactory,
    PrivilegeExplanation,
    PrivilegeSource,
    Role,
)
from grantlens.catalog import InMemoryPrivilegeCatalog, PrivilegeDefinitionSet
from grantlens.config import GrantlensConfig, load_config, load_definitions, load_role
from grantlens.interfaces import PrivilegeCatalog

__version__ = "0.1.0"

__all__ = [
    "AssignmentSpec",
    "GrantlensConfig",
    "InMemoryPrivilegeCatalog",
    "PrivilegeCatalog",
    "PrivilegeCalculatorFactory",
    "PrivilegeDefinitionSet",
    "PrivilegeExplanation",
    "PrivilegeSource",
    "Role",
    "load_config",
    "load_definitions",
    "load_role",
]
