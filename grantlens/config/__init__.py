from .loader import load_config, load_definitions, load_role
from .models import (
    DefinitionsConfig,
    GrantlensConfig,
    OutputConfig,
)

__all__ = [
    "DefinitionsConfig",
    "GrantlensConfig",
    "OutputConfig",
    "load_config",
    "load_definitions",
    "load_role",
]
