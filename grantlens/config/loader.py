"""YAML config and document loading with env var expansion."""

import os
import re
from pathlib import Path

import yaml
from pydantic import ValidationError

from grantlens.calculator.models import Role
from grantlens.catalog.models import PrivilegeDefinitionSet

from .models import GrantlensConfig


def load_config(cli_path: str | None = None) -> GrantlensConfig:
    """Load config with resolution order: CLI > project-local > user-global > defaults."""
    config_paths = [
        Path(cli_path) if cli_path else None,
        Path("./grantlens.yaml"),
        Path.home() / ".grantlens" / "config.yaml",
    ]

    for path in config_paths:
        if path and path.exists():
            raw = _read_yaml(path)
            if raw is None:
                continue
            try:
                return GrantlensConfig(**raw)
            except ValidationError as e:
                raise ValueError(f"Invalid config in {path}: {e}") from e

    return GrantlensConfig()


def load_definitions(path: str | Path) -> PrivilegeDefinitionSet:
    """Load a privilege definition document (features and base levels)."""
    path = Path(path)
    raw = _read_yaml(path) or {}
    try:
        return PrivilegeDefinitionSet(**raw)
    except ValidationError as e:
        raise ValueError(f"Invalid privilege definitions in {path}: {e}") from e


def load_role(path: str | Path) -> Role:
    """Load a role document: a name and its list of assignment specs."""
    path = Path(path)
    raw = _read_yaml(path)
    if raw is None:
        raise ValueError(f"Empty role document: {path}")
    try:
        return Role(**raw)
    except ValidationError as e:
        raise ValueError(f"Invalid role in {path}: {e}") from e


def _read_yaml(path: Path) -> object:
    try:
        with open(path) as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {path}: {e}") from e
    if raw is not None and not isinstance(raw, dict):
        raise ValueError(f"Expected a mapping at the top of {path}")
    return _expand_env_vars(raw)


def _expand_env_vars(obj: object) -> object:
    """Recursively expand ${VAR} references in strings."""
    if isinstance(obj, str):
        return re.sub(r"\$\{(\w+)\}", lambda m: os.environ.get(m.group(1), ""), obj)
    elif isinstance(obj, dict):
        return {k: _expand_env_vars(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [_expand_env_vars(v) for v in obj]
    return obj


# Default YAML template for `grantlens config init`
DEFAULT_CONFIG_TEMPLATE = """\
# grantlens.yaml

# Privilege definitions (features, their levels, and base levels)
definitions:
  path: "privileges.yaml"

# Output
output:
  format: "table"              # table | json
  show_levels: false

# Logging
log_level: "info"              # debug | info | warn | error
log_format: "text"             # text | json
"""
