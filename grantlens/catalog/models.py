"""Privilege definition documents."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from grantlens.calculator.models import NO_PRIVILEGE_VALUE


class PrivilegeDefinitionSet(BaseModel):
    """Actions granted by every feature level and base level.

    ``features`` maps feature id -> level -> actions; ``base`` maps
    base level -> actions.
    """

    features: dict[str, dict[str, list[str]]] = Field(default_factory=dict)
    base: dict[str, list[str]] = Field(default_factory=dict)

    @field_validator("features")
    @classmethod
    def validate_features(cls, v: dict[str, dict[str, list[str]]]) -> dict[str, dict[str, list[str]]]:
        for feature_id, levels in v.items():
            if not feature_id.strip():
                raise ValueError("feature ids cannot be empty or whitespace")
            _check_levels(levels, f"feature '{feature_id}'")
        return v

    @field_validator("base")
    @classmethod
    def validate_base(cls, v: dict[str, list[str]]) -> dict[str, list[str]]:
        _check_levels(v, "base privileges")
        return v


def _check_levels(levels: dict[str, list[str]], where: str) -> None:
    for level in levels:
        if not level.strip():
            raise ValueError(f"{where}: level names cannot be empty or whitespace")
        if level == NO_PRIVILEGE_VALUE:
            raise ValueError(f"{where}: '{NO_PRIVILEGE_VALUE}' is reserved")
