"""Data models for privilege resolution."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator, model_validator

NO_PRIVILEGE_VALUE = "none"
GLOBAL_SPACE_ID = "*"


class PrivilegeCalculatorError(Exception):
    """Base class for privilege calculation failures."""


class UnsupportedPrivilegeSourceError(PrivilegeCalculatorError):
    """Raised when a source is used where it can never apply."""

    def __init__(self, source: PrivilegeSource, operation: str):
        self.source = source
        self.operation = operation
        super().__init__(f"Cannot {operation} for unsupported privilege source {source.name}")


class IncomparableActionsError(PrivilegeCalculatorError):
    """Raised when neither of two action sets covers the other."""

    def __init__(self, left: frozenset[str], right: frozenset[str]):
        self.left = left
        self.right = right
        super().__init__(
            f"Non-comparable action sets: {sorted(left)} vs {sorted(right)}"
        )


class MissingExplanationError(PrivilegeCalculatorError):
    """Raised when effective privileges lack a feature's explanation."""

    def __init__(self, feature_id: str):
        self.feature_id = feature_id
        super().__init__(
            f"Effective privileges for feature '{feature_id}' are required to "
            "calculate its allowed privileges"
        )


class PrivilegeSource(str, Enum):
    """Where an effective privilege comes from."""

    GLOBAL_BASE = "global_base"
    GLOBAL_FEATURE = "global_feature"
    SPACE_BASE = "space_base"
    SPACE_FEATURE = "space_feature"
    NONE = "none"


# Lower rank is evaluated first and wins ties.
_SOURCE_RANK: dict[PrivilegeSource, int] = {
    PrivilegeSource.GLOBAL_BASE: 0,
    PrivilegeSource.GLOBAL_FEATURE: 1,
    PrivilegeSource.SPACE_BASE: 2,
    PrivilegeSource.SPACE_FEATURE: 3,
}


def source_rank(source: PrivilegeSource) -> int:
    """Return the priority rank of a scenario source."""
    try:
        return _SOURCE_RANK[source]
    except KeyError:
        raise UnsupportedPrivilegeSourceError(source, "rank scenarios") from None


@dataclass(frozen=True)
class Scenario:
    """One candidate source of effective access for a feature."""

    source: PrivilegeSource
    actions: frozenset[str]
    is_directly_assigned: bool
    superseded_privilege: str | None = None
    superseded_source: PrivilegeSource | None = None

    def __post_init__(self) -> None:
        if (self.superseded_privilege is None) != (self.superseded_source is None):
            raise ValueError("superseded_privilege and superseded_source must be set together")

    @property
    def supersedes(self) -> bool:
        return self.superseded_privilege is not None


class PrivilegeExplanation(BaseModel):
    """The effective privilege and why it was chosen."""

    model_config = ConfigDict(frozen=True)

    actual_privilege: str = Field(min_length=1)
    actual_privilege_source: PrivilegeSource
    is_directly_assigned: bool
    superseded_privilege: str | None = None
    superseded_privilege_source: PrivilegeSource | None = None

    @model_validator(mode="after")
    def check_superseded_pair(self) -> PrivilegeExplanation:
        if (self.superseded_privilege is None) != (self.superseded_privilege_source is None):
            raise ValueError(
                "superseded_privilege and superseded_privilege_source must be set together"
            )
        return self

    @classmethod
    def from_scenario(cls, privilege: str, scenario: Scenario) -> PrivilegeExplanation:
        if scenario.supersedes:
            return cls(
                actual_privilege=privilege,
                actual_privilege_source=scenario.source,
                is_directly_assigned=scenario.is_directly_assigned,
                superseded_privilege=scenario.superseded_privilege,
                superseded_privilege_source=scenario.superseded_source,
            )
        return cls(
            actual_privilege=privilege,
            actual_privilege_source=scenario.source,
            is_directly_assigned=scenario.is_directly_assigned,
        )

    @property
    def has_privilege(self) -> bool:
        return self.actual_privilege != NO_PRIVILEGE_VALUE


class AssignmentSpec(BaseModel):
    """Privileges assigned to a set of spaces, or globally.

    Empty ``spaces`` or a ``"*"`` entry marks the global assignment.
    ``"none"`` on input is treated as no assignment.
    """

    model_config = ConfigDict(frozen=True)

    spaces: list[str] = Field(default_factory=list)
    base: str | None = None
    feature: Mapping[str, str] = Field(default_factory=dict, validate_default=True)

    @field_validator("spaces")
    @classmethod
    def validate_spaces(cls, v: list[str]) -> list[str]:
        for space_id in v:
            if not space_id.strip():
                raise ValueError("space ids cannot be empty or whitespace")
        if GLOBAL_SPACE_ID in v and len(v) > 1:
            raise ValueError(f"'{GLOBAL_SPACE_ID}' cannot be combined with other spaces")
        return v

    @field_validator("base")
    @classmethod
    def normalize_base(cls, v: str | None) -> str | None:
        if v is None or v == NO_PRIVILEGE_VALUE:
            return None
        return v

    @field_validator("feature")
    @classmethod
    def normalize_feature(cls, v: Mapping[str, str]) -> Mapping[str, str]:
        return MappingProxyType(
            {fid: level for fid, level in v.items() if level != NO_PRIVILEGE_VALUE}
        )

    @field_serializer("feature")
    def serialize_feature(self, v: Mapping[str, str]) -> dict[str, str]:
        return dict(v)

    @property
    def is_global(self) -> bool:
        return not self.spaces or GLOBAL_SPACE_ID in self.spaces

    def assigned_feature_privilege(self, feature_id: str) -> str | None:
        return self.feature.get(feature_id)


class Role(BaseModel):
    """A named collection of assignment specs."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    privileges: list[AssignmentSpec] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_space_overlap(self) -> Role:
        if sum(1 for spec in self.privileges if spec.is_global) > 1:
            raise ValueError("a role can hold at most one global privilege spec")
        seen: set[str] = set()
        for spec in self.privileges:
            if spec.is_global:
                continue
            for space_id in spec.spaces:
                if space_id in seen:
                    raise ValueError(f"space '{space_id}' is assigned more than once")
                seen.add(space_id)
        return self

    @property
    def global_spec(self) -> AssignmentSpec:
        """The role's global spec, or an empty one."""
        for spec in self.privileges:
            if spec.is_global:
                return spec
        return AssignmentSpec(spaces=[GLOBAL_SPACE_ID])

    def spec_for_space(self, space_id: str) -> AssignmentSpec:
        """The spec covering *space_id*, or an empty spec for that space."""
        if space_id == GLOBAL_SPACE_ID:
            return self.global_spec
        for spec in self.privileges:
            if not spec.is_global and space_id in spec.spaces:
                return spec
        return AssignmentSpec(spaces=[space_id])


class CalculatedPrivilege(BaseModel):
    """Effective base and feature privileges for one assignment spec."""

    model_config = ConfigDict(frozen=True)

    base: PrivilegeExplanation
    feature: dict[str, PrivilegeExplanation] = Field(default_factory=dict)


class AllowedLevels(BaseModel):
    """Levels an operator may assign without being superseded."""

    model_config = ConfigDict(frozen=True)

    privileges: list[str] = Field(default_factory=list)
    can_unassign: bool = True


class AllowedPrivilege(BaseModel):
    model_config = ConfigDict(frozen=True)

    base: AllowedLevels
    feature: dict[str, AllowedLevels] = Field(default_factory=dict)
