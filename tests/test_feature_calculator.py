"""Tests for feature privilege resolution: scenarios, ranking, explanations."""

from __future__ import annotations

import itertools

import pytest

from grantlens.calculator import (
    GLOBAL_SPACE_ID,
    NO_PRIVILEGE_VALUE,
    AssignmentSpec,
    BasePrivilegeCalculator,
    FeaturePrivilegeCalculator,
    PrivilegeExplanation,
    PrivilegeSource,
    Scenario,
    UnsupportedPrivilegeSourceError,
    fully_covers,
    rank_scenarios,
    source_rank,
    space_base_grant_applies,
)


def _global(base: str | None = None, **feature: str) -> AssignmentSpec:
    return AssignmentSpec(spaces=[GLOBAL_SPACE_ID], base=base, feature=feature)


def _space(space_id: str = "S", base: str | None = None, **feature: str) -> AssignmentSpec:
    return AssignmentSpec(spaces=[space_id], base=base, feature=feature)


def _calculators(catalog, factory, global_spec: AssignmentSpec):
    global_base_actions = (
        catalog.get_base_actions(global_spec.base) if global_spec.base else frozenset()
    )
    base = BasePrivilegeCalculator(catalog, global_spec.base, factory.ranked_base_levels)
    feature = FeaturePrivilegeCalculator(
        catalog, global_spec, global_base_actions, factory.ranked_feature_levels
    )
    return base, feature


# ── Documented example scenarios ─────────────────────────────────────


class TestExampleScenarios:
    def test_global_base_read_inherited_in_space(self, make_calculator):
        calc = make_calculator(_global(base="read"))
        result = calc.resolve("C", "S")
        assert result.actual_privilege == "read"
        assert result.actual_privilege_source == PrivilegeSource.GLOBAL_BASE
        assert result.is_directly_assigned is False
        assert result.superseded_privilege is None

    def test_direct_space_grant_wins_outright(self, make_calculator):
        calc = make_calculator(_global(base="read"), _space(C="all"))
        result = calc.resolve("C", "S")
        assert result.actual_privilege == "all"
        assert result.actual_privilege_source == PrivilegeSource.SPACE_FEATURE
        assert result.is_directly_assigned is True
        assert result.superseded_privilege is None
        assert result.superseded_privilege_source is None

    def test_global_base_supersedes_lesser_direct_grant(self, make_calculator):
        calc = make_calculator(_global(base="all"), _space(C="read"))
        result = calc.resolve("C", "S")
        assert result == PrivilegeExplanation(
            actual_privilege="all",
            actual_privilege_source=PrivilegeSource.GLOBAL_BASE,
            is_directly_assigned=False,
            superseded_privilege="read",
            superseded_privilege_source=PrivilegeSource.SPACE_FEATURE,
        )

    def test_ignore_assigned_drops_supersession(self, make_calculator):
        calc = make_calculator(_global(base="all"), _space(C="read"))
        result = calc.resolve("C", "S", ignore_assigned=True)
        assert result.actual_privilege == "all"
        assert result.actual_privilege_source == PrivilegeSource.GLOBAL_BASE
        assert result.superseded_privilege is None
        assert result.superseded_privilege_source is None

    def test_no_grants_anywhere(self, make_calculator):
        calc = make_calculator()
        result = calc.resolve("C", "S")
        assert result == PrivilegeExplanation(
            actual_privilege=NO_PRIVILEGE_VALUE,
            actual_privilege_source=PrivilegeSource.SPACE_FEATURE,
            is_directly_assigned=True,
        )


# ── Global scope ─────────────────────────────────────────────────────


class TestGlobalScope:
    def test_no_grants_reports_global_feature(self, make_calculator):
        result = make_calculator().resolve("C", GLOBAL_SPACE_ID)
        assert result.actual_privilege == NO_PRIVILEGE_VALUE
        assert result.actual_privilege_source == PrivilegeSource.GLOBAL_FEATURE
        assert result.is_directly_assigned is True

    def test_direct_global_feature_grant(self, make_calculator):
        result = make_calculator(_global(C="all")).resolve("C", GLOBAL_SPACE_ID)
        assert result.actual_privilege == "all"
        assert result.actual_privilege_source == PrivilegeSource.GLOBAL_FEATURE
        assert result.is_directly_assigned is True
        assert result.superseded_privilege is None

    def test_global_base_supersedes_global_feature(self, make_calculator):
        result = make_calculator(_global(base="read", C="read")).resolve("C", GLOBAL_SPACE_ID)
        assert result.actual_privilege == "read"
        assert result.actual_privilege_source == PrivilegeSource.GLOBAL_BASE
        assert result.superseded_privilege == "read"
        assert result.superseded_privilege_source == PrivilegeSource.GLOBAL_FEATURE

    def test_ignore_assigned_leaves_only_global_base(self, catalog, factory):
        spec = _global(base="read", C="all")
        base, feature = _calculators(catalog, factory, spec)
        base_explanation = base.most_permissive_base_privilege(spec, ignore_assigned=True)
        scenarios = feature.build_scenarios(spec, base_explanation, "C", ignore_assigned=True)
        assert [s.source for s in scenarios] == [PrivilegeSource.GLOBAL_BASE]
        assert not scenarios[0].supersedes

    def test_scope_local_sources_never_built(self, catalog, factory):
        spec = _global(base="all", C="read")
        base, feature = _calculators(catalog, factory, spec)
        scenarios = feature.build_scenarios(spec, base.most_permissive_base_privilege(spec), "C")
        assert {s.source for s in scenarios} == {
            PrivilegeSource.GLOBAL_BASE,
            PrivilegeSource.GLOBAL_FEATURE,
        }


# ── Space scope sources ──────────────────────────────────────────────


class TestSpaceScope:
    def test_global_feature_supersedes_space_feature(self, make_calculator):
        calc = make_calculator(_global(C="all"), _space(C="read"))
        result = calc.resolve("C", "S")
        assert result.actual_privilege == "all"
        assert result.actual_privilege_source == PrivilegeSource.GLOBAL_FEATURE
        assert result.is_directly_assigned is False
        assert result.superseded_privilege == "read"
        assert result.superseded_privilege_source == PrivilegeSource.SPACE_FEATURE

    def test_space_base_grants_feature(self, make_calculator):
        result = make_calculator(_space(base="all")).resolve("C", "S")
        assert result.actual_privilege == "all"
        assert result.actual_privilege_source == PrivilegeSource.SPACE_BASE
        assert result.is_directly_assigned is False

    def test_tie_goes_to_more_global_source(self, make_calculator):
        calc = make_calculator(_global(base="read"), _space(base="read", C="read"))
        result = calc.resolve("C", "S")
        assert result.actual_privilege == "read"
        assert result.actual_privilege_source == PrivilegeSource.GLOBAL_BASE
        assert result.superseded_privilege == "read"
        assert result.superseded_privilege_source == PrivilegeSource.SPACE_FEATURE

    def test_less_global_source_with_higher_level_is_found(self, make_calculator):
        calc = make_calculator(_global(base="read"), _space(base="all"))
        result = calc.resolve("C", "S")
        assert result.actual_privilege == "all"
        assert result.actual_privilege_source == PrivilegeSource.SPACE_BASE

    def test_superseded_space_base_still_contributes(self, catalog, factory):
        global_spec = _global(base="all")
        spec = _space(base="read")
        base, feature = _calculators(catalog, factory, global_spec)
        base_explanation = base.most_permissive_base_privilege(spec)
        assert base_explanation.actual_privilege_source == PrivilegeSource.GLOBAL_BASE
        assert base_explanation.superseded_privilege_source == PrivilegeSource.SPACE_BASE

        scenarios = feature.build_scenarios(spec, base_explanation, "C")
        space_base = next(s for s in scenarios if s.source == PrivilegeSource.SPACE_BASE)
        assert space_base.actions == catalog.get_base_actions("read")

    def test_space_base_scenario_omitted_when_base_inherited(self, catalog, factory):
        global_spec = _global(base="read")
        spec = _space()
        base, feature = _calculators(catalog, factory, global_spec)
        base_explanation = base.most_permissive_base_privilege(spec)
        assert not space_base_grant_applies(base_explanation)
        sources = [s.source for s in feature.build_scenarios(spec, base_explanation, "C")]
        assert PrivilegeSource.SPACE_BASE not in sources

    def test_space_feature_scenario_is_direct_and_never_supersedes(self, catalog, factory):
        spec = _space(C="read")
        base, feature = _calculators(catalog, factory, _global(base="all"))
        scenarios = feature.build_scenarios(spec, base.most_permissive_base_privilege(spec), "C")
        space_feature = scenarios[-1]
        assert space_feature.source == PrivilegeSource.SPACE_FEATURE
        assert space_feature.is_directly_assigned is True
        assert not space_feature.supersedes

    def test_ignore_assigned_excludes_space_feature(self, catalog, factory):
        spec = _space(C="all")
        base, feature = _calculators(catalog, factory, _global())
        base_explanation = base.most_permissive_base_privilege(spec, ignore_assigned=True)
        scenarios = feature.build_scenarios(spec, base_explanation, "C", ignore_assigned=True)
        assert PrivilegeSource.SPACE_FEATURE not in [s.source for s in scenarios]
        assert not any(s.supersedes for s in scenarios)

        result = feature.most_permissive_feature_privilege(
            spec, base_explanation, "C", ignore_assigned=True
        )
        assert result.actual_privilege == NO_PRIVILEGE_VALUE

    def test_unassigned_space_uses_empty_spec(self, make_calculator):
        calc = make_calculator(_global(base="read"), _space("other", C="all"))
        assert calc.resolve("C", "S").actual_privilege == "read"
        assert calc.resolve("C", "other").actual_privilege == "all"

    def test_spec_covering_several_spaces(self, make_calculator):
        calc = make_calculator(AssignmentSpec(spaces=["a", "b"], feature={"D": "all"}))
        assert calc.resolve("D", "a").actual_privilege == "all"
        assert calc.resolve("D", "b").actual_privilege == "all"
        assert calc.resolve("D", "c").actual_privilege == NO_PRIVILEGE_VALUE


# ── Ranking and contract violations ──────────────────────────────────


class TestRanking:
    def test_source_rank_order(self):
        ranks = [
            source_rank(PrivilegeSource.GLOBAL_BASE),
            source_rank(PrivilegeSource.GLOBAL_FEATURE),
            source_rank(PrivilegeSource.SPACE_BASE),
            source_rank(PrivilegeSource.SPACE_FEATURE),
        ]
        assert ranks == sorted(ranks)
        assert len(set(ranks)) == 4

    def test_none_source_has_no_rank(self):
        with pytest.raises(UnsupportedPrivilegeSourceError):
            source_rank(PrivilegeSource.NONE)

    def test_rank_scenarios_sorts_by_source(self):
        scenarios = [
            Scenario(PrivilegeSource.SPACE_FEATURE, frozenset(), True),
            Scenario(PrivilegeSource.GLOBAL_FEATURE, frozenset(), False),
            Scenario(PrivilegeSource.SPACE_BASE, frozenset(), False),
            Scenario(PrivilegeSource.GLOBAL_BASE, frozenset(), False),
        ]
        assert [s.source for s in rank_scenarios(scenarios)] == [
            PrivilegeSource.GLOBAL_BASE,
            PrivilegeSource.GLOBAL_FEATURE,
            PrivilegeSource.SPACE_BASE,
            PrivilegeSource.SPACE_FEATURE,
        ]

    def test_base_actions_for_feature_source_fails_fast(self, catalog, factory):
        _, feature = _calculators(catalog, factory, _global())
        with pytest.raises(UnsupportedPrivilegeSourceError) as exc_info:
            feature._base_actions(PrivilegeSource.SPACE_FEATURE, "all")
        assert exc_info.value.source == PrivilegeSource.SPACE_FEATURE


# ── Exhaustive properties over the sample catalog ────────────────────


_LEVELS = (None, "read", "all")


def _all_assignments():
    for gb, gc, sb, sc, ignore in itertools.product(_LEVELS, _LEVELS, _LEVELS, _LEVELS, (False, True)):
        global_spec = _global(base=gb, **({"C": gc} if gc else {}))
        space_spec = _space(base=sb, **({"C": sc} if sc else {}))
        yield global_spec, space_spec, ignore


@pytest.mark.parametrize("scope", ["global", "space"])
def test_resolution_properties(catalog, factory, scope):
    levels = factory.ranked_feature_levels["C"]
    for global_spec, space_spec, ignore in _all_assignments():
        spec = global_spec if scope == "global" else space_spec
        base, feature = _calculators(catalog, factory, global_spec)
        base_explanation = base.most_permissive_base_privilege(spec, ignore)
        scenarios = feature.build_scenarios(spec, base_explanation, "C", ignore)
        result = feature.most_permissive_feature_privilege(spec, base_explanation, "C", ignore)

        covering = [
            (level, s)
            for level in levels
            for s in scenarios
            if fully_covers(s.actions, catalog.get_actions("C", level))
        ]
        if not covering:
            assert result.actual_privilege == NO_PRIVILEGE_VALUE
            assert result.is_directly_assigned is True
            continue

        best_level, best_scenario = covering[0]
        # Most permissive level wins; among its covering sources, lowest rank wins.
        assert result.actual_privilege == best_level
        assert result.actual_privilege_source == best_scenario.source
        assert result.is_directly_assigned == best_scenario.is_directly_assigned
        # Superseded fields appear iff the winning scenario records one,
        # and they name the originally assigned level.
        assert (result.superseded_privilege is not None) == best_scenario.supersedes
        if best_scenario.supersedes:
            assert result.superseded_privilege == spec.assigned_feature_privilege("C")
            assert not ignore

        if scope == "global":
            assert result.actual_privilege_source in (
                PrivilegeSource.GLOBAL_BASE,
                PrivilegeSource.GLOBAL_FEATURE,
            )
        if ignore:
            assert not (
                result.is_directly_assigned
                and result.actual_privilege_source
                in (PrivilegeSource.GLOBAL_FEATURE, PrivilegeSource.SPACE_FEATURE)
                and result.actual_privilege != NO_PRIVILEGE_VALUE
            )
