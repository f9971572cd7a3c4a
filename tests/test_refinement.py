import numpy as np
import pytest

from drop_impact.physics import (
    AdaptResult,
    RefinementCriterion,
    RefinementPolicy,
    half_space_below,
)


@pytest.fixture
def policy(params, config):
    return RefinementPolicy.from_config(params, config.refinement)


def test_criteria_follow_fixed_order(policy, config):
    assert [c.field for c in policy.criteria] == ["f", "drop_tracer", "u.x", "u.y", "u.z"]
    thresholds = [c.threshold for c in policy.criteria]
    refinement = config.refinement
    assert thresholds == [
        refinement.interface_threshold,
        refinement.tracer_threshold,
        refinement.velocity_threshold,
        refinement.velocity_threshold,
        refinement.velocity_threshold,
    ]


def test_levels_from_config(policy, params):
    assert policy.max_level == params.max_level
    assert policy.min_level == params.max_level - 4
    assert policy.derefine_level == params.max_level - 2
    assert policy.derefine_radius == 2.0


def test_criterion_requires_positive_threshold():
    with pytest.raises(ValueError):
        RefinementCriterion("f", 0.0)


def test_policy_rejects_inverted_levels():
    with pytest.raises(ValueError):
        RefinementPolicy(criteria=[], max_level=5, min_level=6)


def test_derefine_level_defaults_to_max_level():
    policy = RefinementPolicy(criteria=[RefinementCriterion("f", 1e-3)], max_level=7, min_level=3)
    assert policy.derefine_level == 7


def test_disabled_criteria_are_skipped(policy):
    policy.criteria[1] = RefinementCriterion("drop_tracer", 1e-2, enabled=False)
    assert [c.field for c in policy.active_criteria] == ["f", "u.x", "u.y", "u.z"]


def test_diagnostic_fields_are_updated(policy, engine):
    _, y, _ = engine.coordinates()
    engine.set_field("u.z", y)
    engine.set_field("u.x", 3.0)
    policy.update_diagnostic_fields(engine)

    np.testing.assert_allclose(engine.field("omega"), 1.0)
    np.testing.assert_allclose(engine.field("velnorm"), np.sqrt(9.0 + y**2))


def test_adapt_keeps_levels_within_bounds(policy, engine):
    engine.set_field("f", engine.fraction(half_space_below(2.0)))
    for _ in range(6):
        policy.adapt(engine)

    levels = engine.levels()
    assert levels.min() >= policy.min_level
    assert levels.max() <= policy.max_level
    assert levels.max() == policy.max_level


def test_apply_limits_levels_away_from_impact_axis(policy, engine):
    engine.refine(lambda x, y, z: np.ones_like(x, dtype=bool), policy.max_level)
    engine.set_field("f", engine.fraction(half_space_below(2.0)))

    result = policy.apply(engine)
    assert isinstance(result, AdaptResult)
    assert result.changed
    assert result.derefined > 0

    x, _, z = engine.coordinates()
    levels = engine.levels()
    outside = x**2 + z**2 > policy.derefine_radius**2
    assert np.all(levels[outside] <= policy.max_level - 2)
    assert levels[~outside].max() == policy.max_level


def test_adapt_result_changed():
    assert not AdaptResult(0, 0).changed
    assert AdaptResult(0, 0, derefined=3).changed
