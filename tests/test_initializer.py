import logging
import math

import numpy as np
import pytest

from drop_impact.engine import SolverControls, UniformGridEngine
from drop_impact.physics import derive_parameters
from drop_impact.simulations import InitialStateBuilder

from conftest import make_config


def fine_config(tmp_path, **case_overrides):
    return make_config(tmp_path, **case_overrides).load(
        {"numerical": {"base_level": 5, "max_subsamples": 8}}
    )


def make_builder(config, logger=None):
    params = derive_parameters(config.physics, config.case, config.refinement.level_span)
    engine = UniformGridEngine(
        domain_size=config.case.domain_size,
        base_level=config.numerical.base_level,
        max_subsamples=config.numerical.max_subsamples,
    )
    return InitialStateBuilder(params, config, engine, logger=logger), engine


@pytest.fixture(scope="module")
def built(tmp_path_factory):
    config = fine_config(tmp_path_factory.mktemp("initial"))
    builder, engine = make_builder(config)
    start = builder.initialize()
    return builder, engine, start


def test_fresh_start(built):
    _, _, start = built
    assert (start.iteration, start.time, start.restored) == (0, 0.0, False)


def test_liquid_volume_is_pool_plus_half_drop(built):
    _, engine, _ = built
    # 液滴中心は x = 0 の対称面上にあるため領域内には半球だけが入る
    expected = 8.0 * 8.0 * 2.0 + 2.0 * math.pi / 3.0
    assert engine.statistics("f").sum == pytest.approx(expected, abs=0.05)


def test_tracers_are_bounded_and_disjoint(built):
    _, engine, _ = built
    drop = engine.field("drop_tracer")
    pool = engine.field("pool_tracer")
    for tracer in (drop, pool, engine.field("f")):
        assert tracer.min() >= 0.0
        assert tracer.max() <= 1.0
    assert np.all(drop + pool <= 1.0 + 1e-12)
    np.testing.assert_allclose(engine.field("f"), drop + pool, atol=1e-12)


def test_interface_is_prerefined_to_max_level(built):
    builder, engine, _ = built
    levels = engine.levels()
    assert levels.max() == builder.params.max_level

    # 液面をまたぐ2層（y = 1.75..2.25）
    assert np.all(levels[:, 7:9, :] == builder.params.max_level)
    # 液滴の下端 (0, 2.1, 0) を含むセル
    assert levels[0, 8, 16] == builder.params.max_level
    # 液滴からも液面からも離れた領域は細分化されない
    assert np.all(levels[:, :6, :] == builder.config.numerical.base_level)


def test_drop_moves_with_impact_velocity(built):
    builder, engine, _ = built
    x, y, z = engine.coordinates()
    inside = builder.geometry.inside_drop(x, y, z)
    assert inside.any()
    assert np.all(engine.field("u.y")[inside] == pytest.approx(-1.0))
    assert np.all(engine.field("u.z")[inside] == pytest.approx(0.0, abs=1e-12))
    # 液滴から離れた気相と液槽は静止
    assert np.all(engine.field("u.y")[y < 1.5] == 0.0)


def test_solver_controls_are_reset(built):
    builder, engine, _ = built
    numerical = builder.config.numerical
    assert engine.solver_controls == SolverControls(
        max_dt=numerical.max_dt,
        min_iterations=numerical.min_iterations,
        max_iterations=numerical.max_iterations,
        tolerance=numerical.tolerance,
    )


def test_oblique_drop_velocity_and_pool_flow(config_factory):
    config = config_factory(impact_angle=30.0, pool_velocity=0.5)
    builder, engine = make_builder(config)
    builder.build()

    x, y, z = engine.coordinates()
    inside = builder.geometry.inside_drop(x, y, z)
    assert np.all(engine.field("u.y")[inside] == pytest.approx(-0.5))
    assert np.all(engine.field("u.z")[inside] == pytest.approx(-math.sqrt(3.0) / 2.0))

    outside = ~builder.geometry.inside_drop(x, y, z, margin=1.05)
    expected = 0.5 * engine.field("f")[outside]
    np.testing.assert_allclose(engine.field("u.z")[outside], expected)


def test_parameters_are_logged(config, caplog):
    caplog.set_level(logging.INFO)
    builder, _ = make_builder(config, logger=logging.getLogger("test.initializer"))
    builder.build()
    messages = [record.getMessage() for record in caplog.records]
    for name in ("Re", "We", "Fr", "density_ratio", "viscosity_ratio"):
        assert any(message.startswith(f"{name} = ") for message in messages)


def test_restore_skips_geometric_build(config, tmp_path):
    builder, engine = make_builder(config)
    engine.set_field("u.x", 0.25)
    checkpoint = tmp_path / "restart"
    engine.dump(checkpoint, 42, 0.042)

    fresh_builder, fresh_engine = make_builder(config)
    start = fresh_builder.initialize(checkpoint)

    assert (start.iteration, start.time, start.restored) == (42, 0.042, True)
    assert fresh_engine.field("f").max() == 0.0
    assert np.all(fresh_engine.field("u.x") == 0.25)
    assert np.all(fresh_engine.levels() == config.numerical.base_level)


def test_missing_checkpoint_builds_from_geometry(config, tmp_path):
    builder, engine = make_builder(config)
    start = builder.initialize(tmp_path / "missing")
    assert not start.restored
    assert engine.field("f").max() == 1.0
