import numpy as np
import pytest

from drop_impact.core.boundary import DirichletBoundary
from drop_impact.data_io import read_facets
from drop_impact.engine import SolverControls, UniformGridEngine
from drop_impact.physics import half_space_below, outside_cylinder, shell, slab, sphere


def test_grid_layout(engine):
    x, y, z = engine.coordinates()
    assert x.shape == (16, 16, 16)
    assert engine.spacing == pytest.approx(0.5)
    assert x.min() == pytest.approx(0.25)
    assert z.min() == pytest.approx(-3.75)
    assert z.max() == pytest.approx(3.75)
    assert engine.cell_count() == 16**3


def test_rejects_invalid_construction():
    with pytest.raises(ValueError):
        UniformGridEngine(domain_size=0.0)
    with pytest.raises(ValueError):
        UniformGridEngine(domain_size=1.0, base_level=0)


def test_unknown_field_raises(engine):
    with pytest.raises(KeyError):
        engine.field("temperature")
    with pytest.raises(KeyError):
        engine.set_field("temperature", 0.0)


def test_fraction_of_face_aligned_pool_is_exact(engine):
    engine.set_field("f", engine.fraction(half_space_below(2.0)))
    stats = engine.statistics("f")
    assert stats.minimum == 0.0
    assert stats.maximum == 1.0
    assert stats.sum == pytest.approx(8.0 * 8.0 * 2.0)


def test_fraction_of_sphere_is_partial_on_surface(engine):
    f = engine.fraction(sphere((4.0, 4.0, 0.0), 1.5))
    assert np.any((f > 0.0) & (f < 1.0))
    volume = f.sum() * engine.spacing**3
    assert volume == pytest.approx(4.0 / 3.0 * np.pi * 1.5**3, rel=0.15)


def test_refine_marks_cells_and_updates_cell_count(engine):
    count = engine.refine(shell((4.0, 4.0, 0.0), 1.0, 0.975, 1.025), 6)
    assert count > 0

    levels = engine.levels()
    assert set(np.unique(levels)) == {4, 6}
    assert engine.cell_count() == 16**3 + count * (8**2 - 1)
    # 既に到達しているセルは数えない
    assert engine.refine(shell((4.0, 4.0, 0.0), 1.0, 0.975, 1.025), 6) == 0


def test_unrefine_caps_levels_outside_region(engine):
    engine.refine(lambda x, y, z: np.ones_like(x, dtype=bool), 6)
    capped = engine.unrefine(outside_cylinder(2.0), 5)
    assert capped > 0

    x, _, z = engine.coordinates()
    levels = engine.levels()
    outside = x**2 + z**2 > 4.0
    assert np.all(levels[outside] == 5)
    assert np.all(levels[~outside] == 6)


def test_adapt_wavelet_refines_interface_rows_only(engine):
    engine.set_field("f", engine.fraction(half_space_below(2.0)))
    refined, coarsened = engine.adapt_wavelet(["f"], [1e-2], max_level=6, min_level=4)

    assert refined == 2 * 16 * 16
    assert coarsened == 0
    levels = engine.levels()
    assert np.all(levels[:, 3:5, :] == 5)
    assert np.all(levels[:, :3, :] == 4)


def test_adapt_wavelet_coarsens_smooth_regions(engine):
    engine.refine(lambda x, y, z: np.ones_like(x, dtype=bool), 6)
    refined, coarsened = engine.adapt_wavelet(["f"], [1e-2], max_level=6, min_level=4)
    assert refined == 0
    assert coarsened == 16**3
    assert np.all(engine.levels() == 5)


def test_adapt_wavelet_validates_arguments(engine):
    with pytest.raises(ValueError):
        engine.adapt_wavelet(["f", "u.x"], [1e-2], 6, 4)
    with pytest.raises(ValueError):
        engine.adapt_wavelet(["f"], [1e-2], 4, 6)


def test_vorticity_is_normal_to_x_slices(engine):
    _, y, _ = engine.coordinates()
    engine.set_field("u.z", y)
    np.testing.assert_allclose(engine.vorticity(), 1.0)


def test_interface_extent(engine):
    assert np.isnan(engine.interface_extent().as_tuple()).all()

    engine.set_field("f", engine.fraction(sphere((4.0, 4.0, 0.0), 1.0)))
    extent = engine.interface_extent()
    assert extent.x_min < 4.0 < extent.x_max
    assert extent.y_min == pytest.approx(3.25, abs=0.5)
    assert extent.z_max == pytest.approx(0.75, abs=0.5)


def test_remove_droplets_drops_small_structures(engine):
    f = engine.fraction(half_space_below(2.0))
    f[8, 12, 8] = 1.0
    engine.set_field("f", f)

    assert engine.remove_droplets("f", 8) == 1
    result = engine.field("f")
    assert result[8, 12, 8] == 0.0
    assert result.sum() == pytest.approx(16 * 16 * 4)


def test_remove_droplets_measures_size_in_finest_cells(engine):
    f = np.zeros((16, 16, 16))
    f[8, 12, 8] = 1.0
    engine.set_field("f", f)
    drop = sphere((4.25, 6.25, 0.25), 0.2)
    assert engine.refine(lambda x, y, z: drop(x, y, z) > 0, 5) == 1

    # レベル5のセル1個は最細セル8個分
    assert engine.remove_droplets("f", 1) == 0
    engine.unrefine(lambda x, y, z: np.ones_like(x, dtype=bool), 4)
    assert engine.remove_droplets("f", 1) == 1
    assert engine.field("f").max() == 0.0


def test_remove_droplets_fills_small_bubbles(engine):
    f = engine.fraction(half_space_below(2.0))
    f[8, 1, 8] = 0.0
    engine.set_field("f", f)

    assert engine.remove_droplets("f", 8, bubbles=True) == 1
    assert engine.field("f")[8, 1, 8] == 1.0
    # 上部の気相は大きいので残る
    assert engine.field("f")[8, 12, 8] == 0.0


def test_output_facets_writes_triangles(engine, tmp_path):
    f = engine.fraction(sphere((4.0, 4.0, 0.0), 1.5))
    path = tmp_path / "facets.dat"
    count = engine.output_facets(f, path)

    assert count > 0
    facets = read_facets(path)
    assert len(facets) == count
    assert all(facet.shape == (3, 3) for facet in facets)
    points = np.concatenate(facets)
    radii = np.linalg.norm(points - np.array([4.0, 4.0, 0.0]), axis=1)
    assert radii.max() < 1.5 + 2 * engine.spacing


def test_output_facets_without_interface_is_empty(engine, tmp_path):
    path = tmp_path / "empty.dat"
    assert engine.output_facets(np.zeros((16, 16, 16)), path) == 0
    assert path.read_text() == ""


def test_dump_and_restore_round_trip(engine, tmp_path):
    engine.set_field("f", engine.fraction(half_space_below(2.0)))
    engine.set_field("u.y", -1.0)
    engine.refine(slab(2.0, 0.1), 6)
    path = tmp_path / "restart"
    engine.dump(path, 12, 0.5)

    other = UniformGridEngine(domain_size=8.0, base_level=4)
    assert other.restore(path) == (12, 0.5)
    np.testing.assert_array_equal(other.field("f"), engine.field("f"))
    np.testing.assert_array_equal(other.field("u.y"), engine.field("u.y"))
    np.testing.assert_array_equal(other.levels(), engine.levels())


def test_restore_missing_file_returns_none(engine, tmp_path):
    assert engine.restore(tmp_path / "missing") is None


def test_restore_rejects_mismatched_grid(engine, tmp_path):
    path = tmp_path / "restart"
    engine.dump(path, 1, 0.1)
    with pytest.raises(ValueError):
        UniformGridEngine(domain_size=8.0, base_level=3).restore(path)


def test_timestep_respects_controls_and_cfl(engine):
    assert engine.timestep(1.0) == pytest.approx(1e-3)
    engine.set_solver_controls(SolverControls(max_dt=5e-4))
    assert engine.timestep(1.0) == pytest.approx(5e-4)
    assert engine.timestep(1e-4) == pytest.approx(1e-4)

    engine.set_field("u.x", 2000.0)
    assert engine.timestep(1.0) == pytest.approx(0.8 * 0.5 / 2000.0)


def test_advance_applies_acceleration(engine):
    engine.set_acceleration((0.0, -2.0, 0.0))
    engine.advance(0.1)
    np.testing.assert_allclose(engine.field("u.y"), -0.2)
    np.testing.assert_allclose(engine.field("u.x"), 0.0)

    with pytest.raises(ValueError):
        engine.advance(0.0)
    with pytest.raises(ValueError):
        engine.set_acceleration((0.0, -1.0))


def test_boundary_conditions_applied_on_advance(engine):
    engine.set_boundary_conditions({"p": [DirichletBoundary.at("top", 3.0)]})
    engine.advance(1e-3)
    assert np.all(engine.field("p")[:, -1, :] == 3.0)
    assert np.all(engine.field("p")[:, 0, :] == 0.0)

    with pytest.raises(KeyError):
        engine.set_boundary_conditions({"q": []})


def test_slice_supports_levels(engine):
    engine.refine(slab(2.0, 0.1), 6)
    levels = engine.slice("level", axis=0, position=0.0)
    assert levels.shape == (16, 16)
    assert levels.max() == 6.0
    assert engine.slice("f").shape == (16, 16)


def test_diagnostics_summary(engine):
    diagnostics = engine.get_diagnostics()
    assert diagnostics["cells"] == 16**3
