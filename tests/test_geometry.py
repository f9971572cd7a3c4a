import numpy as np
import pytest

from drop_impact.config import GeometryConfig
from drop_impact.physics import (
    ImpactGeometry,
    OffsetLaw,
    derive_parameters,
    half_space_below,
    impact_velocity,
    intersection,
    outside_cylinder,
    shell,
    slab,
    sphere,
    union,
)


def test_sphere_is_positive_inside():
    phi = sphere((0.0, 1.0, 0.0), 0.5)
    values = phi(np.array([0.0, 1.0, 0.5]), np.array([1.0, 1.0, 1.0]), np.zeros(3))
    assert values[0] == pytest.approx(0.25)
    assert values[1] < 0
    assert values[2] == pytest.approx(0.0)


def test_half_space_below():
    phi = half_space_below(2.0)
    y = np.array([1.0, 2.0, 3.0])
    assert list(phi(np.zeros(3), y, np.zeros(3))) == [1.0, 0.0, -1.0]


def test_union_and_intersection_combine_pointwise():
    a = half_space_below(1.0)
    b = sphere((0.0, 3.0, 0.0), 1.0)
    x = np.zeros(3)
    y = np.array([0.0, 3.0, 1.5])
    z = np.zeros(3)

    combined = union(a, b)(x, y, z)
    common = intersection(a, b)(x, y, z)
    assert combined[0] > 0 and combined[1] > 0
    assert combined[2] < 0
    assert np.all(common < 0)
    assert np.allclose(combined, np.maximum(a(x, y, z), b(x, y, z)))


def test_combinators_require_arguments():
    with pytest.raises(ValueError):
        union()
    with pytest.raises(ValueError):
        intersection()


def test_shell_and_slab_predicates():
    inside = shell((0.0, 0.0, 0.0), 1.0, 0.975, 1.025)
    r = np.array([0.9, 0.99, 1.01, 1.1])
    assert list(inside(r, np.zeros(4), np.zeros(4))) == [False, True, True, False]

    band = slab(2.0, 0.025)
    y = np.array([1.9, 1.99, 2.02, 2.1])
    assert list(band(np.zeros(4), y, np.zeros(4))) == [False, True, True, False]

    far = outside_cylinder(2.0)
    assert list(far(np.array([0.0, 3.0]), np.zeros(2), np.array([1.0, 0.0]))) == [
        False,
        True,
    ]


def test_offset_law_matches_fitted_relation():
    law = OffsetLaw()
    assert law.offset(15.0) == pytest.approx(1.25, abs=1e-3)
    assert law.offset(90.0) == 0.0
    assert law.offset(120.0) == 0.0


def test_offset_decreases_monotonically_below_cutoff():
    law = OffsetLaw()
    angles = np.linspace(15.0, 89.9, 50)
    offsets = [law.offset(a) for a in angles]
    assert all(a > b for a, b in zip(offsets, offsets[1:]))


def test_offset_law_from_config():
    config = GeometryConfig(offset_slope=-0.02, offset_intercept=1.0, offset_cutoff_angle=45.0)
    law = OffsetLaw.from_config(config)
    assert law.offset(10.0) == pytest.approx(0.8)
    assert law.offset(45.0) == 0.0


def test_impact_velocity_has_unit_magnitude():
    assert impact_velocity(90.0) == pytest.approx((0.0, -1.0, 0.0))
    assert np.linalg.norm(impact_velocity(37.0)) == pytest.approx(1.0)


def test_oblique_geometry_at_fifteen_degrees(config_factory):
    config = config_factory(impact_angle=15.0)
    params = derive_parameters(config.physics, config.case)
    geometry = ImpactGeometry.from_parameters(params, config.geometry)

    assert geometry.drop_center[0] == 0.0
    assert geometry.drop_center[1] == pytest.approx(2.0 + 1.0 + 0.1)
    assert geometry.drop_center[2] == pytest.approx(1.25, abs=1e-3)
    assert geometry.drop_velocity == pytest.approx((0.0, -0.2588, -0.9659), abs=1e-4)


def test_normal_geometry_has_no_offset(params, config):
    geometry = ImpactGeometry.from_parameters(params, config.geometry)
    assert geometry.drop_center == pytest.approx((0.0, 3.1, 0.0))
    assert geometry.pool_height == pytest.approx(2.0)
    assert geometry.drop_radius == 1.0

    x = np.array([0.0, 0.0])
    y = np.array([3.1, 1.0])
    z = np.array([0.0, 0.0])
    assert np.all(geometry.liquid(x, y, z) > 0)
    assert geometry.drop(x, y, z)[1] < 0
    assert geometry.pool(x, y, z)[0] < 0
