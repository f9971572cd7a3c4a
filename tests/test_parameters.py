import math

import numpy as np
import pytest

from drop_impact.config import CaseConfig, PhaseConfig, PhysicsConfig
from drop_impact.physics import derive_coefficients, derive_numbers, derive_parameters


def test_dimensionless_numbers_follow_definitions():
    numbers = derive_numbers(
        liquid_density=1089.0,
        liquid_viscosity=3.0e-3,
        surface_tension=70.3e-3,
        gravity=9.81,
        drop_radius=1.0e-3,
        drop_velocity=2.0,
    )
    assert numbers.reynolds == pytest.approx(1089.0 * 2.0 * 1.0e-3 / 3.0e-3)
    assert numbers.froude == pytest.approx(2.0 / math.sqrt(9.81 * 1.0e-3))
    assert numbers.weber == pytest.approx(1089.0 * 4.0 * 1.0e-3 / 70.3e-3)


@pytest.mark.parametrize("velocity", [0.1, 1.0, 7.5])
@pytest.mark.parametrize("radius", [1.0e-4, 1.0e-3, 1.0])
def test_numbers_are_finite_and_positive(velocity, radius):
    numbers = derive_numbers(1000.0, 1.0e-3, 0.07, 9.81, radius, velocity)
    for value in (numbers.reynolds, numbers.froude, numbers.weber):
        assert math.isfinite(value)
        assert value > 0


@pytest.mark.parametrize(
    "kwargs",
    [
        {"liquid_density": 0.0},
        {"liquid_viscosity": -1.0},
        {"surface_tension": 0.0},
        {"gravity": 0.0},
        {"drop_radius": 0.0},
        {"drop_velocity": -2.0},
        {"drop_velocity": float("nan")},
        {"gravity": float("inf")},
    ],
)
def test_invalid_inputs_raise(kwargs):
    inputs = {
        "liquid_density": 1089.0,
        "liquid_viscosity": 3.0e-3,
        "surface_tension": 70.3e-3,
        "gravity": 9.81,
        "drop_radius": 1.0,
        "drop_velocity": 1.0,
    }
    inputs.update(kwargs)
    with pytest.raises(ValueError):
        derive_numbers(**inputs)


def test_coefficients_are_nondimensional(unit_case):
    params = derive_parameters(PhysicsConfig(), unit_case)
    coefficients = params.coefficients

    assert coefficients.liquid_viscosity == pytest.approx(1.0 / params.reynolds)
    assert coefficients.gas_viscosity == pytest.approx(
        coefficients.liquid_viscosity / (3.0e-3 / 1.8e-5)
    )
    assert coefficients.liquid_density == 1.0
    assert coefficients.gas_density == pytest.approx(1.2 / 1089.0)
    assert coefficients.surface_tension == pytest.approx(1.0 / params.weber)


def test_mixture_properties_interpolate_between_phases(unit_case):
    coefficients = derive_parameters(PhysicsConfig(), unit_case).coefficients

    assert coefficients.mixture_viscosity(1.0) == pytest.approx(coefficients.liquid_viscosity)
    assert coefficients.mixture_viscosity(0.0) == pytest.approx(coefficients.gas_viscosity)
    assert coefficients.mixture_density(np.array([0.0, 1.0])) == pytest.approx(
        [coefficients.gas_density, 1.0]
    )
    # 範囲外の体積率はクリップされる
    assert coefficients.mixture_density(1.5) == pytest.approx(1.0)


def test_parameters_expose_derived_quantities(unit_case):
    case = CaseConfig(**{**unit_case.to_dict(), "pool_velocity": 0.5, "drop_velocity": 2.0})
    params = derive_parameters(PhysicsConfig(), case)

    assert params.pool_height == pytest.approx(2.0)
    assert params.pool_speed_ratio == pytest.approx(0.25)
    assert params.min_level == 5
    assert params.density_ratio == pytest.approx(1089.0 / 1.2)
    assert params.viscosity_ratio == pytest.approx(3.0e-3 / 1.8e-5)
    ax, ay, az = params.gravity_acceleration
    assert (ax, az) == (0.0, 0.0)
    assert ay == pytest.approx(-1.0 / params.froude**2)
    assert set(params.summary()) == {"Re", "We", "Fr", "density_ratio", "viscosity_ratio"}


def test_parameters_are_immutable(unit_case):
    params = derive_parameters(PhysicsConfig(), unit_case)
    with pytest.raises(AttributeError):
        params.max_level = 3


@pytest.mark.parametrize(
    "field, value",
    [
        ("max_level", 0),
        ("drop_velocity", 0.0),
        ("pool_velocity", -1.0),
        ("drop_radius", 0.0),
        ("pool_depth", -2.0),
        ("domain_size", 0.0),
        ("end_time", 0.0),
    ],
)
def test_invalid_case_is_rejected(unit_case, field, value):
    case = CaseConfig(**{**unit_case.to_dict(), field: value})
    with pytest.raises(ValueError):
        derive_parameters(PhysicsConfig(), case)


def test_invalid_phase_is_rejected(unit_case):
    physics = PhysicsConfig(gas=PhaseConfig(name="gas", density=0.0, viscosity=1.8e-5))
    with pytest.raises(ValueError):
        derive_parameters(physics, unit_case)


def test_coefficients_reject_zero_ratio():
    numbers = derive_numbers(1000.0, 1.0e-3, 0.07, 9.81, 1.0, 1.0)
    with pytest.raises(ValueError):
        derive_coefficients(numbers, density_ratio=0.0, viscosity_ratio=1.0)
