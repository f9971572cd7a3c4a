"""物理モデルパッケージ

無次元パラメータの導出、初期形状、境界条件、細分化ポリシーを提供します。
"""

from .boundary import impact_boundary_conditions
from .geometry import (
    ImpactGeometry,
    OffsetLaw,
    half_space_below,
    impact_velocity,
    intersection,
    outside_cylinder,
    shell,
    slab,
    sphere,
    union,
)
from .parameters import (
    DimensionlessNumbers,
    MaterialCoefficients,
    SimulationParameters,
    derive_coefficients,
    derive_numbers,
    derive_parameters,
)
from .refinement import AdaptResult, RefinementCriterion, RefinementPolicy

__all__ = [
    "DimensionlessNumbers",
    "MaterialCoefficients",
    "SimulationParameters",
    "derive_numbers",
    "derive_coefficients",
    "derive_parameters",
    "ImpactGeometry",
    "OffsetLaw",
    "sphere",
    "half_space_below",
    "union",
    "intersection",
    "shell",
    "slab",
    "outside_cylinder",
    "impact_velocity",
    "impact_boundary_conditions",
    "RefinementCriterion",
    "RefinementPolicy",
    "AdaptResult",
]
