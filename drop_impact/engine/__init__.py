"""二相流エンジンパッケージ"""

from .base import (
    FIELD_NAMES,
    VELOCITY_COMPONENTS,
    Engine,
    FieldStats,
    InterfaceExtent,
    SolverControls,
)
from .uniform import UniformGridEngine

__all__ = [
    "Engine",
    "UniformGridEngine",
    "SolverControls",
    "FieldStats",
    "InterfaceExtent",
    "FIELD_NAMES",
    "VELOCITY_COMPONENTS",
]
