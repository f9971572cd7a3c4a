"""境界条件パッケージ"""

from .base import NAMED_BOUNDARIES, BoundaryCondition, Direction, Side
from .dirichlet import DirichletBoundary
from .neumann import NeumannBoundary

__all__ = [
    "BoundaryCondition",
    "Direction",
    "Side",
    "NAMED_BOUNDARIES",
    "DirichletBoundary",
    "NeumannBoundary",
]
