"""Field モジュール

このモジュールは、スカラー場とベクトル場の基本実装を提供します。
"""

from .base import Field, GridInfo
from .scalar import ScalarField
from .vector import VectorField

__all__ = [
    "Field",
    "GridInfo",
    "ScalarField",
    "VectorField",
]
