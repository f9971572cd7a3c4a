"""ノイマン境界条件を提供するモジュール

ノイマン境界条件では、境界上で物理量の法線方向勾配を指定します。
流出境界などで使用されます。
"""

from typing import Mapping

import numpy as np

from .base import BoundaryCondition, Direction, Side


class NeumannBoundary(BoundaryCondition):
    """ノイマン境界条件クラス"""

    def __init__(self, direction: Direction, side: Side, gradient: float = 0.0):
        """ノイマン境界条件を初期化

        Args:
            direction: 境界面の方向
            side: 境界の側
            gradient: 外向き法線方向の勾配
        """
        super().__init__(direction, side)
        self.gradient = gradient

    def apply(
        self, data: np.ndarray, spacing: float, fields: Mapping[str, np.ndarray]
    ) -> np.ndarray:
        """ノイマン境界条件を適用"""
        self.validate_field(data)
        result = data.copy()

        boundary_slice = self.get_boundary_slice(data.shape)
        interior_slice = self.get_boundary_slice(data.shape, offset=1)
        result[boundary_slice] = data[interior_slice] + self.gradient * spacing

        return result
