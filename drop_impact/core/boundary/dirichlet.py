"""ディリクレ境界条件を提供するモジュール

ディリクレ境界条件では、境界上で物理量の値を指定します。
値は定数、または他の場から境界値を計算する関数で与えます。
"""

from typing import Callable, Mapping, Union

import numpy as np

from .base import BoundaryCondition, Direction, Side

BoundaryValue = Union[float, Callable[[Mapping[str, np.ndarray]], np.ndarray]]


class DirichletBoundary(BoundaryCondition):
    """ディリクレ境界条件クラス"""

    def __init__(self, direction: Direction, side: Side, value: BoundaryValue = 0.0):
        """ディリクレ境界条件を初期化

        Args:
            direction: 境界面の方向
            side: 境界の側
            value: 境界での値（定数、または境界層の場の辞書を受け取る関数）
        """
        super().__init__(direction, side)
        self.value = value

    def apply(
        self, data: np.ndarray, spacing: float, fields: Mapping[str, np.ndarray]
    ) -> np.ndarray:
        """ディリクレ境界条件を適用"""
        self.validate_field(data)
        result = data.copy()
        boundary_slice = self.get_boundary_slice(data.shape)

        if callable(self.value):
            # 境界層に制限した場を渡して境界値を評価
            layer = {name: arr[boundary_slice] for name, arr in fields.items()}
            result[boundary_slice] = self.value(layer)
        else:
            result[boundary_slice] = self.value

        return result
