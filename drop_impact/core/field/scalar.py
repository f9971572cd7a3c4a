from __future__ import annotations

from typing import Union

import numpy as np

from .base import Field, GridInfo


class ScalarField(Field):
    """3次元スカラー場"""

    def __init__(self, grid: GridInfo, initial_value: Union[float, np.ndarray] = 0.0):
        """スカラー場を初期化

        Args:
            grid: 計算グリッドの情報
            initial_value: 初期値（スカラーまたは配列）
        """
        super().__init__(grid)

        if np.isscalar(initial_value):
            self._data = np.full(grid.shape, float(initial_value), dtype=np.float64)
        elif hasattr(initial_value, "__array__"):
            data = np.array(initial_value, dtype=np.float64)
            if data.shape != grid.shape:
                raise ValueError("初期値の形状がグリッドと一致しません")
            self._data = data
        else:
            raise TypeError(f"未対応の初期値型: {type(initial_value)}")

    @property
    def data(self) -> np.ndarray:
        """フィールドデータを取得"""
        return self._data

    @data.setter
    def data(self, value: np.ndarray):
        """フィールドデータを設定"""
        value = np.asarray(value, dtype=np.float64)
        if value.shape != self.shape:
            raise ValueError(f"形状が一致しません: {value.shape} != {self.shape}")
        self._data = value.copy()

    def max(self) -> float:
        """最大値を取得"""
        return float(np.max(self._data))
