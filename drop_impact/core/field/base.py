"""物理場の基底クラスを提供するモジュール

このモジュールは、一様格子上の3次元物理場の基本的な抽象化を提供します。
すべての具体的な場の実装（スカラー場、ベクトル場）は、この基底クラスを継承します。
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Tuple

import numpy as np


@dataclass(frozen=True)
class GridInfo:
    """計算グリッドの情報を保持する不変クラス

    Attributes:
        shape: グリッドの3次元形状 (nx, ny, nz)
        dx: 各方向のグリッド間隔 (dx, dy, dz)
        origin: 領域の原点座標
    """

    shape: Tuple[int, int, int]
    dx: Tuple[float, float, float]
    origin: Tuple[float, float, float] = (0.0, 0.0, 0.0)

    def __post_init__(self):
        """初期化後の検証"""
        if len(self.shape) != 3 or len(self.dx) != 3 or len(self.origin) != 3:
            raise ValueError("GridInfoは3次元データのみ対応しています")
        if any(s <= 0 for s in self.shape):
            raise ValueError("グリッドサイズは正の値である必要があります")
        if any(d <= 0 for d in self.dx):
            raise ValueError("グリッド間隔は正の値である必要があります")

    @property
    def cell_volume(self) -> float:
        """セル体積"""
        return float(np.prod(self.dx))

    def cell_centers(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """セル中心座標を取得

        Returns:
            (x, y, z) の3次元配列のタプル
        """
        axes = [
            o + (np.arange(n) + 0.5) * d
            for o, n, d in zip(self.origin, self.shape, self.dx)
        ]
        return tuple(np.meshgrid(*axes, indexing="ij"))


class Field(ABC):
    """3次元物理場の基底抽象クラス"""

    def __init__(self, grid: GridInfo):
        """場を初期化

        Args:
            grid: 計算グリッドの情報
        """
        self._grid = grid

    @property
    def grid(self) -> GridInfo:
        """グリッド情報を取得"""
        return self._grid

    @property
    def shape(self) -> Tuple[int, int, int]:
        """形状を取得"""
        return self.grid.shape

    @property
    def dx(self) -> Tuple[float, float, float]:
        """グリッド間隔を取得"""
        return self.grid.dx

    @property
    @abstractmethod
    def data(self):
        """場のデータを取得する抽象プロパティ"""
        pass

    def __repr__(self) -> str:
        """文字列表現"""
        return f"{self.__class__.__name__}(shape={self.shape})"
