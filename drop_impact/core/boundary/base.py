"""境界条件の基底クラスを提供するモジュール

このモジュールは、3次元流体計算における境界条件の基本的な抽象化を提供します。
具体的な境界条件（Dirichlet、Neumann）は、この基底クラスを継承します。
境界条件はセル中心配列の最外層セルに適用されます。
"""

from abc import ABC, abstractmethod
from enum import Enum, auto
from typing import Mapping, Tuple

import numpy as np


class Side(Enum):
    """境界の側を表す列挙型"""

    NEGATIVE = auto()  # 負の側 (x=0, y=0, z=zmin)
    POSITIVE = auto()  # 正の側 (x=Lx, y=Ly, z=zmax)


class Direction(Enum):
    """座標軸の方向を表す列挙型"""

    X = 0
    Y = 1
    Z = 2


# 境界名と (方向, 側) の対応
NAMED_BOUNDARIES = {
    "left": (Direction.X, Side.NEGATIVE),
    "right": (Direction.X, Side.POSITIVE),
    "bottom": (Direction.Y, Side.NEGATIVE),
    "top": (Direction.Y, Side.POSITIVE),
    "back": (Direction.Z, Side.NEGATIVE),
    "front": (Direction.Z, Side.POSITIVE),
}


class BoundaryCondition(ABC):
    """境界条件の基底抽象クラス"""

    def __init__(self, direction: Direction, side: Side):
        """境界条件を初期化

        Args:
            direction: 境界面の方向（X, Y, Z）
            side: 境界の側（NEGATIVE, POSITIVE）
        """
        self.direction = direction
        self.side = side

    @classmethod
    def at(cls, boundary: str, *args, **kwargs) -> "BoundaryCondition":
        """境界名（"top", "front" など）から境界条件を生成"""
        if boundary not in NAMED_BOUNDARIES:
            raise ValueError(f"未対応の境界名です: {boundary}")
        direction, side = NAMED_BOUNDARIES[boundary]
        return cls(direction, side, *args, **kwargs)

    @abstractmethod
    def apply(
        self, data: np.ndarray, spacing: float, fields: Mapping[str, np.ndarray]
    ) -> np.ndarray:
        """境界条件を適用

        Args:
            data: 境界条件を適用する配列
            spacing: 境界法線方向のグリッド間隔
            fields: 境界値の評価に使う他の場（"f" など）

        Returns:
            境界条件が適用された新しい配列
        """
        pass

    def get_boundary_slice(
        self, shape: Tuple[int, int, int], width: int = 1, offset: int = 0
    ) -> Tuple[slice, ...]:
        """境界領域のスライスを取得

        Args:
            shape: 場の3次元形状
            width: 境界領域の幅
            offset: 境界からの内側へのずれ

        Returns:
            境界領域を選択するスライスのタプル
        """
        slices = [slice(None)] * len(shape)
        n = shape[self.direction.value]
        if self.side == Side.NEGATIVE:
            slices[self.direction.value] = slice(offset, offset + width)
        else:
            slices[self.direction.value] = slice(n - offset - width, n - offset)
        return tuple(slices)

    def validate_field(self, data: np.ndarray) -> None:
        """場の妥当性を検証"""
        if data.ndim != 3:
            raise ValueError("場は3次元である必要があります")
        if data.shape[self.direction.value] < 2:
            raise ValueError("境界条件の適用には2セル以上が必要です")

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.direction.name}, {self.side.name})"
