"""二相流エンジンの抽象インターフェースを提供するモジュール

制御層はこのインターフェースだけを通してエンジンを操作します。
場は名前で参照し、速度成分は "u.x", "u.y", "u.z" と表記します。
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Mapping, Optional, Sequence, Tuple, Union

import numpy as np

from drop_impact.core.boundary import BoundaryCondition

ImplicitFunction = Callable[[np.ndarray, np.ndarray, np.ndarray], np.ndarray]
Predicate = Callable[[np.ndarray, np.ndarray, np.ndarray], np.ndarray]
PathLike = Union[str, Path]

VELOCITY_COMPONENTS = ("u.x", "u.y", "u.z")
FIELD_NAMES = (
    "f",
    "drop_tracer",
    "pool_tracer",
    *VELOCITY_COMPONENTS,
    "p",
    "omega",
    "velnorm",
)


@dataclass(frozen=True)
class SolverControls:
    """時間積分ソルバーの制御値

    Attributes:
        max_dt: 初期および最大の時間刻み幅
        min_iterations: 内部反復の最小回数
        max_iterations: 内部反復の最大回数
        tolerance: 収束判定の許容誤差
    """

    max_dt: float = 1.0e-3
    min_iterations: int = 1
    max_iterations: int = 200
    tolerance: float = 1.0e-4


@dataclass(frozen=True)
class FieldStats:
    """場の縮約統計

    sum はセル体積で重み付けした積分値です。
    """

    minimum: float
    maximum: float
    sum: float
    mean: float


@dataclass(frozen=True)
class InterfaceExtent:
    """界面セルの座標範囲"""

    x_min: float
    x_max: float
    y_min: float
    y_max: float
    z_min: float
    z_max: float

    def as_tuple(self) -> Tuple[float, ...]:
        return (self.x_min, self.x_max, self.y_min, self.y_max, self.z_min, self.z_max)

    @classmethod
    def empty(cls) -> "InterfaceExtent":
        """界面セルが存在しない場合の範囲"""
        nan = float("nan")
        return cls(nan, nan, nan, nan, nan, nan)


class Engine(ABC):
    """適応格子二相流エンジンの抽象基底クラス"""

    @property
    @abstractmethod
    def domain_size(self) -> float:
        """計算領域の一辺の長さ"""
        pass

    @abstractmethod
    def coordinates(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """セル中心座標 (x, y, z) を取得"""
        pass

    @abstractmethod
    def field(self, name: str) -> np.ndarray:
        """名前で場のデータを取得"""
        pass

    @abstractmethod
    def set_field(self, name: str, values: Union[float, np.ndarray]) -> None:
        """名前で場のデータを設定"""
        pass

    @abstractmethod
    def fraction(self, phi: ImplicitFunction) -> np.ndarray:
        """陰関数が正となる領域の体積率を計算

        Args:
            phi: 陰関数（内部で正）

        Returns:
            各セルの体積率 [0, 1]
        """
        pass

    @abstractmethod
    def refine(self, predicate: Predicate, level: int) -> int:
        """判定関数が真となるセルを指定レベルまで細分化

        Returns:
            細分化されたセル数
        """
        pass

    @abstractmethod
    def unrefine(self, predicate: Predicate, level: int) -> int:
        """判定関数が真となるセルのレベルを上限値まで下げる

        Returns:
            粗視化されたセル数
        """
        pass

    @abstractmethod
    def adapt_wavelet(
        self,
        fields: Sequence[str],
        thresholds: Sequence[float],
        max_level: int,
        min_level: int,
    ) -> Tuple[int, int]:
        """誤差推定に基づく適応細分化

        Args:
            fields: 対象の場の名前
            thresholds: 各場の誤差閾値
            max_level: 最大レベル
            min_level: 最小レベル

        Returns:
            (細分化されたセル数, 粗視化されたセル数)
        """
        pass

    @abstractmethod
    def vorticity(self) -> np.ndarray:
        """現在の速度場から渦度を計算"""
        pass

    @abstractmethod
    def statistics(self, name: str) -> FieldStats:
        """場の統計量を計算"""
        pass

    @abstractmethod
    def interface_extent(self) -> InterfaceExtent:
        """界面セルの座標範囲を計算"""
        pass

    @abstractmethod
    def remove_droplets(self, name: str, min_diameter: int, bubbles: bool = False) -> int:
        """小さな液滴（bubbles=Trueなら気泡）を除去

        最細セル換算で直径 min_diameter セル以下の連結成分が対象です。

        Returns:
            除去された連結成分の数
        """
        pass

    @abstractmethod
    def output_facets(self, values: np.ndarray, path: PathLike) -> int:
        """体積率場の 0.5 等値面をファセットとして書き出す

        Returns:
            書き出したファセット数
        """
        pass

    @abstractmethod
    def write_snapshot(self, path: PathLike, time: float) -> None:
        """全状態のスナップショットを書き出す"""
        pass

    @abstractmethod
    def dump(self, path: PathLike, iteration: int, time: float) -> None:
        """再開用のチェックポイントを書き出す"""
        pass

    @abstractmethod
    def restore(self, path: PathLike) -> Optional[Tuple[int, float]]:
        """チェックポイントから状態を復元

        Returns:
            復元された (反復回数, 時刻)。チェックポイントが無い場合はNone
        """
        pass

    @abstractmethod
    def set_solver_controls(self, controls: SolverControls) -> None:
        pass

    @abstractmethod
    def set_acceleration(self, acceleration: Tuple[float, float, float]) -> None:
        """体積力（加速度）を設定"""
        pass

    @abstractmethod
    def set_boundary_conditions(
        self, conditions: Mapping[str, Sequence[BoundaryCondition]]
    ) -> None:
        """場の名前ごとの境界条件を設定"""
        pass

    @abstractmethod
    def timestep(self, max_dt: float) -> float:
        """安定条件と上限から次の時間刻み幅を提案"""
        pass

    @abstractmethod
    def advance(self, dt: float) -> None:
        """1ステップ時間を進める"""
        pass

    @abstractmethod
    def cell_count(self) -> int:
        """葉セルの総数"""
        pass

    @abstractmethod
    def levels(self) -> np.ndarray:
        """セルごとの細分化レベル"""
        pass

    @abstractmethod
    def slice(self, name: str, axis: int = 0, position: float = 0.0) -> np.ndarray:
        """軸に垂直な断面上の2次元データを取得"""
        pass

    def get_diagnostics(self) -> Dict[str, float]:
        """エンジンの診断情報を取得"""
        levels = self.levels()
        return {
            "cells": self.cell_count(),
            "level_min": int(levels.min()),
            "level_max": int(levels.max()),
        }
