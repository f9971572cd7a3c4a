"""液滴と液槽の陰関数表現を提供するモジュール

陰関数は座標配列 (x, y, z) を受け取り、流体内部で正、外部で負となる
距離に準じたスカラーを返します。和集合は最大値、積集合は最小値で合成します。
"""

import math
from dataclasses import dataclass
from typing import Callable, Tuple

import numpy as np

from drop_impact.config import GeometryConfig

from .parameters import SimulationParameters

ImplicitFunction = Callable[[np.ndarray, np.ndarray, np.ndarray], np.ndarray]
Predicate = Callable[[np.ndarray, np.ndarray, np.ndarray], np.ndarray]
Point = Tuple[float, float, float]


def _squared_distance(x, y, z, center: Point):
    return (x - center[0]) ** 2 + (y - center[1]) ** 2 + (z - center[2]) ** 2


def sphere(center: Point, radius: float) -> ImplicitFunction:
    """球の陰関数 r² - |p - c|²"""

    def phi(x, y, z):
        return radius**2 - _squared_distance(x, y, z, center)

    return phi


def half_space_below(height: float) -> ImplicitFunction:
    """水平面 y = height より下の半空間の陰関数"""

    def phi(x, y, z):
        return height - y

    return phi


def union(*functions: ImplicitFunction) -> ImplicitFunction:
    """陰関数の和集合（最大値）"""
    if not functions:
        raise ValueError("和集合には1つ以上の陰関数が必要です")

    def phi(x, y, z):
        return np.maximum.reduce([np.asarray(f(x, y, z), dtype=float) for f in functions])

    return phi


def intersection(*functions: ImplicitFunction) -> ImplicitFunction:
    """陰関数の積集合（最小値）"""
    if not functions:
        raise ValueError("積集合には1つ以上の陰関数が必要です")

    def phi(x, y, z):
        return np.minimum.reduce([np.asarray(f(x, y, z), dtype=float) for f in functions])

    return phi


def shell(center: Point, radius: float, inner: float, outer: float) -> Predicate:
    """球殻 inner·radius < |p - c| < outer·radius の判定関数"""

    def predicate(x, y, z):
        d2 = _squared_distance(x, y, z, center)
        return (d2 < (outer * radius) ** 2) & (d2 > (inner * radius) ** 2)

    return predicate


def slab(height: float, half_width: float) -> Predicate:
    """水平な薄層 |y - height| < half_width の判定関数"""

    def predicate(x, y, z):
        return (y > height - half_width) & (y < height + half_width) & np.ones_like(x, dtype=bool)

    return predicate


def outside_cylinder(radius: float) -> Predicate:
    """鉛直な衝突軸（x = z = 0）から radius より外側の判定関数"""

    def predicate(x, y, z):
        return (x**2 + z**2 > radius**2) & np.ones_like(y, dtype=bool)

    return predicate


@dataclass(frozen=True)
class OffsetLaw:
    """衝突角度から液滴中心の水平オフセットを与える経験式

    cutoff 未満では slope * angle + intercept、cutoff 以上では0です。
    既定値は 15° で約1.25、90° で0となり、液滴下端の高さを
    衝突角度によらずほぼ一定に保ちます。
    """

    slope: float = -0.016666
    intercept: float = 1.5
    cutoff: float = 90.0

    @classmethod
    def from_config(cls, config: GeometryConfig) -> "OffsetLaw":
        return cls(
            slope=config.offset_slope,
            intercept=config.offset_intercept,
            cutoff=config.offset_cutoff_angle,
        )

    def offset(self, angle: float) -> float:
        """衝突角度 [deg] に対するオフセット"""
        if angle < self.cutoff:
            return self.slope * angle + self.intercept
        return 0.0


def impact_velocity(angle: float) -> Tuple[float, float, float]:
    """衝突角度 [deg] に対する液滴の無次元速度ベクトル (0, -sinθ, -cosθ)"""
    theta = math.pi * angle / 180.0
    return (0.0, -math.sin(theta), -math.cos(theta))


@dataclass(frozen=True)
class ImpactGeometry:
    """無次元化された初期配置

    Attributes:
        drop_center: 液滴中心
        drop_radius: 液滴半径（常に1）
        pool_height: 液面高さ
        drop_velocity: 液滴内部の速度ベクトル
        pool_speed_ratio: 液槽流速と液滴速度の比
    """

    drop_center: Point
    drop_radius: float
    pool_height: float
    drop_velocity: Tuple[float, float, float]
    pool_speed_ratio: float

    @classmethod
    def from_parameters(
        cls, params: SimulationParameters, config: GeometryConfig
    ) -> "ImpactGeometry":
        """計算パラメータと形状設定から初期配置を構築"""
        radius = 1.0
        pool_height = params.pool_height
        center = (
            0.0,
            pool_height + radius + config.south_pole_clearance,
            OffsetLaw.from_config(config).offset(params.impact_angle),
        )
        return cls(
            drop_center=center,
            drop_radius=radius,
            pool_height=pool_height,
            drop_velocity=impact_velocity(params.impact_angle),
            pool_speed_ratio=params.pool_speed_ratio,
        )

    @property
    def drop(self) -> ImplicitFunction:
        """液滴の陰関数"""
        return sphere(self.drop_center, self.drop_radius)

    @property
    def pool(self) -> ImplicitFunction:
        """液槽の陰関数"""
        return half_space_below(self.pool_height)

    @property
    def liquid(self) -> ImplicitFunction:
        """液滴と液槽の和集合"""
        return union(self.pool, self.drop)

    def inside_drop(self, x, y, z, margin: float = 1.0) -> np.ndarray:
        """液滴内部（半径二乗に margin を掛けた範囲）の判定"""
        return _squared_distance(x, y, z, self.drop_center) < margin * self.drop_radius**2
