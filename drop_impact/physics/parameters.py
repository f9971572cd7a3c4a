"""無次元数と無次元化された物性係数を導出するモジュール

液滴半径 R、液滴速度 U、液体密度 ρl を代表スケールとして無次元化し、
支配方程式を Reynolds 数、Froude 数、Weber 数のみで記述します。
"""

import math
from dataclasses import dataclass
from typing import Tuple, Union

import numpy as np

from drop_impact.config import CaseConfig, PhysicsConfig


@dataclass(frozen=True)
class DimensionlessNumbers:
    """無次元数

    Attributes:
        reynolds: Re = ρl U R / μl
        froude: Fr = U / sqrt(g R)
        weber: We = ρl U² R / σ
    """

    reynolds: float
    froude: float
    weber: float


@dataclass(frozen=True)
class MaterialCoefficients:
    """ソルバーに渡す無次元化された物性係数

    液相の密度を1、粘性を 1/Re とし、気相はそれぞれの比で割ります。
    """

    liquid_viscosity: float
    gas_viscosity: float
    liquid_density: float
    gas_density: float
    surface_tension: float

    def mixture_viscosity(self, f: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
        """体積率 f に対する混合粘性（調和平均）を計算

        Args:
            f: 液相の体積率（[0, 1] にクリップされます）

        Returns:
            混合粘性
        """
        f = np.clip(f, 0.0, 1.0)
        return 1.0 / (
            f * (1.0 / self.liquid_viscosity - 1.0 / self.gas_viscosity)
            + 1.0 / self.gas_viscosity
        )

    def mixture_density(self, f: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
        """体積率 f に対する混合密度（算術平均）を計算"""
        f = np.clip(f, 0.0, 1.0)
        return f * self.liquid_density + (1.0 - f) * self.gas_density


@dataclass(frozen=True)
class SimulationParameters:
    """計算全体で共有される不変のパラメータ

    物理入力、導出された無次元数と物性係数、形状・時間の入力を保持します。
    """

    liquid_density: float
    gas_density: float
    liquid_viscosity: float
    gas_viscosity: float
    surface_tension: float
    gravity: float
    numbers: DimensionlessNumbers
    coefficients: MaterialCoefficients
    max_level: int
    impact_angle: float
    drop_velocity: float
    pool_velocity: float
    drop_radius: float
    pool_depth: float
    domain_size: float
    end_time: float
    level_span: int = 4

    @property
    def reynolds(self) -> float:
        return self.numbers.reynolds

    @property
    def froude(self) -> float:
        return self.numbers.froude

    @property
    def weber(self) -> float:
        return self.numbers.weber

    @property
    def density_ratio(self) -> float:
        """液相と気相の密度比"""
        return self.liquid_density / self.gas_density

    @property
    def viscosity_ratio(self) -> float:
        """液相と気相の粘性比"""
        return self.liquid_viscosity / self.gas_viscosity

    @property
    def pool_height(self) -> float:
        """無次元の液面高さ"""
        return self.pool_depth / self.drop_radius

    @property
    def pool_speed_ratio(self) -> float:
        """液槽流速と液滴速度の比"""
        return self.pool_velocity / self.drop_velocity

    @property
    def min_level(self) -> int:
        """適応細分化の最小レベル"""
        return self.max_level - self.level_span

    @property
    def gravity_acceleration(self) -> Tuple[float, float, float]:
        """無次元化された重力加速度（y軸が鉛直上向き）"""
        return (0.0, -1.0 / self.froude**2, 0.0)

    def summary(self) -> dict:
        """ログ出力用の要約"""
        return {
            "Re": self.reynolds,
            "We": self.weber,
            "Fr": self.froude,
            "density_ratio": self.density_ratio,
            "viscosity_ratio": self.viscosity_ratio,
        }


def _checked_ratio(name: str, numerator: float, denominator: float) -> float:
    """ゼロ除算と非有限値を検出しながら比を計算"""
    if denominator == 0:
        raise ValueError(f"{name}の計算で分母が0になりました")
    value = numerator / denominator
    if not math.isfinite(value) or value == 0:
        raise ValueError(f"{name}が有限の非零値になりません: {value}")
    return value


def derive_numbers(
    liquid_density: float,
    liquid_viscosity: float,
    surface_tension: float,
    gravity: float,
    drop_radius: float,
    drop_velocity: float,
) -> DimensionlessNumbers:
    """物理入力から Re, Fr, We を計算

    Raises:
        ValueError: 入力が正の有限値でない場合、または分母が0になる場合
    """
    inputs = {
        "液体密度": liquid_density,
        "液体粘性": liquid_viscosity,
        "表面張力係数": surface_tension,
        "重力加速度": gravity,
        "液滴半径": drop_radius,
        "液滴速度": drop_velocity,
    }
    for name, value in inputs.items():
        if not math.isfinite(value) or value <= 0:
            raise ValueError(f"{name}は正の有限値である必要があります: {value}")

    reynolds = _checked_ratio(
        "Reynolds数", liquid_density * drop_velocity * drop_radius, liquid_viscosity
    )
    froude = _checked_ratio("Froude数", drop_velocity, math.sqrt(gravity * drop_radius))
    weber = _checked_ratio(
        "Weber数", liquid_density * drop_velocity**2 * drop_radius, surface_tension
    )
    return DimensionlessNumbers(reynolds=reynolds, froude=froude, weber=weber)


def derive_coefficients(
    numbers: DimensionlessNumbers,
    density_ratio: float,
    viscosity_ratio: float,
) -> MaterialCoefficients:
    """無次元数と物性比からソルバー向けの係数を計算"""
    liquid_viscosity = _checked_ratio("液相粘性係数", 1.0, numbers.reynolds)
    return MaterialCoefficients(
        liquid_viscosity=liquid_viscosity,
        gas_viscosity=_checked_ratio("気相粘性係数", liquid_viscosity, viscosity_ratio),
        liquid_density=1.0,
        gas_density=_checked_ratio("気相密度", 1.0, density_ratio),
        surface_tension=_checked_ratio("表面張力係数", 1.0, numbers.weber),
    )


def derive_parameters(
    physics: PhysicsConfig, case: CaseConfig, level_span: int = 4
) -> SimulationParameters:
    """物理設定と衝突ケースから計算パラメータを導出

    Args:
        physics: 物性値の設定
        case: 衝突ケースの設定
        level_span: 最大レベルと最小レベルの差

    Returns:
        導出済みの不変パラメータ

    Raises:
        ValueError: 入力値が不正な場合
    """
    physics.validate()
    case.validate()

    numbers = derive_numbers(
        liquid_density=physics.liquid.density,
        liquid_viscosity=physics.liquid.viscosity,
        surface_tension=physics.surface_tension,
        gravity=physics.gravity,
        drop_radius=case.drop_radius,
        drop_velocity=case.drop_velocity,
    )
    density_ratio = _checked_ratio("密度比", physics.liquid.density, physics.gas.density)
    viscosity_ratio = _checked_ratio(
        "粘性比", physics.liquid.viscosity, physics.gas.viscosity
    )

    return SimulationParameters(
        liquid_density=physics.liquid.density,
        gas_density=physics.gas.density,
        liquid_viscosity=physics.liquid.viscosity,
        gas_viscosity=physics.gas.viscosity,
        surface_tension=physics.surface_tension,
        gravity=physics.gravity,
        numbers=numbers,
        coefficients=derive_coefficients(numbers, density_ratio, viscosity_ratio),
        max_level=case.max_level,
        impact_angle=case.impact_angle,
        drop_velocity=case.drop_velocity,
        pool_velocity=case.pool_velocity,
        drop_radius=case.drop_radius,
        pool_depth=case.pool_depth,
        domain_size=case.domain_size,
        end_time=case.end_time,
        level_span=level_span,
    )
