"""物理パラメータの設定を管理するモジュール

既定値は血液模擬液（密度 1089 kg/m³）と空気の組み合わせです。
"""

from dataclasses import dataclass, field
from typing import Any, Dict

from .base import BaseConfig, load_config_safely, require_positive


@dataclass
class PhaseConfig(BaseConfig):
    """流体の物性値を保持するクラス"""

    name: str = "liquid"
    density: float = 1089.0  # 密度 [kg/m³]
    viscosity: float = 3.0e-3  # 粘性係数 [Pa·s]

    def validate(self) -> None:
        """設定値の妥当性を検証"""
        if not self.name:
            raise ValueError("相の名前は必須です")
        require_positive(f"{self.name}の密度", self.density)
        require_positive(f"{self.name}の粘性", self.viscosity)


@dataclass
class PhysicsConfig(BaseConfig):
    """物理パラメータの設定を保持するクラス"""

    liquid: PhaseConfig = field(default_factory=PhaseConfig)
    gas: PhaseConfig = field(
        default_factory=lambda: PhaseConfig(name="gas", density=1.2, viscosity=1.8e-5)
    )
    surface_tension: float = 70.3e-3  # 表面張力係数 [N/m]
    gravity: float = 9.81  # 重力加速度 [m/s²]

    def validate(self) -> None:
        """設定値の妥当性を検証"""
        self.liquid.validate()
        self.gas.validate()
        require_positive("表面張力係数", self.surface_tension)
        require_positive("重力加速度", self.gravity)

    def load(self, config_dict: Dict[str, Any]) -> "PhysicsConfig":
        """辞書から設定を読み込む"""
        merged = load_config_safely(config_dict, self.to_dict())
        unknown = set(merged) - {"liquid", "gas", "surface_tension", "gravity"}
        if unknown:
            raise ValueError(f"PhysicsConfig に未知の設定項目があります: {sorted(unknown)}")
        return PhysicsConfig(
            liquid=PhaseConfig().load(merged["liquid"]),
            gas=PhaseConfig().load(merged["gas"]),
            surface_tension=float(merged["surface_tension"]),
            gravity=float(merged["gravity"]),
        )
