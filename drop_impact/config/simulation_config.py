"""シミュレーション設定を管理するモジュール

このモジュールは、YAMLフォーマットの設定ファイルを読み込み、
各セクションの設定クラスに変換する機能を提供します。
"""

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Union

import yaml

from .base import BaseConfig
from .case import CaseConfig
from .geometry import GeometryConfig
from .numerical import NumericalConfig
from .output import OutputConfig
from .physics import PhysicsConfig
from .refinement import RefinementConfig


@dataclass
class SimulationConfig(BaseConfig):
    """シミュレーション全体の設定"""

    physics: PhysicsConfig = field(default_factory=PhysicsConfig)
    case: CaseConfig = field(default_factory=CaseConfig)
    geometry: GeometryConfig = field(default_factory=GeometryConfig)
    refinement: RefinementConfig = field(default_factory=RefinementConfig)
    numerical: NumericalConfig = field(default_factory=NumericalConfig)
    output: OutputConfig = field(default_factory=OutputConfig)

    def validate(self) -> None:
        """全セクションの設定値を検証"""
        self.physics.validate()
        self.case.validate()
        self.geometry.validate()
        self.refinement.validate()
        self.numerical.validate()
        self.output.validate()

    def load(self, config_dict: Dict[str, Any]) -> "SimulationConfig":
        """辞書から設定を読み込む

        Args:
            config_dict: セクション名をキーとする設定辞書

        Returns:
            読み込まれた設定
        """
        config_dict = config_dict or {}
        unknown = set(config_dict) - {
            "physics",
            "case",
            "geometry",
            "refinement",
            "numerical",
            "output",
        }
        if unknown:
            raise ValueError(f"未知の設定セクションがあります: {sorted(unknown)}")

        return SimulationConfig(
            physics=self.physics.load(config_dict.get("physics", {})),
            case=self.case.load(config_dict.get("case", {})),
            geometry=self.geometry.load(config_dict.get("geometry", {})),
            refinement=self.refinement.load(config_dict.get("refinement", {})),
            numerical=self.numerical.load(config_dict.get("numerical", {})),
            output=self.output.load(config_dict.get("output", {})),
        )

    def to_dict(self) -> Dict[str, Any]:
        """設定を辞書形式にシリアライズ"""
        return {
            "physics": self.physics.to_dict(),
            "case": self.case.to_dict(),
            "geometry": self.geometry.to_dict(),
            "refinement": self.refinement.to_dict(),
            "numerical": self.numerical.to_dict(),
            "output": self.output.to_dict(),
        }

    def with_case(self, case: CaseConfig) -> "SimulationConfig":
        """衝突ケースを差し替えた設定を返す"""
        return replace(self, case=case)

    @classmethod
    def from_yaml(cls, filepath: Union[str, Path]) -> "SimulationConfig":
        """YAMLファイルから設定を読み込む

        Args:
            filepath: 設定ファイルのパス

        Returns:
            読み込まれた設定
        """
        with open(filepath, "r", encoding="utf-8") as f:
            config_dict = yaml.safe_load(f)

        if config_dict is not None and not isinstance(config_dict, dict):
            raise ValueError(f"設定ファイルの形式が不正です: {filepath}")

        return cls().load(config_dict or {})

    def save(self, filepath: Union[str, Path]) -> None:
        """設定をYAMLファイルに保存"""
        with open(filepath, "w", encoding="utf-8") as f:
            yaml.safe_dump(self.to_dict(), f, sort_keys=False, allow_unicode=True)
