"""数値計算の設定を管理するモジュール"""

from dataclasses import dataclass

from .base import BaseConfig, require_positive


@dataclass
class NumericalConfig(BaseConfig):
    """数値計算の設定を保持するクラス

    `max_dt` から `tolerance` までは計算開始時にソルバーへ再設定する値です。
    """

    max_dt: float = 1.0e-3
    min_iterations: int = 1
    max_iterations: int = 200
    tolerance: float = 1.0e-4
    cfl: float = 0.8
    base_level: int = 5
    max_subsamples: int = 4

    def validate(self) -> None:
        """数値設定の妥当性を検証"""
        require_positive("max_dt", self.max_dt)
        require_positive("tolerance", self.tolerance)
        if self.min_iterations < 1:
            raise ValueError("min_iterationsは1以上である必要があります")
        if self.max_iterations < self.min_iterations:
            raise ValueError("max_iterationsはmin_iterations以上である必要があります")
        if not 0 < self.cfl <= 1:
            raise ValueError("cflは0から1の間である必要があります")
        if self.base_level < 1:
            raise ValueError("base_levelは1以上である必要があります")
        if self.max_subsamples < 1:
            raise ValueError("max_subsamplesは1以上である必要があります")
