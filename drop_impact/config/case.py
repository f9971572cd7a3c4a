"""衝突ケース（コマンドライン引数）の設定を管理するモジュール"""

import math
from dataclasses import dataclass

from .base import BaseConfig, require_positive


@dataclass
class CaseConfig(BaseConfig):
    """1回の衝突計算を決める入力値

    Attributes:
        max_level: 最大細分化レベル
        impact_angle: 衝突角度 [deg]（90で垂直衝突）
        drop_velocity: 液滴速度 [m/s]
        pool_velocity: 液槽の流速 [m/s]
        drop_radius: 液滴半径 [m]
        pool_depth: 液槽深さ [m]
        domain_size: 計算領域の一辺（無次元）
        end_time: 終了時刻（無次元）
    """

    max_level: int = 9
    impact_angle: float = 90.0
    drop_velocity: float = 1.0
    pool_velocity: float = 0.0
    drop_radius: float = 1.0
    pool_depth: float = 2.0
    domain_size: float = 8.0
    end_time: float = 1.0

    def validate(self) -> None:
        """設定値の妥当性を検証"""
        if isinstance(self.max_level, bool) or not isinstance(self.max_level, int):
            raise ValueError(f"最大レベルは整数である必要があります: {self.max_level!r}")
        if self.max_level < 1:
            raise ValueError(f"最大レベルは1以上である必要があります: {self.max_level}")
        if not math.isfinite(self.impact_angle):
            raise ValueError(f"衝突角度は有限値である必要があります: {self.impact_angle}")
        require_positive("液滴速度", self.drop_velocity)
        if not math.isfinite(self.pool_velocity) or self.pool_velocity < 0:
            raise ValueError(f"液槽の流速は非負の有限値である必要があります: {self.pool_velocity}")
        require_positive("液滴半径", self.drop_radius)
        require_positive("液槽深さ", self.pool_depth)
        require_positive("領域サイズ", self.domain_size)
        require_positive("終了時刻", self.end_time)
