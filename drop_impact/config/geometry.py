"""初期形状の設定を管理するモジュール"""

from dataclasses import dataclass

from .base import BaseConfig, require_positive


@dataclass
class GeometryConfig(BaseConfig):
    """液滴と液槽の初期配置に関する設定

    斜め衝突時の液滴中心の水平オフセットは経験的な一次式
    ``offset_slope * angle + offset_intercept`` で与え、
    ``offset_cutoff_angle`` 以上では0とします。

    Attributes:
        south_pole_clearance: 液滴下端と液面の初期間隔（半径単位）
        offset_slope: オフセット一次式の傾き [1/deg]
        offset_intercept: オフセット一次式の切片
        offset_cutoff_angle: オフセットを0とする角度 [deg]
        drop_shell_width: 液滴表面の事前細分化の相対幅
        pool_shell_width: 液面の事前細分化の半幅（無次元）
        velocity_margin: 液滴速度を与える半径二乗の倍率
    """

    south_pole_clearance: float = 0.1
    offset_slope: float = -0.016666
    offset_intercept: float = 1.5
    offset_cutoff_angle: float = 90.0
    drop_shell_width: float = 0.025
    pool_shell_width: float = 0.025
    velocity_margin: float = 1.05

    def validate(self) -> None:
        """設定値の妥当性を検証"""
        if self.south_pole_clearance < 0:
            raise ValueError("液滴下端の初期間隔は非負である必要があります")
        require_positive("液滴表面の細分化幅", self.drop_shell_width)
        require_positive("液面の細分化幅", self.pool_shell_width)
        if self.drop_shell_width >= 1:
            raise ValueError("液滴表面の細分化幅は1未満である必要があります")
        if self.velocity_margin < 1:
            raise ValueError("速度付与の倍率は1以上である必要があります")
