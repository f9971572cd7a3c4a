"""適応格子細分化の設定を管理するモジュール"""

from dataclasses import dataclass

from .base import BaseConfig, require_positive


@dataclass
class RefinementConfig(BaseConfig):
    """細分化ポリシーの設定

    Attributes:
        interface_threshold: 体積率場の誤差閾値
        tracer_threshold: 液滴トレーサーの誤差閾値
        velocity_threshold: 速度各成分の誤差閾値
        level_span: 最小レベル = 最大レベル - level_span
        derefine_radius: 衝突軸からこの距離より外側を粗くする
        derefine_depth: 外側領域のレベル上限 = 最大レベル - derefine_depth
        removal_diameter: 除去する液滴・気泡の直径（セル数）
        remove_bubbles: 気泡も除去するかどうか
    """

    interface_threshold: float = 1e-4
    tracer_threshold: float = 1e-2
    velocity_threshold: float = 1e-2
    level_span: int = 4
    derefine_radius: float = 2.0
    derefine_depth: int = 2
    removal_diameter: int = 8
    remove_bubbles: bool = True

    def validate(self) -> None:
        """設定値の妥当性を検証"""
        require_positive("体積率場の誤差閾値", self.interface_threshold)
        require_positive("トレーサーの誤差閾値", self.tracer_threshold)
        require_positive("速度の誤差閾値", self.velocity_threshold)
        require_positive("粗視化半径", self.derefine_radius)
        if self.level_span < 0:
            raise ValueError("レベル幅は非負である必要があります")
        if not 0 <= self.derefine_depth <= self.level_span:
            raise ValueError("粗視化の深さは0以上level_span以下である必要があります")
        if self.removal_diameter < 0:
            raise ValueError("除去直径は非負である必要があります")
