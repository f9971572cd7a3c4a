"""適応格子細分化のポリシーを提供するモジュール

毎反復、誤差推定に基づく細分化・粗視化を行った後、衝突軸から離れた
領域のレベルを強制的に制限して総セル数を抑えます。
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np

from drop_impact.config import RefinementConfig
from drop_impact.engine import VELOCITY_COMPONENTS, Engine

from .geometry import outside_cylinder
from .parameters import SimulationParameters


@dataclass(frozen=True)
class RefinementCriterion:
    """細分化の判定に使う場と誤差閾値

    Attributes:
        field: 場の名前
        threshold: 絶対誤差の閾値
        enabled: 細分化の判定に参加するかどうか
    """

    field: str
    threshold: float
    enabled: bool = True

    def __post_init__(self):
        if not self.threshold > 0:
            raise ValueError(f"誤差閾値は正の値である必要があります: {self.threshold}")


@dataclass(frozen=True)
class AdaptResult:
    """1回の適応細分化の結果"""

    refined: int
    coarsened: int
    derefined: int = 0

    @property
    def changed(self) -> bool:
        return bool(self.refined or self.coarsened or self.derefined)


@dataclass
class RefinementPolicy:
    """細分化ポリシー

    Attributes:
        criteria: 順序付きの細分化基準
        max_level: 最大レベル
        min_level: 最小レベル
        derefine_radius: この半径より外側でレベルを制限
        derefine_level: 外側領域のレベル上限
    """

    criteria: List[RefinementCriterion]
    max_level: int
    min_level: int
    derefine_radius: float = 2.0
    derefine_level: Optional[int] = None
    logger: logging.Logger = field(
        default_factory=lambda: logging.getLogger(__name__), repr=False, compare=False
    )

    def __post_init__(self):
        if self.min_level > self.max_level:
            raise ValueError("最小レベルが最大レベルを超えています")
        if self.derefine_level is None:
            self.derefine_level = self.max_level

    @classmethod
    def from_config(
        cls,
        params: SimulationParameters,
        config: RefinementConfig,
        logger: Optional[logging.Logger] = None,
    ) -> "RefinementPolicy":
        """計算パラメータと細分化設定からポリシーを構築"""
        criteria = [
            RefinementCriterion("f", config.interface_threshold),
            RefinementCriterion("drop_tracer", config.tracer_threshold),
        ] + [
            RefinementCriterion(name, config.velocity_threshold)
            for name in VELOCITY_COMPONENTS
        ]
        return cls(
            criteria=criteria,
            max_level=params.max_level,
            min_level=params.max_level - config.level_span,
            derefine_radius=config.derefine_radius,
            derefine_level=params.max_level - config.derefine_depth,
            logger=logger or logging.getLogger(__name__),
        )

    @property
    def active_criteria(self) -> List[RefinementCriterion]:
        return [c for c in self.criteria if c.enabled]

    def update_diagnostic_fields(self, engine: Engine) -> None:
        """細分化の前に渦度と速度の大きさを再計算"""
        engine.set_field("omega", engine.vorticity())
        velnorm = np.sqrt(sum(engine.field(name) ** 2 for name in VELOCITY_COMPONENTS))
        engine.set_field("velnorm", velnorm)

    def adapt(self, engine: Engine) -> AdaptResult:
        """誤差推定に基づく適応細分化"""
        criteria = self.active_criteria
        refined, coarsened = engine.adapt_wavelet(
            [c.field for c in criteria],
            [c.threshold for c in criteria],
            self.max_level,
            self.min_level,
        )
        return AdaptResult(refined=refined, coarsened=coarsened)

    def derefine(self, engine: Engine) -> int:
        """衝突軸から離れた領域のレベルを制限"""
        return engine.unrefine(outside_cylinder(self.derefine_radius), self.derefine_level)

    def apply(self, engine: Engine) -> AdaptResult:
        """診断場の更新、適応細分化、幾何学的粗視化を順に実行"""
        self.update_diagnostic_fields(engine)
        result = self.adapt(engine)
        result = AdaptResult(
            refined=result.refined,
            coarsened=result.coarsened,
            derefined=self.derefine(engine),
        )
        self.logger.debug(
            f"細分化: +{result.refined} / -{result.coarsened} / 制限 {result.derefined}"
        )
        return result
