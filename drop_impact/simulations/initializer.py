"""初期状態の構築を担当するモジュール

液槽の上に置いた単位半径の液滴について、界面の事前細分化、体積率場と
2つのトレーサー場、速度場の設定、ソルバー制御値の再設定を順に行います。
チェックポイントから再開する場合、形状からの構築は一切行いません。
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

import numpy as np

from drop_impact.config import SimulationConfig
from drop_impact.engine import Engine, SolverControls
from drop_impact.physics import ImpactGeometry, SimulationParameters, shell, slab


@dataclass(frozen=True)
class StartState:
    """時間進行の開始状態

    Attributes:
        iteration: 開始反復回数
        time: 開始時刻
        restored: チェックポイントから復元したかどうか
    """

    iteration: int
    time: float
    restored: bool


class InitialStateBuilder:
    """初期状態の構築クラス"""

    def __init__(
        self,
        params: SimulationParameters,
        config: SimulationConfig,
        engine: Engine,
        logger: Optional[logging.Logger] = None,
    ):
        """構築クラスを初期化

        Args:
            params: 計算パラメータ
            config: シミュレーション設定
            engine: 二相流エンジン
            logger: ロガー
        """
        self.params = params
        self.config = config
        self.engine = engine
        self.logger = logger or logging.getLogger(__name__)
        self.geometry = ImpactGeometry.from_parameters(params, config.geometry)

    @property
    def solver_controls(self) -> SolverControls:
        numerical = self.config.numerical
        return SolverControls(
            max_dt=numerical.max_dt,
            min_iterations=numerical.min_iterations,
            max_iterations=numerical.max_iterations,
            tolerance=numerical.tolerance,
        )

    def initialize(self, checkpoint: Optional[Union[str, Path]] = None) -> StartState:
        """チェックポイントからの復元を試み、無ければ初期状態を構築

        Args:
            checkpoint: チェックポイントのパス（Noneなら常に新規構築）

        Returns:
            時間進行の開始状態
        """
        if checkpoint is not None:
            restored = self.engine.restore(checkpoint)
            if restored is not None:
                iteration, time = restored
                self.logger.info(
                    f"チェックポイントから再開します: {checkpoint} (i={iteration}, t={time:g})"
                )
                return StartState(iteration=iteration, time=time, restored=True)

        self.build()
        return StartState(iteration=0, time=0.0, restored=False)

    def build(self) -> None:
        """形状から初期状態を構築"""
        for name, value in self.params.summary().items():
            self.logger.info(f"{name} = {value:0.6f}")

        self.prerefine()
        self.set_fractions()
        self.set_velocity()
        self.engine.set_solver_controls(self.solver_controls)

    def prerefine(self) -> int:
        """液滴表面と液面の近傍を最大レベルまで事前細分化

        Returns:
            細分化されたセル数
        """
        geometry = self.geometry
        settings = self.config.geometry
        level = self.params.max_level

        drop_shell = shell(
            geometry.drop_center,
            geometry.drop_radius,
            1.0 - settings.drop_shell_width,
            1.0 + settings.drop_shell_width,
        )
        pool_slab = slab(geometry.pool_height, settings.pool_shell_width)

        refined = self.engine.refine(drop_shell, level)
        refined += self.engine.refine(pool_slab, level)
        self.logger.debug(f"事前細分化: {refined}セル (レベル {level})")
        return refined

    def set_fractions(self) -> None:
        """体積率場とトレーサー場を設定"""
        geometry = self.geometry
        self.engine.set_field("f", self.engine.fraction(geometry.liquid))
        self.engine.set_field("drop_tracer", self.engine.fraction(geometry.drop))
        self.engine.set_field("pool_tracer", self.engine.fraction(geometry.pool))

    def set_velocity(self) -> None:
        """液滴内部（と外側の薄い余白）に衝突速度、それ以外に液槽の流れを設定"""
        geometry = self.geometry
        x, y, z = self.engine.coordinates()
        inside = geometry.inside_drop(x, y, z, margin=self.config.geometry.velocity_margin)
        f = self.engine.field("f")

        ux, uy, uz = geometry.drop_velocity
        self.engine.set_field("u.x", np.where(inside, ux, 0.0))
        self.engine.set_field("u.y", np.where(inside, uy, 0.0))
        self.engine.set_field("u.z", np.where(inside, uz, geometry.pool_speed_ratio * f))
