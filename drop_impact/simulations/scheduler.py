"""イベント駆動の時間進行ループを提供するモジュール

各反復の先頭で (反復回数, 時刻) に該当するイベントを登録順に実行し、
上限付きイベントが残っている間だけ時間を進めます。時間刻み幅は
次のイベント時刻を越えないように切り詰められます。
"""

import logging
from dataclasses import dataclass
from typing import Optional

from drop_impact.config import SimulationConfig
from drop_impact.engine import Engine
from drop_impact.physics import (
    RefinementPolicy,
    SimulationParameters,
    impact_boundary_conditions,
)
from drop_impact.visualization import MovieRenderer

from . import actions
from .diagnostics import DiagnosticsWriter, prepare_output_directories
from .events import TIME_TOLERANCE, EventRegistry, build_event_registry
from .initializer import InitialStateBuilder
from .runtime import RuntimeLimit
from .state import SimulationContext, SimulationState

STOP_END_TIME = "end_time"
STOP_RUNTIME_LIMIT = "runtime_limit"


@dataclass(frozen=True)
class RunSummary:
    """計算の実行結果

    Attributes:
        iteration: 終了時の反復回数
        time: 終了時の時刻
        restored: チェックポイントから再開したかどうか
        reason: 終了理由（"end_time" または "runtime_limit"）
        wall_time: 経過した壁時計時間 [s]
    """

    iteration: int
    time: float
    restored: bool
    reason: str
    wall_time: float


class EventScheduler:
    """イベントスケジューラ"""

    def __init__(
        self,
        config: SimulationConfig,
        params: SimulationParameters,
        engine: Engine,
        renderer: Optional[MovieRenderer] = None,
        runtime_limit: Optional[RuntimeLimit] = None,
        logger: Optional[logging.Logger] = None,
        registry: Optional[EventRegistry] = None,
    ):
        """スケジューラを初期化

        Args:
            config: シミュレーション設定
            params: 計算パラメータ
            engine: 二相流エンジン
            renderer: 動画のフレーム描画（Noneなら描画しない）
            runtime_limit: 壁時計時間の上限
            logger: ロガー
            registry: イベント登録簿（省略時は標準の構成）
        """
        self.config = config
        self.params = params
        self.engine = engine
        self.renderer = renderer
        self.runtime_limit = runtime_limit or RuntimeLimit()
        self.logger = logger or logging.getLogger(__name__)

        self.registry = registry or build_event_registry(config, params)
        self.policy = RefinementPolicy.from_config(params, config.refinement, self.logger)
        self.builder = InitialStateBuilder(params, config, engine, self.logger)
        self.diagnostics = DiagnosticsWriter.from_config(config.output, self.logger)

    def run(self, resume: bool = True) -> RunSummary:
        """計算を実行

        Args:
            resume: チェックポイントが存在すれば再開するかどうか

        Returns:
            実行結果

        Raises:
            OSError: 出力ディレクトリやログファイルを準備できない場合
        """
        prepare_output_directories(self.config.output)

        with self.diagnostics:
            ctx = SimulationContext(
                config=self.config,
                params=self.params,
                engine=self.engine,
                policy=self.policy,
                diagnostics=self.diagnostics,
                renderer=self.renderer,
                logger=self.logger,
            )

            checkpoint = self.config.output.checkpoint_path if resume else None
            start = self.builder.initialize(checkpoint)
            ctx.state = SimulationState(iteration=start.iteration, time=start.time)
            if start.restored:
                self.registry.seek(start.time)

            self.engine.set_boundary_conditions(impact_boundary_conditions(self.params))

            ctx.timer.reset()
            self.runtime_limit.restart()
            reason = self._loop(ctx)

            if self.renderer is not None:
                self.renderer.finalize()

        summary = RunSummary(
            iteration=ctx.state.iteration,
            time=ctx.state.time,
            restored=start.restored,
            reason=reason,
            wall_time=ctx.timer.wall,
        )
        self.logger.info(
            f"計算を終了しました ({reason}): i={summary.iteration}, t={summary.time:g}"
        )
        return summary

    def _loop(self, ctx: SimulationContext) -> str:
        state = ctx.state
        max_dt = self.config.numerical.max_dt

        while True:
            for event in self.registry.due(state.iteration, state.time):
                event.action(ctx)

            if not self.registry.has_bounded_events(state.time):
                return STOP_END_TIME

            if self.runtime_limit.exceeded():
                self.logger.warning(
                    f"計算時間の上限に達しました: {self.runtime_limit.elapsed:.1f} s"
                )
                actions.write_checkpoint(ctx)
                return STOP_RUNTIME_LIMIT

            dt = self.engine.timestep(max_dt)
            new_time = state.time + dt
            next_time = self.registry.next_time(state.time)
            if next_time is not None and new_time >= next_time - TIME_TOLERANCE:
                # イベント時刻にちょうど一致させる
                dt = next_time - state.time
                new_time = next_time

            self.engine.advance(dt)
            state.iteration += 1
            state.time = new_time
            state.dt = dt
            self.logger.debug(f"i={state.iteration} t={state.time:g} dt={dt:g}")
