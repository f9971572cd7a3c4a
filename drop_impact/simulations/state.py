"""シミュレーションの状態と共有コンテキストを管理するモジュール

イベントの処理関数はすべて SimulationContext を受け取り、
反復回数・時刻・時間刻み幅やエンジンにはここから到達します。
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from drop_impact.config import SimulationConfig
from drop_impact.engine import Engine
from drop_impact.physics import RefinementPolicy, SimulationParameters
from drop_impact.visualization import MovieRenderer

from .diagnostics import DiagnosticsWriter


@dataclass
class SimulationState:
    """時間進行の状態

    Attributes:
        iteration: 反復回数
        time: 無次元時刻
        dt: 直前の時間刻み幅
    """

    iteration: int = 0
    time: float = 0.0
    dt: float = 0.0

    def validate(self) -> None:
        """状態の妥当性を検証"""
        if self.iteration < 0:
            raise ValueError("反復回数は非負である必要があります")
        if self.time < 0:
            raise ValueError("時刻は非負である必要があります")

    def get_diagnostics(self) -> Dict[str, Any]:
        return {"iteration": self.iteration, "time": self.time, "dt": self.dt}


class Timer:
    """計算開始からの壁時計時間とCPU時間を計測"""

    def __init__(self):
        self.reset()

    def reset(self) -> None:
        self._wall_start = time.perf_counter()
        self._cpu_start = time.process_time()

    @property
    def wall(self) -> float:
        """経過した壁時計時間 [s]"""
        return time.perf_counter() - self._wall_start

    @property
    def cpu(self) -> float:
        """経過したCPU時間 [s]"""
        return time.process_time() - self._cpu_start


@dataclass
class SimulationContext:
    """イベント間で共有されるシミュレーションの文脈

    Attributes:
        config: シミュレーション設定
        params: 導出済みの計算パラメータ
        engine: 二相流エンジン
        policy: 細分化ポリシー
        diagnostics: ログ書き出し（DiagnosticsWriter）
        renderer: 動画のフレーム描画（MovieRenderer、無効ならNone）
        state: 時間進行の状態
        timer: 経過時間の計測
        logger: ロガー
    """

    config: SimulationConfig
    params: SimulationParameters
    engine: Engine
    policy: RefinementPolicy
    diagnostics: DiagnosticsWriter
    renderer: Optional[MovieRenderer] = None
    state: SimulationState = field(default_factory=SimulationState)
    timer: Timer = field(default_factory=Timer)
    logger: logging.Logger = field(default_factory=lambda: logging.getLogger(__name__))

    @property
    def iteration(self) -> int:
        return self.state.iteration

    @property
    def time(self) -> float:
        return self.state.time

    @property
    def dt(self) -> float:
        return self.state.dt
