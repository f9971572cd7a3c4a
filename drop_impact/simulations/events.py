"""イベントのトリガーと登録簿を提供するモジュール

イベントは (名前, トリガー, 処理関数) の組として明示的に登録され、
時間進行ループとは独立に評価・検証できます。時刻トリガーの発火時刻は
``start + n * interval`` で計算し、累積誤差を持ち込みません。
"""

import math
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Union

from drop_impact.config import SimulationConfig
from drop_impact.physics import SimulationParameters

from . import actions

# 時刻比較の許容誤差
TIME_TOLERANCE = 1.0e-9


@dataclass(frozen=True)
class IterationTrigger:
    """反復回数に基づくトリガー

    Attributes:
        every: 発火間隔（反復回数）
        start: 最初に発火する反復回数
    """

    every: int = 1
    start: int = 0

    def __post_init__(self):
        if self.every < 1:
            raise ValueError("反復間隔は1以上である必要があります")
        if self.start < 0:
            raise ValueError("開始反復回数は非負である必要があります")

    @property
    def bounded(self) -> bool:
        return False

    def fires(self, iteration: int) -> bool:
        """指定した反復回数で発火するかどうか"""
        return iteration >= self.start and (iteration - self.start) % self.every == 0


@dataclass(frozen=True)
class TimeTrigger:
    """時刻に基づくトリガー

    Attributes:
        interval: 発火間隔
        start: 最初の発火時刻
        until: 発火時刻の上限（この時刻は含まない）。Noneなら無制限
    """

    interval: float
    start: float = 0.0
    until: Optional[float] = None

    def __post_init__(self):
        if not self.interval > 0 or not math.isfinite(self.interval):
            raise ValueError(f"発火間隔は正の有限値である必要があります: {self.interval}")
        if self.start < 0:
            raise ValueError("開始時刻は非負である必要があります")
        if self.until is not None and self.until < self.start:
            raise ValueError("終了時刻が開始時刻より前です")

    @property
    def bounded(self) -> bool:
        return self.until is not None

    def firing_time(self, n: int) -> float:
        """n番目の発火時刻"""
        return self.start + n * self.interval

    def is_live(self, n: int) -> bool:
        """n番目の発火時刻が上限より前かどうか"""
        if self.until is None:
            return True
        return self.firing_time(n) < self.until - TIME_TOLERANCE

    def first_after(self, time: float) -> int:
        """time より厳密に後の最初の発火番号"""
        if time < self.start - TIME_TOLERANCE:
            return 0
        n = max(0, int(math.floor((time - self.start) / self.interval)))
        while self.firing_time(n) <= time + TIME_TOLERANCE:
            n += 1
        while n > 0 and self.firing_time(n - 1) > time + TIME_TOLERANCE:
            n -= 1
        return n


Trigger = Union[IterationTrigger, TimeTrigger]
Action = Callable[..., None]


@dataclass(frozen=True)
class ScheduledEvent:
    """名前付きのイベント

    Attributes:
        name: イベント名
        trigger: 発火条件
        action: SimulationContext を受け取る処理関数
    """

    name: str
    trigger: Trigger
    action: Action


class EventRegistry:
    """イベントの登録簿

    登録順を保持し、時刻トリガーごとに次の発火番号（カーソル）を管理します。
    """

    def __init__(self):
        self._events: List[ScheduledEvent] = []
        self._cursors: Dict[str, int] = {}

    def register(self, event: ScheduledEvent) -> ScheduledEvent:
        """イベントを登録"""
        if event.name in self._cursors:
            raise ValueError(f"イベント名が重複しています: {event.name}")
        self._events.append(event)
        self._cursors[event.name] = 0
        return event

    def add(self, name: str, trigger: Trigger, action: Action) -> ScheduledEvent:
        return self.register(ScheduledEvent(name, trigger, action))

    @property
    def events(self) -> List[ScheduledEvent]:
        return list(self._events)

    @property
    def names(self) -> List[str]:
        return [event.name for event in self._events]

    def __len__(self) -> int:
        return len(self._events)

    def __getitem__(self, name: str) -> ScheduledEvent:
        for event in self._events:
            if event.name == name:
                return event
        raise KeyError(name)

    def cursor(self, name: str) -> int:
        """時刻トリガーの次の発火番号"""
        return self._cursors[name]

    def _pending_time(self, event: ScheduledEvent) -> Optional[float]:
        """時刻イベントの次の発火時刻（上限を過ぎていればNone）"""
        trigger = event.trigger
        n = self._cursors[event.name]
        if not trigger.is_live(n):
            return None
        return trigger.firing_time(n)

    def due(self, iteration: int, time: float) -> List[ScheduledEvent]:
        """(iteration, time) で発火するイベントを登録順に返す

        時刻イベントのカーソルは time より後の発火時刻まで進められるため、
        同じ時刻で2回呼んでも2回目は反復イベントだけが返ります。
        """
        fired = []
        for event in self._events:
            trigger = event.trigger
            if isinstance(trigger, IterationTrigger):
                if trigger.fires(iteration):
                    fired.append(event)
                continue

            pending = self._pending_time(event)
            if pending is not None and pending <= time + TIME_TOLERANCE:
                fired.append(event)
                self._cursors[event.name] = trigger.first_after(time)
        return fired

    def next_time(self, time: float) -> Optional[float]:
        """time より後で最も早い時刻イベントの発火時刻"""
        candidates = []
        for event in self._events:
            if isinstance(event.trigger, IterationTrigger):
                continue
            pending = self._pending_time(event)
            if pending is not None and pending > time + TIME_TOLERANCE:
                candidates.append(pending)
        return min(candidates) if candidates else None

    def has_bounded_events(self, time: float) -> bool:
        """上限付きのイベントがまだ発火予定を残しているかどうか"""
        return any(
            event.trigger.bounded and self._pending_time(event) is not None
            for event in self._events
        )

    def seek(self, time: float) -> None:
        """再開時に、time 以前の発火時刻をすべて消化済みにする"""
        for event in self._events:
            if isinstance(event.trigger, TimeTrigger):
                self._cursors[event.name] = event.trigger.first_after(time)


def build_event_registry(
    config: SimulationConfig, params: SimulationParameters
) -> EventRegistry:
    """衝突計算のイベントを登録順に構築

    Args:
        config: シミュレーション設定
        params: 計算パラメータ（終了時刻）

    Returns:
        構築された登録簿
    """
    output = config.output
    every_step = IterationTrigger()

    registry = EventRegistry()
    registry.add("body_force", every_step, actions.apply_body_force)
    registry.add("refinement", every_step, actions.refine_mesh)
    registry.add(
        "log_interface", TimeTrigger(output.interface_log_interval), actions.log_interface
    )
    registry.add(
        "log_stats",
        TimeTrigger(output.stats_interval, until=params.end_time),
        actions.log_stats,
    )
    registry.add("snapshot", TimeTrigger(output.snapshot_interval), actions.write_snapshot)
    registry.add("droplet_removal", every_step, actions.remove_small_structures)
    registry.add(
        "raw_interfaces", TimeTrigger(output.facets_interval), actions.write_raw_interfaces
    )
    registry.add("interfaces", TimeTrigger(output.facets_interval), actions.write_interfaces)
    registry.add("movies", TimeTrigger(output.movie_interval), actions.render_movies)
    registry.add(
        "checkpoint", TimeTrigger(output.checkpoint_interval), actions.write_checkpoint
    )
    return registry
