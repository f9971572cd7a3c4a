"""シミュレーションの実行管理パッケージ"""

from .diagnostics import (
    DiagnosticsWriter,
    InterfaceRecord,
    StatsRecord,
    prepare_output_directories,
)
from .events import (
    TIME_TOLERANCE,
    EventRegistry,
    IterationTrigger,
    ScheduledEvent,
    TimeTrigger,
    build_event_registry,
)
from .initializer import InitialStateBuilder, StartState
from .runtime import RuntimeLimit, parse_runtime
from .scheduler import EventScheduler, RunSummary
from .state import SimulationContext, SimulationState, Timer

__all__ = [
    "DiagnosticsWriter",
    "InterfaceRecord",
    "StatsRecord",
    "prepare_output_directories",
    "EventRegistry",
    "IterationTrigger",
    "TimeTrigger",
    "ScheduledEvent",
    "build_event_registry",
    "TIME_TOLERANCE",
    "InitialStateBuilder",
    "StartState",
    "RuntimeLimit",
    "parse_runtime",
    "EventScheduler",
    "RunSummary",
    "SimulationContext",
    "SimulationState",
    "Timer",
]
