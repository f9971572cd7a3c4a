"""シミュレーション用ロギングパッケージ

このパッケージは、シミュレーション全体で使用される統一的なロギング機能を提供します。
"""

from .config import LogConfig
from .formatters import ColoredFormatter, DefaultFormatter, DetailedFormatter
from .handlers import BufferedLogHandler, ConsoleLogHandler, FileLogHandler
from .logger import SimulationLogger

__all__ = [
    "SimulationLogger",
    "FileLogHandler",
    "ConsoleLogHandler",
    "BufferedLogHandler",
    "DefaultFormatter",
    "DetailedFormatter",
    "ColoredFormatter",
    "LogConfig",
]
