"""診断ログの書き出しを提供するモジュール

界面統計ログと計算統計ログの2つの追記専用テキストファイルを管理します。
ファイルは計算開始時に追記モードで1回だけ開き、各行の書き出し後に
フラッシュし、終了時に必ず閉じます。
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence, TextIO, Union

from drop_impact.config import OutputConfig


@dataclass(frozen=True)
class InterfaceRecord:
    """界面統計ログの1行

    Attributes:
        iteration: 反復回数
        time: 時刻
        volume: 液相の総体積
        extents: 界面セルの座標範囲 (x_min, x_max, y_min, y_max, z_min, z_max)
    """

    iteration: int
    time: float
    volume: float
    extents: Sequence[float]

    def __post_init__(self):
        if len(self.extents) != 6:
            raise ValueError("座標範囲は6成分である必要があります")

    def format(self) -> str:
        values = " ".join(f"{v:1.4f}" for v in (self.volume, *self.extents))
        return f"{self.iteration:d} {self.time:g} {values} \n"


@dataclass(frozen=True)
class StatsRecord:
    """計算統計ログの1行"""

    iteration: int
    time: float
    dt: float
    cells: int
    wall: float
    cpu: float

    def format(self) -> str:
        return (
            f"i: {self.iteration:d} t: {self.time:g} dt: {self.dt:g} "
            f"#Cells: {self.cells:d} Wall clock time (s): {self.wall:g} "
            f"CPU time (s): {self.cpu:g} \n"
        )


class DiagnosticsWriter:
    """界面統計ログと計算統計ログの書き出しクラス"""

    def __init__(
        self,
        directory: Union[str, Path] = ".",
        interface_name: str = "loginterface.dat",
        stats_name: str = "logstats.dat",
        logger: Optional[logging.Logger] = None,
    ):
        """書き出しクラスを初期化（ファイルはまだ開かない）

        Args:
            directory: ログファイルを置くディレクトリ
            interface_name: 界面統計ログのファイル名
            stats_name: 計算統計ログのファイル名
            logger: ロガー
        """
        self.directory = Path(directory)
        self.interface_path = self.directory / interface_name
        self.stats_path = self.directory / stats_name
        self.logger = logger or logging.getLogger(__name__)

        self._interface_fp: Optional[TextIO] = None
        self._stats_fp: Optional[TextIO] = None

    @classmethod
    def from_config(
        cls, config: OutputConfig, logger: Optional[logging.Logger] = None
    ) -> "DiagnosticsWriter":
        return cls(config.output_dir, config.interface_log, config.stats_log, logger)

    @property
    def is_open(self) -> bool:
        return self._interface_fp is not None

    def open(self) -> "DiagnosticsWriter":
        """両方のログを追記モードで開く"""
        if self.is_open:
            return self
        self.directory.mkdir(parents=True, exist_ok=True)
        self._interface_fp = open(self.interface_path, "a", encoding="utf-8")
        try:
            self._stats_fp = open(self.stats_path, "a", encoding="utf-8")
        except OSError:
            self._interface_fp.close()
            self._interface_fp = None
            raise
        self.logger.debug(f"診断ログを開きました: {self.interface_path}, {self.stats_path}")
        return self

    def close(self) -> None:
        """両方のログを閉じる（複数回呼んでもよい）"""
        for fp in (self._interface_fp, self._stats_fp):
            if fp is not None:
                fp.close()
        self._interface_fp = None
        self._stats_fp = None

    def _write(self, fp: Optional[TextIO], line: str) -> None:
        if fp is None:
            raise RuntimeError("診断ログが開かれていません")
        fp.write(line)
        fp.flush()

    def write_interface(self, record: InterfaceRecord) -> None:
        """界面統計ログに1行追記"""
        self._write(self._interface_fp, record.format())

    def write_stats(self, record: StatsRecord) -> None:
        """計算統計ログに1行追記"""
        self._write(self._stats_fp, record.format())

    def __enter__(self) -> "DiagnosticsWriter":
        return self.open()

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


def prepare_output_directories(config: OutputConfig) -> None:
    """出力ディレクトリ（Slices, Animations, Interfaces）を作成

    Raises:
        OSError: ディレクトリを作成できない場合
    """
    for path in (config.slices_path, config.animations_path, config.interfaces_path):
        path.mkdir(parents=True, exist_ok=True)
