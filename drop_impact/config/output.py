"""出力の設定を管理するモジュール"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Union

from .base import BaseConfig, require_positive

DEFAULT_MOVIES = [
    "Vel_Ux",
    "Vel_Uy",
    "Vel_Uz",
    "LiquidsGrid",
    "Liquids",
    "Velocity",
    "Vorticity",
    "Pressure",
    "Velocity_Front_All",
]


@dataclass
class OutputConfig(BaseConfig):
    """出力ファイルとイベント間隔の設定

    ファイル名と間隔の既定値は、既存の後処理スクリプトが前提とする値です。
    """

    output_dir: Union[str, Path] = Path(".")
    slices_dir: str = "Slices"
    animations_dir: str = "Animations"
    interfaces_dir: str = "Interfaces"
    interface_log: str = "loginterface.dat"
    stats_log: str = "logstats.dat"
    checkpoint: str = "restart"
    snapshot_name: str = "DropImpact"

    interface_log_interval: float = 0.01
    stats_interval: float = 0.001
    snapshot_interval: float = 0.1
    facets_interval: float = 0.01
    movie_interval: float = 0.001
    checkpoint_interval: float = 0.1

    # 生の界面抽出での閾値処理
    raw_liquid_epsilon: float = 1.0e-6
    raw_tracer_low: float = 0.4
    raw_tracer_high: float = 0.6
    raw_x_max: float = 1.0e-2

    movies: List[str] = field(default_factory=lambda: list(DEFAULT_MOVIES))
    movie_fps: int = 25
    image_size: int = 900
    dpi: int = 100

    def __post_init__(self):
        """パスを正規化"""
        if isinstance(self.output_dir, str):
            self.output_dir = Path(self.output_dir)

    def validate(self) -> None:
        """設定値の妥当性を検証"""
        for name in (
            "interface_log_interval",
            "stats_interval",
            "snapshot_interval",
            "facets_interval",
            "movie_interval",
            "checkpoint_interval",
        ):
            require_positive(name, getattr(self, name))
        if not 0 <= self.raw_liquid_epsilon < 0.5:
            raise ValueError("raw_liquid_epsilonは0以上0.5未満である必要があります")
        if not 0 <= self.raw_tracer_low <= self.raw_tracer_high <= 1:
            raise ValueError("トレーサー閾値は 0 <= low <= high <= 1 を満たす必要があります")
        unknown = set(self.movies) - set(DEFAULT_MOVIES)
        if unknown:
            raise ValueError(f"未対応の動画名です: {sorted(unknown)}")
        require_positive("movie_fps", self.movie_fps)
        require_positive("image_size", self.image_size)

    def to_dict(self):
        """設定を辞書形式にシリアライズ"""
        data = super().to_dict()
        data["output_dir"] = str(self.output_dir)
        return data

    @property
    def slices_path(self) -> Path:
        return self.output_dir / self.slices_dir

    @property
    def animations_path(self) -> Path:
        return self.output_dir / self.animations_dir

    @property
    def interfaces_path(self) -> Path:
        return self.output_dir / self.interfaces_dir

    @property
    def checkpoint_path(self) -> Path:
        return self.output_dir / self.checkpoint
