"""断面動画の描画を提供するモジュール

描画イベントごとに x 一定の断面から動画1本につき1枚の PNG フレームを書き出し、
計算終了時に imageio で MP4 にまとめます。フレームは
``<Animations>/.frames/<動画名>/NNNNNN.png`` に保存され、再開した計算でも
番号を引き継ぎます。
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

import imageio.v2 as imageio
import matplotlib
import numpy as np

matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402

from drop_impact.config import OutputConfig  # noqa: E402
from drop_impact.engine import Engine  # noqa: E402

FRAME_DIR = ".frames"


@dataclass(frozen=True)
class MovieSpec:
    """1本の動画の描画設定

    Attributes:
        field: 描画する場の名前
        vmin: カラーマップの下限（Noneなら断面の値域から決定）
        vmax: カラーマップの上限
        show_grid: 細分化レベルの境界を重ねるかどうか
        show_interface: 体積率 0.5 の等値線を重ねるかどうか
        mirrored: 反対側のカメラから見た向きで描くかどうか
    """

    field: str
    vmin: Optional[float] = None
    vmax: Optional[float] = None
    show_grid: bool = False
    show_interface: bool = False
    mirrored: bool = False


MOVIES: Dict[str, MovieSpec] = {
    "Vel_Ux": MovieSpec("u.x"),
    "Vel_Uy": MovieSpec("u.y"),
    "Vel_Uz": MovieSpec("u.z"),
    "LiquidsGrid": MovieSpec("liquids", 0.0, 2.0, show_grid=True),
    "Liquids": MovieSpec("liquids", 0.0, 2.0),
    "Velocity": MovieSpec("velnorm"),
    "Vorticity": MovieSpec("omega", -2.5, 2.5),
    "Pressure": MovieSpec("p", -0.3, 0.6),
    "Velocity_Front_All": MovieSpec(
        "velnorm", show_grid=True, show_interface=True, mirrored=True
    ),
}


def slice_data(engine: Engine, name: str) -> np.ndarray:
    """x = 0 断面の2次元データ（行が y、列が z）を取得

    "liquids" は気相1、液槽0、液滴0.5となる合成場 1 - f + drop_tracer / 2 です。
    """
    if name == "liquids":
        f = engine.slice("f")
        return 1.0 - f + engine.slice("drop_tracer") / 2.0
    if name == "velnorm":
        return np.sqrt(sum(engine.slice(c) ** 2 for c in ("u.x", "u.y", "u.z")))
    return engine.slice(name)


class MovieRenderer:
    """断面動画のフレーム描画とMP4への変換"""

    def __init__(self, config: OutputConfig, logger: Optional[logging.Logger] = None):
        """描画クラスを初期化

        Args:
            config: 出力設定（動画名、フレームレート、画像サイズ）
            logger: ロガー
        """
        self.config = config
        self.logger = logger or logging.getLogger(__name__)
        self.movies: List[str] = list(config.movies)
        unknown = set(self.movies) - set(MOVIES)
        if unknown:
            raise ValueError(f"未対応の動画名です: {sorted(unknown)}")

        self.frame_root = config.animations_path / FRAME_DIR
        self._next_index = {name: self._count_frames(name) for name in self.movies}

    def frame_dir(self, name: str) -> Path:
        return self.frame_root / name

    def _count_frames(self, name: str) -> int:
        directory = self.frame_dir(name)
        if not directory.exists():
            return 0
        return len(list(directory.glob("*.png")))

    def frame_count(self, name: str) -> int:
        return self._next_index[name]

    def render(self, engine: Engine, time: float) -> List[Path]:
        """全ての動画について1フレームずつ書き出す

        Returns:
            書き出したフレームのパス
        """
        if not self.movies:
            return []

        x, y, z = engine.coordinates()
        extent = (z.min(), z.max(), y.min(), y.max())
        interface = None
        levels = None

        written = []
        for name in self.movies:
            spec = MOVIES[name]
            if spec.show_interface and interface is None:
                interface = engine.slice("f")
            if spec.show_grid and levels is None:
                levels = engine.slice("level")

            directory = self.frame_dir(name)
            directory.mkdir(parents=True, exist_ok=True)
            path = directory / f"{self._next_index[name]:06d}.png"
            self._render_frame(
                slice_data(engine, spec.field), spec, extent, time, path, interface, levels
            )
            self._next_index[name] += 1
            written.append(path)
        return written

    def _render_frame(self, data, spec, extent, time, path, interface, levels) -> None:
        size = self.config.image_size / self.config.dpi
        fig, ax = plt.subplots(figsize=(size, size))

        vmin, vmax = spec.vmin, spec.vmax
        if vmin is None or vmax is None:
            vmin, vmax = float(np.nanmin(data)), float(np.nanmax(data))
            if vmin == vmax:
                vmin, vmax = vmin - 0.5, vmax + 0.5

        ax.imshow(
            data,
            origin="lower",
            extent=extent,
            cmap="coolwarm",
            vmin=vmin,
            vmax=vmax,
            interpolation="nearest",
        )
        if spec.show_grid and levels is not None and levels.min() != levels.max():
            ax.contour(levels, extent=extent, colors="k", linewidths=0.3)
        if spec.show_interface and interface is not None:
            if interface.min() < 0.5 < interface.max():
                ax.contour(interface, levels=[0.5], extent=extent, colors="w")
        if spec.mirrored:
            ax.invert_xaxis()

        ax.set_title(f"t = {time:.3f}")
        ax.set_axis_off()
        fig.savefig(path, dpi=self.config.dpi)
        plt.close(fig)

    def finalize(self) -> Dict[str, Path]:
        """各動画のフレームを MP4 にまとめる

        フレームは再開後の計算で続きを描くために残します。

        Returns:
            動画名と書き出した MP4 のパスの対応
        """
        written = {}
        for name in self.movies:
            frames = sorted(self.frame_dir(name).glob("*.png"))
            if not frames:
                continue
            output = self.config.animations_path / f"{name}.mp4"
            try:
                imageio.mimwrite(
                    output,
                    [imageio.imread(frame) for frame in frames],
                    fps=self.config.movie_fps,
                    codec="libx264",
                    pixelformat="yuv420p",
                    macro_block_size=2,
                    ffmpeg_log_level="error",
                )
            except (OSError, ValueError, RuntimeError) as exc:
                self.logger.error(f"動画の書き出しに失敗しました: {output}: {exc}")
                continue
            written[name] = output
            self.logger.info(f"動画を書き出しました: {output} ({len(frames)}フレーム)")
        return written
