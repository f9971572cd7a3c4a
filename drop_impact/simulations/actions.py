"""イベントの処理関数を提供するモジュール

各関数は SimulationContext を1つ受け取り、エンジンや出力に副作用を与えます。
個々の出力ファイルは1回の呼び出しの中で開いて閉じます。
"""

from typing import Dict

import numpy as np

from drop_impact.config import OutputConfig
from drop_impact.engine import Engine

from .diagnostics import InterfaceRecord, StatsRecord
from .state import SimulationContext

# ファセットファイル名に使う場のラベル
INTERFACE_LABELS = (("Liquid", "f"), ("Drop", "drop_tracer"), ("Pool", "pool_tracer"))


def apply_body_force(ctx: SimulationContext) -> None:
    """重力を無次元の体積力として設定"""
    ctx.engine.set_acceleration(ctx.params.gravity_acceleration)


def refine_mesh(ctx: SimulationContext) -> None:
    ctx.policy.apply(ctx.engine)


def log_interface(ctx: SimulationContext) -> None:
    """液相の総体積と界面の座標範囲を記録"""
    volume = ctx.engine.statistics("f").sum
    extent = ctx.engine.interface_extent()
    ctx.diagnostics.write_interface(
        InterfaceRecord(ctx.iteration, ctx.time, volume, extent.as_tuple())
    )


def log_stats(ctx: SimulationContext) -> None:
    """反復回数、時間刻み幅、セル数、経過時間を記録"""
    ctx.diagnostics.write_stats(
        StatsRecord(
            iteration=ctx.iteration,
            time=ctx.time,
            dt=ctx.dt,
            cells=ctx.engine.cell_count(),
            wall=ctx.timer.wall,
            cpu=ctx.timer.cpu,
        )
    )


def write_snapshot(ctx: SimulationContext) -> None:
    output = ctx.config.output
    path = output.slices_path / f"{output.snapshot_name}-{ctx.time:0.2f}.gfs"
    ctx.engine.write_snapshot(path, ctx.time)
    ctx.logger.info(f"スナップショットを保存しました: {path}")


def remove_small_structures(ctx: SimulationContext) -> None:
    """解像度以下の小さな液滴と気泡を除去"""
    refinement = ctx.config.refinement
    if refinement.removal_diameter <= 0:
        return
    removed = ctx.engine.remove_droplets("f", refinement.removal_diameter)
    if refinement.remove_bubbles:
        removed += ctx.engine.remove_droplets(
            "f", refinement.removal_diameter, bubbles=True
        )
    if removed:
        ctx.logger.debug(f"小構造を{removed}個除去しました (t={ctx.time:g})")


def raw_interface_fields(engine: Engine, output: OutputConfig) -> Dict[str, np.ndarray]:
    """生の界面抽出用に閾値処理した場を作成

    液相の体積率は 0, 1 の近傍を丸め、トレーサーは low 未満を0、high 超を1とします。
    x >= raw_x_max の領域では全ての場を1にして、対称な重複を除きます。
    格子が粗く raw_x_max より内側にセルが無い場合も、対称面に接する1層は残します。
    """
    eps = output.raw_liquid_epsilon
    low, high = output.raw_tracer_low, output.raw_tracer_high
    x = engine.coordinates()[0]
    layers = np.unique(x)
    x_max = max(output.raw_x_max, layers[1]) if layers.size > 1 else np.inf
    outside = x >= x_max

    f = engine.field("f")
    fields = {"Liquid": np.where(f < eps, 0.0, np.where(f > 1.0 - eps, 1.0, f))}
    for label, name in INTERFACE_LABELS[1:]:
        tracer = engine.field(name)
        fields[label] = np.where(tracer < low, 0.0, np.where(tracer > high, 1.0, tracer))

    for values in fields.values():
        values[outside] = 1.0
    return fields


def write_raw_interfaces(ctx: SimulationContext) -> None:
    output = ctx.config.output
    for label, values in raw_interface_fields(ctx.engine, output).items():
        path = output.interfaces_path / f"interfaces{label}Raw-{ctx.time:0.3f}.dat"
        ctx.engine.output_facets(values, path)


def write_interfaces(ctx: SimulationContext) -> None:
    output = ctx.config.output
    for label, name in INTERFACE_LABELS:
        path = output.interfaces_path / f"interfaces{label}-{ctx.time:0.1f}.dat"
        ctx.engine.output_facets(ctx.engine.field(name), path)


def render_movies(ctx: SimulationContext) -> None:
    if ctx.renderer is None:
        return
    ctx.renderer.render(ctx.engine, ctx.time)


def write_checkpoint(ctx: SimulationContext) -> None:
    """再開用のチェックポイントを上書き保存"""
    path = ctx.config.output.checkpoint_path
    ctx.engine.dump(path, ctx.iteration, ctx.time)
    ctx.logger.debug(f"チェックポイントを更新しました: {path} (t={ctx.time:g})")
