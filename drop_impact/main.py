"""斜め液滴衝突シミュレーションのコマンドラインエントリポイント

使い方:
    drop-impact <maxlevel> <angle> <Udrop> <Upool> <R0> <depth> <domain> <t_end>
                [-m MAXRUNTIME] [--config FILE] [--checkpoint NAME] [--debug]
"""

import argparse
import sys
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

import yaml

from drop_impact.config import CaseConfig, SimulationConfig
from drop_impact.engine import UniformGridEngine
from drop_impact.logger import LogConfig, SimulationLogger
from drop_impact.physics import derive_parameters
from drop_impact.simulations import EventScheduler, RuntimeLimit
from drop_impact.visualization import MovieRenderer

EXIT_OK = 0
EXIT_IO_ERROR = 1
EXIT_CONFIG_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    """コマンドライン引数のパーサーを構築"""
    parser = argparse.ArgumentParser(
        prog="drop-impact", description="液槽への斜め液滴衝突シミュレーション"
    )
    parser.add_argument("maxlevel", type=int, help="最大細分化レベル")
    parser.add_argument("angle", type=float, help="衝突角度 [deg]（90で垂直衝突）")
    parser.add_argument("drop_velocity", type=float, help="液滴速度 [m/s]")
    parser.add_argument("pool_velocity", type=float, help="液槽の流速 [m/s]")
    parser.add_argument("drop_radius", type=float, help="液滴半径 [m]")
    parser.add_argument("pool_depth", type=float, help="液槽深さ [m]")
    parser.add_argument("domain_size", type=float, help="計算領域の一辺（無次元）")
    parser.add_argument("end_time", type=float, help="終了時刻（無次元）")
    parser.add_argument(
        "-m", "--maxruntime", type=str, help="計算時間の上限（秒または HH:MM:SS）"
    )
    parser.add_argument("--config", type=str, help="設定ファイル（YAML）のパス")
    parser.add_argument("--checkpoint", type=str, help="チェックポイントのファイル名")
    parser.add_argument("--debug", action="store_true", help="デバッグモードを有効化")
    return parser


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """コマンドライン引数をパース（不正な引数は終了コード2で終了）"""
    return build_parser().parse_args(argv)


def load_config(args: argparse.Namespace) -> SimulationConfig:
    """設定ファイルとコマンドライン引数から設定を構築

    Raises:
        ValueError: 設定値が不正な場合
        OSError: 設定ファイルを読めない場合
    """
    config = SimulationConfig.from_yaml(args.config) if args.config else SimulationConfig()

    case = CaseConfig(
        max_level=args.maxlevel,
        impact_angle=args.angle,
        drop_velocity=args.drop_velocity,
        pool_velocity=args.pool_velocity,
        drop_radius=args.drop_radius,
        pool_depth=args.pool_depth,
        domain_size=args.domain_size,
        end_time=args.end_time,
    )
    config = config.with_case(case)
    if args.checkpoint:
        config = replace(config, output=replace(config.output, checkpoint=args.checkpoint))

    config.validate()
    return config


def setup_logging(config: SimulationConfig, debug: bool) -> SimulationLogger:
    """ロギングを設定"""
    log_level = "debug" if debug else "info"
    log_config = LogConfig(level=log_level, log_dir=Path(config.output.output_dir) / "logs")
    log_config.console_logging["level"] = log_level
    log_config.file_logging["level"] = log_level
    return SimulationLogger("DropImpact", log_config)


def build_scheduler(
    config: SimulationConfig, runtime_limit: RuntimeLimit, logger: SimulationLogger
) -> EventScheduler:
    """パラメータを導出してエンジンとスケジューラを構築

    Raises:
        ValueError: 設定から計算パラメータを導出できない場合
    """
    params = derive_parameters(config.physics, config.case, config.refinement.level_span)
    engine = UniformGridEngine(
        domain_size=params.domain_size,
        base_level=config.numerical.base_level,
        max_subsamples=config.numerical.max_subsamples,
        cfl=config.numerical.cfl,
        logger=logger.start_section("engine"),
    )
    renderer = (
        MovieRenderer(config.output, logger.start_section("movies"))
        if config.output.movies
        else None
    )
    return EventScheduler(
        config,
        params,
        engine,
        renderer=renderer,
        runtime_limit=runtime_limit,
        logger=logger.start_section("scheduler"),
    )


def main(argv: Optional[List[str]] = None) -> int:
    """メイン関数"""
    args = parse_args(argv)

    try:
        config = load_config(args)
        runtime_limit = RuntimeLimit.parse(args.maxruntime)
    except (ValueError, yaml.YAMLError) as e:
        print(f"設定エラー: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR
    except OSError as e:
        print(f"設定ファイルを読み込めません: {e}", file=sys.stderr)
        return EXIT_IO_ERROR

    logger = setup_logging(config, args.debug)
    try:
        try:
            scheduler = build_scheduler(config, runtime_limit, logger)
        except ValueError as e:
            logger.error(f"設定エラー: {e}")
            return EXIT_CONFIG_ERROR

        # 計算中の例外は設定エラーとは区別する
        summary = scheduler.run()
        logger.log_performance("simulation", summary.wall_time)
        return EXIT_OK
    except OSError as e:
        logger.log_error_with_context(
            "入出力エラー", e, {"output_dir": str(config.output.output_dir)}
        )
        return EXIT_IO_ERROR
    except Exception as e:
        logger.log_error_with_context("シミュレーション中にエラーが発生", e)
        return EXIT_IO_ERROR
    finally:
        logger.close()


if __name__ == "__main__":
    sys.exit(main())
