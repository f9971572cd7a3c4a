"""衝突計算の境界条件を構築するモジュール"""

from typing import Dict, List

from drop_impact.core.boundary import (
    BoundaryCondition,
    DirichletBoundary,
    NeumannBoundary,
)

from .parameters import SimulationParameters


def impact_boundary_conditions(
    params: SimulationParameters,
) -> Dict[str, List[BoundaryCondition]]:
    """場の名前ごとの境界条件を構築

    - 上面: 法線速度の勾配0、圧力0
    - 前面（z正側、流入）: 法線速度 = 体積率 × 液槽/液滴速度比
    - 背面（z負側、流出）: 法線速度と圧力の勾配0

    Args:
        params: 計算パラメータ

    Returns:
        場の名前をキーとする境界条件のリスト
    """
    ratio = params.pool_speed_ratio

    def inflow(layer):
        return ratio * layer["f"]

    return {
        "u.y": [NeumannBoundary.at("top", 0.0)],
        "u.z": [
            DirichletBoundary.at("front", inflow),
            NeumannBoundary.at("back", 0.0),
        ],
        "p": [
            DirichletBoundary.at("top", 0.0),
            NeumannBoundary.at("back", 0.0),
        ],
    }
