"""シミュレーション設定パッケージ

このパッケージは、シミュレーションの設定を管理するためのクラスを提供します。
"""

from .base import BaseConfig, load_config_safely
from .case import CaseConfig
from .geometry import GeometryConfig
from .numerical import NumericalConfig
from .output import DEFAULT_MOVIES, OutputConfig
from .physics import PhaseConfig, PhysicsConfig
from .refinement import RefinementConfig
from .simulation_config import SimulationConfig

__all__ = [
    "BaseConfig",
    "load_config_safely",
    "SimulationConfig",
    "PhysicsConfig",
    "PhaseConfig",
    "CaseConfig",
    "GeometryConfig",
    "RefinementConfig",
    "NumericalConfig",
    "OutputConfig",
    "DEFAULT_MOVIES",
]
