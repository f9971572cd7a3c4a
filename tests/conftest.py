import pytest

from drop_impact.config import CaseConfig, SimulationConfig
from drop_impact.engine import UniformGridEngine
from drop_impact.physics import derive_parameters


def make_config(tmp_path, **case_overrides) -> SimulationConfig:
    """粗い格子で短時間だけ回す設定を作成"""
    case = {
        "max_level": 7,
        "impact_angle": 90.0,
        "drop_velocity": 1.0,
        "pool_velocity": 0.0,
        "drop_radius": 1.0,
        "pool_depth": 2.0,
        "domain_size": 8.0,
        "end_time": 0.01,
    }
    case.update(case_overrides)
    return SimulationConfig().load(
        {
            "case": case,
            "numerical": {"base_level": 4, "max_subsamples": 4},
            "output": {"output_dir": str(tmp_path), "movies": []},
        }
    )


@pytest.fixture
def config(tmp_path):
    return make_config(tmp_path)


@pytest.fixture
def params(config):
    return derive_parameters(config.physics, config.case, config.refinement.level_span)


@pytest.fixture
def engine(config):
    return UniformGridEngine(
        domain_size=config.case.domain_size,
        base_level=config.numerical.base_level,
        max_subsamples=config.numerical.max_subsamples,
    )


@pytest.fixture
def unit_case():
    return CaseConfig(
        max_level=9,
        impact_angle=90.0,
        drop_velocity=1.0,
        pool_velocity=0.0,
        drop_radius=1.0,
        pool_depth=2.0,
        domain_size=8.0,
        end_time=0.01,
    )


@pytest.fixture
def config_factory(tmp_path):
    def factory(**case_overrides):
        return make_config(tmp_path, **case_overrides)

    return factory
