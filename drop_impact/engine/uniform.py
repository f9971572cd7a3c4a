"""一様格子上の参照エンジンを提供するモジュール

一様格子の各セルに「仮想的な細分化レベル」を記録し、適応格子エンジンの
操作（細分化、粗視化、体積率の標本化、誤差推定）をこの台帳上で再現します。
Navier-Stokes方程式は解かず、advance は体積力と境界条件の適用だけを行います。
"""

import logging
from pathlib import Path
from typing import Dict, Mapping, Optional, Sequence, Tuple, Union

import numpy as np
from scipy import ndimage

from drop_impact.core.boundary import BoundaryCondition
from drop_impact.core.field import GridInfo, ScalarField, VectorField
from drop_impact.data_io import HDF5IO, extract_facets, write_facets

from .base import (
    FIELD_NAMES,
    VELOCITY_COMPONENTS,
    Engine,
    FieldStats,
    ImplicitFunction,
    InterfaceExtent,
    PathLike,
    Predicate,
    SolverControls,
)

# 界面セルとみなす体積率の幅
INTERFACE_EPSILON = 1.0e-6
# 小構造の検出に使う体積率の閾値
DROPLET_THRESHOLD = 1.0e-4
# 標本点評価1回あたりの最大点数
CHUNK_POINTS = 2**21


class UniformGridEngine(Engine):
    """細分化レベル台帳付きの一様格子エンジン"""

    def __init__(
        self,
        domain_size: float,
        base_level: int = 5,
        max_subsamples: int = 4,
        cfl: float = 0.8,
        logger: Optional[logging.Logger] = None,
    ):
        """エンジンを初期化

        Args:
            domain_size: 計算領域の一辺の長さ
            base_level: 一様格子のレベル（一辺 2**base_level セル）
            max_subsamples: 体積率標本化の1軸あたり最大標本数
            cfl: 時間刻み幅の提案に使うCFL数
            logger: ロガー
        """
        if domain_size <= 0:
            raise ValueError("領域サイズは正の値である必要があります")
        if base_level < 1:
            raise ValueError("base_levelは1以上である必要があります")

        self.logger = logger or logging.getLogger(__name__)
        self.base_level = base_level
        self.max_subsamples = max_subsamples
        self.cfl = cfl

        n = 2**base_level
        dx = domain_size / n
        self._domain_size = float(domain_size)
        self.grid = GridInfo(
            shape=(n, n, n),
            dx=(dx, dx, dx),
            origin=(0.0, 0.0, -domain_size / 2.0),
        )
        self._centers = self.grid.cell_centers()

        self._scalars: Dict[str, ScalarField] = {
            name: ScalarField(self.grid)
            for name in FIELD_NAMES
            if name not in VELOCITY_COMPONENTS
        }
        self._velocity = VectorField(self.grid)
        self._levels = np.full(self.grid.shape, base_level, dtype=np.int64)

        self._controls = SolverControls()
        self._acceleration = (0.0, 0.0, 0.0)
        self._boundary_conditions: Dict[str, Sequence[BoundaryCondition]] = {}
        self._io = HDF5IO()

    @property
    def domain_size(self) -> float:
        return self._domain_size

    @property
    def spacing(self) -> float:
        """格子間隔"""
        return self.grid.dx[0]

    @property
    def solver_controls(self) -> SolverControls:
        return self._controls

    @property
    def acceleration(self) -> Tuple[float, float, float]:
        return self._acceleration

    def coordinates(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        return self._centers

    def field(self, name: str) -> np.ndarray:
        if name in VELOCITY_COMPONENTS:
            return self._velocity.components[VELOCITY_COMPONENTS.index(name)].data
        if name in self._scalars:
            return self._scalars[name].data
        raise KeyError(f"未知の場です: {name}")

    def set_field(self, name: str, values: Union[float, np.ndarray]) -> None:
        values = np.broadcast_to(np.asarray(values, dtype=np.float64), self.grid.shape)
        if name in VELOCITY_COMPONENTS:
            self._velocity.components[VELOCITY_COMPONENTS.index(name)].data = values
        elif name in self._scalars:
            self._scalars[name].data = values
        else:
            raise KeyError(f"未知の場です: {name}")

    def _fields(self) -> Dict[str, np.ndarray]:
        return {name: self.field(name) for name in FIELD_NAMES}

    def _sample_offsets(self, m: int) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """セル内の m×m×m 標本点のセル中心からのずれ"""
        h = self.spacing
        offsets = ((np.arange(m) + 0.5) / m - 0.5) * h
        ox, oy, oz = np.meshgrid(offsets, offsets, offsets, indexing="ij")
        return ox.ravel()[None, :], oy.ravel()[None, :], oz.ravel()[None, :]

    def _reduce_subcells(self, func, mask: np.ndarray, m: int, reducer) -> np.ndarray:
        """mask で選んだセルの m×m×m 標本点で関数を評価し、セルごとに縮約

        標本点の総数が CHUNK_POINTS を超えないようにセルを分割して評価します。
        """
        ox, oy, oz = self._sample_offsets(m)
        centers = [c[mask] for c in self._centers]
        n_cells = centers[0].size
        chunk = max(1, CHUNK_POINTS // (m**3))

        result = np.empty(n_cells)
        for start in range(0, n_cells, chunk):
            stop = min(start + chunk, n_cells)
            x, y, z = (c[start:stop, None] for c in centers)
            points = (x + ox, y + oy, z + oz)
            values = np.broadcast_to(np.asarray(func(*points)), points[0].shape)
            result[start:stop] = reducer(values)
        return result

    def _samples_per_axis(self) -> np.ndarray:
        """セルのレベルに応じた1軸あたりの標本数"""
        samples = np.power(2.0, self._levels - self.base_level + 1)
        return np.clip(samples, 1, self.max_subsamples).astype(np.int64)

    def fraction(self, phi: ImplicitFunction) -> np.ndarray:
        result = np.zeros(self.grid.shape)
        samples = self._samples_per_axis()
        for m in np.unique(samples):
            mask = samples == m
            result[mask] = self._reduce_subcells(
                phi, mask, int(m), lambda v: np.mean(v > 0, axis=1)
            )
        return result

    def refine(self, predicate: Predicate, level: int) -> int:
        candidates = self._levels < level
        if not candidates.any():
            return 0
        hits = self._reduce_subcells(
            predicate, candidates, self.max_subsamples, lambda v: np.any(v, axis=1)
        )
        marked = np.zeros(self.grid.shape, dtype=bool)
        marked[candidates] = hits > 0
        self._levels[marked] = level
        return int(np.count_nonzero(marked))

    def unrefine(self, predicate: Predicate, level: int) -> int:
        inside = np.broadcast_to(np.asarray(predicate(*self._centers)), self.grid.shape)
        mask = inside & (self._levels > level)
        self._levels[mask] = level
        return int(np.count_nonzero(mask))

    def adapt_wavelet(
        self,
        fields: Sequence[str],
        thresholds: Sequence[float],
        max_level: int,
        min_level: int,
    ) -> Tuple[int, int]:
        if len(fields) != len(thresholds):
            raise ValueError("場の数と閾値の数が一致しません")
        if min_level > max_level:
            raise ValueError("最小レベルが最大レベルを超えています")

        refine = np.zeros(self.grid.shape, dtype=bool)
        coarsen = np.ones(self.grid.shape, dtype=bool)
        for name, threshold in zip(fields, thresholds):
            data = self.field(name)
            # 近傍平均からのずれを離散化誤差の推定値とする
            error = np.abs(data - ndimage.uniform_filter(data, size=3, mode="nearest"))
            refine |= error > threshold
            coarsen &= error < threshold / 1.5

        new_levels = np.where(
            refine, self._levels + 1, np.where(coarsen, self._levels - 1, self._levels)
        )
        new_levels = np.clip(new_levels, min_level, max_level)

        refined = int(np.count_nonzero(new_levels > self._levels))
        coarsened = int(np.count_nonzero(new_levels < self._levels))
        self._levels = new_levels
        return refined, coarsened

    def vorticity(self) -> np.ndarray:
        # 描画断面（x一定）に垂直な成分
        return self._velocity.curl().components[0].data

    def statistics(self, name: str) -> FieldStats:
        data = self.field(name)
        return FieldStats(
            minimum=float(data.min()),
            maximum=float(data.max()),
            sum=float(data.sum() * self.grid.cell_volume),
            mean=float(data.mean()),
        )

    def interface_extent(self) -> InterfaceExtent:
        f = self.field("f")
        mask = (f > INTERFACE_EPSILON) & (f < 1.0 - INTERFACE_EPSILON)
        if not mask.any():
            return InterfaceExtent.empty()
        x, y, z = (c[mask] for c in self._centers)
        return InterfaceExtent(
            float(x.min()),
            float(x.max()),
            float(y.min()),
            float(y.max()),
            float(z.min()),
            float(z.max()),
        )

    def remove_droplets(self, name: str, min_diameter: int, bubbles: bool = False) -> int:
        data = self.field(name)
        phase = 1.0 - data if bubbles else data
        labels, count = ndimage.label(phase > DROPLET_THRESHOLD)
        if count == 0:
            return 0

        # 葉セル数が min_diameter**3 以下の連結成分を除去する
        leaves = np.power(8.0, self._levels - self.base_level)
        sizes = ndimage.sum_labels(leaves, labels, index=np.arange(1, count + 1))
        small = np.flatnonzero(sizes <= min_diameter**3) + 1
        if small.size == 0:
            return 0

        result = data.copy()
        result[np.isin(labels, small)] = 1.0 if bubbles else 0.0
        self.set_field(name, result)
        return int(small.size)

    def output_facets(self, values: np.ndarray, path: PathLike) -> int:
        vertices, faces = extract_facets(values, self.grid.dx, self.grid.origin)
        return write_facets(path, vertices, faces)

    def _state_attrs(self) -> Dict[str, Union[float, int]]:
        return {
            "domain_size": self._domain_size,
            "base_level": self.base_level,
        }

    def write_snapshot(self, path: PathLike, time: float) -> None:
        attrs = {**self._state_attrs(), "kind": "snapshot", "time": time}
        self._io.save_state(path, self._fields(), self._levels, attrs)

    def dump(self, path: PathLike, iteration: int, time: float) -> None:
        attrs = {
            **self._state_attrs(),
            "kind": "checkpoint",
            "iteration": iteration,
            "time": time,
        }
        self._io.save_state(path, self._fields(), self._levels, attrs)
        self.logger.debug(f"チェックポイントを保存しました: {path} (i={iteration}, t={time:g})")

    def restore(self, path: PathLike) -> Optional[Tuple[int, float]]:
        path = Path(path)
        if not path.exists():
            return None

        fields, levels, attrs = self._io.load_state(path)
        if levels.shape != self.grid.shape:
            raise ValueError(
                f"チェックポイントの格子形状が一致しません: {levels.shape} != {self.grid.shape}"
            )
        for name, data in fields.items():
            self.set_field(name, data)
        self._levels = levels.astype(np.int64)

        iteration, time = int(attrs["iteration"]), float(attrs["time"])
        self.logger.debug(f"チェックポイントから復元しました: {path} (i={iteration}, t={time:g})")
        return iteration, time

    def set_solver_controls(self, controls: SolverControls) -> None:
        self._controls = controls

    def set_acceleration(self, acceleration: Tuple[float, float, float]) -> None:
        if len(acceleration) != 3:
            raise ValueError("加速度は3成分である必要があります")
        self._acceleration = tuple(float(a) for a in acceleration)

    def set_boundary_conditions(
        self, conditions: Mapping[str, Sequence[BoundaryCondition]]
    ) -> None:
        unknown = set(conditions) - set(FIELD_NAMES)
        if unknown:
            raise KeyError(f"未知の場に境界条件が指定されました: {sorted(unknown)}")
        self._boundary_conditions = dict(conditions)

    def apply_boundary_conditions(self) -> None:
        """登録された境界条件を全ての場に適用"""
        for name, conditions in self._boundary_conditions.items():
            data = self.field(name)
            for condition in conditions:
                data = condition.apply(data, self.spacing, self._fields())
            self.set_field(name, data)

    def timestep(self, max_dt: float) -> float:
        dt = min(max_dt, self._controls.max_dt)
        u_max = float(self._velocity.magnitude().max())
        if u_max > 0:
            dt = min(dt, self.cfl * self.spacing / u_max)
        return dt

    def advance(self, dt: float) -> None:
        if not dt > 0:
            raise ValueError(f"時間刻み幅は正である必要があります: {dt}")
        for name, a in zip(VELOCITY_COMPONENTS, self._acceleration):
            if a != 0.0:
                self.set_field(name, self.field(name) + a * dt)
        self.apply_boundary_conditions()

    def cell_count(self) -> int:
        return int(round(float(np.sum(np.power(8.0, self._levels - self.base_level)))))

    def levels(self) -> np.ndarray:
        return self._levels.copy()

    def slice(self, name: str, axis: int = 0, position: float = 0.0) -> np.ndarray:
        data = self._levels.astype(np.float64) if name == "level" else self.field(name)
        index = int((position - self.grid.origin[axis]) / self.grid.dx[axis])
        index = min(max(index, 0), self.grid.shape[axis] - 1)
        return np.take(data, index, axis=axis)
