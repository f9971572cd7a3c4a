from __future__ import annotations

from typing import List, Sequence, Tuple, Union

import numpy as np

from .base import Field, GridInfo
from .scalar import ScalarField


class VectorField(Field):
    """3次元ベクトル場"""

    def __init__(
        self,
        grid: GridInfo,
        initial_values: Sequence[Union[float, np.ndarray]] = (0.0, 0.0, 0.0),
    ):
        """ベクトル場を初期化

        Args:
            grid: 計算グリッドの情報
            initial_values: 各成分の初期値（数値または配列）
        """
        super().__init__(grid)

        components = [ScalarField(grid, value) for value in initial_values]
        if len(components) != len(grid.shape):
            raise ValueError("成分の数が次元数と一致しません")

        self._components = tuple(components)

    @property
    def data(self) -> Tuple[np.ndarray, ...]:
        """フィールドデータを取得"""
        return tuple(comp.data for comp in self._components)

    @property
    def components(self) -> List[ScalarField]:
        """スカラー成分を取得"""
        return list(self._components)

    def magnitude(self) -> ScalarField:
        """ベクトルの大きさを計算"""
        return ScalarField(
            self.grid, np.sqrt(sum(comp.data**2 for comp in self._components))
        )

    def curl(self) -> VectorField:
        """回転を計算: ∇×v"""
        derivs = [
            [np.gradient(comp.data, self.dx[j], axis=j) for j in range(3)]
            for comp in self._components
        ]

        curl_x = derivs[2][1] - derivs[1][2]  # ∂w/∂y - ∂v/∂z
        curl_y = derivs[0][2] - derivs[2][0]  # ∂u/∂z - ∂w/∂x
        curl_z = derivs[1][0] - derivs[0][1]  # ∂v/∂x - ∂u/∂y

        return VectorField(self.grid, (curl_x, curl_y, curl_z))
