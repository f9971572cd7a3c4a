"""界面ファセットの抽出と書き出しを提供するモジュール

体積率場の 0.5 等値面をマーチングキューブ法で三角形ファセットに分解し、
1頂点1行（"x y z"）、ファセット間を空行で区切ったテキストとして保存します。
"""

from pathlib import Path
from typing import Sequence, Tuple, Union

import numpy as np
from skimage import measure


def extract_facets(
    values: np.ndarray,
    spacing: Sequence[float],
    origin: Sequence[float] = (0.0, 0.0, 0.0),
    level: float = 0.5,
) -> Tuple[np.ndarray, np.ndarray]:
    """セル中心の体積率場から等値面を抽出

    Args:
        values: セル中心で定義された3次元配列
        spacing: 各方向のグリッド間隔
        origin: 領域の原点（セル中心へのずれは内部で加算）
        level: 等値面の値

    Returns:
        (頂点座標 (N, 3), 三角形の頂点番号 (M, 3)) のタプル。
        等値面が存在しない場合はどちらも空配列
    """
    values = np.asarray(values, dtype=np.float64)
    empty = (np.zeros((0, 3)), np.zeros((0, 3), dtype=int))
    if min(values.shape) < 2:
        return empty
    # 値域が等値面をまたがない場合は抽出できない
    if not values.min() < level < values.max():
        return empty

    verts, faces, _, _ = measure.marching_cubes(
        values, level=level, spacing=tuple(spacing), allow_degenerate=False
    )
    offset = np.asarray(origin, dtype=np.float64) + 0.5 * np.asarray(spacing)
    return verts + offset, faces


def write_facets(
    path: Union[str, Path], vertices: np.ndarray, faces: np.ndarray
) -> int:
    """ファセットをテキストファイルに書き出す

    Returns:
        書き出したファセット数
    """
    with open(path, "w", encoding="utf-8") as fp:
        for face in faces:
            for index in face:
                x, y, z = vertices[index]
                fp.write(f"{x:g} {y:g} {z:g}\n")
            fp.write("\n")
    return len(faces)


def read_facets(path: Union[str, Path]) -> list:
    """書き出したファセットファイルを読み込む

    Returns:
        各ファセットの頂点座標配列のリスト
    """
    facets = []
    current = []
    with open(path, "r", encoding="utf-8") as fp:
        for line in fp:
            line = line.strip()
            if not line:
                if current:
                    facets.append(np.array(current))
                    current = []
                continue
            current.append([float(v) for v in line.split()])
    if current:
        facets.append(np.array(current))
    return facets
