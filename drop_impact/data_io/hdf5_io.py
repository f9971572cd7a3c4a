"""HDF5形式での状態の入出力を提供するモジュール"""

from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Mapping, Tuple, Union

import h5py
import numpy as np


class HDF5IO:
    """HDF5形式でのデータ入出力

    ファイルは "fields" グループ（場ごとのデータセット）、"levels"
    データセット（セルごとの細分化レベル）、ルート属性（時刻など）で構成されます。
    """

    def save_state(
        self,
        path: Union[str, Path],
        fields: Mapping[str, np.ndarray],
        levels: np.ndarray,
        attrs: Mapping[str, Any],
    ) -> Path:
        """場と属性を保存

        Args:
            path: 保存先のパス（拡張子はそのまま使用）
            fields: 場の名前と配列の対応
            levels: セルごとの細分化レベル
            attrs: ルートに保存する属性

        Returns:
            保存したファイルのパス
        """
        path = Path(path)
        with h5py.File(path, "w") as f:
            group = f.create_group("fields")
            for name, data in fields.items():
                group.create_dataset(name, data=np.asarray(data))
            f.create_dataset("levels", data=np.asarray(levels))

            for key, value in attrs.items():
                f.attrs[key] = value
            f.attrs["saved_at"] = datetime.now().isoformat()

        return path

    def load_state(
        self, path: Union[str, Path]
    ) -> Tuple[Dict[str, np.ndarray], np.ndarray, Dict[str, Any]]:
        """保存した場と属性を読み込む

        Returns:
            (場の辞書, 細分化レベル, 属性の辞書) のタプル
        """
        with h5py.File(Path(path), "r") as f:
            fields = {name: f["fields"][name][:] for name in f["fields"].keys()}
            levels = f["levels"][:]
            attrs = {key: f.attrs[key] for key in f.attrs.keys()}
        return fields, levels, attrs
