"""設定の基底クラスと共通ユーティリティ"""

from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Dict, Optional


@dataclass
class BaseConfig:
    """設定の基底クラス

    サブクラスは `validate` をオーバーライドし、入れ子の設定を持つ場合は
    `load` と `to_dict` もオーバーライドします。
    """

    def validate(self) -> None:
        """デフォルトの検証メソッド（サブクラスでオーバーライド）"""
        pass

    def load(self, config_dict: Dict[str, Any]) -> "BaseConfig":
        """辞書から設定を読み込む

        未知のキーは設定ミスとして扱います。

        Args:
            config_dict: 読み込む設定辞書

        Returns:
            現在の値を指定値で上書きした新しい設定
        """
        known = {f.name for f in fields(self)}
        unknown = set(config_dict) - known
        if unknown:
            raise ValueError(
                f"{self.__class__.__name__} に未知の設定項目があります: {sorted(unknown)}"
            )
        return replace(self, **config_dict)

    def to_dict(self) -> Dict[str, Any]:
        """オブジェクトを辞書に変換"""
        return asdict(self)

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> "BaseConfig":
        """辞書からオブジェクトを生成"""
        return cls().load(config_dict)

    def __getitem__(self, key: str) -> Any:
        """辞書風のインデックスアクセスを可能にする"""
        try:
            return getattr(self, key)
        except AttributeError:
            raise KeyError(
                f"'{self.__class__.__name__}' オブジェクトに '{key}' は存在しません"
            )

    def get(self, key: str, default: Optional[Any] = None) -> Any:
        """辞書風のgetメソッドを実装"""
        return getattr(self, key, default)


def load_config_safely(
    config_dict: Optional[Dict[str, Any]], default_dict: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    """設定辞書をデフォルト値と再帰的にマージ

    Args:
        config_dict: 読み込む設定辞書（Noneは空として扱う）
        default_dict: デフォルト値の辞書

    Returns:
        マージされた設定辞書
    """
    if default_dict is None:
        default_dict = {}
    if config_dict is None:
        config_dict = {}

    def deep_merge(default, override):
        if isinstance(default, dict) and isinstance(override, dict):
            merged = default.copy()
            for key, value in override.items():
                merged[key] = deep_merge(merged.get(key, {}), value)
            return merged
        return override

    return deep_merge(default_dict, config_dict)


def require_positive(name: str, value: float) -> None:
    """正の有限値であることを検証"""
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        raise ValueError(f"{name}は数値である必要があります: {value!r}")
    if not value > 0 or value == float("inf"):
        raise ValueError(f"{name}は正の有限値である必要があります: {value}")
