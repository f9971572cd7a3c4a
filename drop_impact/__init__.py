"""液槽への斜め液滴衝突シミュレーションの制御パッケージ"""

__version__ = "0.1.0"
