"""ログフォーマッタを提供するモジュール

このモジュールは、ログメッセージの書式設定を行うフォーマッタクラスを提供します。
"""

import copy
import datetime
import logging


class DefaultFormatter(logging.Formatter):
    """標準的なログフォーマッタ

    基本的なタイムスタンプ、ログレベル、メッセージを含むフォーマットを提供します。
    """

    def __init__(self, fmt: str = None):
        """フォーマッタを初期化

        Args:
            fmt: フォーマット文字列（Noneの場合はデフォルト使用）
        """
        if fmt is None:
            fmt = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        super().__init__(fmt)


class DetailedFormatter(logging.Formatter):
    """詳細なログフォーマッタ

    ファイル名と行番号を含むフォーマットを提供します。
    """

    def __init__(self, fmt: str = None):
        """フォーマッタを初期化

        Args:
            fmt: フォーマット文字列（Noneの場合はデフォルト使用）
        """
        if fmt is None:
            fmt = (
                "%(asctime)s - %(name)s - %(levelname)s - "
                "[%(filename)s:%(lineno)d] - %(message)s"
            )
        super().__init__(fmt)

    def formatTime(self, record: logging.LogRecord, datefmt: str = None) -> str:
        """時刻をミリ秒精度でフォーマット"""
        ct = datetime.datetime.fromtimestamp(record.created)
        if datefmt:
            return ct.strftime(datefmt)
        return ct.strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]


class ColoredFormatter(logging.Formatter):
    """カラー対応のログフォーマッタ

    ログレベルに応じて異なる色でメッセージを表示します。
    """

    # ANSIエスケープシーケンス
    COLORS = {
        "DEBUG": "\033[36m",  # シアン
        "INFO": "\033[32m",  # 緑
        "WARNING": "\033[33m",  # 黄
        "ERROR": "\033[31m",  # 赤
        "CRITICAL": "\033[35m",  # マゼンタ
        "RESET": "\033[0m",
    }

    def __init__(self, fmt: str = None, use_color: bool = True):
        """フォーマッタを初期化

        Args:
            fmt: フォーマット文字列（Noneの場合はデフォルト使用）
            use_color: 色付けを使用するかどうか
        """
        if fmt is None:
            fmt = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        super().__init__(fmt)
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        """ログレコードをフォーマット

        他のハンドラに色コードが漏れないよう、レコードの複製に色を付けます。
        """
        if not self.use_color:
            return super().format(record)

        colored = copy.copy(record)
        color = self.COLORS.get(record.levelname, self.COLORS["RESET"])
        colored.levelname = f"{color}{record.levelname}{self.COLORS['RESET']}"
        return super().format(colored)
