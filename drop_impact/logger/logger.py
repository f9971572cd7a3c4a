import logging
from typing import Any, Dict, Optional

from .config import LogConfig
from .formatters import DetailedFormatter
from .handlers import BufferedLogHandler, ConsoleLogHandler, FileLogHandler


class SimulationLogger:
    """シミュレーション用ロガークラス"""

    def __init__(
        self,
        name: str,
        config: Optional[LogConfig] = None,
        parent: Optional["SimulationLogger"] = None,
    ):
        """ロガーを初期化

        Args:
            name: ロガー名
            config: ロギング設定
            parent: 親ロガー（セクション用）
        """
        self.name = name
        self.config = config or LogConfig()
        self.parent = parent

        self.config.validate()
        self.config.create_directories()

        self._logger = self._create_logger()

        # デバッグ情報の記録用バッファ
        self._debug_buffer = BufferedLogHandler()
        self._logger.addHandler(self._debug_buffer)

        if parent is None:  # ルートロガーの場合のみ初期ログを出力
            self.info(f"ロギングシステムを初期化: {name}")

    def _create_logger(self) -> logging.Logger:
        """ロガーを生成して設定"""
        logger = logging.getLogger(self.name)
        logger.setLevel(getattr(logging, self.config.level.upper()))
        logger.handlers.clear()

        # セクションは親のハンドラへ伝播させる
        if self.parent is not None:
            logger.propagate = True
            return logger
        logger.propagate = False

        if self.config.file_logging["enabled"]:
            file_handler = FileLogHandler(
                filename=self.config.get_file_path(),
                formatter=DetailedFormatter(),
                max_bytes=self.config.file_logging["max_bytes"],
                backup_count=self.config.file_logging["backup_count"],
                level=self.config.file_logging["level"],
            )
            logger.addHandler(file_handler)

        if self.config.console_logging["enabled"]:
            console_handler = ConsoleLogHandler(
                level=self.config.console_logging["level"],
                use_color=self.config.console_logging["color"],
            )
            logger.addHandler(console_handler)

        return logger

    def debug(self, msg: str, *args, **kwargs):
        """デバッグレベルのログを出力"""
        self._logger.debug(msg, *args, **kwargs)

    def info(self, msg: str, *args, **kwargs):
        """情報レベルのログを出力"""
        self._logger.info(msg, *args, **kwargs)

    def warning(self, msg: str, *args, **kwargs):
        """警告レベルのログを出力"""
        self._logger.warning(msg, *args, **kwargs)

    def error(self, msg: str, *args, **kwargs):
        """エラーレベルのログを出力"""
        self._logger.error(msg, *args, **kwargs)

    def start_section(self, name: str) -> "SimulationLogger":
        """新しいログセクションを開始"""
        return SimulationLogger(f"{self.name}.{name}", self.config, self)

    def get_recent_logs(self, n: int = 100) -> list:
        """最近のログメッセージを取得"""
        return self._debug_buffer.get_logs()[-n:]

    def log_error_with_context(
        self, msg: str, error: Exception, context: Optional[Dict[str, Any]] = None
    ):
        """エラー情報をコンテキスト付きでログ出力"""
        error_info = {
            "message": msg,
            "error_type": type(error).__name__,
            "error_msg": str(error),
            "context": context or {},
        }
        self._logger.error(f"Error occurred: {error_info}", exc_info=error)

    def log_performance(self, section: str, elapsed: float):
        """パフォーマンス情報をログ出力"""
        self._logger.info(f"Performance - {section}: {elapsed:.3f} seconds")

    def close(self):
        """ハンドラを閉じて取り外す"""
        for handler in list(self._logger.handlers):
            handler.close()
            self._logger.removeHandler(handler)
