"""壁時計時間による計算時間の上限を管理するモジュール"""

import re
import time
from typing import Optional, Union

_CLOCK_PATTERN = re.compile(r"^(\d+):([0-5]?\d):([0-5]?\d)$")


def parse_runtime(value: Union[str, float, int]) -> float:
    """秒数または HH:MM:SS 形式の文字列を秒に変換

    Raises:
        ValueError: 形式が不正、または正でない場合
    """
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        seconds = float(value)
    else:
        text = str(value).strip()
        match = _CLOCK_PATTERN.match(text)
        if match:
            hours, minutes, secs = (int(g) for g in match.groups())
            seconds = float(hours * 3600 + minutes * 60 + secs)
        else:
            try:
                seconds = float(text)
            except ValueError:
                raise ValueError(f"計算時間の上限の形式が不正です: {value!r}") from None

    if not seconds > 0 or seconds == float("inf"):
        raise ValueError(f"計算時間の上限は正の有限値である必要があります: {value!r}")
    return seconds


class RuntimeLimit:
    """計算開始からの壁時計時間の上限"""

    def __init__(self, seconds: Optional[float] = None):
        """上限を初期化

        Args:
            seconds: 上限秒数（Noneなら無制限）
        """
        self.seconds = seconds
        self._start = time.monotonic()

    @classmethod
    def parse(cls, value: Optional[Union[str, float]]) -> "RuntimeLimit":
        return cls(None if value is None else parse_runtime(value))

    def restart(self) -> None:
        self._start = time.monotonic()

    @property
    def elapsed(self) -> float:
        return time.monotonic() - self._start

    def exceeded(self) -> bool:
        if self.seconds is None:
            return False
        return self.elapsed >= self.seconds
