"""
截止倒计时

- format_time_remaining：纯函数，距离截止 > 0 时输出 "{d}d {h}h {m}m {s}s"，否则输出 "Submission Closed"
- CountdownTicker：后台线程按固定间隔（默认 1 秒）重算文本并回调，到点自动停止，也可由持有方随时 stop()
"""

from __future__ import annotations

import datetime
import threading
from dataclasses import dataclass
from typing import Callable, Optional

from apps.common.infra.logger import get_logger
from apps.common.utils.time import Clock, now as default_now

logger = get_logger(__name__)

CLOSED_TEXT = "Submission Closed"


@dataclass(frozen=True)
class Countdown:
    """倒计时快照"""

    deadline: datetime.datetime
    seconds_remaining: int
    text: str

    @property
    def closed(self) -> bool:
        return self.seconds_remaining <= 0


def seconds_until(deadline: datetime.datetime, current: datetime.datetime) -> int:
    """剩余整秒数（向下取整），已过期为 0 或负数"""
    distance = (deadline - current).total_seconds()
    return int(distance // 1)


def format_time_remaining(deadline: datetime.datetime, current: datetime.datetime) -> str:
    remaining = seconds_until(deadline, current)
    if remaining <= 0:
        return CLOSED_TEXT
    days, rest = divmod(remaining, 86400)
    hours, rest = divmod(rest, 3600)
    minutes, seconds = divmod(rest, 60)
    return f"{days}d {hours}h {minutes}m {seconds}s"


def snapshot(deadline: datetime.datetime, current: datetime.datetime) -> Countdown:
    remaining = seconds_until(deadline, current)
    return Countdown(
        deadline=deadline,
        seconds_remaining=max(remaining, 0),
        text=format_time_remaining(deadline, current),
    )


class CountdownTicker:
    """
    可取消的倒计时推送器

        ticker = CountdownTicker(deadline, on_tick=print)
        ticker.start()
        ...
        ticker.stop()

    - 每次 tick 调用 on_tick(text)；首个 tick 在 start() 后立即发生
    - 推送 "Submission Closed" 后线程自行结束
    """

    def __init__(
            self,
            deadline: datetime.datetime,
            on_tick: Callable[[str], None],
            *,
            interval: float = 1.0,
            clock: Clock | None = None,
    ):
        if interval <= 0 or interval > 1.0:
            raise ValueError("interval must be in (0, 1] seconds")
        self.deadline = deadline
        self.on_tick = on_tick
        self.interval = interval
        self.clock = clock or default_now
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> "CountdownTicker":
        if self.running:
            return self
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, name="countdown-ticker", daemon=True)
        self._thread.start()
        return self

    def stop(self, timeout: float | None = None) -> None:
        self._stop_event.set()
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout)

    def join(self, timeout: float | None = None) -> None:
        """等待推送线程结束（到点自动结束或被 stop）"""
        if self._thread is not None:
            self._thread.join(timeout)

    def tick(self) -> str:
        """计算并推送一次，返回推送的文本"""
        text = format_time_remaining(self.deadline, self.clock())
        self.on_tick(text)
        return text

    def _run(self) -> None:
        try:
            if self.tick() == CLOSED_TEXT:
                return
            while not self._stop_event.wait(self.interval):
                if self.tick() == CLOSED_TEXT:
                    return
        except Exception:
            logger.exception("倒计时回调异常，停止推送")
        finally:
            self._stop_event.set()
