"""
时间工具：统一使用感知时区的时间，便于测试中注入固定时钟
"""

from __future__ import annotations

import datetime
from typing import Callable

from django.utils import timezone

Clock = Callable[[], datetime.datetime]


def now() -> datetime.datetime:
    """返回当前时间（感知时区），服务层默认时钟"""
    return timezone.now()


def fixed_clock(moment: datetime.datetime) -> Clock:
    """构造返回固定时刻的时钟，供测试或批处理回放使用"""
    return lambda: moment
