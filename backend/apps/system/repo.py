from __future__ import annotations

from apps.common.base.base_repo import BaseRepo
from .models import SystemConfig


class SystemConfigRepo(BaseRepo[SystemConfig]):
    """系统配置仓储：封装配置的读取"""

    model = SystemConfig

    def get_by_key(self, key: str) -> SystemConfig | None:
        return self.get_or_none(key=key)
