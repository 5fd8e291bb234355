from __future__ import annotations

import json
from datetime import datetime
from typing import Any

from django.conf import settings
from django.core.cache import cache
from django.utils import timezone
from django.utils.dateparse import parse_datetime

from apps.common.base.base_service import BaseService
from apps.common.exceptions import ValidationError
from apps.common.infra.logger import get_logger
from .models import SystemConfig
from .repo import SystemConfigRepo

logger = get_logger(__name__)


class ConfigService(BaseService[Any]):
    """
    系统配置服务：动态配置读取

    核心功能：
    1. 配置优先级：后台 SystemConfig > settings.py > 传入默认值
    2. 后台配置命中后写入缓存（5 分钟），后台修改时由 admin 调用 invalidate() 清理
    3. settings 回退值不缓存，保证 override_settings / 环境变量变更即时生效
    """

    cache_prefix = "system_config:"
    cache_timeout = 300

    # 支持后台覆盖的配置清单：key -> 类型/描述/敏感
    SUPPORTED_CONFIGS = {
        "EVENT_BRAND": {
            "type": SystemConfig.ValueType.STRING,
            "desc": "赛事品牌名，出现在电子票页眉与邮件标题中",
        },
        "ROLE_BINDINGS": {
            "type": SystemConfig.ValueType.JSON,
            "desc": "凭证 -> 角色映射，JSON 对象，例如 {\"admin@edcrec.com\": \"platform_admin\"}",
        },
        "PHASE1_VIDEO_DEADLINE": {
            "type": SystemConfig.ValueType.DATETIME,
            "desc": "阶段一视频链接修改截止时间（ISO-8601，带时区）",
        },
        "PHASE2_DEADLINE": {
            "type": SystemConfig.ValueType.DATETIME,
            "desc": "阶段二提交截止时间（ISO-8601，带时区）",
        },
        "NOTIFICATION_MAX_WORKERS": {
            "type": SystemConfig.ValueType.INT,
            "desc": "单支队伍邮件并发发送线程数",
        },
        "EMAIL_HOST": {"type": SystemConfig.ValueType.STRING, "desc": "SMTP 主机（未配置发信账号时使用）"},
        "EMAIL_PORT": {"type": SystemConfig.ValueType.INT, "desc": "SMTP 端口"},
        "EMAIL_HOST_USER": {"type": SystemConfig.ValueType.STRING, "desc": "SMTP 用户名"},
        "EMAIL_HOST_PASSWORD": {
            "type": SystemConfig.ValueType.SECRET,
            "desc": "SMTP 密码/授权码",
            "sensitive": True,
        },
        "EMAIL_USE_TLS": {"type": SystemConfig.ValueType.BOOL, "desc": "SMTP 是否启用 TLS"},
        "EMAIL_USE_SSL": {"type": SystemConfig.ValueType.BOOL, "desc": "SMTP 是否启用 SSL"},
    }

    def __init__(self, repo: SystemConfigRepo | None = None):
        self.repo = repo or SystemConfigRepo()

    def _cache_key(self, key: str) -> str:
        return f"{self.cache_prefix}{key}"

    def get(self, key: str, default: Any = None) -> Any:
        """按优先级读取配置值"""
        cache_key = self._cache_key(key)
        cached = cache.get(cache_key)
        if cached is not None:
            return cached

        cfg = self.repo.get_by_key(key)
        if cfg:
            value = cfg.cast_value()
            cache.set(cache_key, value, timeout=self.cache_timeout)
            return value

        value = getattr(settings, key, None)
        return default if value is None else value

    def get_datetime(self, key: str, default: datetime | None = None) -> datetime:
        """
        读取时间类配置并解析为感知时区的 datetime

        - 接受 datetime 或 ISO-8601 字符串；无时区信息时按当前时区补齐
        - 无法解析时抛 ValidationError，避免截止时间静默失效
        """
        raw = self.get(key, default)
        if isinstance(raw, datetime):
            value = raw
        else:
            value = parse_datetime(str(raw or "").strip())
        if value is None:
            logger.error("时间配置无法解析", extra={"key": key, "raw": raw})
            raise ValidationError(message=f"Invalid datetime configuration: {key}")
        if timezone.is_naive(value):
            value = timezone.make_aware(value, timezone.get_current_timezone())
        return value

    def ensure_supported_configs(self) -> None:
        """确保支持的配置项都存在记录，缺失时按 settings 默认值创建（不覆盖已有值）"""
        existing = set(self.repo.get_queryset().values_list("key", flat=True))
        to_create = []
        for key, meta in self.SUPPORTED_CONFIGS.items():
            if key in existing:
                continue
            default_val = getattr(settings, key, "")
            if meta["type"] == SystemConfig.ValueType.JSON:
                value = json.dumps(default_val, ensure_ascii=False)
            else:
                value = "" if default_val is None else str(default_val)
            to_create.append(
                SystemConfig(
                    key=key,
                    value=value,
                    value_type=meta["type"],
                    description=meta.get("desc", ""),
                    is_sensitive=meta.get("sensitive", False),
                )
            )
        if to_create:
            SystemConfig.objects.bulk_create(to_create, ignore_conflicts=True)

    def invalidate(self, key: str | None = None) -> None:
        """配置变更后清理缓存"""
        if key:
            cache.delete(self._cache_key(key))
        else:
            cache.clear()

    def perform(self, *args, **kwargs):
        """占位实现，满足 BaseService 抽象约束"""
        return None
