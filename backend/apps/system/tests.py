# -*- coding: utf-8 -*-
"""
系统配置单测
- ConfigService 的读取优先级与时间解析
- MailAccount 默认账号唯一
"""
from __future__ import annotations

from datetime import datetime, timezone as dt_timezone

from django.core.cache import cache
from django.test import TestCase, override_settings

from apps.common.exceptions import ValidationError
from apps.system.models import MailAccount, SystemConfig
from apps.system.services import ConfigService


class ConfigServiceTests(TestCase):
    """后台配置 > settings > 默认值"""

    def setUp(self):
        cache.clear()
        self.service = ConfigService()

    def tearDown(self):
        cache.clear()

    @override_settings(EVENT_BRAND="SPARK TEST")
    def test_falls_back_to_settings(self):
        self.assertEqual(self.service.get("EVENT_BRAND"), "SPARK TEST")

    def test_falls_back_to_default_when_missing_everywhere(self):
        self.assertEqual(self.service.get("NOT_A_REAL_KEY", 42), 42)

    def test_db_row_overrides_settings(self):
        SystemConfig.objects.create(
            key="ROLE_BINDINGS",
            value='{"ops@example.com": "platform_admin"}',
            value_type=SystemConfig.ValueType.JSON,
        )
        self.assertEqual(self.service.get("ROLE_BINDINGS"), {"ops@example.com": "platform_admin"})

    def test_invalidate_drops_cached_value(self):
        row = SystemConfig.objects.create(key="EVENT_BRAND", value="A")
        self.assertEqual(self.service.get("EVENT_BRAND"), "A")
        row.value = "B"
        row.save()
        self.assertEqual(self.service.get("EVENT_BRAND"), "A")
        self.service.invalidate("EVENT_BRAND")
        self.assertEqual(self.service.get("EVENT_BRAND"), "B")

    @override_settings(PHASE2_DEADLINE="2025-04-02T23:59:59+05:30")
    def test_get_datetime_parses_iso_string(self):
        deadline = self.service.get_datetime("PHASE2_DEADLINE")
        self.assertEqual(deadline.astimezone(dt_timezone.utc), datetime(2025, 4, 2, 18, 29, 59, tzinfo=dt_timezone.utc))

    @override_settings(PHASE2_DEADLINE="not-a-date")
    def test_get_datetime_rejects_garbage(self):
        with self.assertRaises(ValidationError):
            self.service.get_datetime("PHASE2_DEADLINE")

    def test_ensure_supported_configs_does_not_overwrite(self):
        SystemConfig.objects.create(key="EVENT_BRAND", value="Custom")
        self.service.ensure_supported_configs()
        self.assertEqual(SystemConfig.objects.get(key="EVENT_BRAND").value, "Custom")
        self.assertTrue(SystemConfig.objects.filter(key="PHASE2_DEADLINE").exists())


class MailAccountTests(TestCase):
    """发信账号：默认账号唯一"""

    def _make(self, name: str, **kwargs) -> MailAccount:
        return MailAccount.objects.create(
            name=name,
            host="smtp.example.com",
            username=f"{name}@example.com",
            password="pwd",
            **kwargs,
        )

    def test_only_one_default(self):
        first = self._make("first", is_default=True)
        second = self._make("second", is_default=True)
        first.refresh_from_db()
        self.assertFalse(first.is_default)
        self.assertEqual(MailAccount.objects.get_default(), second)

    def test_get_default_falls_back_to_priority(self):
        self._make("low", priority=50)
        high = self._make("high", priority=1)
        self.assertEqual(MailAccount.objects.get_default(), high)
