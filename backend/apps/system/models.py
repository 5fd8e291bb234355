from __future__ import annotations

import json
from typing import Any

from django.db import models
from django.core.exceptions import ValidationError


class SystemConfig(models.Model):
    """
    系统配置项模型
    - 场景：管理员在后台为可覆盖的业务参数设置运行期值（角色映射、截止时间、品牌等），优先于 settings
    - 约束：启动依赖（数据库、密钥、Broker）仍由环境变量提供，不在此处覆盖
    """

    class ValueType(models.TextChoices):
        STRING = "string", "字符串"
        INT = "int", "整数"
        BOOL = "bool", "布尔"
        JSON = "json", "JSON"
        DATETIME = "datetime", "时间（ISO-8601）"
        SECRET = "secret", "敏感字符串"

    key = models.CharField("键", max_length=120, unique=True, db_index=True)
    value = models.TextField("配置值")
    value_type = models.CharField(
        "值类型", max_length=20, choices=ValueType.choices, default=ValueType.STRING
    )
    description = models.TextField("说明", blank=True)
    is_sensitive = models.BooleanField("敏感字段", default=False, help_text="后台仅展示脱敏值")
    created_at = models.DateTimeField("创建时间", auto_now_add=True)
    updated_at = models.DateTimeField("更新时间", auto_now=True)

    class Meta:
        verbose_name = "系统配置"
        verbose_name_plural = "系统配置"
        ordering = ["key"]

    def __str__(self) -> str:
        return self.key

    def cast_value(self) -> Any:
        """根据类型转换配置值；DATETIME 保持字符串，由 ConfigService.get_datetime 解析"""
        if self.value_type == self.ValueType.INT:
            try:
                return int(self.value)
            except (TypeError, ValueError):
                return self.value
        if self.value_type == self.ValueType.BOOL:
            return str(self.value).strip().lower() in {"1", "true", "yes", "on"}
        if self.value_type == self.ValueType.JSON:
            try:
                return json.loads(self.value)
            except json.JSONDecodeError:
                return self.value
        return self.value

    @property
    def display_value(self) -> str:
        if self.is_sensitive and self.value:
            return "******"
        return str(self.value)


class MailAccountQuerySet(models.QuerySet):
    """发信账号 QuerySet：封装启用状态与默认账号的获取"""

    def active(self):
        return self.filter(is_active=True)

    def get_default(self):
        """优先取 is_default 的启用账号，否则按 priority 取第一个启用账号"""
        account = self.active().filter(is_default=True).order_by("priority", "-updated_at").first()
        if account:
            return account
        return self.active().order_by("priority", "-updated_at").first()


class MailAccount(models.Model):
    """
    发信 SMTP 账号：电子票、工作坊邀请、阶段二入选通知均通过默认账号发送
    - 保存时保证默认账号唯一
    - 发信邮箱固定等于用户名，避免 From 漂移导致退信
    """

    name = models.CharField("名称", max_length=50, help_text="后台展示用名称")
    host = models.CharField("SMTP 主机", max_length=120)
    port = models.PositiveIntegerField("端口", default=587)
    use_tls = models.BooleanField("启用 TLS", default=True)
    use_ssl = models.BooleanField("启用 SSL", default=False)
    username = models.EmailField("用户名", help_text="邮箱账号")
    password = models.CharField("密码", max_length=255, help_text="授权码或应用专用密码")
    from_name = models.CharField("发信名称", max_length=100, blank=True, help_text="展示名，例如 Startup Spark")
    priority = models.PositiveIntegerField("优先级", default=100, help_text="数字越小优先级越高")
    is_active = models.BooleanField("启用", default=True)
    is_default = models.BooleanField("默认账号", default=False, help_text="设为 True 后其余账号将自动取消默认")
    created_at = models.DateTimeField("创建时间", auto_now_add=True)
    updated_at = models.DateTimeField("更新时间", auto_now=True)

    objects = MailAccountQuerySet.as_manager()

    class Meta:
        ordering = ["priority", "-updated_at"]
        verbose_name = "发信账号"
        verbose_name_plural = "发信账号"

    def save(self, *args, **kwargs):
        if not self.host:
            raise ValidationError("SMTP 主机不能为空")
        super().save(*args, **kwargs)
        if self.is_default:
            MailAccount.objects.exclude(pk=self.pk).update(is_default=False)

    def __str__(self) -> str:
        return self.name or self.username
