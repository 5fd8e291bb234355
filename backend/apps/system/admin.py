from __future__ import annotations

from django.contrib import admin

from apps.common.infra.logger import get_logger, logger_extra
from .models import SystemConfig, MailAccount
from .services import ConfigService

logger = get_logger(__name__)
config_service = ConfigService()


@admin.register(SystemConfig)
class SystemConfigAdmin(admin.ModelAdmin):
    """系统配置后台：保存/删除后立即清理对应缓存"""

    list_display = ("key", "masked_value", "value_type", "description", "updated_at")
    search_fields = ("key", "description")
    list_filter = ("value_type",)

    @admin.display(description="配置值")
    def masked_value(self, obj: SystemConfig) -> str:
        return obj.display_value

    def save_model(self, request, obj, form, change):
        super().save_model(request, obj, form, change)
        config_service.invalidate(obj.key)
        logger.info(
            "后台修改系统配置",
            extra=logger_extra({"key": obj.key, "operator": getattr(request.user, "id", None)}),
        )

    def delete_model(self, request, obj):
        key = obj.key
        super().delete_model(request, obj)
        config_service.invalidate(key)


@admin.register(MailAccount)
class MailAccountAdmin(admin.ModelAdmin):
    """发信账号后台：密码字段不在列表展示"""

    list_display = ("name", "username", "host", "port", "use_tls", "use_ssl", "is_default", "is_active", "priority")
    list_filter = ("is_active", "is_default")
    search_fields = ("name", "username", "host")
