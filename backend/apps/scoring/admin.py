from __future__ import annotations

from django.contrib import admin

from .models import ResultsConfig


@admin.register(ResultsConfig)
class ResultsConfigAdmin(admin.ModelAdmin):
    """发布只能单向进行，后台不提供撤回"""

    list_display = ("key", "published", "published_at")
    readonly_fields = ("key", "published", "published_at")

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
