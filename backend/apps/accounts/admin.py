"""
后台账户管理：用户与参赛者资料
"""

from __future__ import annotations

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as DjangoUserAdmin

from apps.auth.roles import role_for_email

from .models import Profile, User


class ProfileInline(admin.StackedInline):
    model = Profile
    can_delete = False
    extra = 0


@admin.register(User)
class UserAdmin(DjangoUserAdmin):
    list_display = ("email", "display_name", "role", "is_active", "date_joined")
    search_fields = ("email", "username", "display_name")
    ordering = ("-date_joined",)
    inlines = [ProfileInline]
    fieldsets = DjangoUserAdmin.fieldsets + (("Startup Spark", {"fields": ("display_name",)}),)
    add_fieldsets = (
        (None, {"classes": ("wide",), "fields": ("username", "email", "display_name", "password1", "password2")}),
    )

    @admin.display(description="角色")
    def role(self, obj: User) -> str:
        """角色来自 ROLE_BINDINGS 配置，后台只读展示"""
        return role_for_email(obj.email).label


@admin.register(Profile)
class ProfileAdmin(admin.ModelAdmin):
    list_display = ("name", "email", "phone", "user", "updated_at")
    search_fields = ("name", "email", "phone", "user__email")
