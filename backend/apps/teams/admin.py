from __future__ import annotations

from django.contrib import admin

from .models import Payment, Team


@admin.register(Team)
class TeamAdmin(admin.ModelAdmin):
    list_display = ("team_name", "registration_id", "college_name", "payment_status", "phase2_selected",
                    "is_regional_team", "created_at")
    list_filter = ("payment_status", "phase2_selected", "is_regional_team")
    search_fields = ("team_name", "registration_id", "college_name", "owner__email")
    readonly_fields = ("registration_id", "created_at", "updated_at")


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    """付款流水由外部支付方写入，后台只读"""

    list_display = ("email", "status", "amount", "reference", "created_at")
    list_filter = ("status",)
    search_fields = ("email", "reference")

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
