from __future__ import annotations

from django.contrib import admin

from .models import Phase1Submission, Phase2Submission


@admin.register(Phase1Submission)
class Phase1SubmissionAdmin(admin.ModelAdmin):
    """锁定字段只读；评分请走评分接口"""

    list_display = ("team_name", "college_name", "points", "submitted_at", "reviewed_at")
    search_fields = ("team_name", "college_name", "team__registration_id")
    readonly_fields = tuple(sorted(Phase1Submission.LOCKED_FIELDS)) + ("team", "points", "review", "reviewed_at")

    def has_add_permission(self, request):
        return False


@admin.register(Phase2Submission)
class Phase2SubmissionAdmin(admin.ModelAdmin):
    list_display = ("team", "status", "submitted_at")
    list_filter = ("status",)
    search_fields = ("team__team_name", "team__registration_id")
