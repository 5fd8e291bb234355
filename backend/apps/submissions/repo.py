"""提交模块的数据访问层"""

from __future__ import annotations

import datetime
from typing import Optional

from django.db.models import QuerySet

from apps.common.base.base_repo import BaseRepo

from .models import Phase1Submission, Phase2Submission


class Phase1SubmissionRepo(BaseRepo[Phase1Submission]):
    model = Phase1Submission

    def get_queryset(self) -> QuerySet[Phase1Submission]:
        return super().get_queryset().select_related("team")

    def get_for_team(self, team_id: int) -> Optional[Phase1Submission]:
        return self.get_or_none(pk=team_id)

    def update_video_link(self, submission: Phase1Submission, link: str, at: datetime.datetime) -> Phase1Submission:
        return self.update(submission, {"youtube_link": link, "updated_at": at})

    def set_score(self, submission: Phase1Submission, *, points: int, review: str,
                  at: datetime.datetime) -> Phase1Submission:
        return self.update(submission, {"points": points, "review": review, "reviewed_at": at})

    def scored(self) -> QuerySet[Phase1Submission]:
        return self.filter(points__isnull=False)

    def unscored_count(self) -> int:
        return self.count(points__isnull=True)

    def all_ordered(self) -> QuerySet[Phase1Submission]:
        return self.get_queryset().order_by("submitted_at")


class Phase2SubmissionRepo(BaseRepo[Phase2Submission]):
    model = Phase2Submission

    def get_for_team(self, team_id: int) -> Optional[Phase2Submission]:
        return self.get_or_none(pk=team_id)

    def merge(self, team_id: int, data: dict) -> Phase2Submission:
        """合并写入：已存在时只更新 data 中的字段"""
        existing = self.get_for_team(team_id)
        if existing is None:
            return self.create({"team_id": team_id, **data})
        return self.update(existing, data)
