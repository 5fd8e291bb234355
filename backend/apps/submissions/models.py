"""
参赛作品提交

- Phase1Submission：第一阶段作品，一队一份，主键为队伍 ID；创建后核心字段锁定
- Phase2Submission：第二阶段方案，一队一份，截止前可多次提交（合并写入）
"""

from __future__ import annotations

from django.db import models

from apps.common.exceptions import SubmissionLockedError
from apps.teams.models import Team


class Phase1Submission(models.Model):
    #: 创建后不可再写入的字段
    LOCKED_FIELDS = frozenset(
        {"team_name", "college_name", "whatsapp_number", "product_description", "solution", "file_url",
         "submitted_at"}
    )

    team = models.OneToOneField(
        Team,
        on_delete=models.CASCADE,
        primary_key=True,
        related_name="phase1_submission",
        verbose_name="队伍",
    )
    team_name = models.CharField("队伍名称", max_length=120)
    college_name = models.CharField("学校", max_length=200)
    whatsapp_number = models.CharField("WhatsApp 号码", max_length=20)
    product_description = models.TextField("产品描述")
    solution = models.TextField("解决方案")
    file_url = models.CharField("演示文稿地址", max_length=500)
    youtube_link = models.CharField("视频链接", max_length=500, blank=True)
    submitted_at = models.DateTimeField("提交时间")
    updated_at = models.DateTimeField("更新时间")
    points = models.PositiveSmallIntegerField("得分", null=True, blank=True)
    review = models.TextField("评语", blank=True)
    reviewed_at = models.DateTimeField("评审时间", null=True, blank=True)

    class Meta:
        ordering = ["submitted_at"]
        verbose_name = "第一阶段作品"
        verbose_name_plural = "第一阶段作品"

    def __str__(self) -> str:
        return self.team_name

    @property
    def is_scored(self) -> bool:
        return self.points is not None

    def save(self, *args, **kwargs):
        """已存在的记录只允许写入非锁定字段"""
        if not self._state.adding:
            update_fields = kwargs.get("update_fields")
            if update_fields is None:
                kwargs["update_fields"] = [
                    f.name for f in self._meta.concrete_fields
                    if not f.primary_key and f.name not in self.LOCKED_FIELDS
                ]
            elif self.LOCKED_FIELDS.intersection(update_fields):
                raise SubmissionLockedError()
        super().save(*args, **kwargs)


class Phase2Status(models.TextChoices):
    PENDING = "pending", "待评审"


class Phase2Submission(models.Model):
    team = models.OneToOneField(
        Team,
        on_delete=models.CASCADE,
        primary_key=True,
        related_name="phase2_submission",
        verbose_name="队伍",
    )
    proposal_url = models.CharField("商业计划书地址", max_length=500, blank=True)
    youtube_video_url = models.CharField("视频链接", max_length=500, blank=True)
    submitted_at = models.DateTimeField("提交时间")
    status = models.CharField("状态", max_length=20, choices=Phase2Status.choices, default=Phase2Status.PENDING)

    class Meta:
        ordering = ["submitted_at"]
        verbose_name = "第二阶段方案"
        verbose_name_plural = "第二阶段方案"

    def __str__(self) -> str:
        return f"Phase2 #{self.pk}"
