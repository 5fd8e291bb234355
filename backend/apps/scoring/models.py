"""
成绩发布配置

ResultsConfig 为单例（key = phase1Results），published 只会从 False 变为 True
"""

from __future__ import annotations

from django.db import models

RESULTS_CONFIG_KEY = "phase1Results"


class ResultsConfig(models.Model):
    key = models.CharField("键", max_length=40, unique=True, default=RESULTS_CONFIG_KEY)
    published = models.BooleanField("已发布", default=False)
    published_at = models.DateTimeField("发布时间", null=True, blank=True)

    class Meta:
        verbose_name = "成绩发布配置"
        verbose_name_plural = "成绩发布配置"

    def __str__(self) -> str:
        return f"{self.key}: {'published' if self.published else 'draft'}"
