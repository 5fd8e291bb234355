"""成绩发布配置的数据访问层"""

from __future__ import annotations

import datetime

from apps.common.base.base_repo import BaseRepo

from .models import RESULTS_CONFIG_KEY, ResultsConfig


class ResultsConfigRepo(BaseRepo[ResultsConfig]):
    model = ResultsConfig

    def is_published(self) -> bool:
        return self.exists(key=RESULTS_CONFIG_KEY, published=True)

    def get_or_create(self) -> ResultsConfig:
        config, _ = self.model.objects.get_or_create(key=RESULTS_CONFIG_KEY)
        return config

    def mark_published(self, at: datetime.datetime) -> ResultsConfig:
        config = self.get_or_create()
        return self.update(config, {"published": True, "published_at": at})
