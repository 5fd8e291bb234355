"""通知扇出入参 Schema"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Optional

from apps.common.base.base_schema import BaseSchema
from apps.common.exceptions import ValidationError

TEAM_STATUS_FILTERS = ("all", "selected", "pending")


@dataclass
class WorkshopDetailsSchema(BaseSchema[None]):
    """工作坊信息：标题/日期/地点均必填"""
    auto_validate: ClassVar[bool] = True

    title: str = ""
    date: str = ""
    venue: str = ""

    def validate(self) -> None:
        self.title = str(self.title or "").strip()
        self.date = str(self.date or "").strip()
        self.venue = str(self.venue or "").strip()
        if not (self.title and self.date and self.venue):
            raise ValidationError(message="Please fill in all workshop details")


@dataclass
class TeamFilterSchema(BaseSchema[None]):
    """
    队伍筛选：search 匹配队伍名称/注册编号，status 为 all / selected / pending
    team_ids 非空时只取指定队伍（仍叠加 search/status）
    run_async 为真时交给 Celery 后台执行，表单字符串 "false" 视为假
    """
    auto_validate: ClassVar[bool] = True

    search: str = ""
    status: str = "all"
    team_ids: Optional[list[Any]] = field(default=None)
    run_async: bool = False

    def validate(self) -> None:
        if isinstance(self.run_async, str):
            self.run_async = self.run_async.strip().lower() in {"1", "true", "yes", "on"}
        self.run_async = bool(self.run_async)
        self.search = str(self.search or "").strip()
        self.status = str(self.status or "all").strip().lower()
        if self.status not in TEAM_STATUS_FILTERS:
            raise ValidationError(message=f"status must be one of: {', '.join(TEAM_STATUS_FILTERS)}")
        if self.team_ids is not None:
            if not isinstance(self.team_ids, list):
                raise ValidationError(message="team_ids must be a list")
            try:
                self.team_ids = [int(value) for value in self.team_ids]
            except (TypeError, ValueError) as exc:
                raise ValidationError(message="team_ids must contain integers") from exc

    @property
    def phase2_selected(self) -> bool | None:
        if self.status == "all":
            return None
        return self.status == "selected"
