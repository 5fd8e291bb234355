from __future__ import annotations

from celery import shared_task

from apps.teams.repo import TeamRepo

from .schemas import WorkshopDetailsSchema
from .services import NotificationDispatchService


@shared_task(name="notifications.dispatch_team_notifications")
def dispatch_team_notifications(team_ids: list[int], kind: str, workshop: dict | None = None) -> dict:
    """
    后台执行扇出，入参/返回值均为 JSON 可序列化结构

    全部失败时 EmailSendError 向上抛出，由 Celery 记录为任务失败
    """
    teams = list(TeamRepo().in_ids(team_ids))
    details = WorkshopDetailsSchema.from_dict(workshop) if workshop is not None else None
    report = NotificationDispatchService().execute(teams, kind, details)
    return report.to_dict()
