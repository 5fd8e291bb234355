"""
通知扇出

- 工作坊邀请：每位成员生成带二维码的电子门票 PDF，作为附件逐一发送
- 第二阶段入选：仅向已入选队伍的成员发送祝贺邮件（无附件）
- 成员之间互不影响，结果汇总为 DispatchReport；全部收件人均因传输故障失败时整体抛 EmailSendError
- 成员发送可在有界线程池中并行，结果顺序与成员顺序一致
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional

from django.db import connections, models
from django.template.loader import render_to_string
from django.utils.html import strip_tags

from apps.common.base.base_service import BaseService
from apps.common.exceptions import BizError, EmailSendError, InfrastructureError, ValidationError
from apps.common.infra.email_sender import MailAttachment, send_mail
from apps.common.infra.logger import get_logger, logger_extra
from apps.common.utils.helpers import mask_email
from apps.system.services import ConfigService
from apps.teams.models import Team
from apps.teams.repo import TeamRepo

from .schemas import TeamFilterSchema, WorkshopDetailsSchema
from .ticket import TICKET_FILENAME, Ticket, render_ticket_pdf

logger = get_logger(__name__)

Sender = Callable[..., None]


class NotificationKind(models.TextChoices):
    WORKSHOP_INVITE = "workshop-invite", "工作坊邀请"
    PHASE2_SELECTION = "phase2-selection", "第二阶段入选"


@dataclass(frozen=True)
class OutgoingMessage:
    to: str
    subject: str
    html_body: str
    attachments: tuple[MailAttachment, ...] = ()

    @property
    def text_body(self) -> str:
        return strip_tags(self.html_body).strip()


@dataclass(frozen=True)
class DispatchFailure:
    team_id: int
    email: str
    reason: str
    transport: bool = False


@dataclass
class DispatchReport:
    success_count: int = 0
    fail_count: int = 0
    failures: list[DispatchFailure] = field(default_factory=list)

    def record_success(self) -> None:
        self.success_count += 1

    def record_failure(self, failure: DispatchFailure) -> None:
        self.fail_count += 1
        self.failures.append(failure)

    def merge(self, other: "DispatchReport") -> "DispatchReport":
        self.success_count += other.success_count
        self.fail_count += other.fail_count
        self.failures.extend(other.failures)
        return self

    @property
    def all_transport_failed(self) -> bool:
        """至少一个收件人、没有成功、且每个失败都是传输故障"""
        return (
            self.success_count == 0
            and self.fail_count > 0
            and all(failure.transport for failure in self.failures)
        )

    def to_dict(self) -> dict:
        return {
            "success_count": self.success_count,
            "fail_count": self.fail_count,
            "failures": [
                {"team_id": f.team_id, "email": f.email, "reason": f.reason} for f in self.failures
            ],
        }


def filter_teams(schema: TeamFilterSchema, repo: TeamRepo | None = None):
    repo = repo or TeamRepo()
    qs = repo.search(schema.search, phase2_selected=schema.phase2_selected)
    if schema.team_ids is not None:
        qs = qs.filter(pk__in=schema.team_ids)
    return qs


def serialize_team_summary(team: Team) -> dict:
    lead = team.lead
    return {
        "id": team.pk,
        "team_name": team.team_name,
        "registration_id": team.registration_id,
        "lead_name": lead.get("name", ""),
        "member_count": len(team.members or []),
        "phase2_selected": team.phase2_selected,
        "payment_status": team.payment_status,
    }


class MessageBuilder:
    """按通知类型为单个成员组装邮件"""

    def __init__(self, brand: str):
        self.brand = brand

    def workshop_invite(self, team: Team, member: dict, workshop: WorkshopDetailsSchema) -> OutgoingMessage:
        ticket = Ticket(
            brand=self.brand,
            team_name=team.team_name,
            registration_id=team.registration_id,
            member_name=member.get("name", ""),
            member_email=member.get("email", ""),
            member_phone=member.get("phone", ""),
            event_date=workshop.date,
            venue=workshop.venue,
            workshop_title=workshop.title,
        )
        html = render_to_string(
            "notifications/emails/workshop_invite.html",
            {"brand": self.brand, "member_name": ticket.member_name, "workshop": workshop},
        )
        return OutgoingMessage(
            to=ticket.member_email,
            subject=f"Workshop Invitation: {workshop.title}",
            html_body=html,
            attachments=(MailAttachment(TICKET_FILENAME, render_ticket_pdf(ticket), "application/pdf"),),
        )

    def phase2_selection(self, team: Team, member: dict, score: Optional[int]) -> OutgoingMessage:
        html = render_to_string(
            "notifications/emails/phase2_selection.html",
            {
                "brand": self.brand,
                "member_name": member.get("name", ""),
                "team_name": team.team_name,
                "registration_id": team.registration_id,
                "score": "N/A" if score is None else score,
            },
        )
        return OutgoingMessage(
            to=member.get("email", ""),
            subject=f"Congratulations! Selected for Phase 2 - {self.brand}",
            html_body=html,
        )


def _phase1_score(team: Team) -> Optional[int]:
    submission = getattr(team, "phase1_submission", None)
    return getattr(submission, "points", None)


class NotificationDispatchService(BaseService[DispatchReport]):
    """
    对一组队伍执行扇出并汇总结果

        report = NotificationDispatchService().execute(teams, NotificationKind.WORKSHOP_INVITE, workshop)

    sender 签名与 email_sender.send_mail 一致，测试中可注入假实现
    """

    atomic_enabled = False

    def __init__(
            self,
            sender: Sender | None = None,
            config: ConfigService | None = None,
            max_workers: int | None = None,
    ):
        self.sender = sender or send_mail
        self.config = config or ConfigService()
        self.max_workers = max_workers

    def _workers(self) -> int:
        if self.max_workers is not None:
            return max(1, int(self.max_workers))
        try:
            return max(1, int(self.config.get("NOTIFICATION_MAX_WORKERS", 4)))
        except (TypeError, ValueError):
            return 1

    def validate(self, teams, kind, workshop=None) -> None:
        if kind not in NotificationKind.values:
            raise ValidationError(message=f"Unknown notification kind: {kind}")
        if kind == NotificationKind.WORKSHOP_INVITE and workshop is None:
            raise ValidationError(message="Please fill in all workshop details")

    def perform(
            self,
            teams: Iterable[Team],
            kind: str,
            workshop: WorkshopDetailsSchema | None = None,
    ) -> DispatchReport:
        report = self.dispatch_many(teams, kind, workshop)
        if report.all_transport_failed:
            logger.warning("通知全部发送失败", extra={"kind": kind, "fail_count": report.fail_count})
            raise EmailSendError(extra=report.to_dict())
        return report

    def dispatch_many(
            self,
            teams: Iterable[Team],
            kind: str,
            workshop: WorkshopDetailsSchema | None = None,
    ) -> DispatchReport:
        report = DispatchReport()
        for team in teams:
            report.merge(self.dispatch(team, kind, workshop))
        logger.info(
            "通知扇出完成",
            extra={"kind": kind, "success_count": report.success_count, "fail_count": report.fail_count},
        )
        return report

    def dispatch(
            self,
            team: Team,
            kind: str,
            workshop: WorkshopDetailsSchema | None = None,
    ) -> DispatchReport:
        """单支队伍：逐个成员发送，不抛出发送异常"""
        report = DispatchReport()
        if kind == NotificationKind.PHASE2_SELECTION and not team.phase2_selected:
            return report

        builder = MessageBuilder(brand=self.config.get("EVENT_BRAND", "STARTUP SPARK 2025"))
        score = _phase1_score(team) if kind == NotificationKind.PHASE2_SELECTION else None
        members = list(team.members or [])

        def job(member: dict) -> Optional[DispatchFailure]:
            if kind == NotificationKind.WORKSHOP_INVITE:
                return self._send(team, member, lambda: builder.workshop_invite(team, member, workshop))
            return self._send(team, member, lambda: builder.phase2_selection(team, member, score))

        for failure in self._run(job, members):
            if failure is None:
                report.record_success()
            else:
                report.record_failure(failure)
        return report

    def _run(self, job, members: list[dict]) -> list[Optional[DispatchFailure]]:
        workers = min(self._workers(), len(members))
        if workers <= 1:
            return [job(member) for member in members]

        def threaded(member: dict) -> Optional[DispatchFailure]:
            try:
                return job(member)
            finally:
                connections.close_all()

        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="notify") as executor:
            return list(executor.map(threaded, members))

    def _send(self, team: Team, member: dict, build: Callable[[], OutgoingMessage]) -> Optional[DispatchFailure]:
        email = (member.get("email") or "").strip()
        if not email:
            return DispatchFailure(team_id=team.pk, email="", reason="Member email is missing")
        try:
            message = build()
            self.sender(
                subject=message.subject,
                body=message.text_body,
                to=[message.to],
                html_body=message.html_body,
                attachments=message.attachments,
            )
        except BizError as exc:
            logger.info(
                "成员通知发送失败",
                extra=logger_extra({"team_id": team.pk, "email": mask_email(email), "reason": exc.message}),
            )
            return DispatchFailure(
                team_id=team.pk,
                email=email,
                reason=exc.message,
                transport=isinstance(exc, InfrastructureError),
            )
        except Exception:
            logger.exception("成员通知生成失败", extra=logger_extra({"team_id": team.pk, "email": mask_email(email)}))
            return DispatchFailure(team_id=team.pk, email=email, reason="Failed to prepare notification")
        return None

