"""
队伍模块业务服务

- 队伍注册（生成注册编号）、成员合并更新
- 第二阶段入选标记（平台管理员）
- 缴费确认（财务管理员，单向：pending → paid）
"""

from __future__ import annotations

import secrets
from typing import Callable

from apps.common.base.base_service import BaseService
from apps.common.exceptions import ConflictError, NotFoundError, TeamNotFoundError
from apps.common.infra.logger import get_logger, logger_extra

from .models import Payment, PaymentStatus, Team
from .repo import PaymentRepo, TeamRepo
from .schemas import MemberUpdateSchema, TeamRegisterSchema

logger = get_logger(__name__)

REGISTRATION_PREFIX = "SS25"


def generate_registration_id() -> str:
    return f"{REGISTRATION_PREFIX}-{secrets.token_hex(3).upper()}"


def serialize_team(team: Team) -> dict:
    return {
        "id": team.pk,
        "team_name": team.team_name,
        "registration_id": team.registration_id,
        "college_name": team.college_name,
        "members": list(team.members or []),
        "payment_status": team.payment_status,
        "phase2_selected": team.phase2_selected,
        "is_regional_team": team.is_regional_team,
    }


def serialize_payment(payment: Payment) -> dict:
    return {
        "id": payment.pk,
        "email": payment.email,
        "status": payment.status,
        "amount": str(payment.amount),
        "reference": payment.reference,
        "created_at": payment.created_at.isoformat() if payment.created_at else None,
    }


class RegisterTeamService(BaseService[Team]):
    """
    为当前用户注册队伍：一人一队，注册编号生成一次后不再变化
    """

    max_attempts = 5

    def __init__(self, team_repo: TeamRepo | None = None,
                 id_factory: Callable[[], str] = generate_registration_id):
        self.team_repo = team_repo or TeamRepo()
        self.id_factory = id_factory

    def validate(self, user, schema: TeamRegisterSchema) -> None:
        if self.team_repo.exists(pk=user.pk):
            raise ConflictError(message="You have already registered a team")

    def perform(self, user, schema: TeamRegisterSchema) -> Team:
        team = self.team_repo.create(
            {
                "owner": user,
                "team_name": schema.team_name,
                "registration_id": self._new_registration_id(),
                "college_name": schema.college_name,
                "members": schema.members,
                "is_regional_team": schema.is_regional_team,
            }
        )
        logger.info(
            "队伍注册成功",
            extra=logger_extra({"team_id": team.pk, "registration_id": team.registration_id,
                                "member_count": len(schema.members)}),
        )
        return team

    def _new_registration_id(self) -> str:
        for _ in range(self.max_attempts):
            candidate = self.id_factory()
            if not self.team_repo.registration_id_exists(candidate):
                return candidate
        raise ConflictError(message="Could not allocate a registration id, please retry")


class UpdateMemberService(BaseService[Team]):
    """将部分字段合并到指定下标的成员上，其余成员与队伍字段不变"""

    def __init__(self, team_repo: TeamRepo | None = None):
        self.team_repo = team_repo or TeamRepo()

    def perform(self, user, index: int, schema: MemberUpdateSchema) -> Team:
        team = self.team_repo.get_for_owner(user.pk)
        if team is None:
            raise TeamNotFoundError()
        members = [dict(member) for member in team.members or []]
        if not 0 <= index < len(members):
            raise NotFoundError(message="Member not found")
        changes = schema.to_dict(exclude_none=True)
        if "email" in changes and any(
                i != index and m.get("email", "").lower() == changes["email"] for i, m in enumerate(members)
        ):
            raise ConflictError(message="Each member must use a different email")
        members[index].update(changes)
        team = self.team_repo.update(team, {"members": members})
        logger.info("成员信息已更新", extra=logger_extra({"team_id": team.pk, "index": index,
                                                          "fields": sorted(changes)}))
        return team


class Phase2SelectionService(BaseService[Team]):
    """平台管理员标记/取消第二阶段入选"""

    def __init__(self, team_repo: TeamRepo | None = None):
        self.team_repo = team_repo or TeamRepo()

    def perform(self, team_id: int, selected: bool) -> Team:
        team = self.team_repo.get_or_none(pk=team_id)
        if team is None:
            raise TeamNotFoundError()
        if team.phase2_selected != selected:
            team = self.team_repo.update(team, {"phase2_selected": selected})
            logger.info("第二阶段入选状态变更", extra=logger_extra({"team_id": team.pk, "selected": selected}))
        return team


class ConfirmPaymentService(BaseService[Team]):
    """
    财务管理员确认缴费：幂等，已缴费队伍直接返回；不存在回退为 pending 的路径
    """

    def __init__(self, team_repo: TeamRepo | None = None):
        self.team_repo = team_repo or TeamRepo()

    def perform(self, team_id: int) -> Team:
        team = self.team_repo.get_or_none(pk=team_id)
        if team is None:
            raise TeamNotFoundError()
        if team.is_paid:
            return team
        team = self.team_repo.update(team, {"payment_status": PaymentStatus.PAID})
        logger.info("缴费已确认", extra=logger_extra({"team_id": team.pk, "registration_id": team.registration_id}))
        return team


class PaymentLogService(BaseService[list]):
    """付款流水查询（只读）"""

    atomic_enabled = False

    def __init__(self, payment_repo: PaymentRepo | None = None):
        self.payment_repo = payment_repo or PaymentRepo()

    def perform(self, *, status: str | None = None):
        if status and status not in PaymentStatus.values:
            status = None
        return self.payment_repo.recent(status=status)
