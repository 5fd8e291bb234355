# -*- coding: utf-8 -*-
"""
身份解析与登录

IdentityResolveService：把已认证主体映射为 PlatformAdmin / FinanceAdmin / Participant，
参赛者再加载资料与缴费状态。缴费状态按顺序查询多个数据源，第一个返回 paid 的即生效：

    1. 队伍（主键 = 用户 ID）的 payment_status
    2. 付款流水中该邮箱（资料邮箱优先，其次账号邮箱）的 paid 记录

任何数据源异常都降级为最小资料 + pending + degraded=True，不缓存，下次调用重新解析。
"""

from __future__ import annotations

from typing import Iterable, Optional, Protocol

from django.db import DatabaseError

from apps.accounts.repo import ProfileRepo, UserRepo
from apps.common.base.base_service import BaseService
from apps.common.exceptions import AuthError, InfrastructureError, InvalidCredentialsError
from apps.common.infra.jwt_provider import issue_tokens
from apps.common.infra.logger import get_logger, logger_extra
from apps.common.utils.helpers import mask_email
from apps.teams.repo import PaymentRepo, TeamRepo

from apps.system.services import ConfigService

from .roles import Role, RoleBinding, load_bindings, role_for_email
from .schemas import (
    FinanceAdmin,
    LoginSchema,
    Participant,
    ParticipantProfile,
    PaymentStatus,
    PlatformAdmin,
    Resolution,
)

logger = get_logger(__name__)

DEFAULT_PARTICIPANT_NAME = "User"


class PaymentLookup(Protocol):
    """缴费状态数据源：命中已缴费返回 True"""

    def is_paid(self, principal, profile: ParticipantProfile) -> bool:
        ...


class TeamPaymentLookup:
    """队伍主键即用户 ID，队伍已缴费即生效"""

    def __init__(self, team_repo: TeamRepo | None = None):
        self.team_repo = team_repo or TeamRepo()

    def is_paid(self, principal, profile: ParticipantProfile) -> bool:
        return self.team_repo.is_paid(principal.pk)


class PaymentLogLookup:
    """付款流水兜底：资料邮箱优先，缺失时使用账号邮箱"""

    def __init__(self, payment_repo: PaymentRepo | None = None):
        self.payment_repo = payment_repo or PaymentRepo()

    def is_paid(self, principal, profile: ParticipantProfile) -> bool:
        email = profile.email or getattr(principal, "email", "")
        if not email:
            return False
        return self.payment_repo.has_paid(email)


class PaymentStatusResolver:
    """按顺序询问各数据源，第一个 paid 即短路返回"""

    def __init__(self, lookups: Iterable[PaymentLookup] | None = None):
        self.lookups = list(lookups) if lookups is not None else [TeamPaymentLookup(), PaymentLogLookup()]

    def resolve(self, principal, profile: ParticipantProfile) -> str:
        for lookup in self.lookups:
            if lookup.is_paid(principal, profile):
                return PaymentStatus.PAID
        return PaymentStatus.PENDING


class ProfileLoader:
    """按用户 ID 读取资料，不存在时以显示名称合成最小资料"""

    def __init__(self, profile_repo: ProfileRepo | None = None):
        self.profile_repo = profile_repo or ProfileRepo()

    def load(self, principal) -> ParticipantProfile:
        profile = self.profile_repo.get_for_user(principal.pk)
        if profile is None:
            return minimal_profile(principal)
        return ParticipantProfile(id=principal.pk, name=profile.name, email=profile.email, phone=profile.phone)


def minimal_profile(principal) -> ParticipantProfile:
    return ParticipantProfile(
        id=principal.pk,
        name=getattr(principal, "display_name", "") or DEFAULT_PARTICIPANT_NAME,
    )


class IdentityResolveService(BaseService[Resolution]):
    """
    身份解析：只读、幂等，可并发调用

        resolution = IdentityResolveService().execute(request.user)
        resolution.view  # admin_dashboard / finance_dashboard / dashboard / registration
    """

    atomic_enabled = False

    def __init__(
            self,
            bindings: Optional[Iterable[RoleBinding]] = None,
            profile_loader: ProfileLoader | None = None,
            payment_resolver: PaymentStatusResolver | None = None,
            config: ConfigService | None = None,
    ):
        self.bindings = list(bindings) if bindings is not None else None
        self.config = config
        self.profile_loader = profile_loader or ProfileLoader()
        self.payment_resolver = payment_resolver or PaymentStatusResolver()

    def validate(self, principal) -> None:
        if principal is None or not getattr(principal, "is_authenticated", False):
            raise AuthError(message="Please sign in first")

    def perform(self, principal) -> Resolution:
        try:
            bindings = self.bindings if self.bindings is not None else load_bindings(self.config)
        except (DatabaseError, InfrastructureError) as exc:
            return self._degraded(principal, exc)
        role = role_for_email(principal.email, bindings)
        if role == Role.PLATFORM_ADMIN:
            return PlatformAdmin(email=principal.email)
        if role == Role.FINANCE_ADMIN:
            return FinanceAdmin(email=principal.email)
        return self._resolve_participant(principal)

    def _resolve_participant(self, principal) -> Participant:
        try:
            profile = self.profile_loader.load(principal)
            payment_status = self.payment_resolver.resolve(principal, profile)
        except (DatabaseError, InfrastructureError) as exc:
            return self._degraded(principal, exc)
        return Participant(profile=profile, payment_status=payment_status)

    def _degraded(self, principal, exc: Exception) -> Participant:
        """数据源不可用时按参赛者返回最小资料，不中断解析"""
        logger.warning(
            "身份解析降级：数据源不可用",
            extra=logger_extra({"user_id": principal.pk, "error": str(exc)}),
        )
        return Participant(profile=minimal_profile(principal), payment_status=PaymentStatus.PENDING, degraded=True)


class LoginService(BaseService[dict]):
    """邮箱 + 密码登录，颁发 JWT"""

    atomic_enabled = False

    def __init__(self, user_repo: UserRepo | None = None):
        self.user_repo = user_repo or UserRepo()

    def perform(self, schema: LoginSchema) -> dict:
        user = self.user_repo.get_by_email(schema.email)
        if user is None or not user.check_password(schema.password):
            logger.warning("登录失败：账号或密码错误", extra=logger_extra({"email": mask_email(schema.email)}))
            raise InvalidCredentialsError()
        if not user.is_active:
            logger.warning("登录失败：账户失效", extra=logger_extra({"user_id": user.pk}))
            raise AuthError(message="This account has been disabled")
        tokens = issue_tokens(user)
        logger.info("登录成功", extra=logger_extra({"user_id": user.pk}))
        return {**tokens, "user": {"id": user.pk, "email": user.email, "display_name": user.display_name}}
