# -*- coding: utf-8 -*-
"""
身份解析结果与登录入参

解析结果是一个标签联合：PlatformAdmin | FinanceAdmin | Participant，
由 IdentityResolveService 计算一次，展示层只按 kind/view 分派
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import ClassVar, Union

from apps.common.base.base_schema import BaseSchema
from apps.common.exceptions import ValidationError
from apps.common.utils.validators import validate_email


class PaymentStatus:
    PENDING = "pending"
    PAID = "paid"


@dataclass(frozen=True)
class ParticipantProfile:
    id: int
    name: str
    email: str = ""
    phone: str = ""


@dataclass(frozen=True)
class PlatformAdmin:
    kind: ClassVar[str] = "platform_admin"
    view: ClassVar[str] = "admin_dashboard"

    email: str


@dataclass(frozen=True)
class FinanceAdmin:
    kind: ClassVar[str] = "finance_admin"
    view: ClassVar[str] = "finance_dashboard"

    email: str


@dataclass(frozen=True)
class Participant:
    kind: ClassVar[str] = "participant"

    profile: ParticipantProfile
    payment_status: str = PaymentStatus.PENDING
    degraded: bool = False
    authenticated: bool = True

    @property
    def view(self) -> str:
        """已缴费进入选手面板，否则停留在报名页"""
        return "dashboard" if self.payment_status == PaymentStatus.PAID else "registration"


Resolution = Union[PlatformAdmin, FinanceAdmin, Participant]


def serialize_resolution(resolution: Resolution) -> dict:
    payload = {"role": resolution.kind, "view": resolution.view}
    if isinstance(resolution, Participant):
        payload.update(
            {
                "profile": asdict(resolution.profile),
                "payment_status": resolution.payment_status,
                "degraded": resolution.degraded,
                "authenticated": resolution.authenticated,
            }
        )
    else:
        payload["email"] = resolution.email
    return payload


@dataclass
class LoginSchema(BaseSchema[None]):
    """登录入参：邮箱 + 密码"""
    auto_validate: ClassVar[bool] = True

    email: str
    password: str

    def validate(self) -> None:
        self.email = (self.email or "").strip().lower()
        validate_email(self.email)
        if not self.password:
            raise ValidationError(message="Please provide your password")


@dataclass
class TokenRefreshSchema(BaseSchema[None]):
    auto_validate: ClassVar[bool] = True

    refresh: str

    def validate(self) -> None:
        if not (self.refresh or "").strip():
            raise ValidationError(message="Please provide a refresh token")
