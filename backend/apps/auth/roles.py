# -*- coding: utf-8 -*-
"""
角色绑定

- 凭据（邮箱）→ 角色 的映射来自 ROLE_BINDINGS 配置（SystemConfig 可覆盖 settings）
- 未命中任何绑定的主体一律视为参赛者
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping

from django.db import models

from apps.common.infra.logger import get_logger
from apps.system.services import ConfigService

logger = get_logger(__name__)


class Role(models.TextChoices):
    PLATFORM_ADMIN = "platform_admin", "Platform admin"
    FINANCE_ADMIN = "finance_admin", "Finance admin"
    PARTICIPANT = "participant", "Participant"


@dataclass(frozen=True)
class RoleBinding:
    credential: str
    role: Role


def _normalize(credential: str | None) -> str:
    return (credential or "").strip().lower()


def load_bindings(config: ConfigService | None = None) -> list[RoleBinding]:
    """读取 ROLE_BINDINGS，非法角色值记录告警后跳过"""
    raw = (config or ConfigService()).get("ROLE_BINDINGS", {}) or {}
    if not isinstance(raw, Mapping):
        logger.warning("ROLE_BINDINGS 配置格式错误，应为对象", extra={"type": type(raw).__name__})
        return []
    bindings = []
    for credential, role in raw.items():
        if role not in Role.values:
            logger.warning("忽略未知角色绑定", extra={"credential": credential, "role": role})
            continue
        bindings.append(RoleBinding(credential=_normalize(credential), role=Role(role)))
    return bindings


def role_for_email(email: str | None, bindings: Iterable[RoleBinding] | None = None) -> Role:
    """按邮箱（不区分大小写）匹配角色，未命中返回 participant"""
    target = _normalize(email)
    if not target:
        return Role.PARTICIPANT
    for binding in bindings if bindings is not None else load_bindings():
        if binding.credential == target:
            return binding.role
    return Role.PARTICIPANT
