"""
通用权限封装（apps.common.permissions）

- 登录态与角色校验统一抛出 BizError 子类，由全局异常处理器包装响应
- 管理员身份来自角色绑定（ROLE_BINDINGS），而非 is_staff
"""

from __future__ import annotations

from typing import Any

from rest_framework.permissions import BasePermission
from rest_framework.request import Request

from apps.auth.roles import Role, role_for_email
from .exceptions import AuthError, PermissionDeniedError


def _ensure_authenticated(request: Request):
    """确保用户已登录，返回 User；否则抛 AuthError"""
    user = getattr(request, "user", None)
    if user is None or not user.is_authenticated:
        raise AuthError(message="Please sign in first")
    return user


class AllowAny(BasePermission):
    """允许任何请求通过（公开接口）"""

    def has_permission(self, request: Request, view: Any) -> bool:  # noqa: D401
        return True


class IsAuthenticated(BasePermission):
    """需要已登录用户，出错时抛 BizError 便于统一格式"""

    def has_permission(self, request: Request, view: Any) -> bool:
        _ensure_authenticated(request)
        return True


class HasRole(BasePermission):
    """
    需要指定角色，子类声明 required_role

    - 未登录 → AuthError
    - 已登录但角色不符 → PermissionDeniedError
    """

    required_role: Role
    message = "You are not allowed to perform this action"

    def has_permission(self, request: Request, view: Any) -> bool:
        user = _ensure_authenticated(request)
        if role_for_email(getattr(user, "email", None)) == self.required_role:
            return True
        raise PermissionDeniedError(message=self.message)


class IsPlatformAdmin(HasRole):
    required_role = Role.PLATFORM_ADMIN
    message = "Only platform admins can perform this action"


class IsFinanceAdmin(HasRole):
    required_role = Role.FINANCE_ADMIN
    message = "Only finance admins can perform this action"
