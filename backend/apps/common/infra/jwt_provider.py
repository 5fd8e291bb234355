"""
JWT 工具封装：颁发与刷新访问/刷新令牌

- 登录接口与测试中直接调用 issue_tokens
- 仅封装常用场景，减少各处重复调用 RefreshToken API
"""

from __future__ import annotations

from typing import Any, Dict

from rest_framework_simplejwt.tokens import RefreshToken, TokenError as SimpleJWTError

from apps.common.exceptions import AuthError


def issue_tokens(user: Any) -> Dict[str, str]:
    """为指定用户颁发 refresh/access 令牌"""
    refresh = RefreshToken.for_user(user)
    return {
        "refresh": str(refresh),
        "access": str(refresh.access_token),
    }


def refresh_access(refresh_token: str) -> Dict[str, str]:
    """使用 refresh_token 换取新的 access_token"""
    try:
        refresh = RefreshToken(refresh_token)
        access = refresh.access_token
    except SimpleJWTError as exc:
        raise AuthError(message="Refresh token is invalid or expired") from exc
    return {"refresh": str(refresh), "access": str(access)}
