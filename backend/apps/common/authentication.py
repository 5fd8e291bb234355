"""
统一 JWT 认证封装（apps.common.authentication）

- 身份提供方：登录后由 jwt_provider 颁发 access/refresh，本类负责校验并还原 Principal（User）
- 优先读取 Authorization: Bearer <token>，其次读取 Cookie（可关闭）
- 未携带凭证 → 返回 None（匿名，由权限类决定是否放行）
- 凭证无效/过期 → TokenError；其他认证失败 → AuthError
"""

from __future__ import annotations

from typing import Any, Optional

from django.conf import settings
from rest_framework.request import Request
from rest_framework_simplejwt.authentication import (
    JWTAuthentication as SimpleJWTAuthentication,
)
from rest_framework_simplejwt.exceptions import (
    InvalidToken,
    AuthenticationFailed as SimpleJWTAuthFailed,
)

from .exceptions import TokenError, AuthError
from .infra.logger import get_logger, logger_extra
from .utils.request_context import update_request_user

logger = get_logger(__name__)


class JWTAuthentication(SimpleJWTAuthentication):
    """统一 JWT 认证入口，异常直接抛 BizError 子类交给全局异常处理器"""

    #: 是否允许从 Cookie 读取 access token
    use_cookie: bool = getattr(settings, "JWT_USE_COOKIE", True)
    #: Cookie 中存放 access token 的键名
    cookie_name: str = getattr(settings, "JWT_ACCESS_COOKIE_NAME", "jwt_token_in_cookie")

    def authenticate(self, request: Request) -> Optional[tuple[Any, Any]]:
        header = self.get_header(request)
        raw_token = self.get_raw_token(header) if header is not None else None

        if raw_token is None and self.use_cookie:
            raw_token = request.COOKIES.get(self.cookie_name) or None

        if raw_token is None:
            return None

        try:
            validated_token = self.get_validated_token(raw_token)
            user = self.get_user(validated_token)
        except InvalidToken as exc:
            logger.warning("认证失败：无效或过期的 JWT", extra=logger_extra({"reason": "invalid_token"}))
            raise TokenError() from exc
        except SimpleJWTAuthFailed as exc:
            detail = getattr(exc, "detail", None)
            message = str(detail) if detail is not None else "Authentication failed, please sign in again"
            logger.warning("认证失败：用户校验失败", extra=logger_extra({"reason": message}))
            raise AuthError(message=message) from exc

        # 认证成功后补全请求上下文，后续日志带上账号标识
        update_request_user(user)
        return user, validated_token
