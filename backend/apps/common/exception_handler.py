"""
自定义全局异常处理器（DRF 入口）：
- 统一前端收到的错误结构 {code, message, data, extra}
- 处理顺序：
  1) BizError 及子类 → 直接转换
  2) DRF 内置异常（校验/认证/权限/404/解析失败）→ 映射为 BizError 再输出
  3) 其余异常 → 记录完整堆栈，返回 500，不泄露内部细节
"""

from typing import Any

from rest_framework import status
from rest_framework.exceptions import (
    ValidationError as DRFValidationError,
    AuthenticationFailed,
    NotAuthenticated,
    PermissionDenied as DRFPermissionDenied,
    NotFound as DRFNotFound,
    ParseError,
)
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

from .exceptions import (
    BizError,
    BadRequestError,
    ValidationError as BizValidationError,
    AuthError,
    PermissionDeniedError,
    NotFoundError,
)
from .response import api_response, payload_from_biz_error
from .infra.logger import get_logger
from .utils.request_context import get_request_context

logger = get_logger(__name__)


def _extract_message(detail: Any) -> str:
    """
    从 DRF 的 detail 结构中提取第一条可读错误信息
    detail 可能是 str / list / dict[field -> detail]
    """
    if isinstance(detail, str):
        return detail

    if isinstance(detail, list) and detail:
        return _extract_message(detail[0])

    if isinstance(detail, dict) and detail:
        first_value = next(iter(detail.values()))
        return _extract_message(first_value)

    return str(detail)


def _handle_biz_error(exc: BizError) -> Response:
    payload = payload_from_biz_error(exc)
    return Response(payload, status=exc.http_status)


def _handle_unexpected_exception(exc: Exception, context: dict) -> Response:
    """程序 bug / 依赖异常：记录堆栈并返回统一 500"""
    ctx = get_request_context()
    req = context.get("request")
    user = getattr(req, "user", None)
    logger.exception(
        "接口出现未处理的异常",
        exc_info=exc,
        extra={
            "path": getattr(req, "path", None),
            "method": getattr(req, "method", None),
            "user_id": getattr(user, "id", None) if user and getattr(user, "is_authenticated", False) else None,
        },
    )

    return api_response(
        code=50000,
        message="Internal server error, please retry later",
        data=None,
        http_status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        extra={
            "view": context.get("view").__class__.__name__ if context.get("view") else None,
            "request_path": getattr(req, "path", None),
            "request_id": ctx.get("request_id"),
        },
    )


def _map_drf_exception_to_biz(exc: Exception) -> BizError | None:
    """把 DRF 内置异常映射为 BizError 子类，映射不到返回 None"""
    if isinstance(exc, DRFValidationError):
        return BizValidationError(message=_extract_message(exc.detail), extra={"raw_detail": exc.detail})

    if isinstance(exc, ParseError):
        return BadRequestError(message=_extract_message(exc.detail))

    if isinstance(exc, (AuthenticationFailed, NotAuthenticated)):
        return AuthError(message=_extract_message(getattr(exc, "detail", str(exc))))

    if isinstance(exc, DRFPermissionDenied):
        return PermissionDeniedError(message=_extract_message(getattr(exc, "detail", str(exc))))

    if isinstance(exc, DRFNotFound):
        return NotFoundError(message=_extract_message(getattr(exc, "detail", str(exc))))

    return None


def custom_exception_handler(exc: Exception, context: dict) -> Response | None:
    """DRF 全局异常处理入口（settings.REST_FRAMEWORK.EXCEPTION_HANDLER）"""
    if isinstance(exc, BizError):
        return _handle_biz_error(exc)

    mapped = _map_drf_exception_to_biz(exc)
    if mapped is not None:
        return _handle_biz_error(mapped)

    # 其它 DRF 能识别的异常（405/406/415 等）包一层统一结构
    drf_response = drf_exception_handler(exc, context)
    if drf_response is not None:
        raw_data = drf_response.data
        status_code = drf_response.status_code
        return api_response(
            code=40000 if status_code < 500 else 50000,
            message=_extract_message(raw_data),
            data=None,
            http_status=status_code,
            extra={"raw": raw_data},
        )

    return _handle_unexpected_exception(exc, context)
