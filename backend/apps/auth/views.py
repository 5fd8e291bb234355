# -*- coding: utf-8 -*-
"""
认证接口层：登录、刷新令牌、当前身份解析
"""

from __future__ import annotations

from django.conf import settings
from drf_spectacular.utils import extend_schema, inline_serializer
from rest_framework import serializers
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.common import response
from apps.common.infra.jwt_provider import refresh_access
from apps.common.permissions import AllowAny, IsAuthenticated
from apps.common.schema_utils import api_response_schema

from .schemas import LoginSchema, TokenRefreshSchema, serialize_resolution
from .services import IdentityResolveService, LoginService


def _to_payload(data) -> dict:
    if hasattr(data, "dict"):
        return data.dict()
    return dict(data or {})


def _set_jwt_cookie(resp: Response, access_token: str) -> None:
    """按配置决定是否写入 HttpOnly JWT Cookie"""
    if getattr(settings, "JWT_USE_COOKIE", False):
        resp.set_cookie(
            getattr(settings, "JWT_ACCESS_COOKIE_NAME", "jwt_token_in_cookie"),
            access_token,
            httponly=True,
            secure=not settings.DEBUG,
            samesite="Lax",
            max_age=60 * 60 * 2,
        )


class LoginView(APIView):
    """邮箱登录：返回 JWT（刷新/访问）"""

    permission_classes = [AllowAny]
    authentication_classes: list = []

    @extend_schema(
        summary="登录",
        request=inline_serializer(
            name="LoginRequest",
            fields={"email": serializers.EmailField(), "password": serializers.CharField()},
        ),
        responses=api_response_schema(
            "Login",
            {
                "access": serializers.CharField(help_text="访问令牌"),
                "refresh": serializers.CharField(help_text="刷新令牌"),
                "user": serializers.DictField(),
            },
        ),
    )
    def post(self, request: Request) -> Response:
        schema = LoginSchema.from_dict(_to_payload(request.data), auto_validate=True)
        data = LoginService().execute(schema)
        resp = response.success(data, message="Signed in")
        _set_jwt_cookie(resp, access_token=str(data["access"]))
        return resp


class TokenRefreshView(APIView):
    """使用 refresh 令牌换取新的 access 令牌"""

    permission_classes = [AllowAny]
    authentication_classes: list = []

    @extend_schema(
        summary="刷新访问令牌",
        request=inline_serializer(name="TokenRefreshRequest", fields={"refresh": serializers.CharField()}),
        responses=api_response_schema(
            "TokenRefresh",
            {"access": serializers.CharField(), "refresh": serializers.CharField()},
        ),
    )
    def post(self, request: Request) -> Response:
        schema = TokenRefreshSchema.from_dict(_to_payload(request.data), auto_validate=True)
        data = refresh_access(schema.refresh)
        resp = response.success(data)
        _set_jwt_cookie(resp, access_token=data["access"])
        return resp


class MeView(APIView):
    """
    当前身份解析：角色、目标视图，参赛者附带资料与缴费状态
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="当前身份",
        request=None,
        responses=api_response_schema(
            "IdentityResolution",
            {
                "role": serializers.ChoiceField(choices=["platform_admin", "finance_admin", "participant"]),
                "view": serializers.ChoiceField(
                    choices=["admin_dashboard", "finance_dashboard", "dashboard", "registration"]),
                "email": serializers.EmailField(required=False),
                "profile": serializers.DictField(required=False),
                "payment_status": serializers.ChoiceField(choices=["pending", "paid"], required=False),
                "degraded": serializers.BooleanField(required=False),
                "authenticated": serializers.BooleanField(required=False),
            },
        ),
    )
    def get(self, request: Request) -> Response:
        resolution = IdentityResolveService().execute(request.user)
        return response.success(serialize_resolution(resolution))
