"""账户模块的 API 视图层

每个接口仅负责：
- 接收并校验参数（Schema）
- 调用对应业务 Service
- 使用统一响应封装成功结果
"""

from __future__ import annotations

from drf_spectacular.utils import extend_schema, inline_serializer
from rest_framework import serializers
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.common import response
from apps.common.permissions import AllowAny, IsAuthenticated
from apps.common.schema_utils import api_response_schema

from .repo import ProfileRepo
from .schemas import ProfileUpdateSchema, RegisterSchema
from .services import RegisterService, UpdateProfileService, serialize_profile, serialize_user


def _to_payload(data) -> dict:
    """QueryDict/dict 统一转为普通 dict，多值字段取最后一个"""
    if hasattr(data, "dict"):
        return data.dict()
    return dict(data or {})


_user_fields = inline_serializer(
    name="UserSummary",
    fields={
        "id": serializers.IntegerField(),
        "email": serializers.EmailField(),
        "display_name": serializers.CharField(allow_blank=True),
        "date_joined": serializers.DateTimeField(),
    },
)
_profile_fields = inline_serializer(
    name="ProfileSummary",
    fields={
        "id": serializers.IntegerField(),
        "name": serializers.CharField(),
        "email": serializers.EmailField(allow_blank=True),
        "phone": serializers.CharField(allow_blank=True),
    },
)


class RegisterView(APIView):
    """参赛者注册接口：创建账户与资料"""

    permission_classes = [AllowAny]
    authentication_classes: list = []

    @extend_schema(
        summary="注册账户",
        request=inline_serializer(
            name="RegisterRequest",
            fields={
                "email": serializers.EmailField(),
                "password": serializers.CharField(),
                "confirm_password": serializers.CharField(),
                "name": serializers.CharField(),
                "phone": serializers.CharField(required=False, allow_blank=True),
            },
        ),
        responses=api_response_schema("Register", {"user": _user_fields}),
    )
    def post(self, request: Request) -> Response:
        schema = RegisterSchema.from_dict(_to_payload(request.data), auto_validate=True)
        user = RegisterService().execute(schema)
        return response.created({"user": serialize_user(user)}, message="Registration successful")


class ProfileView(APIView):
    """当前用户资料：获取/部分更新"""

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="获取当前用户资料",
        request=None,
        responses=api_response_schema("ProfileDetail", {"user": _user_fields, "profile": _profile_fields}),
    )
    def get(self, request: Request) -> Response:
        profile = ProfileRepo().get_for_user(request.user.pk)
        return response.success(
            {
                "user": serialize_user(request.user),
                "profile": serialize_profile(profile) if profile else None,
            }
        )

    @extend_schema(
        summary="更新个人资料",
        request=inline_serializer(
            name="ProfileUpdateRequest",
            fields={
                "name": serializers.CharField(required=False),
                "email": serializers.EmailField(required=False),
                "phone": serializers.CharField(required=False, allow_blank=True),
            },
        ),
        responses=api_response_schema("ProfileUpdate", {"profile": _profile_fields}),
    )
    def patch(self, request: Request) -> Response:
        schema = ProfileUpdateSchema.from_dict(_to_payload(request.data), auto_validate=True)
        profile = UpdateProfileService().execute(request.user, schema)
        return response.success({"profile": serialize_profile(profile)}, message="Profile updated")
