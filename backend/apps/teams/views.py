"""队伍模块接口：注册、成员维护、入选标记、缴费确认与付款流水"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiParameter, extend_schema, inline_serializer
from rest_framework import serializers
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.common import response
from apps.common.exceptions import TeamNotFoundError
from apps.common.pagination import StandardPagination
from apps.common.permissions import IsAuthenticated, IsFinanceAdmin, IsPlatformAdmin
from apps.common.schema_utils import (
    api_response_schema,
    list_of,
    list_response,
    member_serializer,
    pagination_parameters,
    team_serializer,
)

from .repo import TeamRepo
from .schemas import MemberUpdateSchema, Phase2SelectionSchema, TeamRegisterSchema
from .services import (
    ConfirmPaymentService,
    PaymentLogService,
    Phase2SelectionService,
    RegisterTeamService,
    UpdateMemberService,
    serialize_payment,
    serialize_team,
)


def _to_payload(data) -> dict:
    if hasattr(data, "dict"):
        return data.dict()
    return dict(data or {})


class TeamRegisterView(APIView):
    """当前用户的队伍：注册 / 查看"""

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="注册队伍",
        request=inline_serializer(
            name="TeamRegisterRequest",
            fields={
                "team_name": serializers.CharField(),
                "college_name": serializers.CharField(required=False, allow_blank=True),
                "members": list_of(member_serializer(), min_length=1, max_length=4),
                "is_regional_team": serializers.BooleanField(required=False),
            },
        ),
        responses=api_response_schema("TeamRegister", {"team": team_serializer()}),
    )
    def post(self, request: Request) -> Response:
        schema = TeamRegisterSchema.from_dict(request.data, auto_validate=True)
        team = RegisterTeamService().execute(request.user, schema)
        return response.created({"team": serialize_team(team)}, message="Team registered")


class MyTeamView(APIView):
    """查看当前用户的队伍"""

    permission_classes = [IsAuthenticated]

    @extend_schema(summary="我的队伍", responses=api_response_schema("MyTeam", {"team": team_serializer()}))
    def get(self, request: Request) -> Response:
        team = TeamRepo().get_for_owner(request.user.pk)
        if team is None:
            raise TeamNotFoundError()
        return response.success({"team": serialize_team(team)})


class MemberUpdateView(APIView):
    """合并更新队伍中指定下标的成员"""

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="更新成员信息",
        request=member_serializer(),
        parameters=[OpenApiParameter("index", int, OpenApiParameter.PATH, description="成员下标，0 为队长")],
        responses=api_response_schema("MemberUpdate", {"team": team_serializer()}),
    )
    def patch(self, request: Request, index: int) -> Response:
        schema = MemberUpdateSchema.from_dict(_to_payload(request.data), auto_validate=True)
        team = UpdateMemberService().execute(request.user, index, schema)
        return response.success({"team": serialize_team(team)}, message="Member updated")


class Phase2SelectionView(APIView):
    """平台管理员：标记队伍是否入选第二阶段"""

    permission_classes = [IsPlatformAdmin]

    @extend_schema(
        summary="设置第二阶段入选",
        request=inline_serializer(name="Phase2SelectionRequest",
                                  fields={"selected": serializers.BooleanField(required=False, default=True)}),
        responses=api_response_schema("Phase2Selection", {"team": team_serializer()}),
    )
    def post(self, request: Request, team_id: int) -> Response:
        schema = Phase2SelectionSchema.from_dict(_to_payload(request.data), auto_validate=True)
        team = Phase2SelectionService().execute(team_id, schema.selected)
        return response.success({"team": serialize_team(team)})


class ConfirmPaymentView(APIView):
    """财务管理员：确认队伍已缴费"""

    permission_classes = [IsFinanceAdmin]

    @extend_schema(summary="确认缴费", request=None,
                   responses=api_response_schema("ConfirmPayment", {"team": team_serializer()}))
    def post(self, request: Request, team_id: int) -> Response:
        team = ConfirmPaymentService().execute(team_id)
        return response.success({"team": serialize_team(team)}, message="Payment confirmed")


class PaymentLogView(APIView):
    """财务管理员：付款流水列表（分页）"""

    permission_classes = [IsFinanceAdmin]

    @extend_schema(
        summary="付款流水",
        parameters=[
            *pagination_parameters(),
            OpenApiParameter("status", str, OpenApiParameter.QUERY, required=False, enum=["pending", "paid"]),
        ],
        responses=list_response(
            "PaymentLog",
            inline_serializer(
                name="PaymentEntry",
                fields={
                    "id": serializers.IntegerField(),
                    "email": serializers.EmailField(),
                    "status": serializers.CharField(),
                    "amount": serializers.CharField(),
                    "reference": serializers.CharField(allow_blank=True),
                    "created_at": serializers.DateTimeField(),
                },
            ),
            paginated=True,
        ),
    )
    def get(self, request: Request) -> Response:
        payments = PaymentLogService().execute(status=request.query_params.get("status"))
        paginator = StandardPagination()
        page = paginator.paginate_queryset(payments, request, view=self)
        return paginator.get_paginated_response([serialize_payment(p) for p in page])
