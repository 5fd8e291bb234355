from __future__ import annotations

from drf_spectacular.utils import OpenApiParameter, extend_schema, inline_serializer
from rest_framework import serializers
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.common import response
from apps.common.permissions import IsPlatformAdmin
from apps.common.schema_utils import api_response_schema, dispatch_report_serializer, list_response, search_parameter

from .schemas import TEAM_STATUS_FILTERS, TeamFilterSchema, WorkshopDetailsSchema
from .services import NotificationDispatchService, NotificationKind, filter_teams, serialize_team_summary
from .tasks import dispatch_team_notifications


def _filter_fields() -> dict:
    return {
        "search": serializers.CharField(required=False, allow_blank=True),
        "status": serializers.ChoiceField(choices=TEAM_STATUS_FILTERS, required=False),
        "team_ids": serializers.ListField(child=serializers.IntegerField(), required=False),
        "run_async": serializers.BooleanField(required=False, help_text="交给 Celery 后台执行"),
    }


def _dispatch(request: Request, kind: str, workshop: WorkshopDetailsSchema | None) -> Response:
    """筛选队伍后同步扇出，或投递 Celery 任务"""
    schema = TeamFilterSchema.from_dict(request.data)
    teams = list(filter_teams(schema))
    if schema.run_async:
        result = dispatch_team_notifications.delay(
            [team.pk for team in teams],
            kind,
            workshop.to_dict() if workshop else None,
        )
        return response.success({"task_id": result.id, "team_count": len(teams)}, message="Dispatch queued")
    report = NotificationDispatchService().execute(teams, kind, workshop)
    return response.success(
        {"report": report.to_dict()},
        message=f"Successfully sent {report.success_count} emails"
        + (f", {report.fail_count} failed" if report.fail_count else ""),
    )


class NotificationTeamListView(APIView):
    """发送前预览目标队伍"""

    permission_classes = [IsPlatformAdmin]

    @extend_schema(
        summary="通知目标队伍",
        parameters=[
            search_parameter("按队伍名称/注册编号模糊搜索（不区分大小写）"),
            OpenApiParameter(
                name="status",
                location=OpenApiParameter.QUERY,
                required=False,
                description="all / selected / pending（默认 all）",
                type=str,
                enum=list(TEAM_STATUS_FILTERS),
            ),
        ],
        responses=list_response(
            "NotificationTeamList",
            inline_serializer(
                name="NotificationTeam",
                fields={
                    "id": serializers.IntegerField(),
                    "team_name": serializers.CharField(),
                    "registration_id": serializers.CharField(),
                    "lead_name": serializers.CharField(allow_blank=True),
                    "member_count": serializers.IntegerField(),
                    "phase2_selected": serializers.BooleanField(),
                    "payment_status": serializers.CharField(),
                },
            ),
        ),
    )
    def get(self, request: Request) -> Response:
        schema = TeamFilterSchema.from_dict(request.query_params)
        return response.success({"items": [serialize_team_summary(team) for team in filter_teams(schema)]})


class WorkshopInviteDispatchView(APIView):
    """向筛选出的队伍全体成员发送工作坊邀请（附电子门票）"""

    permission_classes = [IsPlatformAdmin]

    @extend_schema(
        summary="发送工作坊邀请",
        request=inline_serializer(
            name="WorkshopInviteRequest",
            fields={
                "title": serializers.CharField(),
                "date": serializers.CharField(),
                "venue": serializers.CharField(),
                **_filter_fields(),
            },
        ),
        responses=api_response_schema("WorkshopInviteReport", {"report": dispatch_report_serializer()}),
    )
    def post(self, request: Request) -> Response:
        workshop = WorkshopDetailsSchema.from_dict(request.data)
        return _dispatch(request, NotificationKind.WORKSHOP_INVITE, workshop)


class Phase2SelectionDispatchView(APIView):
    """向已入选第二阶段的队伍发送祝贺邮件"""

    permission_classes = [IsPlatformAdmin]

    @extend_schema(
        summary="发送第二阶段入选通知",
        request=inline_serializer(name="Phase2SelectionDispatchRequest", fields=_filter_fields()),
        responses=api_response_schema("Phase2SelectionReport", {"report": dispatch_report_serializer()}),
    )
    def post(self, request: Request) -> Response:
        return _dispatch(request, NotificationKind.PHASE2_SELECTION, None)
