"""评分接口：评分、成绩发布、排行榜与管理员作品列表"""

from __future__ import annotations

from drf_spectacular.utils import extend_schema, inline_serializer
from rest_framework import serializers
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.common import response
from apps.common.permissions import IsAuthenticated, IsPlatformAdmin
from apps.common.schema_utils import (
    api_response_schema,
    list_of,
    list_response,
    phase1_submission_serializer,
    scoreboard_entry_serializer,
    search_parameter,
)
from apps.submissions.services import serialize_phase1

from .models import RESULTS_CONFIG_KEY
from .repo import ResultsConfigRepo
from .schemas import ScoreSchema
from .services import (
    AdminSubmissionListService,
    PublishResultsService,
    RecordScoreService,
    ScoreboardService,
    serialize_results_config,
)

_results_fields = {
    "published": serializers.BooleanField(),
    "published_at": serializers.DateTimeField(allow_null=True),
}


class ScoreboardView(APIView):
    """成绩排行榜：发布前为空列表"""

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="成绩排行榜",
        parameters=[search_parameter()],
        responses=api_response_schema(
            "Scoreboard",
            {
                "published": serializers.BooleanField(),
                "entries": list_of(scoreboard_entry_serializer()),
            },
        ),
    )
    def get(self, request: Request) -> Response:
        search = request.query_params.get("search")
        return response.success(ScoreboardService().execute(search))


class ResultsView(APIView):
    """
    成绩发布状态
    - GET 任意登录用户可查看
    - POST 平台管理员发布（全部作品已评分才允许）
    """

    def get_permissions(self):
        if self.request.method == "POST":
            return [IsPlatformAdmin()]
        return [IsAuthenticated()]

    @extend_schema(summary="成绩发布状态", responses=api_response_schema("ResultsStatus", _results_fields))
    def get(self, request: Request) -> Response:
        _ = request
        return response.success(serialize_results_config(ResultsConfigRepo().get_or_none(key=RESULTS_CONFIG_KEY)))

    @extend_schema(summary="发布第一阶段成绩", request=None, responses=api_response_schema("ResultsPublish", _results_fields))
    def post(self, request: Request) -> Response:
        _ = request
        config = PublishResultsService().execute()
        return response.success(serialize_results_config(config), message="Results published successfully!")


class AdminSubmissionListView(APIView):
    """管理员查看全部第一阶段作品（含注册编号与队长姓名）"""

    permission_classes = [IsPlatformAdmin]

    @extend_schema(
        summary="第一阶段作品列表",
        responses=list_response(
            "AdminSubmissionList",
            inline_serializer(
                name="AdminSubmission",
                fields={
                    "id": serializers.IntegerField(),
                    "team_name": serializers.CharField(),
                    "registration_id": serializers.CharField(),
                    "lead_name": serializers.CharField(allow_blank=True),
                    "college_name": serializers.CharField(),
                    "whatsapp_number": serializers.CharField(),
                    "product_description": serializers.CharField(),
                    "solution": serializers.CharField(),
                    "file_url": serializers.CharField(),
                    "youtube_link": serializers.CharField(allow_blank=True),
                    "submitted_at": serializers.DateTimeField(),
                    "points": serializers.IntegerField(allow_null=True),
                    "review": serializers.CharField(allow_blank=True),
                    "reviewed_at": serializers.DateTimeField(allow_null=True),
                },
            ),
        ),
    )
    def get(self, request: Request) -> Response:
        _ = request
        return response.success({"items": AdminSubmissionListService().execute()})


class ScoreView(APIView):
    """为指定作品打分，可重复提交覆盖"""

    permission_classes = [IsPlatformAdmin]

    @extend_schema(
        summary="作品评分",
        request=inline_serializer(
            name="ScoreRequest",
            fields={
                "points": serializers.IntegerField(min_value=0, max_value=100),
                "review": serializers.CharField(required=False, allow_blank=True),
            },
        ),
        responses=api_response_schema("Score", {"submission": phase1_submission_serializer()}),
    )
    def put(self, request: Request, submission_id: int) -> Response:
        schema = ScoreSchema.from_dict(request.data)
        submission = RecordScoreService().execute(submission_id, schema)
        return response.success(
            {"submission": serialize_phase1(submission, include_score=True)},
            message="Score saved successfully!",
        )
