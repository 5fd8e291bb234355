from __future__ import annotations

from drf_spectacular.utils import extend_schema, inline_serializer
from rest_framework import parsers, serializers
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.common import response
from apps.common.permissions import AllowAny, IsAuthenticated
from apps.common.schema_utils import api_response_schema, phase1_submission_serializer
from apps.teams.repo import TeamRepo

from .repo import Phase2SubmissionRepo
from .schemas import Phase1SubmitSchema, Phase2SubmitSchema, VideoLinkSchema
from .services import (
    CountdownService,
    Phase1ReadService,
    Phase1SubmitService,
    Phase1VideoLinkService,
    Phase2SubmitService,
    serialize_countdown,
    serialize_phase1,
    serialize_phase2,
)

# 视图层：解析表单与文件后交给生命周期服务

_phase2_fields = inline_serializer(
    name="Phase2Submission",
    fields={
        "id": serializers.IntegerField(),
        "proposal_url": serializers.CharField(),
        "youtube_video_url": serializers.CharField(allow_blank=True),
        "submitted_at": serializers.DateTimeField(),
        "status": serializers.CharField(),
    },
)
_countdown_fields = {
    "deadline": serializers.DateTimeField(),
    "seconds_remaining": serializers.IntegerField(),
    "text": serializers.CharField(help_text='"{d}d {h}h {m}m {s}s" 或 "Submission Closed"'),
    "closed": serializers.BooleanField(),
}


def _to_payload(data) -> dict:
    """表单字段转普通 dict，剔除文件字段"""
    if hasattr(data, "dict"):
        data = data.dict()
    return {key: value for key, value in dict(data or {}).items() if isinstance(value, (str, bool, int))}


class Phase1SubmissionView(APIView):
    """
    第一阶段作品：
    - GET 查看本队作品（成绩发布后附带得分与评语）
    - POST 首次提交（multipart：四个文本字段 + presentation 文件），提交后锁定
    """

    permission_classes = [IsAuthenticated]
    parser_classes = [parsers.MultiPartParser, parsers.FormParser, parsers.JSONParser]

    @extend_schema(
        summary="查看第一阶段作品",
        responses=api_response_schema(
            "Phase1Read",
            {
                "state": serializers.ChoiceField(choices=["not_started", "submitted"]),
                "results_published": serializers.BooleanField(),
                "submission": phase1_submission_serializer(),
            },
        ),
    )
    def get(self, request: Request) -> Response:
        return response.success(Phase1ReadService().execute(request.user))

    @extend_schema(
        summary="提交第一阶段作品",
        request={
            "multipart/form-data": inline_serializer(
                name="Phase1SubmitRequest",
                fields={
                    "college_name": serializers.CharField(),
                    "whatsapp_number": serializers.CharField(),
                    "product_description": serializers.CharField(),
                    "solution": serializers.CharField(),
                    "youtube_link": serializers.CharField(required=False, allow_blank=True),
                    "presentation": serializers.FileField(help_text=".pptx 演示文稿"),
                },
            )
        },
        responses=api_response_schema("Phase1Submit", {"submission": phase1_submission_serializer()}),
    )
    def post(self, request: Request) -> Response:
        schema = Phase1SubmitSchema.from_dict(_to_payload(request.data))
        submission = Phase1SubmitService().execute(request.user, schema, request.FILES.get("presentation"))
        return response.created(
            {"submission": serialize_phase1(submission, include_score=False)},
            message="Your submission has been saved successfully!",
        )


class Phase1VideoLinkView(APIView):
    """已提交作品唯一可修改的字段：YouTube 视频链接（截止前）"""

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="更新视频链接",
        request=inline_serializer(name="VideoLinkRequest", fields={"youtube_link": serializers.CharField()}),
        responses=api_response_schema("VideoLink", {"submission": phase1_submission_serializer()}),
    )
    def patch(self, request: Request) -> Response:
        schema = VideoLinkSchema.from_dict(_to_payload(request.data))
        submission = Phase1VideoLinkService().execute(request.user, schema)
        return response.success(
            {"submission": serialize_phase1(submission, include_score=False)},
            message="YouTube link updated successfully!",
        )


class Phase2SubmissionView(APIView):
    """
    第二阶段方案：
    - GET 查看本队已提交内容
    - POST 提交/覆盖（multipart：proposal PDF + youtube_video_url），截止后拒绝
    """

    permission_classes = [IsAuthenticated]
    parser_classes = [parsers.MultiPartParser, parsers.FormParser, parsers.JSONParser]

    @extend_schema(summary="查看第二阶段方案", responses=api_response_schema("Phase2Read", {"submission": _phase2_fields}))
    def get(self, request: Request) -> Response:
        submission = Phase2SubmissionRepo().get_for_team(request.user.pk)
        selected = TeamRepo().exists(pk=request.user.pk, phase2_selected=True)
        return response.success(
            {"selected": selected, "submission": serialize_phase2(submission) if submission else None}
        )

    @extend_schema(
        summary="提交第二阶段方案",
        request={
            "multipart/form-data": inline_serializer(
                name="Phase2SubmitRequest",
                fields={
                    "youtube_video_url": serializers.CharField(required=False, allow_blank=True),
                    "proposal": serializers.FileField(required=False, help_text="PDF 商业计划书，首次提交必填"),
                },
            )
        },
        responses=api_response_schema("Phase2Submit", {"submission": _phase2_fields}),
    )
    def post(self, request: Request) -> Response:
        schema = Phase2SubmitSchema.from_dict(_to_payload(request.data))
        submission = Phase2SubmitService().execute(request.user, schema, request.FILES.get("proposal"))
        return response.success(
            {"submission": serialize_phase2(submission)},
            message="Business proposal and YouTube video uploaded successfully",
        )


class CountdownView(APIView):
    """截止倒计时（公开）"""

    permission_classes = [AllowAny]
    authentication_classes: list = []
    deadline_key: str = "PHASE2_DEADLINE"

    @extend_schema(summary="截止倒计时", responses=api_response_schema("Countdown", _countdown_fields))
    def get(self, request: Request) -> Response:
        _ = request
        return response.success(serialize_countdown(CountdownService().execute(self.deadline_key)))
