from __future__ import annotations

from rest_framework import serializers
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView
from drf_spectacular.utils import extend_schema

from apps.common import response
from apps.common.permissions import AllowAny
from apps.common.schema_utils import api_response_schema
from .services import ConfigService


class PublicEventInfoView(APIView):
    """
    对外公开的赛事信息：品牌名与两个截止时间，前台用于页眉与倒计时初始化
    """

    permission_classes = [AllowAny]
    authentication_classes: list = []

    @extend_schema(
        summary="获取赛事公开信息",
        responses=api_response_schema(
            "PublicEventInfo",
            {
                "brand": serializers.CharField(),
                "phase1_video_deadline": serializers.DateTimeField(),
                "phase2_deadline": serializers.DateTimeField(),
            },
        ),
    )
    def get(self, request: Request) -> Response:
        _ = request
        config = ConfigService()
        return response.success(
            {
                "brand": config.get("EVENT_BRAND", "STARTUP SPARK 2025"),
                "phase1_video_deadline": config.get_datetime("PHASE1_VIDEO_DEADLINE"),
                "phase2_deadline": config.get_datetime("PHASE2_DEADLINE"),
            }
        )
