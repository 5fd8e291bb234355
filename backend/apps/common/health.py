from __future__ import annotations

from django.db import DatabaseError, connection
from rest_framework.views import APIView
from rest_framework import serializers
from rest_framework.request import Request
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema

from apps.common import response
from apps.common.exceptions import DataSourceUnavailableError
from apps.common.infra.logger import get_logger
from apps.common.permissions import AllowAny
from apps.common.schema_utils import api_response_schema

logger = get_logger(__name__)


class HealthCheckView(APIView):
    """
    健康检查接口
    - 用于负载均衡/监控探活，返回统一成功格式
    - 仅做一次轻量数据库探测；数据库不可用时返回 503
    """

    permission_classes = [AllowAny]
    authentication_classes: list = []

    @extend_schema(
        summary="健康检查",
        request=None,
        responses=api_response_schema("HealthCheck", {"status": serializers.CharField()}),
    )
    def get(self, request: Request) -> Response:
        _ = request
        try:
            with connection.cursor() as cursor:
                cursor.execute("SELECT 1")
        except DatabaseError as exc:
            logger.warning("健康检查：数据库不可用", extra={"error": str(exc)})
            raise DataSourceUnavailableError() from exc
        return response.success({"status": "ok"})
