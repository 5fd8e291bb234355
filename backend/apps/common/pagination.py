"""
自定义分页器（apps.common.pagination）

- 与 common.response.page_success 对齐，自动封装 {code,message,data,extra}
- 供后台列表（队伍、付款记录）在 APIView 中手动调用
"""

from __future__ import annotations

from typing import Any, List

from rest_framework.pagination import PageNumberPagination
from rest_framework.request import Request
from rest_framework.response import Response

from apps.common.response import page_success


class StandardPagination(PageNumberPagination):
    """
    标准分页器：默认 20 条，前端可通过 ?page_size= 指定，上限 100
    """

    page_size: int = 20
    page_size_query_param: str = "page_size"
    max_page_size: int = 100

    def get_paginated_response(self, data: List[Any]) -> Response:
        return page_success(
            items=data,
            page=self.page.number,
            page_size=self.page.paginator.per_page,
            total=self.page.paginator.count,
            total_pages=self.page.paginator.num_pages,
            has_next=self.page.has_next(),
            has_previous=self.page.has_previous(),
        )

    def get_page_size(self, request: Request) -> int | None:
        # 防止 page_size 为 0 或负值
        size = super().get_page_size(request)
        if size is None:
            return None
        return max(1, size)
