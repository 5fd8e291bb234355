# apps/common/schema_utils.py
from __future__ import annotations

import copy

from rest_framework import serializers
from drf_spectacular.utils import inline_serializer, OpenApiParameter


_CACHE: dict[str, serializers.Serializer] = {}


def _cached(name: str, builder):
    """简单缓存，避免重复生成同名 inline serializer 导致冲突"""
    if name not in _CACHE:
        _CACHE[name] = builder()
    return _CACHE[name]


def api_response_schema(
    name: str,
    data_fields: dict,
    *,
    extra_serializer: serializers.Field | None = None,
) -> serializers.Serializer:
    """
    构造统一响应 Schema：code/message/data/extra
    - name 用于生成唯一的响应/数据命名
    - data_fields 为 data 内部的字段定义
    """
    normalized_fields = {}
    for key, value in data_fields.items():
        if isinstance(value, type) and issubclass(value, serializers.Serializer):
            normalized_fields[key] = value()
        else:
            normalized_fields[key] = value
    data_serializer = inline_serializer(name=f"{name}Data", fields=normalized_fields)
    return inline_serializer(
        name=f"{name}Response",
        fields={
            "code": serializers.IntegerField(help_text="业务状态码，0 表示成功"),
            "message": serializers.CharField(help_text="提示信息"),
            "data": data_serializer,
            "extra": extra_serializer
            if extra_serializer
            else serializers.DictField(required=False, allow_null=True, help_text="附加信息"),
        },
    )


def list_of(serializer: serializers.Serializer, **kwargs) -> serializers.ListField:
    """ListField 会绑定 child，共享（缓存）的 serializer 须复制后再作为 child"""
    return serializers.ListField(child=copy.deepcopy(serializer), **kwargs)


def pagination_meta_serializer():
    return _cached(
        "PaginationMeta",
        lambda: inline_serializer(
            name="PaginationMeta",
            fields={
                "page": serializers.IntegerField(help_text="当前页码（从 1 开始）"),
                "page_size": serializers.IntegerField(help_text="每页条数"),
                "total": serializers.IntegerField(help_text="总条数"),
                "total_pages": serializers.IntegerField(help_text="总页数", required=False, allow_null=True),
                "has_next": serializers.BooleanField(help_text="是否有下一页"),
                "has_previous": serializers.BooleanField(help_text="是否有上一页"),
            },
        ),
    )


def pagination_parameters() -> list[OpenApiParameter]:
    """通用分页查询参数"""
    return [
        OpenApiParameter(name="page", location=OpenApiParameter.QUERY, description="页码（从 1 开始）",
                         required=False, type=int),
        OpenApiParameter(name="page_size", location=OpenApiParameter.QUERY, description="每页条数",
                         required=False, type=int),
    ]


def search_parameter(description: str = "按队伍名称/注册编号/学校模糊搜索（不区分大小写）") -> OpenApiParameter:
    return OpenApiParameter(name="search", location=OpenApiParameter.QUERY, description=description,
                            required=False, type=str)


def list_response(
    name: str,
    item_serializer,
    extra_fields: dict | None = None,
    *,
    paginated: bool = False,
):
    """列表响应：data.items 为数组，可选附加字段，支持分页元信息"""
    items_field = (
        item_serializer(many=True)
        if isinstance(item_serializer, type) and issubclass(item_serializer, serializers.Serializer)
        else list_of(item_serializer)
    )
    fields = {"items": items_field}
    if extra_fields:
        fields.update(extra_fields)
    return api_response_schema(
        name,
        fields,
        extra_serializer=pagination_meta_serializer() if paginated else None,
    )


# 常用数据结构
def member_serializer():
    return _cached(
        "TeamMember",
        lambda: inline_serializer(
            name="TeamMember",
            fields={
                "name": serializers.CharField(help_text="成员姓名"),
                "email": serializers.EmailField(help_text="成员邮箱"),
                "phone": serializers.CharField(help_text="联系电话"),
                "roll_number": serializers.CharField(required=False, allow_blank=True),
                "department": serializers.CharField(required=False, allow_blank=True),
                "year": serializers.CharField(required=False, allow_blank=True),
            },
        ),
    )


def team_serializer():
    return _cached(
        "TeamSummary",
        lambda: inline_serializer(
            name="TeamSummary",
            fields={
                "id": serializers.IntegerField(help_text="队伍 ID（即队长用户 ID）"),
                "team_name": serializers.CharField(help_text="队伍名称"),
                "registration_id": serializers.CharField(help_text="注册编号"),
                "college_name": serializers.CharField(help_text="学校", allow_blank=True),
                "members": list_of(member_serializer(), help_text="成员，下标 0 为队长"),
                "payment_status": serializers.ChoiceField(choices=["pending", "paid"]),
                "phase2_selected": serializers.BooleanField(),
                "is_regional_team": serializers.BooleanField(),
            },
        ),
    )


def phase1_submission_serializer():
    return _cached(
        "Phase1Submission",
        lambda: inline_serializer(
            name="Phase1Submission",
            fields={
                "id": serializers.IntegerField(help_text="队伍 ID"),
                "team_name": serializers.CharField(),
                "college_name": serializers.CharField(),
                "whatsapp_number": serializers.CharField(),
                "product_description": serializers.CharField(),
                "solution": serializers.CharField(),
                "file_url": serializers.CharField(),
                "youtube_link": serializers.CharField(allow_blank=True),
                "submitted_at": serializers.DateTimeField(),
                "updated_at": serializers.DateTimeField(),
                "points": serializers.IntegerField(required=False, allow_null=True, help_text="成绩发布后可见"),
                "review": serializers.CharField(required=False, allow_blank=True, help_text="成绩发布后可见"),
                "reviewed_at": serializers.DateTimeField(required=False, allow_null=True),
            },
        ),
    )


def scoreboard_entry_serializer():
    return _cached(
        "ScoreboardEntry",
        lambda: inline_serializer(
            name="ScoreboardEntry",
            fields={
                "id": serializers.IntegerField(help_text="队伍 ID"),
                "team_name": serializers.CharField(),
                "registration_id": serializers.CharField(allow_blank=True),
                "college_name": serializers.CharField(),
                "score": serializers.IntegerField(),
                "rank": serializers.IntegerField(help_text="竞赛排名（并列同名次，下一名次跳过）"),
                "review": serializers.CharField(allow_blank=True),
            },
        ),
    )


def dispatch_report_serializer():
    return _cached(
        "DispatchReport",
        lambda: inline_serializer(
            name="DispatchReport",
            fields={
                "success_count": serializers.IntegerField(),
                "fail_count": serializers.IntegerField(),
                "failures": serializers.ListField(
                    child=inline_serializer(
                        name="DispatchFailure",
                        fields={
                            "team_id": serializers.IntegerField(),
                            "email": serializers.CharField(),
                            "reason": serializers.CharField(),
                        },
                    )
                ),
            },
        ),
    )
