# apps/common/base/base_repo.py

from __future__ import annotations

from abc import ABC
from typing import Any, Generic, Optional, TypeVar

from django.db.models import Model, QuerySet

T = TypeVar("T", bound=Model)


class BaseRepo(ABC, Generic[T]):
    """
    Repository（数据访问层）基类：
    - 统一封装 Django ORM 读写细节，给 Service 提供稳定接口
    - 文档存储契约：按 id 读取、整体写入、按字段合并更新、等值过滤、单字段排序
    - 用法示例：class TeamRepo(BaseRepo[Team]): model = Team
    """

    #: 子类必须指定对应的模型
    model: type[T]

    def get_queryset(self) -> QuerySet[T]:
        """默认 QuerySet，子类可覆盖以附加 select_related/filter"""
        if not getattr(self, "model", None):
            raise NotImplementedError("BaseRepo 子类必须声明 model 属性")
        return self.model._default_manager.all()

    def filter(self, *, queryset: Optional[QuerySet[T]] = None, **filters) -> QuerySet[T]:
        qs = queryset if queryset is not None else self.get_queryset()
        return qs.filter(**filters)

    def get_by_id(self, pk: Any) -> T:
        """按主键读取，不存在时抛 DoesNotExist，由上层转换为 BizError"""
        return self.get_queryset().get(pk=pk)

    def get_or_none(self, *, queryset: Optional[QuerySet[T]] = None, **filters) -> Optional[T]:
        return self.filter(queryset=queryset, **filters).first()

    def exists(self, **filters) -> bool:
        return self.filter(**filters).exists()

    def count(self, **filters) -> int:
        return self.filter(**filters).count()

    def create(self, data: dict) -> T:
        return self.model._default_manager.create(**data)

    def update(self, instance: T, data: dict) -> T:
        """
        合并更新：只写入 data 中出现的字段（update_fields），其余字段保持数据库中的值
        auto_now 字段（如 updated_at）随之刷新
        """
        for field, value in data.items():
            setattr(instance, field, value)
        if data:
            update_fields = list(data.keys())
            update_fields += [
                f.name for f in instance._meta.concrete_fields
                if getattr(f, "auto_now", False) and f.name not in update_fields
            ]
            instance.save(update_fields=update_fields)
        return instance
