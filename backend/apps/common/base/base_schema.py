# apps/common/base/base_schema.py

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import MISSING, asdict, dataclass, fields
from typing import Any, ClassVar, Dict, Generic, Iterable, Mapping, Optional, TypeVar

from apps.common.exceptions import ValidationError

T = TypeVar("T")
SchemaType = TypeVar("SchemaType", bound="BaseSchema[Any]")


@dataclass
class BaseSchema(ABC, Generic[T]):
    """
    业务 Schema / DTO 基类

    - Service 层在外部输入与 Model 之间传递结构化数据
    - 聚合字段校验逻辑，替代零散的 serializer 校验
    - from_dict 忽略未声明的键，前端多传字段不会导致构造失败

        @dataclass
        class ScoreSchema(BaseSchema):
            points: int
            review: str = ""

            def validate(self):
                ...
    """

    #: 是否在 __post_init__ 中自动执行 validate
    auto_validate: ClassVar[bool] = False

    def __post_init__(self):
        if self.auto_validate:
            self.validate()

    @abstractmethod
    def validate(self) -> None:
        """子类实现字段/业务约束校验，出错时抛 BizError"""

    def to_dict(self, *, exclude_none: bool = False, exclude: Iterable[str] | None = None) -> Dict[str, Any]:
        data = asdict(self)
        if exclude_none:
            data = {key: value for key, value in data.items() if value is not None}
        for key in exclude or ():
            data.pop(key, None)
        return data

    @classmethod
    def from_dict(
            cls: type[SchemaType],
            data: Mapping[str, Any],
            *,
            auto_validate: Optional[bool] = None,
    ) -> SchemaType:
        """
        将外部 payload（dict/QueryDict）转为 Schema；auto_validate 控制是否立即校验
        """
        known = {f.name for f in fields(cls)}
        payload = {key: data.get(key) for key in known if key in data}
        absent = [
            f.name for f in fields(cls)
            if f.name not in payload and f.default is MISSING and f.default_factory is MISSING
        ]
        if absent:
            raise ValidationError(message=f"Missing required fields: {', '.join(absent)}")
        if auto_validate is False:
            # 显式跳过校验时绕过 __post_init__
            instance = cls.__new__(cls)
            for f in fields(cls):
                if f.name in payload:
                    setattr(instance, f.name, payload[f.name])
                elif f.default is not MISSING:
                    setattr(instance, f.name, f.default)
                elif f.default_factory is not MISSING:
                    setattr(instance, f.name, f.default_factory())
            return instance
        instance = cls(**payload)  # type: ignore[arg-type]
        if auto_validate and not cls.auto_validate:
            instance.validate()
        return instance
