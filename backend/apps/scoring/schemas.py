"""评分入参 Schema"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar

from apps.common.base.base_schema import BaseSchema
from apps.common.exceptions import ValidationError

MIN_POINTS = 0
MAX_POINTS = 100


def _as_int(value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError("bool is not a score")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        return int(value.strip())
    raise ValueError(f"not an integer: {value!r}")


@dataclass
class ScoreSchema(BaseSchema[None]):
    """得分为 0..100 的整数，评语可为空"""
    auto_validate: ClassVar[bool] = True

    points: Any
    review: str = ""

    def validate(self) -> None:
        try:
            self.points = _as_int(self.points)
        except ValueError as exc:
            raise ValidationError(message="Points must be a whole number") from exc
        if not MIN_POINTS <= self.points <= MAX_POINTS:
            raise ValidationError(message=f"Points must be between {MIN_POINTS} and {MAX_POINTS}")
        self.review = str(self.review or "").strip()
