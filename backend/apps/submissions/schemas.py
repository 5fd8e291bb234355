"""提交入参 Schema"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import ClassVar

from apps.common.base.base_schema import BaseSchema
from apps.common.exceptions import RequiredFieldsMissingError, ValidationError, VideoLinkRequiredError
from apps.common.utils.validators import missing_fields

PHASE1_REQUIRED_FIELDS = ("college_name", "whatsapp_number", "product_description", "solution")
URL_PATTERN = re.compile(r"^https?://\S+$", re.IGNORECASE)


def _clean(value) -> str:
    return str(value).strip() if value is not None else ""


def _validate_url(value: str) -> None:
    if value and not URL_PATTERN.match(value):
        raise ValidationError(message="Please provide a valid link")


@dataclass
class Phase1SubmitSchema(BaseSchema[None]):
    """
    第一阶段首次提交：四个文本字段必填，演示文稿文件在服务层单独校验
    """
    auto_validate: ClassVar[bool] = True

    college_name: str = ""
    whatsapp_number: str = ""
    product_description: str = ""
    solution: str = ""
    youtube_link: str = ""

    def validate(self) -> None:
        for name in (*PHASE1_REQUIRED_FIELDS, "youtube_link"):
            setattr(self, name, _clean(getattr(self, name)))
        missing = missing_fields(self.to_dict(), PHASE1_REQUIRED_FIELDS)
        if missing:
            raise RequiredFieldsMissingError(extra={"workflow": "phase1_submission", "fields": missing})
        _validate_url(self.youtube_link)


@dataclass
class VideoLinkSchema(BaseSchema[None]):
    """提交后唯一可修改的字段：视频链接"""
    auto_validate: ClassVar[bool] = True

    youtube_link: str = ""

    def validate(self) -> None:
        self.youtube_link = _clean(self.youtube_link)
        if not self.youtube_link:
            raise VideoLinkRequiredError()
        _validate_url(self.youtube_link)


@dataclass
class Phase2SubmitSchema(BaseSchema[None]):
    auto_validate: ClassVar[bool] = True

    youtube_video_url: str = ""

    def validate(self) -> None:
        self.youtube_video_url = _clean(self.youtube_video_url)
        _validate_url(self.youtube_video_url)
