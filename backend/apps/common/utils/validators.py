"""
校验工具集合：邮箱格式、必填字段与上传文件
"""

from __future__ import annotations

import re
from typing import Iterable, Mapping

from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import validate_email as django_validate_email

from apps.common.exceptions import FileTypeError, ValidationError


def validate_email(email: str, *, field_name: str = "email") -> None:
    """校验邮箱格式，不通过抛出 ValidationError"""
    try:
        django_validate_email(email)
    except DjangoValidationError as exc:
        raise ValidationError(message=f"Invalid {field_name} address") from exc


def validate_password_strength(password: str, min_length: int = 8, max_length: int = 64) -> None:
    """
    密码复杂度校验：长度在 [min_length, max_length] 区间，且同时包含字母与数字
    """
    if not min_length <= len(password or "") <= max_length:
        raise ValidationError(message=f"Password must be {min_length}-{max_length} characters long")
    if not re.search(r"[A-Za-z]", password) or not re.search(r"\d", password):
        raise ValidationError(message="Password must contain both letters and digits")


def forbid_html(value: str, *, field_name: str = "field") -> None:
    """禁止包含简单 HTML 标签"""
    if value and ("<" in value or ">" in value):
        raise ValidationError(message=f"{field_name} must not contain HTML tags")


def missing_fields(data: Mapping[str, object], required: Iterable[str]) -> list[str]:
    """返回为空（None 或纯空白字符串）的必填字段名，保持入参顺序"""
    missing = []
    for name in required:
        value = data.get(name)
        if value is None or (isinstance(value, str) and not value.strip()):
            missing.append(name)
    return missing


def validate_upload_file(
    uploaded_file,
    *,
    allowed_content_types: Iterable[str],
    max_size_mb: int = 10,
    missing_message: str = "Please upload a file",
    type_message: str = "Unsupported file type",
) -> None:
    """
    上传校验：存在性 → MIME 类型 → 大小

    - 缺少文件：ValidationError(missing_message)
    - 类型不符：FileTypeError(type_message)
    - 超出大小：ValidationError
    """
    if uploaded_file is None:
        raise ValidationError(message=missing_message)
    content_type = (getattr(uploaded_file, "content_type", "") or "").lower()
    if content_type not in {ct.lower() for ct in allowed_content_types}:
        raise FileTypeError(message=type_message, extra={"content_type": content_type})
    size = getattr(uploaded_file, "size", 0) or 0
    if size > max_size_mb * 1024 * 1024:
        raise ValidationError(message=f"File size must not exceed {max_size_mb}MB")
