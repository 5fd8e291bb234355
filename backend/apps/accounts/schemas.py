"""账户相关的入参校验 Schema

定义注册与修改资料请求的输入结构与校验规则
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import ClassVar, Optional

from apps.common.base.base_schema import BaseSchema
from apps.common.exceptions import ValidationError
from apps.common.utils.validators import forbid_html, validate_email, validate_password_strength

PHONE_PATTERN = re.compile(r"^\+?[0-9 ()-]{7,20}$")


def validate_phone(value: str) -> None:
    """联系电话：数字为主，允许 + 空格 括号 连字符"""
    if not PHONE_PATTERN.match(value or ""):
        raise ValidationError(message="Please provide a valid phone number")


@dataclass
class RegisterSchema(BaseSchema[None]):
    """
    注册入参 Schema：
    - 邮箱即登录凭据，用户名由邮箱前缀派生
    - 同时写入参赛者资料（姓名、电话）
    """
    auto_validate: ClassVar[bool] = True

    email: str
    password: str
    confirm_password: str
    # 姓名：同时作为显示名称
    name: str
    phone: str = ""

    def validate(self) -> None:
        self.email = (self.email or "").strip().lower()
        self.name = (self.name or "").strip()
        validate_email(self.email)
        validate_password_strength(self.password)
        if self.password != self.confirm_password:
            raise ValidationError(message="Passwords do not match")
        if not self.name:
            raise ValidationError(message="Please provide your name")
        forbid_html(self.name, field_name="name")
        if self.phone:
            validate_phone(self.phone)


@dataclass
class ProfileUpdateSchema(BaseSchema[None]):
    """资料更新：仅处理非空字段"""
    auto_validate: ClassVar[bool] = True

    name: Optional[str] = field(default=None)
    email: Optional[str] = field(default=None)
    phone: Optional[str] = field(default=None)

    def validate(self) -> None:
        if self.name is not None:
            self.name = self.name.strip()
            if not self.name:
                raise ValidationError(message="Name must not be empty")
            forbid_html(self.name, field_name="name")
        if self.email:
            self.email = self.email.strip().lower()
            validate_email(self.email)
        if self.phone:
            validate_phone(self.phone)
