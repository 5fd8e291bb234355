"""队伍注册与成员维护的入参 Schema"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Optional

from apps.accounts.schemas import validate_phone
from apps.common.base.base_schema import BaseSchema
from apps.common.exceptions import RequiredFieldsMissingError, ValidationError
from apps.common.utils.validators import forbid_html, missing_fields, validate_email

MAX_MEMBERS = 4
MEMBER_FIELDS = ("name", "email", "phone", "roll_number", "department", "year")


def _clean(value: Any) -> str:
    return str(value).strip() if value is not None else ""


@dataclass
class MemberSchema(BaseSchema[None]):
    """成员信息：姓名/邮箱/电话必填，其余可选"""
    auto_validate: ClassVar[bool] = True

    name: str
    email: str
    phone: str
    roll_number: str = ""
    department: str = ""
    year: str = ""

    def validate(self) -> None:
        for name in MEMBER_FIELDS:
            setattr(self, name, _clean(getattr(self, name)))
        if missing_fields(self.to_dict(), ("name", "email", "phone")):
            raise RequiredFieldsMissingError()
        self.email = self.email.lower()
        forbid_html(self.name, field_name="name")
        validate_email(self.email)
        validate_phone(self.phone)


@dataclass
class TeamRegisterSchema(BaseSchema[None]):
    """
    队伍注册：
    - members 为 1..4 人，第一位为队长
    - 注册编号由服务端生成，不接受前端传入
    """
    auto_validate: ClassVar[bool] = True

    team_name: str
    members: list
    college_name: str = ""
    is_regional_team: bool = False

    def validate(self) -> None:
        self.team_name = _clean(self.team_name)
        self.college_name = _clean(self.college_name)
        if not self.team_name:
            raise RequiredFieldsMissingError()
        forbid_html(self.team_name, field_name="team name")
        if not isinstance(self.members, list) or not 1 <= len(self.members) <= MAX_MEMBERS:
            raise ValidationError(message=f"A team must have between 1 and {MAX_MEMBERS} members")
        cleaned = []
        for raw in self.members:
            if not isinstance(raw, dict):
                raise ValidationError(message="Invalid member entry")
            cleaned.append(MemberSchema.from_dict(raw).to_dict())
        emails = [member["email"] for member in cleaned]
        if len(set(emails)) != len(emails):
            raise ValidationError(message="Each member must use a different email")
        self.members = cleaned
        self.is_regional_team = bool(self.is_regional_team)


@dataclass
class MemberUpdateSchema(BaseSchema[None]):
    """成员部分更新：只处理出现的字段"""
    auto_validate: ClassVar[bool] = True

    name: Optional[str] = field(default=None)
    email: Optional[str] = field(default=None)
    phone: Optional[str] = field(default=None)
    roll_number: Optional[str] = field(default=None)
    department: Optional[str] = field(default=None)
    year: Optional[str] = field(default=None)

    def validate(self) -> None:
        changes = self.to_dict(exclude_none=True)
        if not changes:
            raise ValidationError(message="Nothing to update")
        for name, value in changes.items():
            setattr(self, name, _clean(value))
        for required in ("name", "email", "phone"):
            if required in changes and not getattr(self, required):
                raise RequiredFieldsMissingError()
        if self.name:
            forbid_html(self.name, field_name="name")
        if self.email:
            self.email = self.email.lower()
            validate_email(self.email)
        if self.phone:
            validate_phone(self.phone)


@dataclass
class Phase2SelectionSchema(BaseSchema[None]):
    auto_validate: ClassVar[bool] = True

    selected: bool = True

    def validate(self) -> None:
        if isinstance(self.selected, str):
            self.selected = self.selected.strip().lower() in {"1", "true", "yes", "on"}
        self.selected = bool(self.selected)
