"""账户模块的数据访问层

封装 User 与 Profile 的查询、创建，避免视图/服务直接操作 ORM
"""

from __future__ import annotations

from typing import Optional

from django.contrib.auth import get_user_model

from apps.common.base.base_repo import BaseRepo

from .models import Profile

User = get_user_model()


class UserRepo(BaseRepo[User]):
    """用户仓储：注册唯一性校验、按邮箱查找、创建用户"""

    model = User

    def username_exists(self, username: str) -> bool:
        return self.filter(username=username).exists()

    def email_exists(self, email: str) -> bool:
        return self.filter(email__iexact=email).exists()

    def get_by_email(self, email: str) -> Optional[User]:
        return self.filter(email__iexact=(email or "").strip()).first()

    def create_user(self, *, username: str, email: str, password: str, display_name: str = "") -> User:
        return self.model.objects.create_user(
            username=username,
            email=email,
            password=password,
            display_name=display_name,
        )


class ProfileRepo(BaseRepo[Profile]):
    """参赛者资料仓储：以用户 ID 为键"""

    model = Profile

    def get_for_user(self, user_id: int) -> Optional[Profile]:
        return self.get_or_none(pk=user_id)

    def upsert(self, user_id: int, data: dict) -> Profile:
        """存在则合并更新，不存在则创建"""
        profile = self.get_for_user(user_id)
        if profile is None:
            return self.create({"user_id": user_id, **data})
        return self.update(profile, data)
