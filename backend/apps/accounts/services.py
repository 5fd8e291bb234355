"""账户模块的业务服务层

- 注册：创建用户与参赛者资料
- 资料维护：合并更新 Profile
"""

from __future__ import annotations

from apps.common.base.base_service import BaseService
from apps.common.exceptions import ConflictError
from apps.common.infra.logger import get_logger, logger_extra
from apps.common.utils.helpers import mask_email

from .models import Profile, User
from .repo import ProfileRepo, UserRepo
from .schemas import ProfileUpdateSchema, RegisterSchema

logger = get_logger(__name__)


def serialize_user(user: User) -> dict[str, object]:
    return {
        "id": user.pk,
        "email": user.email,
        "display_name": user.display_name,
        "date_joined": user.date_joined.isoformat() if user.date_joined else None,
    }


def serialize_profile(profile: Profile) -> dict[str, object]:
    return {
        "id": profile.pk,
        "name": profile.name,
        "email": profile.email,
        "phone": profile.phone,
    }


class RegisterService(BaseService[User]):
    """
    参赛者注册服务：
    - 校验邮箱唯一性
    - 创建用户（display_name = 姓名）并写入资料
    """

    def __init__(self, user_repo: UserRepo | None = None, profile_repo: ProfileRepo | None = None):
        self.user_repo = user_repo or UserRepo()
        self.profile_repo = profile_repo or ProfileRepo()

    def perform(self, schema: RegisterSchema) -> User:
        if self.user_repo.email_exists(schema.email):
            raise ConflictError(message="An account with this email already exists")

        username = self._unique_username(schema.email.split("@", 1)[0])
        user = self.user_repo.create_user(
            username=username,
            email=schema.email,
            password=schema.password,
            display_name=schema.name,
        )
        self.profile_repo.create({"user": user, "name": schema.name, "email": schema.email, "phone": schema.phone})
        logger.info("注册成功", extra=logger_extra({"user_id": user.pk, "email": mask_email(schema.email)}))
        return user

    def _unique_username(self, base: str) -> str:
        # 邮箱前缀可能重复（不同域名），追加序号
        candidate, suffix = base[:140] or "user", 1
        while self.user_repo.username_exists(candidate):
            suffix += 1
            candidate = f"{base[:140]}{suffix}"
        return candidate


class UpdateProfileService(BaseService[Profile]):
    """更新参赛者资料：部分字段合并写入，资料不存在时创建"""

    def __init__(self, profile_repo: ProfileRepo | None = None):
        self.profile_repo = profile_repo or ProfileRepo()

    def perform(self, user: User, schema: ProfileUpdateSchema) -> Profile:
        payload = schema.to_dict(exclude_none=True)
        if self.profile_repo.get_for_user(user.pk) is None:
            payload.setdefault("name", user.display_name or "User")
            payload.setdefault("email", user.email)
        profile = self.profile_repo.upsert(user.pk, payload)
        logger.info("资料已更新", extra=logger_extra({"user_id": user.pk, "fields": sorted(payload)}))
        return profile
