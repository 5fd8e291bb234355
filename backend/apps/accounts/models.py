"""
账户相关模型：认证主体（User）与参赛者资料（Profile）

- User 即身份提供方的 Principal：{id, email, display_name}
- Profile 以用户 ID 为主键，可能不存在（身份解析时需兜底合成）
"""

from __future__ import annotations

from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    """
    自定义用户模型：邮箱唯一，作为登录凭据与角色绑定的匹配键
    """

    email = models.EmailField("邮箱", unique=True)
    display_name = models.CharField("显示名称", max_length=80, blank=True)
    updated_at = models.DateTimeField("更新时间", auto_now=True)

    EMAIL_FIELD = "email"
    REQUIRED_FIELDS = ["email"]

    class Meta(AbstractUser.Meta):  # type: ignore[misc]
        ordering = ["-date_joined"]
        verbose_name = "用户"
        verbose_name_plural = "用户"

    def save(self, *args, **kwargs):
        if self.email:
            self.email = self.email.strip().lower()
        super().save(*args, **kwargs)


class Profile(models.Model):
    """参赛者资料：注册时填写，一人一份"""

    user = models.OneToOneField(
        User,
        on_delete=models.CASCADE,
        primary_key=True,
        related_name="profile",
        verbose_name="用户",
    )
    name = models.CharField("姓名", max_length=80)
    email = models.EmailField("联系邮箱", blank=True)
    phone = models.CharField("联系电话", max_length=20, blank=True)
    created_at = models.DateTimeField("创建时间", auto_now_add=True)
    updated_at = models.DateTimeField("更新时间", auto_now=True)

    class Meta:
        verbose_name = "参赛者资料"
        verbose_name_plural = "参赛者资料"

    def __str__(self) -> str:
        return f"{self.name} <{self.email}>"
