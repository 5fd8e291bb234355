"""
队伍与付款记录

- Team 以队长（注册用户）ID 为主键，一人一队
- members 为有序成员列表（JSON），下标 0 为队长，成员没有独立身份
- Payment 为外部支付方写入的流水，仅作为缴费状态的兜底信号
"""

from __future__ import annotations

from django.conf import settings
from django.db import models


class PaymentStatus(models.TextChoices):
    PENDING = "pending", "待缴费"
    PAID = "paid", "已缴费"


class Team(models.Model):
    owner = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        primary_key=True,
        related_name="team",
        verbose_name="队长账号",
    )
    team_name = models.CharField("队伍名称", max_length=120)
    registration_id = models.CharField("注册编号", max_length=32, unique=True)
    college_name = models.CharField("学校", max_length=200, blank=True)
    members = models.JSONField("成员", default=list, help_text="有序成员列表，下标 0 为队长")
    payment_status = models.CharField(
        "缴费状态",
        max_length=10,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PENDING,
        db_index=True,
    )
    phase2_selected = models.BooleanField("入选第二阶段", default=False, db_index=True)
    is_regional_team = models.BooleanField("地区队伍", default=False)
    created_at = models.DateTimeField("创建时间", auto_now_add=True)
    updated_at = models.DateTimeField("更新时间", auto_now=True)

    class Meta:
        ordering = ["team_name"]
        verbose_name = "队伍"
        verbose_name_plural = "队伍"

    def __str__(self) -> str:
        return f"{self.team_name} ({self.registration_id})"

    @property
    def lead(self) -> dict:
        return self.members[0] if self.members else {}

    @property
    def is_paid(self) -> bool:
        return self.payment_status == PaymentStatus.PAID


class Payment(models.Model):
    """付款流水：只追加，后台只读"""

    email = models.EmailField("付款邮箱", db_index=True)
    status = models.CharField("状态", max_length=10, choices=PaymentStatus.choices, default=PaymentStatus.PENDING)
    amount = models.DecimalField("金额", max_digits=10, decimal_places=2, default=0)
    reference = models.CharField("支付流水号", max_length=120, blank=True)
    created_at = models.DateTimeField("创建时间", auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "付款记录"
        verbose_name_plural = "付款记录"

    def __str__(self) -> str:
        return f"{self.email} {self.status}"
