"""队伍模块的数据访问层"""

from __future__ import annotations

from typing import Iterable, Optional

from django.db.models import Q, QuerySet

from apps.common.base.base_repo import BaseRepo

from .models import Payment, PaymentStatus, Team


class TeamRepo(BaseRepo[Team]):
    model = Team

    def get_for_owner(self, user_id: int) -> Optional[Team]:
        return self.get_or_none(pk=user_id)

    def is_paid(self, team_id: int) -> bool:
        return self.exists(pk=team_id, payment_status=PaymentStatus.PAID)

    def registration_id_exists(self, registration_id: str) -> bool:
        return self.exists(registration_id=registration_id)

    def search(
            self,
            term: str | None = None,
            *,
            phase2_selected: bool | None = None,
            payment_status: str | None = None,
    ) -> QuerySet[Team]:
        """按队伍名称/注册编号（不区分大小写）搜索，可叠加入选与缴费状态过滤"""
        qs = self.get_queryset()
        term = (term or "").strip()
        if term:
            qs = qs.filter(Q(team_name__icontains=term) | Q(registration_id__icontains=term))
        if phase2_selected is not None:
            qs = qs.filter(phase2_selected=phase2_selected)
        if payment_status:
            qs = qs.filter(payment_status=payment_status)
        return qs.order_by("team_name")

    def in_ids(self, team_ids: Iterable[int]) -> QuerySet[Team]:
        return self.filter(pk__in=list(team_ids)).order_by("team_name")


class PaymentRepo(BaseRepo[Payment]):
    model = Payment

    def has_paid(self, email: str) -> bool:
        return self.exists(email__iexact=(email or "").strip(), status=PaymentStatus.PAID)

    def recent(self, *, status: str | None = None) -> QuerySet[Payment]:
        qs = self.get_queryset()
        if status:
            qs = qs.filter(status=status)
        return qs.order_by("-created_at")
