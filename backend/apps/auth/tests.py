# -*- coding: utf-8 -*-
"""
认证与身份解析测试
- 角色绑定（不区分大小写、非法角色跳过）
- 参赛者缴费状态查询链与短路
- 数据源异常降级
- 登录 / me 接口
"""
from __future__ import annotations

from django.core.cache import cache
from django.db import DatabaseError
from django.test import TestCase, override_settings
from rest_framework.test import APITestCase

from apps.accounts.models import Profile
from apps.auth.roles import Role, RoleBinding, load_bindings, role_for_email
from apps.auth.schemas import FinanceAdmin, Participant, PlatformAdmin
from apps.auth.services import (
    IdentityResolveService,
    PaymentLogLookup,
    PaymentStatusResolver,
    TeamPaymentLookup,
)
from apps.common.tests_utils import AuthenticatedAPIMixin
from apps.teams.models import Payment, PaymentStatus, Team

BINDINGS = {"admin@edcrec.com": "platform_admin", "finance@edcrec.com": "finance_admin"}


class RecordingLookup:
    """记录调用次数的假数据源"""

    def __init__(self, paid: bool):
        self.paid = paid
        self.calls = 0

    def is_paid(self, principal, profile) -> bool:
        self.calls += 1
        return self.paid


class FailingProfileLoader:
    def load(self, principal):
        raise DatabaseError("connection refused")


class FailingConfig:
    def get(self, key, default=None):
        raise DatabaseError("connection refused")


@override_settings(ROLE_BINDINGS=BINDINGS)
class RoleBindingTests(TestCase):

    def setUp(self):
        cache.clear()

    def test_match_is_case_insensitive(self):
        self.assertEqual(role_for_email("Admin@EDCREC.com"), Role.PLATFORM_ADMIN)
        self.assertEqual(role_for_email(" finance@edcrec.com "), Role.FINANCE_ADMIN)

    def test_unbound_email_is_participant(self):
        self.assertEqual(role_for_email("someone@college.edu"), Role.PARTICIPANT)
        self.assertEqual(role_for_email(""), Role.PARTICIPANT)

    @override_settings(ROLE_BINDINGS={"x@y.com": "superuser", "f@y.com": "finance_admin"})
    def test_unknown_role_is_skipped(self):
        bindings = load_bindings()
        self.assertEqual(bindings, [RoleBinding(credential="f@y.com", role=Role.FINANCE_ADMIN)])


class IdentityResolveServiceTests(AuthenticatedAPIMixin, TestCase):
    """身份解析服务：依赖通过构造函数注入"""

    bindings = [
        RoleBinding(credential="admin@edcrec.com", role=Role.PLATFORM_ADMIN),
        RoleBinding(credential="finance@edcrec.com", role=Role.FINANCE_ADMIN),
    ]

    def test_admin_roles(self):
        admin = self.make_user("admin@edcrec.com")
        finance = self.make_user("finance@edcrec.com")
        service = IdentityResolveService(bindings=self.bindings)
        self.assertIsInstance(service.execute(admin), PlatformAdmin)
        self.assertEqual(service.execute(admin).view, "admin_dashboard")
        self.assertIsInstance(service.execute(finance), FinanceAdmin)
        self.assertEqual(service.execute(finance).view, "finance_dashboard")

    def test_missing_profile_is_synthesized(self):
        user = self.make_user("p@college.edu", display_name="Priya")
        resolution = IdentityResolveService(bindings=self.bindings).execute(user)
        self.assertIsInstance(resolution, Participant)
        self.assertEqual(resolution.profile.name, "Priya")
        self.assertEqual(resolution.payment_status, PaymentStatus.PENDING)
        self.assertEqual(resolution.view, "registration")
        self.assertFalse(resolution.degraded)

    def test_missing_display_name_falls_back_to_user(self):
        user = self.make_user("anon@college.edu")
        resolution = IdentityResolveService(bindings=self.bindings).execute(user)
        self.assertEqual(resolution.profile.name, "User")

    def test_paid_team_short_circuits_payment_log(self):
        user = self.make_user("lead@college.edu")
        Team.objects.create(owner=user, team_name="Alpha", registration_id="SS25-AAAAAA",
                            payment_status=PaymentStatus.PAID)
        payment_log = RecordingLookup(paid=False)
        resolver = PaymentStatusResolver([TeamPaymentLookup(), payment_log])
        resolution = IdentityResolveService(bindings=self.bindings, payment_resolver=resolver).execute(user)
        self.assertEqual(resolution.payment_status, PaymentStatus.PAID)
        self.assertEqual(resolution.view, "dashboard")
        self.assertEqual(payment_log.calls, 0)

    def test_payment_log_uses_profile_email_first(self):
        user = self.make_user("login@college.edu")
        Profile.objects.create(user=user, name="Lead", email="billing@college.edu")
        Payment.objects.create(email="billing@college.edu", status=PaymentStatus.PAID)
        Payment.objects.create(email="login@college.edu", status=PaymentStatus.PENDING)
        resolution = IdentityResolveService(bindings=self.bindings).execute(user)
        self.assertEqual(resolution.payment_status, PaymentStatus.PAID)
        self.assertEqual(resolution.profile.email, "billing@college.edu")

    def test_payment_log_falls_back_to_principal_email(self):
        user = self.make_user("solo@college.edu")
        Payment.objects.create(email="SOLO@college.edu", status=PaymentStatus.PAID)
        lookup = PaymentLogLookup()
        resolution = IdentityResolveService(
            bindings=self.bindings, payment_resolver=PaymentStatusResolver([lookup])
        ).execute(user)
        self.assertEqual(resolution.payment_status, PaymentStatus.PAID)

    def test_pending_payment_entries_do_not_count(self):
        user = self.make_user("late@college.edu")
        Payment.objects.create(email="late@college.edu", status=PaymentStatus.PENDING)
        resolution = IdentityResolveService(bindings=self.bindings).execute(user)
        self.assertEqual(resolution.payment_status, PaymentStatus.PENDING)

    def test_data_source_failure_degrades(self):
        user = self.make_user("flaky@college.edu", display_name="Flaky")
        service = IdentityResolveService(bindings=self.bindings, profile_loader=FailingProfileLoader())
        resolution = service.execute(user)
        self.assertTrue(resolution.degraded)
        self.assertTrue(resolution.authenticated)
        self.assertEqual(resolution.payment_status, PaymentStatus.PENDING)
        self.assertEqual(resolution.profile.name, "Flaky")

    def test_role_lookup_failure_degrades(self):
        user = self.make_user("admin@edcrec.com", display_name="Admin")
        resolution = IdentityResolveService(config=FailingConfig()).execute(user)
        self.assertIsInstance(resolution, Participant)
        self.assertTrue(resolution.degraded)
        self.assertEqual(resolution.payment_status, PaymentStatus.PENDING)
        self.assertEqual(resolution.profile.name, "Admin")

    def test_resolution_is_idempotent(self):
        user = self.make_user("same@college.edu")
        service = IdentityResolveService(bindings=self.bindings)
        self.assertEqual(service.execute(user), service.execute(user))


@override_settings(ROLE_BINDINGS=BINDINGS)
class AuthAPITests(AuthenticatedAPIMixin, APITestCase):
    """登录与 me 接口"""

    def setUp(self):
        cache.clear()

    def test_login_with_wrong_password(self):
        self.make_user("p@college.edu")
        resp = self.client.post("/api/auth/login/", {"email": "p@college.edu", "password": "Wrong1234"},
                                format="json")
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.data["message"], "Invalid email or password")

    def test_login_then_me(self):
        self.make_user("P@College.edu", display_name="Pat")
        token = self.api_login("p@college.edu")
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")
        resp = self.client.get("/api/auth/me/")
        self.assertEqual(resp.status_code, 200)
        data = resp.data["data"]
        self.assertEqual(data["role"], "participant")
        self.assertEqual(data["view"], "registration")
        self.assertEqual(data["profile"]["name"], "Pat")

    def test_me_for_platform_admin(self):
        admin = self.make_user("admin@edcrec.com")
        resp = self.auth_client(admin).get("/api/auth/me/")
        self.assertEqual(resp.data["data"], {"role": "platform_admin", "view": "admin_dashboard",
                                             "email": "admin@edcrec.com"})

    def test_me_requires_token(self):
        resp = self.client.get("/api/auth/me/")
        self.assertEqual(resp.status_code, 401)

    def test_refresh_token(self):
        self.make_user("r@college.edu")
        resp = self.client.post("/api/auth/login/", {"email": "r@college.edu", "password": self.default_password},
                                format="json")
        refresh = resp.data["data"]["refresh"]
        resp = self.client.post("/api/auth/token/refresh/", {"refresh": refresh}, format="json")
        self.assertEqual(resp.status_code, 200)
        self.assertTrue(resp.data["data"]["access"])

    def test_refresh_with_garbage_token(self):
        resp = self.client.post("/api/auth/token/refresh/", {"refresh": "garbage"}, format="json")
        self.assertEqual(resp.status_code, 401)
