from __future__ import annotations

from django.core.cache import cache
from django.test import TestCase
from rest_framework.test import APITestCase

from apps.accounts.models import Profile, User
from apps.accounts.schemas import RegisterSchema
from apps.accounts.services import RegisterService
from apps.common.exceptions import ConflictError, ValidationError
from apps.common.tests_utils import AuthenticatedAPIMixin


class RegisterSchemaTests(TestCase):
    """注册入参校验"""

    def _payload(self, **overrides):
        payload = {
            "email": "Lead@Example.com",
            "password": "Passw0rd123",
            "confirm_password": "Passw0rd123",
            "name": "Asha",
            "phone": "+91 98765 43210",
        }
        payload.update(overrides)
        return payload

    def test_email_is_normalized(self):
        schema = RegisterSchema.from_dict(self._payload())
        self.assertEqual(schema.email, "lead@example.com")

    def test_password_mismatch_rejected(self):
        with self.assertRaises(ValidationError):
            RegisterSchema.from_dict(self._payload(confirm_password="Other0rd123"))

    def test_weak_password_rejected(self):
        with self.assertRaises(ValidationError):
            RegisterSchema.from_dict(self._payload(password="short", confirm_password="short"))

    def test_missing_field_rejected(self):
        payload = self._payload()
        payload.pop("name")
        with self.assertRaises(ValidationError):
            RegisterSchema.from_dict(payload)


class RegisterServiceTests(TestCase):
    """注册服务：用户 + 资料一次写入"""

    def test_register_creates_user_and_profile(self):
        schema = RegisterSchema.from_dict(
            {"email": "a@x.com", "password": "Passw0rd123", "confirm_password": "Passw0rd123", "name": "Asha"}
        )
        user = RegisterService().execute(schema)
        self.assertEqual(user.display_name, "Asha")
        self.assertTrue(user.check_password("Passw0rd123"))
        profile = Profile.objects.get(pk=user.pk)
        self.assertEqual(profile.email, "a@x.com")

    def test_duplicate_email_rejected(self):
        User.objects.create_user(username="a", email="a@x.com", password="Passw0rd123")
        schema = RegisterSchema.from_dict(
            {"email": "A@x.com", "password": "Passw0rd123", "confirm_password": "Passw0rd123", "name": "Asha"}
        )
        with self.assertRaises(ConflictError):
            RegisterService().execute(schema)
        self.assertEqual(User.objects.count(), 1)

    def test_username_prefix_collision_gets_suffix(self):
        User.objects.create_user(username="lead", email="lead@one.com", password="Passw0rd123")
        schema = RegisterSchema.from_dict(
            {"email": "lead@two.com", "password": "Passw0rd123", "confirm_password": "Passw0rd123", "name": "L"}
        )
        user = RegisterService().execute(schema)
        self.assertEqual(user.username, "lead2")


class AccountsAPITestCase(AuthenticatedAPIMixin, APITestCase):
    """
    账户模块接口冒烟测试：注册 → 登录 → 资料查看/修改
    """

    def setUp(self):
        cache.clear()

    def test_register_then_login(self):
        resp = self.client.post(
            "/api/accounts/register/",
            {
                "email": "reg@example.com",
                "password": "Passw0rd123",
                "confirm_password": "Passw0rd123",
                "name": "Reg User",
            },
            format="json",
        )
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.data["data"]["user"]["display_name"], "Reg User")
        token = self.api_login("reg@example.com", "Passw0rd123")
        self.assertTrue(token)

    def test_register_duplicate_email_returns_conflict(self):
        self.make_user("dup@example.com")
        resp = self.client.post(
            "/api/accounts/register/",
            {
                "email": "dup@example.com",
                "password": "Passw0rd123",
                "confirm_password": "Passw0rd123",
                "name": "Dup",
            },
            format="json",
        )
        self.assertEqual(resp.status_code, 409)
        self.assertNotEqual(resp.data["code"], 0)

    def test_profile_requires_login(self):
        resp = self.client.get("/api/accounts/me/profile/")
        self.assertEqual(resp.status_code, 401)

    def test_profile_patch_creates_missing_profile(self):
        """资料缺失时 PATCH 以显示名称与账号邮箱补齐后写入"""
        user = self.make_user("np@example.com", display_name="No Profile")
        client = self.auth_client(user)
        resp = client.get("/api/accounts/me/profile/")
        self.assertEqual(resp.status_code, 200)
        self.assertIsNone(resp.data["data"]["profile"])

        resp = client.patch("/api/accounts/me/profile/", {"phone": "9876543210"}, format="json")
        self.assertEqual(resp.status_code, 200)
        profile = resp.data["data"]["profile"]
        self.assertEqual(profile["name"], "No Profile")
        self.assertEqual(profile["email"], "np@example.com")
        self.assertEqual(profile["phone"], "9876543210")

    def test_profile_patch_rejects_bad_email(self):
        user = self.make_user("bad@example.com")
        resp = self.auth_client(user).patch("/api/accounts/me/profile/", {"email": "nope"}, format="json")
        self.assertEqual(resp.status_code, 400)
