from __future__ import annotations

from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from apps.common.infra.jwt_provider import issue_tokens


class AuthenticatedAPIMixin:
    """
    提供统一的用户构造与认证客户端工具，减少各测试用例的重复代码
    """

    login_url: str = "/api/auth/login/"
    default_password: str = "Passw0rd!"
    client: APIClient  # 由 APITestCase 提供

    def make_user(self, email: str, *, display_name: str = "", password: str | None = None):
        """创建用户，username 取邮箱前缀"""
        return get_user_model().objects.create_user(
            username=email.split("@", 1)[0],
            email=email,
            password=password or self.default_password,
            display_name=display_name,
        )

    def api_login(self, email: str, password: str | None = None, expect_status: int = 200) -> str:
        """走登录接口并返回访问令牌，默认期望 200 状态"""
        resp = self.client.post(
            self.login_url,
            {"email": email, "password": password or self.default_password},
            format="json",
        )
        if resp.status_code != expect_status:
            raise AssertionError(f"登录接口返回 {resp.status_code}，期望 {expect_status}，响应：{resp.content}")
        return resp.data["data"]["access"]

    def auth_client(self, user) -> APIClient:
        """直接颁发令牌构造附带 Authorization 头的 APIClient"""
        token = issue_tokens(user)["access"]
        client = APIClient()
        client.raise_request_exception = False
        client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")
        return client
