from __future__ import annotations

import re

from drf_spectacular.extensions import OpenApiAuthenticationExtension
from drf_spectacular.plumbing import build_bearer_security_scheme_object
from drf_spectacular.openapi import AutoSchema


class JWTAuthScheme(OpenApiAuthenticationExtension):
    """为自定义 JWTAuthentication 提供 OpenAPI 描述，文档中显示 Bearer Auth"""

    target_class = "apps.common.authentication.JWTAuthentication"
    name = "JWTAuth"

    def get_security_definition(self, auto_schema):
        return build_bearer_security_scheme_object(
            header_name="Authorization",
            token_prefix="Bearer",
        )


def _first_doc_line(obj) -> str:
    doc = (getattr(obj, "__doc__", "") or "").strip()
    return doc.splitlines()[0].strip() if doc else ""


class ShortDescriptionAutoSchema(AutoSchema):
    """
    自定义 AutoSchema：为缺少描述的接口填充简短说明
    - 优先使用 extend_schema 或方法 docstring
    - 其次取视图类 docstring 首行
    - 最后回退为“<METHOD> <path>”
    """

    def get_description(self) -> str:
        desc = super().get_description()
        if desc:
            return desc
        return _first_doc_line(self.view) or f"{self.method} {self.path}"

    def get_summary(self) -> str:
        summary = super().get_summary()
        if summary:
            return summary.replace("：", "")
        method_obj = getattr(self.view, self.method.lower(), None)
        first = _first_doc_line(method_obj) or _first_doc_line(self.view)
        return (first or f"{self.method} {self.path}").replace("：", "")

    def get_operation_id(self) -> str:
        return build_operation_id(None, self.path, self.method, None)

    def get_tags(self):
        """按路径推导标签：/api/submissions/phase2/... -> submissions"""
        tags = super().get_tags() or []
        if tags and tags != ["api"]:
            return tags
        parts = [p for p in (getattr(self, "path", "") or "").strip("/").split("/") if p]
        for part in parts:
            if part.lower() == "api":
                continue
            return [part.replace("-", "_")]
        return ["api"]


def build_operation_id(route, path: str, method: str, action: str | None) -> str:
    """
    自定义 operationId：基于 HTTP 方法 + 路径生成唯一值
    - /api/teams/{team_id}/confirm-payment/ + POST -> post_teams_team_id_confirm_payment
    """
    _ = route
    clean = path.strip("/").replace("api/", "")
    parts = []
    for part in clean.split("/"):
        if part.startswith("{") and part.endswith("}"):
            part = part[1:-1]
        if part:
            parts.append(part.replace("-", "_"))
    base = "_".join(parts) or "root"
    op_id = f"{method.lower()}_{base}_{action}" if action else f"{method.lower()}_{base}"
    return re.sub(r"[^0-9a-zA-Z_]", "_", op_id)
