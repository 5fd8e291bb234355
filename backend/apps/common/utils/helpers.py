"""
通用辅助函数：掩码、搜索匹配等纯工具方法，不包含业务逻辑
"""

from __future__ import annotations

from typing import Iterable, Optional


def mask_email(email: str) -> str:
    """对邮箱做简单掩码，用于日志"""
    if not email or "@" not in email:
        return email
    name, domain = email.split("@", 1)
    if len(name) <= 2:
        masked = name[0] + "*" * (len(name) - 1)
    else:
        masked = name[0] + "*" * (len(name) - 2) + name[-1]
    return f"{masked}@{domain}"


def matches_search(term: Optional[str], values: Iterable[Optional[str]]) -> bool:
    """
    不区分大小写的子串匹配：term 为空时恒为 True，任一字段包含 term 即命中
    """
    needle = (term or "").strip().lower()
    if not needle:
        return True
    return any(needle in (value or "").lower() for value in values)
