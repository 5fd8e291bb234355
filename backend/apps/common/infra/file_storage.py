"""
文件存储封装（本地 + S3 兼容对象存储可切换）

- 调用方传入确定性的对象 key（如 presentations/{teamId}_{filename}），同 key 重复上传即覆盖
- save_bytes 返回 (key, url)；上传失败抛 StorageUnavailableError，调用方据此决定不写业务记录
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Protocol, Tuple

from django.conf import settings

from apps.common.exceptions import StorageUnavailableError
from apps.common.infra.logger import get_logger

logger = get_logger(__name__)


class ObjectStorage(Protocol):
    """对象存储最小契约"""

    def save_bytes(self, *, content: bytes, key: str) -> Tuple[str, str]:
        ...


class LocalFileStorage:
    """
    本地文件存储：写入 MEDIA_ROOT/key，返回 key 与 MEDIA_URL 拼接出的访问地址
    """

    def __init__(self, base_dir: str | None = None):
        media_root = getattr(settings, "MEDIA_ROOT", None)
        self.base_dir = Path(base_dir or media_root or "uploads").resolve()

    def save_bytes(self, *, content: bytes, key: str) -> Tuple[str, str]:
        safe_key = safe_object_key(key)
        try:
            target_path = self.base_dir / safe_key
            target_path.parent.mkdir(parents=True, exist_ok=True)
            target_path.write_bytes(content)
        except OSError as exc:
            logger.exception("本地文件存储失败", extra={"key": safe_key})
            raise StorageUnavailableError() from exc
        media_url = getattr(settings, "MEDIA_URL", "/media/") or "/media/"
        return safe_key, f"{media_url.rstrip('/')}/{safe_key}"


class OSSStorage:
    """
    对象存储封装（S3/OSS 兼容），依赖 boto3（可选依赖 extra: oss）
    """

    def __init__(self):
        import boto3

        self.endpoint = os.getenv("OSS_ENDPOINT")
        self.bucket = os.getenv("OSS_BUCKET")
        self.prefix = (os.getenv("OSS_KEY_PREFIX") or "").strip().strip("/")
        access_key = os.getenv("OSS_ACCESS_KEY_ID")
        secret_key = os.getenv("OSS_ACCESS_KEY_SECRET")
        if not all([self.endpoint, access_key, secret_key, self.bucket]):
            raise RuntimeError(
                "OSS 配置不完整，请设置 OSS_ENDPOINT/OSS_ACCESS_KEY_ID/OSS_ACCESS_KEY_SECRET/OSS_BUCKET")
        self.client = boto3.client(
            "s3",
            endpoint_url=self.endpoint,
            aws_access_key_id=access_key,
            aws_secret_access_key=secret_key,
        )

    def save_bytes(self, *, content: bytes, key: str) -> Tuple[str, str]:
        from botocore.exceptions import BotoCoreError, ClientError

        object_key = "/".join(p for p in [self.prefix, safe_object_key(key)] if p)
        try:
            self.client.put_object(Bucket=self.bucket, Key=object_key, Body=content)
        except (BotoCoreError, ClientError) as exc:
            logger.exception("上传 OSS 失败", extra={"bucket": self.bucket, "key": object_key})
            raise StorageUnavailableError() from exc
        return object_key, f"{self.endpoint.rstrip('/')}/{self.bucket}/{object_key}"


def get_storage() -> ObjectStorage:
    """
    根据 settings.STORAGE_BACKEND 选择存储后端：
    - oss：OSSStorage
    - 其他：LocalFileStorage
    """
    backend = str(getattr(settings, "STORAGE_BACKEND", "local")).lower()
    if backend == "oss":
        return OSSStorage()
    return LocalFileStorage()


def safe_object_key(key: str) -> str:
    """
    清洗对象 key：剔除 .. / 空段与反斜杠，防止逃逸到存储根目录之外；文件名段限制长度
    """
    parts = []
    for part in str(key or "").replace("\\", "/").split("/"):
        if not part or part in {".", ".."}:
            continue
        parts.append(part)
    if not parts:
        parts = ["file"]
    parts[-1] = parts[-1][-150:]
    return "/".join(parts)
