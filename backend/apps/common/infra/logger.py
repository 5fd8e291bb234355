"""
日志封装：提供统一的日志记录器

- 日志写入 {LOG_PATH}/system.log，按日期自动轮转，保留 30 天
- 支持 PLAIN（默认）与 JSON 两种格式，通过 settings.LOG_FORMAT 切换
- 自动注入请求上下文（request_id、user_id、username、ip、path）
"""

from __future__ import annotations

import json
import logging
import logging.handlers
import os
from datetime import datetime
from pathlib import Path
from typing import Optional

from django.conf import settings as django_settings

_configured = False


def _context_fields() -> dict:
    # 延迟导入，避免循环依赖
    from apps.common.utils.request_context import get_request_context

    return get_request_context()


class SparkJSONFormatter(logging.Formatter):
    """
    JSON 格式化器，单行输出，便于日志平台采集

    输出示例：
    {"timestamp": "2025-03-01 10:00:00", "level": "INFO", "logger": "apps.scoring.services",
     "message": "成绩已发布", "username": "admin", "user_id": 1}
    """

    def format(self, record: logging.LogRecord) -> str:
        ctx = _context_fields()
        log_dict = {
            "timestamp": datetime.fromtimestamp(record.created).strftime("%Y-%m-%d %H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if ctx.get("username"):
            log_dict["username"] = ctx["username"]
        if ctx.get("user_id") is not None:
            log_dict["user_id"] = ctx["user_id"]
        if ctx.get("ip"):
            log_dict["ip_address"] = ctx["ip"]
        if ctx.get("path"):
            log_dict["request_path"] = ctx["path"]
        if ctx.get("request_id"):
            log_dict["request_id"] = ctx["request_id"]
        if record.exc_info:
            log_dict["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_dict, ensure_ascii=False)


class SparkPlainFormatter(logging.Formatter):
    """
    纯文本格式化器

    格式：{timestamp} {level} {logger} {message} [{username}|{user_id}|{ip}|{path}]
    示例：2025-03-01 10:00:00 INFO apps.submissions.services 阶段一提交已创建 [lead|7|127.0.0.1|/api/submissions/phase1/]
    """

    def format(self, record: logging.LogRecord) -> str:
        ctx = _context_fields()
        timestamp = datetime.fromtimestamp(record.created).strftime("%Y-%m-%d %H:%M:%S")
        username = ctx.get("username") or "-"
        user_id = str(ctx.get("user_id")) if ctx.get("user_id") is not None else "-"
        ip_address = ctx.get("ip") or "-"
        request_path = ctx.get("path") or "-"
        line = (
            f"{timestamp} {record.levelname} {record.name} {record.getMessage()} "
            f"[{username}|{user_id}|{ip_address}|{request_path}]"
        )
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def _resolve_log_file_path(log_dir: str) -> str:
    log_dir_path = Path(log_dir)
    log_dir_path.mkdir(parents=True, exist_ok=True)
    return str(log_dir_path / "system.log")


def get_log_path_from_settings() -> str:
    """基于 settings.LOG_PATH 生成日志文件路径，默认 logs/system.log"""
    return _resolve_log_file_path(getattr(django_settings, "LOG_PATH", "logs"))


class SafeTimedRotatingFileHandler(logging.handlers.TimedRotatingFileHandler):
    """轮转失败（文件被占用）时跳过本次，下一次写入再尝试"""

    def doRollover(self):
        try:
            super().doRollover()
        except PermissionError:
            pass


def configure_logging(force: bool = False, *, level: Optional[int] = None, log_file_path: Optional[str] = None) -> None:
    """
    配置根 logger：按日轮转文件 + 可选控制台输出

    参数：
        force: 是否强制重新配置（默认只配置一次）
    """
    global _configured
    if _configured and not force:
        return

    log_level = level if level is not None else logging.INFO
    log_file_path = log_file_path or get_log_path_from_settings()

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    for handler in list(root_logger.handlers):
        handler.close()
    root_logger.handlers.clear()

    file_handler = SafeTimedRotatingFileHandler(
        filename=log_file_path,
        when="midnight",
        interval=1,
        backupCount=30,
        encoding="utf-8",
        delay=True,
    )
    file_handler.suffix = "%Y-%m-%d"
    file_handler.setLevel(log_level)

    if str(getattr(django_settings, "LOG_FORMAT", "plain")).lower() == "json":
        formatter: logging.Formatter = SparkJSONFormatter()
    else:
        formatter = SparkPlainFormatter()
    file_handler.setFormatter(formatter)
    root_logger.addHandler(file_handler)

    # 开发环境同时输出到控制台
    if os.getenv("DEBUG", "False").lower() == "true":
        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.DEBUG)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    _configured = True


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    获取 logger 实例

        logger = get_logger(__name__)
        logger.info("成绩已发布", extra=logger_extra({"published_by": user.id}))
    """
    if not _configured:
        configure_logging()
    return logging.getLogger(name)


SENSITIVE_KEYS = {"password", "token", "access", "refresh", "authorization", "secret"}


def sanitize_extra(extra: Optional[dict] = None) -> dict:
    """过滤敏感字段，避免在日志中泄露密码/令牌"""
    if not extra:
        return {}
    return {k: ("***" if k.lower() in SENSITIVE_KEYS else v) for k, v in extra.items()}


def logger_extra(extra: Optional[dict] = None) -> dict:
    """封装 extra，自动过滤敏感字段"""
    return sanitize_extra(extra)
