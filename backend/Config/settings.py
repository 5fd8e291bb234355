"""
Django settings for Config project.

- 启动依赖（数据库、密钥、Broker 等）来自环境变量
- 运行期可覆盖的业务参数（角色映射、截止时间、品牌等）通过 apps.system.ConfigService 读取，
  后台 SystemConfig > 本文件默认值
"""

from __future__ import annotations

import os
from datetime import timedelta
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent


def _env_bool(name: str, default: bool = False) -> bool:
    return os.getenv(name, str(default)).strip().lower() in {"1", "true", "yes", "on"}


SECRET_KEY = os.getenv("DJANGO_SECRET_KEY", "django-insecure-startup-spark-dev-key")
DEBUG = _env_bool("DEBUG", False)
ALLOWED_HOSTS = [h for h in os.getenv("DJANGO_ALLOWED_HOSTS", "localhost,127.0.0.1,testserver").split(",") if h]

INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "rest_framework",
    "drf_spectacular",
    "apps.common",
    "apps.system",
    "apps.accounts",
    "apps.auth",
    "apps.teams",
    "apps.submissions",
    "apps.scoring",
    "apps.notifications",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "apps.common.middleware.RequestContextMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "Config.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]

WSGI_APPLICATION = "Config.wsgi.application"

# 数据库：默认 sqlite，生产通过 DB_ENGINE 等变量切换
DATABASES = {
    "default": {
        "ENGINE": os.getenv("DB_ENGINE", "django.db.backends.sqlite3"),
        "NAME": os.getenv("DB_NAME", str(BASE_DIR / "db.sqlite3")),
        "USER": os.getenv("DB_USER", ""),
        "PASSWORD": os.getenv("DB_PASSWORD", ""),
        "HOST": os.getenv("DB_HOST", ""),
        "PORT": os.getenv("DB_PORT", ""),
    }
}

CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "startup-spark",
    }
}

AUTH_USER_MODEL = "accounts.User"

AUTH_PASSWORD_VALIDATORS = [
    {"NAME": "django.contrib.auth.password_validation.MinimumLengthValidator"},
]

LANGUAGE_CODE = "en-us"
TIME_ZONE = os.getenv("TIME_ZONE", "Asia/Kolkata")
USE_I18N = True
USE_TZ = True

STATIC_URL = "static/"
STATIC_ROOT = BASE_DIR / "staticfiles"
MEDIA_URL = "/media/"
MEDIA_ROOT = Path(os.getenv("MEDIA_ROOT", str(BASE_DIR / "media")))

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# ---------------------------------------------------------------------------
# DRF / JWT / OpenAPI
# ---------------------------------------------------------------------------
REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": ["apps.common.authentication.JWTAuthentication"],
    "DEFAULT_PERMISSION_CLASSES": ["apps.common.permissions.IsAuthenticated"],
    "DEFAULT_SCHEMA_CLASS": "apps.common.openapi.ShortDescriptionAutoSchema",
    "EXCEPTION_HANDLER": "apps.common.exception_handler.custom_exception_handler",
    "DEFAULT_PAGINATION_CLASS": "apps.common.pagination.StandardPagination",
    "PAGE_SIZE": 20,
}

SIMPLE_JWT = {
    "ACCESS_TOKEN_LIFETIME": timedelta(minutes=int(os.getenv("JWT_ACCESS_MINUTES", "60"))),
    "REFRESH_TOKEN_LIFETIME": timedelta(days=int(os.getenv("JWT_REFRESH_DAYS", "7"))),
    "AUTH_HEADER_TYPES": ("Bearer",),
    "SIGNING_KEY": SECRET_KEY,
}
JWT_USE_COOKIE = True
JWT_ACCESS_COOKIE_NAME = "jwt_token_in_cookie"

SPECTACULAR_SETTINGS = {
    "TITLE": "Startup Spark Back-office API",
    "VERSION": "0.1.0",
    "SERVE_INCLUDE_SCHEMA": False,
}

# ---------------------------------------------------------------------------
# Celery
# ---------------------------------------------------------------------------
CELERY_BROKER_URL = os.getenv("CELERY_BROKER_URL", "memory://")
CELERY_RESULT_BACKEND = os.getenv("CELERY_RESULT_BACKEND", "cache+memory://")
CELERY_TASK_ALWAYS_EAGER = _env_bool("CELERY_TASK_ALWAYS_EAGER", True)
CELERY_TASK_SERIALIZER = "json"
CELERY_ACCEPT_CONTENT = ["json"]

# ---------------------------------------------------------------------------
# 邮件（后台 MailAccount 优先，缺省回退此处）
# ---------------------------------------------------------------------------
EMAIL_BACKEND = os.getenv("EMAIL_BACKEND", "django.core.mail.backends.smtp.EmailBackend")
EMAIL_HOST = os.getenv("EMAIL_HOST", "")
EMAIL_PORT = int(os.getenv("EMAIL_PORT", "587"))
EMAIL_HOST_USER = os.getenv("EMAIL_HOST_USER", "")
EMAIL_HOST_PASSWORD = os.getenv("EMAIL_HOST_PASSWORD", "")
EMAIL_USE_TLS = _env_bool("EMAIL_USE_TLS", True)
EMAIL_USE_SSL = _env_bool("EMAIL_USE_SSL", False)
DEFAULT_FROM_EMAIL = os.getenv("DEFAULT_FROM_EMAIL", "no-reply@startupspark.local")

# ---------------------------------------------------------------------------
# 日志 / 存储
# ---------------------------------------------------------------------------
LOG_PATH = os.getenv("LOG_PATH", str(BASE_DIR / "logs"))
STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "local")

# ---------------------------------------------------------------------------
# 赛事业务参数（均可在后台 SystemConfig 覆盖）
# ---------------------------------------------------------------------------
EVENT_BRAND = os.getenv("SPARK_EVENT_BRAND", "STARTUP SPARK 2025")

# 凭证 -> 角色映射：键为邮箱（大小写不敏感），值为 platform_admin / finance_admin
ROLE_BINDINGS = {
    "admin@edcrec.com": "platform_admin",
    "finance@edcrec.com": "finance_admin",
}

# 截止时间统一使用 ISO-8601 字符串，读取时解析为感知时区的 datetime
PHASE1_VIDEO_DEADLINE = os.getenv("SPARK_PHASE1_VIDEO_DEADLINE", "2025-03-20T23:59:59+05:30")
PHASE2_DEADLINE = os.getenv("SPARK_PHASE2_DEADLINE", "2025-04-02T23:59:59+05:30")

# 附件大小上限（MB）
PRESENTATION_MAX_SIZE_MB = int(os.getenv("SPARK_PRESENTATION_MAX_SIZE_MB", "25"))
PROPOSAL_MAX_SIZE_MB = int(os.getenv("SPARK_PROPOSAL_MAX_SIZE_MB", "25"))

# 通知扇出并发度：单支队伍成员间并行发送的最大线程数
NOTIFICATION_MAX_WORKERS = int(os.getenv("SPARK_NOTIFICATION_MAX_WORKERS", "4"))
