# apps/common/infra/email_sender.py

from __future__ import annotations

from dataclasses import dataclass
from email.utils import formataddr
from smtplib import SMTPRecipientsRefused, SMTPDataError
from typing import Iterable

from django.conf import settings
from django.core.mail import EmailMultiAlternatives, get_connection

from apps.system.models import MailAccount
from apps.system.services import ConfigService
from apps.common.exceptions import EmailSendError, ValidationError
from apps.common.infra.logger import get_logger, logger_extra

logger = get_logger(__name__)


@dataclass(frozen=True)
class MailAttachment:
    """邮件附件：文件名 + 字节内容 + MIME 类型"""

    filename: str
    content: bytes
    mimetype: str = "application/octet-stream"


def _build_sender(name: str | None, username: str | None) -> tuple[str, str]:
    """
    构造发信人：
    - envelope_from：SMTP MAIL FROM，固定使用用户名邮箱
    - header_from：邮件头展示，附带名称（如有）
    """
    from_email = username or getattr(settings, "DEFAULT_FROM_EMAIL", "no-reply@example.com")
    header_from = formataddr((name or "", from_email)) if name else from_email
    return from_email, header_from


def _resolve_connection(account: MailAccount | None):
    """
    选择发信连接，读取顺序：
    1. 后台发信账号（显式指定或默认账号）
    2. SystemConfig/settings 中的 EMAIL_HOST 等 SMTP 参数
    3. Django 默认邮件后端（测试环境为 locmem）
    """
    if account is not None:
        connection = get_connection(
            backend="django.core.mail.backends.smtp.EmailBackend",
            host=account.host,
            port=account.port,
            username=account.username,
            password=account.password,
            use_tls=account.use_tls,
            use_ssl=account.use_ssl,
            timeout=30,
        )
        return connection, _build_sender(account.from_name, account.username)

    config = ConfigService()
    host = config.get("EMAIL_HOST")
    username = config.get("EMAIL_HOST_USER")
    if host and username:
        connection = get_connection(
            backend="django.core.mail.backends.smtp.EmailBackend",
            host=host,
            port=config.get("EMAIL_PORT") or 587,
            username=username,
            password=config.get("EMAIL_HOST_PASSWORD"),
            use_tls=bool(config.get("EMAIL_USE_TLS", False)),
            use_ssl=bool(config.get("EMAIL_USE_SSL", False)),
            timeout=30,
        )
        return connection, _build_sender(None, username)

    logger.warning("未配置 SMTP 发信参数，使用默认邮件后端", extra={"backend": settings.EMAIL_BACKEND})
    return get_connection(), _build_sender(None, None)


def send_mail(
        *,
        subject: str,
        body: str,
        to: Iterable[str],
        html_body: str | None = None,
        attachments: Iterable[MailAttachment] | None = None,
        account: MailAccount | None = None,
) -> None:
    """
    发送一封邮件（单个或多个收件人共用一封）

    异常约定：
    - 收件地址被拒收 → ValidationError（不可重试）
    - 其他传输故障 → EmailSendError（可重试）
    """
    recipients = list(to)
    account = account or MailAccount.objects.get_default()
    try:
        connection, (envelope_from, header_from) = _resolve_connection(account)
        email = EmailMultiAlternatives(
            subject=subject,
            body=body,
            from_email=envelope_from,
            to=recipients,
            connection=connection,
            headers={"From": header_from},
        )
        if html_body:
            email.attach_alternative(html_body, "text/html")
        for attachment in attachments or ():
            email.attach(attachment.filename, attachment.content, attachment.mimetype)
        email.send(fail_silently=False)
    except (SMTPRecipientsRefused, SMTPDataError) as exc:
        logger.warning(
            "收件邮箱被拒收",
            extra=logger_extra(
                {
                    "recipients": recipients,
                    "account_id": getattr(account, "id", None),
                    "smtp_code": getattr(exc, "smtp_code", None),
                }
            ),
        )
        raise ValidationError(message="Recipient address was rejected") from exc
    except Exception as exc:
        logger.exception("邮件发送失败", extra=logger_extra({"account_id": getattr(account, "id", None)}))
        raise EmailSendError() from exc
