from __future__ import annotations

from django.core.management.base import BaseCommand

from apps.common.infra.logger import get_logger
from apps.system.services import ConfigService

logger = get_logger(__name__)


class Command(BaseCommand):
    help = "将 settings 中可覆盖的业务参数写入 SystemConfig（已存在的键不覆盖）"

    def handle(self, *args, **options):
        service = ConfigService()
        service.ensure_supported_configs()
        service.invalidate()
        logger.info("系统配置已同步")
        self.stdout.write(self.style.SUCCESS("SystemConfig synced"))
