from __future__ import annotations

from django.core.management.base import BaseCommand, CommandError

from apps.common.exceptions import ValidationError
from apps.common.utils.countdown import CountdownTicker
from apps.system.services import ConfigService

DEADLINE_KEYS = {"phase1": "PHASE1_VIDEO_DEADLINE", "phase2": "PHASE2_DEADLINE"}


class Command(BaseCommand):
    help = "每秒输出一次截止倒计时，直到显示 Submission Closed 或按 Ctrl+C"

    def add_arguments(self, parser):
        parser.add_argument("phase", choices=sorted(DEADLINE_KEYS), nargs="?", default="phase2")
        parser.add_argument("--interval", type=float, default=1.0, help="刷新间隔（秒，0~1]")

    def handle(self, *args, **options):
        try:
            deadline = ConfigService().get_datetime(DEADLINE_KEYS[options["phase"]])
        except ValidationError as exc:
            raise CommandError(exc.message) from exc

        try:
            ticker = CountdownTicker(deadline, on_tick=self.stdout.write, interval=options["interval"])
        except ValueError as exc:
            raise CommandError(str(exc)) from exc
        ticker.start()
        try:
            while ticker.running:
                ticker.join(0.5)
        except KeyboardInterrupt:
            self.stdout.write("stopped")
        finally:
            ticker.stop()
