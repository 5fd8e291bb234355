# -*- coding: utf-8 -*-
"""
公共模块单测：
- 校验工具（上传文件、必填字段、密码强度）
- 倒计时文本与可取消的推送线程
- 统一异常处理器与响应结构
- Schema 构造与辅助函数
"""

from __future__ import annotations

import datetime
import importlib
import threading
from dataclasses import dataclass
from datetime import timezone as dt_timezone
from typing import ClassVar

from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import SimpleTestCase
from rest_framework.exceptions import ValidationError as DRFValidationError
from rest_framework.test import APITestCase

from apps.common.base.base_schema import BaseSchema
from apps.common.exception_handler import custom_exception_handler
from apps.common.exceptions import DeadlineClosedError, FileTypeError, ValidationError
from apps.common.infra.file_storage import safe_object_key
from apps.common.infra.logger import logger_extra
from apps.common.schema_utils import list_of, member_serializer
from apps.common.utils.countdown import CLOSED_TEXT, CountdownTicker, format_time_remaining, snapshot
from apps.common.utils.helpers import mask_email, matches_search
from apps.common.utils.validators import missing_fields, validate_password_strength, validate_upload_file

DEADLINE = datetime.datetime(2025, 4, 2, 18, 29, 59, tzinfo=dt_timezone.utc)


class UploadValidatorTests(SimpleTestCase):
    """校验上传文件的存在性/类型/大小"""

    def test_missing_file(self):
        with self.assertRaises(ValidationError) as ctx:
            validate_upload_file(None, allowed_content_types={"application/pdf"}, missing_message="Upload a PDF")
        self.assertEqual(ctx.exception.message, "Upload a PDF")

    def test_invalid_content_type_should_fail(self):
        bad = SimpleUploadedFile("bad.exe", b"hello", content_type="application/x-msdownload")
        with self.assertRaises(FileTypeError):
            validate_upload_file(bad, allowed_content_types={"application/pdf"}, max_size_mb=1)

    def test_exceed_size_should_fail(self):
        big = SimpleUploadedFile("big.pdf", b"a" * (2 * 1024 * 1024 + 1), content_type="application/pdf")
        with self.assertRaises(ValidationError):
            validate_upload_file(big, allowed_content_types={"application/pdf"}, max_size_mb=2)

    def test_valid_upload_should_pass(self):
        ok = SimpleUploadedFile("ok.pdf", b"%PDF", content_type="Application/PDF")
        validate_upload_file(ok, allowed_content_types={"application/pdf"}, max_size_mb=2)


class FieldValidatorTests(SimpleTestCase):

    def test_missing_fields_keeps_order(self):
        data = {"a": "x", "b": "  ", "c": None}
        self.assertEqual(missing_fields(data, ["c", "a", "b", "d"]), ["c", "b", "d"])

    def test_password_strength(self):
        validate_password_strength("Passw0rd!")
        for weak in ("short1", "onlyletters", "12345678"):
            with self.assertRaises(ValidationError):
                validate_password_strength(weak)


class CountdownTests(SimpleTestCase):
    """倒计时文本"""

    def test_format_remaining(self):
        current = DEADLINE - datetime.timedelta(days=2, hours=3, minutes=4, seconds=5)
        self.assertEqual(format_time_remaining(DEADLINE, current), "2d 3h 4m 5s")

    def test_closed_at_and_after_deadline(self):
        self.assertEqual(format_time_remaining(DEADLINE, DEADLINE), CLOSED_TEXT)
        self.assertEqual(format_time_remaining(DEADLINE, DEADLINE + datetime.timedelta(seconds=1)), "Submission Closed")

    def test_sub_second_remaining_floors(self):
        current = DEADLINE - datetime.timedelta(milliseconds=400)
        self.assertEqual(format_time_remaining(DEADLINE, current), CLOSED_TEXT)

    def test_snapshot(self):
        snap = snapshot(DEADLINE, DEADLINE - datetime.timedelta(seconds=90))
        self.assertEqual(snap.seconds_remaining, 90)
        self.assertEqual(snap.text, "0d 0h 1m 30s")
        self.assertFalse(snap.closed)
        self.assertTrue(snapshot(DEADLINE, DEADLINE).closed)


class CountdownTickerTests(SimpleTestCase):
    """推送线程：到点自动结束，也可随时取消"""

    def test_stops_after_closed(self):
        ticks: list[str] = []
        ticker = CountdownTicker(DEADLINE, ticks.append, interval=0.01, clock=lambda: DEADLINE)
        ticker.start()
        ticker.join(timeout=2)
        self.assertFalse(ticker.running)
        self.assertEqual(ticks, [CLOSED_TEXT])

    def test_stop_cancels(self):
        first_tick = threading.Event()

        def on_tick(text: str) -> None:
            first_tick.set()

        ticker = CountdownTicker(
            DEADLINE, on_tick, interval=0.05, clock=lambda: DEADLINE - datetime.timedelta(days=1)
        ).start()
        self.assertTrue(first_tick.wait(timeout=2))
        ticker.stop(timeout=2)
        self.assertFalse(ticker.running)

    def test_tick_is_manual(self):
        ticks: list[str] = []
        ticker = CountdownTicker(DEADLINE, ticks.append, clock=lambda: DEADLINE - datetime.timedelta(seconds=1))
        self.assertEqual(ticker.tick(), "0d 0h 0m 1s")
        self.assertEqual(ticks, ["0d 0h 0m 1s"])

    def test_interval_bounds(self):
        with self.assertRaises(ValueError):
            CountdownTicker(DEADLINE, print, interval=0)

    def test_callback_error_ends_thread(self):
        calls: list[str] = []

        def on_tick(text: str) -> None:
            calls.append(text)
            raise RuntimeError("boom")

        ticker = CountdownTicker(
            DEADLINE, on_tick, interval=0.01, clock=lambda: DEADLINE - datetime.timedelta(days=1)
        ).start()
        ticker.join(timeout=2)
        self.assertFalse(ticker.running)
        self.assertEqual(len(calls), 1)


class ExceptionHandlerTests(SimpleTestCase):
    """统一错误结构"""

    def test_biz_error_envelope(self):
        resp = custom_exception_handler(DeadlineClosedError(), {})
        self.assertEqual(resp.status_code, 409)
        self.assertEqual(resp.data["code"], 40912)
        self.assertEqual(resp.data["message"], "Submission Closed")
        self.assertIsNone(resp.data["data"])

    def test_drf_validation_error_is_mapped(self):
        resp = custom_exception_handler(DRFValidationError({"points": ["Must be an integer"]}), {})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.data["message"], "Must be an integer")

    def test_unexpected_error_is_hidden(self):
        resp = custom_exception_handler(RuntimeError("boom"), {})
        self.assertEqual(resp.status_code, 500)
        self.assertEqual(resp.data["code"], 50000)
        self.assertNotIn("boom", resp.data["message"])


@dataclass
class _SampleSchema(BaseSchema[None]):
    auto_validate: ClassVar[bool] = True

    name: str
    note: str = ""

    def validate(self) -> None:
        if not self.name.strip():
            raise ValidationError(message="name required")


class SchemaAndHelperTests(SimpleTestCase):

    def test_from_dict_ignores_unknown_keys(self):
        schema = _SampleSchema.from_dict({"name": "Alpha", "extra": 1})
        self.assertEqual(schema.to_dict(), {"name": "Alpha", "note": ""})

    def test_from_dict_reports_missing_fields(self):
        with self.assertRaises(ValidationError) as ctx:
            _SampleSchema.from_dict({"note": "x"})
        self.assertEqual(ctx.exception.message, "Missing required fields: name")

    def test_from_dict_can_skip_validation(self):
        schema = _SampleSchema.from_dict({"name": " "}, auto_validate=False)
        self.assertEqual(schema.name, " ")

    def test_matches_search(self):
        self.assertTrue(matches_search("", ["x"]))
        self.assertTrue(matches_search("  ss25-ab ", ["Alpha", "SS25-AB12CD"]))
        self.assertFalse(matches_search("beta", ["Alpha", None]))

    def test_mask_email(self):
        self.assertEqual(mask_email("asha@college.edu"), "a**a@college.edu")

    def test_logger_extra_masks_secrets(self):
        self.assertEqual(logger_extra({"password": "x", "team_id": 3}), {"password": "***", "team_id": 3})

    def test_safe_object_key(self):
        self.assertEqual(safe_object_key("../presentations/../12_deck.pptx"), "presentations/12_deck.pptx")


class SchemaUtilsTests(SimpleTestCase):
    """OpenAPI 描述构造：共享 serializer 可在多个列表字段中复用"""

    def test_shared_serializer_can_be_list_child_twice(self):
        first = list_of(member_serializer())
        second = list_of(member_serializer(), min_length=1)
        self.assertIsNot(first.child, second.child)
        self.assertIs(type(first.child), type(second.child))
        self.assertIsNone(member_serializer().source)

    def test_url_modules_import(self):
        for module in ("apps.auth", "apps.teams.views", "apps.scoring.views", "Config.urls"):
            with self.subTest(module=module):
                self.assertIsNotNone(importlib.import_module(module))


class HealthCheckTests(APITestCase):

    def test_health(self):
        resp = self.client.get("/health/")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data["code"], 0)
