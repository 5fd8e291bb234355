from __future__ import annotations

import threading

from django.core import mail
from django.core.cache import cache
from django.test import SimpleTestCase, TestCase, override_settings
from rest_framework.test import APITestCase

from apps.common.exceptions import EmailSendError, ValidationError
from apps.common.tests_utils import AuthenticatedAPIMixin
from apps.notifications.schemas import TeamFilterSchema, WorkshopDetailsSchema
from apps.notifications.services import NotificationDispatchService, NotificationKind, filter_teams
from apps.notifications.ticket import (
    TICKET_FILENAME,
    Ticket,
    TicketPayload,
    decode_payload,
    encode_payload,
    render_qr_png,
    render_ticket_pdf,
)
from apps.teams.models import Team

BINDINGS = {"admin@edcrec.com": "platform_admin"}
WORKSHOP = {"title": "Pitch Clinic", "date": "2025-03-28", "venue": "Main Auditorium"}


class FakeSender:
    """记录发送调用；failing 中的地址抛出指定异常"""

    def __init__(self, failing: dict[str, Exception] | None = None):
        self.failing = failing or {}
        self.sent: list[dict] = []
        self._lock = threading.Lock()

    def __call__(self, *, subject, body, to, html_body=None, attachments=None):
        recipient = to[0]
        if recipient in self.failing:
            raise self.failing[recipient]
        with self._lock:
            self.sent.append(
                {"to": recipient, "subject": subject, "html": html_body, "attachments": list(attachments or ())}
            )


class FixedConfig:
    def __init__(self, **values):
        self.values = {"EVENT_BRAND": "STARTUP SPARK 2025", **values}

    def get(self, key, default=None):
        return self.values.get(key, default)


def members(*emails: str) -> list[dict]:
    return [{"name": email.split("@")[0].title(), "email": email, "phone": "9876543210"} for email in emails]


class TicketTests(SimpleTestCase):
    """电子门票：二维码内容与 PDF 渲染"""

    def test_payload_is_compact_json(self):
        encoded = encode_payload(TicketPayload(registration_id="SS25-ABC123", name="Asha", team="Alpha"))
        self.assertEqual(encoded, '{"regId":"SS25-ABC123","name":"Asha","team":"Alpha"}')

    def test_payload_round_trip(self):
        payload = TicketPayload(registration_id="SS25-0F0F0F", name="Zoë \"Z\" Rao", team="Team, Inc.")
        self.assertEqual(decode_payload(encode_payload(payload)), payload)

    def test_decode_rejects_garbage(self):
        for raw in ("not json", '{"regId": "x"}', "[]"):
            with self.assertRaises(ValidationError):
                decode_payload(raw)

    def test_qr_png(self):
        png = render_qr_png("hello")
        self.assertTrue(png.startswith(b"\x89PNG"))

    def test_ticket_pdf(self):
        pdf = render_ticket_pdf(
            Ticket(
                brand="STARTUP SPARK 2025",
                team_name="Alpha",
                registration_id="SS25-ABC123",
                member_name="Asha",
                member_email="asha@college.edu",
                member_phone="9876543210",
                event_date="2025-03-28",
                venue="Main Auditorium",
                workshop_title="Pitch Clinic",
            )
        )
        self.assertTrue(pdf.startswith(b"%PDF"))


class WorkshopDetailsSchemaTests(SimpleTestCase):

    def test_all_fields_required(self):
        for missing in ("title", "date", "venue"):
            data = {**WORKSHOP, missing: "  "}
            with self.assertRaises(ValidationError) as ctx:
                WorkshopDetailsSchema.from_dict(data)
            self.assertEqual(ctx.exception.message, "Please fill in all workshop details")

    def test_absent_field_uses_same_message(self):
        with self.assertRaises(ValidationError) as ctx:
            WorkshopDetailsSchema.from_dict({"title": "Pitch Clinic"})
        self.assertEqual(ctx.exception.message, "Please fill in all workshop details")

    def test_status_filter_validated(self):
        with self.assertRaises(ValidationError):
            TeamFilterSchema.from_dict({"status": "paid"})

    def test_run_async_parses_form_strings(self):
        self.assertFalse(TeamFilterSchema.from_dict({"run_async": "false"}).run_async)
        self.assertFalse(TeamFilterSchema.from_dict({}).run_async)
        self.assertTrue(TeamFilterSchema.from_dict({"run_async": "true"}).run_async)
        self.assertTrue(TeamFilterSchema.from_dict({"run_async": True}).run_async)


class DispatchTestMixin(AuthenticatedAPIMixin):

    def make_team(self, owner_email: str, team_name: str, emails: list[str], **fields) -> Team:
        user = self.make_user(owner_email)
        return Team.objects.create(
            owner=user,
            team_name=team_name,
            registration_id=f"SS25-{user.pk:06d}",
            members=members(*emails),
            **fields,
        )


class NotificationDispatchTests(DispatchTestMixin, TestCase):
    """扇出：成员独立发送，汇总成功/失败"""

    def setUp(self):
        self.team = self.make_team("lead@college.edu", "Alpha", ["a@x.com", "b@x.com", "c@x.com"])
        self.workshop = WorkshopDetailsSchema.from_dict(WORKSHOP)

    def service(self, sender, workers: int = 1) -> NotificationDispatchService:
        return NotificationDispatchService(sender=sender, config=FixedConfig(), max_workers=workers)

    def test_one_transport_failure_is_isolated(self):
        sender = FakeSender({"b@x.com": EmailSendError()})
        report = self.service(sender).execute([self.team], NotificationKind.WORKSHOP_INVITE, self.workshop)
        self.assertEqual((report.success_count, report.fail_count), (2, 1))
        self.assertEqual(report.failures[0].email, "b@x.com")
        self.assertEqual([item["to"] for item in sender.sent], ["a@x.com", "c@x.com"])

    def test_workshop_invite_attaches_ticket(self):
        sender = FakeSender()
        self.service(sender).execute([self.team], NotificationKind.WORKSHOP_INVITE, self.workshop)
        message = sender.sent[0]
        self.assertEqual(message["subject"], "Workshop Invitation: Pitch Clinic")
        self.assertIn("Main Auditorium", message["html"])
        attachment = message["attachments"][0]
        self.assertEqual(attachment.filename, TICKET_FILENAME)
        self.assertEqual(attachment.mimetype, "application/pdf")
        self.assertTrue(attachment.content.startswith(b"%PDF"))

    def test_every_transport_failure_raises(self):
        sender = FakeSender({email: EmailSendError() for email in ("a@x.com", "b@x.com", "c@x.com")})
        with self.assertRaises(EmailSendError) as ctx:
            self.service(sender).execute([self.team], NotificationKind.WORKSHOP_INVITE, self.workshop)
        self.assertEqual(ctx.exception.extra["fail_count"], 3)

    def test_rejected_recipients_still_report(self):
        rejected = ValidationError(message="Recipient address was rejected")
        sender = FakeSender({email: rejected for email in ("a@x.com", "b@x.com", "c@x.com")})
        report = self.service(sender).execute([self.team], NotificationKind.WORKSHOP_INVITE, self.workshop)
        self.assertEqual((report.success_count, report.fail_count), (0, 3))
        self.assertEqual(report.failures[0].reason, "Recipient address was rejected")

    def test_member_without_email_is_a_failure(self):
        self.team.members = self.team.members + [{"name": "Nobody", "email": "", "phone": ""}]
        self.team.save()
        report = self.service(FakeSender()).execute([self.team], NotificationKind.WORKSHOP_INVITE, self.workshop)
        self.assertEqual((report.success_count, report.fail_count), (3, 1))

    def test_thread_pool_keeps_member_order(self):
        sender = FakeSender({"a@x.com": EmailSendError(), "c@x.com": EmailSendError()})
        report = self.service(sender, workers=3).dispatch(self.team, NotificationKind.WORKSHOP_INVITE, self.workshop)
        self.assertEqual((report.success_count, report.fail_count), (1, 2))
        self.assertEqual([f.email for f in report.failures], ["a@x.com", "c@x.com"])

    def test_workshop_details_required(self):
        with self.assertRaises(ValidationError):
            self.service(FakeSender()).execute([self.team], NotificationKind.WORKSHOP_INVITE, None)

    def test_phase2_selection_only_selected_teams(self):
        selected = self.make_team("lead2@college.edu", "Beta", ["d@x.com"], phase2_selected=True)
        sender = FakeSender()
        report = self.service(sender).execute([self.team, selected], NotificationKind.PHASE2_SELECTION)
        self.assertEqual((report.success_count, report.fail_count), (1, 0))
        self.assertEqual(sender.sent[0]["to"], "d@x.com")
        self.assertEqual(sender.sent[0]["attachments"], [])
        self.assertIn(selected.registration_id, sender.sent[0]["html"])
        self.assertIn("N/A", sender.sent[0]["html"])

    def test_dispatch_many_sums_reports(self):
        other = self.make_team("lead2@college.edu", "Beta", ["d@x.com", "e@x.com"])
        sender = FakeSender({"e@x.com": EmailSendError()})
        report = self.service(sender).dispatch_many([self.team, other], NotificationKind.WORKSHOP_INVITE, self.workshop)
        self.assertEqual((report.success_count, report.fail_count), (4, 1))
        self.assertEqual(report.failures[0].team_id, other.pk)

    def test_filter_teams(self):
        self.make_team("lead2@college.edu", "Beta", ["d@x.com"], phase2_selected=True)
        names = lambda schema: [t.team_name for t in filter_teams(schema)]  # noqa: E731
        self.assertEqual(names(TeamFilterSchema.from_dict({})), ["Alpha", "Beta"])
        self.assertEqual(names(TeamFilterSchema.from_dict({"status": "selected"})), ["Beta"])
        self.assertEqual(names(TeamFilterSchema.from_dict({"status": "pending"})), ["Alpha"])
        self.assertEqual(names(TeamFilterSchema.from_dict({"search": "alp"})), ["Alpha"])


@override_settings(ROLE_BINDINGS=BINDINGS, NOTIFICATION_MAX_WORKERS=1)
class NotificationAPITests(DispatchTestMixin, APITestCase):

    def setUp(self):
        cache.clear()
        self.admin = self.auth_client(self.make_user("admin@edcrec.com"))
        self.team = self.make_team("lead@college.edu", "Alpha", ["a@x.com", "b@x.com"])

    def test_participant_is_forbidden(self):
        client = self.auth_client(self.team.owner)
        resp = client.post("/api/notifications/workshop-invites/", WORKSHOP, format="json")
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(len(mail.outbox), 0)

    def test_team_list(self):
        resp = self.admin.get("/api/notifications/teams/", {"search": "alpha", "status": "pending"})
        self.assertEqual(resp.status_code, 200)
        item = resp.data["data"]["items"][0]
        self.assertEqual(item["registration_id"], self.team.registration_id)
        self.assertEqual(item["member_count"], 2)

    def test_workshop_invites_sent(self):
        resp = self.admin.post("/api/notifications/workshop-invites/", WORKSHOP, format="json")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data["data"]["report"], {"success_count": 2, "fail_count": 0, "failures": []})
        self.assertEqual(sorted(m.to[0] for m in mail.outbox), ["a@x.com", "b@x.com"])
        self.assertEqual(mail.outbox[0].attachments[0][0], TICKET_FILENAME)

    def test_missing_workshop_details(self):
        resp = self.admin.post("/api/notifications/workshop-invites/", {"title": "Pitch"}, format="json")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.data["message"], "Please fill in all workshop details")

    def test_phase2_selection_via_task(self):
        self.team.phase2_selected = True
        self.team.save()
        resp = self.admin.post("/api/notifications/phase2-selections/", {"run_async": True}, format="json")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data["data"]["team_count"], 1)
        self.assertEqual(len(mail.outbox), 2)
        self.assertIn("Selected for Phase 2", mail.outbox[0].subject)
        self.assertNotIn("<div", mail.outbox[0].body)

    def test_form_encoded_false_runs_inline(self):
        self.team.phase2_selected = True
        self.team.save()
        resp = self.admin.post("/api/notifications/phase2-selections/", {"run_async": "false"}, format="multipart")
        self.assertEqual(resp.status_code, 200)
        self.assertNotIn("task_id", resp.data["data"])
        self.assertEqual(resp.data["data"]["report"]["success_count"], 2)
