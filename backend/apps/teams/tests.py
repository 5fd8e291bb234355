from __future__ import annotations

import datetime

from django.core.cache import cache
from django.test import TestCase, override_settings
from rest_framework.test import APITestCase

from apps.common.exceptions import ConflictError, NotFoundError, RequiredFieldsMissingError, ValidationError
from apps.common.tests_utils import AuthenticatedAPIMixin
from apps.teams.models import Payment, PaymentStatus, Team
from apps.teams.schemas import MemberUpdateSchema, TeamRegisterSchema
from apps.teams.services import (
    ConfirmPaymentService,
    RegisterTeamService,
    UpdateMemberService,
    generate_registration_id,
)

BINDINGS = {"admin@edcrec.com": "platform_admin", "finance@edcrec.com": "finance_admin"}

LEAD = {"name": "Asha", "email": "Asha@College.edu", "phone": "+91 98765 43210"}
MEMBER = {"name": "Ravi", "email": "ravi@college.edu", "phone": "9876543210", "department": "CSE"}


def register_payload(**overrides) -> dict:
    payload = {"team_name": "Alpha", "college_name": "REC", "members": [LEAD, MEMBER]}
    payload.update(overrides)
    return payload


class TeamSchemaTests(TestCase):

    def test_members_are_normalized(self):
        schema = TeamRegisterSchema.from_dict(register_payload())
        self.assertEqual(schema.members[0]["email"], "asha@college.edu")
        self.assertEqual(schema.members[1]["department"], "CSE")
        self.assertEqual(schema.members[1]["year"], "")

    def test_member_count_bounds(self):
        with self.assertRaises(ValidationError):
            TeamRegisterSchema.from_dict(register_payload(members=[]))
        five = [{"name": f"M{i}", "email": f"m{i}@college.edu", "phone": "9876543210"} for i in range(5)]
        with self.assertRaises(ValidationError):
            TeamRegisterSchema.from_dict(register_payload(members=five))

    def test_duplicate_member_email(self):
        with self.assertRaises(ValidationError) as ctx:
            TeamRegisterSchema.from_dict(register_payload(members=[LEAD, {**MEMBER, "email": "asha@college.edu"}]))
        self.assertEqual(ctx.exception.message, "Each member must use a different email")

    def test_member_requires_contact_fields(self):
        with self.assertRaises(RequiredFieldsMissingError):
            TeamRegisterSchema.from_dict(register_payload(members=[{**LEAD, "phone": " "}]))

    def test_partial_update_requires_something(self):
        with self.assertRaises(ValidationError):
            MemberUpdateSchema.from_dict({})


class TeamServiceTests(AuthenticatedAPIMixin, TestCase):

    def setUp(self):
        self.user = self.make_user("asha@college.edu")

    def register(self, **kwargs) -> Team:
        return RegisterTeamService(**kwargs).execute(self.user, TeamRegisterSchema.from_dict(register_payload()))

    def test_registration_id_format(self):
        value = generate_registration_id()
        self.assertRegex(value, r"^SS25-[0-9A-F]{6}$")

    def test_register_once(self):
        team = self.register()
        self.assertEqual(team.pk, self.user.pk)
        self.assertEqual(team.lead["name"], "Asha")
        self.assertEqual(team.payment_status, PaymentStatus.PENDING)
        with self.assertRaises(ConflictError):
            self.register()

    def test_registration_id_collision_retries(self):
        other = self.make_user("other@college.edu")
        Team.objects.create(owner=other, team_name="Taken", registration_id="SS25-AAAAAA")
        ids = iter(["SS25-AAAAAA", "SS25-BBBBBB"])
        team = self.register(id_factory=lambda: next(ids))
        self.assertEqual(team.registration_id, "SS25-BBBBBB")

    def test_member_update_merges_fields(self):
        team = self.register()
        UpdateMemberService().execute(self.user, 1, MemberUpdateSchema.from_dict({"phone": "9123456780"}))
        team.refresh_from_db()
        self.assertEqual(team.members[1]["phone"], "9123456780")
        self.assertEqual(team.members[1]["name"], "Ravi")
        self.assertEqual(team.members[0], TeamRegisterSchema.from_dict(register_payload()).members[0])
        self.assertEqual(team.team_name, "Alpha")

    def test_member_update_refreshes_updated_at(self):
        team = self.register()
        stale = team.updated_at - datetime.timedelta(days=1)
        Team.objects.filter(pk=team.pk).update(updated_at=stale)
        UpdateMemberService().execute(self.user, 1, MemberUpdateSchema.from_dict({"phone": "9123456780"}))
        team.refresh_from_db()
        self.assertGreater(team.updated_at, stale)

    def test_member_update_bad_index(self):
        self.register()
        with self.assertRaises(NotFoundError):
            UpdateMemberService().execute(self.user, 7, MemberUpdateSchema.from_dict({"name": "X"}))

    def test_member_update_email_clash(self):
        self.register()
        with self.assertRaises(ConflictError):
            UpdateMemberService().execute(self.user, 1, MemberUpdateSchema.from_dict({"email": "ASHA@college.edu"}))

    def test_confirm_payment_is_idempotent(self):
        team = self.register()
        service = ConfirmPaymentService()
        self.assertTrue(service.execute(team.pk).is_paid)
        self.assertTrue(service.execute(team.pk).is_paid)


@override_settings(ROLE_BINDINGS=BINDINGS)
class TeamAPITests(AuthenticatedAPIMixin, APITestCase):

    def setUp(self):
        cache.clear()
        self.user = self.make_user("asha@college.edu")
        self.client = self.auth_client(self.user)

    def test_register_and_read(self):
        resp = self.client.get("/api/teams/me/")
        self.assertEqual(resp.status_code, 404)
        resp = self.client.post("/api/teams/", register_payload(), format="json")
        self.assertEqual(resp.status_code, 201)
        registration_id = resp.data["data"]["team"]["registration_id"]
        resp = self.client.get("/api/teams/me/")
        self.assertEqual(resp.data["data"]["team"]["registration_id"], registration_id)

    def test_patch_member(self):
        self.client.post("/api/teams/", register_payload(), format="json")
        resp = self.client.patch("/api/teams/me/members/0/", {"name": "Asha K"}, format="json")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data["data"]["team"]["members"][0]["name"], "Asha K")

    def test_admin_actions_are_role_gated(self):
        self.client.post("/api/teams/", register_payload(), format="json")
        team_id = self.user.pk
        admin = self.auth_client(self.make_user("admin@edcrec.com"))
        finance = self.auth_client(self.make_user("finance@edcrec.com"))

        self.assertEqual(admin.post(f"/api/teams/{team_id}/confirm-payment/").status_code, 403)
        self.assertEqual(finance.post(f"/api/teams/{team_id}/phase2-selection/").status_code, 403)
        self.assertEqual(self.client.get("/api/teams/payments/").status_code, 403)

        resp = admin.post(f"/api/teams/{team_id}/phase2-selection/", {"selected": True}, format="json")
        self.assertTrue(resp.data["data"]["team"]["phase2_selected"])
        resp = finance.post(f"/api/teams/{team_id}/confirm-payment/")
        self.assertEqual(resp.data["data"]["team"]["payment_status"], "paid")

    def test_unknown_team(self):
        admin = self.auth_client(self.make_user("admin@edcrec.com"))
        self.assertEqual(admin.post("/api/teams/999/phase2-selection/").status_code, 404)

    def test_payment_log(self):
        Payment.objects.create(email="a@college.edu", status=PaymentStatus.PAID, amount="500.00")
        Payment.objects.create(email="b@college.edu", status=PaymentStatus.PENDING)
        finance = self.auth_client(self.make_user("finance@edcrec.com"))
        resp = finance.get("/api/teams/payments/", {"status": "paid"})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual([p["email"] for p in resp.data["data"]["items"]], ["a@college.edu"])
        self.assertEqual(resp.data["extra"]["total"], 1)
