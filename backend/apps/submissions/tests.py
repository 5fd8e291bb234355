from __future__ import annotations

import datetime
from datetime import timezone as dt_timezone

from django.core.cache import cache
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase, override_settings
from django.utils import timezone
from rest_framework.test import APITestCase

from apps.common.exceptions import (
    DeadlineClosedError,
    FileTypeError,
    NotSelectedForPhase2Error,
    RequiredFieldsMissingError,
    StorageUnavailableError,
    SubmissionLockedError,
    SubmissionNotFoundError,
    ValidationError,
    VideoLinkRequiredError,
)
from apps.common.tests_utils import AuthenticatedAPIMixin
from apps.common.utils.time import fixed_clock
from apps.scoring.models import ResultsConfig
from apps.submissions.lifecycle import PPTX_CONTENT_TYPE, DraftEntry, LockedEntry, load_entry
from apps.submissions.models import Phase1Submission, Phase2Submission
from apps.submissions.repo import Phase1SubmissionRepo
from apps.submissions.schemas import Phase1SubmitSchema, Phase2SubmitSchema, VideoLinkSchema
from apps.submissions.services import Phase1SubmitService, Phase1VideoLinkService, Phase2SubmitService
from apps.teams.models import Team

DEADLINE = datetime.datetime(2025, 3, 20, 18, 29, 59, tzinfo=dt_timezone.utc)
BEFORE = DEADLINE - datetime.timedelta(days=1)


class FakeStorage:
    """内存对象存储：记录写入的 key"""

    def __init__(self):
        self.saved: dict[str, bytes] = {}

    def save_bytes(self, *, content: bytes, key: str):
        self.saved[key] = content
        return key, f"https://files.example.com/{key}"


class FailingStorage:
    def save_bytes(self, *, content: bytes, key: str):
        raise StorageUnavailableError()


class StaleReadRepo(Phase1SubmissionRepo):
    """读取总是看不到已有记录，模拟并发首次提交"""

    def get_for_team(self, team_id):
        return None


class FixedDeadlineConfig:
    def __init__(self, deadline: datetime.datetime):
        self.deadline = deadline

    def get_datetime(self, key, default=None):
        return self.deadline


def pptx(name: str = "deck.pptx") -> SimpleUploadedFile:
    return SimpleUploadedFile(name, b"PK\x03\x04slides", content_type=PPTX_CONTENT_TYPE)


def pdf(name: str = "plan.pdf") -> SimpleUploadedFile:
    return SimpleUploadedFile(name, b"%PDF-1.4", content_type="application/pdf")


FORM = {
    "college_name": "REC",
    "whatsapp_number": "9876543210",
    "product_description": "Smart irrigation",
    "solution": "Soil sensors + app",
}


class SubmissionTestMixin(AuthenticatedAPIMixin):

    def make_team(self, email: str = "lead@college.edu", **fields) -> Team:
        user = self.make_user(email)
        defaults = {"team_name": "Alpha", "registration_id": f"SS25-{user.pk:06d}"}
        defaults.update(fields)
        return Team.objects.create(owner=user, **defaults)


class Phase1LifecycleTests(SubmissionTestMixin, TestCase):
    """第一阶段：提交、锁定与视频链接更新"""

    def setUp(self):
        self.team = self.make_team()
        self.user = self.team.owner
        self.storage = FakeStorage()

    def submit(self, form=None, upload=None, storage=None):
        schema = Phase1SubmitSchema.from_dict(form or FORM)
        service = Phase1SubmitService(storage=storage or self.storage, clock=fixed_clock(BEFORE))
        return service.execute(self.user, schema, upload)

    def test_submit_uploads_then_creates_record(self):
        submission = self.submit(upload=pptx())
        key = f"presentations/{self.team.pk}_deck.pptx"
        self.assertIn(key, self.storage.saved)
        self.assertEqual(submission.file_url, f"https://files.example.com/{key}")
        self.assertEqual(submission.team_name, "Alpha")
        self.assertEqual(submission.submitted_at, BEFORE)
        self.assertIsNone(submission.points)
        self.assertIsInstance(load_entry(self.team, Phase1SubmissionRepo()), LockedEntry)

    def test_missing_text_field_is_rejected_before_upload(self):
        with self.assertRaises(RequiredFieldsMissingError) as ctx:
            Phase1SubmitSchema.from_dict({**FORM, "solution": "   "})
        self.assertEqual(ctx.exception.message, "Please fill in all required fields")
        self.assertEqual(ctx.exception.extra["fields"], ["solution"])

    def test_missing_file_is_rejected(self):
        with self.assertRaises(ValidationError) as ctx:
            self.submit(upload=None)
        self.assertEqual(ctx.exception.message, "Please upload your presentation file")
        self.assertFalse(Phase1Submission.objects.exists())

    def test_wrong_file_type_is_distinct_error(self):
        bad = SimpleUploadedFile("deck.pdf", b"%PDF", content_type="application/pdf")
        with self.assertRaises(FileTypeError):
            self.submit(upload=bad)
        self.assertEqual(self.storage.saved, {})
        self.assertFalse(Phase1Submission.objects.exists())

    def test_storage_failure_leaves_no_record(self):
        with self.assertRaises(StorageUnavailableError):
            self.submit(upload=pptx(), storage=FailingStorage())
        self.assertFalse(Phase1Submission.objects.exists())
        self.assertIsInstance(load_entry(self.team, Phase1SubmissionRepo()), DraftEntry)

    def test_resubmission_is_rejected(self):
        self.submit(upload=pptx())
        with self.assertRaises(SubmissionLockedError):
            self.submit(form={**FORM, "solution": "Changed"}, upload=pptx("v2.pptx"))
        self.assertEqual(Phase1Submission.objects.get(pk=self.team.pk).solution, "Soil sensors + app")

    def test_concurrent_first_submission_is_locked(self):
        self.submit(upload=pptx())
        schema = Phase1SubmitSchema.from_dict({**FORM, "solution": "Racing"})
        service = Phase1SubmitService(storage=self.storage, repo=StaleReadRepo(), clock=fixed_clock(BEFORE))
        with self.assertRaises(SubmissionLockedError):
            service.execute(self.user, schema, pptx("race.pptx"))
        self.assertEqual(Phase1Submission.objects.get(pk=self.team.pk).solution, "Soil sensors + app")

    def test_video_link_update_touches_only_link(self):
        original = self.submit(upload=pptx())
        later = BEFORE + datetime.timedelta(hours=2)
        service = Phase1VideoLinkService(config=FixedDeadlineConfig(DEADLINE), clock=fixed_clock(later))
        updated = service.execute(self.user, VideoLinkSchema.from_dict({"youtube_link": "https://youtu.be/x"}))
        self.assertEqual(updated.youtube_link, "https://youtu.be/x")
        self.assertEqual(updated.updated_at, later)
        fresh = Phase1Submission.objects.get(pk=self.team.pk)
        for field in Phase1Submission.LOCKED_FIELDS:
            self.assertEqual(getattr(fresh, field), getattr(original, field))

    def test_empty_video_link_has_its_own_error(self):
        with self.assertRaises(VideoLinkRequiredError) as ctx:
            VideoLinkSchema.from_dict({"youtube_link": ""})
        self.assertEqual(ctx.exception.message, "Please provide a YouTube video link")
        self.assertNotEqual(ctx.exception.code, RequiredFieldsMissingError.default_code)

    def test_video_link_after_deadline_is_rejected(self):
        self.submit(upload=pptx())
        service = Phase1VideoLinkService(config=FixedDeadlineConfig(DEADLINE), clock=fixed_clock(DEADLINE))
        with self.assertRaises(DeadlineClosedError):
            service.execute(self.user, VideoLinkSchema.from_dict({"youtube_link": "https://youtu.be/x"}))

    def test_video_link_without_submission(self):
        service = Phase1VideoLinkService(config=FixedDeadlineConfig(DEADLINE), clock=fixed_clock(BEFORE))
        with self.assertRaises(SubmissionNotFoundError):
            service.execute(self.user, VideoLinkSchema.from_dict({"youtube_link": "https://youtu.be/x"}))

    def test_model_refuses_locked_field_writes(self):
        submission = self.submit(upload=pptx())
        submission.solution = "tampered"
        with self.assertRaises(SubmissionLockedError):
            submission.save(update_fields=["solution"])
        submission.save()
        self.assertEqual(Phase1Submission.objects.get(pk=self.team.pk).solution, "Soil sensors + app")


class Phase2SubmissionTests(SubmissionTestMixin, TestCase):
    """第二阶段：入选校验、截止校验与合并写入"""

    def setUp(self):
        self.team = self.make_team(phase2_selected=True)
        self.user = self.team.owner
        self.storage = FakeStorage()

    def service(self, at: datetime.datetime) -> Phase2SubmitService:
        return Phase2SubmitService(storage=self.storage, config=FixedDeadlineConfig(DEADLINE), clock=fixed_clock(at))

    def test_first_submission_requires_proposal(self):
        with self.assertRaises(ValidationError):
            self.service(BEFORE).execute(self.user, Phase2SubmitSchema.from_dict({}), None)

    def test_proposal_must_be_pdf(self):
        with self.assertRaises(FileTypeError):
            self.service(BEFORE).execute(self.user, Phase2SubmitSchema.from_dict({}), pptx())

    def test_resubmission_merges(self):
        first = self.service(BEFORE).execute(
            self.user, Phase2SubmitSchema.from_dict({"youtube_video_url": "https://youtu.be/a"}), pdf()
        )
        self.assertEqual(first.proposal_url, f"https://files.example.com/proposals/{self.team.pk}_plan.pdf")
        later = BEFORE + datetime.timedelta(hours=1)
        second = self.service(later).execute(
            self.user, Phase2SubmitSchema.from_dict({"youtube_video_url": "https://youtu.be/b"}), None
        )
        self.assertEqual(second.proposal_url, first.proposal_url)
        self.assertEqual(second.youtube_video_url, "https://youtu.be/b")
        self.assertEqual(second.submitted_at, later)
        self.assertEqual(second.status, "pending")
        self.assertEqual(Phase2Submission.objects.count(), 1)

    def test_rejected_from_deadline_on(self):
        with self.assertRaises(DeadlineClosedError):
            self.service(DEADLINE).execute(self.user, Phase2SubmitSchema.from_dict({}), pdf())
        self.assertFalse(Phase2Submission.objects.exists())

    def test_unselected_team_is_rejected(self):
        other = self.make_team("other@college.edu", team_name="Beta")
        with self.assertRaises(NotSelectedForPhase2Error):
            self.service(BEFORE).execute(other.owner, Phase2SubmitSchema.from_dict({}), pdf())


@override_settings(PHASE2_DEADLINE="2000-01-01T00:00:00+05:30")
class SubmissionAPITests(SubmissionTestMixin, APITestCase):

    def setUp(self):
        cache.clear()
        self.team = self.make_team()

    def test_phase1_read_hides_score_until_published(self):
        Phase1Submission.objects.create(
            team=self.team, team_name="Alpha", submitted_at=timezone.now(), updated_at=timezone.now(),
            file_url="u", points=88, review="Solid", **FORM,
        )
        client = self.auth_client(self.team.owner)
        data = client.get("/api/submissions/phase1/").data["data"]
        self.assertEqual(data["state"], "submitted")
        self.assertNotIn("points", data["submission"])

        ResultsConfig.objects.create(published=True, published_at=timezone.now())
        data = client.get("/api/submissions/phase1/").data["data"]
        self.assertEqual(data["submission"]["points"], 88)
        self.assertEqual(data["submission"]["review"], "Solid")

    def test_phase1_post_missing_fields(self):
        client = self.auth_client(self.team.owner)
        resp = client.post("/api/submissions/phase1/", {"college_name": "REC"}, format="multipart")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.data["message"], "Please fill in all required fields")

    def test_phase2_countdown_closed(self):
        resp = self.client.get("/api/submissions/phase2/countdown/")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data["data"]["text"], "Submission Closed")
        self.assertTrue(resp.data["data"]["closed"])
        self.assertEqual(resp.data["data"]["seconds_remaining"], 0)

    def test_phase2_post_after_deadline(self):
        self.team.phase2_selected = True
        self.team.save()
        resp = self.auth_client(self.team.owner).post("/api/submissions/phase2/", {"proposal": pdf()},
                                                      format="multipart")
        self.assertEqual(resp.status_code, 409)
        self.assertEqual(resp.data["message"], "Submission Closed")
