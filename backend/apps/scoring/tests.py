from __future__ import annotations

import datetime
from datetime import timezone as dt_timezone

from django.core.cache import cache
from django.test import SimpleTestCase, TestCase, override_settings
from rest_framework.test import APITestCase

from apps.common.exceptions import ResultsNotFullyScoredError, SubmissionNotFoundError, ValidationError
from apps.common.tests_utils import AuthenticatedAPIMixin
from apps.common.utils.time import fixed_clock
from apps.scoring.models import ResultsConfig
from apps.scoring.ranking import competition_ranks, filter_ranked, rank_items
from apps.scoring.repo import ResultsConfigRepo
from apps.scoring.schemas import ScoreSchema
from apps.scoring.services import PublishResultsService, RecordScoreService, ScoreboardService
from apps.submissions.models import Phase1Submission
from apps.teams.models import Team

SUBMITTED = datetime.datetime(2025, 3, 1, 10, 0, tzinfo=dt_timezone.utc)
REVIEWED = datetime.datetime(2025, 3, 25, 9, 0, tzinfo=dt_timezone.utc)
BINDINGS = {"admin@edcrec.com": "platform_admin", "finance@edcrec.com": "finance_admin"}


class RankingTests(SimpleTestCase):
    """竞赛排名（1224）"""

    def test_ties_share_rank_and_skip_next(self):
        self.assertEqual(competition_ranks([90, 90, 80, 70, 70, 70]), [1, 1, 3, 4, 4, 4])

    def test_input_order_does_not_matter(self):
        self.assertEqual(competition_ranks([70, 90, 80, 90]), [1, 1, 3, 4])

    def test_unscored_items_are_excluded(self):
        ranked = rank_items([("a", 50), ("b", None), ("c", 60)], lambda pair: pair[1])
        self.assertEqual([(r.item[0], r.rank) for r in ranked], [("c", 1), ("a", 2)])

    def test_equal_points_keep_input_order(self):
        ranked = rank_items(["x", "y", "z"], lambda _: 10)
        self.assertEqual([r.item for r in ranked], ["x", "y", "z"])
        self.assertEqual({r.rank for r in ranked}, {1})

    def test_filter_keeps_original_ranks(self):
        ranked = rank_items([("Alpha", 90), ("Beta", 80), ("Gamma", 70)], lambda pair: pair[1])
        visible = filter_ranked(ranked, "gam", lambda pair: [pair[0]])
        self.assertEqual([(r.item[0], r.rank) for r in visible], [("Gamma", 3)])

    def test_empty_search_keeps_everything(self):
        ranked = rank_items([("Alpha", 90)], lambda pair: pair[1])
        self.assertEqual(filter_ranked(ranked, "", lambda pair: [pair[0]]), ranked)


class ScoreSchemaTests(SimpleTestCase):

    def test_accepts_numeric_string(self):
        schema = ScoreSchema.from_dict({"points": "85", "review": "  Solid  "})
        self.assertEqual(schema.points, 85)
        self.assertEqual(schema.review, "Solid")

    def test_rejects_out_of_range(self):
        for value in (-1, 101):
            with self.assertRaises(ValidationError):
                ScoreSchema.from_dict({"points": value})

    def test_rejects_non_integer(self):
        for value in (7.5, "abc", True, None):
            with self.assertRaises(ValidationError):
                ScoreSchema.from_dict({"points": value})


class ScoringTestMixin(AuthenticatedAPIMixin):

    def make_submission(self, email: str, team_name: str, *, college: str = "REC", points=None) -> Phase1Submission:
        user = self.make_user(email)
        team = Team.objects.create(
            owner=user,
            team_name=team_name,
            registration_id=f"SS25-{user.pk:06d}",
            college_name=college,
            members=[{"name": f"{team_name} Lead", "email": email, "phone": "9876543210"}],
        )
        return Phase1Submission.objects.create(
            team=team,
            team_name=team_name,
            college_name=college,
            whatsapp_number="9876543210",
            product_description="Product",
            solution="Solution",
            file_url=f"https://files.example.com/presentations/{team.pk}_deck.pptx",
            submitted_at=SUBMITTED,
            updated_at=SUBMITTED,
            points=points,
        )


class ScoringWorkflowTests(ScoringTestMixin, TestCase):
    """评分、发布与排行榜"""

    def test_record_score_only_touches_score_fields(self):
        submission = self.make_submission("a@college.edu", "Alpha")
        RecordScoreService(clock=fixed_clock(REVIEWED)).execute(
            submission.pk, ScoreSchema.from_dict({"points": 88, "review": "Great"})
        )
        submission.refresh_from_db()
        self.assertEqual(submission.points, 88)
        self.assertEqual(submission.review, "Great")
        self.assertEqual(submission.reviewed_at, REVIEWED)
        self.assertEqual(submission.solution, "Solution")

    def test_rescoring_overwrites(self):
        submission = self.make_submission("a@college.edu", "Alpha", points=40)
        RecordScoreService().execute(submission.pk, ScoreSchema.from_dict({"points": 60}))
        submission.refresh_from_db()
        self.assertEqual(submission.points, 60)

    def test_score_unknown_submission(self):
        with self.assertRaises(SubmissionNotFoundError):
            RecordScoreService().execute(9999, ScoreSchema.from_dict({"points": 10}))

    def test_publish_refused_while_unscored(self):
        self.make_submission("a@college.edu", "Alpha", points=90)
        self.make_submission("b@college.edu", "Beta")
        with self.assertRaises(ResultsNotFullyScoredError):
            PublishResultsService().execute()
        self.assertFalse(ResultsConfigRepo().is_published())

    def test_publish_when_all_scored(self):
        self.make_submission("a@college.edu", "Alpha", points=90)
        config = PublishResultsService(clock=fixed_clock(REVIEWED)).execute()
        self.assertTrue(config.published)
        self.assertEqual(config.published_at, REVIEWED)

    def test_publish_is_a_latch(self):
        self.make_submission("a@college.edu", "Alpha", points=90)
        first = PublishResultsService(clock=fixed_clock(REVIEWED)).execute()
        # 发布后新增未评分作品，再次发布保持原状
        self.make_submission("b@college.edu", "Beta")
        again = PublishResultsService().execute()
        self.assertTrue(again.published)
        self.assertEqual(again.published_at, first.published_at)
        self.assertEqual(ResultsConfig.objects.count(), 1)

    def test_scoreboard_empty_before_publish(self):
        self.make_submission("a@college.edu", "Alpha", points=90)
        self.assertEqual(ScoreboardService().execute(), {"published": False, "entries": []})

    def test_scoreboard_ranks_and_search(self):
        scores = [("Alpha", 90), ("Beta", 90), ("Gamma", 80), ("Delta", 70), ("Eps", 70), ("Zeta", 70)]
        for index, (name, points) in enumerate(scores):
            self.make_submission(f"t{index}@college.edu", name, points=points)
        PublishResultsService().execute()

        board = ScoreboardService().execute()
        self.assertTrue(board["published"])
        self.assertEqual([e["rank"] for e in board["entries"]], [1, 1, 3, 4, 4, 4])
        self.assertEqual(board["entries"][0]["team_name"], "Alpha")

        filtered = ScoreboardService().execute("zeta")
        self.assertEqual([(e["team_name"], e["rank"]) for e in filtered["entries"]], [("Zeta", 4)])

    def test_scoreboard_search_matches_registration_id(self):
        submission = self.make_submission("a@college.edu", "Alpha", points=75)
        PublishResultsService().execute()
        board = ScoreboardService().execute(submission.team.registration_id.lower())
        self.assertEqual(len(board["entries"]), 1)


@override_settings(ROLE_BINDINGS=BINDINGS)
class ScoringAPITests(ScoringTestMixin, APITestCase):

    def setUp(self):
        cache.clear()
        self.admin = self.auth_client(self.make_user("admin@edcrec.com"))

    def test_participant_cannot_score(self):
        submission = self.make_submission("a@college.edu", "Alpha")
        client = self.auth_client(submission.team.owner)
        resp = client.put(f"/api/scoring/submissions/{submission.pk}/score/", {"points": 50}, format="json")
        self.assertEqual(resp.status_code, 403)

    def test_finance_admin_cannot_publish(self):
        client = self.auth_client(self.make_user("finance@edcrec.com"))
        resp = client.post("/api/scoring/results/")
        self.assertEqual(resp.status_code, 403)

    def test_admin_scores_and_publishes(self):
        submission = self.make_submission("a@college.edu", "Alpha")
        resp = self.admin.get("/api/scoring/submissions/")
        self.assertEqual(resp.status_code, 200)
        item = resp.data["data"]["items"][0]
        self.assertEqual(item["lead_name"], "Alpha Lead")
        self.assertEqual(item["registration_id"], submission.team.registration_id)

        resp = self.admin.post("/api/scoring/results/")
        self.assertEqual(resp.status_code, 409)
        self.assertEqual(resp.data["message"], "All submissions must be scored before publishing results")

        resp = self.admin.put(
            f"/api/scoring/submissions/{submission.pk}/score/", {"points": 77, "review": "Nice"}, format="json"
        )
        self.assertEqual(resp.status_code, 200)
        resp = self.admin.post("/api/scoring/results/")
        self.assertEqual(resp.status_code, 200)
        self.assertTrue(resp.data["data"]["published"])

        participant = self.auth_client(submission.team.owner)
        resp = participant.get("/api/scoring/scoreboard/", {"search": "alp"})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data["data"]["entries"][0]["score"], 77)
        resp = participant.get("/api/scoring/results/")
        self.assertTrue(resp.data["data"]["published"])

    def test_invalid_points_rejected(self):
        submission = self.make_submission("a@college.edu", "Alpha")
        resp = self.admin.put(f"/api/scoring/submissions/{submission.pk}/score/", {"points": 150}, format="json")
        self.assertEqual(resp.status_code, 400)
        submission.refresh_from_db()
        self.assertIsNone(submission.points)
