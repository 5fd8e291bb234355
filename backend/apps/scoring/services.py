"""
评分工作流

- RecordScoreService：管理员为作品打分/写评语，可重复覆盖（幂等）
- PublishResultsService：所有作品评分完毕后发布成绩，单向锁存
- ScoreboardService：发布后输出带竞赛名次的排行榜，支持搜索（不重排名次）
"""

from __future__ import annotations

from apps.common.base.base_service import BaseService
from apps.common.exceptions import ResultsNotFullyScoredError, SubmissionNotFoundError
from apps.common.infra.logger import get_logger, logger_extra
from apps.common.utils.time import Clock, now as default_now
from apps.submissions.models import Phase1Submission
from apps.submissions.repo import Phase1SubmissionRepo

from .models import ResultsConfig
from .ranking import Ranked, filter_ranked, rank_items
from .repo import ResultsConfigRepo
from .schemas import ScoreSchema

logger = get_logger(__name__)


def serialize_results_config(config: ResultsConfig | None) -> dict:
    return {
        "published": bool(config and config.published),
        "published_at": config.published_at.isoformat() if config and config.published_at else None,
    }


def serialize_scoreboard_entry(entry: Ranked[Phase1Submission]) -> dict:
    submission = entry.item
    return {
        "id": submission.pk,
        "team_name": submission.team_name,
        "registration_id": submission.team.registration_id,
        "college_name": submission.college_name,
        "score": entry.points,
        "rank": entry.rank,
        "review": submission.review,
    }


def serialize_admin_submission(submission: Phase1Submission) -> dict:
    lead = submission.team.lead
    return {
        "id": submission.pk,
        "team_name": submission.team_name,
        "registration_id": submission.team.registration_id,
        "lead_name": lead.get("name", ""),
        "college_name": submission.college_name,
        "whatsapp_number": submission.whatsapp_number,
        "product_description": submission.product_description,
        "solution": submission.solution,
        "file_url": submission.file_url,
        "youtube_link": submission.youtube_link,
        "submitted_at": submission.submitted_at.isoformat(),
        "points": submission.points,
        "review": submission.review,
        "reviewed_at": submission.reviewed_at.isoformat() if submission.reviewed_at else None,
    }


class RecordScoreService(BaseService[Phase1Submission]):
    """只写 points / review / reviewed_at，其他字段不动"""

    def __init__(self, repo: Phase1SubmissionRepo | None = None, clock: Clock = default_now):
        self.repo = repo or Phase1SubmissionRepo()
        self.clock = clock

    def perform(self, submission_id: int, schema: ScoreSchema) -> Phase1Submission:
        submission = self.repo.get_for_team(submission_id)
        if submission is None:
            raise SubmissionNotFoundError()
        submission = self.repo.set_score(submission, points=schema.points, review=schema.review, at=self.clock())
        logger.info(
            "作品已评分",
            extra=logger_extra({"submission_id": submission.pk, "points": schema.points}),
        )
        return submission


class PublishResultsService(BaseService[ResultsConfig]):
    """
    发布第一阶段成绩：存在未评分作品时拒绝且保持未发布；
    已发布时直接返回（没有撤回操作）
    """

    def __init__(
            self,
            repo: ResultsConfigRepo | None = None,
            submission_repo: Phase1SubmissionRepo | None = None,
            clock: Clock = default_now,
    ):
        self.repo = repo or ResultsConfigRepo()
        self.submission_repo = submission_repo or Phase1SubmissionRepo()
        self.clock = clock

    def perform(self) -> ResultsConfig:
        config = self.repo.get_or_create()
        if config.published:
            return config
        unscored = self.submission_repo.unscored_count()
        if unscored:
            logger.info("成绩发布被拒绝：存在未评分作品", extra={"unscored": unscored})
            raise ResultsNotFullyScoredError(extra={"unscored": unscored})
        config = self.repo.mark_published(self.clock())
        logger.info("第一阶段成绩已发布", extra={"published_at": config.published_at.isoformat()})
        return config


class ScoreboardService(BaseService[dict]):
    """未发布时直接返回空榜单，不读取作品"""

    atomic_enabled = False

    def __init__(self, repo: Phase1SubmissionRepo | None = None, results_repo: ResultsConfigRepo | None = None):
        self.repo = repo or Phase1SubmissionRepo()
        self.results_repo = results_repo or ResultsConfigRepo()

    def perform(self, search: str | None = None) -> dict:
        if not self.results_repo.is_published():
            return {"published": False, "entries": []}
        ranked = rank_items(self.repo.scored().order_by("submitted_at", "pk"), lambda s: s.points)
        visible = filter_ranked(
            ranked,
            search,
            lambda s: (s.team_name, s.team.registration_id, s.college_name),
        )
        return {"published": True, "entries": [serialize_scoreboard_entry(entry) for entry in visible]}


class AdminSubmissionListService(BaseService[list]):
    atomic_enabled = False

    def __init__(self, repo: Phase1SubmissionRepo | None = None):
        self.repo = repo or Phase1SubmissionRepo()

    def perform(self) -> list:
        return [serialize_admin_submission(s) for s in self.repo.all_ordered()]
