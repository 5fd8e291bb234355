"""
提交生命周期服务

- 第一阶段：首次提交（上传演示文稿后写记录，之后锁定）、视频链接更新（截止前）
- 第二阶段：入选队伍在截止前可多次提交（合并写入）
- 倒计时：两个截止时间的剩余时间快照
"""

from __future__ import annotations

import datetime

from django.conf import settings
from django.db import IntegrityError

from apps.common.base.base_service import BaseService
from apps.common.exceptions import (
    DeadlineClosedError,
    NotSelectedForPhase2Error,
    SubmissionLockedError,
    SubmissionNotFoundError,
    TeamNotFoundError,
    ValidationError,
)
from apps.common.infra.file_storage import ObjectStorage, get_storage
from apps.common.infra.logger import get_logger, logger_extra
from apps.common.utils.countdown import Countdown, snapshot
from apps.common.utils.time import Clock, now as default_now
from apps.common.utils.validators import validate_upload_file
from apps.scoring.repo import ResultsConfigRepo
from apps.system.services import ConfigService
from apps.teams.models import Team
from apps.teams.repo import TeamRepo

from .lifecycle import DraftEntry, LockedEntry, load_entry
from .models import Phase1Submission, Phase2Status, Phase2Submission
from .repo import Phase1SubmissionRepo, Phase2SubmissionRepo
from .schemas import Phase1SubmitSchema, Phase2SubmitSchema, VideoLinkSchema

logger = get_logger(__name__)

PDF_CONTENT_TYPE = "application/pdf"


def proposal_key(team_id: int, filename: str) -> str:
    return f"proposals/{team_id}_{filename}"


def _iso(value: datetime.datetime | None) -> str | None:
    return value.isoformat() if value else None


def serialize_phase1(submission: Phase1Submission, *, include_score: bool) -> dict:
    """成绩字段仅在 include_score（成绩已发布）时输出"""
    payload = {
        "id": submission.pk,
        "team_name": submission.team_name,
        "college_name": submission.college_name,
        "whatsapp_number": submission.whatsapp_number,
        "product_description": submission.product_description,
        "solution": submission.solution,
        "file_url": submission.file_url,
        "youtube_link": submission.youtube_link,
        "submitted_at": _iso(submission.submitted_at),
        "updated_at": _iso(submission.updated_at),
    }
    if include_score:
        payload.update(
            {
                "points": submission.points,
                "review": submission.review,
                "reviewed_at": _iso(submission.reviewed_at),
            }
        )
    return payload


def serialize_phase2(submission: Phase2Submission) -> dict:
    return {
        "id": submission.pk,
        "proposal_url": submission.proposal_url,
        "youtube_video_url": submission.youtube_video_url,
        "submitted_at": _iso(submission.submitted_at),
        "status": submission.status,
    }


def serialize_countdown(countdown: Countdown) -> dict:
    return {
        "deadline": countdown.deadline.isoformat(),
        "seconds_remaining": countdown.seconds_remaining,
        "text": countdown.text,
        "closed": countdown.closed,
    }


def _team_for(user, team_repo: TeamRepo) -> Team:
    team = team_repo.get_for_owner(user.pk)
    if team is None:
        raise TeamNotFoundError(message="Please register your team first")
    return team


class Phase1SubmitService(BaseService[Phase1Submission]):
    """
    第一阶段首次提交

    校验顺序：必填字段（Schema）→ 演示文稿存在 → pptx 类型 → 上传 → 写记录
    已提交过的队伍再次提交一律拒绝
    """

    def __init__(
            self,
            *,
            storage: ObjectStorage | None = None,
            team_repo: TeamRepo | None = None,
            repo: Phase1SubmissionRepo | None = None,
            clock: Clock = default_now,
    ):
        self.storage = storage
        self.team_repo = team_repo or TeamRepo()
        self.repo = repo or Phase1SubmissionRepo()
        self.clock = clock

    def perform(self, user, schema: Phase1SubmitSchema, upload) -> Phase1Submission:
        team = _team_for(user, self.team_repo)
        entry = load_entry(team, self.repo)
        if isinstance(entry, LockedEntry):
            raise SubmissionLockedError()
        try:
            locked = entry.submit(
                schema,
                upload,
                storage=self.storage or get_storage(),
                repo=self.repo,
                at=self.clock(),
                max_size_mb=getattr(settings, "PRESENTATION_MAX_SIZE_MB", 25),
            )
        except IntegrityError as exc:
            # 并发首次提交：另一请求已先写入记录
            logger.warning("第一阶段重复提交被拒绝", extra=logger_extra({"team_id": team.pk}))
            raise SubmissionLockedError() from exc
        logger.info(
            "第一阶段作品已提交",
            extra=logger_extra({"team_id": team.pk, "file_url": locked.submission.file_url}),
        )
        return locked.submission


class Phase1VideoLinkService(BaseService[Phase1Submission]):
    """已提交作品在视频截止前更新 YouTube 链接，其余字段保持不变"""

    def __init__(
            self,
            *,
            team_repo: TeamRepo | None = None,
            repo: Phase1SubmissionRepo | None = None,
            config: ConfigService | None = None,
            clock: Clock = default_now,
    ):
        self.team_repo = team_repo or TeamRepo()
        self.repo = repo or Phase1SubmissionRepo()
        self.config = config or ConfigService()
        self.clock = clock

    def perform(self, user, schema: VideoLinkSchema) -> Phase1Submission:
        team = _team_for(user, self.team_repo)
        entry = load_entry(team, self.repo)
        if isinstance(entry, DraftEntry):
            raise SubmissionNotFoundError(message="Please submit your entry before adding a video link")
        updated = entry.update_video_link(
            schema.youtube_link,
            repo=self.repo,
            at=self.clock(),
            deadline=self.config.get_datetime("PHASE1_VIDEO_DEADLINE"),
        )
        logger.info("视频链接已更新", extra=logger_extra({"team_id": team.pk}))
        return updated.submission


class Phase1ReadService(BaseService[dict]):
    """参赛者读取自己的作品，成绩发布前不返回得分与评语"""

    atomic_enabled = False

    def __init__(
            self,
            *,
            team_repo: TeamRepo | None = None,
            repo: Phase1SubmissionRepo | None = None,
            results_repo: ResultsConfigRepo | None = None,
    ):
        self.team_repo = team_repo or TeamRepo()
        self.repo = repo or Phase1SubmissionRepo()
        self.results_repo = results_repo or ResultsConfigRepo()

    def perform(self, user) -> dict:
        team = _team_for(user, self.team_repo)
        entry = load_entry(team, self.repo)
        published = self.results_repo.is_published()
        if isinstance(entry, DraftEntry):
            return {"state": entry.state, "results_published": published, "submission": None}
        return {
            "state": entry.state,
            "results_published": published,
            "submission": serialize_phase1(entry.submission, include_score=published),
        }


class Phase2SubmitService(BaseService[Phase2Submission]):
    """
    第二阶段提交：仅入选队伍，截止前可多次提交

    - 首次提交必须附带 PDF 商业计划书，之后可只更新视频链接
    - 每次提交都会把 status 重置为 pending 并刷新 submitted_at
    """

    def __init__(
            self,
            *,
            storage: ObjectStorage | None = None,
            team_repo: TeamRepo | None = None,
            repo: Phase2SubmissionRepo | None = None,
            config: ConfigService | None = None,
            clock: Clock = default_now,
    ):
        self.storage = storage
        self.team_repo = team_repo or TeamRepo()
        self.repo = repo or Phase2SubmissionRepo()
        self.config = config or ConfigService()
        self.clock = clock

    def perform(self, user, schema: Phase2SubmitSchema, upload=None) -> Phase2Submission:
        current = self.clock()
        if current >= self.config.get_datetime("PHASE2_DEADLINE"):
            raise DeadlineClosedError()
        team = _team_for(user, self.team_repo)
        if not team.phase2_selected:
            raise NotSelectedForPhase2Error()

        existing = self.repo.get_for_team(team.pk)
        changes: dict = {"submitted_at": current, "status": Phase2Status.PENDING}
        if upload is not None:
            validate_upload_file(
                upload,
                allowed_content_types={PDF_CONTENT_TYPE},
                max_size_mb=getattr(settings, "PROPOSAL_MAX_SIZE_MB", 25),
                type_message="Please upload a PDF file",
            )
            storage = self.storage or get_storage()
            _, changes["proposal_url"] = storage.save_bytes(
                content=upload.read(), key=proposal_key(team.pk, upload.name)
            )
        elif existing is None or not existing.proposal_url:
            raise ValidationError(message="Please upload your business proposal")
        if schema.youtube_video_url or existing is None:
            changes["youtube_video_url"] = schema.youtube_video_url

        submission = self.repo.merge(team.pk, changes)
        logger.info(
            "第二阶段方案已提交",
            extra=logger_extra({"team_id": team.pk, "proposal_uploaded": upload is not None}),
        )
        return submission


class CountdownService(BaseService[Countdown]):
    """截止倒计时快照（只读）"""

    atomic_enabled = False

    def __init__(self, *, config: ConfigService | None = None, clock: Clock = default_now):
        self.config = config or ConfigService()
        self.clock = clock

    def perform(self, deadline_key: str) -> Countdown:
        return snapshot(self.config.get_datetime(deadline_key), self.clock())
