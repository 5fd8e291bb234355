"""
第一阶段作品的状态标签

    NotStarted ──submit──▶ Submitted(锁定) ──评分──▶ +Score ──发布──▶ +Published

- DraftEntry：尚未提交，只能 submit
- LockedEntry：已提交，只能在视频截止前 update_video_link
评分与发布不改变可变性，状态仍为 LockedEntry
"""

from __future__ import annotations

import datetime
from dataclasses import dataclass
from typing import ClassVar, Union

from apps.common.exceptions import DeadlineClosedError
from apps.common.infra.file_storage import ObjectStorage
from apps.common.utils.validators import validate_upload_file
from apps.teams.models import Team

from .models import Phase1Submission
from .repo import Phase1SubmissionRepo
from .schemas import Phase1SubmitSchema

PPTX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.presentationml.presentation"


def presentation_key(team_id: int, filename: str) -> str:
    return f"presentations/{team_id}_{filename}"


@dataclass(frozen=True)
class DraftEntry:
    state: ClassVar[str] = "not_started"

    team: Team

    def submit(
            self,
            schema: Phase1SubmitSchema,
            upload,
            *,
            storage: ObjectStorage,
            repo: Phase1SubmissionRepo,
            at: datetime.datetime,
            max_size_mb: int = 25,
    ) -> "LockedEntry":
        """先上传文件拿到地址，再写记录；上传失败时不写任何记录"""
        validate_upload_file(
            upload,
            allowed_content_types={PPTX_CONTENT_TYPE},
            max_size_mb=max_size_mb,
            missing_message="Please upload your presentation file",
            type_message="Please upload a PowerPoint file (.pptx)",
        )
        _, file_url = storage.save_bytes(content=upload.read(), key=presentation_key(self.team.pk, upload.name))
        submission = repo.create(
            {
                "team": self.team,
                "team_name": self.team.team_name,
                "college_name": schema.college_name,
                "whatsapp_number": schema.whatsapp_number,
                "product_description": schema.product_description,
                "solution": schema.solution,
                "file_url": file_url,
                "youtube_link": schema.youtube_link,
                "submitted_at": at,
                "updated_at": at,
            }
        )
        return LockedEntry(submission=submission)


@dataclass(frozen=True)
class LockedEntry:
    state: ClassVar[str] = "submitted"

    submission: Phase1Submission

    def update_video_link(
            self,
            link: str,
            *,
            repo: Phase1SubmissionRepo,
            at: datetime.datetime,
            deadline: datetime.datetime,
    ) -> "LockedEntry":
        if at >= deadline:
            raise DeadlineClosedError()
        return LockedEntry(submission=repo.update_video_link(self.submission, link, at))


Phase1Entry = Union[DraftEntry, LockedEntry]


def load_entry(team: Team, repo: Phase1SubmissionRepo) -> Phase1Entry:
    submission = repo.get_for_team(team.pk)
    return DraftEntry(team=team) if submission is None else LockedEntry(submission=submission)
