from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from .catalog import TrainingTrack
from .models import AssignmentStatus


# ---------------------------------------------------------------------------
# CATALOG
# ---------------------------------------------------------------------------


class SectionSummary(BaseModel):
    number: int
    title: str
    description: str
    video_duration_seconds: int
    question_count: int


class TrackSummary(BaseModel):
    track: TrainingTrack
    label: str
    title: str
    description: str
    target_audience: str
    estimated_time: str
    total_sections: int
    sections: List[SectionSummary]


# ---------------------------------------------------------------------------
# ASSIGNMENTS
# ---------------------------------------------------------------------------


class AssignmentEntry(BaseModel):
    # Loose on purpose: the whole batch is validated together by the store.
    name: Optional[str] = None
    email: Optional[str] = None
    track: Optional[str] = None


class AssignTeamRequest(BaseModel):
    assignments: List[AssignmentEntry] = Field(default_factory=list)


class AssignResultItem(BaseModel):
    email: str
    status: Literal["assigned", "already_assigned"]
    id: str
    invite_sent: Optional[bool] = None


class AssignTeamResponse(BaseModel):
    success: bool = True
    results: List[AssignResultItem]


class CertificateRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    certificate_number: str
    issued_at: datetime
    expires_at: datetime


class AssignmentRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    org_id: str
    track: TrainingTrack
    user_email: str
    user_name: str
    status: AssignmentStatus
    assigned_at: datetime
    completed_at: Optional[datetime] = None
    token_expires_at: Optional[datetime] = None
    completed_sections: int = 0
    total_sections: int = 0
    certificate: Optional[CertificateRead] = None


class SendReminderRequest(BaseModel):
    assignment_id: str


class SendReminderResponse(BaseModel):
    success: bool
    delivered: bool


class StartLinkResponse(BaseModel):
    assignment: AssignmentRead
    organization_name: Optional[str] = None
    track_title: str


# ---------------------------------------------------------------------------
# PROGRESS
# ---------------------------------------------------------------------------


ProgressAction = Literal["start", "video_progress", "complete_video", "submit_quiz"]


class ProgressUpdate(BaseModel):
    assignment_id: Optional[str] = None
    token: Optional[str] = None
    section_number: int
    action: ProgressAction
    video_watched_seconds: Optional[int] = Field(default=None, ge=0)
    quiz_answers: Optional[Dict[str, int]] = None


class SectionProgressRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    section_number: int
    video_watched_seconds: int
    video_total_seconds: int
    video_completed_at: Optional[datetime] = None
    quiz_completed_at: Optional[datetime] = None
    quiz_score: Optional[int] = None
    attempts: int
    started_at: datetime


class ProgressRead(BaseModel):
    assignment_id: str
    status: AssignmentStatus
    completed_sections: int
    total_sections: int
    per_section: List[SectionProgressRead]


class SectionStatusRead(BaseModel):
    completed: bool
    video_complete: bool
    video_progress: int


class CorrectAnswer(BaseModel):
    id: str
    correct_answer: int
    explanation: str = ""


class QuizResultRead(BaseModel):
    success: bool = True
    action: str
    section_number: int
    score: int
    passed: bool
    attempts: int
    track_complete: bool = False
    correct_answers: Optional[List[CorrectAnswer]] = None
    certificate: Optional["CertificateView"] = None


class ProgressActionResponse(BaseModel):
    success: bool = True
    action: str
    status: AssignmentStatus
    section: SectionProgressRead


# ---------------------------------------------------------------------------
# CERTIFICATES
# ---------------------------------------------------------------------------


class CertificateView(BaseModel):
    certificate_number: str
    employee_name: Optional[str] = None
    company_name: Optional[str] = None
    track: Optional[TrainingTrack] = None
    track_label: Optional[str] = None
    track_title: Optional[str] = None
    issued_at: datetime
    expires_at: datetime
    is_expired: bool


QuizResultRead.model_rebuild()


# ---------------------------------------------------------------------------
# CRON
# ---------------------------------------------------------------------------


class TickDetailRead(BaseModel):
    certificate: str
    tier: str
    recipient: str
    status: Literal["sent", "already_sent", "send_failed"]


class ReminderRunResponse(BaseModel):
    success: bool
    processed: int
    sent: int
    errors: int
    details: List[TickDetailRead]
    timestamp: datetime
