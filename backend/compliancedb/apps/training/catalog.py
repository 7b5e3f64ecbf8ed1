# backend/compliancedb/apps/training/catalog.py
"""
Track Catalog: the static definition of every training track.

Tracks are a closed set (`TrainingTrack`). Raw content lives in
`track_content.py` and is parsed into frozen Pydantic models once, at import,
by `load_catalog`; malformed content fails loudly with `CatalogError` instead
of surfacing later as a broken quiz.
"""

from __future__ import annotations

import enum
from typing import Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError as PydanticValidationError

from .errors import NotFoundError, ValidationError

# 80 % of questions in a section must be correct to pass its quiz.
PASSING_SCORE = 80


class CatalogError(Exception):
    """Raised when track content violates the catalog invariants."""


class TrainingTrack(str, enum.Enum):
    RECRUITER = "recruiter"
    MANAGER = "manager"
    ADMIN = "admin"
    EXECUTIVE = "executive"


TRACK_LABELS: Dict[TrainingTrack, str] = {
    TrainingTrack.RECRUITER: "Recruiter",
    TrainingTrack.MANAGER: "Hiring Manager",
    TrainingTrack.ADMIN: "HR Admin",
    TrainingTrack.EXECUTIVE: "Executive",
}

TRACK_DESCRIPTIONS: Dict[TrainingTrack, str] = {
    TrainingTrack.RECRUITER: (
        "For recruiters and talent acquisition specialists who use AI tools to source and screen candidates"
    ),
    TrainingTrack.MANAGER: (
        "For hiring managers who make employment decisions based on AI-assisted screening"
    ),
    TrainingTrack.ADMIN: "For HR professionals who manage AI compliance programs and policies",
    TrainingTrack.EXECUTIVE: "For executives who need high-level understanding of AI governance and risk",
}

# Certificate numbers start with this code, e.g. REC-2026-7K2Q0P.
CERTIFICATE_PREFIXES: Dict[TrainingTrack, str] = {
    TrainingTrack.RECRUITER: "REC",
    TrainingTrack.MANAGER: "MGR",
    TrainingTrack.ADMIN: "ADM",
    TrainingTrack.EXECUTIVE: "EXC",
}


# ---------------------------------------------------------------------------
# MODELS
# ---------------------------------------------------------------------------


class QuizQuestion(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    question: str = Field(..., min_length=1)
    options: List[str] = Field(..., min_length=2)
    correct_answer: int = Field(..., ge=0, description="Zero-based index into `options`.")
    explanation: str = ""


class SectionDefinition(BaseModel):
    model_config = ConfigDict(frozen=True)

    number: int = Field(..., ge=1)
    title: str
    description: str = ""
    video_duration_seconds: int = Field(0, ge=0)
    content: str = ""
    quiz: List[QuizQuestion] = Field(..., min_length=1)


class TrackDefinition(BaseModel):
    model_config = ConfigDict(frozen=True)

    track: TrainingTrack
    title: str
    description: str
    target_audience: str
    estimated_time: str
    sections: List[SectionDefinition] = Field(..., min_length=1)

    @property
    def label(self) -> str:
        return TRACK_LABELS[self.track]

    @property
    def total_sections(self) -> int:
        return len(self.sections)

    def section(self, number: int) -> Optional[SectionDefinition]:
        for section in self.sections:
            if section.number == number:
                return section
        return None


# ---------------------------------------------------------------------------
# LOADING + VALIDATION
# ---------------------------------------------------------------------------


def _check_track(definition: TrackDefinition) -> None:
    numbers = [s.number for s in definition.sections]
    if numbers != list(range(1, len(numbers) + 1)):
        raise CatalogError(
            f"{definition.track.value}: section numbers must be contiguous from 1, got {numbers}"
        )

    seen_ids = set()
    for section in definition.sections:
        for question in section.quiz:
            if question.id in seen_ids:
                raise CatalogError(f"{definition.track.value}: duplicate question id {question.id!r}")
            seen_ids.add(question.id)
            if question.correct_answer >= len(question.options):
                raise CatalogError(
                    f"{definition.track.value}: question {question.id!r} answer index "
                    f"{question.correct_answer} out of range"
                )


def load_catalog(raw: Mapping[str, dict]) -> Dict[TrainingTrack, TrackDefinition]:
    """Parse and validate raw track content keyed by track value."""
    catalog: Dict[TrainingTrack, TrackDefinition] = {}
    for key, payload in raw.items():
        try:
            definition = TrackDefinition.model_validate({"track": key, **payload})
        except PydanticValidationError as exc:
            raise CatalogError(f"{key}: invalid track definition: {exc}") from exc
        _check_track(definition)
        catalog[definition.track] = definition

    missing = [t.value for t in TrainingTrack if t not in catalog]
    if missing:
        raise CatalogError(f"Track content missing for: {', '.join(missing)}")
    return catalog


def _load_default_catalog() -> Dict[TrainingTrack, TrackDefinition]:
    from .track_content import TRACK_CONTENT

    return load_catalog(TRACK_CONTENT)


TRAINING_TRACKS: Dict[TrainingTrack, TrackDefinition] = _load_default_catalog()


# ---------------------------------------------------------------------------
# LOOKUPS
# ---------------------------------------------------------------------------


def parse_track(value: object) -> TrainingTrack:
    """Coerce user input to a known track or raise ValidationError."""
    if isinstance(value, TrainingTrack):
        return value
    try:
        return TrainingTrack(str(value).strip().lower())
    except ValueError:
        raise ValidationError(f"Invalid track: {value}")


def get_track(track: TrainingTrack | str) -> TrackDefinition:
    return TRAINING_TRACKS[parse_track(track)]


def get_section(track: TrainingTrack | str, number: int) -> SectionDefinition:
    section = get_track(track).section(number)
    if section is None:
        raise NotFoundError(f"Invalid section number: {number}")
    return section


def total_sections(track: TrainingTrack | str) -> int:
    return get_track(track).total_sections


def track_label(track: TrainingTrack | str) -> str:
    try:
        return TRACK_LABELS[parse_track(track)]
    except ValidationError:
        return str(track)
