from __future__ import annotations

from pydantic import BaseModel, Field

from lessonreview.models.flashcard import Flashcard
from lessonreview.models.review import ReviewEntry


class SessionCreate(BaseModel):
    force_all: bool = False  # review every card, not just due + new ones


class RatingRequest(BaseModel):
    quality: int = Field(ge=0, le=5)  # 0 = forgot ... 5 = immediate recall


class PositionRequest(BaseModel):
    index: int = Field(ge=0)  # len(session cards) ends the pass


class QualityPreset(BaseModel):
    quality: int
    label: str


class SessionStats(BaseModel):
    hard: int = 0
    good: int = 0
    easy: int = 0
    unanswered: int = 0


class SessionState(BaseModel):
    session_id: str
    lesson_id: str
    current_index: int
    total: int
    due_count: int
    new_count: int
    is_saving: bool
    session_complete: bool
    current_card: Flashcard | None
    stats: SessionStats


class RatingResult(BaseModel):
    accepted: bool
    entry: ReviewEntry | None
    session: SessionState
