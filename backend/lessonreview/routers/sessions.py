"""
Review session router.

Endpoints:
  POST   /courses/{course_id}/lessons/{lesson_id}/review-sessions — start a session
  GET    /review-sessions/presets        — rating buttons (quality + label)
  GET    /review-sessions/{id}           — session state
  POST   /review-sessions/{id}/ratings   — rate the current card (SM-2 + save)
  POST   /review-sessions/{id}/position  — jump to a card without rating (skip/back)
  POST   /review-sessions/{id}/reset     — start another pass, keeping progress
  POST   /review-sessions/{id}/shuffle   — reorder the cards and start a new pass
  DELETE /review-sessions/{id}           — discard the session
"""
from __future__ import annotations

import logging

import aiosqlite
from fastapi import APIRouter, Depends, HTTPException

from lessonreview.config import settings
from lessonreview.db.sqlite import SqliteReviewStore, get_db, get_flashcards
from lessonreview.models.session import (
    PositionRequest,
    QualityPreset,
    RatingRequest,
    RatingResult,
    SessionCreate,
    SessionState,
)
from lessonreview.services.scheduler import QUALITY_PRESETS
from lessonreview.services.session import (
    InvalidPositionError,
    ReviewSaveError,
    ReviewSession,
    start_session,
)
from lessonreview.services.session_registry import (
    discard_session,
    get_session,
    register_session,
)

logger = logging.getLogger(__name__)
router = APIRouter()


def _state(session_id: str, session: ReviewSession) -> SessionState:
    return SessionState(
        session_id=session_id,
        lesson_id=session.lesson_id,
        current_index=session.current_index,
        total=len(session.session_cards),
        due_count=session.due_count,
        new_count=session.new_count,
        is_saving=session.is_saving,
        session_complete=session.session_complete,
        current_card=session.current_card,
        stats=session.stats(),
    )


def _require_session(session_id: str) -> ReviewSession:
    session = get_session(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Review session not found")
    return session


@router.post(
    "/courses/{course_id}/lessons/{lesson_id}/review-sessions",
    response_model=SessionState,
    status_code=201,
)
async def create_review_session(
    course_id: str,
    lesson_id: str,
    body: SessionCreate | None = None,
    db: aiosqlite.Connection = Depends(get_db),
) -> SessionState:
    content = await get_flashcards(db, course_id, lesson_id)
    if not content:
        raise HTTPException(status_code=404, detail="Flashcards not found")

    session = await start_session(
        SqliteReviewStore(course_id),
        lesson_id,
        content.flashcards,
        force_all=body.force_all if body else False,
        save_timeout=settings.save_timeout_seconds,
    )
    session_id = register_session(session)
    return _state(session_id, session)


@router.get("/review-sessions/presets", response_model=list[QualityPreset])
async def list_quality_presets() -> list[QualityPreset]:
    return [QualityPreset(quality=q, label=label) for q, label in QUALITY_PRESETS]


@router.get("/review-sessions/{session_id}", response_model=SessionState)
async def get_review_session(session_id: str) -> SessionState:
    return _state(session_id, _require_session(session_id))


@router.post("/review-sessions/{session_id}/ratings", response_model=RatingResult)
async def rate_current_card(session_id: str, body: RatingRequest) -> RatingResult:
    """Rate the current card. A rating sent while a save is pending is not applied."""
    session = _require_session(session_id)
    try:
        entry = await session.rate_card(body.quality)
    except ReviewSaveError:
        raise HTTPException(status_code=502, detail="Failed to save reviews")

    return RatingResult(
        accepted=entry is not None,
        entry=entry,
        session=_state(session_id, session),
    )


@router.post("/review-sessions/{session_id}/position", response_model=SessionState)
async def move_review_session(session_id: str, body: PositionRequest) -> SessionState:
    session = _require_session(session_id)
    try:
        session.go_to(body.index)
    except InvalidPositionError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return _state(session_id, session)


@router.post("/review-sessions/{session_id}/reset", response_model=SessionState)
async def reset_review_session(session_id: str) -> SessionState:
    session = _require_session(session_id)
    session.reset_session()
    return _state(session_id, session)


@router.post("/review-sessions/{session_id}/shuffle", response_model=SessionState)
async def shuffle_review_session(session_id: str) -> SessionState:
    session = _require_session(session_id)
    session.shuffle()
    return _state(session_id, session)


@router.delete("/review-sessions/{session_id}", status_code=204)
async def delete_review_session(session_id: str) -> None:
    if not discard_session(session_id):
        raise HTTPException(status_code=404, detail="Review session not found")
