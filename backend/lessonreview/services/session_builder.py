from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from pydantic import ValidationError

from lessonreview.models.flashcard import Flashcard
from lessonreview.models.review import ReviewData, ReviewEntry

logger = logging.getLogger(__name__)


@dataclass
class SessionPlan:
    session_cards: list[Flashcard]
    due_count: int
    new_count: int
    entries_map: dict[str, ReviewEntry] = field(default_factory=dict)


def load_review_data(raw: dict[str, Any] | None) -> ReviewData | None:
    """Validate a stored reviews payload. Malformed data counts as no data."""
    if raw is None:
        return None
    try:
        return ReviewData.model_validate(raw)
    except ValidationError as e:
        logger.warning(
            "Ignoring malformed review data (%d errors); all cards treated as new",
            e.error_count(),
        )
        return None


def build_session(
    cards: list[Flashcard],
    review_data: ReviewData | None,
    now: datetime,
    force_all: bool = False,
) -> SessionPlan:
    """
    Order cards into a review session: due cards (earliest first), then new ones.

    Cards whose next review is still in the future are left out unless
    force_all is set, in which case every card is reviewed in its original order.
    """
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    entries_map: dict[str, ReviewEntry] = {}
    if review_data is not None:
        entries_map = {entry.item_id: entry for entry in review_data.entries}

    if force_all:
        return SessionPlan(
            session_cards=list(cards),
            due_count=0,
            new_count=len(cards),
            entries_map=entries_map,
        )

    due: list[Flashcard] = []
    new: list[Flashcard] = []
    for card in cards:
        entry = entries_map.get(card.id)
        if entry is None:
            new.append(card)
        elif entry.next_review_at <= now:
            due.append(card)

    # sorted() is stable, so ties keep their original relative order
    due = sorted(due, key=lambda c: entries_map[c.id].next_review_at)

    return SessionPlan(
        session_cards=due + new,
        due_count=len(due),
        new_count=len(new),
        entries_map=entries_map,
    )
