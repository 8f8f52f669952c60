"""
Review session controller.

A ReviewSession walks a learner through the cards of one SessionPlan:

  1. current_card is the card at current_index (None once the pass is complete)
  2. rate_card(q) runs SM-2 for that card, advances immediately, then awaits
     the injected store's save() with the full entries map
  3. reset_session() starts another pass over the same cards, keeping the
     entries accumulated so far
  4. go_to(i) skips ahead or back without rating; shuffle() reorders the
     cards and resets the pass

Ratings submitted while a save is in flight are dropped, not queued.
"""
from __future__ import annotations

import asyncio
import logging
import random
from datetime import datetime, timezone
from typing import Any, Protocol

from lessonreview.models.flashcard import Flashcard
from lessonreview.models.review import ReviewData, ReviewEntry
from lessonreview.models.session import SessionStats
from lessonreview.services.scheduler import MAX_QUALITY, MIN_QUALITY, PASSING_QUALITY, apply_sm2
from lessonreview.services.session_builder import SessionPlan, build_session, load_review_data

logger = logging.getLogger(__name__)


class ReviewStore(Protocol):
    async def load(self, lesson_id: str) -> dict[str, Any] | None: ...

    async def save(self, data: ReviewData) -> None: ...


class InvalidQualityError(ValueError):
    """Raised when a rating is not an integer in [0, 5]."""


class InvalidPositionError(ValueError):
    """Raised when moving to a position outside the session."""


class ReviewSaveError(Exception):
    """Raised when persisting review data fails or times out."""


class ReviewSession:
    def __init__(
        self,
        plan: SessionPlan,
        lesson_id: str,
        store: ReviewStore,
        save_timeout: float | None = None,
    ) -> None:
        self.lesson_id = lesson_id
        self.session_cards = plan.session_cards
        self.due_count = plan.due_count
        self.new_count = plan.new_count
        self.entries_map: dict[str, ReviewEntry] = dict(plan.entries_map)
        self.current_index = 0
        self.is_saving = False
        self._store = store
        self._save_timeout = save_timeout
        # position in session_cards -> quality given during the current pass
        self._pass_ratings: dict[int, int] = {}

    @property
    def session_complete(self) -> bool:
        return self.current_index >= len(self.session_cards)

    @property
    def current_card(self) -> Flashcard | None:
        if self.session_complete:
            return None
        return self.session_cards[self.current_index]

    async def rate_card(self, quality: int) -> ReviewEntry | None:
        """
        Rate the current card. Returns the new entry, or None if the rating was
        ignored (no current card, or a save still pending).

        Raises InvalidQualityError for ratings outside 0–5 and ReviewSaveError
        when the store fails; in the latter case the session has still advanced.
        """
        card = self.current_card
        if card is None:
            logger.debug("Ignoring rating for lesson %s: session complete", self.lesson_id)
            return None

        if (
            isinstance(quality, bool)
            or not isinstance(quality, int)
            or not MIN_QUALITY <= quality <= MAX_QUALITY
        ):
            raise InvalidQualityError(f"quality must be an integer 0–5, got {quality!r}")

        if self.is_saving:
            logger.debug("Dropping rating for card %s: save in flight", card.id)
            return None

        entry = apply_sm2(self.entries_map.get(card.id), quality, card.id)
        self.entries_map[card.id] = entry
        self._pass_ratings[self.current_index] = quality
        self.current_index += 1
        if self.session_complete:
            logger.info(
                "Review pass complete for lesson %s (%d cards)",
                self.lesson_id,
                len(self.session_cards),
            )

        self.is_saving = True
        data = ReviewData(lesson_id=self.lesson_id, entries=list(self.entries_map.values()))
        try:
            if self._save_timeout is None:
                await self._store.save(data)
            else:
                await asyncio.wait_for(self._store.save(data), self._save_timeout)
        except Exception as e:
            logger.exception("Saving reviews failed for lesson %s", self.lesson_id)
            raise ReviewSaveError(f"Failed to save reviews for lesson {self.lesson_id}") from e
        finally:
            self.is_saving = False

        return entry

    def reset_session(self) -> None:
        # Soft reset: entries rated during earlier passes are kept
        self.current_index = 0
        self._pass_ratings.clear()
        logger.info("Review session reset for lesson %s", self.lesson_id)

    def go_to(self, index: int) -> None:
        """
        Move to another card without rating the current one.

        index == len(session_cards) ends the pass. Skipped cards stay unanswered.
        """
        total = len(self.session_cards)
        if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index <= total:
            raise InvalidPositionError(
                f"position must be between 0 and {total}, got {index!r}"
            )
        self.current_index = index

    def shuffle(self, rng: random.Random | None = None) -> None:
        """Reorder the session cards and start a new pass over them."""
        (rng or random.Random()).shuffle(self.session_cards)
        self.reset_session()

    def stats(self) -> SessionStats:
        stats = SessionStats(unanswered=len(self.session_cards) - len(self._pass_ratings))
        for q in self._pass_ratings.values():
            if q < PASSING_QUALITY:
                stats.hard += 1
            elif q == PASSING_QUALITY:
                stats.good += 1
            else:
                stats.easy += 1
        return stats


async def start_session(
    store: ReviewStore,
    lesson_id: str,
    cards: list[Flashcard],
    force_all: bool = False,
    now: datetime | None = None,
    save_timeout: float | None = None,
) -> ReviewSession:
    """Load stored reviews for the lesson and open a session over `cards`."""
    review_data = load_review_data(await store.load(lesson_id))
    plan = build_session(
        cards,
        review_data,
        now or datetime.now(timezone.utc),
        force_all=force_all,
    )
    logger.info(
        "Starting review session for lesson %s: %d due, %d new",
        lesson_id,
        plan.due_count,
        plan.new_count,
    )
    return ReviewSession(plan, lesson_id, store, save_timeout=save_timeout)
