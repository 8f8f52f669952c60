"""
SM-2 scheduling engine.

apply_sm2() takes a card's previous review entry (or None for a card that
has never been rated) plus a 0–5 quality rating and returns the next entry.
Pure: no I/O, and quality is not validated here.
"""
from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone

from lessonreview.models.review import ReviewEntry

MIN_QUALITY = 0
MAX_QUALITY = 5
PASSING_QUALITY = 3

DEFAULT_EASE_FACTOR = 2.5
MIN_EASE_FACTOR = 1.3
FIRST_INTERVAL = 1   # days
SECOND_INTERVAL = 6  # days

# Rating buttons offered to learners: (quality, label)
QUALITY_PRESETS = [
    (1, "Didn't know"),
    (3, "Knew after hint"),
    (4, "Knew after hesitation"),
    (5, "Knew immediately"),
]


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def next_ease_factor(ease_factor: float, quality: int) -> float:
    """Standard SM-2 EF update, floored at MIN_EASE_FACTOR."""
    miss = MAX_QUALITY - quality
    return max(MIN_EASE_FACTOR, ease_factor + 0.1 - miss * (0.08 + miss * 0.02))


def apply_sm2(
    entry: ReviewEntry | None,
    quality: int,
    item_id: str,
    now: datetime | None = None,
) -> ReviewEntry:
    """
    Compute the review entry that follows a rating of `quality`.

    A missing entry starts from repetitions=0, ease_factor=2.5, interval=1.
    """
    if now is None:
        now = datetime.now(timezone.utc)

    if entry is None:
        repetitions, ease_factor, interval = 0, DEFAULT_EASE_FACTOR, FIRST_INTERVAL
    else:
        repetitions, ease_factor, interval = (
            entry.repetitions,
            entry.ease_factor,
            entry.interval,
        )

    if quality < PASSING_QUALITY:
        # Failed recall: restart the streak, keep the ease factor
        repetitions = 0
        interval = FIRST_INTERVAL
    else:
        if repetitions == 0:
            interval = FIRST_INTERVAL
        elif repetitions == 1:
            interval = SECOND_INTERVAL
        else:
            interval = max(FIRST_INTERVAL, _round_half_up(interval * ease_factor))
        ease_factor = next_ease_factor(ease_factor, quality)
        repetitions += 1

    return ReviewEntry(
        item_id=item_id,
        repetitions=repetitions,
        ease_factor=ease_factor,
        interval=interval,
        last_reviewed_at=now,
        next_review_at=now + timedelta(days=interval),
    )
