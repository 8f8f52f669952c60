import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, AsyncIterator

import aiosqlite
from pydantic import ValidationError

from lessonreview.config import settings
from lessonreview.models.flashcard import FlashcardsContent
from lessonreview.models.review import ReviewData

logger = logging.getLogger(__name__)

_db_path: Path | None = None

SCHEMA_SQL = """
PRAGMA journal_mode=WAL;

CREATE TABLE IF NOT EXISTS flashcard_sets (
    course_id   TEXT NOT NULL,
    lesson_id   TEXT NOT NULL,
    content     TEXT NOT NULL,
    updated_at  TEXT NOT NULL DEFAULT (datetime('now')),
    PRIMARY KEY (course_id, lesson_id)
);

CREATE TABLE IF NOT EXISTS reviews (
    course_id   TEXT NOT NULL,
    lesson_id   TEXT NOT NULL,
    data        TEXT NOT NULL,
    updated_at  TEXT NOT NULL DEFAULT (datetime('now')),
    PRIMARY KEY (course_id, lesson_id)
);

CREATE TABLE IF NOT EXISTS schema_version (
    version    INTEGER PRIMARY KEY,
    applied_at TEXT NOT NULL DEFAULT (datetime('now'))
);
INSERT OR IGNORE INTO schema_version(version) VALUES (1);
"""


async def init_sqlite(data_dir: Path) -> None:
    global _db_path
    _db_path = data_dir / settings.sqlite_filename
    async with aiosqlite.connect(_db_path) as db:
        await db.executescript(SCHEMA_SQL)
        await db.commit()


def _connect() -> aiosqlite.Connection:
    assert _db_path is not None, "SQLite not initialized"
    return aiosqlite.connect(_db_path)


async def get_db() -> AsyncIterator[aiosqlite.Connection]:
    async with _connect() as db:
        db.row_factory = aiosqlite.Row
        yield db


def _now() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")


def _decode(raw: str, what: str) -> Any | None:
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Stored %s is not valid JSON; ignoring it", what)
        return None


# --- Flashcard sets ---


async def get_flashcards(
    db: aiosqlite.Connection, course_id: str, lesson_id: str
) -> FlashcardsContent | None:
    cursor = await db.execute(
        "SELECT content FROM flashcard_sets WHERE course_id = ? AND lesson_id = ?",
        (course_id, lesson_id),
    )
    row = await cursor.fetchone()
    if row is None:
        return None
    content = _decode(row[0], f"flashcards for {course_id}/{lesson_id}")
    if content is None:
        return None
    try:
        return FlashcardsContent.model_validate(content)
    except ValidationError as e:
        logger.warning(
            "Ignoring malformed flashcards for %s/%s (%d errors)",
            course_id,
            lesson_id,
            e.error_count(),
        )
        return None


async def put_flashcards(
    db: aiosqlite.Connection,
    course_id: str,
    lesson_id: str,
    content: FlashcardsContent,
) -> None:
    await db.execute(
        "INSERT INTO flashcard_sets(course_id, lesson_id, content, updated_at) "
        "VALUES (?, ?, ?, ?) "
        "ON CONFLICT(course_id, lesson_id) DO UPDATE SET "
        "content = excluded.content, updated_at = excluded.updated_at",
        (course_id, lesson_id, content.model_dump_json(), _now()),
    )
    await db.commit()


async def delete_flashcards(
    db: aiosqlite.Connection, course_id: str, lesson_id: str
) -> bool:
    cursor = await db.execute(
        "DELETE FROM flashcard_sets WHERE course_id = ? AND lesson_id = ?",
        (course_id, lesson_id),
    )
    await db.commit()
    return (cursor.rowcount or 0) > 0


# --- Review data ---


async def get_reviews(
    db: aiosqlite.Connection, course_id: str, lesson_id: str
) -> dict[str, Any] | None:
    """Return the raw stored review payload; validation is the caller's job."""
    cursor = await db.execute(
        "SELECT data FROM reviews WHERE course_id = ? AND lesson_id = ?",
        (course_id, lesson_id),
    )
    row = await cursor.fetchone()
    if row is None:
        return None
    return _decode(row[0], f"reviews for {course_id}/{lesson_id}")


async def put_reviews(
    db: aiosqlite.Connection, course_id: str, lesson_id: str, data: ReviewData
) -> None:
    await db.execute(
        "INSERT INTO reviews(course_id, lesson_id, data, updated_at) "
        "VALUES (?, ?, ?, ?) "
        "ON CONFLICT(course_id, lesson_id) DO UPDATE SET "
        "data = excluded.data, updated_at = excluded.updated_at",
        (course_id, lesson_id, data.model_dump_json(by_alias=True), _now()),
    )
    await db.commit()


class SqliteReviewStore:
    """
    Review load/save bound to one course.

    Opens its own connection per call: review sessions outlive the request
    that created them.
    """

    def __init__(self, course_id: str) -> None:
        self.course_id = course_id

    async def load(self, lesson_id: str) -> dict[str, Any] | None:
        async with _connect() as db:
            return await get_reviews(db, self.course_id, lesson_id)

    async def save(self, data: ReviewData) -> None:
        async with _connect() as db:
            await put_reviews(db, self.course_id, data.lesson_id, data)
