from __future__ import annotations

import logging
import time
import uuid
from collections import OrderedDict

from lessonreview.config import settings
from lessonreview.services.session import ReviewSession

logger = logging.getLogger(__name__)

_clock = time.monotonic

# session_id -> (session, last access); least recently used first
_active_sessions: OrderedDict[str, tuple[ReviewSession, float]] = OrderedDict()


def _evict_stale() -> None:
    """Drop sessions idle longer than the TTL, then the oldest beyond the cap."""
    now = _clock()
    for session_id, (session, last_used) in list(_active_sessions.items()):
        if now - last_used > settings.session_ttl_seconds and not session.is_saving:
            del _active_sessions[session_id]
            logger.info("Evicted idle review session %s (lesson %s)", session_id, session.lesson_id)

    while len(_active_sessions) > settings.max_active_sessions:
        session_id, (session, _) = _active_sessions.popitem(last=False)
        logger.info("Evicted review session %s (lesson %s): too many active", session_id, session.lesson_id)


def register_session(session: ReviewSession) -> str:
    """Keep a session alive between requests and return its ID."""
    session_id = str(uuid.uuid4())
    _active_sessions[session_id] = (session, _clock())
    _evict_stale()
    return session_id


def get_session(session_id: str) -> ReviewSession | None:
    _evict_stale()
    item = _active_sessions.get(session_id)
    if item is None:
        return None
    session = item[0]
    _active_sessions[session_id] = (session, _clock())
    _active_sessions.move_to_end(session_id)
    return session


def active_session_count() -> int:
    return len(_active_sessions)


def discard_session(session_id: str) -> bool:
    item = _active_sessions.pop(session_id, None)
    if item is None:
        return False
    logger.info("Discarded review session %s (lesson %s)", session_id, item[0].lesson_id)
    return True


def clear_sessions() -> None:
    _active_sessions.clear()
