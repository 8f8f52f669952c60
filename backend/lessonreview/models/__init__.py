from lessonreview.models.flashcard import Flashcard, FlashcardsContent
from lessonreview.models.review import ReviewData, ReviewEntry, SaveResult
from lessonreview.models.session import (
    PositionRequest,
    QualityPreset,
    RatingRequest,
    RatingResult,
    SessionCreate,
    SessionState,
    SessionStats,
)

__all__ = [
    "Flashcard",
    "FlashcardsContent",
    "PositionRequest",
    "QualityPreset",
    "RatingRequest",
    "RatingResult",
    "ReviewData",
    "ReviewEntry",
    "SaveResult",
    "SessionCreate",
    "SessionState",
    "SessionStats",
]
