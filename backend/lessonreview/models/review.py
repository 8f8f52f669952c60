from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

# Stored review documents keep the camelCase keys the study client writes
# (itemId, easeFactor, nextReviewAt, ...).
_camel_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ReviewEntry(BaseModel):
    model_config = _camel_config

    item_id: str
    repetitions: int = Field(ge=0)
    ease_factor: float = Field(ge=1.3)
    interval: int = Field(ge=1)       # days
    last_reviewed_at: datetime
    next_review_at: datetime

    @field_validator("last_reviewed_at", "next_review_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class ReviewData(BaseModel):
    model_config = _camel_config

    lesson_id: str
    entries: list[ReviewEntry] = Field(default_factory=list)

    @model_validator(mode="after")
    def _unique_item_ids(self) -> ReviewData:
        seen: set[str] = set()
        for entry in self.entries:
            if entry.item_id in seen:
                raise ValueError(f"duplicate review entry for item {entry.item_id!r}")
            seen.add(entry.item_id)
        return self


class SaveResult(BaseModel):
    success: bool
