from __future__ import annotations

from pydantic import BaseModel


class Flashcard(BaseModel):
    id: str
    question: str
    answer: str
    hint: str | None = None
    difficulty: str | None = None  # easy | medium | hard, informational only


class FlashcardsContent(BaseModel):
    version: int = 1
    flashcards: list[Flashcard]
