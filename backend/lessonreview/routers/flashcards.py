import aiosqlite
from fastapi import APIRouter, Depends, HTTPException

from lessonreview.db.sqlite import delete_flashcards, get_db, get_flashcards, put_flashcards
from lessonreview.models.flashcard import FlashcardsContent
from lessonreview.models.review import SaveResult

router = APIRouter()


@router.get("/{course_id}/lessons/{lesson_id}/flashcards", response_model=FlashcardsContent)
async def get_lesson_flashcards(
    course_id: str, lesson_id: str, db: aiosqlite.Connection = Depends(get_db)
):
    content = await get_flashcards(db, course_id, lesson_id)
    if not content:
        raise HTTPException(status_code=404, detail="Flashcards not found")
    return content


@router.put("/{course_id}/lessons/{lesson_id}/flashcards", response_model=SaveResult)
async def put_lesson_flashcards(
    course_id: str,
    lesson_id: str,
    body: FlashcardsContent,
    db: aiosqlite.Connection = Depends(get_db),
):
    ids = [card.id for card in body.flashcards]
    if len(ids) != len(set(ids)):
        raise HTTPException(status_code=422, detail="Flashcard ids must be unique")
    await put_flashcards(db, course_id, lesson_id, body)
    return SaveResult(success=True)


@router.delete("/{course_id}/lessons/{lesson_id}/flashcards", status_code=204)
async def delete_lesson_flashcards(
    course_id: str, lesson_id: str, db: aiosqlite.Connection = Depends(get_db)
) -> None:
    deleted = await delete_flashcards(db, course_id, lesson_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Flashcards not found")
