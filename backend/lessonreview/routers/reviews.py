import aiosqlite
from fastapi import APIRouter, Depends, HTTPException

from lessonreview.db.sqlite import get_db, get_reviews, put_reviews
from lessonreview.models.review import ReviewData, SaveResult
from lessonreview.services.session_builder import load_review_data

router = APIRouter()


@router.get("/{course_id}/lessons/{lesson_id}/reviews", response_model=ReviewData)
async def get_lesson_reviews(
    course_id: str, lesson_id: str, db: aiosqlite.Connection = Depends(get_db)
):
    data = load_review_data(await get_reviews(db, course_id, lesson_id))
    if data is None:
        raise HTTPException(status_code=404, detail="Reviews not found")
    return data


@router.put("/{course_id}/lessons/{lesson_id}/reviews", response_model=SaveResult)
async def put_lesson_reviews(
    course_id: str,
    lesson_id: str,
    body: ReviewData,
    db: aiosqlite.Connection = Depends(get_db),
):
    if body.lesson_id != lesson_id:
        raise HTTPException(status_code=400, detail="lessonId does not match the URL")
    await put_reviews(db, course_id, lesson_id, body)
    return SaveResult(success=True)
