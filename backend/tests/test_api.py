import sqlite3

import pytest

from lessonreview.config import settings

FLASHCARDS = {
    "version": 1,
    "flashcards": [
        {"id": "a", "question": "Q1", "answer": "A1"},
        {"id": "b", "question": "Q2", "answer": "A2", "hint": "H2"},
    ],
}
LESSON_URL = "/courses/course-1/lessons/lesson-1"


@pytest.fixture
def lesson(client):
    resp = client.put(f"{LESSON_URL}/flashcards", json=FLASHCARDS)
    assert resp.status_code == 200
    return LESSON_URL


def _start(client, lesson, force_all=False):
    resp = client.post(f"{lesson}/review-sessions", json={"force_all": force_all})
    assert resp.status_code == 201
    return resp.json()


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_flashcards_roundtrip_and_delete(client, lesson):
    resp = client.get(f"{lesson}/flashcards")
    assert resp.status_code == 200
    assert [c["id"] for c in resp.json()["flashcards"]] == ["a", "b"]

    assert client.delete(f"{lesson}/flashcards").status_code == 204
    assert client.get(f"{lesson}/flashcards").status_code == 404
    assert client.delete(f"{lesson}/flashcards").status_code == 404


def test_flashcards_with_duplicate_ids_rejected(client):
    body = {"flashcards": [{"id": "a", "question": "Q", "answer": "A"}] * 2}

    assert client.put(f"{LESSON_URL}/flashcards", json=body).status_code == 422


def test_reviews_not_found(client):
    resp = client.get(f"{LESSON_URL}/reviews")

    assert resp.status_code == 404
    assert resp.json()["detail"] == "Reviews not found"


def test_put_and_get_reviews(client):
    body = {
        "lessonId": "lesson-1",
        "entries": [
            {
                "itemId": "a",
                "repetitions": 1,
                "easeFactor": 2.6,
                "interval": 1,
                "lastReviewedAt": "2026-02-22T10:00:00Z",
                "nextReviewAt": "2026-02-23T10:00:00Z",
            }
        ],
    }

    resp = client.put(f"{LESSON_URL}/reviews", json=body)
    assert resp.json() == {"success": True}

    data = client.get(f"{LESSON_URL}/reviews").json()
    assert data["lessonId"] == "lesson-1"
    assert data["entries"][0]["itemId"] == "a"
    assert data["entries"][0]["easeFactor"] == 2.6


def test_put_reviews_for_other_lesson_rejected(client):
    resp = client.put(f"{LESSON_URL}/reviews", json={"lessonId": "other", "entries": []})

    assert resp.status_code == 400


def test_session_requires_flashcards(client):
    assert client.post(f"{LESSON_URL}/review-sessions", json={}).status_code == 404


def test_review_session_flow_persists_reviews(client, lesson):
    state = _start(client, lesson)
    session_url = f"/review-sessions/{state['session_id']}"

    assert state["total"] == 2
    assert state["new_count"] == 2
    assert state["current_card"]["id"] == "a"

    resp = client.post(f"{session_url}/ratings", json={"quality": 5})
    assert resp.status_code == 200
    result = resp.json()
    assert result["accepted"] is True
    assert result["entry"]["itemId"] == "a"
    assert result["entry"]["repetitions"] == 1
    assert result["session"]["current_card"]["id"] == "b"

    result = client.post(f"{session_url}/ratings", json={"quality": 1}).json()
    assert result["session"]["session_complete"] is True
    assert result["session"]["current_card"] is None
    assert result["session"]["stats"] == {"hard": 1, "good": 0, "easy": 1, "unanswered": 0}

    # a rating after completion is ignored
    result = client.post(f"{session_url}/ratings", json={"quality": 4}).json()
    assert result["accepted"] is False
    assert result["entry"] is None

    reviews = client.get(f"{lesson}/reviews").json()
    assert sorted(e["itemId"] for e in reviews["entries"]) == ["a", "b"]

    # both cards are now scheduled for tomorrow, so a fresh session is empty
    assert _start(client, lesson)["session_complete"] is True
    assert _start(client, lesson, force_all=True)["total"] == 2


def test_reset_and_discard_session(client, lesson):
    state = _start(client, lesson)
    session_url = f"/review-sessions/{state['session_id']}"
    client.post(f"{session_url}/ratings", json={"quality": 5})

    state = client.post(f"{session_url}/reset").json()
    assert state["current_index"] == 0
    assert state["stats"]["unanswered"] == 2

    result = client.post(f"{session_url}/ratings", json={"quality": 5}).json()
    assert result["entry"]["repetitions"] == 2
    assert result["entry"]["interval"] == 6

    assert client.delete(session_url).status_code == 204
    assert client.get(session_url).status_code == 404
    assert client.delete(session_url).status_code == 404


@pytest.mark.parametrize("quality", [-1, 6])
def test_out_of_range_quality_rejected(client, lesson, quality):
    state = _start(client, lesson)
    session_url = f"/review-sessions/{state['session_id']}"

    resp = client.post(f"{session_url}/ratings", json={"quality": quality})

    assert resp.status_code == 422
    assert client.get(session_url).json()["current_index"] == 0


def test_unknown_session(client):
    assert client.get("/review-sessions/missing").status_code == 404
    assert client.post("/review-sessions/missing/ratings", json={"quality": 3}).status_code == 404


def test_quality_presets(client):
    presets = client.get("/review-sessions/presets").json()

    assert [p["quality"] for p in presets] == [1, 3, 4, 5]
    assert presets[-1]["label"] == "Knew immediately"


def test_position_skips_cards_without_rating(client, lesson):
    state = _start(client, lesson)
    session_url = f"/review-sessions/{state['session_id']}"

    state = client.post(f"{session_url}/position", json={"index": 1}).json()
    assert state["current_card"]["id"] == "b"

    state = client.post(f"{session_url}/position", json={"index": 2}).json()
    assert state["session_complete"] is True
    assert state["stats"]["unanswered"] == 2
    assert client.get(f"{lesson}/reviews").status_code == 404


@pytest.mark.parametrize("index", [-1, 3])
def test_position_out_of_bounds(client, lesson, index):
    state = _start(client, lesson)
    session_url = f"/review-sessions/{state['session_id']}"

    assert client.post(f"{session_url}/position", json={"index": index}).status_code == 422
    assert client.get(session_url).json()["current_index"] == 0


def test_shuffle_restarts_pass(client, lesson):
    state = _start(client, lesson)
    session_url = f"/review-sessions/{state['session_id']}"
    client.post(f"{session_url}/ratings", json={"quality": 4})

    state = client.post(f"{session_url}/shuffle").json()

    assert state["current_index"] == 0
    assert state["total"] == 2
    assert state["stats"]["unanswered"] == 2


def test_malformed_stored_flashcards_treated_as_missing(client, tmp_path):
    with sqlite3.connect(tmp_path / settings.sqlite_filename) as conn:
        conn.execute(
            "INSERT INTO flashcard_sets(course_id, lesson_id, content) VALUES (?, ?, ?)",
            ("course-1", "lesson-1", '{"flashcards": [{"id": "a"}]}'),
        )

    assert client.get(f"{LESSON_URL}/flashcards").status_code == 404
    assert client.post(f"{LESSON_URL}/review-sessions", json={}).status_code == 404
