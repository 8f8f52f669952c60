import pytest
from fastapi.testclient import TestClient

from lessonreview import create_app
from lessonreview.config import settings
from lessonreview.models.flashcard import Flashcard


@pytest.fixture
def cards():
    return [
        Flashcard(id="a", question="Q1", answer="A1", difficulty="easy"),
        Flashcard(id="b", question="Q2", answer="A2", difficulty="medium"),
        Flashcard(id="c", question="Q3", answer="A3", difficulty="hard"),
        Flashcard(id="d", question="Q4", answer="A4", hint="starts with A"),
    ]


@pytest.fixture
def client(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "data_dir", tmp_path)
    with TestClient(create_app()) as test_client:
        yield test_client
