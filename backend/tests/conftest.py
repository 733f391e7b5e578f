# Ensure backend is at sys.path[0] when pytest runs (from repo root or from backend dir)
import os
import sys
from pathlib import Path
from types import SimpleNamespace

_tests_dir = Path(__file__).resolve().parent
_backend = _tests_dir.parent
_str_backend = str(_backend)
if sys.path[0:1] != [_str_backend]:
    sys.path.insert(0, _str_backend)

# No log file during tests
os.environ["LOG_FILE"] = ""

import pytest
from fastapi.testclient import TestClient

from database import Database
from providers import GeminiProvider
from services import InterviewAIService, QuestionService


def gemini_response(text):
    """Build a response shaped like the google-genai SDK's GenerateContentResponse."""
    part = SimpleNamespace(text=text)
    content = SimpleNamespace(parts=[part])
    return SimpleNamespace(candidates=[SimpleNamespace(content=content)])


class FakeModels:
    def __init__(self):
        self.responses = []
        self.calls = []

    def generate_content(self, model, contents):
        self.calls.append({"model": model, "contents": contents})
        if not self.responses:
            raise AssertionError("unexpected call to generate_content")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


class FakeGeminiClient:
    def __init__(self):
        self.models = FakeModels()

    def reply(self, text):
        self.models.responses.append(gemini_response(text))

    def reply_raw(self, response):
        self.models.responses.append(response)


@pytest.fixture
def database(tmp_path):
    db = Database(f"sqlite:///{(tmp_path / 'test.db').as_posix()}")
    db.init()
    yield db
    db.dispose()


@pytest.fixture
def question_service(database):
    return QuestionService(database)


@pytest.fixture
def fake_client():
    return FakeGeminiClient()


@pytest.fixture
def provider(fake_client):
    return GeminiProvider(client=fake_client, model="gemini-test")


@pytest.fixture
def ai_service(provider, question_service):
    return InterviewAIService(provider, question_service)


@pytest.fixture
def client(question_service, ai_service):
    import main

    main.app.dependency_overrides[main.get_question_service] = lambda: question_service
    main.app.dependency_overrides[main.get_ai_service] = lambda: ai_service
    try:
        yield TestClient(main.app)
    finally:
        main.app.dependency_overrides.clear()
