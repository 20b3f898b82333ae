from datetime import datetime, timezone

import pytest

from api.backend import BackendAPI
from extraction.transcript_parser import TranscriptParser
from storage.parse_log_store import InMemoryParseLogStore
from storage.task_store import InMemoryTaskStore
from voice_tasks.config import ParserConfig

# Friday
REFERENCE_NOW = datetime(2025, 1, 10, 9, 0, tzinfo=timezone.utc)


class FakeProvider:
    name = "fake"

    def __init__(self, response_text: str = "{}", error: Exception = None):
        self._response_text = response_text
        self._error = error
        self.calls = []

    def generate(self, *, system: str, user: str) -> str:
        self.calls.append(user)
        if self._error is not None:
            raise self._error
        return self._response_text


@pytest.fixture
def fake_provider_factory():
    def _make(response_text: str = "{}", error: Exception = None):
        return FakeProvider(response_text, error=error)
    return _make


@pytest.fixture
def reference_now():
    return REFERENCE_NOW


@pytest.fixture
def parser():
    return TranscriptParser(ParserConfig(), clock=lambda: REFERENCE_NOW)


@pytest.fixture
def backend(parser):
    return BackendAPI(parser, InMemoryParseLogStore(), InMemoryTaskStore())


@pytest.fixture
def client(parser):
    from fastapi.testclient import TestClient
    from api import dependencies
    from api.main import app

    tasks = InMemoryTaskStore()
    logs = InMemoryParseLogStore()
    app.dependency_overrides[dependencies.get_parser] = lambda: parser
    app.dependency_overrides[dependencies.get_task_store] = lambda: tasks
    app.dependency_overrides[dependencies.get_parse_log_store] = lambda: logs
    yield TestClient(app)
    app.dependency_overrides.clear()
