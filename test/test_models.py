import pytest
from pydantic import ValidationError

from voice_tasks.config import ParserConfig
from voice_tasks.errors import InvalidTranscriptError, ParsingProviderError
from voice_tasks.models import (
    ConfidenceScore,
    ParsedTaskData,
    Priority,
    TaskCreate,
    TaskStatus,
)


def test_parsed_task_defaults():
    p = ParsedTaskData(title="  Test  ")
    assert p.title == "Test"
    assert p.priority == Priority.MEDIUM
    assert p.status == TaskStatus.TODO
    assert p.due_date is None


def test_parsed_task_limits():
    with pytest.raises(ValidationError):
        ParsedTaskData(title="   ")
    with pytest.raises(ValidationError):
        ParsedTaskData(title="x" * 201)
    with pytest.raises(ValidationError):
        ParsedTaskData(title="ok", description="x" * 2001)
    assert ParsedTaskData(title="ok", description="  ").description is None


def test_camel_case_aliases():
    p = ParsedTaskData.model_validate({"title": "Dentist", "dueDate": "2025-02-03T10:00:00Z"})
    assert p.due_date is not None
    assert "dueDate" in p.model_dump(by_alias=True)


def test_confidence_bounds():
    with pytest.raises(ValidationError):
        ConfidenceScore(overall=1.2, title=1.0, priority=1.0, due_date=1.0)
    assert ConfidenceScore.full().overall == 1.0


def test_task_create_from_parsed():
    parsed = ParsedTaskData(title="Pay rent", priority=Priority.HIGH)
    create = TaskCreate.from_parsed(parsed, raw_transcript="Pay the rent, important")
    assert create.title == "Pay rent"
    assert create.priority == Priority.HIGH
    assert create.raw_transcript == "Pay the rent, important"


def test_error_wire_shape():
    err = InvalidTranscriptError("too short", details={"length": 3, "minimum": 10})
    assert err.status_code == 400
    assert err.to_dict() == {
        "error": "InvalidTranscriptError",
        "message": "too short",
        "details": {"length": 3, "minimum": 10},
    }
    assert ParsingProviderError("x").status_code == 502


def test_config_from_env(monkeypatch):
    monkeypatch.setenv("VOICE_PARSING_PROVIDER", " Mock ")
    monkeypatch.setenv("VOICE_FALLBACK_ENABLED", "false")
    monkeypatch.setenv("VOICE_MIN_TRANSCRIPT_LENGTH", "5")
    config = ParserConfig.from_env()
    assert config.provider == "mock"
    assert config.uses_llm
    assert config.fallback_enabled is False
    assert config.min_transcript_length == 5
    assert not ParserConfig().uses_llm
