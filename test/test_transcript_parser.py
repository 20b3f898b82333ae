import json
from datetime import datetime, timedelta, timezone

import httpx
import pytest

from extraction.strategies import LLMStrategy
from extraction.transcript_parser import TranscriptParser, resolve_timezone
from llm.llm_client import LLMClient
from voice_tasks.config import ParserConfig
from voice_tasks.errors import InvalidTranscriptError, ParsingProviderError
from voice_tasks.models import Priority, TaskStatus

from conftest import REFERENCE_NOW


def test_parse_end_to_end(parser):
    result = parser.parse("Create a high priority task to review the pull request by tomorrow")
    parsed = result.parsed
    assert parsed.title == "Review the pull request by tomorrow"
    assert parsed.description is None
    assert parsed.priority == Priority.HIGH
    assert parsed.status == TaskStatus.TODO
    assert parsed.due_date == datetime(2025, 1, 11, tzinfo=timezone.utc)
    assert result.strategy == "rules"
    assert result.fallback_used is False
    assert result.confidence.due_date == 0.9
    assert result.confidence.priority == pytest.approx(1 / 6)
    assert result.confidence.title == 1.0


def test_short_transcript_rejected(parser):
    with pytest.raises(InvalidTranscriptError) as exc:
        parser.parse("short one")
    assert exc.value.details == {"length": 9, "minimum": 10}


def test_minimum_length_accepted(parser):
    result = parser.parse("Buy milk!!")
    assert result.parsed.title == "Buy milk"


def test_parse_is_idempotent(parser):
    text = "Urgent: fix the login bug before Monday"
    assert parser.parse(text) == parser.parse(text)


def test_dates_resolve_in_caller_timezone(parser):
    result = parser.parse("Water the plants tomorrow", timezone="America/New_York")
    due = result.parsed.due_date
    # 09:00 UTC is still Jan 10 in New York
    assert due.replace(tzinfo=None) == datetime(2025, 1, 11)
    assert due.utcoffset() == timedelta(hours=-5)


def test_unknown_timezone_uses_utc(parser):
    result = parser.parse("Water the plants tomorrow", timezone="Mars/Olympus_Mons")
    assert result.parsed.due_date == datetime(2025, 1, 11, tzinfo=timezone.utc)
    assert resolve_timezone("Mars/Olympus_Mons") is timezone.utc


def _llm_parser(provider, fallback_enabled=True):
    config = ParserConfig(provider="fake", fallback_enabled=fallback_enabled)
    return TranscriptParser(
        config,
        strategy=LLMStrategy(LLMClient(provider)),
        clock=lambda: REFERENCE_NOW,
    )


def test_provider_failure_falls_back_to_rules(fake_provider_factory):
    provider = fake_provider_factory(error=httpx.ConnectTimeout("timed out"))
    result = _llm_parser(provider).parse("Call the bank tomorrow about the loan")
    assert result.strategy == "rules"
    assert result.fallback_used is True
    assert result.parsed.title == "Call the bank tomorrow about the loan"
    assert len(provider.calls) == 1


def test_provider_failure_without_fallback(fake_provider_factory):
    provider = fake_provider_factory("no json at all")
    with pytest.raises(ParsingProviderError):
        _llm_parser(provider, fallback_enabled=False).parse("Call the bank tomorrow")


def test_llm_fields_are_scored_locally(fake_provider_factory):
    provider = fake_provider_factory(json.dumps({
        "title": "Fix login bug",
        "priority": "CRITICAL",
        "dueDate": "2025-01-13T00:00:00",
        "status": "TODO",
    }))
    result = _llm_parser(provider).parse("Urgent: fix the login bug before Monday")
    assert result.strategy == "llm"
    assert result.parsed.title == "Fix login bug"
    assert result.parsed.due_date == datetime(2025, 1, 13, tzinfo=timezone.utc)
    assert result.confidence.due_date == 0.9
    assert result.confidence.priority == pytest.approx(1 / 6)
    assert "Friday" in provider.calls[0]


def test_trailing_priority_clause(parser):
    result = parser.parse("Review the pull request by tomorrow, high priority")
    assert result.parsed.title == "Review the pull request by tomorrow"
    assert result.parsed.description == "high priority"
    assert result.parsed.priority == Priority.HIGH
    assert result.parsed.due_date == datetime(2025, 1, 11, tzinfo=timezone.utc)
    assert result.confidence.priority > 0
