import asyncio
from datetime import datetime, timezone

import pytest

from storage.task_store import TaskFilters
from voice_tasks.errors import InvalidTranscriptError, LogAlreadyLinkedError, NotFoundError
from voice_tasks.models import ParsedTaskData, Priority


def test_parse_transcript_records_a_log(backend):
    async def _run():
        result = await backend.parse_transcript("Urgent: call the plumber tomorrow, the sink leaks")
        log = await backend.get_parsing_log(result.parsed_log_id)
        return result, log

    result, log = asyncio.run(_run())
    assert result.parsed.title == "Urgent: call the plumber tomorrow"
    assert result.parsed.priority == Priority.CRITICAL
    assert log.parsed_data == result.parsed
    assert log.confidence == result.confidence
    assert log.linked_task_id is None
    assert log.task is None


def test_invalid_transcript_records_nothing(backend):
    with pytest.raises(InvalidTranscriptError):
        asyncio.run(backend.parse_transcript("too short"))
    assert backend.parse_logs._logs == {}


def test_create_task_from_asserted_data(backend):
    parsed = ParsedTaskData(title="Pay rent", priority=Priority.HIGH,
                            due_date=datetime(2025, 2, 1, 9, 0))

    async def _run():
        created = await backend.create_task_from_parse("Pay the rent on February 1st", parsed,
                                                       timezone="Europe/Berlin")
        log = await backend.get_parsing_log(created.parse_log.id)
        return created, log

    created, log = asyncio.run(_run())
    task = created.task
    assert task.title == "Pay rent"
    assert task.raw_transcript == "Pay the rent on February 1st"
    assert task.due_date.utcoffset().total_seconds() == 3600
    assert created.parse_log.linked_task_id == task.id
    assert created.parse_log.confidence.overall == 1.0
    assert log.task == task


def test_create_task_links_existing_parse(backend):
    async def _run():
        parsed = await backend.parse_transcript("Remind me to book the venue by Monday")
        created = await backend.create_task_from_parse(
            parsed.raw_transcript, parsed.parsed, parse_log_id=parsed.parsed_log_id
        )
        with pytest.raises(LogAlreadyLinkedError):
            await backend.create_task_from_parse(
                parsed.raw_transcript, parsed.parsed, parse_log_id=parsed.parsed_log_id
            )
        return parsed, created

    parsed, created = asyncio.run(_run())
    assert created.parse_log.id == parsed.parsed_log_id
    assert created.parse_log.confidence == parsed.confidence
    # the rejected second attempt must not leave a task behind
    _, total = asyncio.run(backend.tasks.list(TaskFilters()))
    assert total == 1


def test_create_task_with_unknown_log(backend):
    parsed = ParsedTaskData(title="Pay rent")
    with pytest.raises(NotFoundError):
        asyncio.run(backend.create_task_from_parse("Pay the rent soon", parsed, parse_log_id="missing"))


def test_log_survives_task_deletion(backend):
    async def _run():
        created = await backend.create_task_from_parse(
            "Water the plants today", ParsedTaskData(title="Water the plants")
        )
        await backend.tasks.delete(created.task.id)
        return created, await backend.get_parsing_log(created.parse_log.id)

    created, log = asyncio.run(_run())
    assert log.linked_task_id == created.task.id
    assert log.task is None


def test_create_task_rejects_short_transcript(backend):
    with pytest.raises(InvalidTranscriptError):
        asyncio.run(backend.create_task_from_parse("Milk", ParsedTaskData(title="Buy milk")))
