import asyncio
import logging
from typing import Optional

from extraction.transcript_parser import TranscriptParser
from storage.parse_log_store import ParseLogStore
from storage.task_store import TaskStore
from voice_tasks.errors import LogAlreadyLinkedError
from voice_tasks.models import (
    ConfidenceScore,
    CreateTaskResult,
    ParsedTaskData,
    ParseLog,
    ParseResult,
    ParseTranscriptResult,
    TaskCreate,
)

logger = logging.getLogger(__name__)


class BackendAPI:
    """Central orchestration component: parse transcripts, log every parse, create tasks from parses.

    Parse logging and task creation are sequential calls with no transaction
    between them; a log without a linked task is a normal state.
    """

    def __init__(self, parser: TranscriptParser, parse_logs: ParseLogStore, tasks: TaskStore):
        self.parser = parser
        self.parse_logs = parse_logs
        self.tasks = tasks

    async def parse(self, transcript: str, timezone: Optional[str] = None) -> ParseResult:
        # The LLM strategy blocks on HTTP, so extraction runs off the event loop.
        return await asyncio.to_thread(self.parser.parse, transcript, timezone)

    async def parse_transcript(
        self, transcript: str, timezone: Optional[str] = None
    ) -> ParseTranscriptResult:
        result = await self.parse(transcript, timezone)
        log_id = await self.parse_logs.record_parse(transcript, result.parsed, result.confidence)
        logger.info(
            f"Parsed transcript into {result.parsed.title[:40]!r} "
            f"(strategy={result.strategy}, overall={result.confidence.overall:.2f}, log={log_id})"
        )
        return ParseTranscriptResult(
            raw_transcript=transcript,
            parsed=result.parsed,
            confidence=result.confidence,
            strategy=result.strategy,
            fallback_used=result.fallback_used,
            parsed_log_id=log_id,
        )

    async def create_task_from_parse(
        self,
        transcript: str,
        parsed_data: ParsedTaskData,
        timezone: Optional[str] = None,
        parse_log_id: Optional[str] = None,
    ) -> CreateTaskResult:
        """
        Create a task from caller-asserted parsed data.

        With ``parse_log_id`` the task is linked to that earlier parse.
        Otherwise a new log is recorded with full confidence, since nothing
        was inferred, and linked instead.
        """
        self.parser.validate_transcript(transcript)

        if parse_log_id is not None:
            # Checked up front so a bad link never leaves an orphan task behind.
            existing = await self.parse_logs.get_log(parse_log_id)
            if existing.linked_task_id is not None:
                raise LogAlreadyLinkedError(
                    f"Parsing log {parse_log_id} is already linked to task {existing.linked_task_id}"
                )

        due_date = self.parser.localize(parsed_data.due_date, timezone)
        if due_date != parsed_data.due_date:
            parsed_data = parsed_data.model_copy(update={"due_date": due_date})

        task = await self.tasks.create(TaskCreate.from_parsed(parsed_data, raw_transcript=transcript))

        if parse_log_id is None:
            parse_log_id = await self.parse_logs.record_parse(
                transcript, parsed_data, ConfidenceScore.full()
            )
        log = await self.parse_logs.attach_task(parse_log_id, task.id)

        logger.info(f"Created task {task.id} from parse log {parse_log_id}")
        return CreateTaskResult(task=task, parse_log=log.model_copy(update={"task": task}))

    async def get_parsing_log(self, log_id: str) -> ParseLog:
        log = await self.parse_logs.get_log(log_id)
        if log.linked_task_id is None:
            return log
        task = await self.tasks.get(log.linked_task_id)
        return log.model_copy(update={"task": task})
