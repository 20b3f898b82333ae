"""
Parse log persistence.

Every parse attempt is recorded once. The only later change allowed on a log
is linking it to the task created from it, and that happens at most once.
"""

import logging
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Dict, Optional

from storage import db
from voice_tasks.errors import LogAlreadyLinkedError, NotFoundError
from voice_tasks.models import ConfidenceScore, ParsedTaskData, ParseLog

logger = logging.getLogger(__name__)


def _not_found(log_id: str) -> NotFoundError:
    return NotFoundError(f"Parsing log {log_id} not found")


class ParseLogStore(ABC):
    @abstractmethod
    async def record_parse(
        self,
        transcript: str,
        parsed: ParsedTaskData,
        confidence: ConfidenceScore,
    ) -> str:
        """
        Persist one parse attempt.

        Returns:
            The id of the new log
        """
        raise NotImplementedError

    @abstractmethod
    async def attach_task(self, log_id: str, task_id: str) -> ParseLog:
        """
        Link a log to the task created from it.

        Raises:
            NotFoundError: the log does not exist
            LogAlreadyLinkedError: the log is already linked to a task
        """
        raise NotImplementedError

    @abstractmethod
    async def get_log(self, log_id: str) -> ParseLog:
        """
        Read a log back by id.

        Raises:
            NotFoundError: the log does not exist
        """
        raise NotImplementedError


class InMemoryParseLogStore(ParseLogStore):
    def __init__(self):
        self._logs: Dict[str, ParseLog] = {}

    async def record_parse(
        self,
        transcript: str,
        parsed: ParsedTaskData,
        confidence: ConfidenceScore,
    ) -> str:
        log = ParseLog(
            id=str(uuid.uuid4()),
            raw_transcript=transcript,
            parsed_data=parsed,
            confidence=confidence,
            created_at=datetime.now(timezone.utc),
        )
        self._logs[log.id] = log
        return log.id

    async def attach_task(self, log_id: str, task_id: str) -> ParseLog:
        log = await self.get_log(log_id)
        if log.linked_task_id is not None:
            raise LogAlreadyLinkedError(
                f"Parsing log {log_id} is already linked to task {log.linked_task_id}"
            )
        linked = log.model_copy(update={"linked_task_id": str(task_id)})
        self._logs[log.id] = linked
        return linked

    async def get_log(self, log_id: str) -> ParseLog:
        log = self._logs.get(str(log_id))
        if log is None:
            raise _not_found(log_id)
        return log


class PostgresParseLogStore(ParseLogStore):
    """Parse logs in the ``voice_parsing_logs`` table."""

    _COLUMNS = "id, raw_transcript, parsed_data, confidence, task_id, created_at"

    @staticmethod
    def _parse_id(log_id: str) -> uuid.UUID:
        try:
            return uuid.UUID(str(log_id))
        except ValueError:
            raise _not_found(log_id)

    @staticmethod
    def _from_record(record) -> ParseLog:
        return ParseLog(
            id=str(record["id"]),
            raw_transcript=record["raw_transcript"],
            parsed_data=ParsedTaskData.model_validate_json(record["parsed_data"]),
            confidence=ConfidenceScore.model_validate_json(record["confidence"]),
            linked_task_id=str(record["task_id"]) if record["task_id"] else None,
            created_at=record["created_at"],
        )

    async def record_parse(
        self,
        transcript: str,
        parsed: ParsedTaskData,
        confidence: ConfidenceScore,
    ) -> str:
        query = """
            INSERT INTO voice_parsing_logs (raw_transcript, parsed_data, confidence)
            VALUES ($1, $2::jsonb, $3::jsonb)
            RETURNING id
        """
        log_id = await db.fetchval(
            query,
            transcript,
            parsed.model_dump_json(by_alias=True),
            confidence.model_dump_json(by_alias=True),
        )
        logger.info(f"Recorded parse log {log_id} (transcript: {transcript[:30]}...)")
        return str(log_id)

    async def attach_task(self, log_id: str, task_id: str) -> ParseLog:
        key = self._parse_id(log_id)
        # Conditional update keeps the link write-once even with concurrent callers.
        record = await db.fetchrow(
            f"""
            UPDATE voice_parsing_logs SET task_id = $2
            WHERE id = $1 AND task_id IS NULL
            RETURNING {self._COLUMNS}
            """,
            key,
            uuid.UUID(str(task_id)),
        )
        if record is not None:
            logger.info(f"Linked parse log {log_id} to task {task_id}")
            return self._from_record(record)

        existing = await db.fetchrow(
            "SELECT task_id FROM voice_parsing_logs WHERE id = $1", key
        )
        if existing is None:
            raise _not_found(log_id)
        raise LogAlreadyLinkedError(
            f"Parsing log {log_id} is already linked to task {existing['task_id']}"
        )

    async def get_log(self, log_id: str) -> ParseLog:
        record = await db.fetchrow(
            f"SELECT {self._COLUMNS} FROM voice_parsing_logs WHERE id = $1",
            self._parse_id(log_id),
        )
        if record is None:
            raise _not_found(log_id)
        return self._from_record(record)
