from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

TITLE_MAX_LENGTH = 200
DESCRIPTION_MAX_LENGTH = 2000


class Priority(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class TaskStatus(str, Enum):
    TODO = "TODO"
    IN_PROGRESS = "IN_PROGRESS"
    DONE = "DONE"


class WireModel(BaseModel):
    """Base for everything that crosses the HTTP boundary: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _strip_title(v: str) -> str:
    v2 = v.strip()
    if not v2:
        raise ValueError("title must not be blank")
    return v2


def _blank_to_none(v: Optional[str]) -> Optional[str]:
    if v is None:
        return None
    v2 = v.strip()
    return v2 or None


class ParsedTaskData(WireModel):
    model_config = ConfigDict(frozen=True)

    title: str = Field(..., min_length=1, max_length=TITLE_MAX_LENGTH)
    description: Optional[str] = Field(None, max_length=DESCRIPTION_MAX_LENGTH)
    priority: Priority = Priority.MEDIUM
    due_date: Optional[datetime] = None
    status: TaskStatus = TaskStatus.TODO

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: str) -> str:
        return _strip_title(v)

    @field_validator("description")
    @classmethod
    def description_blank_is_none(cls, v: Optional[str]) -> Optional[str]:
        return _blank_to_none(v)


class ConfidenceScore(WireModel):
    model_config = ConfigDict(frozen=True)

    overall: float = Field(..., ge=0.0, le=1.0)
    title: float = Field(..., ge=0.0, le=1.0)
    priority: float = Field(..., ge=0.0, le=1.0)
    due_date: float = Field(..., ge=0.0, le=1.0)

    @classmethod
    def full(cls) -> "ConfidenceScore":
        # Caller-asserted data: nothing was inferred.
        return cls(overall=1.0, title=1.0, priority=1.0, due_date=1.0)


class ParseResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    parsed: ParsedTaskData
    confidence: ConfidenceScore
    strategy: str
    fallback_used: bool = False


class Task(WireModel):
    id: str
    title: str = Field(..., min_length=1, max_length=TITLE_MAX_LENGTH)
    description: Optional[str] = Field(None, max_length=DESCRIPTION_MAX_LENGTH)
    priority: Priority = Priority.MEDIUM
    status: TaskStatus = TaskStatus.TODO
    due_date: Optional[datetime] = None
    raw_transcript: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class TaskCreate(WireModel):
    title: str = Field(..., min_length=1, max_length=TITLE_MAX_LENGTH)
    description: Optional[str] = Field(None, max_length=DESCRIPTION_MAX_LENGTH)
    priority: Priority = Priority.MEDIUM
    status: TaskStatus = TaskStatus.TODO
    due_date: Optional[datetime] = None
    raw_transcript: Optional[str] = None

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: str) -> str:
        return _strip_title(v)

    @field_validator("description")
    @classmethod
    def description_blank_is_none(cls, v: Optional[str]) -> Optional[str]:
        return _blank_to_none(v)

    @classmethod
    def from_parsed(cls, parsed: ParsedTaskData, raw_transcript: Optional[str] = None) -> "TaskCreate":
        return cls(
            title=parsed.title,
            description=parsed.description,
            priority=parsed.priority,
            status=parsed.status,
            due_date=parsed.due_date,
            raw_transcript=raw_transcript,
        )


class TaskUpdate(WireModel):
    title: Optional[str] = Field(None, min_length=1, max_length=TITLE_MAX_LENGTH)
    description: Optional[str] = Field(None, max_length=DESCRIPTION_MAX_LENGTH)
    priority: Optional[Priority] = None
    status: Optional[TaskStatus] = None
    due_date: Optional[datetime] = None

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return _strip_title(v)

    def changes(self) -> dict:
        """Explicitly sent fields. An explicit null only clears description or due_date."""
        values = self.model_dump(exclude_unset=True)
        return {k: v for k, v in values.items() if v is not None or k in ("description", "due_date")}


class ParseLog(WireModel):
    id: str
    raw_transcript: str
    parsed_data: ParsedTaskData
    confidence: ConfidenceScore
    linked_task_id: Optional[str] = None
    created_at: datetime
    task: Optional[Task] = None


class ParseTranscriptResult(WireModel):
    raw_transcript: str
    parsed: ParsedTaskData
    confidence: ConfidenceScore
    strategy: str
    fallback_used: bool = False
    parsed_log_id: str


class CreateTaskResult(WireModel):
    task: Task
    parse_log: ParseLog


class TaskBoard(WireModel):
    todo: list[Task]
    in_progress: list[Task]
    done: list[Task]
