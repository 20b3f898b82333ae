"""
Task persistence.

TaskStore is the storage seam used by the API and by task creation from a
parse. PostgresTaskStore backs it with the ``tasks`` table; InMemoryTaskStore
keeps everything in a dict for local runs and tests.
"""

import logging
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

from storage import db
from voice_tasks.errors import NotFoundError
from voice_tasks.models import Priority, Task, TaskCreate, TaskStatus, TaskUpdate

logger = logging.getLogger(__name__)

PRIORITY_RANK = {
    Priority.LOW: 0,
    Priority.MEDIUM: 1,
    Priority.HIGH: 2,
    Priority.CRITICAL: 3,
}


@dataclass(frozen=True)
class TaskFilters:
    status: Optional[TaskStatus] = None
    priority: Optional[Priority] = None
    search: Optional[str] = None
    sort_by: str = "due_date"
    sort_order: str = "asc"
    page: int = 1
    limit: int = 10

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def _parse_id(task_id: str) -> uuid.UUID:
    try:
        return uuid.UUID(str(task_id))
    except ValueError:
        raise NotFoundError(f"Task {task_id} not found")


class TaskStore(ABC):
    @abstractmethod
    async def create(self, data: TaskCreate) -> Task:
        raise NotImplementedError

    @abstractmethod
    async def get(self, task_id: str) -> Optional[Task]:
        """Return the task, or None when it does not exist."""
        raise NotImplementedError

    @abstractmethod
    async def list(self, filters: TaskFilters) -> Tuple[List[Task], int]:
        """Return (page of tasks, total matching)."""
        raise NotImplementedError

    @abstractmethod
    async def update(self, task_id: str, changes: TaskUpdate) -> Task:
        raise NotImplementedError

    @abstractmethod
    async def delete(self, task_id: str) -> None:
        raise NotImplementedError

    async def require(self, task_id: str) -> Task:
        task = await self.get(task_id)
        if task is None:
            raise NotFoundError(f"Task {task_id} not found")
        return task


class InMemoryTaskStore(TaskStore):
    def __init__(self):
        self._tasks: Dict[str, Task] = {}

    async def create(self, data: TaskCreate) -> Task:
        now = datetime.now(timezone.utc)
        task = Task(
            id=str(uuid.uuid4()),
            created_at=now,
            updated_at=now,
            **data.model_dump(),
        )
        self._tasks[task.id] = task
        return task

    async def get(self, task_id: str) -> Optional[Task]:
        return self._tasks.get(str(task_id))

    async def list(self, filters: TaskFilters) -> Tuple[List[Task], int]:
        tasks = list(self._tasks.values())
        if filters.status is not None:
            tasks = [t for t in tasks if t.status == filters.status]
        if filters.priority is not None:
            tasks = [t for t in tasks if t.priority == filters.priority]
        if filters.search:
            needle = filters.search.lower()
            tasks = [
                t for t in tasks
                if needle in t.title.lower() or needle in (t.description or "").lower()
            ]

        reverse = filters.sort_order == "desc"
        if filters.sort_by == "priority":
            tasks.sort(key=lambda t: PRIORITY_RANK[t.priority], reverse=reverse)
        elif filters.sort_by == "created_at":
            tasks.sort(key=lambda t: t.created_at, reverse=reverse)
        else:
            # Undated tasks go last, like NULLS LAST in Postgres.
            dated = sorted((t for t in tasks if t.due_date), key=lambda t: t.due_date, reverse=reverse)
            tasks = dated + [t for t in tasks if t.due_date is None]

        total = len(tasks)
        return tasks[filters.offset : filters.offset + filters.limit], total

    async def update(self, task_id: str, changes: TaskUpdate) -> Task:
        task = await self.require(task_id)
        updated = task.model_copy(
            update={**changes.changes(), "updated_at": datetime.now(timezone.utc)}
        )
        self._tasks[task.id] = updated
        return updated

    async def delete(self, task_id: str) -> None:
        if self._tasks.pop(str(task_id), None) is None:
            raise NotFoundError(f"Task {task_id} not found")


class PostgresTaskStore(TaskStore):
    """Tasks in PostgreSQL via the shared asyncpg pool."""

    _COLUMNS = "id, title, description, priority, status, due_date, raw_transcript, created_at, updated_at"
    _UPDATABLE = ("title", "description", "priority", "status", "due_date")

    @staticmethod
    def _from_record(record) -> Task:
        return Task(
            id=str(record["id"]),
            title=record["title"],
            description=record["description"],
            priority=record["priority"],
            status=record["status"],
            due_date=record["due_date"],
            raw_transcript=record["raw_transcript"],
            created_at=record["created_at"],
            updated_at=record["updated_at"],
        )

    async def create(self, data: TaskCreate) -> Task:
        query = f"""
            INSERT INTO tasks (title, description, priority, status, due_date, raw_transcript)
            VALUES ($1, $2, $3, $4, $5, $6)
            RETURNING {self._COLUMNS}
        """
        record = await db.fetchrow(
            query,
            data.title,
            data.description,
            data.priority.value,
            data.status.value,
            data.due_date,
            data.raw_transcript,
        )
        logger.info(f"Created task {record['id']} ({data.title[:30]})")
        return self._from_record(record)

    async def get(self, task_id: str) -> Optional[Task]:
        try:
            key = _parse_id(task_id)
        except NotFoundError:
            return None
        record = await db.fetchrow(f"SELECT {self._COLUMNS} FROM tasks WHERE id = $1", key)
        return self._from_record(record) if record else None

    async def list(self, filters: TaskFilters) -> Tuple[List[Task], int]:
        clauses: List[str] = []
        args: list = []

        if filters.status is not None:
            args.append(filters.status.value)
            clauses.append(f"status = ${len(args)}")
        if filters.priority is not None:
            args.append(filters.priority.value)
            clauses.append(f"priority = ${len(args)}")
        if filters.search:
            args.append(f"%{filters.search}%")
            clauses.append(f"(title ILIKE ${len(args)} OR description ILIKE ${len(args)})")

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        direction = "DESC" if filters.sort_order == "desc" else "ASC"
        if filters.sort_by == "priority":
            order = (
                "CASE priority WHEN 'LOW' THEN 0 WHEN 'MEDIUM' THEN 1 "
                f"WHEN 'HIGH' THEN 2 ELSE 3 END {direction}"
            )
        elif filters.sort_by == "created_at":
            order = f"created_at {direction}"
        else:
            order = f"due_date {direction} NULLS LAST"

        total = await db.fetchval(f"SELECT COUNT(*) FROM tasks {where}", *args)
        records = await db.fetch(
            f"SELECT {self._COLUMNS} FROM tasks {where} ORDER BY {order}, created_at ASC "
            f"LIMIT ${len(args) + 1} OFFSET ${len(args) + 2}",
            *args,
            filters.limit,
            filters.offset,
        )
        return [self._from_record(r) for r in records], total

    async def update(self, task_id: str, changes: TaskUpdate) -> Task:
        key = _parse_id(task_id)
        values = changes.changes()
        assignments: List[str] = []
        args: list = [key]
        for column in self._UPDATABLE:
            if column in values:
                value = values[column]
                args.append(value.value if isinstance(value, (Priority, TaskStatus)) else value)
                assignments.append(f"{column} = ${len(args)}")
        assignments.append("updated_at = now()")

        record = await db.fetchrow(
            f"UPDATE tasks SET {', '.join(assignments)} WHERE id = $1 RETURNING {self._COLUMNS}",
            *args,
        )
        if record is None:
            raise NotFoundError(f"Task {task_id} not found")
        return self._from_record(record)

    async def delete(self, task_id: str) -> None:
        key = _parse_id(task_id)
        deleted = await db.fetchval("DELETE FROM tasks WHERE id = $1 RETURNING id", key)
        if deleted is None:
            raise NotFoundError(f"Task {task_id} not found")
        logger.info(f"Deleted task {task_id}")
