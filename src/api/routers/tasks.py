import logging
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, Query, Response

from api.dependencies import get_task_store
from api.metrics import REQUESTS_TOTAL, TASKS_CREATED_TOTAL
from storage.task_store import TaskFilters, TaskStore
from voice_tasks.models import (
    Priority,
    Task,
    TaskBoard,
    TaskCreate,
    TaskStatus,
    TaskUpdate,
    WireModel,
)

router = APIRouter()
logger = logging.getLogger(__name__)

# Large enough for a personal board; the list endpoint pages properly.
BOARD_LIMIT = 500


class TaskPage(WireModel):
    tasks: List[Task]
    total: int
    page: int
    limit: int


@router.get("", response_model=TaskPage)
async def list_tasks(
    status: Optional[TaskStatus] = None,
    priority: Optional[Priority] = None,
    search: Optional[str] = None,
    sort_by: Literal["due_date", "created_at", "priority"] = Query("due_date", alias="sortBy"),
    sort_order: Literal["asc", "desc"] = Query("asc", alias="sortOrder"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    store: TaskStore = Depends(get_task_store),
) -> TaskPage:
    """List tasks, filtered by status/priority/text and sorted by due date by default."""
    filters = TaskFilters(
        status=status,
        priority=priority,
        search=search,
        sort_by=sort_by,
        sort_order=sort_order,
        page=page,
        limit=limit,
    )
    tasks, total = await store.list(filters)
    return TaskPage(tasks=tasks, total=total, page=page, limit=limit)


@router.get("/board", response_model=TaskBoard)
async def task_board(store: TaskStore = Depends(get_task_store)) -> TaskBoard:
    """Kanban view: tasks grouped by status."""
    tasks, _ = await store.list(TaskFilters(limit=BOARD_LIMIT))
    return TaskBoard(
        todo=[t for t in tasks if t.status == TaskStatus.TODO],
        in_progress=[t for t in tasks if t.status == TaskStatus.IN_PROGRESS],
        done=[t for t in tasks if t.status == TaskStatus.DONE],
    )


@router.post("", response_model=Task, status_code=201)
async def create_task(payload: TaskCreate, store: TaskStore = Depends(get_task_store)) -> Task:
    task = await store.create(payload)
    TASKS_CREATED_TOTAL.labels(source="manual").inc()
    REQUESTS_TOTAL.labels(endpoint="/tasks", status="created").inc()
    return task


@router.get("/{task_id}", response_model=Task)
async def get_task(task_id: str, store: TaskStore = Depends(get_task_store)) -> Task:
    return await store.require(task_id)


@router.patch("/{task_id}", response_model=Task)
async def update_task(
    task_id: str,
    payload: TaskUpdate,
    store: TaskStore = Depends(get_task_store),
) -> Task:
    task = await store.update(task_id, payload)
    logger.info(f"Updated task {task_id}: {sorted(payload.changes())}")
    return task


@router.delete("/{task_id}", status_code=204)
async def delete_task(task_id: str, store: TaskStore = Depends(get_task_store)) -> Response:
    await store.delete(task_id)
    return Response(status_code=204)
