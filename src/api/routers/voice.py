import logging
import time
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from api.backend import BackendAPI
from api.dependencies import get_backend
from api.metrics import (
    PARSE_FALLBACKS_TOTAL,
    PARSE_LATENCY_SECONDS,
    PARSE_REQUESTS_TOTAL,
    REQUESTS_TOTAL,
    TASKS_CREATED_TOTAL,
)
from voice_tasks.errors import VoiceTaskError
from voice_tasks.models import (
    CreateTaskResult,
    ParsedTaskData,
    ParseLog,
    ParseTranscriptResult,
    WireModel,
)

router = APIRouter()
logger = logging.getLogger(__name__)


# Minimum length is enforced by the parser so it surfaces as InvalidTranscriptError, not 422.
class VoiceParseIn(BaseModel):
    transcript: str
    timezone: Optional[str] = None


class VoiceCreateTaskIn(WireModel):
    transcript: str
    parsed_data: ParsedTaskData
    timezone: Optional[str] = None
    parsed_log_id: Optional[str] = None


@router.post("/parse", response_model=ParseTranscriptResult)
async def parse_voice(
    payload: VoiceParseIn,
    backend: BackendAPI = Depends(get_backend),
) -> ParseTranscriptResult:
    start = time.time()
    logger.info(f"Received transcript: {payload.transcript[:50]}...")

    try:
        result = await backend.parse_transcript(payload.transcript, payload.timezone)
    except VoiceTaskError as e:
        PARSE_REQUESTS_TOTAL.labels(strategy=backend.parser.strategy.name, status=e.kind).inc()
        REQUESTS_TOTAL.labels(endpoint="/voice/parse", status="error").inc()
        raise

    PARSE_REQUESTS_TOTAL.labels(strategy=result.strategy, status="parsed").inc()
    if result.fallback_used:
        PARSE_FALLBACKS_TOTAL.inc()
    REQUESTS_TOTAL.labels(endpoint="/voice/parse", status="ok").inc()
    PARSE_LATENCY_SECONDS.observe(time.time() - start)
    return result


@router.post("/tasks", response_model=CreateTaskResult, status_code=201)
async def create_task_from_voice(
    payload: VoiceCreateTaskIn,
    backend: BackendAPI = Depends(get_backend),
) -> CreateTaskResult:
    result = await backend.create_task_from_parse(
        payload.transcript,
        payload.parsed_data,
        timezone=payload.timezone,
        parse_log_id=payload.parsed_log_id,
    )
    TASKS_CREATED_TOTAL.labels(source="voice").inc()
    REQUESTS_TOTAL.labels(endpoint="/voice/tasks", status="created").inc()
    return result


@router.get("/logs/{log_id}", response_model=ParseLog)
async def get_parsing_log(
    log_id: str,
    backend: BackendAPI = Depends(get_backend),
) -> ParseLog:
    return await backend.get_parsing_log(log_id)
