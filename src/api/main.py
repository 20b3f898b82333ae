import logging
import os
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from api import state
from api.routers import ops, tasks, voice
from storage import db
from storage.parse_log_store import PostgresParseLogStore
from storage.task_store import PostgresTaskStore
from voice_tasks.errors import VoiceTaskError

# Logging configuration
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Voice Tasks")

app.include_router(voice.router, prefix="/voice", tags=["voice"])
app.include_router(tasks.router, prefix="/tasks", tags=["tasks"])
app.include_router(ops.router, tags=["ops"])


@app.exception_handler(VoiceTaskError)
async def voice_task_error_handler(request: Request, exc: VoiceTaskError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{exc.kind} on {request.url.path}: {exc.message}")
    else:
        logger.info(f"{exc.kind} on {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={**exc.to_dict(), "timestamp": datetime.now(timezone.utc).isoformat()},
    )


@app.on_event("startup")
async def startup() -> None:
    logger.info(
        f"Transcript parser ready (provider={state.parser_config.provider}, "
        f"strategy={state.parser.strategy.name})"
    )

    if not state.USE_DATABASE:
        logger.info("USE_DATABASE is off, keeping in-memory task and parse log stores")
        return

    await db.init_db_pool()
    await db.init_schema()
    state.task_store = PostgresTaskStore()
    state.parse_log_store = PostgresParseLogStore()
    logger.info("Using PostgreSQL task and parse log stores")


@app.on_event("shutdown")
async def shutdown() -> None:
    if state.USE_DATABASE:
        await db.close_db_pool()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "8000")))
