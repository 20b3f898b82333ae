import logging
import os

from fastapi import APIRouter, Depends, Response
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST

from api import state
from api.dependencies import get_parser
from extraction.transcript_parser import TranscriptParser
from storage import db

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/health")
async def health_check(parser: TranscriptParser = Depends(get_parser)) -> dict:
    """Health check endpoint for container orchestration."""
    health = {
        "status": "healthy",
        "profile": os.getenv("DEPLOYMENT_PROFILE", "unknown"),
        "storage": "postgres" if state.USE_DATABASE else "in-memory",
        "parser": {
            "provider": parser.config.provider,
            "strategy": parser.strategy.name,
            "fallback_enabled": parser.config.fallback_enabled,
        },
    }

    if state.USE_DATABASE:
        db_health = await db.health_check()
        health["database"] = db_health
        if db_health["status"] != "healthy":
            health["status"] = "degraded"

    return health


@router.get("/metrics")
async def metrics() -> Response:
    """Prometheus scrape endpoint."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
