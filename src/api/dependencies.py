from fastapi import Depends

from api import state
from api.backend import BackendAPI
from extraction.transcript_parser import TranscriptParser
from storage.parse_log_store import ParseLogStore
from storage.task_store import TaskStore


def get_parser() -> TranscriptParser:
    return state.parser


def get_task_store() -> TaskStore:
    return state.task_store


def get_parse_log_store() -> ParseLogStore:
    return state.parse_log_store


def get_backend(
    parser: TranscriptParser = Depends(get_parser),
    parse_logs: ParseLogStore = Depends(get_parse_log_store),
    tasks: TaskStore = Depends(get_task_store),
) -> BackendAPI:
    return BackendAPI(parser, parse_logs, tasks)
