import os

from extraction.transcript_parser import TranscriptParser
from storage.parse_log_store import InMemoryParseLogStore, ParseLogStore
from storage.task_store import InMemoryTaskStore, TaskStore
from voice_tasks.config import ParserConfig

USE_DATABASE = os.getenv("USE_DATABASE", "false").lower() in {"1", "true", "yes"}

parser_config = ParserConfig.from_env()
parser = TranscriptParser(parser_config)

# In-memory until startup swaps in the PostgreSQL stores (USE_DATABASE=true).
task_store: TaskStore = InMemoryTaskStore()
parse_log_store: ParseLogStore = InMemoryParseLogStore()
