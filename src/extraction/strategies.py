from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import datetime

from pydantic import ValidationError

from classification.priority_classifier import PriorityClassifier
from extraction.date_extractor import DateExtractor
from extraction.text_fields import detect_status, split_title_description
from llm.llm_client import LLMClient, build_provider
from voice_tasks.config import ParserConfig
from voice_tasks.errors import ParsingProviderError
from voice_tasks.models import ParsedTaskData

logger = logging.getLogger(__name__)


class ExtractionStrategy(ABC):
    name: str = "strategy"

    @abstractmethod
    def extract(self, transcript: str, reference_now: datetime) -> ParsedTaskData:
        """Turn a transcript into ParsedTaskData. Confidence is scored by the caller."""
        raise NotImplementedError


class RuleBasedStrategy(ExtractionStrategy):
    """Deterministic cascade. Always available, never fails on a length-valid transcript."""

    name = "rules"

    def __init__(self):
        self.dates = DateExtractor()
        self.priorities = PriorityClassifier()

    def extract(self, transcript: str, reference_now: datetime) -> ParsedTaskData:
        title, description = split_title_description(transcript)
        return ParsedTaskData(
            title=title,
            description=description,
            priority=self.priorities.classify(transcript),
            due_date=self.dates.extract_due_date(transcript, reference_now),
            status=detect_status(transcript),
        )


class LLMStrategy(ExtractionStrategy):
    """Delegates extraction to a generative provider; its output must validate as ParsedTaskData."""

    name = "llm"

    def __init__(self, llm_client: LLMClient):
        self.llm_client = llm_client

    def extract(self, transcript: str, reference_now: datetime) -> ParsedTaskData:
        payload = self.llm_client.extract_task(transcript, reference_now)
        try:
            parsed = ParsedTaskData.model_validate(payload)
        except ValidationError as e:
            raise ParsingProviderError(
                f"{self.llm_client.provider_name} output does not match ParsedTaskData",
                details=e.errors(include_url=False, include_context=False, include_input=False),
            ) from e

        # A naive date from the model is read in the caller's timezone.
        if parsed.due_date is not None and parsed.due_date.tzinfo is None:
            parsed = parsed.model_copy(
                update={"due_date": parsed.due_date.replace(tzinfo=reference_now.tzinfo)}
            )
        return parsed


def build_strategy(config: ParserConfig) -> ExtractionStrategy:
    if not config.uses_llm:
        return RuleBasedStrategy()

    try:
        provider = build_provider(config.provider, config.provider_timeout_s)
    except (RuntimeError, ValueError) as e:
        if not config.fallback_enabled:
            raise
        logger.warning(f"LLM provider {config.provider!r} unavailable ({e}), using rule-based extraction")
        return RuleBasedStrategy()

    logger.info(f"Using LLM extraction via {config.provider} (timeout {config.provider_timeout_s}s)")
    return LLMStrategy(LLMClient(provider))
