"""
Transcript parsing orchestrator.

TranscriptParser validates the transcript, resolves the reference time in
the caller's timezone, runs the configured extraction strategy (falling back
once to the rule-based cascade when a provider fails) and scores confidence
locally, whichever strategy produced the fields.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone as dt_timezone, tzinfo
from typing import Callable, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from extraction.confidence import ConfidenceScorer
from extraction.strategies import ExtractionStrategy, RuleBasedStrategy, build_strategy
from voice_tasks.config import ParserConfig
from voice_tasks.errors import InvalidTranscriptError, ParsingProviderError
from voice_tasks.models import ParseResult

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(dt_timezone.utc)


def resolve_timezone(name: Optional[str]) -> tzinfo:
    if not name or name.upper() in {"UTC", "Z"}:
        return dt_timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning(f"Unknown timezone {name!r}, using UTC")
        return dt_timezone.utc


class TranscriptParser:
    def __init__(
        self,
        config: Optional[ParserConfig] = None,
        strategy: Optional[ExtractionStrategy] = None,
        clock: Optional[Clock] = None,
        scorer: Optional[ConfidenceScorer] = None,
    ):
        self.config = config or ParserConfig()
        self.fallback = RuleBasedStrategy()
        self.strategy = strategy or build_strategy(self.config)
        self.scorer = scorer or ConfidenceScorer()
        # Must return an aware datetime.
        self.clock = clock or utc_now

    def validate_transcript(self, transcript: str) -> None:
        minimum = self.config.min_transcript_length
        if len(transcript) < minimum:
            raise InvalidTranscriptError(
                f"Transcript must be at least {minimum} characters",
                details={"length": len(transcript), "minimum": minimum},
            )

    def reference_now(self, timezone: Optional[str] = None) -> datetime:
        zone = resolve_timezone(timezone or self.config.default_timezone)
        return self.clock().astimezone(zone)

    def localize(self, moment: Optional[datetime], timezone: Optional[str] = None) -> Optional[datetime]:
        """Attach the caller's timezone to a naive datetime; aware values pass through."""
        if moment is None or moment.tzinfo is not None:
            return moment
        return moment.replace(tzinfo=resolve_timezone(timezone or self.config.default_timezone))

    def parse(
        self,
        transcript: str,
        timezone: Optional[str] = None,
        reference_now: Optional[datetime] = None,
    ) -> ParseResult:
        self.validate_transcript(transcript)
        now = reference_now or self.reference_now(timezone)

        strategy = self.strategy
        fallback_used = False
        try:
            parsed = strategy.extract(transcript, now)
        except ParsingProviderError as e:
            if not self.config.fallback_enabled or strategy is self.fallback:
                raise
            logger.warning(f"{strategy.name} extraction failed ({e.message}), falling back to rules")
            strategy = self.fallback
            fallback_used = True
            parsed = strategy.extract(transcript, now)

        confidence = self.scorer.score(
            transcript,
            parsed.due_date,
            parsed.priority,
            title=parsed.title,
        )
        return ParseResult(
            parsed=parsed,
            confidence=confidence,
            strategy=strategy.name,
            fallback_used=fallback_used,
        )
