from __future__ import annotations

from datetime import datetime
from typing import Optional

from classification.priority_classifier import keywords_for, matched_keywords
from voice_tasks.models import ConfidenceScore, Priority

# Matched as substrings of the lower-cased transcript, like the priority keywords.
TEMPORAL_MARKERS = frozenset({"by", "before", "on", "until", "due"})

EXPLICIT_DATE_CONFIDENCE = 0.9
IMPLICIT_DATE_CONFIDENCE = 0.7
EMPTY_KEYWORD_SET_CONFIDENCE = 0.5

PLACEHOLDER_TITLE = "Untitled task"
_MIN_TITLE_ALNUM = 3


class ConfidenceScorer:
    """Per-field confidence from explicit signal in the transcript; overall is the plain mean."""

    def date_confidence(self, transcript: str, extracted_date: Optional[datetime]) -> float:
        if extracted_date is None:
            return 0.0
        lower_text = transcript.lower()
        if any(marker in lower_text for marker in TEMPORAL_MARKERS):
            return EXPLICIT_DATE_CONFIDENCE
        return IMPLICIT_DATE_CONFIDENCE

    def priority_confidence(self, transcript: str, priority: Priority) -> float:
        keywords = keywords_for(priority)
        if not keywords:
            return EMPTY_KEYWORD_SET_CONFIDENCE
        matches = len(matched_keywords(transcript, priority))
        return min(1.0, matches / len(keywords))

    def title_confidence(self, title: Optional[str]) -> float:
        if not title or title.strip() == PLACEHOLDER_TITLE:
            return 0.0
        alnum = sum(1 for ch in title if ch.isalnum())
        return 1.0 if alnum >= _MIN_TITLE_ALNUM else 0.0

    def score(
        self,
        transcript: str,
        extracted_date: Optional[datetime],
        extracted_priority: Priority,
        title: Optional[str] = None,
    ) -> ConfidenceScore:
        title_c = self.title_confidence(title)
        priority_c = self.priority_confidence(transcript, extracted_priority)
        date_c = self.date_confidence(transcript, extracted_date)
        return ConfidenceScore(
            overall=(title_c + priority_c + date_c) / 3,
            title=title_c,
            priority=priority_c,
            due_date=date_c,
        )
