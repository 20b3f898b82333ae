from __future__ import annotations

from typing import FrozenSet, Tuple

from voice_tasks.models import Priority

# Evaluation order is the tie-break: "urgent, but it can wait" is CRITICAL.
PRIORITY_KEYWORDS: Tuple[Tuple[Priority, FrozenSet[str]], ...] = (
    (
        Priority.CRITICAL,
        frozenset({"urgent", "critical", "asap", "immediately", "blocking", "emergency"}),
    ),
    (
        Priority.HIGH,
        frozenset({"high priority", "important", "soon", "today", "this week", "asap"}),
    ),
    (
        Priority.MEDIUM,
        frozenset({"medium", "normal", "standard"}),
    ),
    (
        Priority.LOW,
        frozenset({"low priority", "can wait", "whenever", "later", "someday", "backlog"}),
    ),
)

DEFAULT_PRIORITY = Priority.MEDIUM


def keywords_for(priority: Priority) -> FrozenSet[str]:
    for level, keywords in PRIORITY_KEYWORDS:
        if level == priority:
            return keywords
    return frozenset()


def matched_keywords(text: str, priority: Priority) -> FrozenSet[str]:
    lower_text = text.lower()
    return frozenset(kw for kw in keywords_for(priority) if kw in lower_text)


class PriorityClassifier:
    """Keyword-precedence classifier: the first level with any substring hit wins."""

    def classify(self, text: str) -> Priority:
        lower_text = text.lower()
        for level, keywords in PRIORITY_KEYWORDS:
            if any(kw in lower_text for kw in keywords):
                return level
        return DEFAULT_PRIORITY


def classify_priority(text: str) -> Priority:
    return PriorityClassifier().classify(text)
