"""
Title, description and status extraction for the rule-based strategy.

The title is the leading clause of the transcript once spoken filler
("hey", "create a task to", "remind me to", ...) is stripped from the front.
Whatever follows that clause becomes the description.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Tuple

from extraction.confidence import PLACEHOLDER_TITLE
from voice_tasks.models import DESCRIPTION_MAX_LENGTH, TITLE_MAX_LENGTH, TaskStatus

_I = re.IGNORECASE

# Applied repeatedly, in order, until none matches at the front of the text.
FILLER_PREFIXES: Tuple["re.Pattern[str]", ...] = (
    re.compile(r"^(?:hey|hi|hello|ok(?:ay)?|so|well|um+|uh+)\b[\s,.!]*", _I),
    re.compile(r"^please\b[\s,]*", _I),
    re.compile(r"^(?:can|could|would|will)\s+you\s+(?:please\s+)?", _I),
    re.compile(
        r"^(?:create|add|make|set\s+up|schedule|log|new)\s+(?:me\s+)?(?:a\s+|an\s+|the\s+)?(?:new\s+)?"
        r"(?:[\w-]+\s+){0,3}?(?:task|todo|to-do|reminder|item)\b\s*(?:to\s+|for\s+|that\s+|:\s*)?",
        _I,
    ),
    re.compile(r"^remind\s+me\s+(?:to\s+|that\s+|about\s+)?", _I),
    re.compile(r"^(?:don'?t|do\s+not)\s+(?:let\s+me\s+)?forget\s+(?:to\s+)?", _I),
    re.compile(r"^(?:i|we)\s+(?:really\s+)?(?:need|have|want|got)\s+to\s+", _I),
    re.compile(r"^(?:need|have)\s+to\s+", _I),
    re.compile(r"^(?:i|we)\s+(?:should|must)\s+", _I),
    re.compile(r"^to(?:\s*,\s*|\s+)", _I),
)

_CLAUSE_DELIMITER = re.compile(r"[,.;!?\n]")
_LEADING_JUNK = " \t\r\n,.;:!?-"

_STATUS_PREFIX = r"(?:status\s*(?:is|:|=|to)?\s*|mark(?:ed)?\s+(?:it\s+|this\s+)?as\s+|already\s+)"


@dataclass(frozen=True)
class StatusRule:
    status: TaskStatus
    patterns: Tuple["re.Pattern[str]", ...]

    def matches(self, transcript: str) -> bool:
        return any(p.search(transcript) for p in self.patterns)


# Bare tokens only count in their upper-case form; "get it done" stays TODO.
STATUS_RULES: Tuple[StatusRule, ...] = (
    StatusRule(
        TaskStatus.IN_PROGRESS,
        (
            re.compile(r"\bIN[_ ]PROGRESS\b"),
            re.compile(_STATUS_PREFIX + r"in[\s_-]progress\b", _I),
        ),
    ),
    StatusRule(
        TaskStatus.DONE,
        (
            re.compile(r"\bDONE\b"),
            re.compile(_STATUS_PREFIX + r"(?:done|completed?|finished)\b", _I),
        ),
    ),
    StatusRule(
        TaskStatus.TODO,
        (
            re.compile(r"\bTODO\b"),
            re.compile(r"status\s*(?:is|:|=|to)?\s*(?:todo|to[\s-]do)\b", _I),
        ),
    ),
)


def strip_filler(text: str) -> str:
    remaining = text.strip()
    changed = True
    while changed and remaining:
        changed = False
        for pattern in FILLER_PREFIXES:
            stripped = pattern.sub("", remaining, count=1)
            if stripped != remaining:
                remaining = stripped.lstrip(_LEADING_JUNK)
                changed = True
                break
    return remaining


def split_title_description(transcript: str) -> Tuple[str, Optional[str]]:
    """Return (title, description). The title falls back to a placeholder, never empty."""
    text = strip_filler(transcript)

    match = _CLAUSE_DELIMITER.search(text)
    if match is None:
        clause, rest = text, ""
    else:
        clause, rest = text[: match.start()], text[match.end() :]

    title = clause.strip()[:TITLE_MAX_LENGTH].rstrip()
    if title:
        title = title[0].upper() + title[1:]
    else:
        title = PLACEHOLDER_TITLE

    description = rest.strip(_LEADING_JUNK)[:DESCRIPTION_MAX_LENGTH].strip()
    return title, description or None


def detect_status(transcript: str, default: TaskStatus = TaskStatus.TODO) -> TaskStatus:
    for rule in STATUS_RULES:
        if rule.matches(transcript):
            return rule.status
    return default
