from __future__ import annotations
import json
import re
from llm.providers.base import LLMProvider

_TRANSCRIPT_RE = re.compile(r"Transcript:\s*(?P<text>.+)", re.DOTALL)


class MockProvider(LLMProvider):
    """Offline provider: answers an extraction prompt with a canned, schema-valid task."""

    name = "mock"

    def __init__(self, timeout_s: float = 0.0):
        self.timeout_s = timeout_s

    def generate(self, *, system: str, user: str) -> str:
        match = _TRANSCRIPT_RE.search(user)
        if match is None:
            return "{}"

        transcript = match.group("text").strip()
        head, _, rest = transcript.partition(",")
        lower = transcript.lower()

        priority = "MEDIUM"
        if "urgent" in lower or "asap" in lower:
            priority = "CRITICAL"
        elif "important" in lower:
            priority = "HIGH"

        return json.dumps({
            "title": head.strip()[:200] or "Untitled task",
            "description": rest.strip() or None,
            "dueDate": None,
            "priority": priority,
            "status": "TODO",
        })
