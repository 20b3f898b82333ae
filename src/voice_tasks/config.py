from __future__ import annotations

import os
from dataclasses import dataclass

RULES_PROVIDERS = frozenset({"regex", "rules"})


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes"}


@dataclass(frozen=True)
class ParserConfig:
    """Settings handed to TranscriptParser at construction.

    provider selects the extraction strategy: "regex" (or "rules") for the
    deterministic cascade, otherwise the name of an LLM provider.
    """

    provider: str = "regex"
    provider_timeout_s: float = 15.0
    min_transcript_length: int = 10
    fallback_enabled: bool = True
    default_timezone: str = "UTC"

    @property
    def uses_llm(self) -> bool:
        return self.provider not in RULES_PROVIDERS

    @classmethod
    def from_env(cls) -> "ParserConfig":
        return cls(
            provider=os.getenv("VOICE_PARSING_PROVIDER", "regex").strip().lower(),
            provider_timeout_s=float(os.getenv("VOICE_PROVIDER_TIMEOUT_S", "15")),
            min_transcript_length=int(os.getenv("VOICE_MIN_TRANSCRIPT_LENGTH", "10")),
            fallback_enabled=_env_flag("VOICE_FALLBACK_ENABLED", "true"),
            default_timezone=os.getenv("VOICE_DEFAULT_TIMEZONE", "UTC").strip() or "UTC",
        )
