import json
import logging
from datetime import datetime
from typing import Any, Optional

import httpx

from llm.providers.base import LLMProvider
from llm.schemas import EXTRACTION_SYSTEM_PROMPT, EXTRACTION_USER_TEMPLATE
from voice_tasks.errors import ParsingProviderError

logger = logging.getLogger(__name__)


def build_provider(name: str, timeout_s: float) -> LLMProvider:
    """Instantiate the provider named in configuration."""
    if name == "openai":
        from llm.providers.openai_provider import OpenAIProvider

        return OpenAIProvider(timeout_s=timeout_s)
    if name == "ollama":
        from llm.providers.ollama_provider import OllamaProvider

        return OllamaProvider(timeout_s=timeout_s)
    if name == "mock":
        from llm.providers.mock_provider import MockProvider

        return MockProvider(timeout_s=timeout_s)
    raise ValueError(f"Unknown LLM provider: {name!r}")


def _extract_json_object(text: str) -> Optional[str]:
    """Return the outermost {...} span of ``text`` if it parses as a JSON object."""
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        return None
    candidate = text[start : end + 1]
    try:
        value = json.loads(candidate)
    except json.JSONDecodeError:
        return None
    return candidate if isinstance(value, dict) else None


class LLMClient:
    """Thin layer over an LLMProvider that recovers JSON from free-form model output."""

    def __init__(self, provider: LLMProvider):
        self.provider = provider

    @property
    def provider_name(self) -> str:
        return getattr(self.provider, "name", type(self.provider).__name__)

    def extract_task(self, transcript: str, reference_now: datetime) -> dict[str, Any]:
        user = EXTRACTION_USER_TEMPLATE.format(
            reference_now=reference_now.isoformat(),
            weekday=reference_now.strftime("%A"),
            timezone=reference_now.tzname() or "UTC",
            transcript=transcript,
        )
        try:
            text = self.provider.generate(system=EXTRACTION_SYSTEM_PROMPT, user=user)
        except httpx.TimeoutException as e:
            raise ParsingProviderError(f"{self.provider_name} timed out") from e
        except (httpx.HTTPError, KeyError, ValueError) as e:
            raise ParsingProviderError(f"{self.provider_name} request failed: {e}") from e

        payload = _extract_json_object(text)
        if payload is None:
            logger.warning(f"{self.provider_name} returned no JSON object: {text[:80]!r}")
            raise ParsingProviderError(
                f"{self.provider_name} returned no JSON object",
                details={"output": text[:500]},
            )
        return json.loads(payload)
