from __future__ import annotations
from abc import ABC, abstractmethod

class LLMProvider(ABC):
    name: str = "llm"

    @abstractmethod
    def generate(self, *, system: str, user: str) -> str:
        """
        Must return the model output as TEXT (LLMClient recovers and validates the JSON).
        Implementations raise on transport errors and timeouts; they never retry.
        """
        raise NotImplementedError
