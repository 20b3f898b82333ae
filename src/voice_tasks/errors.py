"""
Error taxonomy for the voice task service.

Every error carries a stable ``kind`` (rendered as ``error`` on the wire) and
the HTTP status the API layer maps it to. Missing dates, default priority and
empty descriptions are normal extraction outcomes and never raise.
"""

from typing import Any, Optional


class VoiceTaskError(Exception):
    kind = "VoiceTaskError"
    status_code = 500

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        return {
            "error": self.kind,
            "message": self.message,
            "details": self.details,
        }


class InvalidTranscriptError(VoiceTaskError):
    """Transcript rejected before any extraction ran."""

    kind = "InvalidTranscriptError"
    status_code = 400


class ParsingProviderError(VoiceTaskError):
    """The generative provider failed, timed out or returned output that violates ParsedTaskData."""

    kind = "ParsingProviderError"
    status_code = 502


class NotFoundError(VoiceTaskError):
    kind = "NotFoundError"
    status_code = 404


class LogAlreadyLinkedError(VoiceTaskError):
    kind = "LogAlreadyLinkedError"
    status_code = 409
