"""
Error taxonomy for the video generation pipeline.

Every stage raises VideoGenerationError; the workflow catches it once and
turns it into a ClassifiedError for display.
"""

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class ErrorKind(str, Enum):
    """Category of a pipeline failure, as shown to the user."""
    QUOTA_EXCEEDED = "quota_exceeded"  # Structured error with the 429 rate-limit code
    SERVICE_ERROR = "service_error"    # Any other structured server error
    TRANSPORT = "transport"            # Network failure or unparseable error body
    MALFORMED = "malformed"            # Bad input shape, or zero outputs produced


class VideoGenerationError(Exception):
    """Raised when video generation fails."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        provider: Optional[str] = None,
        kind: Optional[ErrorKind] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.provider = provider
        self.kind = kind
        super().__init__(message)


class PollTimeoutError(VideoGenerationError):
    """Raised when an operation outlives the configured polling guard."""

    def __init__(self, message: str, attempts: int, elapsed_seconds: float):
        self.attempts = attempts
        self.elapsed_seconds = elapsed_seconds
        super().__init__(message, error_code="POLL_TIMEOUT", kind=ErrorKind.TRANSPORT)


@dataclass(frozen=True)
class ClassifiedError:
    """A failure reduced to what the user should see."""
    kind: ErrorKind
    message: str

    @property
    def show_quota_affordance(self) -> bool:
        return self.kind == ErrorKind.QUOTA_EXCEEDED


def structured_error_message(code: Any, message: Optional[str], status: Optional[str] = None) -> str:
    """Encode a server error the way the service reports it: {"error": {...}}."""
    body: dict[str, Any] = {"code": code, "message": message or ""}
    if status:
        body["status"] = status
    return json.dumps({"error": body})
