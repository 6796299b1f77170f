"""
Error Classifier - decide how a pipeline failure is shown to the user.

A failure message is first decoded as the service's structured error
({"error": {"code": ..., "message": ...}}). If that decode fails the raw
message is passed through verbatim. Classification never raises.
"""

import logging
from typing import Any, Optional, Union

from pydantic import BaseModel, ValidationError

from .errors import ClassifiedError, ErrorKind, VideoGenerationError

logger = logging.getLogger(__name__)

QUOTA_EXCEEDED_CODE = 429


class ServiceErrorBody(BaseModel):
    # Any JSON value; only the exact integer 429 means quota
    code: Any = None
    message: Any = None

    @property
    def is_quota_exceeded(self) -> bool:
        return type(self.code) is int and self.code == QUOTA_EXCEEDED_CODE

    @property
    def display_message(self) -> str:
        if self.message is None:
            return ""
        return self.message if isinstance(self.message, str) else str(self.message)


class ServiceErrorPayload(BaseModel):
    """Structured error body returned by the service."""
    error: ServiceErrorBody


class RawFailure(BaseModel):
    """Fallback variant: the failure text as-is."""
    text: str


DecodedFailure = Union[ServiceErrorPayload, RawFailure]


def failure_message(failure: BaseException) -> str:
    """Best-effort message text of an exception; always a str."""
    try:
        if isinstance(failure, VideoGenerationError) and isinstance(failure.message, str):
            return failure.message
        return str(failure)
    except Exception:
        return repr(failure)


def decode_failure(text: str) -> DecodedFailure:
    """Decode as structured error data, else keep the raw text."""
    if not isinstance(text, str):
        text = repr(text)
    try:
        return ServiceErrorPayload.model_validate_json(text)
    except ValidationError:
        return RawFailure(text=text)


def _raw_kind(failure: BaseException) -> ErrorKind:
    hinted: Optional[ErrorKind] = getattr(failure, "kind", None)
    if hinted == ErrorKind.MALFORMED:
        return ErrorKind.MALFORMED
    return ErrorKind.TRANSPORT


def classify_error(failure: BaseException) -> ClassifiedError:
    """
    Classify a failure raised anywhere in the pipeline.

    Args:
        failure: The exception caught at the top of the workflow

    Returns:
        ClassifiedError; QUOTA_EXCEEDED carries no message because the UI
        shows a fixed out-of-quota affordance instead of server text
    """
    text = failure_message(failure)
    decoded = decode_failure(text)

    if isinstance(decoded, ServiceErrorPayload):
        if decoded.error.is_quota_exceeded:
            logger.warning("Generation failed: out of quota")
            return ClassifiedError(kind=ErrorKind.QUOTA_EXCEEDED, message="")

        message = decoded.error.display_message
        logger.error(f"Generation failed with service error {decoded.error.code}: {message}")
        return ClassifiedError(kind=ErrorKind.SERVICE_ERROR, message=message)

    logger.error(f"Generation failed: {decoded.text}")
    return ClassifiedError(kind=_raw_kind(failure), message=decoded.text)
