"""
Video Generation Service

Provides the asynchronous Veo generation pipeline:
- RequestBuilder: prompt + optional reference image + count -> request
- OperationPoller: submit and poll the long-running operation
- ResultResolver: download generated videos into playable handles
- ErrorClassifier: quota exhaustion vs. other failures for display
"""

from .client import (
    VideoGenerationClient,
    GenerationOutcome,
    GenerationView,
)
from .errors import (
    ClassifiedError,
    ErrorKind,
    PollTimeoutError,
    VideoGenerationError,
)
from .error_classifier import classify_error
from .operation import MediaDescriptor, Operation
from .poller import OperationPoller, PollPhase, PollState
from .request_builder import GenerationRequest, ReferenceImage, build_request
from .resolver import PlayableHandle, ResultResolver

__all__ = [
    "VideoGenerationClient",
    "GenerationOutcome",
    "GenerationView",
    "ClassifiedError",
    "ErrorKind",
    "PollTimeoutError",
    "VideoGenerationError",
    "classify_error",
    "MediaDescriptor",
    "Operation",
    "OperationPoller",
    "PollPhase",
    "PollState",
    "GenerationRequest",
    "ReferenceImage",
    "build_request",
    "PlayableHandle",
    "ResultResolver",
]
