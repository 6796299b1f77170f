"""
VeoStudio Services

- video_generation: Veo request, polling, download and error classification
"""

from .video_generation import (
    VideoGenerationClient,
    GenerationOutcome,
    ClassifiedError,
    ErrorKind,
)

__all__ = [
    "VideoGenerationClient",
    "GenerationOutcome",
    "ClassifiedError",
    "ErrorKind",
]
