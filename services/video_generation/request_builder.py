"""
Request Builder - assembles a generation request from user input.

The reference image arrives already base64-encoded by the upload adapter;
this module only decides whether to attach it.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from core.config import get_config

from .errors import ErrorKind, VideoGenerationError

REFERENCE_MIME_TYPE = "image/png"


@dataclass(frozen=True)
class ReferenceImage:
    """Base64-encoded first frame / style reference."""
    image_bytes: str
    mime_type: str = REFERENCE_MIME_TYPE

    def __post_init__(self):
        if not self.image_bytes:
            raise VideoGenerationError(
                "Reference image payload is empty",
                error_code="EMPTY_IMAGE",
                kind=ErrorKind.MALFORMED,
            )
        if not self.mime_type or "/" not in self.mime_type:
            raise VideoGenerationError(
                f"Invalid reference image media type: {self.mime_type!r}",
                error_code="BAD_MIME_TYPE",
                kind=ErrorKind.MALFORMED,
            )


@dataclass(frozen=True)
class GenerationRequest:
    """Request for video generation."""
    prompt: str
    output_count: int = 1
    model: str = "veo-2.0-generate-001"
    reference_image: Optional[ReferenceImage] = None

    # Request metadata
    request_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=datetime.utcnow)

    def to_payload(self) -> dict[str, Any]:
        """Render the request in the service's wire shape."""
        payload: dict[str, Any] = {
            "model": self.model,
            "prompt": self.prompt,
            "config": {"numberOfVideos": self.output_count},
        }
        if self.reference_image is not None:
            payload["image"] = {
                "imageBytes": self.reference_image.image_bytes,
                "mimeType": self.reference_image.mime_type,
            }
        return payload


def build_request(
    prompt: str,
    encoded_image: Optional[str],
    output_count: Any,
    model: Optional[str] = None,
) -> GenerationRequest:
    """
    Build a GenerationRequest from raw form values.

    Args:
        prompt: Text description of the video to generate
        encoded_image: Base64 reference image, or empty/None for text-only
        output_count: Number of videos requested; must be a positive int
        model: Model override (defaults to the configured video model)

    Returns:
        GenerationRequest ready for submission

    Raises:
        VideoGenerationError: kind MALFORMED when output_count is invalid
    """
    # bool is an int subclass, but True is not a count
    if (
        isinstance(output_count, bool)
        or not isinstance(output_count, int)
        or output_count < 1
    ):
        raise VideoGenerationError(
            f"Number of videos must be a positive integer, got {output_count!r}",
            error_code="BAD_OUTPUT_COUNT",
            kind=ErrorKind.MALFORMED,
        )

    config = get_config()
    reference_image = None
    if encoded_image:
        reference_image = ReferenceImage(
            image_bytes=encoded_image,
            mime_type=config.models.reference_mime_type,
        )

    return GenerationRequest(
        prompt=prompt,
        output_count=output_count,
        model=model or config.models.video_model,
        reference_image=reference_image,
    )
