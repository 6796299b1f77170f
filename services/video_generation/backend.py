"""
Gemini Video Backend

Submits generation requests to Veo through the google-genai SDK and
re-fetches long-running operations by handle.

Usage:
    backend = GeminiVideoBackend()
    operation = await backend.submit(request)
    operation = await backend.refresh(operation)
"""

import base64
import binascii
import logging
from typing import Any, Optional, Protocol

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from core.config import get_config

from .errors import ErrorKind, VideoGenerationError, structured_error_message
from .operation import MediaDescriptor, Operation
from .request_builder import GenerationRequest

logger = logging.getLogger(__name__)

PROVIDER = "gemini"


class VideoBackend(Protocol):
    """What the poller needs from a generation service."""

    async def submit(self, request: GenerationRequest) -> Operation:
        ...

    async def refresh(self, operation: Operation) -> Operation:
        ...


def operation_from_sdk(raw: Any) -> Operation:
    """Translate an SDK GenerateVideosOperation into an Operation snapshot."""
    media = None
    response = getattr(raw, "response", None)
    if response is not None and response.generated_videos is not None:
        media = []
        for generated in response.generated_videos:
            video = generated.video
            if video is None or not video.uri:
                logger.warning("Skipping generated video without a URI")
                continue
            media.append(MediaDescriptor(uri=video.uri, mime_type=video.mime_type))

    return Operation(
        name=raw.name or "",
        done=bool(raw.done),
        media=media,
        error=raw.error,
        raw=raw,
    )


class GeminiVideoBackend:
    """
    Veo video generation via the Gemini API.

    SDK failures are normalized into VideoGenerationError: server errors carry
    the structured {"error": {"code", "message"}} JSON as their message, network
    errors carry the raw text.
    """

    def __init__(self, config: Optional[Any] = None, client: Optional[genai.Client] = None):
        self.config = config or get_config()
        self._client = client

    def _get_client(self) -> genai.Client:
        """Get or create the Gemini client (lazy-loaded)."""
        if self._client is None:
            if not self.config.api.gemini_api_key:
                raise VideoGenerationError(
                    "GEMINI_API_KEY environment variable not set",
                    error_code="NO_API_KEY",
                    provider=PROVIDER,
                    kind=ErrorKind.MALFORMED,
                )
            self._client = genai.Client(
                vertexai=self.config.api.use_vertexai,
                api_key=self.config.api.gemini_api_key,
            )
        return self._client

    @staticmethod
    def _to_sdk_image(request: GenerationRequest) -> Optional[types.Image]:
        if request.reference_image is None:
            return None
        try:
            image_bytes = base64.b64decode(request.reference_image.image_bytes, validate=True)
        except (binascii.Error, ValueError) as e:
            raise VideoGenerationError(
                f"Reference image is not valid base64: {e}",
                error_code="BAD_IMAGE_ENCODING",
                provider=PROVIDER,
                kind=ErrorKind.MALFORMED,
            )
        return types.Image(image_bytes=image_bytes, mime_type=request.reference_image.mime_type)

    async def submit(self, request: GenerationRequest) -> Operation:
        """Submit a generation request; returns the initial operation."""
        client = self._get_client()
        image = self._to_sdk_image(request)

        logger.info(
            f"Veo request: model={request.model}, videos={request.output_count}, "
            f"image={'yes' if image else 'no'}, prompt={request.prompt[:50]}..."
        )

        try:
            raw = await client.aio.models.generate_videos(
                model=request.model,
                prompt=request.prompt,
                image=image,
                config=types.GenerateVideosConfig(number_of_videos=request.output_count),
            )
        except genai_errors.APIError as e:
            raise self._api_error(e)
        except httpx.HTTPError as e:
            raise self._transport_error(e)

        operation = operation_from_sdk(raw)
        logger.info(f"Veo operation created: {operation.name}")
        return operation

    async def refresh(self, operation: Operation) -> Operation:
        """Re-fetch an operation's status from the server."""
        client = self._get_client()
        handle = operation.raw
        if handle is None:
            handle = types.GenerateVideosOperation(name=operation.name)

        try:
            raw = await client.aio.operations.get(handle)
        except genai_errors.APIError as e:
            raise self._api_error(e)
        except httpx.HTTPError as e:
            raise self._transport_error(e)

        return operation_from_sdk(raw)

    @staticmethod
    def _api_error(e: genai_errors.APIError) -> VideoGenerationError:
        logger.error(f"Veo API error: {e.code} {e.status}: {e.message}")
        return VideoGenerationError(
            structured_error_message(e.code, e.message, e.status),
            error_code=f"HTTP_{e.code}",
            provider=PROVIDER,
        )

    @staticmethod
    def _transport_error(e: httpx.HTTPError) -> VideoGenerationError:
        logger.error(f"Veo request failed: {type(e).__name__}: {e}")
        return VideoGenerationError(
            f"Veo request failed: {type(e).__name__}: {e}",
            error_code="TIMEOUT" if isinstance(e, httpx.TimeoutException) else "REQUEST_ERROR",
            provider=PROVIDER,
            kind=ErrorKind.TRANSPORT,
        )
