"""
Video Generation Client

Single entry point for a generation run:
- Build the request from prompt, optional reference image and video count
- Submit it and poll the long-running operation to completion
- Download every generated video into a playable local handle
- Classify any failure once, at the top, for display

Usage:
    client = VideoGenerationClient()
    outcome = await client.run("a cat", encoded_image="", output_count=2)
    if outcome.quota_exceeded:
        ...
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Optional, Protocol

from core.config import get_config

from .backend import GeminiVideoBackend, VideoBackend
from .error_classifier import classify_error
from .errors import ClassifiedError
from .fetcher import HttpMediaFetcher, MediaFetcher
from .poller import OperationPoller, Tick
from .request_builder import build_request
from .resolver import PlayableHandle, ResultResolver

logger = logging.getLogger(__name__)

STATUS_GENERATING = "Generating..."
STATUS_DONE = "Done."


@dataclass
class GenerationOutcome:
    """What a generation run hands to the rendering surface."""
    handles: list[PlayableHandle] = field(default_factory=list)
    status: str = ""
    quota_exceeded: bool = False
    error: Optional[ClassifiedError] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None

    def release(self):
        """Release every handle."""
        for handle in self.handles:
            handle.release()


class GenerationView(Protocol):
    """Rendering surface driven by ``VideoGenerationClient.generate``."""

    def set_busy(self, busy: bool) -> None:
        ...

    def show_status(self, status: str) -> None:
        ...

    def show_quota_error(self, visible: bool) -> None:
        ...

    def show_media(self, handles: list[PlayableHandle]) -> None:
        ...


class VideoGenerationClient:
    """
    Orchestrates RequestBuilder -> OperationPoller -> ResultResolver.

    The client keeps no state between runs apart from its collaborators;
    overlapping runs are the caller's concern.
    """

    def __init__(
        self,
        config: Optional[Any] = None,
        backend: Optional[VideoBackend] = None,
        fetcher: Optional[MediaFetcher] = None,
        output_dir: Optional[Path] = None,
        tick: Optional[Tick] = None,
        on_progress: Optional[Callable[[str, int, str], None]] = None,
    ):
        """
        Initialize the video generation client.

        Args:
            config: Optional config override
            backend: Generation service (defaults to Gemini/Veo)
            fetcher: Media downloader (defaults to httpx)
            output_dir: Save downloaded videos here; in-memory only when None
            tick: Delay coroutine used between status checks
            on_progress: Callback for progress updates (request_id, percent, message)
        """
        self.config = config or get_config()
        self.backend = backend or GeminiVideoBackend(self.config)
        self.fetcher = fetcher or HttpMediaFetcher(self.config)

        poller_kwargs = {}
        if tick is not None:
            poller_kwargs["tick"] = tick
        self.poller = OperationPoller(
            self.backend,
            interval_seconds=self.config.polling.interval_seconds,
            max_attempts=self.config.polling.max_attempts,
            max_duration_seconds=self.config.polling.max_duration_seconds,
            on_progress=on_progress,
            **poller_kwargs,
        )
        self.resolver = ResultResolver(self.fetcher, output_dir=output_dir)

    async def close(self):
        """Close the media fetcher, if it holds a connection pool."""
        close = getattr(self.fetcher, "close", None)
        if close is not None:
            await close()

    async def generate_videos(
        self,
        prompt: str,
        encoded_image: Optional[str],
        output_count: Any,
    ) -> list[PlayableHandle]:
        """
        Run the pipeline without classification; failures propagate.

        Args:
            prompt: Text description of the video to generate
            encoded_image: Base64 reference image, or empty for text-only
            output_count: Number of videos to request

        Returns:
            Playable handles, in the order the service listed the videos
        """
        request = build_request(prompt, encoded_image, output_count, model=self.config.models.video_model)
        logger.info(f"Starting generation {request.request_id}: {request.output_count} video(s)")

        operation = await self.poller.run(request)
        handles = await self.resolver.resolve(operation)

        logger.info(f"Generation {request.request_id} produced {len(handles)} video(s)")
        return handles

    async def run(
        self,
        prompt: str,
        encoded_image: Optional[str] = None,
        output_count: Any = 1,
    ) -> GenerationOutcome:
        """Run the pipeline; every failure is caught here and classified."""
        try:
            handles = await self.generate_videos(prompt, encoded_image, output_count)
        except Exception as e:
            classified = classify_error(e)
            return GenerationOutcome(
                status="" if classified.show_quota_affordance else classified.message,
                quota_exceeded=classified.show_quota_affordance,
                error=classified,
            )

        return GenerationOutcome(handles=handles, status=STATUS_DONE)

    async def generate(
        self,
        view: GenerationView,
        prompt: str,
        encoded_image: Optional[str] = None,
        output_count: Any = 1,
    ) -> GenerationOutcome:
        """Drive a view through one run: lock inputs, generate, render, unlock."""
        view.show_status(STATUS_GENERATING)
        view.show_media([])
        view.set_busy(True)
        view.show_quota_error(False)

        try:
            outcome = await self.run(prompt, encoded_image, output_count)

            if outcome.succeeded:
                view.show_media(outcome.handles)
            view.show_quota_error(outcome.quota_exceeded)
            view.show_status(outcome.status)
        finally:
            view.set_busy(False)

        return outcome
