"""
Result Resolver - turn a finished operation into playable local videos.

All downloads run concurrently and are joined fail-fast: the first failure
cancels the remaining downloads and no partial result is returned. Output
order always follows the operation's media order.
"""

import asyncio
import base64
import logging
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
from urllib.parse import unquote

from .errors import ErrorKind, VideoGenerationError, structured_error_message
from .fetcher import MediaFetcher
from .operation import MediaDescriptor, Operation

logger = logging.getLogger(__name__)

DEFAULT_VIDEO_MIME_TYPE = "video/mp4"


@dataclass
class PlayableHandle:
    """
    Locally resolvable reference to downloaded video bytes.

    The caller owns the handle and must call ``release()`` once the video is
    no longer displayed.
    """
    source_uri: str
    content: bytes
    mime_type: str = DEFAULT_VIDEO_MIME_TYPE
    path: Optional[Path] = None
    handle_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    released: bool = False

    @property
    def uri(self) -> str:
        """file:// URI when saved to disk, data: URI otherwise."""
        if self.released:
            raise ValueError(f"Handle {self.handle_id} has been released")
        if self.path is not None:
            return self.path.resolve().as_uri()
        encoded = base64.b64encode(self.content).decode("ascii")
        return f"data:{self.mime_type};base64,{encoded}"

    @property
    def size_bytes(self) -> int:
        return len(self.content)

    def save(self, output_dir: Path) -> Path:
        """Write the bytes under output_dir; the file is removed on release."""
        output_dir.mkdir(parents=True, exist_ok=True)
        output_path = output_dir / f"video_{self.handle_id[:8]}.mp4"
        with open(output_path, "wb") as f:
            f.write(self.content)
        self.path = output_path
        return output_path

    def release(self):
        """Drop the buffer and delete any saved file. Safe to call twice."""
        if self.released:
            return
        if self.path is not None:
            self.path.unlink(missing_ok=True)
            self.path = None
        self.content = b""
        self.released = True


class ResultResolver:
    """
    Downloads every video of a completed operation.

    Usage:
        resolver = ResultResolver(HttpMediaFetcher(), output_dir=Path("output"))
        handles = await resolver.resolve(operation)
    """

    def __init__(self, fetcher: MediaFetcher, output_dir: Optional[Path] = None):
        self.fetcher = fetcher
        self.output_dir = output_dir

    @staticmethod
    def media_of(operation: Operation) -> list[MediaDescriptor]:
        """Extract the media list, rejecting failed or empty operations."""
        if operation.error:
            error = operation.error
            raise VideoGenerationError(
                structured_error_message(error.get("code"), error.get("message"), error.get("status")),
                error_code=f"OPERATION_{error.get('code')}",
            )

        if not operation.media:
            raise VideoGenerationError(
                "No videos generated",
                error_code="NO_MEDIA",
                kind=ErrorKind.MALFORMED,
            )
        return operation.media

    async def _resolve_one(self, descriptor: MediaDescriptor) -> PlayableHandle:
        url = unquote(descriptor.uri)
        content = await self.fetcher.fetch(url)
        handle = PlayableHandle(
            source_uri=url,
            content=content,
            mime_type=descriptor.mime_type or DEFAULT_VIDEO_MIME_TYPE,
        )
        if self.output_dir is not None:
            handle.save(self.output_dir)
        return handle

    async def resolve(self, operation: Operation) -> list[PlayableHandle]:
        """Fetch all media concurrently, preserving descriptor order."""
        media = self.media_of(operation)
        logger.info(f"Resolving {len(media)} video(s) from {operation.name}")

        tasks = [asyncio.ensure_future(self._resolve_one(d)) for d in media]
        try:
            return list(await asyncio.gather(*tasks))
        except BaseException:
            for task in tasks:
                task.cancel()
            # Reap cancelled tasks and free what already finished
            outcomes = await asyncio.gather(*tasks, return_exceptions=True)
            for outcome in outcomes:
                if isinstance(outcome, PlayableHandle):
                    outcome.release()
            raise
