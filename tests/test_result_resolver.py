"""
Tests for resolving finished operations into playable handles.

Run with:
    python -m pytest tests/test_result_resolver.py -v
"""

import asyncio
import base64
import json
import os
import sys
from unittest.mock import AsyncMock

import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from services.video_generation import (
    ErrorKind,
    PlayableHandle,
    ResultResolver,
    VideoGenerationError,
    classify_error,
)


class DelayedFetcher:
    """Fetcher whose downloads finish after per-URI delays."""

    def __init__(self, delays: dict[str, float]):
        self.delays = delays
        self.completed: list[str] = []

    async def fetch(self, uri: str) -> bytes:
        await asyncio.sleep(self.delays[uri])
        self.completed.append(uri)
        return uri.encode()


class TestEmptyResults:
    """A finished operation must produce at least one video."""

    @pytest.mark.asyncio
    async def test_no_payload(self, mock_fetcher, operation_factory):
        resolver = ResultResolver(mock_fetcher)

        with pytest.raises(VideoGenerationError) as exc_info:
            await resolver.resolve(operation_factory(done=True, uris=None))

        assert exc_info.value.kind == ErrorKind.MALFORMED
        assert str(exc_info.value) == "No videos generated"
        mock_fetcher.fetch.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_empty_media_list(self, mock_fetcher, operation_factory):
        """A payload with an empty list is still a failure."""
        resolver = ResultResolver(mock_fetcher)

        with pytest.raises(VideoGenerationError) as exc_info:
            await resolver.resolve(operation_factory(done=True, uris=[]))

        assert exc_info.value.kind == ErrorKind.MALFORMED
        assert str(exc_info.value) == "No videos generated"

    @pytest.mark.asyncio
    async def test_embedded_failure_is_structured(self, mock_fetcher, operation_factory):
        """A failed operation surfaces its server error as structured JSON."""
        operation = operation_factory(
            done=True,
            error={"code": 429, "message": "Resource exhausted", "status": "RESOURCE_EXHAUSTED"},
        )
        resolver = ResultResolver(mock_fetcher)

        with pytest.raises(VideoGenerationError) as exc_info:
            await resolver.resolve(operation)

        payload = json.loads(str(exc_info.value))
        assert payload["error"]["code"] == 429
        assert classify_error(exc_info.value).kind == ErrorKind.QUOTA_EXCEEDED


class TestFetching:
    """Concurrent downloads."""

    @pytest.mark.asyncio
    async def test_order_preserved_despite_completion_order(self, operation_factory):
        """Completion order C < A < B still yields [A, B, C]."""
        fetcher = DelayedFetcher({
            "https://media/A": 0.02,
            "https://media/B": 0.04,
            "https://media/C": 0.0,
        })
        resolver = ResultResolver(fetcher)

        handles = await resolver.resolve(
            operation_factory(done=True, uris=["https://media/A", "https://media/B", "https://media/C"])
        )

        assert fetcher.completed == ["https://media/C", "https://media/A", "https://media/B"]
        assert [h.source_uri for h in handles] == ["https://media/A", "https://media/B", "https://media/C"]
        assert [h.content for h in handles] == [b"https://media/A", b"https://media/B", b"https://media/C"]

    @pytest.mark.asyncio
    async def test_uri_is_unescaped(self, mock_fetcher, operation_factory):
        resolver = ResultResolver(mock_fetcher)

        await resolver.resolve(
            operation_factory(done=True, uris=["https%3A%2F%2Fmedia%2Fv%3Falt%3Dmedia"])
        )

        mock_fetcher.fetch.assert_awaited_once_with("https://media/v?alt=media")

    @pytest.mark.asyncio
    async def test_mime_type_defaults_to_mp4(self, mock_fetcher, operation_factory):
        resolver = ResultResolver(mock_fetcher)
        handles = await resolver.resolve(operation_factory(done=True, uris=["https://media/a"]))
        assert handles[0].mime_type == "video/mp4"

    @pytest.mark.asyncio
    async def test_single_failure_fails_everything(self, operation_factory):
        """First failure cancels the other downloads; no partial result."""
        cancelled = asyncio.Event()

        async def fetch(uri: str) -> bytes:
            if uri.endswith("bad"):
                raise VideoGenerationError("Video download failed: ConnectError: refused")
            try:
                await asyncio.sleep(60)
            except asyncio.CancelledError:
                cancelled.set()
                raise
            return b"never"

        fetcher = AsyncMock()
        fetcher.fetch = AsyncMock(side_effect=fetch)
        resolver = ResultResolver(fetcher)

        with pytest.raises(VideoGenerationError, match="ConnectError"):
            await resolver.resolve(
                operation_factory(done=True, uris=["https://media/slow", "https://media/bad"])
            )

        assert cancelled.is_set()

    @pytest.mark.asyncio
    async def test_saved_files_cleaned_up_on_failure(self, tmp_path, operation_factory):
        async def fetch(uri: str) -> bytes:
            if uri.endswith("bad"):
                await asyncio.sleep(0.01)
                raise VideoGenerationError("boom")
            return b"video"

        fetcher = AsyncMock()
        fetcher.fetch = AsyncMock(side_effect=fetch)
        resolver = ResultResolver(fetcher, output_dir=tmp_path)

        with pytest.raises(VideoGenerationError):
            await resolver.resolve(
                operation_factory(done=True, uris=["https://media/good", "https://media/bad"])
            )

        assert list(tmp_path.iterdir()) == []

    @pytest.mark.asyncio
    async def test_saves_to_output_dir(self, tmp_path, mock_fetcher, operation_factory):
        resolver = ResultResolver(mock_fetcher, output_dir=tmp_path / "videos")

        handles = await resolver.resolve(
            operation_factory(done=True, uris=["https://media/a", "https://media/b"])
        )

        assert len(handles) == 2
        for handle in handles:
            assert handle.path.exists()
            assert handle.path.read_bytes() == handle.content
            assert handle.uri.startswith("file://")


class TestPlayableHandle:
    """Handle lifetime."""

    def test_in_memory_uri(self):
        handle = PlayableHandle(source_uri="https://media/a", content=b"abc")
        assert handle.uri == "data:video/mp4;base64," + base64.b64encode(b"abc").decode()
        assert handle.size_bytes == 3

    def test_release_removes_file(self, tmp_path):
        handle = PlayableHandle(source_uri="https://media/a", content=b"abc")
        path = handle.save(tmp_path)
        assert path.exists()

        handle.release()

        assert not path.exists()
        assert handle.released
        assert handle.content == b""

    def test_release_twice_is_safe(self):
        handle = PlayableHandle(source_uri="https://media/a", content=b"abc")
        handle.release()
        handle.release()
        assert handle.released

    def test_released_handle_has_no_uri(self):
        handle = PlayableHandle(source_uri="https://media/a", content=b"abc")
        handle.release()
        with pytest.raises(ValueError):
            _ = handle.uri
