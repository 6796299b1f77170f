"""
Media Fetcher - download generated video bytes over HTTP.
"""

import logging
from typing import Any, Optional, Protocol

import httpx

from core.config import get_config

from .errors import ErrorKind, VideoGenerationError

logger = logging.getLogger(__name__)

GEMINI_API_HOST = "generativelanguage.googleapis.com"
API_KEY_HEADER = "x-goog-api-key"


class MediaFetcher(Protocol):
    """Generic byte fetch over a resolved URI."""

    async def fetch(self, uri: str) -> bytes:
        ...


class HttpMediaFetcher:
    """
    Fetches media with a shared httpx client.

    Gemini file URIs require the API key. A request hook adds it only to
    requests for the Gemini API host and strips it from every other host,
    so a redirect to a storage host never carries the key.
    """

    def __init__(self, config: Optional[Any] = None, http_client: Optional[httpx.AsyncClient] = None):
        self.config = config or get_config()
        self._http_client = http_client
        if http_client is not None:
            self._install_hook(http_client)

    def _install_hook(self, client: httpx.AsyncClient):
        hooks = client.event_hooks
        hooks["request"] = [*hooks.get("request", []), self._attach_api_key]
        client.event_hooks = hooks

    async def _attach_api_key(self, request: httpx.Request):
        """Runs for every hop, redirects included."""
        if request.url.host == GEMINI_API_HOST and self.config.api.gemini_api_key:
            request.headers[API_KEY_HEADER] = self.config.api.gemini_api_key
        else:
            request.headers.pop(API_KEY_HEADER, None)

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                timeout=self.config.output.download_timeout,
                follow_redirects=True,
            )
            self._install_hook(self._http_client)
        return self._http_client

    async def close(self):
        """Close the HTTP client."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None

    async def fetch(self, uri: str) -> bytes:
        client = await self._get_client()

        try:
            response = await client.get(uri, follow_redirects=True)
        except httpx.TimeoutException as e:
            raise VideoGenerationError(
                f"Video download timeout: {type(e).__name__}",
                error_code="TIMEOUT",
                kind=ErrorKind.TRANSPORT,
            )
        except httpx.RequestError as e:
            raise VideoGenerationError(
                f"Video download failed: {type(e).__name__}: {e}",
                error_code="REQUEST_ERROR",
                kind=ErrorKind.TRANSPORT,
            )

        if not response.is_success:
            # Error bodies from the service are already {"error": {...}} JSON
            raise VideoGenerationError(
                response.text or f"Video download failed with HTTP {response.status_code}",
                error_code=f"HTTP_{response.status_code}",
            )

        logger.info(f"Video downloaded: {uri[:80]} ({len(response.content) / 1024 / 1024:.1f} MB)")
        return response.content
