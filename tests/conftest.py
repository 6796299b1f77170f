"""
Shared fixtures for the video generation tests.
"""

import os
import sys
from typing import Optional
from unittest.mock import AsyncMock

import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.config import Config, reload_config
from services.video_generation import MediaDescriptor, Operation

ENV_VARS = (
    "GEMINI_API_KEY",
    "API_KEY",
    "GOOGLE_API_KEY",
    "VEO_MODEL",
    "VEO_POLL_INTERVAL",
    "VEO_POLL_MAX_ATTEMPTS",
    "VEO_POLL_MAX_DURATION",
    "VEO_OUTPUT_DIR",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Run every test against an empty environment and a fresh global config."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    reload_config()
    yield
    reload_config()


@pytest.fixture
def config():
    """Config with instant polling."""
    cfg = Config()
    cfg.polling.interval_seconds = 0.0
    return cfg


def make_operation(
    done: bool,
    uris: Optional[list[str]] = None,
    error: Optional[dict] = None,
    name: str = "operations/test-op",
) -> Operation:
    """Build an operation snapshot; uris=None means no result payload."""
    media = None if uris is None else [MediaDescriptor(uri=uri) for uri in uris]
    return Operation(name=name, done=done, media=media, error=error)


@pytest.fixture
def operation_factory():
    return make_operation


@pytest.fixture
def mock_backend():
    """Backend whose submit/refresh results are set per test."""
    backend = AsyncMock()
    backend.submit = AsyncMock(return_value=make_operation(done=False))
    backend.refresh = AsyncMock(return_value=make_operation(done=True, uris=["https://media/a"]))
    return backend


@pytest.fixture
def mock_fetcher():
    """Fetcher that returns the URI as bytes."""
    fetcher = AsyncMock()
    fetcher.fetch = AsyncMock(side_effect=lambda uri: f"bytes:{uri}".encode())
    return fetcher


@pytest.fixture
def instant_tick():
    """Tick that records delays without sleeping."""
    return AsyncMock(return_value=None)
