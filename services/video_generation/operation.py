"""
Long-running operation model shared by the poller and the resolver.
"""

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class MediaDescriptor:
    """Server-supplied reference to one generated video."""
    uri: str
    mime_type: Optional[str] = None


@dataclass(frozen=True)
class Operation:
    """
    Snapshot of a server-side generation job.

    A snapshot never changes; polling yields a new one. Once ``done`` is
    true the job is terminal and either ``media`` or ``error`` is set.
    """
    name: str
    done: bool = False
    media: Optional[list[MediaDescriptor]] = None
    error: Optional[dict[str, Any]] = None

    # Backend-specific handle needed to re-poll (e.g. the SDK operation)
    raw: Any = None
