"""
Operation Poller - submit a request and wait for the operation to finish.

Polling is a fixed-interval loop with no backoff. The loop is written as a
small state machine (SUBMITTED -> POLLING -> DONE | FAILED) advanced by an
injected ``tick`` coroutine, so it runs the same under any scheduler and
tests can drive it without real time passing.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, replace
from enum import Enum
from typing import Awaitable, Callable, Optional

from .backend import VideoBackend
from .errors import PollTimeoutError
from .operation import Operation
from .request_builder import GenerationRequest

logger = logging.getLogger(__name__)

Tick = Callable[[float], Awaitable[None]]
ProgressCallback = Callable[[str, int, str], None]


class PollPhase(str, Enum):
    """Lifecycle of a polled operation."""
    SUBMITTED = "submitted"
    POLLING = "polling"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class PollState:
    """Immutable snapshot of the polling state machine."""
    phase: PollPhase
    operation: Operation
    attempts: int = 0
    started_at: float = 0.0
    error: Optional[BaseException] = None

    @classmethod
    def submitted(cls, operation: Operation, now: float) -> "PollState":
        phase = PollPhase.DONE if operation.done else PollPhase.SUBMITTED
        return cls(phase=phase, operation=operation, started_at=now)

    @property
    def is_terminal(self) -> bool:
        return self.phase in (PollPhase.DONE, PollPhase.FAILED)

    def advance(self, operation: Operation) -> "PollState":
        """Record one re-fetch result."""
        if self.is_terminal:
            raise RuntimeError(f"Cannot advance a {self.phase.value} poll")
        phase = PollPhase.DONE if operation.done else PollPhase.POLLING
        return replace(self, phase=phase, operation=operation, attempts=self.attempts + 1)

    def fail(self, error: BaseException) -> "PollState":
        return replace(self, phase=PollPhase.FAILED, error=error)


class OperationPoller:
    """
    Submits generation requests and polls them to completion.

    Failures from the backend are propagated untouched; classifying them is
    the caller's job. There is no cancellation: once started, ``wait`` runs
    until the operation is done, the backend fails, or an optional guard
    (``max_attempts`` / ``max_duration_seconds``) trips.

    Usage:
        poller = OperationPoller(GeminiVideoBackend())
        operation = await poller.run(request)
    """

    def __init__(
        self,
        backend: VideoBackend,
        interval_seconds: float = 1.0,
        max_attempts: Optional[int] = None,
        max_duration_seconds: Optional[float] = None,
        tick: Tick = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
        on_progress: Optional[ProgressCallback] = None,
    ):
        self.backend = backend
        self.interval_seconds = interval_seconds
        self.max_attempts = max_attempts
        self.max_duration_seconds = max_duration_seconds
        self._tick = tick
        self._clock = clock
        self.on_progress = on_progress

    def _emit_progress(self, request_id: Optional[str], percent: int, message: str):
        """Emit progress update via callback."""
        if self.on_progress and request_id:
            try:
                self.on_progress(request_id, percent, message)
            except Exception as e:
                logger.warning(f"Progress callback failed: {e}")

    async def submit(self, request: GenerationRequest) -> Operation:
        """Submit the request; a single network call."""
        self._emit_progress(request.request_id, 10, "Submitting request")
        operation = await self.backend.submit(request)
        self._emit_progress(request.request_id, 20, f"Operation queued: {operation.name}")
        return operation

    async def poll(self, operation: Operation) -> Operation:
        """Re-fetch the operation once."""
        return await self.backend.refresh(operation)

    def _check_guard(self, state: PollState):
        if self.max_attempts is not None and state.attempts >= self.max_attempts:
            raise PollTimeoutError(
                f"Operation {state.operation.name} did not complete after "
                f"{state.attempts} status checks",
                attempts=state.attempts,
                elapsed_seconds=self._clock() - state.started_at,
            )

        elapsed = self._clock() - state.started_at
        if self.max_duration_seconds is not None and elapsed >= self.max_duration_seconds:
            raise PollTimeoutError(
                f"Operation {state.operation.name} did not complete within "
                f"{self.max_duration_seconds:g} seconds",
                attempts=state.attempts,
                elapsed_seconds=elapsed,
            )

    async def drive(self, operation: Operation, request_id: Optional[str] = None) -> PollState:
        """Run the state machine to a terminal state and return it."""
        state = PollState.submitted(operation, self._clock())

        while not state.is_terminal:
            try:
                self._check_guard(state)
                logger.info("Waiting for completion")
                await self._tick(self.interval_seconds)
                refreshed = await self.poll(state.operation)
            except Exception as e:
                state = state.fail(e)
                logger.warning(
                    f"Polling {operation.name} failed after {state.attempts} checks: "
                    f"{type(e).__name__}"
                )
                raise

            state = state.advance(refreshed)
            self._emit_progress(
                request_id,
                min(20 + state.attempts, 90),
                f"Processing: {state.phase.value}",
            )

        logger.info(f"Operation {state.operation.name} done after {state.attempts} checks")
        return state

    async def wait(self, operation: Operation, request_id: Optional[str] = None) -> Operation:
        """Poll until the operation reports done; returns the final snapshot."""
        state = await self.drive(operation, request_id)
        return state.operation

    async def run(self, request: GenerationRequest) -> Operation:
        """Submit then wait."""
        operation = await self.submit(request)
        return await self.wait(operation, request.request_id)
