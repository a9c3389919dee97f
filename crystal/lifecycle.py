"""
Lifecycle state - initialization phases and the readiness state machine.

Readiness moves exactly once out of PENDING:

    PENDING -> READY     every phase succeeded
    PENDING -> FAILED    a phase raised

Both outcomes are terminal. The completion future is created with the state
and settled after listeners have been notified.
"""

from __future__ import annotations

import asyncio
from enum import Enum
from typing import Any, Optional


class ReadinessState(Enum):
    """Readiness states."""
    PENDING = "pending"
    READY = "ready"
    FAILED = "failed"


class InitPhase(Enum):
    """Initialization phases, in execution order."""
    CONFIG = "config"
    PRE_INIT = "pre-init"
    RESOURCES = "resources"
    POST_INIT = "post-init"


class LifecycleError(Exception):
    """Raised when a readiness transition is not allowed."""
    pass


def _retrieve(future: "asyncio.Future[Any]") -> None:
    # Failures are logged by the application; mark the exception as retrieved
    if not future.cancelled():
        future.exception()


class Readiness:
    """
    Single-resolution readiness state bound to one event loop.

    Usage:
        readiness = Readiness(loop)
        readiness.mark_ready()
        readiness.settle()
        await readiness.future
    """

    def __init__(self, loop: asyncio.AbstractEventLoop):
        self.state = ReadinessState.PENDING
        self.error: Optional[BaseException] = None
        self.future: "asyncio.Future[None]" = loop.create_future()
        self.future.add_done_callback(_retrieve)

    @property
    def is_ready(self) -> bool:
        return self.state is ReadinessState.READY

    @property
    def is_settled(self) -> bool:
        return self.state is not ReadinessState.PENDING

    def mark_ready(self) -> None:
        self._transition(ReadinessState.READY)

    def mark_failed(self, error: BaseException) -> None:
        self._transition(ReadinessState.FAILED)
        self.error = error

    def settle(self) -> None:
        """Resolve or reject the future according to the terminal state."""
        if self.future.done():
            return
        if self.state is ReadinessState.READY:
            self.future.set_result(None)
        elif self.state is ReadinessState.FAILED:
            self.future.set_exception(self.error)
        else:
            raise LifecycleError("Cannot settle readiness while still pending")

    def _transition(self, target: ReadinessState) -> None:
        if self.state is not ReadinessState.PENDING:
            raise LifecycleError(
                f"Cannot move to {target.value}: readiness already {self.state.value}"
            )
        self.state = target
