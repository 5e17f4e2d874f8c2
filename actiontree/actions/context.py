"""Cancellation and deadline tokens passed down the action tree.

An :class:`ExecutionContext` is advisory: the engine never interrupts a
running hook. Long-running hooks are expected to poll ``done()`` (or block
on ``wait()``) and stop by raising ``context.error`` once it is set.
"""

import threading
import time
from typing import List, Optional

import structlog

from .errors import ContextCancelledError, ContextError, DeadlineExceededError

logger = structlog.get_logger(__name__)


class ExecutionContext:
    """Cancellation/deadline token with parent-to-child propagation."""

    def __init__(
        self,
        parent: Optional["ExecutionContext"] = None,
        deadline: Optional[float] = None,
        cancelable: bool = True,
    ) -> None:
        """Initialize execution context.

        Args:
            parent: Context whose cancellation this context inherits
            deadline: Absolute ``time.monotonic()`` value after which the
                context is done
            cancelable: Whether ``cancel()`` is allowed on this context
        """
        self.parent = parent
        self.cancelable = cancelable
        self._event = threading.Event()
        self._error: Optional[ContextError] = None
        self._children: List["ExecutionContext"] = []
        self._lock = threading.Lock()

        if parent is not None and parent.deadline is not None:
            deadline = parent.deadline if deadline is None else min(deadline, parent.deadline)
        self._deadline = deadline

        if parent is not None:
            parent._attach(self)

    def __repr__(self) -> str:
        state = "done" if self.done() else "active"
        return f"<ExecutionContext {state} deadline={self._deadline}>"

    @property
    def deadline(self) -> Optional[float]:
        """Monotonic deadline, or None if the context never expires."""
        return self._deadline

    @property
    def error(self) -> Optional[ContextError]:
        """Why the context is done, or None while it is still active."""
        self._check_deadline()
        return self._error

    def remaining(self) -> Optional[float]:
        """Seconds left until the deadline (never negative), or None."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def done(self) -> bool:
        """Check whether the context has been cancelled or has expired."""
        self._check_deadline()
        return self._event.is_set()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the context is done or ``timeout`` seconds pass.

        Args:
            timeout: Maximum seconds to wait, None to wait indefinitely

        Returns:
            True if the context is done
        """
        remaining = self.remaining()
        if remaining is not None and (timeout is None or remaining < timeout):
            if self._event.wait(remaining):
                return True
            return self.done()
        return self._event.wait(timeout) or self.done()

    def raise_if_done(self) -> None:
        """Raise the context error if the context is done."""
        error = self.error
        if error is not None:
            raise error

    def cancel(self) -> None:
        """Cancel this context and every context derived from it."""
        if not self.cancelable:
            raise TypeError("background context can't be cancelled")
        self._finish(ContextCancelledError())

    def _check_deadline(self) -> None:
        if (
            self._deadline is not None
            and not self._event.is_set()
            and time.monotonic() >= self._deadline
        ):
            self._finish(DeadlineExceededError())

    def _attach(self, child: "ExecutionContext") -> None:
        # A root background context never finishes
        if not self.cancelable and self.parent is None and self._deadline is None:
            return
        with self._lock:
            if self._error is None:
                self._children.append(child)
                return
            error = self._error
        child._finish(error)

    def _detach(self, child: "ExecutionContext") -> None:
        with self._lock:
            if child in self._children:
                self._children.remove(child)

    def _finish(self, error: ContextError) -> None:
        with self._lock:
            if self._error is not None:
                return
            self._error = error
            children, self._children = self._children, []
        self._event.set()

        if self.parent is not None:
            self.parent._detach(self)

        logger.debug(
            "Execution context done",
            reason=type(error).__name__,
            children=len(children),
        )

        for child in children:
            child._finish(error)


def background() -> ExecutionContext:
    """Create a non-cancelable context with no deadline."""
    return ExecutionContext(cancelable=False)


def with_cancel(parent: Optional[ExecutionContext] = None) -> ExecutionContext:
    """Create a cancelable context derived from ``parent``."""
    return ExecutionContext(parent=parent)


def with_deadline(
    parent: Optional[ExecutionContext], deadline: float
) -> ExecutionContext:
    """Create a context that expires at the monotonic time ``deadline``."""
    return ExecutionContext(parent=parent, deadline=deadline)


def with_timeout(
    parent: Optional[ExecutionContext], seconds: float
) -> ExecutionContext:
    """Create a context that expires ``seconds`` from now."""
    return with_deadline(parent, time.monotonic() + seconds)
