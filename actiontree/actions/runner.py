"""Top-level runner turning an action tree execution into a result."""

import signal
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, Optional, Union

import structlog

from ..config import EngineSettings
from ..utils import setup_logging
from .base import Action
from .context import ExecutionContext, background, with_cancel, with_timeout
from .errors import ContextCancelledError, DeadlineExceededError

logger = structlog.get_logger(__name__)

SignalLike = Union[str, int, signal.Signals]


class ActionStatus(Enum):
    """Status of action execution."""

    SUCCESS = "success"
    FAILED = "failed"
    CANCELLED = "cancelled"
    TIMEOUT = "timeout"
    SKIPPED = "skipped"


@dataclass
class ActionResult:
    """Result of action execution."""

    status: ActionStatus
    message: str
    target: str
    execution_time_seconds: float
    details: Dict[str, Any] = field(default_factory=dict)
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        """Check if the execution did not fail."""
        return self.status in (ActionStatus.SUCCESS, ActionStatus.SKIPPED)


def build_context(settings: EngineSettings) -> ExecutionContext:
    """Create the top-level context described by ``settings``."""
    if settings.execution_timeout is None:
        return background()
    return with_timeout(background(), settings.execution_timeout)


def run(
    action: Action,
    context: Optional[ExecutionContext] = None,
    settings: Optional[EngineSettings] = None,
    handle_signals: bool = False,
    configure_logging: bool = False,
) -> ActionResult:
    """Execute the tree containing ``action`` and report the outcome.

    Unlike ``Action.execute()`` this never raises for a failing hook: the
    exception is logged and kept on the returned result. The target is
    resolved once and always runs with the context of this call.

    Args:
        action: Any action of the tree to execute
        context: Context to execute with; built from settings if omitted
        settings: Engine settings, defaults loaded from the environment
        handle_signals: Cancel the execution on ``settings.cancel_signals``
        configure_logging: Set up logging from ``settings.log_level`` and
            ``settings.log_format`` first

    Returns:
        Result of the execution
    """
    settings = settings or EngineSettings()
    if configure_logging:
        setup_logging(settings.log_level, settings.log_format)
    if context is None:
        context = build_context(settings)
    if handle_signals:
        context = with_cancel(context)
        with cancel_on_signals(context, settings.cancel_signals):
            return _run(action, context, settings)
    return _run(action, context, settings)


def _run(
    action: Action, context: ExecutionContext, settings: EngineSettings
) -> ActionResult:
    start_time = time.time()
    target = action.root().resolve_target()

    if not target.runnable:
        logger.info("Target action is not runnable", target=target.path)
        return ActionResult(
            status=ActionStatus.SKIPPED,
            message=f"Action '{target.path}' is not runnable",
            target=target.path,
            execution_time_seconds=time.time() - start_time,
        )

    logger.info("Executing action", target=target.path, deadline=context.deadline)

    try:
        target.execute_chain(context)

    except DeadlineExceededError as e:
        execution_time = time.time() - start_time
        logger.error(
            "Action execution timed out",
            target=target.path,
            timeout=settings.execution_timeout,
            execution_time=execution_time,
        )
        return ActionResult(
            status=ActionStatus.TIMEOUT,
            message=f"Action '{target.path}' timed out",
            target=target.path,
            details={"timeout_seconds": settings.execution_timeout},
            execution_time_seconds=execution_time,
            error=e,
        )

    except ContextCancelledError as e:
        execution_time = time.time() - start_time
        logger.warning(
            "Action execution cancelled",
            target=target.path,
            execution_time=execution_time,
        )
        return ActionResult(
            status=ActionStatus.CANCELLED,
            message=f"Action '{target.path}' was cancelled",
            target=target.path,
            execution_time_seconds=execution_time,
            error=e,
        )

    except Exception as e:
        execution_time = time.time() - start_time
        logger.error(
            "Action execution failed",
            target=target.path,
            error=str(e),
            execution_time=execution_time,
        )
        return ActionResult(
            status=ActionStatus.FAILED,
            message=f"Action '{target.path}' failed: {str(e)}",
            target=target.path,
            details={"error": str(e), "error_type": type(e).__name__},
            execution_time_seconds=execution_time,
            error=e,
        )

    return ActionResult(
        status=ActionStatus.SUCCESS,
        message=f"Action '{target.path}' completed",
        target=target.path,
        execution_time_seconds=time.time() - start_time,
    )


def _to_signal(sig: SignalLike) -> signal.Signals:
    if isinstance(sig, str):
        return signal.Signals[sig.upper()]
    return signal.Signals(sig)


@contextmanager
def cancel_on_signals(
    context: ExecutionContext, signals: Iterable[SignalLike] = ("SIGINT", "SIGTERM")
) -> Iterator[ExecutionContext]:
    """Cancel ``context`` when one of ``signals`` is received.

    Previous handlers are restored on exit. Must be used from the main thread.

    Args:
        context: Cancelable context to cancel
        signals: Signal names or numbers to listen for

    Yields:
        The same context
    """
    def _handler(signum: int, frame: Any) -> None:
        logger.warning("Received signal, cancelling execution", signal=signal.Signals(signum).name)
        context.cancel()

    previous = {}
    try:
        for sig in signals:
            signum = _to_signal(sig)
            previous[signum] = signal.signal(signum, _handler)
        yield context
    finally:
        for signum, handler in previous.items():
            signal.signal(signum, handler if handler is not None else signal.SIG_DFL)
