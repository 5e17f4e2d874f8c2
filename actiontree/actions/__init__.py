"""Action tree with inherited pre/post-execution hooks."""

from .base import Action
from .context import ExecutionContext, background, with_cancel, with_deadline, with_timeout
from .errors import (
    ActionError,
    ContextCancelledError,
    ContextError,
    CycleError,
    DeadlineExceededError,
    SelfReferenceError,
    StructuralError,
)
from .hooks import HookStage
from .runner import ActionResult, ActionStatus, cancel_on_signals, run

__all__ = [
    "Action",
    "ActionError",
    "ActionResult",
    "ActionStatus",
    "ContextCancelledError",
    "ContextError",
    "CycleError",
    "DeadlineExceededError",
    "ExecutionContext",
    "HookStage",
    "SelfReferenceError",
    "StructuralError",
    "background",
    "cancel_on_signals",
    "run",
    "with_cancel",
    "with_deadline",
    "with_timeout",
]
