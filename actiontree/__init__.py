"""Hierarchical action execution engine."""

from .actions import (
    Action,
    ActionError,
    ActionResult,
    ActionStatus,
    ExecutionContext,
    HookStage,
    background,
    run,
    with_cancel,
    with_deadline,
    with_timeout,
)
from .config import EngineSettings
from .utils import setup_logging

__version__ = "0.1.0"

__all__ = [
    "Action",
    "ActionError",
    "ActionResult",
    "ActionStatus",
    "EngineSettings",
    "ExecutionContext",
    "HookStage",
    "background",
    "run",
    "setup_logging",
    "with_cancel",
    "with_deadline",
    "with_timeout",
]
