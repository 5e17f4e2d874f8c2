"""Exceptions raised by the action tree."""

from typing import Any


class ActionError(Exception):
    """Base class for all action tree errors."""


class StructuralError(ActionError):
    """Raised when a tree mutation would break the tree shape."""

    def __init__(self, message: str, parent: Any = None, child: Any = None) -> None:
        """Initialize structural error.

        Args:
            message: Human-readable description
            parent: Action the mutation was attempted on
            child: Offending action
        """
        super().__init__(message)
        self.parent = parent
        self.child = child


class SelfReferenceError(StructuralError):
    """Raised when an action is added as a child of itself."""

    def __init__(self, action: Any = None) -> None:
        super().__init__("action can't be a child of itself", parent=action, child=action)


class CycleError(StructuralError):
    """Raised when an action is added below one of its own descendants."""

    def __init__(self, parent: Any = None, child: Any = None) -> None:
        super().__init__(
            "action can't be a child of its own descendant", parent=parent, child=child
        )


class ContextError(ActionError):
    """Base class for reasons an execution context is done."""


class ContextCancelledError(ContextError):
    """The execution context was cancelled."""

    def __init__(self, message: str = "context cancelled") -> None:
        super().__init__(message)


class DeadlineExceededError(ContextError, TimeoutError):
    """The execution context deadline passed."""

    def __init__(self, message: str = "context deadline exceeded") -> None:
        super().__init__(message)
