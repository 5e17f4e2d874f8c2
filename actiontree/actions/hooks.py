"""Hook chain executed against a resolved target action."""

import inspect
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Iterator, Optional, Tuple

import structlog

if TYPE_CHECKING:
    from .base import Action

logger = structlog.get_logger(__name__)

Hook = Callable[["Action"], Any]


class HookStage(Enum):
    """Hook stages in execution order."""

    PERSISTENT_PRE_RUN = "persistent_pre_run"
    PRE_RUN = "pre_run"
    RUN = "run"
    POST_RUN = "post_run"
    PERSISTENT_POST_RUN = "persistent_post_run"

    @property
    def persistent(self) -> bool:
        """Whether descendants inherit this stage's hook."""
        return self in (HookStage.PERSISTENT_PRE_RUN, HookStage.PERSISTENT_POST_RUN)


def resolve_hook(target: "Action", stage: HookStage) -> Optional[Tuple["Action", Hook]]:
    """Find the hook that runs for ``stage`` when ``target`` executes.

    Persistent stages ascend from the target through its ancestors and the
    closest action defining the hook wins. Other stages only look at the
    target itself.

    Args:
        target: Action being executed
        stage: Hook stage to resolve

    Returns:
        Tuple of (owning action, hook) or None if no hook applies
    """
    if not stage.persistent:
        hook = getattr(target, stage.value)
        return (target, hook) if hook is not None else None

    owner: Optional["Action"] = target
    while owner is not None:
        hook = getattr(owner, stage.value)
        if hook is not None:
            return owner, hook
        owner = owner.parent
    return None


def iter_hooks(target: "Action") -> Iterator[Tuple[HookStage, "Action", Hook]]:
    """Yield the hooks to run for ``target`` in order.

    Nothing is yielded for a target without a ``run`` hook. Each stage is
    resolved only when the previous one has been consumed.
    """
    if not target.runnable:
        return

    for stage in HookStage:
        resolved = resolve_hook(target, stage)
        if resolved is None:
            continue
        owner, hook = resolved
        yield stage, owner, hook


def run_hooks(target: "Action") -> None:
    """Run the hook chain for ``target``.

    The first exception raised by a hook aborts the chain and propagates
    unchanged.

    Raises:
        TypeError: If a hook returns an awaitable; use ``run_hooks_async``
    """
    for stage, owner, hook in iter_hooks(target):
        _log_stage(stage, owner, target)
        try:
            result = hook(target)
            if inspect.isawaitable(result):
                if inspect.iscoroutine(result):
                    result.close()
                raise TypeError(
                    f"{stage.value} hook of action '{owner.name}' returned an awaitable; "
                    "use execute_async()"
                )
        except Exception as e:
            _log_failure(stage, owner, target, e)
            raise


async def run_hooks_async(target: "Action") -> None:
    """Run the hook chain for ``target``, awaiting asynchronous hooks."""
    for stage, owner, hook in iter_hooks(target):
        _log_stage(stage, owner, target)
        try:
            result = hook(target)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            _log_failure(stage, owner, target, e)
            raise


def _log_stage(stage: HookStage, owner: "Action", target: "Action") -> None:
    logger.debug(
        "Running hook",
        stage=stage.value,
        action=target.name,
        owner=owner.name,
    )


def _log_failure(
    stage: HookStage, owner: "Action", target: "Action", error: Exception
) -> None:
    logger.error(
        "Hook failed",
        stage=stage.value,
        action=target.name,
        owner=owner.name,
        error=str(error),
        error_type=type(error).__name__,
    )
