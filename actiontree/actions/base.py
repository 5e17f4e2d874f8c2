"""Action tree nodes, target search and execution entry points."""

import time
import weakref
from dataclasses import dataclass, field
from typing import Callable, Iterator, List, Optional, Tuple

import structlog

from .context import ExecutionContext, background
from .errors import CycleError, SelfReferenceError
from .hooks import Hook, run_hooks, run_hooks_async

logger = structlog.get_logger(__name__)

Predicate = Callable[["Action"], bool]


@dataclass(eq=False)
class Action:
    """A named node in an action tree.

    Hooks run in this order when the action is the execution target:

    * ``persistent_pre_run``: inherited by descendants, closest one wins
    * ``pre_run``: not inherited
    * ``run``: the actual work; an action without it is not runnable
    * ``post_run``: not inherited
    * ``persistent_post_run``: inherited by descendants, closest one wins

    Every hook receives the target action, whichever action defines it.
    A hook fails by raising.
    """

    name: str
    persistent_pre_run: Optional[Hook] = field(default=None, repr=False)
    pre_run: Optional[Hook] = field(default=None, repr=False)
    run: Optional[Hook] = field(default=None, repr=False)
    post_run: Optional[Hook] = field(default=None, repr=False)
    persistent_post_run: Optional[Hook] = field(default=None, repr=False)
    executable: Optional[Predicate] = field(default=None, repr=False)

    _actions: List["Action"] = field(default_factory=list, init=False, repr=False)
    _parent: Optional["weakref.ReferenceType[Action]"] = field(
        default=None, init=False, repr=False
    )
    _context: Optional[ExecutionContext] = field(default=None, init=False, repr=False)

    @property
    def context(self) -> Optional[ExecutionContext]:
        """Execution context, None until the action takes part in an execution."""
        return self._context

    @property
    def parent(self) -> Optional["Action"]:
        """Parent action, or None for a root."""
        return self._parent() if self._parent is not None else None

    @property
    def has_parent(self) -> bool:
        """Check if the action is a child action."""
        return self.parent is not None

    @property
    def actions(self) -> Tuple["Action", ...]:
        """Child actions in insertion order."""
        return tuple(self._actions)

    @property
    def has_sub_actions(self) -> bool:
        """Check if the action has child actions."""
        return len(self._actions) > 0

    @property
    def runnable(self) -> bool:
        """Check if the action itself is runnable."""
        return self.run is not None

    @property
    def path(self) -> str:
        """Space separated names from the root down to this action."""
        names = []
        node: Optional[Action] = self
        while node is not None:
            names.append(node.name)
            node = node.parent
        return " ".join(reversed(names))

    def root(self) -> "Action":
        """Find the root action."""
        node = self
        while node.parent is not None:
            node = node.parent
        return node

    def walk(self) -> Iterator["Action"]:
        """Iterate over this action and its descendants, depth-first pre-order."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node._actions))

    def add_action(self, *actions: "Action") -> None:
        """Add one or more child actions.

        The whole batch is validated before anything is linked. An action
        that already has a parent is moved here.

        Args:
            actions: Actions to append, in order

        Raises:
            TypeError: If an element is not an Action
            SelfReferenceError: If an element is this action
            CycleError: If an element is an ancestor of this action
        """
        ancestors = set()
        node = self.parent
        while node is not None:
            ancestors.add(id(node))
            node = node.parent

        for action in actions:
            if not isinstance(action, Action):
                raise TypeError(f"expected Action, got {type(action).__name__}")
            if action is self:
                raise SelfReferenceError(self)
            if id(action) in ancestors:
                raise CycleError(parent=self, child=action)

        for action in actions:
            previous = action.parent
            if previous is not None:
                previous.remove_action(action)
            action._parent = weakref.ref(self)
            self._actions.append(action)

            logger.debug(
                "Added action",
                parent=self.name,
                action=action.name,
                moved_from=previous.name if previous is not None else None,
            )

    def remove_action(self, *actions: "Action") -> None:
        """Remove one or more child actions. Unknown actions are ignored."""
        removed = {id(action) for action in actions}
        kept = []
        for action in self._actions:
            if id(action) in removed:
                action._parent = None
                logger.debug("Removed action", parent=self.name, action=action.name)
            else:
                kept.append(action)
        self._actions = kept

    def find(self) -> Optional["Action"]:
        """Find the first executable action, depth-first pre-order.

        Returns:
            The first action whose ``executable`` predicate holds, or None
        """
        for action in self.walk():
            if action.executable is not None and action.executable(action):
                return action
        return None

    def resolve_target(self) -> "Action":
        """Find the execution target below this action, falling back to itself."""
        target = self.find()
        return target if target is not None else self

    def execute(self) -> None:
        """Execute the action tree.

        Execution always starts from the root, whichever action this is
        called on. Any exception raised by a hook propagates unchanged.
        """
        if self._context is None:
            self._context = background()

        if self.has_parent:
            return self.root().execute()

        target = self._prepare_target()
        start_time = time.time()
        run_hooks(target)
        self._log_completed(target, start_time)

    def execute_with_context(self, context: ExecutionContext) -> None:
        """Same as ``execute()``, but sets ``context`` on the action first."""
        self._context = context
        self.execute()

    def execute_chain(self, context: ExecutionContext) -> None:
        """Run this action's own hook chain with ``context``, without searching.

        For callers that already resolved the target. Unlike
        ``execute_with_context()`` the context replaces any context the
        action already carries.
        """
        self._context = context
        start_time = time.time()
        run_hooks(self)
        self._log_completed(self, start_time)

    async def execute_async(self) -> None:
        """Execute the action tree, awaiting hooks that return awaitables."""
        if self._context is None:
            self._context = background()

        if self.has_parent:
            return await self.root().execute_async()

        target = self._prepare_target()
        start_time = time.time()
        await run_hooks_async(target)
        self._log_completed(target, start_time)

    async def execute_with_context_async(self, context: ExecutionContext) -> None:
        """Same as ``execute_async()``, but sets ``context`` on the action first."""
        self._context = context
        await self.execute_async()

    def _prepare_target(self) -> "Action":
        target = self.resolve_target()

        # The target keeps a context it already carries
        if target._context is None:
            target._context = self._context

        logger.debug(
            "Resolved execution target",
            root=self.name,
            target=target.path,
            runnable=target.runnable,
        )
        return target

    def _log_completed(self, target: "Action", start_time: float) -> None:
        if not target.runnable:
            logger.debug("Skipped non-runnable action", target=target.path)
            return

        logger.info(
            "Action execution completed",
            target=target.path,
            execution_time=time.time() - start_time,
        )
