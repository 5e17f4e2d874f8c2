"""Pytest configuration and fixtures for actiontree tests."""

from typing import Callable, List, Tuple

import pytest
import structlog

from actiontree.actions import Action
from actiontree.config import EngineSettings

ROOT_ACTION_NAME = "root"

STAGES = ("persistent_pre_run", "pre_run", "run", "post_run", "persistent_post_run")


class HookRecorder:
    """Records hook invocations as (stage, owner name, target name)."""

    def __init__(self) -> None:
        self.calls: List[Tuple[str, str, str]] = []

    def hook(self, stage: str, owner: str) -> Callable[[Action], None]:
        """Build a hook that records itself when called."""
        def _hook(act: Action) -> None:
            self.calls.append((stage, owner, act.name))
        return _hook

    def failing_hook(self, stage: str, owner: str, error: Exception) -> Callable[[Action], None]:
        """Build a hook that records itself and raises ``error``."""
        def _hook(act: Action) -> None:
            self.calls.append((stage, owner, act.name))
            raise error
        return _hook

    def make_action(self, name: str, executable: bool = False) -> Action:
        """Create an action with every hook recording into this recorder."""
        return Action(
            name=name,
            executable=lambda act: executable,
            **{stage: self.hook(stage, name) for stage in STAGES},
        )

    def make_sub_actions(self, parent: str, count: int) -> List[Action]:
        """Create ``count`` recording actions named after ``parent``."""
        return [
            self.make_action(f"{parent}-sub-action-{i + 1}")
            for i in range(count)
        ]

    @property
    def stages(self) -> List[str]:
        return [stage for stage, _, _ in self.calls]

    @property
    def targets(self) -> List[str]:
        return [target for _, _, target in self.calls]


@pytest.fixture(autouse=True)
def reset_structlog():
    """Restore structlog defaults after every test."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def recorder():
    """Provide a fresh hook recorder."""
    return HookRecorder()


@pytest.fixture
def root_action(recorder):
    """Provide a root action with every hook set and no executable target."""
    return recorder.make_action(ROOT_ACTION_NAME)


@pytest.fixture
def engine_settings():
    """Provide test engine settings."""
    return EngineSettings(
        log_level="DEBUG",
        log_format="plain",
        execution_timeout=5,
    )


@pytest.fixture
def git_tree(recorder):
    """Provide a git-like tree: git -> remote -> add/remove, git -> status."""
    git = recorder.make_action("git")
    remote = recorder.make_action("remote")
    add = recorder.make_action("add")
    remove = recorder.make_action("remove")
    status = recorder.make_action("status")

    remote.add_action(add, remove)
    git.add_action(remote, status)

    return {
        "git": git,
        "remote": remote,
        "add": add,
        "remove": remove,
        "status": status,
    }
