"""Error types raised by pyst.

Every failure surfaces to the CLI as a subclass of StError; nothing below the
CLI swallows them.
"""

from typing import Any, List, Optional


class StError(Exception):
    """Base class for all pyst errors."""


class NotARepository(StError):
    """No active git repository was found."""

    def __init__(self, path: Optional[str] = None):
        where = f" at {path}" if path else ""
        super().__init__(f"Not in a git repository{where}")


class BranchUnavailable(StError):
    """An expected ref, remote or target is missing."""


class BranchNotTracked(StError):
    """A branch is not present in the stack tree."""

    def __init__(self, branch: str):
        self.branch = branch
        super().__init__(f"Branch `{branch}` is not tracked with `st`.")


class RemoteApiFailure(StError):
    """Wraps an error returned by the GitHub API."""

    def __init__(self, action: str, status: Optional[int] = None, data: Any = None):
        self.action = action
        self.status = status
        self.data = data
        detail = f"HTTP {status}" if status is not None else "no HTTP status"
        message = f"GitHub API call failed while trying to {action} ({detail})"
        if data:
            message += f": {data}"
        super().__init__(message)


class PromptCancelled(StError):
    """The user aborted an interactive prompt."""

    def __init__(self, prompt: str = ""):
        super().__init__(f"Prompt cancelled: {prompt}" if prompt else "Prompt cancelled")


class ConfigInvalid(StError):
    """The global configuration failed validation."""


class DirtyWorkingTree(StError):
    """The working tree has uncommitted changes."""

    def __init__(self) -> None:
        super().__init__(
            "Working tree has uncommitted changes. Commit or stash them before submitting."
        )


class NeedsRestack(StError):
    """One or more branches are not based on their parent's tip."""

    def __init__(self, branches: List[str]):
        self.branches = branches
        names = ", ".join(f"`{b}`" for b in branches)
        super().__init__(
            f"Stack is not restacked ({names} not based on parent tip). "
            "Run `st restack` before submitting."
        )


class TreeCorrupted(StError):
    """The persisted stack tree violates its invariants."""
