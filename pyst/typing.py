"""Common types used across the codebase."""

from typing import List, Protocol, Sequence


class GitInterface(Protocol):
    """Version-control capabilities the stack engine consumes."""

    def run_cmd(self, command: str) -> str:
        ...

    def must_git(self, command: str) -> str:
        ...

    def git_dir(self) -> str:
        ...

    def current_branch(self) -> str:
        ...

    def local_branches(self) -> List[str]:
        ...

    def remotes(self) -> List[str]:
        ...

    def remote_url(self, remote_name: str) -> str:
        ...

    def branch_tip(self, branch: str) -> str:
        ...

    def needs_restack(self, branch: str, parent: str) -> bool:
        ...

    def is_clean(self) -> bool:
        ...

    def push_branch(self, branch: str, remote_name: str, force: bool = False) -> None:
        ...

class PromptInterface(Protocol):
    """Interactive prompts. Each method raises PromptCancelled on abort."""

    def text(self, message: str, default: str = "") -> str:
        ...

    def select(self, message: str, options: Sequence[str]) -> str:
        ...

    def confirm(self, message: str, default: bool = True) -> bool:
        ...

    def editor(self, message: str, extension: str = ".md") -> str:
        ...
