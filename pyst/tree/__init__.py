"""Stack tree model: tracked branches, their parent links and PR metadata.

All references between nodes are branch names looked up in
`StackTree.branches`; nodes never hold each other directly.
"""

import logging
from typing import Dict, List, Optional, Set

from pydantic import BaseModel, Field

from ..errors import BranchNotTracked, StError, TreeCorrupted

logger = logging.getLogger(__name__)


class RemoteMetadata(BaseModel):
    """Publication state of a branch on GitHub."""
    pr_number: int
    # Empty means the tree's default remote.
    remote_name: str = ""
    comment_id: Optional[int] = None


class TrackedBranch(BaseModel):
    """A branch registered in the stack tree."""
    name: str
    parent: Optional[str] = None
    children: List[str] = Field(default_factory=list)
    remote: Optional[RemoteMetadata] = None

    def add_child(self, child: str) -> None:
        if child not in self.children:
            self.children.append(child)

    def remove_child(self, child: str) -> None:
        if child in self.children:
            self.children.remove(child)


class StackTree(BaseModel):
    """The full tree of tracked branches rooted at the trunk."""
    trunk_name: str
    remote_name: str = "origin"
    branches: Dict[str, TrackedBranch] = Field(default_factory=dict)

    @classmethod
    def fresh(cls, trunk_name: str, remote_name: str) -> "StackTree":
        """Create a tree holding only the trunk."""
        return cls(
            trunk_name=trunk_name,
            remote_name=remote_name,
            branches={trunk_name: TrackedBranch(name=trunk_name)},
        )

    def get(self, name: str) -> Optional[TrackedBranch]:
        return self.branches.get(name)

    def must_get(self, name: str) -> TrackedBranch:
        branch = self.branches.get(name)
        if branch is None:
            raise BranchNotTracked(name)
        return branch

    def insert(self, name: str, parent: str) -> TrackedBranch:
        """Track `name` as a child of `parent`."""
        if name in self.branches:
            raise StError(f"Branch `{name}` is already tracked.")
        parent_branch = self.must_get(parent)
        branch = TrackedBranch(name=name, parent=parent)
        self.branches[name] = branch
        parent_branch.add_child(name)
        logger.debug(f"Tracked {name} on top of {parent}")
        return branch

    def delete(self, name: str) -> TrackedBranch:
        """Remove `name`, re-linking its children to its former parent."""
        if name == self.trunk_name:
            raise StError("Cannot delete the trunk branch.")
        branch = self.must_get(name)
        grandparent = self.must_get(branch.parent) if branch.parent else None

        for child in list(branch.children):
            self.must_get(child).parent = branch.parent
            if grandparent is not None:
                grandparent.add_child(child)

        if grandparent is not None:
            grandparent.remove_child(name)
        del self.branches[name]
        logger.debug(f"Deleted {name}, children {branch.children} moved to {branch.parent}")
        return branch

    def reparent(self, name: str, new_parent: str) -> None:
        """Move `name` (and its subtree) on top of `new_parent`."""
        if name == self.trunk_name:
            raise StError("Cannot reparent the trunk branch.")
        branch = self.must_get(name)
        self.must_get(new_parent)
        if new_parent == name or new_parent in self.descendants(name):
            raise StError(f"Cannot move `{name}` onto its own descendant `{new_parent}`.")
        if branch.parent == new_parent:
            return

        if branch.parent is not None:
            self.must_get(branch.parent).remove_child(name)
        branch.parent = new_parent
        self.branches[new_parent].add_child(name)

    def descendants(self, name: str) -> List[str]:
        """All branches below `name`, depth first."""
        result: List[str] = []
        for child in self.must_get(name).children:
            result.append(child)
            result.extend(self.descendants(child))
        return result

    def discover_stack(self, current_branch: str) -> List[str]:
        """Return the stack from the trunk to `current_branch`, trunk first."""
        stack: List[str] = []
        seen: Set[str] = set()
        name: Optional[str] = current_branch
        while name is not None:
            if name in seen:
                raise TreeCorrupted(f"Cycle detected at branch `{name}`.")
            seen.add(name)
            stack.append(name)
            name = self.must_get(name).parent

        if stack[-1] != self.trunk_name:
            raise TreeCorrupted(f"Branch `{current_branch}` does not descend from `{self.trunk_name}`.")
        stack.reverse()
        return stack

    def clear_remote_metadata(self) -> None:
        for branch in self.branches.values():
            branch.remote = None

    def check_invariants(self) -> None:
        """Raise TreeCorrupted if the parent/children graph is inconsistent."""
        roots = [b.name for b in self.branches.values() if b.parent is None]
        if roots != [self.trunk_name]:
            raise TreeCorrupted(f"Expected `{self.trunk_name}` as the only root, found {roots}.")

        for key, branch in self.branches.items():
            if key != branch.name:
                raise TreeCorrupted(f"Branch stored under `{key}` is named `{branch.name}`.")
            if branch.parent is not None:
                parent = self.branches.get(branch.parent)
                if parent is None:
                    raise TreeCorrupted(f"Parent `{branch.parent}` of `{key}` is not tracked.")
                if key not in parent.children:
                    raise TreeCorrupted(f"`{branch.parent}` does not list `{key}` as a child.")
            for child in branch.children:
                child_branch = self.branches.get(child)
                if child_branch is None or child_branch.parent != key:
                    raise TreeCorrupted(f"Child `{child}` of `{key}` does not point back to it.")
            if branch.remote is not None and key == self.trunk_name:
                raise TreeCorrupted("The trunk branch cannot carry pull request metadata.")

        for key in self.branches:
            self.discover_stack(key)
