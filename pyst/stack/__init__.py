"""Stack submission: push branches, open/update PRs and keep navigation comments."""

import logging
import sys
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence

from ..ctx import StContext
from ..errors import BranchNotTracked, DirtyWorkingTree, NeedsRestack
from ..github import GitHubClient
from ..github.types import PRCreationMetadata, PullRequestInfo
from ..tree import RemoteMetadata
from ..typing import PromptInterface
from ..util import plural

logger = logging.getLogger(__name__)

COMMENT_HEADER = "## 📚 $\\text{Stack Overview}$\n\nPulls submitted in this stack:\n"
COMMENT_FOOTER = "\n_This comment was automatically generated by `st`._"
CURRENT_MARKER = " 👈"


class PublicationState(Enum):
    """Where a branch stands relative to its pull request."""
    UNSUBMITTED = "unsubmitted"
    SYNCED = "synced"
    STALE_HEAD = "stale_head"


@dataclass
class BranchStatus:
    """Publication state of one branch, derived from local and remote facts."""
    state: PublicationState
    base_stale: bool = False
    remote_pr: Optional[PullRequestInfo] = None


class StackSubmitter:
    """Submits the stack ending at the checked-out branch."""

    def __init__(self, ctx: StContext, github: GitHubClient, prompt: PromptInterface):
        """Initialize with the repository context, GitHub and prompt clients."""
        self.ctx = ctx
        self.github = github
        self.prompt = prompt
        self.output = sys.stdout

    def _print(self, message: str = "") -> None:
        print(message, file=self.output)

    def submit(self, force: bool = False) -> None:
        """Run the whole submission: pre-flight, publish, then comments."""
        stack = self.ctx.discover_stack()

        self._print("🔍 Checking for closed pull requests...")
        self.pre_flight(stack)

        # Closed branches may have been pruned from the tree.
        stack = self.ctx.discover_stack()

        self._print(f"\n🐙 Submitting changes to remote `{self.ctx.tree.remote_name}`...")
        self.submit_stack(stack, force)

        self._print("\n📝 Updating stack navigation comments...")
        self.update_pr_comments(stack)

        self._print("\n🧙💫 All pull requests up to date.")

    def pre_flight(self, stack: Sequence[str]) -> None:
        """Refuse dirty or un-restacked stacks, then prune closed pull requests."""
        self.check_cleanliness(stack)

        num_closed = self.delete_closed_branches(stack[1:])
        if num_closed > 0:
            self._print(
                f"Deleted {plural(num_closed, 'closed pull request')}. "
                "Run `st restack` to re-stack the branches."
            )

    def check_cleanliness(self, stack: Sequence[str]) -> None:
        """Raise unless the working tree is clean and every branch sits on its parent's tip."""
        git_cmd = self.ctx.git_cmd
        if not git_cmd.is_clean():
            raise DirtyWorkingTree()

        needs_restack: List[str] = []
        for parent, branch in zip(stack, stack[1:]):
            if git_cmd.needs_restack(branch, parent):
                logger.debug(f"{branch} is not based on the tip of {parent}")
                needs_restack.append(branch)
        if needs_restack:
            raise NeedsRestack(needs_restack)

    def delete_closed_branches(self, branch_names: Sequence[str]) -> int:
        """Stop tracking branches whose pull requests were closed on GitHub.

        Merged pull requests count as closed. Returns the number of branches
        removed from the tree.
        """
        tree = self.ctx.tree
        deleted = 0
        for name in branch_names:
            if name == tree.trunk_name:
                continue
            tracked = tree.must_get(name)
            if tracked.remote is None:
                continue

            remote_pr = self.github.get_pull_request(tracked.remote.pr_number)
            if not remote_pr.closed:
                continue

            how = "merged" if remote_pr.merged else "closed"
            question = (
                f"Pull request #{remote_pr.number} for branch `{name}` was {how}. "
                "Stop tracking the branch?"
            )
            if not self.prompt.confirm(question, default=True):
                logger.info(f"Keeping {name} although PR #{remote_pr.number} is {how}")
                continue

            tree.delete(name)
            self.ctx.save()
            deleted += 1
            self._print(f"Stopped tracking `{name}` (pull request #{remote_pr.number} {how}).")
        return deleted

    def determine_target_remote(self, branch: str) -> str:
        """Remote a branch's pull request should target.

        1. If one of the children of the branch is already submitted, use the
           remote associated with that child's pull request.
        2. Otherwise, use the default remote.
        """
        tree = self.ctx.tree
        tracked = tree.get(branch)
        if tracked is not None:
            for child in tracked.children:
                child_branch = tree.get(child)
                if child_branch is not None and child_branch.remote is not None:
                    return child_branch.remote.remote_name or tree.remote_name
        return tree.remote_name

    def qualified_base(self, parent: str, target_remote: str) -> str:
        """Base ref for a pull request; `owner:parent` when targeting a fork."""
        if target_remote == self.ctx.tree.remote_name:
            return parent
        target_owner, _ = self.ctx.owner_and_repository(target_remote)
        return f"{target_owner}:{parent}"

    def evaluate_branch(self, branch: str, parent: str) -> BranchStatus:
        """Work out the publication state of `branch` from local and remote facts."""
        tracked = self.ctx.tree.must_get(branch)
        if tracked.remote is None:
            return BranchStatus(PublicationState.UNSUBMITTED)

        remote_pr = self.github.get_pull_request(tracked.remote.pr_number)
        base_stale = remote_pr.base_ref != parent
        if remote_pr.head_sha == self.ctx.git_cmd.branch_tip(branch):
            state = PublicationState.SYNCED
        else:
            state = PublicationState.STALE_HEAD
        return BranchStatus(state, base_stale=base_stale, remote_pr=remote_pr)

    def submit_stack(self, stack: Sequence[str], force: bool = False) -> None:
        """Publish every branch of the stack in order, trunk excluded."""
        self.prompt_for_assignee()

        for parent, branch in zip(stack, stack[1:]):
            status = self.evaluate_branch(branch, parent)
            logger.debug(f"{branch}: {status.state.value}, base_stale={status.base_stale}")

            if status.state is PublicationState.UNSUBMITTED:
                self.create_pull_request(branch, parent, self.determine_target_remote(branch), force)
                continue

            remote_meta = self.ctx.tree.must_get(branch).remote
            if remote_meta is None:
                raise BranchNotTracked(branch)
            pr_remote = remote_meta.remote_name or self.ctx.tree.remote_name

            if status.base_stale:
                self.github.update_base(remote_meta.pr_number, self.qualified_base(parent, pr_remote))
                self._print(f"-> Updated base branch for pull request for branch `{branch}` to `{parent}`.")

            if status.state is PublicationState.SYNCED:
                self._print(f"Branch `{branch}` is up-to-date with the remote. Skipping push.")
                continue

            self.ctx.git_cmd.push_branch(branch, pr_remote, force)
            self._print(f"Updated branch `{branch}` on remote.")

    def create_pull_request(self, branch: str, parent: str, target_remote: str, force: bool) -> int:
        """Push an unsubmitted branch and open its pull request."""
        self.ctx.git_cmd.push_branch(branch, target_remote, force)

        metadata = self.prompt_pr_metadata(branch, parent)
        pr_number = self.github.create_pull_request(
            title=metadata.title,
            head=branch,
            base=self.qualified_base(parent, target_remote),
            body=metadata.body,
            draft=metadata.is_draft,
        )

        # Record the pull request before anything else can fail.
        self.ctx.tree.must_get(branch).remote = RemoteMetadata(pr_number=pr_number, remote_name=target_remote)
        self.ctx.save()

        assignee = self.ctx.cfg.default_assignee
        if assignee:
            self.github.set_assignees(pr_number, [assignee])

        self._print(
            f"Submitted new pull request for branch `{branch}` @ `{self.github.pull_request_url(pr_number)}`"
        )
        return pr_number

    def prompt_for_assignee(self) -> None:
        """Ask once for a default assignee; an empty answer means none."""
        if self.ctx.cfg.default_assignee is None:
            assignee = self.prompt.text("Assignee (default: none)", default="")
            self.ctx.cfg.default_assignee = assignee.strip()
            self.ctx.save()

    def prompt_pr_metadata(self, branch: str, parent: str) -> PRCreationMetadata:
        """Collect title, description and draft status for a new pull request."""
        title = self.prompt.text(f"Title of pull request (`{branch}` -> `{parent}`):")
        body = self.prompt.editor("Pull request description", extension=".md")
        is_draft = self.prompt.confirm("Is this PR a draft? (default: yes)", default=True)
        return PRCreationMetadata(title=title, body=body, is_draft=is_draft)

    def update_pr_comments(self, stack: Sequence[str]) -> None:
        """Create or refresh the navigation comment on every submitted branch."""
        tree = self.ctx.tree
        for branch in stack[1:]:
            remote_meta = tree.must_get(branch).remote
            if remote_meta is None:
                continue

            body = self.render_pr_comment(branch, stack)
            if remote_meta.comment_id is not None:
                if not self.github.update_comment(remote_meta.pr_number, remote_meta.comment_id, body):
                    # Deleted on GitHub; post a replacement.
                    remote_meta.comment_id = None
            if remote_meta.comment_id is None:
                remote_meta.comment_id = self.github.create_comment(remote_meta.pr_number, body)
                self.ctx.save()
            logger.debug(f"Navigation comment on #{remote_meta.pr_number} is up to date")

    def render_pr_comment(self, current_branch: str, stack: Sequence[str]) -> str:
        """Render the navigation comment for `current_branch`, leaf first."""
        tree = self.ctx.tree
        lines = [COMMENT_HEADER]
        for branch in reversed(stack[1:]):
            remote = tree.must_get(branch).remote
            if remote is None:
                continue
            marker = CURRENT_MARKER if branch == current_branch else ""
            lines.append(f"* #{remote.pr_number}{marker}\n")
        lines.append(f"* `{tree.trunk_name}`\n")
        lines.append(COMMENT_FOOTER)
        return "".join(lines)
