"""Git interfaces and implementation."""

import os
import re
import shlex
import logging
from typing import List, Optional, Tuple
import git
from git.exc import GitCommandError, InvalidGitRepositoryError, NoSuchPathError

from ..config.models import StConfig
from ..errors import BranchUnavailable, NotARepository, StError

# Get module logger
logger = logging.getLogger(__name__)

def active_repository(path: Optional[str] = None) -> git.Repo:
    """Find the repository containing `path` (default: the working directory)."""
    path = path or os.getcwd()
    try:
        return git.Repo(path, search_parent_directories=True)
    except (InvalidGitRepositoryError, NoSuchPathError) as e:
        raise NotARepository(path) from e

def parse_remote_url(remote_url: str) -> Tuple[str, str]:
    """Split a GitHub remote URL into (owner, repository)."""
    url = remote_url.strip()
    if "://" in url:
        # HTTPS format: https://github.com/owner/repo.git
        repo_part = url.split("://", 1)[1].split("/", 1)[-1]
    elif "@" in url or ":" in url:
        # SSH format: git@github.com:owner/repo.git
        repo_part = url.split(":")[-1]
    else:
        repo_part = url

    repo_part = re.sub(r"\.git$", "", repo_part.strip("/"))
    parts = repo_part.split("/")
    if len(parts) < 2 or not parts[-2] or not parts[-1]:
        raise BranchUnavailable(f"Cannot determine GitHub owner/repository from remote URL `{remote_url}`")
    return parts[-2], parts[-1]

class RealGit:
    """Real Git implementation."""
    def __init__(self, repo: git.Repo, config: Optional[StConfig] = None):
        """Initialize with the repository and config."""
        self.repo = repo
        self.config: StConfig = config or StConfig()

    def run_cmd(self, command: str) -> str:
        """Run git command."""
        cmd_str = command.strip()
        if self.config.log_git_commands:
            logger.info(f"> git {cmd_str}")
        else:
            logger.debug(f"> git {cmd_str}")

        cmd_parts = shlex.split(cmd_str)
        git_command = cmd_parts[0]
        git_args = cmd_parts[1:]
        try:
            method = getattr(self.repo.git, git_command.replace('-', '_'))
            result = method(*git_args)
        except GitCommandError as e:
            raise StError(f"Git command failed: {e}") from e
        return result if isinstance(result, str) else str(result)

    def must_git(self, command: str) -> str:
        """Run git command, failing on error."""
        return self.run_cmd(command)

    def git_dir(self) -> str:
        return str(self.repo.git_dir)

    def current_branch(self) -> str:
        try:
            return self.repo.active_branch.name
        except TypeError as e:
            # Detached HEAD
            raise BranchUnavailable("HEAD is detached; check out a tracked branch first") from e

    def local_branches(self) -> List[str]:
        return [head.name for head in self.repo.heads]

    def remotes(self) -> List[str]:
        return [remote.name for remote in self.repo.remotes]

    def remote_url(self, remote_name: str) -> str:
        try:
            return self.repo.remote(remote_name).url
        except ValueError as e:
            raise BranchUnavailable(f"Remote `{remote_name}` does not exist") from e

    def branch_tip(self, branch: str) -> str:
        """Get the commit hash the local branch points at."""
        try:
            return self.repo.heads[branch].commit.hexsha
        except IndexError as e:
            raise BranchUnavailable(f"Local branch `{branch}` does not exist") from e

    def needs_restack(self, branch: str, parent: str) -> bool:
        """Whether `branch` is not based on the current tip of `parent`."""
        parent_tip = self.branch_tip(parent)
        self.branch_tip(branch)
        merge_bases = self.repo.merge_base(branch, parent)
        if not merge_bases:
            logger.debug(f"No merge base between {branch} and {parent}")
            return True
        return merge_bases[0].hexsha != parent_tip

    def is_clean(self) -> bool:
        """Whether tracked files have no uncommitted modifications."""
        return not self.repo.is_dirty(untracked_files=False)

    def push_branch(self, branch: str, remote_name: str, force: bool = False) -> None:
        """Push a local branch to `remote_name`, setting upstream."""
        force_flag = "--force " if force else ""
        self.must_git(f"push {force_flag}--set-upstream {remote_name} {branch}:{branch}")
