"""Per-repository context: config, git access and the persisted stack tree."""

import logging
from pathlib import Path
from typing import List, Optional, Tuple

import yaml
from pydantic import ValidationError

from ..config.config_parser import save_config
from ..config.models import StConfig
from ..errors import BranchUnavailable, StError, TreeCorrupted
from ..git import parse_remote_url
from ..tree import StackTree
from ..typing import GitInterface, PromptInterface

logger = logging.getLogger(__name__)

STORE_FILE_NAME = ".st_store.yml"


def store_path(git_cmd: GitInterface) -> Path:
    """Location of the stack tree inside the git directory."""
    return Path(git_cmd.git_dir()) / STORE_FILE_NAME


class StContext:
    """Everything a command needs for one repository.

    The tree is owned by the running command and written back with `save()`
    after each state-changing step.
    """

    def __init__(self, cfg: StConfig, git_cmd: GitInterface, tree: StackTree,
                 path: Optional[Path] = None, config_path: Optional[Path] = None):
        self.cfg = cfg
        self.git_cmd = git_cmd
        self.tree = tree
        self.path = path or store_path(git_cmd)
        self.config_path = config_path

    @classmethod
    def try_load(cls, cfg: StConfig, git_cmd: GitInterface,
                 config_path: Optional[Path] = None) -> Optional["StContext"]:
        """Load the stored tree, or return None if the repository is not set up."""
        path = store_path(git_cmd)
        try:
            with open(path, 'r') as f:
                raw = yaml.safe_load(f)
        except FileNotFoundError:
            logger.debug(f"No stack store at {path}")
            return None
        except yaml.YAMLError as e:
            raise TreeCorrupted(f"Failed to parse {path}: {e}") from e

        try:
            tree = StackTree.model_validate(raw or {})
        except ValidationError as e:
            raise TreeCorrupted(f"Invalid stack store {path}: {e}") from e
        tree.check_invariants()
        logger.debug(f"Loaded {len(tree.branches)} tracked branches from {path}")
        return cls(cfg, git_cmd, tree, path, config_path)

    @classmethod
    def fresh(cls, cfg: StConfig, git_cmd: GitInterface, remote_name: str, trunk_branch: str,
              config_path: Optional[Path] = None) -> "StContext":
        return cls(cfg, git_cmd, StackTree.fresh(trunk_branch, remote_name), config_path=config_path)

    @classmethod
    def load_or_initialize(cls, cfg: StConfig, git_cmd: GitInterface, prompt: PromptInterface,
                           config_path: Optional[Path] = None) -> "StContext":
        """Load the context, prompting for remote and trunk on first use."""
        ctx = cls.try_load(cfg, git_cmd, config_path)
        if ctx is not None:
            return ctx

        print("Repo not configured with `st`.")
        remote_name = prompt_for_remote_name(git_cmd, prompt)
        trunk_branch = prompt.select("Select the trunk branch for the repository.", git_cmd.local_branches())
        ctx = cls.fresh(cfg, git_cmd, remote_name, trunk_branch, config_path)
        ctx.save()
        print("\nSuccessfully set up repository with `st`. Happy stacking ✨📚\n")
        return ctx

    def save(self) -> None:
        """Persist the tree and the global config."""
        self.tree.check_invariants()
        with open(self.path, 'w') as f:
            yaml.safe_dump(self.tree.model_dump(mode="json"), f, sort_keys=False)
        save_config(self.cfg, self.config_path)
        logger.debug(f"Saved stack store to {self.path}")

    def discover_stack(self) -> List[str]:
        """Stack from the trunk to the checked-out branch."""
        return self.tree.discover_stack(self.git_cmd.current_branch())

    def owner_and_repository(self, remote_name: str = "") -> Tuple[str, str]:
        """GitHub (owner, repo) behind `remote_name`; '' means the default remote."""
        return parse_remote_url(self.git_cmd.remote_url(remote_name or self.tree.remote_name))

    def track_branch(self, branch: str, parent: str) -> None:
        if branch not in self.git_cmd.local_branches():
            raise BranchUnavailable(f"Local branch `{branch}` does not exist")
        self.tree.insert(branch, parent)
        self.save()

    def reparent_branch(self, branch: str, new_parent: str) -> None:
        self.tree.reparent(branch, new_parent)
        self.save()

    def reset_tracked_branches(self) -> None:
        """Forget every pull request; they belong to the previous remote."""
        self.tree.clear_remote_metadata()
        self.save()

    def set_remote(self, name: str) -> None:
        if name == self.tree.remote_name:
            return
        if name not in self.git_cmd.remotes():
            raise BranchUnavailable(f"Remote `{name}` does not exist")
        self.tree.remote_name = name
        self.reset_tracked_branches()

    def set_assignee(self, username: str) -> None:
        if not username.strip():
            raise StError("Assignee username must not be empty")
        self.cfg.default_assignee = username.strip()
        self.save()


def prompt_for_remote_name(git_cmd: GitInterface, prompt: PromptInterface) -> str:
    """Pick the remote: the only one if there is one, else ask with `origin` first."""
    remote_names = git_cmd.remotes()
    if not remote_names:
        raise BranchUnavailable("Repository has no remotes")
    if len(remote_names) == 1:
        return remote_names[0]
    if "origin" in remote_names:
        remote_names.remove("origin")
        remote_names.insert(0, "origin")
    return prompt.select("Select the remote name for the repository.", remote_names)
