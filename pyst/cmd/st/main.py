"""CLI entry point."""

import os
import sys
import functools
import click
import logging
from typing import Any, Callable, Dict, Optional
from click import Context

from ... import setup_logging
from ...config import load_config, parse_config
from ...ctx import StContext, prompt_for_remote_name
from ...errors import NotARepository, StError
from ...git import RealGit, active_repository
from ...github import GitHubClient
from ...github.adapters import PyGithubAdapter
from ...pretty import print_header, render_tree
from ...prompt import ClickPrompter
from ...stack import StackSubmitter

# Get module logger
logger = logging.getLogger(__name__)

class AliasedGroup(click.Group):
    """Command group with support for aliases."""

    def __init__(self, name: Optional[str] = None, commands: Optional[Dict[str, click.Command]] = None, **attrs: Any) -> None:
        """Initialize with aliases map."""
        super().__init__(name, commands, **attrs)
        self.aliases: Dict[str, str] = {}

    def add_alias(self, alias: str, command: str) -> None:
        """Add an alias for a command."""
        self.aliases[alias] = command

    def get_command(self, ctx: Context, cmd_name: str) -> Optional[click.Command]:
        """Get a command by name, supporting aliases."""
        if cmd_name in self.aliases:
            cmd_name = self.aliases[cmd_name]
        return super().get_command(ctx, cmd_name)

def common_options(func: Callable[..., None]) -> Callable[..., None]:
    """Add -C/--directory and -v/--verbose to a command."""
    @click.option('-C', '--directory', type=click.Path(exists=True, file_okay=False, dir_okay=True),
                  help='Run as if st was started in DIRECTORY instead of the current working directory')
    @click.option('-v', '--verbose', count=True, help="Increase verbosity (can be used multiple times for more verbosity)")
    @functools.wraps(func)
    def wrapper(*args: Any, directory: Optional[str], verbose: int, **kwargs: Any) -> None:
        setup_logging(verbose)
        if directory:
            os.chdir(directory)
        try:
            func(*args, **kwargs)
        except NotARepository as e:
            logger.error(f"{e}")
            sys.exit(2)
        except StError as e:
            logger.error(f"{e}")
            sys.exit(1)
    return wrapper

@click.group(cls=AliasedGroup)
@click.pass_context
def cli(ctx: Context) -> None:
    """st - stacked branches as chained pull requests on GitHub."""
    ctx.obj = {}

def setup_context(require_token: bool = True) -> StContext:
    """Resolve the repository, load the config and the stack tree."""
    repo = active_repository()
    config = load_config() if require_token else parse_config()
    git_cmd = RealGit(repo, config)
    return StContext.load_or_initialize(config, git_cmd, ClickPrompter())

def setup_github(st_ctx: StContext) -> GitHubClient:
    """Create a GitHub client for the repository behind the default remote."""
    owner, name = st_ctx.owner_and_repository()
    github_client = PyGithubAdapter.from_token(st_ctx.cfg.github_token, st_ctx.cfg.github_host)
    return GitHubClient(st_ctx.cfg, owner, name, github_client)

@cli.command(name="submit", help="Submit the current stack to GitHub, creating or updating pull requests")
@click.option('--force', '-f', is_flag=True, help="Force-push branches, analogous to `git push --force`")
@common_options
def submit(force: bool) -> None:
    """Submit command."""
    st_ctx = setup_context()
    github = setup_github(st_ctx)
    StackSubmitter(st_ctx, github, ClickPrompter()).submit(force=force)

@cli.command(name="track", help="Track the current branch on top of a parent branch")
@click.option('--parent', '-p', help="Parent branch (prompted when omitted)")
@common_options
def track(parent: Optional[str]) -> None:
    """Track command."""
    st_ctx = setup_context(require_token=False)
    branch = st_ctx.git_cmd.current_branch()
    if parent is None:
        candidates = [name for name in st_ctx.tree.branches if name != branch]
        parent = ClickPrompter().select(f"Select the parent of `{branch}`.", candidates)
    st_ctx.track_branch(branch, parent)
    print(f"Tracking `{branch}` on top of `{parent}`.")

@cli.command(name="reparent", help="Move a tracked branch on top of another tracked branch")
@click.argument('branch')
@click.argument('parent')
@common_options
def reparent(branch: str, parent: str) -> None:
    """Reparent command."""
    st_ctx = setup_context(require_token=False)
    st_ctx.reparent_branch(branch, parent)
    print(f"Moved `{branch}` on top of `{parent}`. Run `st restack` to rebase it.")

@cli.command(name="log", help="Show the tracked branch tree")
@common_options
def log() -> None:
    """Log command."""
    st_ctx = setup_context(require_token=False)
    print_header("Tracked branches")
    print(render_tree(st_ctx.tree, st_ctx.git_cmd.current_branch()))

@cli.group(name="set", help="Change repository or global settings")
def set_group() -> None:
    """Set command group."""

@set_group.command(name="remote", help="Set the default remote (forgets submitted pull requests)")
@click.argument('name', required=False)
@common_options
def set_remote(name: Optional[str]) -> None:
    """Set the remote name."""
    st_ctx = setup_context(require_token=False)
    if name is None:
        name = prompt_for_remote_name(st_ctx.git_cmd, ClickPrompter())
    st_ctx.set_remote(name)
    print(f"Default remote is `{st_ctx.tree.remote_name}`.")

@set_group.command(name="assignee", help="Set the default assignee for new pull requests")
@click.argument('username')
@common_options
def set_assignee(username: str) -> None:
    """Set the default assignee."""
    st_ctx = setup_context(require_token=False)
    st_ctx.set_assignee(username)
    print(f"Default assignee is `{username}`.")


cli.add_alias('ss', 'submit')
cli.add_alias('lg', 'log')

def main() -> None:
    """Main entry point."""
    cli(obj={})

if __name__ == "__main__":
    main()
