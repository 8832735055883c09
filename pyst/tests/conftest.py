"""Configuration for pytest."""

from pathlib import Path
from typing import Callable, Dict, Optional
from unittest.mock import MagicMock

import pytest

from pyst.config.models import StConfig
from pyst.ctx import StContext
from pyst.github import GitHubClient
from pyst.stack import StackSubmitter
from pyst.tests.fakes import FakeGit, FakeGithub
from pyst.tree import StackTree


@pytest.fixture
def config_path(tmp_path: Path) -> Path:
    return tmp_path / "st.yml"


@pytest.fixture
def prompt() -> MagicMock:
    """Prompt double answering every question."""
    mock = MagicMock()
    mock.text.return_value = "Add feature"
    mock.editor.return_value = "Description"
    mock.confirm.return_value = True
    mock.select.side_effect = lambda message, options: options[0]
    return mock


@pytest.fixture
def make_ctx(tmp_path: Path, config_path: Path) -> Callable[..., StContext]:
    """Build a context for a linear stack `main -> A -> B ...`."""
    def build(branches: tuple = ("A", "B"), current: Optional[str] = None,
              default_assignee: Optional[str] = "") -> StContext:
        tips: Dict[str, str] = {"main": "0" * 40}
        tree = StackTree.fresh("main", "origin")
        parent = "main"
        for index, name in enumerate(branches, start=1):
            tips[name] = str(index) * 40
            tree.insert(name, parent)
            parent = name
        git_cmd = FakeGit(str(tmp_path), current or parent, tips)
        cfg = StConfig(github_token="token", default_assignee=default_assignee)
        return StContext(cfg, git_cmd, tree, config_path=config_path)
    return build


@pytest.fixture
def make_submitter(prompt: MagicMock) -> Callable[[StContext], StackSubmitter]:
    def build(ctx: StContext) -> StackSubmitter:
        fake = FakeGithub(ctx.git_cmd.remote_heads)
        github = GitHubClient(ctx.cfg, "octo", "repo", fake)
        return StackSubmitter(ctx, github, prompt)
    return build
