"""Tests for the GitHub client and the PyGithub adapters."""

from unittest.mock import MagicMock

import pytest
from github import Github, GithubException

from pyst.config.models import StConfig
from pyst.errors import RemoteApiFailure
from pyst.github import GitHubClient
from pyst.github.adapters import PyGithubAdapter
from pyst.tests.fakes import FakeGithub


@pytest.fixture
def pygithub() -> MagicMock:
    """Mocked `github.Github` instance with one open pull request."""
    github = MagicMock(spec=Github)
    pr = github.get_repo.return_value.get_pull.return_value
    pr.number = 7
    pr.state = "open"
    pr.merged = False
    pr.base.ref = "main"
    pr.head.ref = "feature"
    pr.head.sha = "a" * 40
    return github


@pytest.fixture
def client(pygithub: MagicMock) -> GitHubClient:
    return GitHubClient(StConfig(github_token="t"), "octo", "repo", PyGithubAdapter(pygithub))


def test_get_pull_request(client: GitHubClient, pygithub: MagicMock) -> None:
    info = client.get_pull_request(7)

    pygithub.get_repo.assert_called_once_with("octo/repo")
    assert info.number == 7
    assert info.base_ref == "main"
    assert info.head_sha == "a" * 40
    assert not info.closed


def test_create_pull_request(client: GitHubClient, pygithub: MagicMock) -> None:
    repo = pygithub.get_repo.return_value
    repo.create_pull.return_value.number = 12

    number = client.create_pull_request("Title", head="feature", base="me:main", body="Body", draft=True)

    assert number == 12
    repo.create_pull.assert_called_once_with(title="Title", body="Body", base="me:main", head="feature", draft=True)


def test_update_base_and_assignees(client: GitHubClient, pygithub: MagicMock) -> None:
    pr = pygithub.get_repo.return_value.get_pull.return_value

    client.update_base(7, "develop")
    client.set_assignees(7, ["octocat"])

    pr.edit.assert_called_once_with(base="develop")
    pr.as_issue.return_value.edit.assert_called_once_with(assignees=["octocat"])


def test_comments(client: GitHubClient, pygithub: MagicMock) -> None:
    pr = pygithub.get_repo.return_value.get_pull.return_value
    pr.create_issue_comment.return_value.id = 99

    assert client.create_comment(7, "hello") == 99
    assert client.update_comment(7, 99, "updated") is True

    pr.create_issue_comment.assert_called_once_with("hello")
    pr.get_issue_comment.assert_called_once_with(99)
    pr.get_issue_comment.return_value.edit.assert_called_once_with("updated")


def test_update_deleted_comment(client: GitHubClient, pygithub: MagicMock) -> None:
    pr = pygithub.get_repo.return_value.get_pull.return_value
    pr.get_issue_comment.side_effect = GithubException(404, {"message": "Not Found"})

    assert client.update_comment(7, 99, "updated") is False

    pr.get_issue_comment.side_effect = GithubException(500, {"message": "Server Error"})
    with pytest.raises(RemoteApiFailure) as exc_info:
        client.update_comment(7, 99, "updated")
    assert exc_info.value.status == 500


def test_github_errors_translated(client: GitHubClient, pygithub: MagicMock) -> None:
    pygithub.get_repo.return_value.get_pull.side_effect = GithubException(404, {"message": "Not Found"})

    with pytest.raises(RemoteApiFailure) as exc_info:
        client.get_pull_request(8)

    assert exc_info.value.status == 404
    assert exc_info.value.action == "fetch pull request #8"
    assert "Not Found" in str(exc_info.value)


def test_pull_request_url() -> None:
    client = GitHubClient(StConfig(github_token="t", github_host="ghe.example.com"), "octo", "repo", FakeGithub({}))
    assert client.pull_request_url(3) == "https://ghe.example.com/octo/repo/pull/3"


def test_closed_and_merged_pull_requests() -> None:
    fake = FakeGithub({"feature": "b" * 40})
    fake.add_pull(1, head="feature", base="main", state="closed", merged=True)
    client = GitHubClient(StConfig(github_token="t"), "octo", "repo", fake)

    info = client.get_pull_request(1)

    assert info.closed and info.merged
    assert info.head_sha == "b" * 40


def test_adapter_from_token() -> None:
    adapter = PyGithubAdapter.from_token("secret")
    assert isinstance(adapter, PyGithubAdapter)
    assert isinstance(PyGithubAdapter.from_token("secret", "ghe.example.com"), PyGithubAdapter)
