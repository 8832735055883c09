"""GitHub interfaces and implementation."""

import logging
from typing import Callable, List, Optional, Protocol, TypeVar, runtime_checkable

from github import GithubException

from ..config.models import StConfig
from ..errors import RemoteApiFailure
from .types import PullRequestInfo

T = TypeVar('T')

# Get module logger
logger = logging.getLogger(__name__)

# Define protocols for GitHub objects
@runtime_checkable
class GitHubRefProtocol(Protocol):
    """Protocol for GitHub ref objects (base/head references)."""
    @property
    def ref(self) -> str:
        """Get the ref name (e.g., 'main', 'feature-branch')."""
        ...

    @property
    def sha(self) -> str:
        """Get the commit SHA."""
        ...

@runtime_checkable
class GitHubCommentProtocol(Protocol):
    """Protocol for issue/pull request comments."""
    @property
    def id(self) -> int:
        ...

    def edit(self, body: str) -> None:
        ...

@runtime_checkable
class GitHubPullRequestProtocol(Protocol):
    """Protocol for GitHub pull request objects (real or fake)."""
    @property
    def number(self) -> int:
        """Get the PR number."""
        ...

    @property
    def state(self) -> str:
        """Get the PR state (open, closed)."""
        ...

    @property
    def merged(self) -> bool:
        """Get whether the PR is merged."""
        ...

    @property
    def base(self) -> GitHubRefProtocol:
        """Get the base reference."""
        ...

    @property
    def head(self) -> GitHubRefProtocol:
        """Get the head reference."""
        ...

    def edit(self, base: Optional[str] = None) -> None:
        """Edit the pull request."""
        ...

    def set_assignees(self, assignees: List[str]) -> None:
        """Replace the assignees of the pull request."""
        ...

    def create_issue_comment(self, body: str) -> GitHubCommentProtocol:
        """Add a comment to the pull request."""
        ...

    def get_issue_comment(self, comment_id: int) -> GitHubCommentProtocol:
        """Get a comment on the pull request by id."""
        ...

@runtime_checkable
class GitHubRepoProtocol(Protocol):
    """Protocol for GitHub repository objects (real or fake)."""
    def get_pull(self, number: int) -> GitHubPullRequestProtocol:
        """Get a pull request by number."""
        ...

    def create_pull(self, title: str, body: str, base: str, head: str,
                    draft: bool = False) -> GitHubPullRequestProtocol:
        """Create a new pull request."""
        ...

@runtime_checkable
class PyGithubProtocol(Protocol):
    """Protocol for PyGithub implementations (real or fake)."""
    def get_repo(self, full_name_or_id: str) -> GitHubRepoProtocol:
        """Get a repository by full name."""
        ...

def _api_call(action: str, call: Callable[[], T]) -> T:
    """Run a GitHub call, translating PyGithub errors into RemoteApiFailure."""
    try:
        return call()
    except GithubException as e:
        logger.error(f"GitHub API error while trying to {action}: {e}")
        raise RemoteApiFailure(action, status=e.status, data=e.data) from e

class GitHubClient:
    """GitHub client bound to one repository."""
    def __init__(self, config: StConfig, owner: str, name: str, github_client: PyGithubProtocol):
        """Initialize with config, repository coordinates and client implementation.

        Args:
            config: The configuration
            owner: Owner of the repository pull requests are opened against
            name: Name of that repository
            github_client: GitHub client implementation (real or fake)
        """
        self.config = config
        self.owner = owner
        self.name = name
        self.client = github_client
        self._repo: Optional[GitHubRepoProtocol] = None

    @property
    def repo(self) -> GitHubRepoProtocol:
        """Get GitHub repository."""
        if self._repo is None:
            full_name = f"{self.owner}/{self.name}"
            self._repo = _api_call(f"load repository {full_name}", lambda: self.client.get_repo(full_name))
        return self._repo

    def _get_pull(self, number: int) -> GitHubPullRequestProtocol:
        return _api_call(f"fetch pull request #{number}", lambda: self.repo.get_pull(number))

    def pull_request_url(self, number: int) -> str:
        return f"https://{self.config.github_host}/{self.owner}/{self.name}/pull/{number}"

    def get_pull_request(self, number: int) -> PullRequestInfo:
        """Fetch a pull request by number."""
        logger.info(f"> github get #{number}")
        pr = self._get_pull(number)
        return PullRequestInfo(
            number=pr.number,
            state=pr.state,
            merged=bool(pr.merged),
            base_ref=pr.base.ref,
            head_ref=pr.head.ref,
            head_sha=pr.head.sha,
        )

    def create_pull_request(self, title: str, head: str, base: str, body: str, draft: bool) -> int:
        """Create pull request and return its number."""
        logger.info(f"> github create {head} -> {base} : {title}")
        pr = _api_call(
            f"create pull request for {head}",
            lambda: self.repo.create_pull(title=title, body=body, base=base, head=head, draft=draft),
        )
        return pr.number

    def update_base(self, number: int, base: str) -> None:
        """Point a pull request at a new base branch."""
        logger.info(f"> github update base #{number} : {base}")
        pr = self._get_pull(number)
        _api_call(f"update base of pull request #{number}", lambda: pr.edit(base=base))

    def set_assignees(self, number: int, assignees: List[str]) -> None:
        """Replace the assignees of a pull request."""
        logger.info(f"> github assign #{number} : {assignees}")
        pr = self._get_pull(number)
        _api_call(f"assign pull request #{number}", lambda: pr.set_assignees(assignees))

    def create_comment(self, number: int, body: str) -> int:
        """Comment on pull request and return the comment id."""
        logger.info(f"> github add comment #{number}")
        pr = self._get_pull(number)
        comment = _api_call(f"comment on pull request #{number}", lambda: pr.create_issue_comment(body))
        return comment.id

    def update_comment(self, number: int, comment_id: int, body: str) -> bool:
        """Replace the body of an existing comment.

        Returns False when the comment no longer exists on GitHub.
        """
        logger.info(f"> github update comment #{number} : {comment_id}")
        pr = self._get_pull(number)
        try:
            comment = pr.get_issue_comment(comment_id)
        except GithubException as e:
            if e.status == 404:
                logger.info(f"Comment {comment_id} on #{number} was deleted")
                return False
            logger.error(f"GitHub API error while trying to fetch comment {comment_id}: {e}")
            raise RemoteApiFailure(f"fetch comment {comment_id}", status=e.status, data=e.data) from e
        _api_call(f"update comment {comment_id}", lambda: comment.edit(body))
        return True
