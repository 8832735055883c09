"""Type definitions for GitHub API responses."""

from pydantic import BaseModel

class PullRequestInfo(BaseModel):
    """Snapshot of the remote fields the stack engine looks at."""
    number: int
    state: str
    merged: bool = False
    base_ref: str
    head_ref: str
    head_sha: str

    @property
    def closed(self) -> bool:
        return self.state == "closed"

class PRCreationMetadata(BaseModel):
    """Metadata collected from the user when opening a pull request."""
    title: str
    body: str
    is_draft: bool = True
