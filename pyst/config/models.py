"""Pydantic models for config types."""

from typing import Optional
from pydantic import BaseModel, ConfigDict, PrivateAttr

from ..errors import ConfigInvalid

class StConfig(BaseModel):
    """Global st configuration, shared by every repository."""
    model_config = ConfigDict(extra="allow")  # Allow extra fields for forward compatibility

    github_token: str = ""
    # None means the user was never asked; "" means no assignee.
    default_assignee: Optional[str] = None
    github_host: str = "github.com"
    log_git_commands: bool = True

    # Set when the token came from the environment rather than the config file.
    _token_discovered: bool = PrivateAttr(default=False)

    def check(self) -> None:
        """Validate the settings needed to talk to GitHub."""
        if not self.github_token.strip():
            raise ConfigInvalid(
                "No GitHub token found. Try one of:\n"
                "1. Set GITHUB_TOKEN env var\n"
                "2. Log in with 'gh auth login'\n"
                "3. Put `github_token` in the st config file"
            )
        if not self.github_host.strip():
            raise ConfigInvalid("`github_host` must not be empty")
