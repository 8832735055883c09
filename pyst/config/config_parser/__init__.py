"""Config parser logic."""

import os
from pathlib import Path
from typing import Any, Dict, Optional
import logging
import yaml
from pydantic import ValidationError

from ...errors import ConfigInvalid
from ..models import StConfig

# Get module logger
logger = logging.getLogger(__name__)

def config_file_path() -> Path:
    """Get path to the global config file."""
    override = os.environ.get("ST_CONFIG")
    if override:
        return Path(override)
    return Path.home() / ".st.yml"

def parse_config(path: Optional[Path] = None) -> StConfig:
    """Parse the global config file, falling back to defaults when it is missing."""
    path = path or config_file_path()
    raw: Dict[str, Any] = {}
    try:
        with open(path, 'r') as f:
            logger.debug(f"Found {path}, loading...")
            loaded = yaml.safe_load(f)
            if loaded:
                if not isinstance(loaded, dict):
                    raise ConfigInvalid(f"{path} must contain a mapping, got {type(loaded).__name__}")
                raw = loaded
    except FileNotFoundError:
        logger.debug(f"No {path} found, using defaults")
    except yaml.YAMLError as e:
        raise ConfigInvalid(f"Failed to parse {path}: {e}") from e

    try:
        return StConfig.model_validate(raw)
    except ValidationError as e:
        raise ConfigInvalid(f"Invalid config in {path}: {e}") from e

def save_config(config: StConfig, path: Optional[Path] = None) -> None:
    """Write the global config file."""
    path = path or config_file_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w') as f:
        exclude = {"github_token"} if config._token_discovered else None
        yaml.safe_dump(config.model_dump(mode="json", exclude=exclude), f, sort_keys=False)
    logger.debug(f"Saved config to {path}")

def find_github_token() -> Optional[str]:
    """Find GitHub token from env var or gh CLI config."""
    # First try environment variable
    token = os.environ.get("GITHUB_TOKEN")
    if token:
        return token

    # Then try gh CLI config at ~/.config/gh/hosts.yml
    try:
        gh_config_path = Path.home() / ".config" / "gh" / "hosts.yml"
        if gh_config_path.exists():
            with open(gh_config_path, "r") as f:
                gh_config = yaml.safe_load(f)
                if gh_config and "github.com" in gh_config:
                    github_config: Dict[str, object] = gh_config["github.com"]
                    token = github_config.get("oauth_token")
                    if isinstance(token, str) and token:
                        return token
    except (OSError, yaml.YAMLError) as e:
        logger.error(f"Error reading gh CLI config: {e}")
    return None

def load_config(path: Optional[Path] = None) -> StConfig:
    """Load the global config, fill in a discovered token and validate it."""
    config = parse_config(path)
    if not config.github_token:
        token = find_github_token()
        if token:
            logger.debug("Using GitHub token from the environment")
            config.github_token = token
            config._token_discovered = True
    config.check()
    return config
