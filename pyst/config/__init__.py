"""Config module."""

from .models import StConfig
from .config_parser import config_file_path, load_config, parse_config, save_config

__all__ = ["StConfig", "config_file_path", "load_config", "parse_config", "save_config"]
