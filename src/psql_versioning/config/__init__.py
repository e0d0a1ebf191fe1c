"""Configuration management module."""

from .loader import VersioningConfig, find_config_file, load_config

__all__ = ["VersioningConfig", "load_config", "find_config_file"]
