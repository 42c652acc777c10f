"""
Configuration management module for the stock watcher.

This module handles loading, validating, and merging YAML configuration files
and command-line overrides using Pydantic for validation and type safety.
"""

from .config_manager import ConfigurationManager, parse_symbols
from .models import WatcherConfig, DisplayConfig

__all__ = ["ConfigurationManager", "WatcherConfig", "DisplayConfig", "parse_symbols"]
