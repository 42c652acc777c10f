"""
Command-line interface module for the stock watcher.

This module provides the CLI for watching a set of symbols live in the
terminal, printing a single table, or validating configuration.
"""

from .cli import main

__all__ = ["main"]
