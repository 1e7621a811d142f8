"""
CLI module for the unsubscribe engine.

Provides click-based command-line interface with subcommands.
"""

from .main import cli

__all__ = ['cli']
