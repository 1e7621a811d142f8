#!/usr/bin/env python3
"""
Command-line entry point for the unsubscribe engine.

Loads settings from .env before handing off to the click-based CLI.
"""

from unsubscriber.config import load_config_from_env_file
from unsubscriber.cli import cli


def main():
    """Main CLI entry point."""
    load_config_from_env_file()
    cli()


if __name__ == '__main__':
    main()
