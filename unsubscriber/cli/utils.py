"""
Common utilities for CLI commands.

Shared helper functions used across multiple command modules.
"""

import click

from ..config import Config
from ..engine.exceptions import ConfigurationError
from ..engine.factory import build_orchestrator
from ..engine.orchestrator import UnsubscribeOrchestrator
from ..engine.constants import STATUS_SUCCESS


def parse_email_ids(id_string: str) -> list:
    """
    Parse email IDs from various formats.

    Supports:
        - Single ID: "5"
        - Comma-separated: "1,2,3"
        - Ranges: "1-5"
        - Mixed: "1,3-5,7"

    Returns:
        List of integer IDs, duplicates removed, order preserved
    """
    ids = []
    for part in id_string.split(','):
        part = part.strip()
        if not part:
            continue
        if '-' in part:
            start, end = part.split('-', 1)
            start, end = int(start), int(end)
            if start > end:
                raise ValueError(f"Invalid range: {part}")
            ids.extend(range(start, end + 1))
        else:
            ids.append(int(part))

    if not ids:
        raise ValueError("No IDs given")
    return list(dict.fromkeys(ids))


def get_orchestrator() -> UnsubscribeOrchestrator:
    """Build the orchestrator from configuration, aborting on missing settings."""
    try:
        return build_orchestrator(Config)
    except ConfigurationError as e:
        click.secho(f"✗ Configuration error: {e}", fg='red')
        raise click.Abort()


def echo_result(status: str, method, target, error) -> None:
    """Print one unsubscribe outcome."""
    if status == STATUS_SUCCESS:
        click.secho(f"✓ success via {method}", fg='green')
    elif method:
        click.secho(f"✗ error via {method}: {error}", fg='red')
    else:
        click.secho(f"✗ Error: {error}", fg='red')
    if target:
        click.echo(f"  Target: {target}")
