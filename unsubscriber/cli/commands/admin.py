"""
Admin commands for the unsubscribe engine.

Handles database initialization and service checks.
"""

import click

from ...config import Config
from ...database import init_database
from ...engine.browser_client import create_browser_client


@click.command('init')
def init():
    """
    Initialize the database.

    Creates the database schema and required tables.

    Example:
        python main.py init
    """
    try:
        db_manager = init_database()
        click.secho("✓ Database initialized successfully", fg='green')
        click.echo(f"Database location: {db_manager.database_url}")
    except Exception as e:
        click.secho(f"✗ Error initializing database: {e}", fg='red')
        raise click.Abort()


@click.command('automation-health')
def automation_health():
    """
    Check that the browser automation service is reachable.

    Example:
        python main.py automation-health
    """
    client = create_browser_client(Config.BROWSER_AUTOMATION_URL)
    if client is None:
        click.secho("⚠ BROWSER_AUTOMATION_URL is not configured; forms use plain HTTP submission", fg='yellow')
        return

    if client.health():
        click.secho(f"✓ Automation service at {client.base_url} is healthy", fg='green')
    else:
        click.secho(f"✗ Automation service at {client.base_url} is not responding", fg='red')
        raise click.Abort()
