"""
Main CLI group for the unsubscribe engine.

Integrates all commands into a single CLI application.
"""

import click

from ..config import Config
from ..engine.logging import configure_unsubscribe_logging
from .commands.admin import init, automation_health
from .commands.email import import_email
from .commands.action import unsubscribe, bulk_unsubscribe, unsubscribe_file
from .commands.logs import logs


@click.group()
@click.version_option(version='0.1.0', prog_name='Unsubscriber')
@click.option('--log-level', default=None,
              type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False),
              help='Engine log level (default: LOG_LEVEL)')
def cli(log_level):
    """
    Unsubscriber - Find and follow email unsubscribe links automatically.

    Uses a language model to locate unsubscribe links, classify the pages
    they lead to and submit confirmation forms, recording every attempt
    in an audit log.
    """
    configure_unsubscribe_logging(level=log_level or Config.LOG_LEVEL)


cli.add_command(init, name='init')
cli.add_command(automation_health, name='automation-health')
cli.add_command(import_email, name='import-email')
cli.add_command(unsubscribe, name='unsubscribe')
cli.add_command(bulk_unsubscribe, name='bulk-unsubscribe')
cli.add_command(unsubscribe_file, name='unsubscribe-file')
cli.add_command(logs, name='logs')


if __name__ == '__main__':
    cli()
