"""
Audit log commands for the unsubscribe engine.
"""

import click

from ...cli_session import get_cli_session_manager
from ...database.models import UnsubscribeLog
from ...engine.constants import ATTEMPT_STATUSES


@click.command('logs')
@click.option('--status', type=click.Choice(ATTEMPT_STATUSES), help='Only show attempts with this status')
@click.option('--user', 'acting_user', help='Only show attempts by this user')
@click.option('--limit', type=int, default=50, show_default=True, help='Maximum rows to show')
def logs(status, acting_user, limit):
    """
    List recorded unsubscribe attempts, newest first.

    Example:
        python main.py logs --status error
    """
    session_manager = get_cli_session_manager()

    with session_manager.get_session() as session:
        query = session.query(UnsubscribeLog)
        if status:
            query = query.filter(UnsubscribeLog.status == status)
        if acting_user:
            query = query.filter(UnsubscribeLog.acting_user == acting_user)

        rows = query.order_by(UnsubscribeLog.id.desc()).limit(limit).all()

        if not rows:
            click.echo("No unsubscribe attempts recorded")
            return

        click.echo(f"\n{'ID':<6} {'Email':<7} {'Status':<8} {'Method':<10} {'User':<12} Target / Error")
        click.echo("-" * 80)
        for row in rows:
            detail = row.unsubscribe_target or ''
            if row.error_message:
                detail = f"{detail} ({row.error_message})" if detail else row.error_message
            color = 'green' if row.status == 'success' else 'red'
            click.secho(
                f"{row.id:<6} {row.email_id:<7} {row.status:<8} {row.unsubscribe_method:<10} "
                f"{row.acting_user:<12} {detail}",
                fg=color
            )
