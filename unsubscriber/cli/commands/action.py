"""
Action commands for the unsubscribe engine.

Handles single, bulk and file-based unsubscribe operations.
"""

import json

import click

from ...actions import UnsubscribeActionHandler
from ...cli_session import get_cli_session_manager
from ...config import Config
from ...database.models import EmailMessage
from ...email_source import load_email_file
from ...engine.constants import STATUS_SUCCESS
from ...engine.exceptions import ClassifierError
from ..utils import parse_email_ids, get_orchestrator, echo_result


@click.command('unsubscribe')
@click.option('--id', 'email_id', type=int, required=True, help='Stored email ID to unsubscribe with')
@click.option('--user', 'acting_user', default='cli', show_default=True, help='Identity recorded in the audit log')
@click.option('--dry-run', is_flag=True, help='Show what would happen without executing')
def unsubscribe(email_id, acting_user, dry_run):
    """
    Attempt to unsubscribe using a stored email.

    Finds the unsubscribe link in the email, follows it and records the
    outcome in the audit log.

    Example:
        python main.py unsubscribe --id 5
        python main.py unsubscribe --id 5 --dry-run
    """
    session_manager = get_cli_session_manager()

    with session_manager.get_session() as session:
        email_msg = session.query(EmailMessage).filter_by(id=email_id).first()
        if not email_msg:
            click.secho(f"✗ Error: Email {email_id} not found", fg='red')
            raise click.Abort()

        if dry_run:
            click.echo("\n[DRY RUN] Would attempt unsubscribe using:")
            click.echo(f"  ID: {email_msg.id}")
            click.echo(f"  Sender: {email_msg.sender_email}")
            click.echo(f"  Subject: {email_msg.subject}")
            return

        handler = UnsubscribeActionHandler(session, get_orchestrator(), acting_user=acting_user)

        click.echo(f"\nUnsubscribing using email {email_msg.id} from {email_msg.sender_email}...")
        result = handler.unsubscribe_email(email_msg.id)
        echo_result(result.status, result.method, result.target, result.error)

        if result.status != STATUS_SUCCESS:
            raise click.Abort()


@click.command('bulk-unsubscribe')
@click.argument('ids')
@click.option('--user', 'acting_user', default='cli', show_default=True, help='Identity recorded in the audit log')
@click.option('--workers', type=int, default=None, help='Concurrent attempts (default: BULK_MAX_WORKERS)')
def bulk_unsubscribe(ids, acting_user, workers):
    """
    Attempt to unsubscribe using several stored emails.

    Supports multiple ID formats:
        - Single: 5
        - Multiple: 1,2,3
        - Range: 1-10
        - Mixed: 1,3-5,7

    Example:
        python main.py bulk-unsubscribe 1-10 --workers 4
    """
    try:
        id_list = parse_email_ids(ids)
    except ValueError as e:
        click.secho(f"✗ Error parsing IDs: {e}", fg='red')
        raise click.Abort()

    max_workers = workers or Config.BULK_MAX_WORKERS
    if max_workers < 1:
        click.secho("✗ Error: --workers must be at least 1", fg='red')
        raise click.Abort()

    session_manager = get_cli_session_manager()

    with session_manager.get_session() as session:
        handler = UnsubscribeActionHandler(
            session, get_orchestrator(), acting_user=acting_user, max_workers=max_workers
        )

        click.echo(f"\nAttempting unsubscribe for {len(id_list)} email(s)...")
        results = handler.unsubscribe_emails(id_list)

        succeeded = 0
        for result in results:
            click.echo(f"\nEmail {result.email_id}:")
            echo_result(result.status, result.method, result.target, result.error)
            if result.status == STATUS_SUCCESS:
                succeeded += 1

        click.echo(f"\n{succeeded}/{len(results)} succeeded")


@click.command('unsubscribe-file')
@click.argument('path', type=click.Path(exists=True, dir_okay=False))
@click.option('--json', 'as_json', is_flag=True, help='Print the attempt as JSON')
def unsubscribe_file(path, as_json):
    """
    Attempt to unsubscribe using an email file without storing anything.

    Accepts .eml messages, .html bodies or plain-text bodies.

    Example:
        python main.py unsubscribe-file newsletter.eml
    """
    parsed = load_email_file(path)
    orchestrator = get_orchestrator()

    try:
        attempt = orchestrator.attempt(parsed.html, parsed.text)
    except ClassifierError as e:
        click.secho(f"✗ Error finding unsubscribe link: {e}", fg='red')
        raise click.Abort()

    if as_json:
        click.echo(json.dumps(attempt.to_dict(), indent=2))
    else:
        echo_result(attempt.status, attempt.method, attempt.target, attempt.error)
