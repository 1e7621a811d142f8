"""
Email commands for the unsubscribe engine.

Stores email content so unsubscribe attempts can be run and audited later.
"""

import click

from ...cli_session import get_cli_session_manager
from ...database.models import EmailMessage
from ...email_source import load_email_file


@click.command('import-email')
@click.argument('paths', nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
def import_email(paths):
    """
    Store email files for later unsubscribe attempts.

    Accepts .eml messages, .html bodies or plain-text bodies.

    Example:
        python main.py import-email newsletter.eml promo.html
    """
    session_manager = get_cli_session_manager()

    with session_manager.get_session() as session:
        stored = []
        for path in paths:
            parsed = load_email_file(path)
            if not parsed.html and not parsed.text:
                click.secho(f"⚠ Skipping {path}: no text or HTML body", fg='yellow')
                continue

            email_msg = EmailMessage(
                message_id=parsed.message_id,
                sender_email=parsed.sender,
                subject=parsed.subject,
                content_html=parsed.html,
                content_text=parsed.text,
                source_path=str(path)
            )
            session.add(email_msg)
            stored.append(email_msg)

        session.commit()

        click.secho(f"✓ Imported {len(stored)} email(s)", fg='green')
        for email_msg in stored:
            click.echo(f"  - {email_msg.id}: {email_msg.subject or email_msg.source_path}")
