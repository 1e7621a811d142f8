"""
Loading email content from files.

Supports raw RFC 822 messages (.eml), bare HTML bodies (.html/.htm) and
anything else as plain text.
"""

import email
import email.policy
from dataclasses import dataclass
from email.message import Message
from pathlib import Path
from typing import Optional, Tuple, Union

HTML_SUFFIXES = {'.html', '.htm'}
EML_SUFFIXES = {'.eml', '.msg'}


@dataclass(frozen=True)
class ParsedEmail:
    """Email content ready for an unsubscribe attempt."""

    html: Optional[str]
    text: Optional[str]
    message_id: Optional[str] = None
    sender: Optional[str] = None
    subject: Optional[str] = None


def _decode_part(part: Message) -> str:
    payload = part.get_payload(decode=True)
    if payload is None:
        return ''
    charset = part.get_content_charset() or 'utf-8'
    try:
        return payload.decode(charset, errors='ignore')
    except LookupError:
        return payload.decode('utf-8', errors='ignore')


def extract_bodies(email_msg: Message) -> Tuple[Optional[str], Optional[str]]:
    """Return the (html, text) bodies of a message, skipping attachments."""
    html_parts = []
    text_parts = []

    for part in email_msg.walk():
        if part.is_multipart():
            continue
        if part.get_content_disposition() == 'attachment':
            continue

        content_type = part.get_content_type()
        if content_type == 'text/html':
            html_parts.append(_decode_part(part))
        elif content_type == 'text/plain':
            text_parts.append(_decode_part(part))

    html = '\n'.join(html_parts) or None
    text = '\n'.join(text_parts) or None
    return html, text


def _header(email_msg: Message, name: str) -> Optional[str]:
    value = email_msg.get(name)
    if value is None:
        return None
    return str(value)


def parse_email_bytes(raw: bytes) -> ParsedEmail:
    """
    Parse a raw RFC 822 message.

    Headers come back as plain decoded strings: RFC 2047 encoded words are
    decoded and raw 8-bit header bytes are read as UTF-8.
    """
    email_msg = email.message_from_bytes(raw, policy=email.policy.default)
    html, text = extract_bodies(email_msg)
    return ParsedEmail(
        html=html,
        text=text,
        message_id=_header(email_msg, 'Message-ID'),
        sender=_header(email_msg, 'From'),
        subject=_header(email_msg, 'Subject')
    )


def load_email_file(path: Union[str, Path]) -> ParsedEmail:
    """
    Load email content from a file.

    Args:
        path: .eml message, .html body, or plain-text body

    Returns:
        ParsedEmail with whichever bodies the file provides
    """
    path = Path(path)
    suffix = path.suffix.lower()

    if suffix in EML_SUFFIXES:
        return parse_email_bytes(path.read_bytes())

    content = path.read_text(encoding='utf-8', errors='ignore')
    if suffix in HTML_SUFFIXES:
        return ParsedEmail(html=content, text=None, subject=path.stem)
    return ParsedEmail(html=None, text=content, subject=path.stem)
