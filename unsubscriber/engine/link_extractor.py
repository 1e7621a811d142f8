"""
Unsubscribe link extraction from email body content.

The classifier does the finding (any language, any markup); this module
bounds what is sent to it and pulls a usable URL out of
whatever text comes back.
"""

import html as html_lib
from typing import Optional

from .classifier import UnsubscribeClassifier
from .constants import (
    NO_LINK_TOKEN, LINK_PATTERN, LINK_TRAILING_PUNCTUATION,
    MAX_EMAIL_CONTENT_LENGTH, EMAIL_CONTENT_HEAD_LENGTH,
    METHOD_HTTP, METHOD_MAILTO
)
from .logging import UnsubscribeLogger
from .types import LinkExtractionResult


def truncate_email_content(content: str, max_length: int = MAX_EMAIL_CONTENT_LENGTH,
                           head_length: int = EMAIL_CONTENT_HEAD_LENGTH) -> str:
    """
    Bound email content while keeping the footer.

    Unsubscribe links live near the end of an email, so oversized content
    keeps a short head and drops the middle.
    """
    if len(content) <= max_length:
        return content

    head_length = min(head_length, max_length)
    tail_length = max_length - head_length
    tail = content[-tail_length:] if tail_length else ""
    return f"{content[:head_length]}\n...[truncated]...\n{tail}"


def parse_link_response(response: Optional[str]) -> Optional[str]:
    """Pull the first http(s) or mailto URL out of a classifier response."""
    if not response:
        return None

    response = response.strip()
    if not response or NO_LINK_TOKEN in response:
        return None

    match = LINK_PATTERN.search(response)
    if not match:
        return None

    link = html_lib.unescape(match.group(1)).rstrip(LINK_TRAILING_PUNCTUATION)
    return link or None


def classify_link_method(link: str) -> str:
    if link.lower().startswith('mailto:'):
        return METHOD_MAILTO
    return METHOD_HTTP


class LinkExtractor:
    """Find the unsubscribe target of an email through the classifier."""

    def __init__(self, classifier: UnsubscribeClassifier,
                 max_content_length: int = MAX_EMAIL_CONTENT_LENGTH):
        self.classifier = classifier
        self.max_content_length = max_content_length
        self.logger = UnsubscribeLogger("link_extractor")

    def extract(self, html: Optional[str], text: Optional[str]) -> LinkExtractionResult:
        """
        Extract the unsubscribe link from email content.

        Classifier failures are not caught here; without a link there is
        nothing left to attempt, so the caller decides how to report it.

        Args:
            html: HTML body of the email, if any
            text: Plain-text body of the email, if any

        Returns:
            LinkExtractionResult with link and method, or both None
        """
        content = html if html and html.strip() else text
        if not content or not content.strip():
            self.logger.info("No email content to analyze")
            return LinkExtractionResult()

        payload = truncate_email_content(content, self.max_content_length)
        self.logger.debug("Asking classifier for unsubscribe link", {
            'content_length': len(content),
            'payload_length': len(payload)
        })

        response = self.classifier.extract_link(payload)
        link = parse_link_response(response)

        if link is None:
            self.logger.info("Classifier found no unsubscribe link", {
                'response': (response or '')[:200]
            })
            return LinkExtractionResult()

        method = classify_link_method(link)
        self.logger.info("Found unsubscribe link", {'link': link, 'method': method})
        return LinkExtractionResult(link=link, method=method)
