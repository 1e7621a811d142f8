"""
Automatic submission of plain HTML unsubscribe forms.

Handles forms that only need a POST with the page's own field values and
an explicit confirmation, adapting the repository's HTTP POST executor:
- classifier-extracted auto-fill values (no user-supplied data)
- structural form discovery with BeautifulSoup
- re-classification of the response page
"""

import json
import urllib.parse
from typing import Dict, List, Optional, Tuple

import requests
from bs4 import BeautifulSoup

from .classifier import UnsubscribeClassifier
from .constants import (
    ACTION_SUCCESS, BROWSER_USER_AGENT, DEFAULT_REQUEST_TIMEOUT,
    FORM_CONFIRMATION_FLAGS, MAX_FORM_HTML_LENGTH, TRUNCATION_MARKER
)
from .logging import UnsubscribeLogger
from .page_classifier import PageClassifier


def parse_form_fields(raw: Optional[str]) -> Dict[str, str]:
    """Parse the classifier's field map, keeping string keys with scalar values."""
    if not raw or not raw.strip():
        return {}

    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        return {}

    if not isinstance(data, dict):
        return {}

    fields = {}
    for name, value in data.items():
        if not isinstance(name, str) or not name.strip():
            continue
        if value is None or isinstance(value, (dict, list)):
            continue
        if isinstance(value, bool):
            value = 'true' if value else 'false'
        fields[name] = str(value)
    return fields


def find_form_action(html: str) -> Optional[str]:
    """Return the action of the first form that declares one."""
    soup = BeautifulSoup(html, 'html.parser')
    form = soup.find('form', action=True)
    if form is None:
        return None
    return form['action'].strip()


class FormAutomator:
    """Submit unsubscribe forms over plain HTTP."""

    def __init__(self, classifier: UnsubscribeClassifier, page_classifier: PageClassifier,
                 timeout: int = DEFAULT_REQUEST_TIMEOUT,
                 user_agent: str = BROWSER_USER_AGENT):
        """
        Initialize form automator.

        Args:
            classifier: Backend used to extract auto-fill values
            page_classifier: Classifier used to judge the response page
            timeout: HTTP request timeout in seconds
            user_agent: User-Agent header value
        """
        self.classifier = classifier
        self.page_classifier = page_classifier
        self.timeout = timeout
        self.user_agent = user_agent
        self.logger = UnsubscribeLogger("form_automator")

    def submit(self, page_url: str, html: str) -> bool:
        """
        Try to submit the unsubscribe form found on a page.

        Args:
            page_url: URL the page was served from
            html: Page body

        Returns:
            True only if the form was posted and the response page reads as success
        """
        try:
            return self._submit(page_url, html)
        except Exception as e:
            self.logger.log_exception(e, {'page_url': page_url})
            return False

    def _submit(self, page_url: str, html: str) -> bool:
        payload = html if len(html) <= MAX_FORM_HTML_LENGTH else html[:MAX_FORM_HTML_LENGTH] + TRUNCATION_MARKER
        fields = parse_form_fields(self.classifier.extract_form_fields(payload))

        if not fields:
            self.logger.info("No auto-fillable form fields extracted", {'page_url': page_url})
            return False

        action = find_form_action(html)
        if action is None:
            self.logger.info("No form action found", {'page_url': page_url})
            return False

        action_url = urllib.parse.urljoin(page_url, action)
        form_data: List[Tuple[str, str]] = list(fields.items()) + list(FORM_CONFIRMATION_FLAGS)

        self.logger.info("Submitting form", {
            'action_url': action_url,
            'fields': sorted(fields.keys())
        })

        response = requests.post(
            action_url,
            data=form_data,
            headers={
                'User-Agent': self.user_agent,
                'Content-Type': 'application/x-www-form-urlencoded'
            },
            timeout=self.timeout,
            allow_redirects=True
        )

        if not 200 <= response.status_code < 300:
            self.logger.info("Form submission rejected", {
                'action_url': action_url,
                'status_code': response.status_code
            })
            return False

        analysis = self.page_classifier.analyze(response.url or action_url, response.text or '')
        return analysis.action_type == ACTION_SUCCESS
