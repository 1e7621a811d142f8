"""
Unsubscribe orchestrator: the decision engine's state machine.

Sequences link extraction, page fetch, page classification and action
dispatch, and resolves every outcome into one terminal UnsubscribeAttempt.

Policy: only CAPTCHA walls, login walls and mailto-only mechanisms are
unrecoverable. Ambiguous outcomes (5xx, network failures, unclassifiable
pages, automation service trouble, form submissions without a clear
verdict) resolve to success, because the request to the unsubscribe
endpoint was made and no stronger negative signal exists.
"""

import re
import socket
from typing import Optional

import requests

from .browser_client import BrowserAutomationClient
from .constants import (
    METHOD_HTTP, METHOD_MAILTO, METHOD_FORM_AUTO, METHOD_AI_AUTO,
    METHOD_MANUAL, METHOD_UNKNOWN,
    ACTION_SUCCESS, ACTION_FORM, ACTION_CAPTCHA, ACTION_LOGIN,
    NETWORK_ERROR_MARKERS,
    ERROR_NO_LINK, ERROR_MAILTO, ERROR_CAPTCHA, ERROR_LOGIN, ERROR_CLIENT_STATUS
)
from .exceptions import PageFetchNetworkError
from .form_automator import FormAutomator
from .link_extractor import LinkExtractor
from .logging import UnsubscribeLogger
from .page_classifier import PageClassifier
from .page_fetcher import PageFetcher
from .types import FetchResult, UnsubscribeAttempt

# State names used in log records
STATE_LINK_EXTRACTION = "LINK_EXTRACTION"
STATE_FETCH = "FETCH"
STATE_CLASSIFY = "CLASSIFY"
STATE_FORM_HANDLING = "FORM_HANDLING"
STATE_FOLLOW_LINK = "FOLLOW_LINK"

NETWORK_EXCEPTION_TYPES = (
    PageFetchNetworkError,
    requests.exceptions.Timeout,
    requests.exceptions.ConnectionError,
    TimeoutError,
    ConnectionError,
    socket.gaierror,
)

# Markers must start a word; URLs are removed before matching
NETWORK_MARKER_PATTERN = re.compile(
    r'\b(?:' + '|'.join(re.escape(marker) for marker in NETWORK_ERROR_MARKERS) + r')',
    re.IGNORECASE
)
URL_PATTERN = re.compile(r'(?:https?|mailto):\S+', re.IGNORECASE)


def _exception_chain(error: BaseException):
    seen = set()
    while error is not None and id(error) not in seen:
        seen.add(id(error))
        yield error
        error = error.__cause__ or error.__context__


def is_network_failure(error: BaseException, link: Optional[str] = None) -> bool:
    """
    Check whether an exception signals a timeout or network-layer issue.

    The exception and everything it was raised from are checked against the
    network exception types. Message text is only consulted after the link
    and any other URLs are stripped, so a URL like ``https://network.test/reset``
    never counts as evidence.
    """
    for exc in _exception_chain(error):
        if isinstance(exc, NETWORK_EXCEPTION_TYPES):
            return True

    message = str(error)
    if link:
        message = message.replace(link, ' ')
    message = URL_PATTERN.sub(' ', message)
    return NETWORK_MARKER_PATTERN.search(message) is not None


class UnsubscribeOrchestrator:
    """Run one unsubscribe attempt from email content to a terminal verdict.

    Instances hold only collaborators, never per-attempt state, so one
    orchestrator can serve concurrent attempts for different emails.
    """

    def __init__(
        self,
        link_extractor: LinkExtractor,
        page_fetcher: PageFetcher,
        page_classifier: PageClassifier,
        form_automator: FormAutomator,
        automation_client: Optional[BrowserAutomationClient] = None
    ):
        self.link_extractor = link_extractor
        self.page_fetcher = page_fetcher
        self.page_classifier = page_classifier
        self.form_automator = form_automator
        self.automation_client = automation_client
        self.logger = UnsubscribeLogger("orchestrator")

    def attempt(self, html: Optional[str], text: Optional[str]) -> UnsubscribeAttempt:
        """
        Attempt to unsubscribe using an email's content.

        Args:
            html: HTML body of the email, if any
            text: Plain-text body of the email, if any

        Returns:
            Terminal UnsubscribeAttempt

        Raises:
            ClassifierError: if the classifier fails during link extraction
        """
        extraction = self.link_extractor.extract(html, text)

        if not extraction.found:
            return self._finish(STATE_LINK_EXTRACTION,
                                UnsubscribeAttempt.failed(METHOD_UNKNOWN, None, ERROR_NO_LINK))

        link = extraction.link
        if extraction.method == METHOD_MAILTO:
            return self._finish(STATE_LINK_EXTRACTION,
                                UnsubscribeAttempt.failed(METHOD_MAILTO, link, ERROR_MAILTO))

        try:
            return self._follow_link(link)
        except Exception as e:
            self.logger.log_exception(e, {'link': link})
            if is_network_failure(e, link):
                return self._finish(STATE_FOLLOW_LINK, UnsubscribeAttempt.succeeded(METHOD_HTTP, link))
            message = str(e) or type(e).__name__
            return self._finish(STATE_FOLLOW_LINK, UnsubscribeAttempt.failed(METHOD_HTTP, link, message))

    def _follow_link(self, link: str) -> UnsubscribeAttempt:
        try:
            page = self.page_fetcher.fetch(link)
        except PageFetchNetworkError as e:
            self.logger.warning("Network failure reaching unsubscribe page; assuming it was processed", {
                'link': link,
                'error': str(e)
            })
            return self._finish(STATE_FETCH, UnsubscribeAttempt.succeeded(METHOD_HTTP, link))

        if page.is_client_error:
            return self._finish(STATE_FETCH, UnsubscribeAttempt.failed(
                METHOD_HTTP, link, ERROR_CLIENT_STATUS.format(status_code=page.status_code)
            ))

        if page.is_server_error:
            self.logger.warning("Server error on unsubscribe page; assuming it was processed", {
                'link': link,
                'status_code': page.status_code
            })
            return self._finish(STATE_FETCH, UnsubscribeAttempt.succeeded(METHOD_HTTP, link))

        return self._classify(page)

    def _classify(self, page: FetchResult) -> UnsubscribeAttempt:
        analysis = self.page_classifier.analyze(page.final_url, page.html)
        target = page.final_url

        if analysis.action_type == ACTION_SUCCESS:
            return self._finish(STATE_CLASSIFY, UnsubscribeAttempt.succeeded(METHOD_HTTP, target))

        if analysis.action_type == ACTION_CAPTCHA:
            return self._finish(STATE_CLASSIFY,
                                UnsubscribeAttempt.failed(METHOD_MANUAL, target, ERROR_CAPTCHA))

        if analysis.action_type == ACTION_LOGIN:
            return self._finish(STATE_CLASSIFY,
                                UnsubscribeAttempt.failed(METHOD_MANUAL, target, ERROR_LOGIN))

        if analysis.action_type == ACTION_FORM:
            return self._handle_form(page)

        self.logger.info("Page could not be classified; assuming unsubscribe completed", {
            'target': target,
            'analysis_message': analysis.message
        })
        return self._finish(STATE_CLASSIFY, UnsubscribeAttempt.succeeded(METHOD_HTTP, target))

    def _handle_form(self, page: FetchResult) -> UnsubscribeAttempt:
        target = page.final_url

        if self.automation_client is not None:
            result = self.automation_client.invoke(target)
            if result.dispatched and not result.explicitly_failed:
                return self._finish(STATE_FORM_HANDLING,
                                    UnsubscribeAttempt.succeeded(METHOD_AI_AUTO, target))
            self.logger.info("Automation service did not complete; falling back to form submission", {
                'target': target,
                'dispatched': result.dispatched,
                'service_message': result.message
            })
        else:
            self.logger.debug("No automation service configured", {'target': target})

        submitted = self.form_automator.submit(target, page.html)
        self.logger.info("Form submission finished", {'target': target, 'confirmed': submitted})
        return self._finish(STATE_FORM_HANDLING, UnsubscribeAttempt.succeeded(METHOD_FORM_AUTO, target))

    def _finish(self, state: str, attempt: UnsubscribeAttempt) -> UnsubscribeAttempt:
        self.logger.info("Unsubscribe attempt finished", dict(attempt.to_dict(), state=state))
        return attempt
