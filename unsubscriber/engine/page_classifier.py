"""
Unsubscribe page classification.

Sends a bounded prefix of the page to the classifier and maps its JSON
verdict onto one of the engine's action buckets. Anything that cannot be
understood becomes ``unknown``; this boundary never raises.
"""

import json
from typing import Callable, Optional

from .classifier import UnsubscribeClassifier
from .constants import (
    PAGE_STATUS_TO_ACTION, ACTION_UNKNOWN, MAX_PAGE_HTML_LENGTH,
    TRUNCATION_MARKER, CLASSIFIER_MAX_ATTEMPTS, CLASSIFIER_RETRY_BASE_DELAY
)
from .exceptions import ClassifierEmptyResponseError
from .logging import UnsubscribeLogger
from .retry import retry_with_backoff
from .types import PageAnalysis


def truncate_page_html(html: str, max_length: int = MAX_PAGE_HTML_LENGTH) -> str:
    if len(html) <= max_length:
        return html
    return html[:max_length] + TRUNCATION_MARKER


def parse_page_analysis(raw: str) -> PageAnalysis:
    """Map a classifier JSON document onto a PageAnalysis."""
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, TypeError) as e:
        return PageAnalysis(ACTION_UNKNOWN, f"Unparseable classifier response: {e}")

    if not isinstance(data, dict) or not data.get('status'):
        return PageAnalysis(ACTION_UNKNOWN, "Classifier response is missing a status")

    action_type = PAGE_STATUS_TO_ACTION.get(str(data['status']).strip().lower(), ACTION_UNKNOWN)
    message = data.get('message') or "Analysis complete"
    return PageAnalysis(action_type, str(message))


class PageClassifier:
    """Classify unsubscribe pages into success / form / captcha / login / unknown."""

    def __init__(self, classifier: UnsubscribeClassifier,
                 max_attempts: int = CLASSIFIER_MAX_ATTEMPTS,
                 retry_base_delay: float = CLASSIFIER_RETRY_BASE_DELAY,
                 max_html_length: int = MAX_PAGE_HTML_LENGTH,
                 sleep: Optional[Callable[[float], None]] = None):
        """
        Initialize page classifier.

        Args:
            classifier: Natural-language classifier backend
            max_attempts: Attempts made when the classifier answers empty
            retry_base_delay: Delay before the first retry, doubled afterwards
            max_html_length: HTML prefix length sent to the classifier
            sleep: Sleep function used between retries (injectable for tests)
        """
        self.classifier = classifier
        self.max_attempts = max_attempts
        self.retry_base_delay = retry_base_delay
        self.max_html_length = max_html_length
        self.sleep = sleep
        self.logger = UnsubscribeLogger("page_classifier")

    def analyze(self, url: str, html: str) -> PageAnalysis:
        """
        Classify a fetched page.

        Args:
            url: Final URL of the page
            html: Page body

        Returns:
            PageAnalysis; ``unknown`` whenever no usable verdict was obtained
        """
        payload = truncate_page_html(html or '', self.max_html_length)

        def classify() -> str:
            raw = self.classifier.classify_page(url, payload)
            if raw is None or not raw.strip():
                raise ClassifierEmptyResponseError(
                    "Empty response from classifier", context={'url': url}
                )
            return raw

        try:
            raw = retry_with_backoff(
                classify,
                "classify_page",
                max_attempts=self.max_attempts,
                base_delay=self.retry_base_delay,
                retry_on=(ClassifierEmptyResponseError,),
                sleep=self.sleep
            )
        except ClassifierEmptyResponseError:
            self.logger.warning("Classifier kept returning empty responses", {'url': url})
            return PageAnalysis(ACTION_UNKNOWN, "Classifier returned no analysis")
        except Exception as e:
            self.logger.log_exception(e, {'url': url})
            return PageAnalysis(ACTION_UNKNOWN, f"Page classification failed: {e}")

        analysis = parse_page_analysis(raw)
        self.logger.info("Page analyzed", {
            'url': url,
            'action_type': analysis.action_type,
            'analysis_message': analysis.message
        })
        return analysis
