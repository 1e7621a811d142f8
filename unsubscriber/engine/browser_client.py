"""
Client for the external browser automation service.

The service drives a real headless browser for pages that need DOM
interaction (radio buttons, JS-rendered controls). It may cold-start a
browser per request, hence the long timeout. This client never raises;
every outcome is reported as an AutomationResult.
"""

from typing import Optional

import requests

from .constants import DEFAULT_AUTOMATION_TIMEOUT, DEFAULT_REQUEST_TIMEOUT
from .logging import UnsubscribeLogger
from .types import AutomationResult


class BrowserAutomationClient:
    """HTTP client for ``POST /unsubscribe`` and ``GET /health``."""

    def __init__(self, base_url: str, timeout: float = DEFAULT_AUTOMATION_TIMEOUT,
                 health_timeout: float = DEFAULT_REQUEST_TIMEOUT):
        """
        Initialize the automation client.

        Args:
            base_url: Service root, e.g. ``https://automation.internal``
            timeout: Timeout for unsubscribe requests in seconds
            health_timeout: Timeout for health checks in seconds
        """
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.health_timeout = health_timeout
        self.logger = UnsubscribeLogger("browser_automation")
        self.logger.add_context("service", self.base_url)

    def invoke(self, target_url: str) -> AutomationResult:
        """
        Ask the service to complete the unsubscribe flow on ``target_url``.

        Returns:
            AutomationResult; ``dispatched`` is False when the service could
            not be reached at all, ``success`` is None when it gave no verdict
        """
        endpoint = f"{self.base_url}/unsubscribe"
        self.logger.info("Calling automation service", {'target_url': target_url})

        try:
            response = requests.post(
                endpoint,
                json={'url': target_url},
                headers={'Content-Type': 'application/json'},
                timeout=self.timeout
            )
        except requests.exceptions.ConnectTimeout as e:
            return self._unavailable(f'Could not connect within {self.timeout} seconds: {e}')
        except requests.exceptions.Timeout:
            self.logger.warning("Automation service timed out", {'target_url': target_url})
            return AutomationResult(
                success=None,
                message=f'Automation service timed out after {self.timeout} seconds'
            )
        except requests.exceptions.ConnectionError as e:
            return self._unavailable(f'Connection error: {str(e)}')
        except requests.exceptions.RequestException as e:
            self.logger.warning("Automation request failed", {'error': str(e)})
            return AutomationResult(success=None, message=f'Request failed: {str(e)}')

        if not 200 <= response.status_code < 300:
            self.logger.warning("Automation service returned error status", {
                'status_code': response.status_code
            })
            return AutomationResult(
                success=None,
                message=f'Automation service responded with status {response.status_code}'
            )

        try:
            body = response.json()
        except ValueError:
            return AutomationResult(success=None, message='Automation service returned invalid JSON')

        if not isinstance(body, dict):
            return AutomationResult(success=None, message='Automation service returned unexpected payload')

        success = body.get('success')
        result = AutomationResult(
            success=success if isinstance(success, bool) else None,
            method=body.get('method'),
            message=str(body.get('message') or '')
        )
        self.logger.info("Automation service responded", {
            'success': result.success,
            'method': result.method,
            'service_message': result.message
        })
        return result

    def health(self) -> bool:
        """Check service liveness via ``GET /health``."""
        try:
            response = requests.get(f"{self.base_url}/health", timeout=self.health_timeout)
            if response.status_code != 200:
                return False
            body = response.json()
        except (requests.exceptions.RequestException, ValueError) as e:
            self.logger.warning("Automation health check failed", {'error': str(e)})
            return False

        return isinstance(body, dict) and body.get('status') == 'ok'

    def _unavailable(self, message: str) -> AutomationResult:
        self.logger.warning("Automation service unavailable", {'error': message})
        return AutomationResult(success=None, message=message, dispatched=False)


def create_browser_client(base_url: Optional[str],
                          timeout: float = DEFAULT_AUTOMATION_TIMEOUT) -> Optional[BrowserAutomationClient]:
    """Return a client when the service is configured, otherwise None."""
    if not base_url or not base_url.strip():
        return None
    return BrowserAutomationClient(base_url.strip(), timeout=timeout)
