"""
Page fetching over plain HTTP.

Every HTTP response comes back as a FetchResult so the orchestrator can
branch on the status code; only network-layer failures raise.
"""

import requests

from .constants import BROWSER_USER_AGENT, DEFAULT_REQUEST_TIMEOUT
from .exceptions import PageFetchNetworkError
from .logging import UnsubscribeLogger
from .types import FetchResult


class PageFetcher:
    """Fetch unsubscribe pages with a desktop browser identity."""

    def __init__(self, timeout: int = DEFAULT_REQUEST_TIMEOUT,
                 user_agent: str = BROWSER_USER_AGENT):
        """
        Initialize page fetcher.

        Args:
            timeout: Request timeout in seconds
            user_agent: User-Agent header for requests
        """
        self.timeout = timeout
        self.user_agent = user_agent
        self.logger = UnsubscribeLogger("page_fetcher")

    def fetch(self, url: str) -> FetchResult:
        """
        GET a page, following redirects.

        Args:
            url: Page to fetch

        Returns:
            FetchResult with the post-redirect URL, body and status code

        Raises:
            PageFetchNetworkError: on timeouts, DNS failures, refused or reset connections
        """
        headers = {
            'User-Agent': self.user_agent,
            'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8'
        }

        try:
            response = requests.get(
                url,
                headers=headers,
                timeout=self.timeout,
                allow_redirects=True
            )
        except requests.exceptions.Timeout as e:
            raise PageFetchNetworkError(
                f'Request timed out after {self.timeout} seconds', url=url
            ) from e
        except requests.exceptions.ConnectionError as e:
            raise PageFetchNetworkError(f'Connection error: {str(e)}', url=url) from e

        final_url = response.url or url
        self.logger.info("Fetched page", {
            'url': url,
            'final_url': final_url,
            'status_code': response.status_code
        })

        return FetchResult(
            final_url=final_url,
            html=response.text or '',
            status_code=response.status_code
        )
