"""
Type-safe dataclasses for unsubscribe engine results.

This module provides structured, immutable dataclasses for the values
passed between the extraction, fetch, classification and dispatch steps,
and for the terminal attempt record handed back to callers.
"""

from dataclasses import dataclass
from typing import Dict, Any, Optional

from .constants import (
    STATUS_SUCCESS, STATUS_ERROR, ATTEMPT_STATUSES, ATTEMPT_METHODS,
    METHOD_MAILTO, ACTION_SUCCESS
)


@dataclass(frozen=True)
class UnsubscribeAttempt:
    """Terminal record of one unsubscribe attempt."""

    status: str
    method: str
    target: Optional[str] = None
    error: Optional[str] = None

    def __post_init__(self):
        if self.status not in ATTEMPT_STATUSES:
            raise ValueError(f"Invalid attempt status: {self.status}")
        if self.method not in ATTEMPT_METHODS:
            raise ValueError(f"Invalid attempt method: {self.method}")
        if self.status == STATUS_SUCCESS and self.error is not None:
            raise ValueError("Successful attempts cannot carry an error message")
        if self.status == STATUS_ERROR and not self.error:
            raise ValueError("Failed attempts require an error message")
        if self.method == METHOD_MAILTO and self.status != STATUS_ERROR:
            raise ValueError("Mailto attempts cannot be automated")

    @classmethod
    def succeeded(cls, method: str, target: Optional[str]) -> 'UnsubscribeAttempt':
        return cls(status=STATUS_SUCCESS, method=method, target=target)

    @classmethod
    def failed(cls, method: str, target: Optional[str], error: str) -> 'UnsubscribeAttempt':
        return cls(status=STATUS_ERROR, method=method, target=target, error=error)

    @property
    def is_success(self) -> bool:
        return self.status == STATUS_SUCCESS

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the audit-log payload shape."""
        return {
            'status': self.status,
            'method': self.method,
            'target': self.target,
            'error': self.error
        }


@dataclass(frozen=True)
class LinkExtractionResult:
    """Unsubscribe target found in an email, if any."""

    link: Optional[str] = None
    method: Optional[str] = None

    @property
    def found(self) -> bool:
        return self.link is not None


@dataclass(frozen=True)
class FetchResult:
    """Outcome of fetching a page that produced an HTTP response."""

    final_url: str
    html: str
    status_code: int

    @property
    def is_client_error(self) -> bool:
        return 400 <= self.status_code < 500

    @property
    def is_server_error(self) -> bool:
        return self.status_code >= 500


@dataclass(frozen=True)
class PageAnalysis:
    """Coarse classification of an unsubscribe page."""

    action_type: str
    message: str = ""

    @property
    def needs_action(self) -> bool:
        return self.action_type != ACTION_SUCCESS


@dataclass(frozen=True)
class AutomationResult:
    """Verdict returned by the browser automation service.

    ``success`` is ``None`` when the service gave no usable verdict (error
    status, timeout, malformed body). ``dispatched`` is False only when the
    request never reached the service.
    """

    success: Optional[bool]
    method: Optional[str] = None
    message: str = ""
    dispatched: bool = True

    @property
    def explicitly_failed(self) -> bool:
        return self.success is False
