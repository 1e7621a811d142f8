"""
Custom exceptions for the unsubscribe engine with enhanced error context.

This module provides structured exception classes that carry context
information for better debugging and error handling.
"""

from typing import Dict, Any, Optional


class UnsubscribeError(Exception):
    """Base class for unsubscribe engine errors."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context

    def __str__(self) -> str:
        base_message = super().__str__()
        if self.context:
            context_info = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{base_message} (context: {context_info})"
        return base_message


class ClassifierError(UnsubscribeError):
    """Exception raised when the natural-language classifier call fails."""


class ClassifierEmptyResponseError(ClassifierError):
    """Exception raised when the classifier answers with empty content."""


class PageFetchNetworkError(UnsubscribeError):
    """Exception raised when a page cannot be reached at the network layer.

    Covers timeouts, DNS failures and refused or reset connections. HTTP
    error statuses are not network errors; they come back as a FetchResult.
    """

    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(message)
        self.url = url

    def __str__(self) -> str:
        base_message = super().__str__()
        if self.url:
            return f"{base_message} (url={self.url})"
        return base_message


class ConfigurationError(UnsubscribeError):
    """Exception raised when required configuration is missing."""
