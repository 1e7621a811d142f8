"""
Unsubscribe decision engine.

This package provides the AI-driven unsubscribe pipeline:
- Link extraction from email content through a natural-language classifier
- Page fetching with redirect following
- Page classification (success, form, captcha, login, unknown)
- Form auto-submission and browser automation delegation
- The orchestrating state machine with its optimistic-failure policy
"""

from .classifier import UnsubscribeClassifier, OpenAIClassifier
from .link_extractor import LinkExtractor
from .page_fetcher import PageFetcher
from .page_classifier import PageClassifier
from .form_automator import FormAutomator
from .browser_client import BrowserAutomationClient, create_browser_client
from .orchestrator import UnsubscribeOrchestrator
from .factory import build_orchestrator
from .types import (
    UnsubscribeAttempt, LinkExtractionResult, FetchResult,
    PageAnalysis, AutomationResult
)

__all__ = [
    'UnsubscribeClassifier',
    'OpenAIClassifier',
    'LinkExtractor',
    'PageFetcher',
    'PageClassifier',
    'FormAutomator',
    'BrowserAutomationClient',
    'create_browser_client',
    'UnsubscribeOrchestrator',
    'build_orchestrator',
    'UnsubscribeAttempt',
    'LinkExtractionResult',
    'FetchResult',
    'PageAnalysis',
    'AutomationResult'
]
