"""
Wiring for a production orchestrator.

The OpenAI client is constructed here, per orchestrator, and handed down
explicitly; nothing in the engine holds a process-wide client.
"""

from typing import Optional, Type

from openai import OpenAI

from ..config import Config
from .browser_client import create_browser_client
from .classifier import OpenAIClassifier, UnsubscribeClassifier
from .form_automator import FormAutomator
from .link_extractor import LinkExtractor
from .orchestrator import UnsubscribeOrchestrator
from .page_classifier import PageClassifier
from .page_fetcher import PageFetcher


def build_orchestrator(
    config: Type[Config] = Config,
    classifier: Optional[UnsubscribeClassifier] = None,
    openai_client: Optional[OpenAI] = None
) -> UnsubscribeOrchestrator:
    """
    Build an orchestrator from configuration.

    Args:
        config: Configuration class to read settings from
        classifier: Classifier backend; defaults to OpenAI
        openai_client: Pre-built OpenAI client for the default backend

    Raises:
        ConfigurationError: if no classifier is given and no API key is configured
    """
    if classifier is None:
        if openai_client is not None:
            classifier = OpenAIClassifier(openai_client, model=config.OPENAI_MODEL)
        else:
            classifier = OpenAIClassifier.from_api_key(
                config.OPENAI_API_KEY,
                model=config.OPENAI_MODEL,
                timeout=config.OPENAI_TIMEOUT
            )

    page_classifier = PageClassifier(
        classifier,
        max_attempts=config.CLASSIFIER_MAX_ATTEMPTS,
        retry_base_delay=config.CLASSIFIER_RETRY_BASE_DELAY
    )

    return UnsubscribeOrchestrator(
        link_extractor=LinkExtractor(classifier),
        page_fetcher=PageFetcher(timeout=config.REQUEST_TIMEOUT),
        page_classifier=page_classifier,
        form_automator=FormAutomator(classifier, page_classifier, timeout=config.REQUEST_TIMEOUT),
        automation_client=create_browser_client(
            config.BROWSER_AUTOMATION_URL, timeout=config.AUTOMATION_TIMEOUT
        )
    )
