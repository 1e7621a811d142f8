"""
Natural-language classifier backends for the unsubscribe engine.

The engine never talks to a model directly: every step goes through an
UnsubscribeClassifier so deterministic stubs can replace the model in
tests. Backends return the model's raw text; parsing belongs to the
extractor, page classifier and form automator.
"""

from abc import ABC, abstractmethod
from typing import Optional

from openai import OpenAI, OpenAIError

from .constants import NO_LINK_TOKEN
from .exceptions import ClassifierError, ConfigurationError
from .logging import UnsubscribeLogger


LINK_SYSTEM_PROMPT = (
    "You are an expert at finding unsubscribe links in emails. You must find ANY "
    "link that allows unsubscribing, in ANY language. Return ONLY the complete URL, "
    "nothing else."
)

LINK_USER_PROMPT = """Analyze this email and find the unsubscribe link.

The link might be:
- In the footer/bottom of the email
- Associated with text like: "unsubscribe", "opt out", "opt-out", "darse de baja", "cancelar suscripción", "se désabonner", "abmelden", "manage preferences", "gestionar preferencias", "configuración", "settings", "preferences"
- A "mailto:" link for unsubscribe
- ANY link that clearly allows the user to stop receiving emails

EMAIL CONTENT:
{content}

CRITICAL: Return ONLY the complete URL (including https:// or mailto:) or exactly "{no_link}" if absolutely no unsubscribe method exists.
Do not add any explanation, just the URL."""

PAGE_SYSTEM_PROMPT = "You are a web page analyzer. Return only valid JSON with the analysis."

PAGE_USER_PROMPT = """Analyze this unsubscribe page and determine the status:

Page URL: {url}

Page HTML:
{html}

Respond in this exact JSON format:
{{
  "status": "success" | "needs_form" | "needs_captcha" | "needs_login" | "unknown",
  "confidence": "high" | "medium" | "low",
  "message": "Brief explanation"
}}

Guidelines:
- "success": Page confirms unsubscribe is complete. Treat phrases in any language as strong signals: "successfully unsubscribed", "you have been removed", "confirmado", "éxito", "baja confirmada", "désinscription confirmée", "erfolgreich abgemeldet"
- "needs_form": Page has a form or button that still needs to be submitted
- "needs_captcha": Page requires CAPTCHA
- "needs_login": Page requires authentication
- "unknown": Cannot determine

Return only JSON."""

FORM_SYSTEM_PROMPT = (
    "You are an HTML form analyzer. Extract form fields that can be auto-filled. "
    "Return only valid JSON."
)

FORM_USER_PROMPT = """Extract form data from this HTML needed to submit an unsubscribe form:

{html}

Return JSON with key-value pairs for all hidden inputs and auto-fillable fields.
Only include fields that don't require user input.

Format: {{ "field_name": "field_value" }}

Return only JSON."""


class UnsubscribeClassifier(ABC):
    """Capability interface for the non-deterministic steps of the engine."""

    @abstractmethod
    def extract_link(self, content: str) -> Optional[str]:
        """Return raw text naming the unsubscribe URL, or the NO_LINK token."""
        pass

    @abstractmethod
    def classify_page(self, url: str, html: str) -> Optional[str]:
        """Return a raw JSON document describing the page status."""
        pass

    @abstractmethod
    def extract_form_fields(self, html: str) -> Optional[str]:
        """Return a raw JSON object of auto-fillable form fields."""
        pass


class OpenAIClassifier(UnsubscribeClassifier):
    """Classifier backed by the OpenAI chat completions API."""

    def __init__(self, client: OpenAI, model: str = "gpt-4o-mini"):
        """
        Initialize the classifier.

        Args:
            client: Explicitly constructed OpenAI client owned by the caller
            model: Chat model name
        """
        self.client = client
        self.model = model
        self.logger = UnsubscribeLogger("openai_classifier")
        self.logger.add_context("model", model)

    @classmethod
    def from_api_key(cls, api_key: Optional[str], model: str = "gpt-4o-mini",
                     timeout: float = 60.0) -> 'OpenAIClassifier':
        """Build a classifier with its own client from an API key."""
        if not api_key:
            raise ConfigurationError(
                "OPENAI_API_KEY is not set. Set it in the environment before "
                "running unsubscribe attempts."
            )
        return cls(OpenAI(api_key=api_key, timeout=timeout), model=model)

    def _complete(self, operation: str, system_prompt: str, user_prompt: str,
                  max_tokens: int, json_mode: bool = False) -> Optional[str]:
        request = {
            'model': self.model,
            'messages': [
                {'role': 'system', 'content': system_prompt},
                {'role': 'user', 'content': user_prompt},
            ],
            'max_completion_tokens': max_tokens,
        }
        if json_mode:
            request['response_format'] = {'type': 'json_object'}

        try:
            completion = self.client.chat.completions.create(**request)
        except OpenAIError as e:
            raise ClassifierError(
                f"{operation} request failed: {e}",
                context={'operation': operation, 'error_type': type(e).__name__}
            ) from e

        if not completion.choices:
            self.logger.warning(f"{operation}: response has no choices", {'operation': operation})
            return None

        choice = completion.choices[0]
        content = choice.message.content if choice.message else None
        if not content:
            self.logger.warning(f"{operation}: empty response content", {
                'operation': operation,
                'finish_reason': choice.finish_reason
            })
        return content

    def extract_link(self, content: str) -> Optional[str]:
        return self._complete(
            "extract_link",
            LINK_SYSTEM_PROMPT,
            LINK_USER_PROMPT.format(content=content, no_link=NO_LINK_TOKEN),
            max_tokens=300
        )

    def classify_page(self, url: str, html: str) -> Optional[str]:
        return self._complete(
            "classify_page",
            PAGE_SYSTEM_PROMPT,
            PAGE_USER_PROMPT.format(url=url, html=html),
            max_tokens=300,
            json_mode=True
        )

    def extract_form_fields(self, html: str) -> Optional[str]:
        return self._complete(
            "extract_form_fields",
            FORM_SYSTEM_PROMPT,
            FORM_USER_PROMPT.format(html=html),
            max_tokens=500,
            json_mode=True
        )
