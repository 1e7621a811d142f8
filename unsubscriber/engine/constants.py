"""
Constants and shared configuration for the unsubscribe decision engine.

This module contains the status/method vocabularies, content limits,
patterns and canned messages used across the extraction, classification
and dispatch steps.
"""

import re
from typing import List, Pattern, Tuple

# Terminal attempt statuses
STATUS_SUCCESS = "success"
STATUS_ERROR = "error"

# Terminal attempt methods
METHOD_HTTP = "http"
METHOD_MAILTO = "mailto"
METHOD_FORM_AUTO = "form-auto"
METHOD_AI_AUTO = "ai-auto"
METHOD_MANUAL = "manual"
METHOD_UNKNOWN = "unknown"

ATTEMPT_STATUSES = (STATUS_SUCCESS, STATUS_ERROR)
ATTEMPT_METHODS = (
    METHOD_HTTP, METHOD_MAILTO, METHOD_FORM_AUTO,
    METHOD_AI_AUTO, METHOD_MANUAL, METHOD_UNKNOWN
)

# Page analysis action buckets
ACTION_SUCCESS = "success"
ACTION_FORM = "form"
ACTION_CAPTCHA = "captcha"
ACTION_LOGIN = "login"
ACTION_UNKNOWN = "unknown"

# Classifier "status" values mapped onto action buckets
PAGE_STATUS_TO_ACTION = {
    "success": ACTION_SUCCESS,
    "needs_form": ACTION_FORM,
    "needs_captcha": ACTION_CAPTCHA,
    "needs_login": ACTION_LOGIN,
}

# Link extraction sentinel returned by the classifier
NO_LINK_TOKEN = "NO_LINK"

# Content limits (characters)
MAX_EMAIL_CONTENT_LENGTH = 50000
EMAIL_CONTENT_HEAD_LENGTH = 10000
MAX_PAGE_HTML_LENGTH = 12000
MAX_FORM_HTML_LENGTH = 10000
TRUNCATION_MARKER = "...[truncated]"

# Network defaults (seconds)
DEFAULT_REQUEST_TIMEOUT = 10
DEFAULT_AUTOMATION_TIMEOUT = 90

# Page classification retry policy
CLASSIFIER_MAX_ATTEMPTS = 3
CLASSIFIER_RETRY_BASE_DELAY = 2.0

# Many unsubscribe endpoints reject unrecognized clients
BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
)

# Confirmation flags appended to every auto-submitted form
FORM_CONFIRMATION_FLAGS: List[Tuple[str, str]] = [
    ("confirm", "1"),
    ("confirmed", "yes"),
    ("unsubscribe", "true"),
]

# First URL in a classifier response
LINK_PATTERN: Pattern = re.compile(
    r'(https?://[^\s<>"\']+|mailto:[^\s<>"\']+)',
    re.IGNORECASE
)

# Sentence punctuation the classifier tends to leave after a URL
LINK_TRAILING_PUNCTUATION = '.,;:!?)]}>'

# Exception text that signals a network-layer problem
NETWORK_ERROR_MARKERS: List[str] = [
    'timeout', 'timed out', 'network', 'connection', 'connect',
    'dns', 'name resolution', 'getaddrinfo', 'refused', 'reset',
    'unreachable', 'econn', 'socket'
]

# Terminal error messages
ERROR_NO_LINK = "No unsubscribe link found in email"
ERROR_MAILTO = "Mailto links require manual email sending"
ERROR_CAPTCHA = "Page requires CAPTCHA verification"
ERROR_LOGIN = "Page requires authentication"
ERROR_CLIENT_STATUS = "Unsubscribe page responded with status {status_code}"
