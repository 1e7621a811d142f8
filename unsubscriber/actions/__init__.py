"""
Unsubscribe actions on stored emails.

Runs the decision engine for emails in the database and records the
outcome of every attempt in the audit log.
"""

from .unsubscribe_handler import UnsubscribeActionHandler, ActionResult

__all__ = ['UnsubscribeActionHandler', 'ActionResult']
