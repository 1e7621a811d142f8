"""
Unsubscribe action handler.

Runs unsubscribe attempts for stored emails and records each completed
attempt in the audit log:
- Single-email unsubscribe
- Bulk unsubscribe with bounded concurrency
- One audit row per completed attempt, none for attempts that raised

Database access stays on the calling thread; worker threads only run
the (stateless) orchestrator on plain strings.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from sqlalchemy.orm import Session

from ..database.models import EmailMessage, UnsubscribeLog
from ..engine.constants import STATUS_ERROR
from ..engine.logging import UnsubscribeLogger
from ..engine.orchestrator import UnsubscribeOrchestrator
from ..engine.types import UnsubscribeAttempt


@dataclass(frozen=True)
class ActionResult:
    """Outcome of an unsubscribe action for one email."""

    email_id: int
    status: str
    method: Optional[str] = None
    target: Optional[str] = None
    error: Optional[str] = None
    log_id: Optional[int] = None

    @classmethod
    def from_attempt(cls, email_id: int, attempt: UnsubscribeAttempt,
                     log_id: Optional[int] = None) -> 'ActionResult':
        return cls(
            email_id=email_id,
            status=attempt.status,
            method=attempt.method,
            target=attempt.target,
            error=attempt.error,
            log_id=log_id
        )


class UnsubscribeActionHandler:
    """Run unsubscribe attempts for stored emails and audit them."""

    def __init__(
        self,
        session: Session,
        orchestrator: UnsubscribeOrchestrator,
        acting_user: str = 'cli',
        max_workers: int = 4
    ):
        """
        Initialize handler.

        Args:
            session: Database session
            orchestrator: Engine used for each attempt
            acting_user: Identity recorded on audit rows
            max_workers: Maximum concurrent attempts for bulk requests
        """
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")

        self.session = session
        self.orchestrator = orchestrator
        self.acting_user = acting_user
        self.max_workers = max_workers
        self.logger = UnsubscribeLogger("action_handler")
        self.logger.add_context("acting_user", acting_user)

    def unsubscribe_email(self, email_id: int) -> ActionResult:
        """Attempt to unsubscribe using one stored email."""
        return self.unsubscribe_emails([email_id])[0]

    def unsubscribe_emails(self, email_ids: Sequence[int]) -> List[ActionResult]:
        """
        Attempt to unsubscribe using several stored emails.

        Args:
            email_ids: IDs of stored emails; results keep this order

        Returns:
            One ActionResult per requested ID
        """
        emails = self._load_emails(email_ids)
        results: Dict[int, Optional[ActionResult]] = {}
        pending = []

        for email_id in email_ids:
            email_msg = emails.get(email_id)
            if email_msg is None:
                results[email_id] = ActionResult(email_id, STATUS_ERROR, error='Email not found')
            elif email_id not in results:
                pending.append((email_id, email_msg.content_html, email_msg.content_text))
                results[email_id] = None

        if pending:
            workers = min(self.max_workers, len(pending))
            with ThreadPoolExecutor(max_workers=workers) as pool:
                futures = [
                    (email_id, pool.submit(self.orchestrator.attempt, html, text))
                    for email_id, html, text in pending
                ]
                for email_id, future in futures:
                    results[email_id] = self._collect(emails[email_id], future)

        self.logger.info("Unsubscribe action completed", {
            'requested': len(email_ids),
            'attempted': len(pending)
        })
        return [results[email_id] for email_id in email_ids]

    def _collect(self, email_msg: EmailMessage, future) -> ActionResult:
        try:
            attempt = future.result()
        except Exception as e:
            self.logger.log_exception(e, {'email_id': email_msg.id})
            return ActionResult(email_msg.id, STATUS_ERROR, error=str(e) or type(e).__name__)

        log = self._record_attempt(email_msg, attempt)
        return ActionResult.from_attempt(email_msg.id, attempt, log_id=log.id)

    def _load_emails(self, email_ids: Sequence[int]) -> Dict[int, EmailMessage]:
        if not email_ids:
            return {}
        rows = self.session.query(EmailMessage).filter(
            EmailMessage.id.in_(list(email_ids))
        ).all()
        return {row.id: row for row in rows}

    def _record_attempt(self, email_msg: EmailMessage, attempt: UnsubscribeAttempt) -> UnsubscribeLog:
        """
        Record an unsubscribe attempt in the audit log.

        Args:
            email_msg: Email the attempt was made for
            attempt: Terminal attempt record
        """
        log = UnsubscribeLog(
            email_id=email_msg.id,
            acting_user=self.acting_user,
            status=attempt.status,
            unsubscribe_method=attempt.method,
            unsubscribe_target=attempt.target,
            error_message=attempt.error,
            attempt_count=1,
            last_attempted_at=datetime.now()
        )
        self.session.add(log)
        self.session.commit()
        return log
