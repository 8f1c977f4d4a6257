"""Newsletter service - Subscriber lifecycle, drafts and idempotent sending"""

import logging
from typing import Optional
from urllib.parse import quote

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ... import config
from ...database import storage_errors
from ...email_service import EmailSender
from ...errors import Conflict, DeliveryError, NotFound, StorageError, ValidationError
from ...models import NewsletterDraft, NewsletterSend, NewsletterSubscriber
from ...shared.validators import is_valid_email
from .repository import NewsletterRepository
from .schemas import DraftRequest, SendRequest

logger = logging.getLogger(__name__)

ALREADY_SENT = "This draft has already been sent. Create a new draft to send again."


def unsubscribe_url(email: str) -> str:
    return f"{config.BASE_URL}/api/newsletter/unsubscribe?email={quote(email)}"


class NewsletterService:
    """Service layer for newsletter business logic"""

    def __init__(self, db: Session, email_sender: EmailSender):
        self.db = db
        self.email_sender = email_sender
        self.repo = NewsletterRepository()

    # ------------------------------------------------------------------
    # Subscribers
    # ------------------------------------------------------------------

    def subscribe(self, email: Optional[str], name: Optional[str] = None) -> tuple[dict, bool]:
        """
        Subscribe an email address.

        Returns:
            (response body, created) where created is True only for a new row
        """
        if not is_valid_email(email):
            raise ValidationError("Valid email is required")

        with storage_errors(self.db, "Failed to process subscription"):
            existing = self.repo.get_subscriber_by_email(self.db, email)

            if existing and existing.active:
                return {
                    "message": "You are already subscribed to our newsletter!",
                    "alreadySubscribed": True,
                }, False

            if existing:
                self.repo.reactivate_subscriber(self.db, email)
                logger.info(f"Subscriber {existing.id} reactivated")
                return {
                    "message": "Welcome back! Your subscription has been reactivated.",
                    "reactivated": True,
                }, False

            try:
                subscriber = self.repo.create_subscriber(self.db, email, name or None)
            except IntegrityError:
                # Lost a race with a concurrent subscribe for the same address
                self.db.rollback()
                return {
                    "message": "You are already subscribed to our newsletter!",
                    "alreadySubscribed": True,
                }, False

        logger.info(f"✅ New newsletter subscriber {subscriber.id}")
        return {"message": "Successfully subscribed to newsletter!", "subscribed": True}, True

    def unsubscribe(self, email: Optional[str]) -> dict:
        if not email:
            raise ValidationError("Email is required")

        with storage_errors(self.db, "Failed to unsubscribe"):
            count = self.repo.deactivate_subscriber(self.db, email)
        if count == 0:
            raise NotFound("Email not found in our records")
        return {"message": "Successfully unsubscribed from newsletter"}

    def get_active_subscribers(self) -> list[NewsletterSubscriber]:
        with storage_errors(self.db, "Failed to fetch subscribers"):
            return self.repo.get_active_subscribers(self.db)

    # ------------------------------------------------------------------
    # Drafts
    # ------------------------------------------------------------------

    @staticmethod
    def _require_subject_and_content(subject: Optional[str], content: Optional[str]) -> None:
        if not subject or not subject.strip() or not content or not content.strip():
            raise ValidationError("Subject and content are required")

    def get_drafts(self) -> list[NewsletterDraft]:
        with storage_errors(self.db, "Failed to fetch drafts"):
            return self.repo.get_drafts(self.db)

    def get_draft(self, draft_id: int) -> NewsletterDraft:
        with storage_errors(self.db, "Failed to fetch draft"):
            draft = self.repo.get_draft_by_id(self.db, draft_id)
        if not draft:
            raise NotFound("Draft not found")
        return draft

    def create_draft(self, data: DraftRequest) -> NewsletterDraft:
        self._require_subject_and_content(data.subject, data.content)
        with storage_errors(self.db, "Failed to create draft"):
            return self.repo.create_draft(self.db, data.subject, data.content)

    def update_draft(self, draft_id: int, data: DraftRequest) -> NewsletterDraft:
        self._require_subject_and_content(data.subject, data.content)
        with storage_errors(self.db, "Failed to update draft"):
            count = self.repo.update_draft(self.db, draft_id, data.subject, data.content)
        if count == 0:
            raise NotFound("Draft not found")
        return self.get_draft(draft_id)

    def delete_draft(self, draft_id: int) -> dict:
        with storage_errors(self.db, "Failed to delete draft"):
            count = self.repo.delete_draft(self.db, draft_id)
        if count == 0:
            raise NotFound("Draft not found")
        return {"message": "Draft deleted successfully"}

    # ------------------------------------------------------------------
    # Sending
    # ------------------------------------------------------------------

    async def send_newsletter(self, data: SendRequest) -> dict:
        """
        Send a newsletter to every active subscriber.

        A draft can be the source of at most one send. The history row is staged
        before any mail goes out, so the unique draft_id constraint rejects a
        concurrent duplicate; it is committed with the final recipient count.
        """
        self._require_subject_and_content(data.subject, data.content)

        subscribers = self.get_active_subscribers()
        if not subscribers:
            raise ValidationError("No active subscribers found")

        draft_id = data.draft_id
        if draft_id is not None:
            with storage_errors(self.db, "Failed to check send history"):
                draft = self.repo.get_draft_by_id(self.db, draft_id)
                existing = self.repo.get_send_for_draft(self.db, draft_id)
            if not draft:
                raise NotFound("Draft not found")
            if existing:
                logger.warning(f"🚫 Draft {draft_id} already sent (send {existing.id})")
                raise Conflict(ALREADY_SENT)

        try:
            send = self.repo.add_send(self.db, draft_id, data.subject)
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(f"🚫 Concurrent send rejected for draft {draft_id}: {e}")
            raise Conflict(ALREADY_SENT) from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to record newsletter send: {e}")
            raise StorageError("Failed to send newsletter") from e

        sent, failed = await self._deliver(subscribers, data.subject, data.content)

        try:
            send.recipient_count = sent
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Error logging send history: {e}")
            raise StorageError("Failed to send newsletter") from e

        logger.info(
            f"📧 Newsletter '{data.subject}' sent to {sent}/{len(subscribers)} subscribers"
            f" (send {send.id}, draft {draft_id})"
        )
        message = "Newsletter sent successfully"
        if not self.email_sender.enabled:
            message += " (MOCK - email delivery disabled)"
        return {"message": message, "sent": sent, "failed": failed, "total": len(subscribers)}

    async def _deliver(
        self, subscribers: list[NewsletterSubscriber], subject: str, content: str
    ) -> tuple[int, int]:
        sent = 0
        failed = 0
        for subscriber in subscribers:
            try:
                html = self.email_sender.render_newsletter(
                    subject, content, unsubscribe_url(subscriber.email)
                )
                delivered = await self.email_sender.send_bulk(subscriber.email, subject, html)
            except DeliveryError as e:
                logger.error(f"Error sending to {subscriber.email}: {e}")
                delivered = False
            if delivered:
                sent += 1
            else:
                failed += 1
        return sent, failed

    def get_sends(self) -> list[NewsletterSend]:
        with storage_errors(self.db, "Failed to fetch send history"):
            return self.repo.get_sends(self.db)
