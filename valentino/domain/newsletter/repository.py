"""Newsletter repository - Database operations for subscribers, drafts and sends"""

from typing import Optional

from sqlalchemy.orm import Session
from sqlalchemy.sql import func

from ...models import NewsletterDraft, NewsletterSend, NewsletterSubscriber


class NewsletterRepository:
    """Repository for newsletter database operations"""

    # Subscriber Methods
    @staticmethod
    def get_subscriber_by_email(db: Session, email: str) -> Optional[NewsletterSubscriber]:
        return db.query(NewsletterSubscriber).filter(NewsletterSubscriber.email == email).first()

    @staticmethod
    def create_subscriber(db: Session, email: str, name: Optional[str] = None) -> NewsletterSubscriber:
        subscriber = NewsletterSubscriber(email=email, name=name, active=True)
        db.add(subscriber)
        db.commit()
        db.refresh(subscriber)
        return subscriber

    @staticmethod
    def reactivate_subscriber(db: Session, email: str) -> int:
        """Flip an inactive subscriber back on and restart subscribed_at"""
        count = (
            db.query(NewsletterSubscriber)
            .filter(NewsletterSubscriber.email == email)
            .update(
                {
                    NewsletterSubscriber.active: True,
                    NewsletterSubscriber.subscribed_at: func.now(),
                },
                synchronize_session=False,
            )
        )
        db.commit()
        return count

    @staticmethod
    def deactivate_subscriber(db: Session, email: str) -> int:
        count = (
            db.query(NewsletterSubscriber)
            .filter(NewsletterSubscriber.email == email)
            .update({NewsletterSubscriber.active: False}, synchronize_session=False)
        )
        db.commit()
        return count

    @staticmethod
    def get_active_subscribers(db: Session) -> list[NewsletterSubscriber]:
        return (
            db.query(NewsletterSubscriber)
            .filter(NewsletterSubscriber.active.is_(True))
            .order_by(NewsletterSubscriber.subscribed_at.desc(), NewsletterSubscriber.id.desc())
            .all()
        )

    # Draft Methods
    @staticmethod
    def get_drafts(db: Session) -> list[NewsletterDraft]:
        return (
            db.query(NewsletterDraft)
            .order_by(NewsletterDraft.updated_at.desc(), NewsletterDraft.id.desc())
            .all()
        )

    @staticmethod
    def get_draft_by_id(db: Session, draft_id: int) -> Optional[NewsletterDraft]:
        return db.query(NewsletterDraft).filter(NewsletterDraft.id == draft_id).first()

    @staticmethod
    def create_draft(db: Session, subject: str, content: str) -> NewsletterDraft:
        draft = NewsletterDraft(subject=subject, content=content)
        db.add(draft)
        db.commit()
        db.refresh(draft)
        return draft

    @staticmethod
    def update_draft(db: Session, draft_id: int, subject: str, content: str) -> int:
        count = (
            db.query(NewsletterDraft)
            .filter(NewsletterDraft.id == draft_id)
            .update(
                {
                    NewsletterDraft.subject: subject,
                    NewsletterDraft.content: content,
                    NewsletterDraft.updated_at: func.now(),
                },
                synchronize_session=False,
            )
        )
        db.commit()
        return count

    @staticmethod
    def delete_draft(db: Session, draft_id: int) -> int:
        count = (
            db.query(NewsletterDraft)
            .filter(NewsletterDraft.id == draft_id)
            .delete(synchronize_session=False)
        )
        db.commit()
        return count

    # Send History Methods
    @staticmethod
    def get_send_for_draft(db: Session, draft_id: int) -> Optional[NewsletterSend]:
        return db.query(NewsletterSend).filter(NewsletterSend.draft_id == draft_id).first()

    @staticmethod
    def add_send(
        db: Session, draft_id: Optional[int], subject: str, recipient_count: int = 0
    ) -> NewsletterSend:
        """
        Stage a send row and flush it without committing, so the unique draft_id
        constraint is checked before any mail goes out. The caller commits.
        """
        send = NewsletterSend(draft_id=draft_id, subject=subject, recipient_count=recipient_count)
        db.add(send)
        db.flush()
        return send

    @staticmethod
    def get_sends(db: Session) -> list[NewsletterSend]:
        return (
            db.query(NewsletterSend)
            .order_by(NewsletterSend.sent_at.desc(), NewsletterSend.id.desc())
            .all()
        )
