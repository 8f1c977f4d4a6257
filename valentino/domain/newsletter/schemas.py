"""Newsletter domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class SubscribeRequest(BaseModel):
    email: Optional[str] = None
    name: Optional[str] = None


class UnsubscribeRequest(BaseModel):
    email: Optional[str] = None


class SubscriberResponse(BaseModel):
    id: int
    email: str
    name: Optional[str] = None
    subscribed_at: Optional[datetime] = None
    active: bool

    class Config:
        from_attributes = True


class DraftRequest(BaseModel):
    """Schema for creating or updating a draft"""

    subject: Optional[str] = None
    content: Optional[str] = None


class DraftResponse(BaseModel):
    id: int
    subject: str
    content: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class SendRequest(BaseModel):
    """Schema for sending a newsletter. Omit draftId for an ad-hoc send."""

    draft_id: Optional[int] = Field(None, alias="draftId")
    subject: Optional[str] = None
    content: Optional[str] = None

    class Config:
        populate_by_name = True


class SendResult(BaseModel):
    message: str
    sent: int
    failed: int
    total: int


class SendHistoryResponse(BaseModel):
    id: int
    draft_id: Optional[int] = None
    subject: str
    recipient_count: int
    sent_at: Optional[datetime] = None

    class Config:
        from_attributes = True
