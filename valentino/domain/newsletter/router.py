"""Newsletter router - public subscription endpoints and admin drafts/sending"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, Response
from fastapi.responses import HTMLResponse
from sqlalchemy.orm import Session

from ...auth import require_admin
from ...database import get_db
from ...email_templates import unsubscribe_page
from ...errors import NotFound, ServiceError, ValidationError
from .schemas import (
    DraftRequest,
    DraftResponse,
    SendHistoryResponse,
    SendRequest,
    SendResult,
    SubscribeRequest,
    SubscriberResponse,
    UnsubscribeRequest,
)
from .service import NewsletterService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/newsletter", tags=["Newsletter"])

admin = [Depends(require_admin)]


def get_newsletter_service(request: Request, db: Session = Depends(get_db)) -> NewsletterService:
    """Dependency injection for NewsletterService"""
    return NewsletterService(db, request.app.state.email_sender)


# ============================================================================
# PUBLIC SUBSCRIPTION
# ============================================================================


@router.post("/subscribe")
async def subscribe(
    data: SubscribeRequest,
    response: Response,
    service: NewsletterService = Depends(get_newsletter_service),
):
    body, created = service.subscribe(data.email, data.name)
    response.status_code = 201 if created else 200
    return body


@router.get("/unsubscribe", response_class=HTMLResponse)
async def unsubscribe_link(
    email: Optional[str] = Query(None),
    service: NewsletterService = Depends(get_newsletter_service),
):
    """Unsubscribe via the link at the bottom of every newsletter"""
    try:
        service.unsubscribe(email)
    except ValidationError:
        return HTMLResponse(
            unsubscribe_page("Unsubscribe", "Email parameter is required."), status_code=400
        )
    except NotFound:
        return HTMLResponse(
            unsubscribe_page("Not Found", "Email not found in our records."), status_code=404
        )
    except ServiceError:
        return HTMLResponse(
            unsubscribe_page("Error", "Failed to unsubscribe. Please try again later."),
            status_code=500,
        )
    return HTMLResponse(
        unsubscribe_page(
            "Successfully Unsubscribed",
            "You have been unsubscribed from our newsletter.",
            success=True,
        )
    )


@router.post("/unsubscribe")
async def unsubscribe(
    data: UnsubscribeRequest,
    service: NewsletterService = Depends(get_newsletter_service),
):
    return service.unsubscribe(data.email)


# ============================================================================
# ADMIN - SUBSCRIBERS, DRAFTS & SENDING
# ============================================================================


@router.get("/subscribers", response_model=list[SubscriberResponse], dependencies=admin)
async def get_subscribers(service: NewsletterService = Depends(get_newsletter_service)):
    """Active subscribers, most recent first"""
    return service.get_active_subscribers()


@router.get("/drafts", response_model=list[DraftResponse], dependencies=admin)
async def get_drafts(service: NewsletterService = Depends(get_newsletter_service)):
    return service.get_drafts()


@router.get("/drafts/{draft_id}", response_model=DraftResponse, dependencies=admin)
async def get_draft(draft_id: int, service: NewsletterService = Depends(get_newsletter_service)):
    return service.get_draft(draft_id)


@router.post("/drafts", response_model=DraftResponse, status_code=201, dependencies=admin)
async def create_draft(
    data: DraftRequest,
    service: NewsletterService = Depends(get_newsletter_service),
):
    return service.create_draft(data)


@router.put("/drafts/{draft_id}", response_model=DraftResponse, dependencies=admin)
async def update_draft(
    draft_id: int,
    data: DraftRequest,
    service: NewsletterService = Depends(get_newsletter_service),
):
    return service.update_draft(draft_id, data)


@router.delete("/drafts/{draft_id}", dependencies=admin)
async def delete_draft(draft_id: int, service: NewsletterService = Depends(get_newsletter_service)):
    return service.delete_draft(draft_id)


@router.post("/send", response_model=SendResult, dependencies=admin)
async def send_newsletter(
    data: SendRequest,
    service: NewsletterService = Depends(get_newsletter_service),
):
    """Send to all active subscribers. A given draft can only be sent once."""
    return await service.send_newsletter(data)


@router.get("/sends", response_model=list[SendHistoryResponse], dependencies=admin)
async def get_send_history(service: NewsletterService = Depends(get_newsletter_service)):
    return service.get_sends()
