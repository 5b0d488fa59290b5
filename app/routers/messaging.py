# app/routers/messaging.py
"""
Buyer/seller conversations. Sending runs fraud screening first: messages scored
critical are refused with 400 MESSAGE_BLOCKED and are not stored.
"""

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session
from app.database import get_db
from app.schemas.common import Envelope, Page, Pagination
from app.schemas.messaging import (
    ConversationStart, ConversationOut, MessageSend, MessageOut, MessageSentOut, FraudNotice,
)
from app.services import messaging_service
from app.services.auth_service import AuthenticatedUser, get_current_user
from app.utils.rate_limiter import rate_limit, STANDARD

router = APIRouter(prefix="/messages", dependencies=[Depends(rate_limit(STANDARD))])


@router.get("/conversations", response_model=Page[ConversationOut])
def list_conversations(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=50),
    db: Session = Depends(get_db),
    user: AuthenticatedUser = Depends(get_current_user),
):
    conversations, total = messaging_service.list_conversations(db, user, page, limit)
    return Page[ConversationOut](data=[ConversationOut.model_validate(c) for c in conversations],
                                 pagination=Pagination.build(page, limit, total))


@router.post("/conversations", response_model=Envelope[ConversationOut], status_code=201)
def start_conversation(body: ConversationStart, response: Response, db: Session = Depends(get_db),
                       user: AuthenticatedUser = Depends(get_current_user)):
    """Opens a conversation with the listing's seller, or returns the existing one (200)."""
    conversation, created = messaging_service.start_conversation(db, user, body.listing_id)
    if not created:
        response.status_code = 200
    return Envelope[ConversationOut](data=ConversationOut.model_validate(conversation),
                                     message="Conversation started" if created else "Conversation already exists")


@router.get("/conversations/{conversation_id}/messages", response_model=Page[MessageOut])
def list_messages(
    conversation_id: str,
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=100),
    db: Session = Depends(get_db),
    user: AuthenticatedUser = Depends(get_current_user),
):
    messages, total = messaging_service.list_messages(db, user, conversation_id, page, limit)
    return Page[MessageOut](data=[MessageOut.model_validate(m) for m in messages],
                            pagination=Pagination.build(page, limit, total))


@router.post("/conversations/{conversation_id}/messages", response_model=Envelope[MessageSentOut],
             status_code=201)
def send_message(conversation_id: str, body: MessageSend, db: Session = Depends(get_db),
                 user: AuthenticatedUser = Depends(get_current_user)):
    message, analysis = messaging_service.send_message(db, user, conversation_id, body.content)
    out = MessageSentOut(
        message=MessageOut.model_validate(message),
        fraud=FraudNotice(risk_level=analysis.risk_level, risk_score=analysis.risk_score,
                          flags=analysis.flags, warning=messaging_service.fraud_warning(analysis)),
    )
    return Envelope[MessageSentOut](data=out, message="Message sent")


@router.post("/conversations/{conversation_id}/read", response_model=Envelope[dict])
def mark_read(conversation_id: str, db: Session = Depends(get_db),
              user: AuthenticatedUser = Depends(get_current_user)):
    updated = messaging_service.mark_read(db, user, conversation_id)
    return Envelope[dict](data={"updated": updated})
