# app/services/messaging_service.py
"""
Buyer/seller messaging.

Every outgoing message is scored by fraud_service.analyze_message before it is
stored. Messages scored critical are refused (MESSAGE_BLOCKED) and counted on
the conversation's fraud_alerts_count; everything else is stored together with
its score and flags.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from app.models.conversation import Conversation, Message, WELCOME_MESSAGE
from app.models.listing import Listing
from app.services.auth_service import AuthenticatedUser
from app.services.fraud_service import FraudAnalysis, analyze_message
from app.utils.errors import ForbiddenError, NotFoundError, ValidationError
from app.utils.logger import get_logger

logger = get_logger(__name__)

PREVIEW_LENGTH = 100


def _decorate(db: Session, conversation: Conversation, user_id: str) -> Conversation:
    listing = db.query(Listing.title).filter(Listing.id == conversation.listing_id).first()
    conversation.listing_title = listing.title if listing else None
    conversation.user_role = "buyer" if conversation.buyer_id == user_id else "seller"
    conversation.unread_count = db.query(func.count(Message.id)).filter(
        Message.conversation_id == conversation.id,
        Message.sender_id != user_id,
        Message.is_read.is_(False),
    ).scalar() or 0
    return conversation


def get_participant_conversation(db: Session, user: AuthenticatedUser, conversation_id: str) -> Conversation:
    conversation = db.query(Conversation).filter(Conversation.id == conversation_id).first()
    if not conversation:
        raise NotFoundError("Conversation not found", code="CONVERSATION_NOT_FOUND")
    if user.id not in (conversation.buyer_id, conversation.seller_id):
        raise ForbiddenError("You are not a participant in this conversation")
    return conversation


def start_conversation(db: Session, user: AuthenticatedUser, listing_id: str):
    """Returns (conversation, created). An existing conversation for the same listing and buyer is reused."""
    listing = db.query(Listing).filter(Listing.id == listing_id, Listing.status != "removed").first()
    if not listing:
        raise NotFoundError("Listing not found", code="LISTING_NOT_FOUND")
    if listing.user_id == user.id:
        raise ValidationError("You cannot message yourself about your own listing", code="CANNOT_MESSAGE_SELF")

    existing = db.query(Conversation).filter(Conversation.listing_id == listing_id,
                                             Conversation.buyer_id == user.id).first()
    if existing:
        return _decorate(db, existing, user.id), False

    now = datetime.utcnow()
    conversation = Conversation(listing_id=listing_id, buyer_id=user.id, seller_id=listing.user_id,
                                status="active", fraud_alerts_count=0, created_at=now, updated_at=now)
    db.add(conversation)
    db.flush()
    db.add(Message(conversation_id=conversation.id, sender_id=listing.user_id, content=WELCOME_MESSAGE,
                   message_type="system", is_read=False, fraud_score=0, fraud_flags=[], created_at=now))
    db.commit()
    db.refresh(conversation)
    logger.info(f"[MESSAGING] conversation {conversation.id} opened on listing {listing_id} by {user.id}")
    return _decorate(db, conversation, user.id), True


def list_conversations(db: Session, user: AuthenticatedUser, page: int = 1, limit: int = 20):
    q = db.query(Conversation).filter(
        or_(Conversation.buyer_id == user.id, Conversation.seller_id == user.id))
    total = q.count()
    conversations = q.order_by(Conversation.updated_at.desc()).offset((page - 1) * limit).limit(limit).all()
    return [_decorate(db, c, user.id) for c in conversations], total


def send_message(db: Session, user: AuthenticatedUser, conversation_id: str, content: str):
    """Returns (message, analysis). Raises ValidationError(MESSAGE_BLOCKED) when the analysis says block."""
    conversation = get_participant_conversation(db, user, conversation_id)
    if conversation.status != "active":
        raise ValidationError("This conversation is archived", code="CONVERSATION_ARCHIVED")

    content = content.strip()
    if not content:
        raise ValidationError("Message content cannot be empty")

    analysis = analyze_message(content)
    now = datetime.utcnow()

    if analysis.should_block:
        conversation.fraud_alerts_count = (conversation.fraud_alerts_count or 0) + 1
        conversation.updated_at = now
        db.commit()
        logger.warning(f"[MESSAGING] message from {user.id} in {conversation_id} blocked "
                       f"(score={analysis.risk_score}, flags={analysis.flags})")
        raise ValidationError(
            "Message blocked for security reasons",
            code="MESSAGE_BLOCKED",
            details={"riskLevel": analysis.risk_level, "riskScore": analysis.risk_score,
                     "reasons": analysis.recommendations},
        )

    message = Message(conversation_id=conversation.id, sender_id=user.id, content=content,
                      message_type="text", is_read=False, fraud_score=analysis.risk_score,
                      fraud_flags=list(analysis.flags), created_at=now)
    db.add(message)
    conversation.last_message_preview = content[:PREVIEW_LENGTH]
    conversation.updated_at = now
    db.commit()
    db.refresh(message)
    logger.info(f"[MESSAGING] {message.id} sent in {conversation_id} (risk={analysis.risk_level})")
    return message, analysis


def list_messages(db: Session, user: AuthenticatedUser, conversation_id: str, page: int = 1, limit: int = 50):
    get_participant_conversation(db, user, conversation_id)
    q = db.query(Message).filter(Message.conversation_id == conversation_id)
    total = q.count()
    messages = q.order_by(Message.created_at.asc()).offset((page - 1) * limit).limit(limit).all()
    return messages, total


def mark_read(db: Session, user: AuthenticatedUser, conversation_id: str) -> int:
    """Marks the other participant's unread messages as read. Returns how many changed."""
    conversation = get_participant_conversation(db, user, conversation_id)
    updated = db.query(Message).filter(
        Message.conversation_id == conversation_id,
        Message.sender_id != user.id,
        Message.is_read.is_(False),
    ).update({Message.is_read: True}, synchronize_session=False)
    conversation.updated_at = datetime.utcnow()
    db.commit()
    return updated


def fraud_warning(analysis: FraudAnalysis) -> Optional[str]:
    if analysis.risk_level == "low":
        return None
    return f"This message was flagged as {analysis.risk_level} risk"
