# app/schemas/messaging.py
from pydantic import Field
from datetime import datetime
from typing import Optional
from app.schemas.common import CamelModel, UUIDStr


class ConversationStart(CamelModel):
    listing_id: UUIDStr


class ConversationOut(CamelModel):
    id: str
    listing_id: str
    listing_title: Optional[str] = None
    buyer_id: str
    seller_id: str
    user_role: Optional[str] = None      # buyer | seller, from the caller's point of view
    status: str
    last_message_preview: Optional[str]
    unread_count: int = 0
    fraud_alerts_count: int
    created_at: datetime
    updated_at: datetime


class MessageSend(CamelModel):
    content: str = Field(..., min_length=1, max_length=5000)


class MessageOut(CamelModel):
    id: str
    conversation_id: str
    sender_id: str
    content: str
    message_type: str
    is_read: bool
    fraud_score: int
    fraud_flags: Optional[list[str]] = None
    created_at: datetime


class FraudNotice(CamelModel):
    risk_level: str
    risk_score: int
    flags: list[str]
    warning: Optional[str] = None


class MessageSentOut(CamelModel):
    message: MessageOut
    fraud: FraudNotice
