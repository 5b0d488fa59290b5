# app/models/conversation.py
"""
Buyer/seller conversations about a listing, and the messages inside them.
One conversation per (listing, buyer); the seller is always the listing owner.
"""

import uuid
from sqlalchemy import Column, Integer, String, DateTime, Text, Boolean, JSON, ForeignKey, UniqueConstraint
from app.database import Base

MESSAGE_TYPES = ("text", "system")

WELCOME_MESSAGE = ("Welcome to SafeTrade messaging! Messages in this conversation are screened for "
                   "fraud. Never pay before meeting at a safe zone.")


class Conversation(Base):
    __tablename__ = "conversations"
    __table_args__ = (UniqueConstraint("listing_id", "buyer_id", name="uq_conversation_listing_buyer"),)

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    listing_id = Column(String(36), ForeignKey("listings.id", ondelete="CASCADE"), nullable=False, index=True)
    buyer_id = Column(String(36), nullable=False, index=True)
    seller_id = Column(String(36), nullable=False, index=True)

    status = Column(String(20), default="active", nullable=False)     # active | archived
    last_message_preview = Column(String(100))
    fraud_alerts_count = Column(Integer, default=0, nullable=False)

    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False, index=True)

    def __repr__(self):
        return f"<Conversation {self.id} listing={self.listing_id} buyer={self.buyer_id} seller={self.seller_id}>"


class Message(Base):
    __tablename__ = "messages"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    conversation_id = Column(String(36), ForeignKey("conversations.id", ondelete="CASCADE"),
                             nullable=False, index=True)
    sender_id = Column(String(36), nullable=False)
    content = Column(Text, nullable=False)
    message_type = Column(String(20), default="text", nullable=False)
    is_read = Column(Boolean, default=False, nullable=False)

    fraud_score = Column(Integer, default=0, nullable=False)
    fraud_flags = Column(JSON, default=list)

    created_at = Column(DateTime, nullable=False, index=True)

    def __repr__(self):
        return f"<Message {self.id} conversation={self.conversation_id} from={self.sender_id}>"
