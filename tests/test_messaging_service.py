# tests/test_messaging_service.py
"""Unit tests for conversations, fraud-screened sending and favorites."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest

from app.models.conversation import Conversation, Message
from app.services import favorite_service, messaging_service
from app.services.auth_service import AuthenticatedUser
from app.utils.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from conftest import OTHER_ID, new_id

SCAM_TEXT = "Send money by western union ASAP, bitcoin also ok"
HONEST_TEXT = "Is the bike still available? I can meet at the police station on Saturday."


@pytest.fixture
def conversation(db_session, make_listing, buyer):
    listing = make_listing()
    conversation, _ = messaging_service.start_conversation(db_session, buyer, listing.id)
    return conversation


class TestConversations:
    def test_start_opens_with_listing_owner_and_welcome(self, db_session, make_listing, buyer, seller):
        listing = make_listing()
        conversation, created = messaging_service.start_conversation(db_session, buyer, listing.id)

        assert created
        assert conversation.seller_id == seller.id
        assert conversation.user_role == "buyer"
        assert conversation.listing_title == listing.title
        welcome = db_session.query(Message).filter(Message.conversation_id == conversation.id).one()
        assert welcome.message_type == "system"
        assert conversation.unread_count == 1

    def test_start_twice_reuses_conversation(self, db_session, make_listing, buyer):
        listing = make_listing()
        first, _ = messaging_service.start_conversation(db_session, buyer, listing.id)
        second, created = messaging_service.start_conversation(db_session, buyer, listing.id)
        assert not created
        assert second.id == first.id
        assert db_session.query(Conversation).count() == 1

    def test_seller_cannot_message_own_listing(self, db_session, make_listing, seller):
        listing = make_listing()
        with pytest.raises(ValidationError) as exc:
            messaging_service.start_conversation(db_session, seller, listing.id)
        assert exc.value.code == "CANNOT_MESSAGE_SELF"

    def test_unknown_listing(self, db_session, buyer):
        with pytest.raises(NotFoundError):
            messaging_service.start_conversation(db_session, buyer, new_id())

    def test_both_parties_see_the_conversation(self, db_session, conversation, buyer, seller):
        mine, total = messaging_service.list_conversations(db_session, seller)
        assert total == 1
        assert mine[0].user_role == "seller"
        assert messaging_service.list_conversations(db_session, AuthenticatedUser(id=OTHER_ID))[1] == 0


class TestSendMessage:
    def test_allowed_message_is_stored_with_score(self, db_session, conversation, buyer):
        message, analysis = messaging_service.send_message(db_session, buyer, conversation.id, HONEST_TEXT)

        assert analysis.risk_level == "low"
        assert message.sender_id == buyer.id
        assert message.fraud_score == analysis.risk_score
        db_session.refresh(conversation)
        assert conversation.last_message_preview == HONEST_TEXT[:100]
        assert messaging_service.fraud_warning(analysis) is None

    def test_critical_message_is_blocked_and_not_stored(self, db_session, conversation, buyer):
        before = db_session.query(Message).count()
        with pytest.raises(ValidationError) as exc:
            messaging_service.send_message(db_session, buyer, conversation.id, SCAM_TEXT)

        assert exc.value.code == "MESSAGE_BLOCKED"
        assert exc.value.status_code == 400
        assert exc.value.details["riskLevel"] == "critical"
        assert db_session.query(Message).count() == before
        db_session.refresh(conversation)
        assert conversation.fraud_alerts_count == 1

    def test_outsider_cannot_send(self, db_session, conversation):
        with pytest.raises(ForbiddenError):
            messaging_service.send_message(db_session, AuthenticatedUser(id=OTHER_ID), conversation.id, HONEST_TEXT)

    def test_unknown_conversation(self, db_session, buyer):
        with pytest.raises(NotFoundError) as exc:
            messaging_service.send_message(db_session, buyer, new_id(), HONEST_TEXT)
        assert exc.value.code == "CONVERSATION_NOT_FOUND"

    def test_mark_read_only_touches_the_other_side(self, db_session, conversation, buyer, seller):
        messaging_service.send_message(db_session, buyer, conversation.id, HONEST_TEXT)

        # buyer reads the seller's welcome; the buyer's own message stays unread for the seller
        assert messaging_service.mark_read(db_session, buyer, conversation.id) == 1
        assert messaging_service.mark_read(db_session, seller, conversation.id) == 1
        assert messaging_service.mark_read(db_session, seller, conversation.id) == 0


class TestFavorites:
    def test_add_list_remove(self, db_session, make_listing, buyer):
        listing = make_listing(city="Hoboken", zip_code="07030")
        favorite = favorite_service.add_favorite(db_session, buyer, listing.id)
        assert favorite.listing.location == "Hoboken area"

        saved = favorite_service.list_favorites(db_session, buyer)
        assert [f.listing_id for f in saved] == [listing.id]

        assert favorite_service.remove_favorite(db_session, buyer, listing.id) is True
        assert favorite_service.remove_favorite(db_session, buyer, listing.id) is False
        assert favorite_service.list_favorites(db_session, buyer) == []

    def test_duplicate(self, db_session, make_listing, buyer):
        listing = make_listing()
        favorite_service.add_favorite(db_session, buyer, listing.id)
        with pytest.raises(ConflictError) as exc:
            favorite_service.add_favorite(db_session, buyer, listing.id)
        assert exc.value.code == "ALREADY_FAVORITED"

    def test_own_listing(self, db_session, make_listing, seller):
        listing = make_listing()
        with pytest.raises(ValidationError):
            favorite_service.add_favorite(db_session, seller, listing.id)

    def test_removed_listings_drop_out(self, db_session, make_listing, buyer):
        listing = make_listing()
        favorite_service.add_favorite(db_session, buyer, listing.id)
        listing.status = "removed"
        db_session.commit()
        assert favorite_service.list_favorites(db_session, buyer) == []
