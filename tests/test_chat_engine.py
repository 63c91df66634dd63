"""
Chat engine tests: conversation uniqueness, message ordering, pagination
from the newest end and read receipts.
"""
import os

import pytest

from core.errors import AuthorizationError, NotFoundError, ValidationError
from database.models import UserRole
from database.chat_models import ChatTypeDB, MessageRead, MessageTypeDB, participant_key
from database.config import SessionLocal
from services.chat_engine import ChatEngine
from tests.fixtures import make_campaign, make_file, make_user


@pytest.fixture
def pair(db):
    return make_user(db, UserRole.BRAND), make_user(db, UserRole.INFLUENCER)


def _send_many(chats, chat, sender_id, count):
    return [chats.send_message(chat.id, sender_id, f"message {i}") for i in range(count)]


class TestParticipantKey:
    def test_order_and_duplicates_do_not_matter(self):
        assert participant_key(["b", "a"]) == participant_key(["a", "b", "a"]) == "a:b"


class TestGetOrCreate:
    def test_direct_chat_is_created_once(self, chats, pair):
        a, b = pair
        chat, created = chats.get_or_create_direct(a.id, b.id)
        again, created_again = chats.get_or_create_direct(b.id, a.id)

        assert created is True
        assert created_again is False
        assert again.id == chat.id
        assert chat.chat_type == ChatTypeDB.DIRECT
        assert sorted(chat.participant_ids) == sorted([a.id, b.id])

    def test_cannot_chat_with_yourself(self, chats, pair):
        a, _ = pair
        with pytest.raises(ValidationError):
            chats.get_or_create_direct(a.id, a.id)

    def test_unknown_participant(self, chats, pair):
        a, _ = pair
        with pytest.raises(NotFoundError, match="Participant not found"):
            chats.get_or_create_direct(a.id, "missing-user")

    def test_campaign_chat_is_separate_from_direct_chat(self, db, chats, campaigns, brand_user):
        influencer = make_user(db, UserRole.INFLUENCER)
        campaign = make_campaign(campaigns, brand_user)

        direct, _ = chats.get_or_create_direct(brand_user.id, influencer.id)
        scoped, created = chats.get_or_create_campaign_chat(campaign.id, brand_user.id, influencer.id)
        scoped_again, created_again = chats.get_or_create_campaign_chat(campaign.id, influencer.id, brand_user.id)

        assert created and not created_again
        assert scoped.id == scoped_again.id
        assert scoped.id != direct.id
        assert scoped.chat_type == ChatTypeDB.CAMPAIGN
        assert scoped.campaign_id == campaign.id

    def test_campaign_chat_requires_campaign(self, chats, pair):
        a, b = pair
        with pytest.raises(NotFoundError, match="Campaign not found"):
            chats.get_or_create_campaign_chat("missing", a.id, b.id)


class TestSendMessage:
    def test_positions_follow_send_order(self, chats, pair):
        a, b = pair
        chat, _ = chats.get_or_create_direct(a.id, b.id)

        first = chats.send_message(chat.id, a.id, "hello")
        second = chats.send_message(chat.id, b.id, "hi there")

        assert (first.position, second.position) == (0, 1)
        assert chat.message_count == 2

    def test_sender_has_read_own_message(self, chats, pair):
        a, b = pair
        chat, _ = chats.get_or_create_direct(a.id, b.id)
        message = chats.send_message(chat.id, a.id, "hello")

        assert message.is_read_by(a.id)
        assert not message.is_read_by(b.id)

    def test_updates_last_message(self, chats, pair):
        a, b = pair
        chat, _ = chats.get_or_create_direct(a.id, b.id)
        message = chats.send_message(chat.id, a.id, "  latest news  ")

        chat = chats.get(chat.id)
        assert chat.last_message_content == "latest news"
        assert chat.last_message_sender_id == a.id
        assert chat.last_message_at == message.created_at

    def test_blank_content_rejected(self, chats, pair):
        a, b = pair
        chat, _ = chats.get_or_create_direct(a.id, b.id)
        with pytest.raises(ValidationError, match="content is required"):
            chats.send_message(chat.id, a.id, "   ")

    def test_invalid_message_type(self, chats, pair):
        a, b = pair
        chat, _ = chats.get_or_create_direct(a.id, b.id)
        with pytest.raises(ValidationError):
            chats.send_message(chat.id, a.id, "hello", message_type="video")

    def test_non_participant_cannot_send(self, db, chats, pair):
        a, b = pair
        chat, _ = chats.get_or_create_direct(a.id, b.id)
        outsider = make_user(db, UserRole.BRAND)
        with pytest.raises(AuthorizationError):
            chats.send_message(chat.id, outsider.id, "let me in")

    def test_attachment_sets_type(self, chats, pair):
        a, b = pair
        chat, _ = chats.get_or_create_direct(a.id, b.id)

        image = chats.send_message(chat.id, a.id, "look", file=make_file(field="file"))
        doc = chats.send_message(
            chat.id, a.id, "brief",
            file=make_file(field="file", filename="brief.pdf", content_type="application/pdf"),
        )

        assert image.message_type == MessageTypeDB.IMAGE
        assert image.file_url.startswith("uploads/misc/")
        assert doc.message_type == MessageTypeDB.FILE
        assert doc.file_name == "brief.pdf"

    def test_failed_send_removes_attachment(self, chats, storage, pair, monkeypatch):
        a, b = pair
        chat, _ = chats.get_or_create_direct(a.id, b.id)

        def database_gone(chat_id):
            raise RuntimeError("database is locked")

        monkeypatch.setattr(chats, "_next_position", database_gone)

        with pytest.raises(RuntimeError):
            chats.send_message(chat.id, a.id, "look", file=make_file(field="file"))

        assert os.listdir(os.path.join(storage.root, "misc")) == []
        assert chats.get(chat.id).message_count == 0


class TestFetchPage:
    def test_newest_page_first_each_page_oldest_to_newest(self, chats, pair):
        a, b = pair
        chat, _ = chats.get_or_create_direct(a.id, b.id)
        _send_many(chats, chat, a.id, 5)

        page1 = chats.fetch_page(chat.id, b.id, page=1, page_size=2)
        page2 = chats.fetch_page(chat.id, b.id, page=2, page_size=2)
        page3 = chats.fetch_page(chat.id, b.id, page=3, page_size=2)

        assert [m.content for m in page1.messages] == ["message 3", "message 4"]
        assert [m.content for m in page2.messages] == ["message 1", "message 2"]
        assert [m.content for m in page3.messages] == ["message 0"]
        assert page1.has_more and page2.has_more and not page3.has_more
        assert page1.total == 5

    def test_page_past_the_end_is_empty(self, chats, pair):
        a, b = pair
        chat, _ = chats.get_or_create_direct(a.id, b.id)
        _send_many(chats, chat, a.id, 2)

        page = chats.fetch_page(chat.id, a.id, page=5, page_size=2)
        assert page.messages == []
        assert page.has_more is False

    def test_fetch_marks_everything_read(self, chats, pair):
        a, b = pair
        chat, _ = chats.get_or_create_direct(a.id, b.id)
        _send_many(chats, chat, a.id, 3)
        assert chats.unread_count_for(chat.id, b.id) == 3

        chats.fetch_page(chat.id, b.id, page=1, page_size=1)

        assert chats.unread_count_for(chat.id, b.id) == 0

    def test_reader_recorded_once(self, chats, pair):
        a, b = pair
        chat, _ = chats.get_or_create_direct(a.id, b.id)
        chats.send_message(chat.id, a.id, "hello")

        chats.fetch_page(chat.id, b.id)
        page = chats.fetch_page(chat.id, b.id)

        readers = [r.user_id for r in page.messages[0].read_by]
        assert sorted(readers) == sorted([a.id, b.id])

    def test_non_participant_cannot_read(self, db, chats, pair):
        a, b = pair
        chat, _ = chats.get_or_create_direct(a.id, b.id)
        outsider = make_user(db, UserRole.BRAND)
        with pytest.raises(AuthorizationError):
            chats.fetch_page(chat.id, outsider.id)

    def test_invalid_page(self, chats, pair):
        a, b = pair
        chat, _ = chats.get_or_create_direct(a.id, b.id)
        with pytest.raises(ValidationError):
            chats.fetch_page(chat.id, a.id, page=0)


class TestReadTracking:
    def test_mark_all_read_returns_count(self, chats, pair):
        a, b = pair
        chat, _ = chats.get_or_create_direct(a.id, b.id)
        _send_many(chats, chat, a.id, 2)

        assert chats.mark_all_read(chat.id, b.id) == 2
        assert chats.mark_all_read(chat.id, b.id) == 0

    def test_own_messages_never_count_as_unread(self, chats, pair):
        a, b = pair
        chat, _ = chats.get_or_create_direct(a.id, b.id)
        _send_many(chats, chat, a.id, 2)
        assert chats.unread_count_for(chat.id, a.id) == 0


class TestListForUser:
    def test_most_recent_first_with_unread_counts(self, db, chats, pair):
        a, b = pair
        c = make_user(db, UserRole.INFLUENCER)
        older, _ = chats.get_or_create_direct(a.id, b.id)
        newer, _ = chats.get_or_create_direct(a.id, c.id)
        chats.send_message(newer.id, c.id, "ping")
        chats.send_message(older.id, b.id, "one")
        chats.send_message(older.id, b.id, "two")

        summaries, total = chats.list_for_user(a.id)

        assert total == 2
        assert [s.chat.id for s in summaries] == [older.id, newer.id]
        assert [s.unread_count for s in summaries] == [2, 1]

    def test_inactive_chats_are_hidden(self, db, chats, pair):
        a, b = pair
        chat, _ = chats.get_or_create_direct(a.id, b.id)
        chat.is_active = False
        db.commit()

        summaries, total = chats.list_for_user(a.id)
        assert total == 0


class TestConcurrentWriters:
    """Two sessions working on the same chat, as two API workers would."""

    def test_stale_sender_gets_next_position(self, db, chats, storage, pair):
        a, b = pair
        chat, _ = chats.get_or_create_direct(a.id, b.id)
        other = SessionLocal()
        try:
            late = ChatEngine(other, storage)
            assert late.get(chat.id).message_count == 0

            chats.send_message(chat.id, a.id, "first")
            second = late.send_message(chat.id, b.id, "second")
        finally:
            other.close()

        assert second.position == 1
        db.expire_all()
        page = chats.fetch_page(chat.id, a.id)
        assert [m.content for m in page.messages] == ["first", "second"]
        assert chats.get(chat.id).message_count == 2

    def test_overlapping_readers_record_each_receipt_once(self, db, chats, storage, pair, monkeypatch):
        a, b = pair
        chat, _ = chats.get_or_create_direct(a.id, b.id)
        _send_many(chats, chat, a.id, 2)
        other = SessionLocal()
        try:
            slow = ChatEngine(other, storage)
            stale_ids = slow._unread_message_ids(chat.id, b.id)
            assert len(stale_ids) == 2

            assert chats.mark_all_read(chat.id, b.id) == 2

            lookup = slow._unread_message_ids
            calls = []

            def unread_as_first_seen(chat_id, user_id):
                calls.append(user_id)
                return stale_ids if len(calls) == 1 else lookup(chat_id, user_id)

            monkeypatch.setattr(slow, "_unread_message_ids", unread_as_first_seen)
            assert slow.mark_all_read(chat.id, b.id) == 0
            assert len(calls) == 2
        finally:
            other.close()

        assert db.query(MessageRead).filter(MessageRead.user_id == b.id).count() == 2
        assert chats.unread_count_for(chat.id, b.id) == 0
