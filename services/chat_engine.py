# Chat Engine
# Conversation creation, message append and read tracking.
#
# A chat is unique per (scope, participant set): direct chats share the
# "direct" scope, campaign chats are scoped by campaign id. The unique
# constraint on (scope_key, participant_key) makes get-or-create idempotent
# even when two requests race to create the same conversation.

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy import and_, exists, func, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from config.app_config import CHAT_PAGE_SIZE
from core.errors import AuthorizationError, NotFoundError, ValidationError
from core.storage import FileStorage, IncomingFile, get_file_storage
from database.models import User
from database.marketplace_models import Campaign
from database.chat_models import (
    DIRECT_SCOPE,
    Chat,
    ChatMessage,
    ChatParticipant,
    ChatTypeDB,
    MessageRead,
    MessageTypeDB,
    campaign_scope,
    participant_key,
)

logger = logging.getLogger(__name__)

MARK_READ_ATTEMPTS = 3


@dataclass
class ChatPage:
    """One page of messages, oldest to newest."""
    chat: Chat
    messages: List[ChatMessage]
    page: int
    limit: int
    total: int
    has_more: bool


@dataclass
class ChatSummary:
    chat: Chat
    unread_count: int


def _unread_filter(user_id: str):
    """Messages with no read receipt from user_id."""
    return ~exists().where(and_(MessageRead.message_id == ChatMessage.id, MessageRead.user_id == user_id))


class ChatEngine:
    def __init__(self, db: Session, storage: Optional[FileStorage] = None):
        self.db = db
        self.storage = storage or get_file_storage()

    # =========================================================================
    # HELPERS
    # =========================================================================

    def get(self, chat_id: str) -> Chat:
        chat = self.db.query(Chat).filter(Chat.id == chat_id).first()
        if chat is None:
            raise NotFoundError("Chat not found")
        return chat

    def _require_participant(self, chat: Chat, user_id: str, action: str = "view this chat"):
        if not chat.has_participant(user_id):
            raise AuthorizationError(f"Not authorized to {action}")

    def _require_users(self, user_ids: List[str]):
        found = self.db.query(User.id).filter(User.id.in_(user_ids)).count()
        if found != len(set(user_ids)):
            raise NotFoundError("Participant not found")

    def _get_or_create(self, chat_type: ChatTypeDB, scope: str, user_ids: List[str],
                       campaign_id: Optional[str] = None) -> Tuple[Chat, bool]:
        key = participant_key(user_ids)

        chat = self.db.query(Chat).filter(Chat.scope_key == scope, Chat.participant_key == key).first()
        if chat is not None:
            return chat, False

        chat = Chat(
            chat_type=chat_type,
            campaign_id=campaign_id,
            scope_key=scope,
            participant_key=key,
            participants=[ChatParticipant(user_id=u) for u in sorted(set(user_ids))],
        )
        self.db.add(chat)
        try:
            self.db.commit()
        except IntegrityError:
            # Another request created it first; use theirs
            self.db.rollback()
            chat = self.db.query(Chat).filter(Chat.scope_key == scope, Chat.participant_key == key).first()
            if chat is None:
                raise
            return chat, False

        self.db.refresh(chat)
        logger.info(f"Created {chat_type.value} chat {chat.id} ({scope}) for {key}")
        return chat, True

    # =========================================================================
    # CONVERSATIONS
    # =========================================================================

    def get_or_create_direct(self, user_a_id: str, user_b_id: str) -> Tuple[Chat, bool]:
        """Return the direct chat between two users, creating it on first use."""
        if user_a_id == user_b_id:
            raise ValidationError("Cannot start a chat with yourself")
        self._require_users([user_a_id, user_b_id])
        return self._get_or_create(ChatTypeDB.DIRECT, DIRECT_SCOPE, [user_a_id, user_b_id])

    def get_or_create_campaign_chat(self, campaign_id: str, user_a_id: str, user_b_id: str) -> Tuple[Chat, bool]:
        """Same as get_or_create_direct, but one conversation per campaign."""
        if user_a_id == user_b_id:
            raise ValidationError("Cannot start a chat with yourself")
        if self.db.query(Campaign.id).filter(Campaign.id == campaign_id).first() is None:
            raise NotFoundError("Campaign not found")
        self._require_users([user_a_id, user_b_id])
        return self._get_or_create(
            ChatTypeDB.CAMPAIGN, campaign_scope(campaign_id), [user_a_id, user_b_id], campaign_id=campaign_id
        )

    def list_for_user(self, user_id: str, page: int = 1, limit: int = 20) -> Tuple[List[ChatSummary], int]:
        """Active chats of a user, most recently updated first, with unread counts."""
        query = (
            self.db.query(Chat)
            .join(ChatParticipant, ChatParticipant.chat_id == Chat.id)
            .filter(ChatParticipant.user_id == user_id, Chat.is_active == True)
        )
        total = query.count()
        chats = (
            query.order_by(Chat.updated_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return [ChatSummary(chat=c, unread_count=self.unread_count_for(c.id, user_id)) for c in chats], total

    # =========================================================================
    # MESSAGES
    # =========================================================================

    def _next_position(self, chat_id: str) -> int:
        """
        Reserve the next message position with an atomic increment.

        The UPDATE locks the chat row (the whole database on SQLite) until the
        transaction ends, so concurrent senders get consecutive positions.
        """
        self.db.execute(
            update(Chat)
            .where(Chat.id == chat_id)
            .values(message_count=func.coalesce(Chat.message_count, 0) + 1)
            .execution_options(synchronize_session=False)
        )
        count = self.db.query(Chat.message_count).filter(Chat.id == chat_id).scalar()
        return count - 1

    def send_message(self, chat_id: str, sender_id: str, content: str,
                     message_type: str = MessageTypeDB.TEXT.value,
                     file: Optional[IncomingFile] = None) -> ChatMessage:
        chat = self.get(chat_id)
        self._require_participant(chat, sender_id, "send messages in this chat")

        if content is None or not content.strip():
            raise ValidationError("Message content is required")
        try:
            msg_type = MessageTypeDB(message_type or MessageTypeDB.TEXT.value)
        except ValueError:
            raise ValidationError(
                f"Invalid message type: {message_type}",
                {"allowed": [t.value for t in MessageTypeDB]},
            )

        file_url = file_name = None
        if file is not None:
            file_url = self.storage.store(file)
            file_name = file.filename
            msg_type = MessageTypeDB.IMAGE if file.is_image else MessageTypeDB.FILE

        try:
            now = datetime.utcnow()
            message = ChatMessage(
                chat_id=chat.id,
                position=self._next_position(chat.id),
                sender_id=sender_id,
                content=content.strip(),
                message_type=msg_type,
                file_url=file_url,
                file_name=file_name,
                created_at=now,
            )
            # The sender has read their own message
            message.read_by.append(MessageRead(user_id=sender_id, read_at=now))
            self.db.add(message)
            chat.update_last_message(message)
            self.db.commit()
        except Exception:
            self.db.rollback()
            if file_url:
                self.storage.delete(file_url)
            raise

        self.db.refresh(message)
        return message

    def fetch_page(self, chat_id: str, requester_id: str, page: int = 1,
                   page_size: int = CHAT_PAGE_SIZE) -> ChatPage:
        """
        Page 1 holds the newest page_size messages, page 2 the ones before
        them, and so on; each page is ordered oldest to newest.

        Every fetch marks all of the chat's messages as read by the requester.
        """
        if page < 1 or page_size < 1:
            raise ValidationError("Page and page size must be positive")

        chat = self.get(chat_id)
        self._require_participant(chat, requester_id)

        total = chat.messages.count()
        start = max(0, total - page * page_size)
        end = max(0, total - (page - 1) * page_size)
        messages = chat.messages.offset(start).limit(end - start).all() if end > start else []

        self._mark_read(chat.id, requester_id)

        return ChatPage(
            chat=chat,
            messages=messages,
            page=page,
            limit=page_size,
            total=total,
            has_more=start > 0,
        )

    def mark_all_read(self, chat_id: str, requester_id: str) -> int:
        """Returns how many messages were newly marked."""
        chat = self.get(chat_id)
        self._require_participant(chat, requester_id)
        return self._mark_read(chat.id, requester_id)

    def _unread_message_ids(self, chat_id: str, user_id: str) -> List[str]:
        return [
            row.id for row in
            self.db.query(ChatMessage.id).filter(ChatMessage.chat_id == chat_id, _unread_filter(user_id)).all()
        ]

    def _mark_read(self, chat_id: str, user_id: str) -> int:
        """
        Add a read receipt for every message user_id has not read, and commit.

        A concurrent fetch by the same user may record some of the same
        receipts first; the unique constraint rejects ours, so the unread set
        is recomputed and only what is still missing gets inserted.
        """
        for _ in range(MARK_READ_ATTEMPTS):
            unread_ids = self._unread_message_ids(chat_id, user_id)
            if not unread_ids:
                return 0

            now = datetime.utcnow()
            for message_id in unread_ids:
                self.db.add(MessageRead(message_id=message_id, user_id=user_id, read_at=now))
            try:
                self.db.commit()
                return len(unread_ids)
            except IntegrityError:
                self.db.rollback()

        logger.warning(f"Chat {chat_id}: read receipts for {user_id} kept conflicting, leaving them to the other reader")
        return 0

    def unread_count_for(self, chat_id: str, user_id: str) -> int:
        """Messages from other participants that user_id has not read."""
        return (
            self.db.query(ChatMessage)
            .filter(
                ChatMessage.chat_id == chat_id,
                ChatMessage.sender_id != user_id,
                _unread_filter(user_id),
            )
            .count()
        )
