# Chat Database Models
# A chat owns its participants, messages and per-message read receipts.

from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, Text, Boolean, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from database.models import Base, generate_uuid, enum_column


class ChatTypeDB(str, enum.Enum):
    DIRECT = "direct"
    CAMPAIGN = "campaign"


class MessageTypeDB(str, enum.Enum):
    TEXT = "text"
    IMAGE = "image"
    FILE = "file"


DIRECT_SCOPE = "direct"


def campaign_scope(campaign_id):
    return f"campaign:{campaign_id}"


def participant_key(user_ids):
    """Canonical key for an unordered participant set."""
    return ":".join(sorted(set(user_ids)))


class Chat(Base):
    """
    Conversation between two or more users.

    scope_key is "direct" for direct chats and "campaign:<id>" for campaign chats;
    together with participant_key it identifies a conversation uniquely.
    """
    __tablename__ = "chats"
    __table_args__ = (
        UniqueConstraint("scope_key", "participant_key", name="uq_chat_scope_participants"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid)
    chat_type = enum_column(ChatTypeDB, nullable=False, default=ChatTypeDB.DIRECT)
    campaign_id = Column(String(36), ForeignKey("campaigns.id", ondelete="SET NULL"), nullable=True)
    scope_key = Column(String(80), nullable=False)
    participant_key = Column(String(255), nullable=False)

    # Next message position
    message_count = Column(Integer, nullable=False, default=0)

    # Denormalized copy of the newest message
    last_message_content = Column(Text)
    last_message_sender_id = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    last_message_at = Column(DateTime)

    is_active = Column(Boolean, default=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, index=True)

    # Relationships
    participants = relationship("ChatParticipant", back_populates="chat", cascade="all, delete-orphan")
    messages = relationship("ChatMessage", back_populates="chat", cascade="all, delete-orphan",
                            order_by="ChatMessage.position", lazy="dynamic")
    campaign = relationship("Campaign")

    @property
    def participant_ids(self):
        return [p.user_id for p in self.participants]

    def has_participant(self, user_id):
        return any(p.user_id == user_id for p in self.participants)

    def update_last_message(self, message):
        self.last_message_content = message.content
        self.last_message_sender_id = message.sender_id
        self.last_message_at = message.created_at
        self.updated_at = datetime.utcnow()


class ChatParticipant(Base):
    __tablename__ = "chat_participants"

    chat_id = Column(String(36), ForeignKey("chats.id", ondelete="CASCADE"), primary_key=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True, index=True)
    joined_at = Column(DateTime, default=datetime.utcnow)

    chat = relationship("Chat", back_populates="participants")
    user = relationship("User")


class ChatMessage(Base):
    __tablename__ = "chat_messages"
    __table_args__ = (
        UniqueConstraint("chat_id", "position", name="uq_message_chat_position"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid)
    chat_id = Column(String(36), ForeignKey("chats.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False)
    sender_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    content = Column(Text, nullable=False)
    message_type = enum_column(MessageTypeDB, nullable=False, default=MessageTypeDB.TEXT)
    file_url = Column(String(500))
    file_name = Column(String(255))

    created_at = Column(DateTime, default=datetime.utcnow)

    chat = relationship("Chat", back_populates="messages")
    sender = relationship("User")
    read_by = relationship("MessageRead", back_populates="message", cascade="all, delete-orphan",
                           order_by="MessageRead.read_at")

    def is_read_by(self, user_id):
        return any(r.user_id == user_id for r in self.read_by)


class MessageRead(Base):
    """Read receipt. A reader appears at most once per message."""
    __tablename__ = "message_reads"
    __table_args__ = (
        UniqueConstraint("message_id", "user_id", name="uq_read_message_user"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid)
    message_id = Column(String(36), ForeignKey("chat_messages.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    read_at = Column(DateTime, default=datetime.utcnow)

    message = relationship("ChatMessage", back_populates="read_by")
