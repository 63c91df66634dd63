# Pydantic Schemas for Chat

from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime

from database.chat_models import ChatTypeDB, MessageTypeDB


class DirectChatRequest(BaseModel):
    participant_id: str = Field(..., min_length=1)


class CampaignChatRequest(BaseModel):
    campaign_id: str = Field(..., min_length=1)
    participant_id: str = Field(..., min_length=1)


class ParticipantResponse(BaseModel):
    user_id: str
    email: Optional[str] = None
    role: Optional[str] = None


class LastMessageResponse(BaseModel):
    content: Optional[str] = None
    sender_id: Optional[str] = None
    timestamp: Optional[datetime] = None


class ReadReceiptResponse(BaseModel):
    user_id: str
    read_at: datetime

    class Config:
        from_attributes = True


class MessageResponse(BaseModel):
    id: str
    position: int
    sender_id: str
    content: str
    message_type: MessageTypeDB
    file_url: Optional[str] = None
    file_name: Optional[str] = None
    read_by: List[ReadReceiptResponse] = []
    created_at: datetime

    class Config:
        from_attributes = True


class ChatResponse(BaseModel):
    id: str
    chat_type: ChatTypeDB
    campaign_id: Optional[str] = None
    campaign_title: Optional[str] = None
    participants: List[ParticipantResponse] = []
    last_message: Optional[LastMessageResponse] = None
    unread_count: Optional[int] = None
    is_active: bool = True
    created_at: datetime
    updated_at: Optional[datetime] = None


class MessagePageResponse(BaseModel):
    chat: ChatResponse
    messages: List[MessageResponse] = []
    page: int
    limit: int
    total: int
    has_more: bool
