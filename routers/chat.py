# Chat Router
# Direct and campaign conversations with paginated history and read receipts

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from typing import Optional

from config.app_config import CHAT_PAGE_SIZE
from database.models import User
from database.chat_models import Chat, ChatMessage, MessageTypeDB
from schemas.chat import (
    DirectChatRequest,
    CampaignChatRequest,
    ChatResponse,
    MessageResponse,
    MessagePageResponse,
    ParticipantResponse,
    LastMessageResponse,
)
from core.storage import read_upload
from auth.roles import Permission
from auth.decorators import require_permission
from services.chat_engine import ChatEngine
from routers.dependencies import get_chat_engine, paginate

router = APIRouter(prefix="/chat", tags=["Chat"])


@router.post("/direct")
async def start_direct_chat(
    payload: DirectChatRequest,
    current_user: User = Depends(require_permission(Permission.USE_CHAT)),
    chats: ChatEngine = Depends(get_chat_engine),
):
    """Get or create the direct chat with another user."""
    chat, created = chats.get_or_create_direct(current_user.id, payload.participant_id)
    return {
        "success": True,
        "message": "Chat created" if created else "Chat already exists",
        "data": chat_to_response(chat),
    }


@router.post("/campaign")
async def start_campaign_chat(
    payload: CampaignChatRequest,
    current_user: User = Depends(require_permission(Permission.USE_CHAT)),
    chats: ChatEngine = Depends(get_chat_engine),
):
    chat, created = chats.get_or_create_campaign_chat(
        payload.campaign_id, current_user.id, payload.participant_id
    )
    return {
        "success": True,
        "message": "Chat created" if created else "Chat already exists",
        "data": chat_to_response(chat),
    }


@router.get("/my")
async def get_my_chats(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    current_user: User = Depends(require_permission(Permission.USE_CHAT)),
    chats: ChatEngine = Depends(get_chat_engine),
):
    summaries, total = chats.list_for_user(current_user.id, page=page, limit=limit)
    return {
        "success": True,
        "data": [chat_to_response(s.chat, unread_count=s.unread_count) for s in summaries],
        "pagination": paginate(page, limit, total),
    }


@router.get("/{chat_id}")
async def get_chat_messages(
    chat_id: str,
    page: int = Query(1, ge=1),
    limit: int = Query(CHAT_PAGE_SIZE, ge=1, le=200),
    current_user: User = Depends(require_permission(Permission.USE_CHAT)),
    chats: ChatEngine = Depends(get_chat_engine),
):
    """
    Page 1 is the newest page. Messages inside a page run oldest to newest.
    Fetching marks every message in the chat as read by the caller.
    """
    result = chats.fetch_page(chat_id, current_user.id, page=page, page_size=limit)
    return {
        "success": True,
        "data": MessagePageResponse(
            chat=chat_to_response(result.chat),
            messages=[MessageResponse.model_validate(m) for m in result.messages],
            page=result.page,
            limit=result.limit,
            total=result.total,
            has_more=result.has_more,
        ),
    }


@router.post("/{chat_id}/send")
async def send_message(
    chat_id: str,
    content: str = Form(...),
    message_type: str = Form(MessageTypeDB.TEXT.value),
    file: Optional[UploadFile] = File(None),
    current_user: User = Depends(require_permission(Permission.USE_CHAT)),
    chats: ChatEngine = Depends(get_chat_engine),
):
    attachment = await read_upload(file, "file") if file and file.filename else None
    message = chats.send_message(chat_id, current_user.id, content, message_type, attachment)
    return {
        "success": True,
        "message": "Message sent",
        "data": message_to_response(message),
    }


@router.put("/{chat_id}/read")
async def mark_chat_read(
    chat_id: str,
    current_user: User = Depends(require_permission(Permission.USE_CHAT)),
    chats: ChatEngine = Depends(get_chat_engine),
):
    marked = chats.mark_all_read(chat_id, current_user.id)
    return {"success": True, "message": "Messages marked as read", "data": {"marked": marked}}


# ============================================================================
# HELPERS
# ============================================================================

def message_to_response(message: ChatMessage) -> MessageResponse:
    return MessageResponse.model_validate(message)


def chat_to_response(chat: Chat, unread_count: Optional[int] = None) -> ChatResponse:
    last_message = None
    if chat.last_message_at is not None:
        last_message = LastMessageResponse(
            content=chat.last_message_content,
            sender_id=chat.last_message_sender_id,
            timestamp=chat.last_message_at,
        )
    return ChatResponse(
        id=chat.id,
        chat_type=chat.chat_type,
        campaign_id=chat.campaign_id,
        campaign_title=chat.campaign.title if chat.campaign else None,
        participants=[
            ParticipantResponse(
                user_id=p.user_id,
                email=p.user.email if p.user else None,
                role=p.user.role.value if p.user else None,
            )
            for p in chat.participants
        ],
        last_message=last_message,
        unread_count=unread_count,
        is_active=chat.is_active if chat.is_active is not None else True,
        created_at=chat.created_at,
        updated_at=chat.updated_at,
    )
