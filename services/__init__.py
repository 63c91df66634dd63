# Services Module for the Influencer Marketplace
# Contains business logic services

from services.notification_service import NotificationService, NotificationType, get_notification_service
from services.email_service import EmailSender, render_template
from services.profile_service import ProfileService
from services.campaign_engine import CampaignEngine
from services.chat_engine import ChatEngine, ChatPage, ChatSummary
from services.admin_service import AdminService

__all__ = [
    'NotificationService',
    'NotificationType',
    'get_notification_service',
    'EmailSender',
    'render_template',
    'ProfileService',
    'CampaignEngine',
    'ChatEngine',
    'ChatPage',
    'ChatSummary',
    'AdminService',
]
