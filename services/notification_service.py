# Notification Service for the Influencer Marketplace
# Centralized, best-effort user notifications over email

import logging
from enum import Enum
from typing import Optional

from services.email_service import EmailSender

logger = logging.getLogger(__name__)


class NotificationType(str, Enum):
    """Notification types, one per email template."""
    WELCOME = "welcome"
    INFLUENCER_APPROVED = "influencer_approved"
    INFLUENCER_REJECTED = "influencer_rejected"
    CAMPAIGN_APPLICATION = "campaign_application"
    CAMPAIGN_ACCEPTED = "campaign_accepted"


class NotificationService:
    """
    Service for notifying users about marketplace events.
    Use this service from any engine or router to send notifications.

    Delivery is best effort: a failed send is logged and never propagates,
    so the business operation that triggered it still succeeds.
    """

    def __init__(self, sender: Optional[EmailSender] = None):
        self.sender = sender or EmailSender()

    def send(self, email: Optional[str], type: NotificationType, *args) -> bool:
        """
        Send a templated notification.

        Returns:
            True if the email went out, False if skipped or failed
        """
        if not email:
            return False
        try:
            return bool(self.sender.send_template(email, type.value, *args))
        except Exception as e:
            logger.warning(f"Failed to send {type.value} notification to {email}: {e}")
            return False

    # =========================================================================
    # ACCOUNT NOTIFICATION HELPERS
    # =========================================================================

    def notify_welcome(self, email: str, name: str):
        return self.send(email, NotificationType.WELCOME, name)

    def notify_influencer_approved(self, email: str, name: str):
        """Tell an influencer their profile was approved."""
        return self.send(email, NotificationType.INFLUENCER_APPROVED, name)

    def notify_influencer_rejected(self, email: str, name: str, reason: Optional[str]):
        """Tell an influencer their profile was rejected, with the reason."""
        return self.send(email, NotificationType.INFLUENCER_REJECTED, name, reason or "Not specified")

    # =========================================================================
    # CAMPAIGN NOTIFICATION HELPERS
    # =========================================================================

    def notify_campaign_application(self, brand_email: str, influencer_name: str, campaign_title: str):
        """Notify brand of a new application to its campaign."""
        return self.send(brand_email, NotificationType.CAMPAIGN_APPLICATION, influencer_name, campaign_title)

    def notify_campaign_accepted(self, influencer_email: str, campaign_title: str, brand_name: str):
        """Notify influencer that the brand accepted their application."""
        return self.send(influencer_email, NotificationType.CAMPAIGN_ACCEPTED, campaign_title, brand_name)


_notification_service: Optional[NotificationService] = None


# Convenience function to get service
def get_notification_service() -> NotificationService:
    """Get the shared NotificationService instance."""
    global _notification_service
    if _notification_service is None:
        _notification_service = NotificationService()
    return _notification_service
