# Email Service
# SMTP delivery plus the marketplace's email templates.

import logging
import smtplib
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from typing import Callable, Dict

from config.app_config import EMAIL_HOST, EMAIL_PORT, EMAIL_USER, EMAIL_PASS, FROM_NAME

logger = logging.getLogger(__name__)


# ============================================================================
# TEMPLATES
# ============================================================================

def _welcome(name):
    return {
        "subject": "Welcome to Influencer Marketplace",
        "html": f"""
      <h1>Welcome {name}!</h1>
      <p>Thank you for joining our Influencer Marketplace platform.</p>
      <p>You can now start exploring campaigns and connecting with brands/influencers.</p>
    """,
    }


def _influencer_approved(name):
    return {
        "subject": "Your Influencer Profile Has Been Approved!",
        "html": f"""
      <h1>Congratulations {name}!</h1>
      <p>Your influencer profile has been approved and you can now apply to campaigns.</p>
      <p>Start browsing available campaigns and grow your influence!</p>
    """,
    }


def _influencer_rejected(name, reason):
    return {
        "subject": "Influencer Profile Review Update",
        "html": f"""
      <h1>Hello {name},</h1>
      <p>Unfortunately, your influencer profile was not approved at this time.</p>
      <p><strong>Reason:</strong> {reason}</p>
      <p>You can update your profile and resubmit for review.</p>
    """,
    }


def _campaign_application(influencer_name, campaign_title):
    return {
        "subject": "New Campaign Application",
        "html": f"""
      <h1>New Application Received</h1>
      <p><strong>{influencer_name}</strong> has applied to your campaign: <strong>{campaign_title}</strong></p>
      <p>Review the application in your dashboard.</p>
    """,
    }


def _campaign_accepted(campaign_title, brand_name):
    return {
        "subject": "Campaign Application Accepted!",
        "html": f"""
      <h1>Great News!</h1>
      <p>Your application for <strong>{campaign_title}</strong> by <strong>{brand_name}</strong> has been accepted!</p>
      <p>Check your dashboard for next steps.</p>
    """,
    }


EMAIL_TEMPLATES: Dict[str, Callable[..., dict]] = {
    "welcome": _welcome,
    "influencer_approved": _influencer_approved,
    "influencer_rejected": _influencer_rejected,
    "campaign_application": _campaign_application,
    "campaign_accepted": _campaign_accepted,
}


def render_template(template_name: str, *args) -> dict:
    template = EMAIL_TEMPLATES.get(template_name)
    if template is None:
        raise ValueError(f"Email template '{template_name}' not found")
    return template(*args)


# ============================================================================
# SMTP SENDER
# ============================================================================

class EmailSender:
    """Sends HTML email over SMTP with STARTTLS."""

    def __init__(self, host: str = EMAIL_HOST, port: int = EMAIL_PORT,
                 user: str = EMAIL_USER, password: str = EMAIL_PASS, from_name: str = FROM_NAME):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.from_name = from_name

    @property
    def enabled(self) -> bool:
        return bool(self.host)

    def send(self, to: str, subject: str, html: str) -> bool:
        if not self.enabled:
            logger.info(f"EMAIL_HOST not configured, skipping email '{subject}' to {to}")
            return False

        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = f"{self.from_name} <{self.user}>"
        msg["To"] = to
        msg.attach(MIMEText(html, "html"))

        with smtplib.SMTP(self.host, self.port, timeout=30) as server:
            server.starttls()
            if self.user:
                server.login(self.user, self.password)
            server.sendmail(self.user, [to], msg.as_string())

        logger.info(f"Email sent: '{subject}' to {to}")
        return True

    def send_template(self, to: str, template_name: str, *args) -> bool:
        content = render_template(template_name, *args)
        return self.send(to, content["subject"], content["html"])
