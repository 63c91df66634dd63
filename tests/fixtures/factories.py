"""
Factories for users, profiles and campaigns.

Profiles are written straight to the database so a test can start from any
state (pending, approved, subscribed) without going through onboarding.
"""
import json
import uuid
from datetime import datetime, timedelta
from typing import Iterable, Optional

from auth.utils import create_access_token, get_password_hash
from core.storage import IncomingFile
from database.models import User, UserRole
from database.marketplace_models import (
    BrandProfile,
    InfluencerProfile,
    InfluencerStatusDB,
    PaymentStatusDB,
    SocialAccount,
    SocialPlatformDB,
    SubscriptionPlanDB,
    SubscriptionStatusDB,
)
from schemas.marketplace import CampaignCreate

DEFAULT_PASSWORD = "secret123"


class RecordingSender:
    """Email sender stand-in that records every templated send."""

    def __init__(self, fail: bool = False):
        self.sent = []
        self.fail = fail

    def send_template(self, to, template_name, *args):
        if self.fail:
            raise ConnectionError("SMTP unavailable")
        self.sent.append({"to": to, "template": template_name, "args": args})
        return True

    @property
    def templates(self):
        return [s["template"] for s in self.sent]


def make_email(prefix: str = "user") -> str:
    return f"{prefix}-{uuid.uuid4().hex[:8]}@example.com"


def make_user(db, role: UserRole = UserRole.BRAND, email: Optional[str] = None,
              password: str = DEFAULT_PASSWORD, is_active: bool = True) -> User:
    user = User(
        email=email or make_email(role.value),
        password_hash=get_password_hash(password),
        role=role,
        is_active=is_active,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user.id, user.role.value)}"}


def make_brand(db, user: Optional[User] = None, active_subscription: bool = True,
               company_name: str = "Acme Apparel", industry: str = "fashion",
               country: str = "Kenya", verified: bool = False) -> BrandProfile:
    user = user or make_user(db, UserRole.BRAND)
    now = datetime.utcnow()
    brand = BrandProfile(
        user_id=user.id,
        company_name=company_name,
        website="https://acme.example.com",
        industry=industry,
        contact_person={"first_name": "Ann", "last_name": "Otieno", "position": "CMO", "phone": None},
        location={"country": country, "city": "Nairobi", "address": None},
        subscription_plan=SubscriptionPlanDB.PREMIUM if active_subscription else SubscriptionPlanDB.BASIC,
        subscription_status=SubscriptionStatusDB.ACTIVE if active_subscription else SubscriptionStatusDB.PENDING,
        payment_status=PaymentStatusDB.PAID if active_subscription else PaymentStatusDB.PENDING,
        subscription_start=now if active_subscription else None,
        subscription_end=now + timedelta(days=30) if active_subscription else None,
        verified=verified,
    )
    db.add(brand)
    db.commit()
    db.refresh(brand)
    return brand


def make_influencer(db, user: Optional[User] = None,
                    status: InfluencerStatusDB = InfluencerStatusDB.APPROVED,
                    niches: Iterable[str] = ("fashion",), country: str = "Kenya",
                    followers: Iterable[int] = (5000,), engagement: float = 4.0,
                    first_name: str = "Jane", last_name: str = "Doe") -> InfluencerProfile:
    user = user or make_user(db, UserRole.INFLUENCER)
    profile = InfluencerProfile(
        user_id=user.id,
        first_name=first_name,
        last_name=last_name,
        bio="Lifestyle creator",
        niches=list(niches),
        location={"country": country, "city": "Nairobi"},
        status=status,
        approved_at=datetime.utcnow() if status == InfluencerStatusDB.APPROVED else None,
    )
    profile.social_accounts = [
        SocialAccount(
            platform=SocialPlatformDB.INSTAGRAM,
            username=f"{first_name.lower()}{i}",
            url=f"https://instagram.com/{first_name.lower()}{i}",
            follower_count=count,
            engagement_rate=engagement,
        )
        for i, count in enumerate(followers)
    ]
    profile.recalculate_reach()
    db.add(profile)
    db.commit()
    db.refresh(profile)
    return profile


def make_campaign_payload(**overrides) -> dict:
    """JSON-ready campaign creation body with a valid future timeline."""
    now = datetime.utcnow()
    payload = {
        "title": "Summer Collection Launch",
        "description": "Showcase the new summer line on Instagram.",
        "category": "fashion",
        "budget": {"min": 500, "max": 2000, "currency": "USD"},
        "deliverables": [
            {"type": "post", "platform": "instagram", "quantity": 2, "description": "Feed posts"},
            {"type": "story", "platform": "instagram", "quantity": 3},
        ],
        "requirements": {"min_followers": 1000, "min_engagement_rate": 2.0, "niches": ["fashion"]},
        "timeline": {
            "application_deadline": (now + timedelta(days=7)).isoformat(),
            "campaign_start": (now + timedelta(days=10)).isoformat(),
            "campaign_end": (now + timedelta(days=40)).isoformat(),
        },
    }
    payload.update(overrides)
    return payload


def make_campaign_spec(**overrides) -> CampaignCreate:
    return CampaignCreate.model_validate(make_campaign_payload(**overrides))


def make_campaign(engine, brand_user: User, **overrides):
    """Create an active campaign through the engine."""
    return engine.create(brand_user, make_campaign_spec(**overrides))


def make_file(field: str = "proofFiles", filename: str = "proof.png",
              content_type: str = "image/png", data: bytes = b"\x89PNG fake image") -> IncomingFile:
    return IncomingFile(field=field, filename=filename, content_type=content_type, data=data)


def proof_payload(*urls: str, platform: str = "instagram", type: str = "post") -> str:
    return json.dumps({
        "platform": platform,
        "type": type,
        "urls": [{"url": u, "platform": platform, "type": type} for u in urls],
    })
