# Profile Service
# Influencer and brand onboarding, updates, subscriptions and search

import logging
from datetime import datetime, timedelta
from typing import List, Optional, Tuple

from sqlalchemy import String, cast, or_
from sqlalchemy.orm import Session

from config.app_config import SUBSCRIPTION_PERIOD_DAYS
from core.errors import ConflictError, NotFoundError, PolicyError
from core.storage import FileStorage, IncomingFile, get_file_storage
from database.models import User
from database.marketplace_models import (
    BrandProfile,
    InfluencerProfile,
    InfluencerStatusDB,
    KycDocument,
    PaymentStatusDB,
    SocialAccount,
    SubscriptionPlanDB,
    SubscriptionStatusDB,
)
from schemas.marketplace import BrandOnboard, BrandUpdate, InfluencerOnboard, InfluencerUpdate, SocialAccountInput
from services.notification_service import NotificationService, get_notification_service

logger = logging.getLogger(__name__)

# Approved influencers can only touch these
APPROVED_INFLUENCER_FIELDS = {"bio", "social_accounts"}


class ProfileService:
    """Lookup and lifecycle of influencer and brand profiles."""

    def __init__(self, db: Session, storage: Optional[FileStorage] = None,
                 notifications: Optional[NotificationService] = None):
        self.db = db
        self.storage = storage or get_file_storage()
        self.notifications = notifications or get_notification_service()

    # =========================================================================
    # LOOKUPS
    # =========================================================================

    def find_influencer_by_user(self, user_id: str) -> Optional[InfluencerProfile]:
        return self.db.query(InfluencerProfile).filter(InfluencerProfile.user_id == user_id).first()

    def find_brand_by_user(self, user_id: str) -> Optional[BrandProfile]:
        return self.db.query(BrandProfile).filter(BrandProfile.user_id == user_id).first()

    def require_influencer(self, user_id: str) -> InfluencerProfile:
        influencer = self.find_influencer_by_user(user_id)
        if influencer is None:
            raise NotFoundError("Influencer profile not found")
        return influencer

    def require_brand(self, user_id: str) -> BrandProfile:
        brand = self.find_brand_by_user(user_id)
        if brand is None:
            raise NotFoundError("Brand profile not found")
        return brand

    def get_influencer(self, influencer_id: str) -> InfluencerProfile:
        influencer = self.db.query(InfluencerProfile).filter(InfluencerProfile.id == influencer_id).first()
        if influencer is None:
            raise NotFoundError("Influencer not found")
        return influencer

    def get_brand(self, brand_id: str) -> BrandProfile:
        brand = self.db.query(BrandProfile).filter(BrandProfile.id == brand_id).first()
        if brand is None:
            raise NotFoundError("Brand not found")
        return brand

    # =========================================================================
    # INFLUENCER
    # =========================================================================

    def onboard_influencer(self, user: User, data: InfluencerOnboard,
                           profile_picture: Optional[IncomingFile] = None,
                           kyc_files: Optional[List[IncomingFile]] = None) -> InfluencerProfile:
        if self.find_influencer_by_user(user.id) is not None:
            raise ConflictError("Influencer profile already exists")

        profile = InfluencerProfile(
            user_id=user.id,
            first_name=data.first_name.strip(),
            last_name=data.last_name.strip(),
            bio=data.bio,
            niches=[n.value for n in data.niches],
            location=data.location.model_dump() if data.location else None,
            status=InfluencerStatusDB.PENDING_VERIFICATION,
        )
        if profile_picture is not None:
            profile.profile_picture_url = self.storage.store(profile_picture)
        for f in kyc_files or []:
            profile.kyc_documents.append(KycDocument(
                type=data.kyc_document_type,
                document_url=self.storage.store(f),
                verified=False,
            ))
        self._replace_social_accounts(profile, data.social_accounts)

        self.db.add(profile)
        self.db.commit()
        self.db.refresh(profile)

        logger.info(f"Influencer profile {profile.id} created for user {user.id}")
        self.notifications.notify_welcome(user.email, profile.display_name)
        return profile

    def update_influencer(self, user: User, data: InfluencerUpdate,
                          profile_picture: Optional[IncomingFile] = None,
                          kyc_files: Optional[List[IncomingFile]] = None) -> InfluencerProfile:
        profile = self.require_influencer(user.id)
        updates = data.model_dump(exclude_unset=True)

        if profile.status == InfluencerStatusDB.APPROVED:
            blocked = set(updates) - APPROVED_INFLUENCER_FIELDS
            if blocked or profile_picture is not None or kyc_files:
                raise PolicyError(
                    "Cannot update these fields for approved influencers",
                    {"fields": sorted(blocked), "allowed": sorted(APPROVED_INFLUENCER_FIELDS)},
                )

        for field in ("first_name", "last_name", "bio"):
            if field in updates:
                setattr(profile, field, updates[field])
        if "niches" in updates and data.niches is not None:
            profile.niches = [n.value for n in data.niches]
        if "location" in updates:
            profile.location = data.location.model_dump() if data.location else None
        if "social_accounts" in updates and data.social_accounts is not None:
            self._replace_social_accounts(profile, data.social_accounts)

        if profile_picture is not None:
            profile.profile_picture_url = self.storage.store(profile_picture)
        for f in kyc_files or []:
            profile.kyc_documents.append(KycDocument(document_url=self.storage.store(f), verified=False))

        self.db.commit()
        self.db.refresh(profile)
        return profile

    def _replace_social_accounts(self, profile: InfluencerProfile, accounts: List[SocialAccountInput]):
        profile.social_accounts = [
            SocialAccount(
                platform=a.platform,
                username=a.username,
                url=a.url,
                follower_count=a.follower_count,
                engagement_rate=a.engagement_rate,
            )
            for a in accounts
        ]
        profile.recalculate_reach()

    def search_influencers(self, niches: Optional[List[str]] = None,
                           min_followers: Optional[int] = None, max_followers: Optional[int] = None,
                           min_engagement: Optional[float] = None, country: Optional[str] = None,
                           page: int = 1, limit: int = 10) -> Tuple[List[InfluencerProfile], int]:
        """Approved influencers only, most followed first."""
        query = self.db.query(InfluencerProfile).filter(InfluencerProfile.status == InfluencerStatusDB.APPROVED)

        if niches:
            # niches is a JSON list; match the quoted value inside its text form
            niches_text = cast(InfluencerProfile.niches, String)
            query = query.filter(or_(*[niches_text.like(f'%"{n}"%') for n in niches]))
        if min_followers is not None:
            query = query.filter(InfluencerProfile.total_followers >= min_followers)
        if max_followers is not None:
            query = query.filter(InfluencerProfile.total_followers <= max_followers)
        if min_engagement is not None:
            query = query.filter(InfluencerProfile.average_engagement >= min_engagement)
        if country:
            query = query.filter(InfluencerProfile.location["country"].as_string().ilike(f"%{country}%"))

        total = query.count()
        items = (
            query.order_by(InfluencerProfile.total_followers.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return items, total

    # =========================================================================
    # BRAND
    # =========================================================================

    def onboard_brand(self, user: User, data: BrandOnboard, logo: Optional[IncomingFile] = None) -> BrandProfile:
        if self.find_brand_by_user(user.id) is not None:
            raise ConflictError("Brand profile already exists")

        brand = BrandProfile(
            user_id=user.id,
            company_name=data.company_name.strip(),
            website=data.website,
            industry=data.industry,
            description=data.description,
            contact_person=data.contact_person.model_dump(),
            location=data.location.model_dump() if data.location else None,
            social_media=data.social_media.model_dump() if data.social_media else None,
            subscription_plan=SubscriptionPlanDB.BASIC,
            subscription_status=SubscriptionStatusDB.PENDING,
            payment_status=PaymentStatusDB.PENDING,
        )
        if logo is not None:
            brand.logo_url = self.storage.store(logo)

        self.db.add(brand)
        self.db.commit()
        self.db.refresh(brand)

        logger.info(f"Brand profile {brand.id} created for user {user.id}")
        self.notifications.notify_welcome(user.email, brand.company_name)
        return brand

    def update_brand(self, user: User, data: BrandUpdate, logo: Optional[IncomingFile] = None) -> BrandProfile:
        brand = self.require_brand(user.id)
        updates = data.model_dump(exclude_unset=True)

        for field in ("company_name", "website", "industry", "description"):
            if field in updates:
                setattr(brand, field, updates[field])
        for field in ("contact_person", "location", "social_media"):
            if field in updates:
                value = getattr(data, field)
                setattr(brand, field, value.model_dump() if value is not None else None)

        if logo is not None:
            brand.logo_url = self.storage.store(logo)

        self.db.commit()
        self.db.refresh(brand)
        return brand

    def activate_subscription(self, user: User, plan: SubscriptionPlanDB) -> BrandProfile:
        """Activate a plan immediately. No payment provider yet, so it is marked paid."""
        brand = self.require_brand(user.id)
        now = datetime.utcnow()

        brand.subscription_plan = plan
        brand.subscription_status = SubscriptionStatusDB.ACTIVE
        brand.payment_status = PaymentStatusDB.PAID
        brand.subscription_start = now
        brand.subscription_end = now + timedelta(days=SUBSCRIPTION_PERIOD_DAYS)

        self.db.commit()
        self.db.refresh(brand)
        logger.info(f"Subscription {plan.value} activated for brand {brand.id} until {brand.subscription_end}")
        return brand

    def search_brands(self, industry: Optional[str] = None, country: Optional[str] = None,
                      verified: Optional[bool] = None, page: int = 1, limit: int = 10) -> Tuple[List[BrandProfile], int]:
        query = self.db.query(BrandProfile)

        if industry:
            query = query.filter(BrandProfile.industry == industry)
        if country:
            query = query.filter(BrandProfile.location["country"].as_string().ilike(f"%{country}%"))
        if verified is not None:
            query = query.filter(BrandProfile.verified == verified)

        total = query.count()
        items = (
            query.order_by(BrandProfile.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return items, total
