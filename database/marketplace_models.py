# Marketplace Database Models
# Brand and influencer profiles, and the campaign aggregate with its owned
# applications, selected influencers and proof of work.

from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, Text, JSON, Boolean, Float, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from database.models import Base, generate_uuid, enum_column


# ============================================================================
# ENUMS
# ============================================================================

class CategoryDB(str, enum.Enum):
    FASHION = "fashion"
    BEAUTY = "beauty"
    FITNESS = "fitness"
    FOOD = "food"
    TRAVEL = "travel"
    TECH = "tech"
    LIFESTYLE = "lifestyle"
    GAMING = "gaming"
    EDUCATION = "education"
    BUSINESS = "business"


# Brands may come from a few industries that campaigns never target
BRAND_INDUSTRIES = [c.value for c in CategoryDB] + ["healthcare", "automotive", "finance"]


class InfluencerStatusDB(str, enum.Enum):
    PENDING_VERIFICATION = "pending_verification"
    APPROVED = "approved"
    REJECTED = "rejected"


class PopularityTrendDB(str, enum.Enum):
    RISING = "rising"
    STABLE = "stable"
    DECLINING = "declining"


class SocialPlatformDB(str, enum.Enum):
    INSTAGRAM = "instagram"
    YOUTUBE = "youtube"
    TIKTOK = "tiktok"
    TWITTER = "twitter"


class KycDocumentTypeDB(str, enum.Enum):
    PASSPORT = "passport"
    DRIVING_LICENSE = "driving_license"
    NATIONAL_ID = "national_id"


class SubscriptionPlanDB(str, enum.Enum):
    BASIC = "basic"
    PREMIUM = "premium"
    ENTERPRISE = "enterprise"


class SubscriptionStatusDB(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    PENDING = "pending"


class PaymentStatusDB(str, enum.Enum):
    PAID = "paid"
    PENDING = "pending"
    FAILED = "failed"


class CampaignStatusDB(str, enum.Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    PAUSED = "paused"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class DeliverableTypeDB(str, enum.Enum):
    POST = "post"
    STORY = "story"
    REEL = "reel"
    VIDEO = "video"
    BLOG = "blog"


class DeliverablePlatformDB(str, enum.Enum):
    INSTAGRAM = "instagram"
    YOUTUBE = "youtube"
    TIKTOK = "tiktok"
    TWITTER = "twitter"
    BLOG = "blog"


class ApplicationStatusDB(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class SelectionStatusDB(str, enum.Enum):
    ASSIGNED = "assigned"
    IN_PROGRESS = "in_progress"
    SUBMITTED = "submitted"
    APPROVED = "approved"
    REJECTED = "rejected"


# ============================================================================
# INFLUENCER PROFILE
# ============================================================================

class InfluencerProfile(Base):
    """Onboarding profile for influencer users."""
    __tablename__ = "influencer_profiles"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)

    # Basic info
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    bio = Column(String(500))
    profile_picture_url = Column(String(500))
    niches = Column(JSON, default=list)  # ["fashion", "beauty"]
    location = Column(JSON)  # {"country": ..., "city": ...}

    # Verification
    status = enum_column(InfluencerStatusDB, default=InfluencerStatusDB.PENDING_VERIFICATION)
    rejection_reason = Column(Text)
    approved_at = Column(DateTime)

    # Reach (recomputed from social accounts)
    popularity_trend = enum_column(PopularityTrendDB, default=PopularityTrendDB.STABLE)
    total_followers = Column(Integer, default=0)
    average_engagement = Column(Float, default=0.0)

    # Reputation
    completed_campaigns = Column(Integer, default=0)
    rating = Column(Float, default=0.0)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    user = relationship("User", backref="influencer_profile")
    social_accounts = relationship("SocialAccount", back_populates="influencer",
                                   cascade="all, delete-orphan", order_by="SocialAccount.created_at")
    kyc_documents = relationship("KycDocument", back_populates="influencer",
                                 cascade="all, delete-orphan", order_by="KycDocument.uploaded_at")

    @property
    def display_name(self):
        return f"{self.first_name} {self.last_name}".strip()

    def recalculate_reach(self):
        """Recompute total followers and average engagement from social accounts."""
        accounts = list(self.social_accounts)
        self.total_followers = sum(a.follower_count or 0 for a in accounts)
        if not accounts:
            self.average_engagement = 0.0
        else:
            self.average_engagement = sum(a.engagement_rate or 0.0 for a in accounts) / len(accounts)


class SocialAccount(Base):
    __tablename__ = "social_accounts"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    influencer_id = Column(String(36), ForeignKey("influencer_profiles.id", ondelete="CASCADE"), nullable=False)

    platform = enum_column(SocialPlatformDB, nullable=False)
    username = Column(String(100), nullable=False)
    url = Column(String(500), nullable=False)
    follower_count = Column(Integer, default=0)
    engagement_rate = Column(Float, default=0.0)
    verified = Column(Boolean, default=False)

    created_at = Column(DateTime, default=datetime.utcnow)

    influencer = relationship("InfluencerProfile", back_populates="social_accounts")


class KycDocument(Base):
    __tablename__ = "kyc_documents"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    influencer_id = Column(String(36), ForeignKey("influencer_profiles.id", ondelete="CASCADE"), nullable=False)

    type = enum_column(KycDocumentTypeDB, nullable=False, default=KycDocumentTypeDB.NATIONAL_ID)
    document_url = Column(String(500), nullable=False)
    verified = Column(Boolean, default=False)
    uploaded_at = Column(DateTime, default=datetime.utcnow)

    influencer = relationship("InfluencerProfile", back_populates="kyc_documents")


# ============================================================================
# BRAND PROFILE
# ============================================================================

class BrandProfile(Base):
    """Onboarding profile and subscription for brand users."""
    __tablename__ = "brand_profiles"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)

    company_name = Column(String(255), nullable=False)
    website = Column(String(500), nullable=False)
    industry = Column(String(50), nullable=False)
    description = Column(String(1000))
    logo_url = Column(String(500))

    contact_person = Column(JSON)  # {"first_name", "last_name", "position", "phone"}
    location = Column(JSON)  # {"country", "city", "address"}
    social_media = Column(JSON)  # {"instagram", "facebook", "twitter", "linkedin"}

    # Subscription
    subscription_plan = enum_column(SubscriptionPlanDB, default=SubscriptionPlanDB.BASIC)
    subscription_status = enum_column(SubscriptionStatusDB, default=SubscriptionStatusDB.PENDING)
    subscription_start = Column(DateTime)
    subscription_end = Column(DateTime)
    payment_status = enum_column(PaymentStatusDB, default=PaymentStatusDB.PENDING)

    campaigns_created = Column(Integer, default=0)
    total_spent = Column(Float, default=0.0)
    rating = Column(Float, default=0.0)
    verified = Column(Boolean, default=False)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    user = relationship("User", backref="brand_profile")
    campaigns = relationship("Campaign", back_populates="brand")

    @property
    def has_active_subscription(self):
        return self.subscription_status == SubscriptionStatusDB.ACTIVE


# ============================================================================
# CAMPAIGN
# ============================================================================

class Campaign(Base):
    """Brand campaign. Owns its deliverables, applications and selected influencers."""
    __tablename__ = "campaigns"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    brand_id = Column(String(36), ForeignKey("brand_profiles.id", ondelete="CASCADE"), nullable=False, index=True)

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    category = enum_column(CategoryDB, nullable=False)

    # Budget range
    budget_min = Column(Float, nullable=False)
    budget_max = Column(Float, nullable=False)
    currency = Column(String(3), default="USD")

    # {"min_followers", "min_engagement_rate", "target_audience": {...}, "niches": [...]}
    requirements = Column(JSON)

    # Timeline (application_deadline < campaign_start < campaign_end)
    application_deadline = Column(DateTime, nullable=False)
    campaign_start = Column(DateTime, nullable=False)
    campaign_end = Column(DateTime, nullable=False)

    status = enum_column(CampaignStatusDB, default=CampaignStatusDB.DRAFT, index=True)

    # Sum of SelectedInfluencer.agreed_rate
    total_budget_allocated = Column(Float, default=0.0)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    brand = relationship("BrandProfile", back_populates="campaigns")
    deliverables = relationship("CampaignDeliverable", back_populates="campaign",
                                cascade="all, delete-orphan", order_by="CampaignDeliverable.position")
    applications = relationship("CampaignApplication", back_populates="campaign",
                                cascade="all, delete-orphan", order_by="CampaignApplication.applied_at")
    selected_influencers = relationship("SelectedInfluencer", back_populates="campaign",
                                        cascade="all, delete-orphan", order_by="SelectedInfluencer.assigned_at")

    def calculate_total_budget(self):
        self.total_budget_allocated = sum(s.agreed_rate or 0 for s in self.selected_influencers)
        return self.total_budget_allocated

    def find_application(self, influencer_id):
        return next((a for a in self.applications if a.influencer_id == influencer_id), None)

    def find_selection(self, influencer_id):
        return next((s for s in self.selected_influencers if s.influencer_id == influencer_id), None)


class CampaignDeliverable(Base):
    __tablename__ = "campaign_deliverables"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    campaign_id = Column(String(36), ForeignKey("campaigns.id", ondelete="CASCADE"), nullable=False)
    position = Column(Integer, default=0)

    type = enum_column(DeliverableTypeDB, nullable=False)
    platform = enum_column(DeliverablePlatformDB, nullable=False)
    quantity = Column(Integer, nullable=False, default=1)
    description = Column(Text)

    campaign = relationship("Campaign", back_populates="deliverables")


class CampaignApplication(Base):
    """An influencer's application to a campaign. One per (campaign, influencer)."""
    __tablename__ = "campaign_applications"
    __table_args__ = (
        UniqueConstraint("campaign_id", "influencer_id", name="uq_application_campaign_influencer"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid)
    campaign_id = Column(String(36), ForeignKey("campaigns.id", ondelete="CASCADE"), nullable=False)
    influencer_id = Column(String(36), ForeignKey("influencer_profiles.id", ondelete="CASCADE"), nullable=False)

    proposed_rate = Column(Float, nullable=False)
    message = Column(Text)
    status = enum_column(ApplicationStatusDB, default=ApplicationStatusDB.PENDING)

    applied_at = Column(DateTime, default=datetime.utcnow)
    reviewed_at = Column(DateTime)

    campaign = relationship("Campaign", back_populates="applications")
    influencer = relationship("InfluencerProfile")


class SelectedInfluencer(Base):
    """An influencer assigned to a campaign, tracked through delivery and review."""
    __tablename__ = "selected_influencers"
    __table_args__ = (
        UniqueConstraint("campaign_id", "influencer_id", name="uq_selection_campaign_influencer"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid)
    campaign_id = Column(String(36), ForeignKey("campaigns.id", ondelete="CASCADE"), nullable=False)
    influencer_id = Column(String(36), ForeignKey("influencer_profiles.id", ondelete="CASCADE"), nullable=False)

    agreed_rate = Column(Float)
    status = enum_column(SelectionStatusDB, default=SelectionStatusDB.ASSIGNED)

    assigned_at = Column(DateTime, default=datetime.utcnow)
    started_at = Column(DateTime)
    submitted_at = Column(DateTime)
    approved_at = Column(DateTime)
    rejected_at = Column(DateTime)

    campaign = relationship("Campaign", back_populates="selected_influencers")
    influencer = relationship("InfluencerProfile")
    proof_of_work = relationship("ProofOfWork", back_populates="selection",
                                 cascade="all, delete-orphan", order_by="ProofOfWork.position")


class ProofOfWork(Base):
    """Evidence (link or uploaded file) that a deliverable was produced."""
    __tablename__ = "proof_of_work"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    selection_id = Column(String(36), ForeignKey("selected_influencers.id", ondelete="CASCADE"), nullable=False)
    position = Column(Integer, default=0)

    url = Column(String(1000), nullable=False)
    platform = Column(String(50))
    type = Column(String(50))
    submitted_at = Column(DateTime, default=datetime.utcnow)

    selection = relationship("SelectedInfluencer", back_populates="proof_of_work")
