# Pydantic Schemas for Influencer Marketplace
# Request bodies and response shapes for auth, profiles and campaigns

from pydantic import BaseModel, EmailStr, Field, validator
from typing import Optional, List
from datetime import datetime
from enum import Enum

from database.models import UserRole
from database.marketplace_models import (
    CategoryDB,
    BRAND_INDUSTRIES,
    InfluencerStatusDB,
    PopularityTrendDB,
    SocialPlatformDB,
    KycDocumentTypeDB,
    SubscriptionPlanDB,
    SubscriptionStatusDB,
    PaymentStatusDB,
    CampaignStatusDB,
    DeliverableTypeDB,
    DeliverablePlatformDB,
    ApplicationStatusDB,
    SelectionStatusDB,
)


# ============================================================================
# ENUMS
# ============================================================================

class UserTypeEnum(str, Enum):
    BRAND = "brand"
    INFLUENCER = "influencer"
    ADMIN = "admin"


class GenderEnum(str, Enum):
    MALE = "male"
    FEMALE = "female"
    ALL = "all"


class ApplicationDecision(str, Enum):
    ACCEPT = "accept"
    REJECT = "reject"


class VerifyAction(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"


# ============================================================================
# AUTH SCHEMAS
# ============================================================================

class RegisterRequest(BaseModel):
    """Self-registration. Admin accounts are seeded, never registered."""
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    role: UserTypeEnum

    @validator("role")
    def role_must_not_be_admin(cls, v):
        if v == UserTypeEnum.ADMIN:
            raise ValueError("Role must be brand or influencer")
        return v


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class UserResponse(BaseModel):
    id: str
    email: str
    role: UserRole
    is_active: bool
    last_login_at: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True


# ============================================================================
# INFLUENCER SCHEMAS
# ============================================================================

class LocationInput(BaseModel):
    country: Optional[str] = Field(None, max_length=100)
    city: Optional[str] = Field(None, max_length=100)


class SocialAccountInput(BaseModel):
    """A social account as declared by the influencer."""
    platform: SocialPlatformDB
    username: str = Field(..., min_length=1, max_length=100)
    url: str = Field(..., min_length=1, max_length=500)
    follower_count: int = Field(0, ge=0)
    engagement_rate: float = Field(0.0, ge=0, le=100)


class InfluencerOnboard(BaseModel):
    """Schema for creating an influencer profile."""
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    bio: Optional[str] = Field(None, max_length=500)
    niches: List[CategoryDB] = Field(..., min_length=1)
    location: Optional[LocationInput] = None
    social_accounts: List[SocialAccountInput] = Field(..., min_length=1)
    kyc_document_type: KycDocumentTypeDB = KycDocumentTypeDB.NATIONAL_ID


class InfluencerUpdate(BaseModel):
    """Schema for updating an influencer profile. Approved profiles may only change bio and social accounts."""
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    bio: Optional[str] = Field(None, max_length=500)
    niches: Optional[List[CategoryDB]] = None
    location: Optional[LocationInput] = None
    social_accounts: Optional[List[SocialAccountInput]] = None


class SocialAccountResponse(BaseModel):
    id: str
    platform: SocialPlatformDB
    username: str
    url: str
    follower_count: int = 0
    engagement_rate: float = 0.0
    verified: bool = False

    class Config:
        from_attributes = True


class KycDocumentResponse(BaseModel):
    id: str
    type: KycDocumentTypeDB
    document_url: str
    verified: bool = False
    uploaded_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class InfluencerProfileResponse(BaseModel):
    """Influencer profile. kyc_documents is only filled for the owner and admins."""
    id: str
    user_id: str
    email: Optional[str] = None
    first_name: str
    last_name: str
    bio: Optional[str] = None
    profile_picture_url: Optional[str] = None
    niches: List[str] = []
    location: Optional[dict] = None
    social_accounts: List[SocialAccountResponse] = []
    kyc_documents: Optional[List[KycDocumentResponse]] = None

    status: InfluencerStatusDB
    rejection_reason: Optional[str] = None
    approved_at: Optional[datetime] = None

    popularity_trend: PopularityTrendDB = PopularityTrendDB.STABLE
    total_followers: int = 0
    average_engagement: float = 0.0
    completed_campaigns: int = 0
    rating: float = 0.0

    created_at: datetime
    updated_at: Optional[datetime] = None


# ============================================================================
# BRAND SCHEMAS
# ============================================================================

class ContactPersonInput(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    position: Optional[str] = Field(None, max_length=100)
    phone: Optional[str] = Field(None, max_length=50)


class BrandLocationInput(BaseModel):
    country: Optional[str] = Field(None, max_length=100)
    city: Optional[str] = Field(None, max_length=100)
    address: Optional[str] = Field(None, max_length=255)


class SocialMediaLinks(BaseModel):
    instagram: Optional[str] = None
    facebook: Optional[str] = None
    twitter: Optional[str] = None
    linkedin: Optional[str] = None


class BrandOnboard(BaseModel):
    """Schema for creating a brand profile."""
    company_name: str = Field(..., min_length=1, max_length=255)
    website: str = Field(..., min_length=4, max_length=500)
    industry: str
    description: Optional[str] = Field(None, max_length=1000)
    contact_person: ContactPersonInput
    location: Optional[BrandLocationInput] = None
    social_media: Optional[SocialMediaLinks] = None

    @validator("industry")
    def industry_must_be_known(cls, v):
        if v not in BRAND_INDUSTRIES:
            raise ValueError(f"Industry must be one of: {', '.join(BRAND_INDUSTRIES)}")
        return v

    @validator("website")
    def website_must_be_url(cls, v):
        if not v.startswith(("http://", "https://")):
            raise ValueError("Website must be a valid URL")
        return v


class BrandUpdate(BaseModel):
    """Schema for updating a brand profile. The subscription is never changed here."""
    company_name: Optional[str] = Field(None, min_length=1, max_length=255)
    website: Optional[str] = Field(None, min_length=4, max_length=500)
    industry: Optional[str] = None
    description: Optional[str] = Field(None, max_length=1000)
    contact_person: Optional[ContactPersonInput] = None
    location: Optional[BrandLocationInput] = None
    social_media: Optional[SocialMediaLinks] = None

    @validator("industry")
    def industry_must_be_known(cls, v):
        if v is not None and v not in BRAND_INDUSTRIES:
            raise ValueError(f"Industry must be one of: {', '.join(BRAND_INDUSTRIES)}")
        return v


class SubscriptionUpdate(BaseModel):
    plan: SubscriptionPlanDB


class SubscriptionResponse(BaseModel):
    plan: SubscriptionPlanDB
    status: SubscriptionStatusDB
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    payment_status: Optional[PaymentStatusDB] = None


class BrandProfileResponse(BaseModel):
    """Brand profile. subscription.payment_status is hidden on public views."""
    id: str
    user_id: str
    email: Optional[str] = None
    company_name: str
    website: str
    industry: str
    description: Optional[str] = None
    logo_url: Optional[str] = None
    contact_person: Optional[dict] = None
    location: Optional[dict] = None
    social_media: Optional[dict] = None
    subscription: Optional[SubscriptionResponse] = None
    campaigns_created: int = 0
    total_spent: float = 0.0
    rating: float = 0.0
    verified: bool = False
    created_at: datetime
    updated_at: Optional[datetime] = None


# ============================================================================
# CAMPAIGN SCHEMAS
# ============================================================================

class BudgetInput(BaseModel):
    min: float = Field(..., ge=0)
    max: float = Field(..., ge=0)
    currency: str = Field("USD", min_length=3, max_length=3)


class DeliverableInput(BaseModel):
    type: DeliverableTypeDB
    platform: DeliverablePlatformDB
    quantity: int = Field(1, ge=1)
    description: Optional[str] = None


class AgeRange(BaseModel):
    min: Optional[int] = Field(None, ge=13)
    max: Optional[int] = Field(None, le=100)


class TargetAudience(BaseModel):
    age_range: Optional[AgeRange] = None
    gender: GenderEnum = GenderEnum.ALL
    locations: List[str] = []


class RequirementsInput(BaseModel):
    min_followers: int = Field(1000, ge=0)
    min_engagement_rate: float = Field(2.0, ge=0)
    target_audience: Optional[TargetAudience] = None
    niches: List[CategoryDB] = []


class TimelineInput(BaseModel):
    application_deadline: datetime
    campaign_start: datetime
    campaign_end: datetime


class CampaignCreate(BaseModel):
    """Schema for creating a campaign. Timeline ordering is checked by the campaign engine."""
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    category: CategoryDB
    budget: BudgetInput
    deliverables: List[DeliverableInput]
    requirements: Optional[RequirementsInput] = None
    timeline: TimelineInput


class CampaignStatusUpdate(BaseModel):
    status: CampaignStatusDB


class ApplyRequest(BaseModel):
    proposed_rate: float = Field(..., ge=0)
    message: Optional[str] = Field(None, max_length=2000)


class ApplicationReview(BaseModel):
    decision: ApplicationDecision
    agreed_rate: Optional[float] = Field(None, ge=0)


class AgreedRateUpdate(BaseModel):
    agreed_rate: float = Field(..., ge=0)


class SubmissionReview(BaseModel):
    approve: bool


class ProofUrlInput(BaseModel):
    url: str = Field(..., min_length=1, max_length=1000)
    platform: Optional[str] = None
    type: Optional[str] = None


class ProofData(BaseModel):
    """Structured payload sent with proof of work. Platform/type tag the uploaded files."""
    platform: Optional[str] = None
    type: Optional[str] = None
    urls: List[ProofUrlInput] = []


class DeliverableResponse(BaseModel):
    id: str
    type: DeliverableTypeDB
    platform: DeliverablePlatformDB
    quantity: int
    description: Optional[str] = None

    class Config:
        from_attributes = True


class ApplicationResponse(BaseModel):
    id: str
    influencer_id: str
    influencer_name: Optional[str] = None
    proposed_rate: float
    message: Optional[str] = None
    status: ApplicationStatusDB
    applied_at: Optional[datetime] = None
    reviewed_at: Optional[datetime] = None


class ProofOfWorkResponse(BaseModel):
    id: str
    url: str
    platform: Optional[str] = None
    type: Optional[str] = None
    submitted_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class SelectedInfluencerResponse(BaseModel):
    id: str
    influencer_id: str
    influencer_name: Optional[str] = None
    agreed_rate: Optional[float] = None
    status: SelectionStatusDB
    assigned_at: Optional[datetime] = None
    started_at: Optional[datetime] = None
    submitted_at: Optional[datetime] = None
    approved_at: Optional[datetime] = None
    rejected_at: Optional[datetime] = None
    proof_of_work: List[ProofOfWorkResponse] = []


class CampaignResponse(BaseModel):
    """Campaign detail. applications/selected_influencers are omitted from listings."""
    id: str
    brand_id: str
    brand_name: Optional[str] = None
    title: str
    description: str
    category: CategoryDB
    budget: BudgetInput
    deliverables: List[DeliverableResponse] = []
    requirements: Optional[dict] = None
    timeline: TimelineInput
    status: CampaignStatusDB
    total_budget_allocated: float = 0.0
    applications: Optional[List[ApplicationResponse]] = None
    selected_influencers: Optional[List[SelectedInfluencerResponse]] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


# ============================================================================
# ADMIN SCHEMAS
# ============================================================================

class InfluencerVerifyRequest(BaseModel):
    action: VerifyAction
    rejection_reason: Optional[str] = Field(None, max_length=500)


class KycVerifyRequest(BaseModel):
    verified: bool = True
