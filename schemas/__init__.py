# Schemas module for the Influencer Marketplace
# Organizes all Pydantic schemas in a modular structure

from schemas.marketplace import (
    # Enums
    UserTypeEnum,
    GenderEnum,
    ApplicationDecision,
    VerifyAction,

    # Auth schemas
    RegisterRequest,
    LoginRequest,
    UserResponse,

    # Influencer schemas
    LocationInput,
    SocialAccountInput,
    InfluencerOnboard,
    InfluencerUpdate,
    SocialAccountResponse,
    KycDocumentResponse,
    InfluencerProfileResponse,

    # Brand schemas
    ContactPersonInput,
    BrandLocationInput,
    SocialMediaLinks,
    BrandOnboard,
    BrandUpdate,
    SubscriptionUpdate,
    SubscriptionResponse,
    BrandProfileResponse,

    # Campaign schemas
    BudgetInput,
    DeliverableInput,
    RequirementsInput,
    TimelineInput,
    CampaignCreate,
    CampaignStatusUpdate,
    ApplyRequest,
    ApplicationReview,
    AgreedRateUpdate,
    SubmissionReview,
    ProofUrlInput,
    ProofData,
    DeliverableResponse,
    ApplicationResponse,
    ProofOfWorkResponse,
    SelectedInfluencerResponse,
    CampaignResponse,
    Pagination,

    # Admin schemas
    InfluencerVerifyRequest,
    KycVerifyRequest,
)

from schemas.chat import (
    DirectChatRequest,
    CampaignChatRequest,
    ParticipantResponse,
    LastMessageResponse,
    ReadReceiptResponse,
    MessageResponse,
    ChatResponse,
    MessagePageResponse,
)

from schemas.forms import parse_json_field, build_model
