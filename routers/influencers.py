# Influencer Router for the Influencer Marketplace
# Handles influencer onboarding, profile management and brand-side search

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from typing import List, Optional

from database.models import User
from database.marketplace_models import InfluencerProfile
from schemas.marketplace import (
    InfluencerOnboard,
    InfluencerUpdate,
    InfluencerProfileResponse,
    SocialAccountResponse,
    KycDocumentResponse,
)
from schemas.forms import build_model, parse_json_field
from core.errors import ValidationError
from core.storage import read_upload
from auth.roles import UserType, Permission
from auth.decorators import require_user_type, require_permission
from services.profile_service import ProfileService
from routers.dependencies import get_profile_service, paginate

router = APIRouter(prefix="/influencer", tags=["Influencers"])

MAX_KYC_FILES = 3


# ============================================================================
# PRIVATE ENDPOINTS (Influencer)
# ============================================================================

@router.post("/onboard", status_code=status.HTTP_201_CREATED)
async def onboard_influencer(
    first_name: str = Form(...),
    last_name: str = Form(...),
    niches: str = Form(..., description='JSON list, e.g. ["fashion", "beauty"]'),
    social_accounts: str = Form(..., description="JSON list of social accounts"),
    bio: Optional[str] = Form(None),
    location: Optional[str] = Form(None, description='JSON object {"country", "city"}'),
    kyc_document_type: Optional[str] = Form(None),
    profilePicture: Optional[UploadFile] = File(None),
    kycDocument: Optional[List[UploadFile]] = File(None),
    current_user: User = Depends(require_user_type(UserType.INFLUENCER)),
    profiles: ProfileService = Depends(get_profile_service),
):
    """
    Create the influencer profile. Multipart form: nested fields are JSON strings,
    with an optional profile picture and up to three KYC documents.
    The profile starts in pending_verification until an admin reviews it.
    """
    data = {
        "first_name": first_name,
        "last_name": last_name,
        "bio": bio,
        "niches": parse_json_field(niches, "niches"),
        "location": parse_json_field(location, "location"),
        "social_accounts": parse_json_field(social_accounts, "social_accounts"),
    }
    if kyc_document_type:
        data["kyc_document_type"] = kyc_document_type
    payload = build_model(InfluencerOnboard, data)

    kyc_uploads = [f for f in (kycDocument or []) if f.filename]
    if len(kyc_uploads) > MAX_KYC_FILES:
        raise ValidationError(f"At most {MAX_KYC_FILES} KYC documents are allowed")

    picture = await read_upload(profilePicture, "profilePicture") if profilePicture and profilePicture.filename else None
    kyc_files = [await read_upload(f, "kycDocument") for f in kyc_uploads]

    profile = profiles.onboard_influencer(current_user, payload, picture, kyc_files)
    return {
        "success": True,
        "message": "Influencer profile created successfully",
        "data": influencer_to_response(profile, include_private=True),
    }


@router.get("/me")
async def get_my_influencer_profile(
    current_user: User = Depends(require_user_type(UserType.INFLUENCER)),
    profiles: ProfileService = Depends(get_profile_service),
):
    profile = profiles.require_influencer(current_user.id)
    return {"success": True, "data": influencer_to_response(profile, include_private=True)}


@router.put("/update")
async def update_influencer_profile(
    payload: InfluencerUpdate,
    current_user: User = Depends(require_user_type(UserType.INFLUENCER)),
    profiles: ProfileService = Depends(get_profile_service),
):
    """Approved influencers may only change their bio and social accounts."""
    profile = profiles.update_influencer(current_user, payload)
    return {
        "success": True,
        "message": "Profile updated successfully",
        "data": influencer_to_response(profile, include_private=True),
    }


# ============================================================================
# SEARCH (Brands)
# ============================================================================

@router.get("/search")
async def search_influencers(
    niche: Optional[str] = Query(None, description="Comma separated niches"),
    min_followers: Optional[int] = Query(None, ge=0),
    max_followers: Optional[int] = Query(None, ge=0),
    min_engagement: Optional[float] = Query(None, ge=0),
    location: Optional[str] = Query(None, description="Country (substring match)"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: User = Depends(require_permission(Permission.SEARCH_INFLUENCERS)),
    profiles: ProfileService = Depends(get_profile_service),
):
    """Approved influencers only, most followed first."""
    niches = [n.strip() for n in niche.split(",") if n.strip()] if niche else None
    items, total = profiles.search_influencers(
        niches=niches,
        min_followers=min_followers,
        max_followers=max_followers,
        min_engagement=min_engagement,
        country=location,
        page=page,
        limit=limit,
    )
    return {
        "success": True,
        "data": [influencer_to_response(p) for p in items],
        "pagination": paginate(page, limit, total),
    }


# ============================================================================
# PUBLIC ENDPOINTS
# ============================================================================

@router.get("/profile/{influencer_id}")
async def get_influencer_profile(
    influencer_id: str,
    profiles: ProfileService = Depends(get_profile_service),
):
    """Public profile. KYC documents are never exposed here."""
    profile = profiles.get_influencer(influencer_id)
    return {"success": True, "data": influencer_to_response(profile)}


# ============================================================================
# HELPERS
# ============================================================================

def influencer_to_response(profile: InfluencerProfile, include_private: bool = False) -> InfluencerProfileResponse:
    """Convert database profile to response schema."""
    return InfluencerProfileResponse(
        id=profile.id,
        user_id=profile.user_id,
        email=profile.user.email if profile.user else None,
        first_name=profile.first_name,
        last_name=profile.last_name,
        bio=profile.bio,
        profile_picture_url=profile.profile_picture_url,
        niches=profile.niches or [],
        location=profile.location,
        social_accounts=[SocialAccountResponse.model_validate(a) for a in profile.social_accounts],
        kyc_documents=[KycDocumentResponse.model_validate(d) for d in profile.kyc_documents] if include_private else None,

        status=profile.status,
        rejection_reason=profile.rejection_reason,
        approved_at=profile.approved_at,

        popularity_trend=profile.popularity_trend,
        total_followers=profile.total_followers or 0,
        average_engagement=profile.average_engagement or 0.0,
        completed_campaigns=profile.completed_campaigns or 0,
        rating=profile.rating or 0.0,

        created_at=profile.created_at,
        updated_at=profile.updated_at,
    )
