# Brand Router for the Influencer Marketplace
# Handles brand onboarding, profile management and subscriptions

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from typing import Optional

from database.models import User
from database.marketplace_models import BrandProfile
from schemas.marketplace import (
    BrandOnboard,
    BrandUpdate,
    BrandProfileResponse,
    SubscriptionUpdate,
    SubscriptionResponse,
)
from schemas.forms import build_model, parse_json_field
from core.storage import read_upload
from auth.roles import UserType
from auth.decorators import require_user_type
from services.profile_service import ProfileService
from routers.dependencies import get_profile_service, paginate

router = APIRouter(prefix="/brand", tags=["Brands"])


# ============================================================================
# PRIVATE ENDPOINTS (Brand)
# ============================================================================

@router.post("/onboard", status_code=status.HTTP_201_CREATED)
async def onboard_brand(
    company_name: str = Form(...),
    website: str = Form(...),
    industry: str = Form(...),
    contact_person: str = Form(..., description="JSON object {first_name, last_name, position, phone}"),
    description: Optional[str] = Form(None),
    location: Optional[str] = Form(None, description="JSON object {country, city, address}"),
    social_media: Optional[str] = Form(None, description="JSON object of profile links"),
    logo: Optional[UploadFile] = File(None),
    current_user: User = Depends(require_user_type(UserType.BRAND)),
    profiles: ProfileService = Depends(get_profile_service),
):
    """Create the brand profile. The subscription starts as pending."""
    payload = build_model(BrandOnboard, {
        "company_name": company_name,
        "website": website,
        "industry": industry,
        "description": description,
        "contact_person": parse_json_field(contact_person, "contact_person"),
        "location": parse_json_field(location, "location"),
        "social_media": parse_json_field(social_media, "social_media"),
    })
    logo_file = await read_upload(logo, "logo") if logo and logo.filename else None

    brand = profiles.onboard_brand(current_user, payload, logo_file)
    return {
        "success": True,
        "message": "Brand profile created successfully",
        "data": brand_to_response(brand, include_private=True),
    }


@router.get("/me")
async def get_my_brand_profile(
    current_user: User = Depends(require_user_type(UserType.BRAND)),
    profiles: ProfileService = Depends(get_profile_service),
):
    brand = profiles.require_brand(current_user.id)
    return {"success": True, "data": brand_to_response(brand, include_private=True)}


@router.put("/update")
async def update_brand_profile(
    payload: BrandUpdate,
    current_user: User = Depends(require_user_type(UserType.BRAND)),
    profiles: ProfileService = Depends(get_profile_service),
):
    brand = profiles.update_brand(current_user, payload)
    return {
        "success": True,
        "message": "Profile updated successfully",
        "data": brand_to_response(brand, include_private=True),
    }


@router.get("/subscription")
async def get_subscription(
    current_user: User = Depends(require_user_type(UserType.BRAND)),
    profiles: ProfileService = Depends(get_profile_service),
):
    brand = profiles.require_brand(current_user.id)
    return {"success": True, "data": {"subscription": _subscription(brand, include_payment=True)}}


@router.put("/subscription")
async def update_subscription(
    payload: SubscriptionUpdate,
    current_user: User = Depends(require_user_type(UserType.BRAND)),
    profiles: ProfileService = Depends(get_profile_service),
):
    """Activate a plan. No payment provider yet: it is activated and marked paid right away."""
    brand = profiles.activate_subscription(current_user, payload.plan)
    return {
        "success": True,
        "message": "Subscription updated successfully",
        "data": {"subscription": _subscription(brand, include_payment=True)},
    }


# ============================================================================
# PUBLIC ENDPOINTS
# ============================================================================

@router.get("/search")
async def search_brands(
    industry: Optional[str] = Query(None),
    location: Optional[str] = Query(None, description="Country (substring match)"),
    verified: Optional[bool] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    profiles: ProfileService = Depends(get_profile_service),
):
    items, total = profiles.search_brands(
        industry=industry, country=location, verified=verified, page=page, limit=limit
    )
    return {
        "success": True,
        "data": [brand_to_response(b, include_subscription=False) for b in items],
        "pagination": paginate(page, limit, total),
    }


@router.get("/profile/{brand_id}")
async def get_brand_profile(
    brand_id: str,
    profiles: ProfileService = Depends(get_profile_service),
):
    """Public profile. Payment status is hidden."""
    brand = profiles.get_brand(brand_id)
    return {"success": True, "data": brand_to_response(brand)}


# ============================================================================
# HELPERS
# ============================================================================

def _subscription(brand: BrandProfile, include_payment: bool = False) -> SubscriptionResponse:
    return SubscriptionResponse(
        plan=brand.subscription_plan,
        status=brand.subscription_status,
        start_date=brand.subscription_start,
        end_date=brand.subscription_end,
        payment_status=brand.payment_status if include_payment else None,
    )


def brand_to_response(brand: BrandProfile, include_private: bool = False,
                      include_subscription: bool = True) -> BrandProfileResponse:
    """Convert database brand profile to response schema."""
    return BrandProfileResponse(
        id=brand.id,
        user_id=brand.user_id,
        email=brand.user.email if brand.user else None,
        company_name=brand.company_name,
        website=brand.website,
        industry=brand.industry,
        description=brand.description,
        logo_url=brand.logo_url,
        contact_person=brand.contact_person,
        location=brand.location,
        social_media=brand.social_media,
        subscription=_subscription(brand, include_payment=include_private) if include_subscription else None,
        campaigns_created=brand.campaigns_created or 0,
        total_spent=brand.total_spent or 0.0,
        rating=brand.rating or 0.0,
        verified=brand.verified or False,
        created_at=brand.created_at,
        updated_at=brand.updated_at,
    )
