# Campaigns Router for the Influencer Marketplace
# Handles the campaign lifecycle between brands and influencers

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from typing import List, Optional

from database.models import User
from database.marketplace_models import Campaign, CampaignApplication, SelectedInfluencer
from schemas.marketplace import (
    CampaignCreate,
    CampaignResponse,
    CampaignStatusUpdate,
    ApplyRequest,
    ApplicationReview,
    AgreedRateUpdate,
    SubmissionReview,
    BudgetInput,
    TimelineInput,
    DeliverableResponse,
    ApplicationResponse,
    SelectedInfluencerResponse,
    ProofOfWorkResponse,
)
from core.storage import read_upload
from auth.roles import UserType, Permission
from auth.decorators import require_user_type, require_permission
from services.campaign_engine import CampaignEngine
from routers.dependencies import get_campaign_engine, paginate

router = APIRouter(prefix="/campaigns", tags=["Campaigns"])


# ============================================================================
# BRAND ENDPOINTS (Create & Manage Campaigns)
# ============================================================================

@router.post("/create", status_code=status.HTTP_201_CREATED)
async def create_campaign(
    payload: CampaignCreate,
    current_user: User = Depends(require_permission(Permission.CREATE_CAMPAIGNS)),
    engine: CampaignEngine = Depends(get_campaign_engine),
):
    """
    Create a campaign. Requires an active subscription and a timeline where
    application deadline < campaign start < campaign end, deadline in the future.
    The campaign is published as active right away.
    """
    campaign = engine.create(current_user, payload)
    return {
        "success": True,
        "message": "Campaign created successfully",
        "data": campaign_to_response(campaign, include_workflow=True),
    }


@router.get("/my")
async def get_my_campaigns(
    current_user: User = Depends(require_user_type(UserType.BRAND)),
    engine: CampaignEngine = Depends(get_campaign_engine),
):
    campaigns = engine.list_for_brand(current_user)
    return {
        "success": True,
        "data": [campaign_to_response(c, include_workflow=True) for c in campaigns],
    }


@router.put("/{campaign_id}/status")
async def update_campaign_status(
    campaign_id: str,
    payload: CampaignStatusUpdate,
    current_user: User = Depends(require_permission(Permission.MANAGE_CAMPAIGNS)),
    engine: CampaignEngine = Depends(get_campaign_engine),
):
    campaign = engine.update_status(current_user, campaign_id, payload.status)
    return {
        "success": True,
        "message": "Campaign status updated successfully",
        "data": campaign_to_response(campaign, include_workflow=True),
    }


@router.post("/{campaign_id}/applications/{application_id}/review")
async def review_application(
    campaign_id: str,
    application_id: str,
    payload: ApplicationReview,
    current_user: User = Depends(require_permission(Permission.REVIEW_APPLICATIONS)),
    engine: CampaignEngine = Depends(get_campaign_engine),
):
    """Accept (assigns the influencer) or reject a pending application."""
    application = engine.review_application(
        current_user, campaign_id, application_id, payload.decision, payload.agreed_rate
    )
    campaign = engine.get(campaign_id)
    return {
        "success": True,
        "message": f"Application {application.status.value}",
        "data": {
            "application": _application_to_response(application),
            "campaign": campaign_to_response(campaign, include_workflow=True),
        },
    }


@router.put("/{campaign_id}/influencers/{influencer_id}/rate")
async def update_agreed_rate(
    campaign_id: str,
    influencer_id: str,
    payload: AgreedRateUpdate,
    current_user: User = Depends(require_permission(Permission.MANAGE_CAMPAIGNS)),
    engine: CampaignEngine = Depends(get_campaign_engine),
):
    campaign = engine.update_agreed_rate(current_user, campaign_id, influencer_id, payload.agreed_rate)
    return {
        "success": True,
        "message": "Agreed rate updated successfully",
        "data": campaign_to_response(campaign, include_workflow=True),
    }


@router.post("/{campaign_id}/influencers/{influencer_id}/review")
async def review_submission(
    campaign_id: str,
    influencer_id: str,
    payload: SubmissionReview,
    current_user: User = Depends(require_permission(Permission.MANAGE_CAMPAIGNS)),
    engine: CampaignEngine = Depends(get_campaign_engine),
):
    """Approve or reject submitted proof of work."""
    selection = engine.review_submission(current_user, campaign_id, influencer_id, payload.approve)
    return {
        "success": True,
        "message": f"Submission {selection.status.value}",
        "data": _selection_to_response(selection),
    }


# ============================================================================
# SHARED ENDPOINTS (Brand or selected Influencer)
# ============================================================================

@router.post("/{campaign_id}/influencers/{influencer_id}/start")
async def start_work(
    campaign_id: str,
    influencer_id: str,
    current_user: User = Depends(require_user_type(UserType.BRAND, UserType.INFLUENCER)),
    engine: CampaignEngine = Depends(get_campaign_engine),
):
    selection = engine.start_work(current_user, campaign_id, influencer_id)
    return {
        "success": True,
        "message": "Work started",
        "data": _selection_to_response(selection),
    }


# ============================================================================
# INFLUENCER ENDPOINTS
# ============================================================================

@router.post("/{campaign_id}/apply")
async def apply_to_campaign(
    campaign_id: str,
    payload: ApplyRequest,
    current_user: User = Depends(require_permission(Permission.APPLY_TO_CAMPAIGNS)),
    engine: CampaignEngine = Depends(get_campaign_engine),
):
    application = engine.apply(current_user, campaign_id, payload.proposed_rate, payload.message)
    return {
        "success": True,
        "message": "Application submitted successfully",
        "data": {
            "campaign_id": campaign_id,
            "application_id": application.id,
            "application_status": application.status.value,
        },
    }


@router.post("/{campaign_id}/proof")
async def submit_proof(
    campaign_id: str,
    proofData: str = Form(..., description='JSON: {"platform", "type", "urls": [{"url", "platform", "type"}]}'),
    proofFiles: Optional[List[UploadFile]] = File(None),
    current_user: User = Depends(require_permission(Permission.SUBMIT_PROOF)),
    engine: CampaignEngine = Depends(get_campaign_engine),
):
    """Submit proof of work while in progress. Moves the selection to submitted."""
    files = [await read_upload(f, "proofFiles") for f in (proofFiles or []) if f.filename]
    selection = engine.submit_proof(current_user, campaign_id, proofData, files)
    return {
        "success": True,
        "message": "Proof of work submitted successfully",
        "data": {
            "campaign_id": campaign_id,
            "status": selection.status.value,
            "proof_of_work": [ProofOfWorkResponse.model_validate(p) for p in selection.proof_of_work],
        },
    }


# ============================================================================
# PUBLIC ENDPOINTS
# ============================================================================

@router.get("")
async def list_campaigns(
    category: Optional[str] = Query(None),
    min_budget: Optional[float] = Query(None, ge=0, description="Lower bound on budget.min"),
    max_budget: Optional[float] = Query(None, ge=0, description="Upper bound on budget.max"),
    status_filter: Optional[str] = Query("active", alias="status"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    engine: CampaignEngine = Depends(get_campaign_engine),
):
    items, total = engine.list_campaigns(
        category=category,
        min_budget=min_budget,
        max_budget=max_budget,
        status=status_filter,
        page=page,
        limit=limit,
    )
    return {
        "success": True,
        "data": [campaign_to_response(c) for c in items],
        "pagination": paginate(page, limit, total),
    }


@router.get("/{campaign_id}")
async def get_campaign(
    campaign_id: str,
    engine: CampaignEngine = Depends(get_campaign_engine),
):
    campaign = engine.get(campaign_id)
    return {"success": True, "data": campaign_to_response(campaign, include_workflow=True)}


# ============================================================================
# HELPERS
# ============================================================================

def _application_to_response(application: CampaignApplication) -> ApplicationResponse:
    return ApplicationResponse(
        id=application.id,
        influencer_id=application.influencer_id,
        influencer_name=application.influencer.display_name if application.influencer else None,
        proposed_rate=application.proposed_rate,
        message=application.message,
        status=application.status,
        applied_at=application.applied_at,
        reviewed_at=application.reviewed_at,
    )


def _selection_to_response(selection: SelectedInfluencer) -> SelectedInfluencerResponse:
    return SelectedInfluencerResponse(
        id=selection.id,
        influencer_id=selection.influencer_id,
        influencer_name=selection.influencer.display_name if selection.influencer else None,
        agreed_rate=selection.agreed_rate,
        status=selection.status,
        assigned_at=selection.assigned_at,
        started_at=selection.started_at,
        submitted_at=selection.submitted_at,
        approved_at=selection.approved_at,
        rejected_at=selection.rejected_at,
        proof_of_work=[ProofOfWorkResponse.model_validate(p) for p in selection.proof_of_work],
    )


def campaign_to_response(campaign: Campaign, include_workflow: bool = False) -> CampaignResponse:
    """Listings leave out applications and selected influencers."""
    return CampaignResponse(
        id=campaign.id,
        brand_id=campaign.brand_id,
        brand_name=campaign.brand.company_name if campaign.brand else None,
        title=campaign.title,
        description=campaign.description,
        category=campaign.category,
        budget=BudgetInput(min=campaign.budget_min, max=campaign.budget_max, currency=campaign.currency or "USD"),
        deliverables=[DeliverableResponse.model_validate(d) for d in campaign.deliverables],
        requirements=campaign.requirements,
        timeline=TimelineInput(
            application_deadline=campaign.application_deadline,
            campaign_start=campaign.campaign_start,
            campaign_end=campaign.campaign_end,
        ),
        status=campaign.status,
        total_budget_allocated=campaign.total_budget_allocated or 0.0,
        applications=[_application_to_response(a) for a in campaign.applications] if include_workflow else None,
        selected_influencers=(
            [_selection_to_response(s) for s in campaign.selected_influencers] if include_workflow else None
        ),
        created_at=campaign.created_at,
        updated_at=campaign.updated_at,
    )
