"""
Admin Router
Dashboard statistics, influencer verification, user moderation and jobs
"""

from fastapi import APIRouter, Depends, Query
from typing import Optional

from database.models import User
from schemas.marketplace import InfluencerVerifyRequest, KycVerifyRequest, UserResponse, KycDocumentResponse
from auth.decorators import require_admin
from jobs.stats_sync import StatsSyncJob
from services.admin_service import AdminService
from routers.dependencies import get_admin_service, get_stats_sync_job, paginate
from routers.campaigns import campaign_to_response
from routers.influencers import influencer_to_response

router = APIRouter(prefix="/admin", tags=["Admin"])


# ============================================================================
# DASHBOARD
# ============================================================================

@router.get("/dashboard")
async def get_dashboard(
    current_user: User = Depends(require_admin()),
    admin: AdminService = Depends(get_admin_service),
):
    return {"success": True, "data": admin.dashboard()}


@router.get("/analytics")
async def get_analytics(
    period: int = Query(30, ge=1, le=365, description="Period in days"),
    current_user: User = Depends(require_admin()),
    admin: AdminService = Depends(get_admin_service),
):
    return {"success": True, "data": admin.analytics(period)}


# ============================================================================
# INFLUENCER VERIFICATION
# ============================================================================

@router.get("/influencers/pending")
async def get_pending_influencers(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: User = Depends(require_admin()),
    admin: AdminService = Depends(get_admin_service),
):
    items, total = admin.pending_influencers(page, limit)
    return {
        "success": True,
        "data": [influencer_to_response(p, include_private=True) for p in items],
        "pagination": paginate(page, limit, total),
    }


@router.put("/influencers/{influencer_id}/verify")
async def verify_influencer(
    influencer_id: str,
    payload: InfluencerVerifyRequest,
    current_user: User = Depends(require_admin()),
    admin: AdminService = Depends(get_admin_service),
):
    """Approve or reject a pending influencer. The influencer is emailed either way."""
    influencer = admin.verify_influencer(influencer_id, payload.action, payload.rejection_reason)
    return {
        "success": True,
        "message": f"Influencer {influencer.status.value}",
        "data": influencer_to_response(influencer, include_private=True),
    }


@router.put("/kyc/{influencer_id}/{document_id}/verify")
async def verify_kyc_document(
    influencer_id: str,
    document_id: str,
    payload: KycVerifyRequest,
    current_user: User = Depends(require_admin()),
    admin: AdminService = Depends(get_admin_service),
):
    document = admin.verify_kyc_document(influencer_id, document_id, payload.verified)
    return {
        "success": True,
        "message": "KYC document updated",
        "data": KycDocumentResponse.model_validate(document),
    }


# ============================================================================
# USERS
# ============================================================================

@router.get("/users")
async def list_users(
    role: Optional[str] = Query(None),
    is_active: Optional[bool] = Query(None),
    search: Optional[str] = Query(None, description="Email substring"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    current_user: User = Depends(require_admin()),
    admin: AdminService = Depends(get_admin_service),
):
    items, total = admin.list_users(role=role, is_active=is_active, search=search, page=page, limit=limit)
    return {
        "success": True,
        "data": [UserResponse.model_validate(u) for u in items],
        "pagination": paginate(page, limit, total),
    }


@router.put("/users/{user_id}/toggle-status")
async def toggle_user_status(
    user_id: str,
    current_user: User = Depends(require_admin()),
    admin: AdminService = Depends(get_admin_service),
):
    user = admin.toggle_user_status(user_id)
    return {
        "success": True,
        "message": f"User {'activated' if user.is_active else 'deactivated'} successfully",
        "data": UserResponse.model_validate(user),
    }


# ============================================================================
# CAMPAIGNS
# ============================================================================

@router.get("/campaigns")
async def list_campaigns(
    status: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    current_user: User = Depends(require_admin()),
    admin: AdminService = Depends(get_admin_service),
):
    items, total = admin.list_campaigns(status=status, category=category, page=page, limit=limit)
    return {
        "success": True,
        "data": [campaign_to_response(c) for c in items],
        "pagination": paginate(page, limit, total),
    }


# ============================================================================
# JOBS
# ============================================================================

@router.post("/stats-sync")
async def trigger_stats_sync(
    current_user: User = Depends(require_admin()),
    admin: AdminService = Depends(get_admin_service),
    job: StatsSyncJob = Depends(get_stats_sync_job),
):
    """Run the social stats refresh now instead of waiting for the daily schedule."""
    summary = admin.trigger_stats_sync(job)
    return {"success": True, "message": "Stats sync completed", "data": summary.to_dict()}
