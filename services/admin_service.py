# Admin Service
# Moderation actions and reporting queries for the admin dashboard

import logging
from datetime import datetime, timedelta
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from core.errors import NotFoundError, PolicyError, StateError, ValidationError
from database.models import User, UserRole
from database.marketplace_models import (
    BrandProfile,
    Campaign,
    CampaignStatusDB,
    CategoryDB,
    InfluencerProfile,
    InfluencerStatusDB,
    KycDocument,
)
from jobs.stats_sync import StatsSyncJob, SyncSummary
from services.campaign_engine import parse_enum
from services.notification_service import NotificationService, get_notification_service
from schemas.marketplace import VerifyAction

logger = logging.getLogger(__name__)


class AdminService:
    def __init__(self, db: Session, notifications: Optional[NotificationService] = None):
        self.db = db
        self.notifications = notifications or get_notification_service()

    # =========================================================================
    # REPORTING
    # =========================================================================

    def dashboard(self) -> dict:
        db = self.db
        return {
            "users": {
                "total": db.query(User).count(),
                "influencers": db.query(InfluencerProfile).count(),
                "brands": db.query(BrandProfile).count(),
            },
            "campaigns": {
                "total": db.query(Campaign).count(),
                "active": db.query(Campaign).filter(Campaign.status == CampaignStatusDB.ACTIVE).count(),
                "completed": db.query(Campaign).filter(Campaign.status == CampaignStatusDB.COMPLETED).count(),
            },
            "pending": {
                "influencer_verifications": db.query(InfluencerProfile).filter(
                    InfluencerProfile.status == InfluencerStatusDB.PENDING_VERIFICATION
                ).count(),
            },
        }

    def analytics(self, period_days: int = 30) -> dict:
        """Growth over the last period_days, with the campaign completion rate."""
        if period_days < 1:
            raise ValidationError("Period must be at least one day")

        db = self.db
        start = datetime.utcnow() - timedelta(days=period_days)

        new_campaigns = db.query(Campaign).filter(Campaign.created_at >= start).count()
        completed_campaigns = db.query(Campaign).filter(
            Campaign.status == CampaignStatusDB.COMPLETED,
            Campaign.updated_at >= start,
        ).count()

        return {
            "period": f"{period_days} days",
            "growth": {
                "users": db.query(User).filter(User.created_at >= start).count(),
                "influencers": db.query(InfluencerProfile).filter(InfluencerProfile.created_at >= start).count(),
                "brands": db.query(BrandProfile).filter(BrandProfile.created_at >= start).count(),
                "campaigns": new_campaigns,
                "completed_campaigns": completed_campaigns,
            },
            "engagement": {
                "campaign_completion_rate": round(completed_campaigns / new_campaigns * 100, 2) if new_campaigns else 0,
            },
        }

    # =========================================================================
    # INFLUENCER VERIFICATION
    # =========================================================================

    def pending_influencers(self, page: int = 1, limit: int = 10) -> Tuple[List[InfluencerProfile], int]:
        query = self.db.query(InfluencerProfile).filter(
            InfluencerProfile.status == InfluencerStatusDB.PENDING_VERIFICATION
        )
        total = query.count()
        items = query.order_by(InfluencerProfile.created_at.desc()).offset((page - 1) * limit).limit(limit).all()
        return items, total

    def verify_influencer(self, influencer_id: str, action, rejection_reason: Optional[str] = None) -> InfluencerProfile:
        action = parse_enum(VerifyAction, action, "action")

        influencer = self.db.query(InfluencerProfile).filter(InfluencerProfile.id == influencer_id).first()
        if influencer is None:
            raise NotFoundError("Influencer not found")
        if influencer.status != InfluencerStatusDB.PENDING_VERIFICATION:
            raise StateError("Influencer is not pending verification")

        if action == VerifyAction.APPROVE:
            influencer.status = InfluencerStatusDB.APPROVED
            influencer.approved_at = datetime.utcnow()
            influencer.rejection_reason = None
        else:
            influencer.status = InfluencerStatusDB.REJECTED
            influencer.rejection_reason = rejection_reason or "No reason provided"
            influencer.approved_at = None

        self.db.commit()
        self.db.refresh(influencer)
        logger.info(f"Influencer {influencer.id} {influencer.status.value}")

        email = influencer.user.email if influencer.user else None
        if action == VerifyAction.APPROVE:
            self.notifications.notify_influencer_approved(email, influencer.display_name)
        else:
            self.notifications.notify_influencer_rejected(email, influencer.display_name, influencer.rejection_reason)
        return influencer

    def verify_kyc_document(self, influencer_id: str, document_id: str, verified: bool) -> KycDocument:
        document = self.db.query(KycDocument).filter(
            KycDocument.id == document_id,
            KycDocument.influencer_id == influencer_id,
        ).first()
        if document is None:
            if self.db.query(InfluencerProfile.id).filter(InfluencerProfile.id == influencer_id).first() is None:
                raise NotFoundError("Influencer not found")
            raise NotFoundError("KYC document not found")

        document.verified = verified
        self.db.commit()
        self.db.refresh(document)
        return document

    # =========================================================================
    # USERS AND CAMPAIGNS
    # =========================================================================

    def list_users(self, role: Optional[str] = None, is_active: Optional[bool] = None,
                   search: Optional[str] = None, page: int = 1, limit: int = 20) -> Tuple[List[User], int]:
        query = self.db.query(User)
        if role:
            query = query.filter(User.role == parse_enum(UserRole, role, "role"))
        if is_active is not None:
            query = query.filter(User.is_active == is_active)
        if search:
            query = query.filter(User.email.ilike(f"%{search}%"))

        total = query.count()
        items = query.order_by(User.created_at.desc()).offset((page - 1) * limit).limit(limit).all()
        return items, total

    def toggle_user_status(self, user_id: str) -> User:
        user = self.db.query(User).filter(User.id == user_id).first()
        if user is None:
            raise NotFoundError("User not found")
        if user.role == UserRole.ADMIN:
            raise PolicyError("Cannot deactivate admin users")

        user.is_active = not user.is_active
        self.db.commit()
        self.db.refresh(user)
        logger.info(f"User {user.id} {'activated' if user.is_active else 'deactivated'}")
        return user

    def list_campaigns(self, status: Optional[str] = None, category: Optional[str] = None,
                       page: int = 1, limit: int = 20) -> Tuple[List[Campaign], int]:
        query = self.db.query(Campaign)
        if status:
            query = query.filter(Campaign.status == parse_enum(CampaignStatusDB, status, "status"))
        if category:
            query = query.filter(Campaign.category == parse_enum(CategoryDB, category, "category"))

        total = query.count()
        items = query.order_by(Campaign.created_at.desc()).offset((page - 1) * limit).limit(limit).all()
        return items, total

    # =========================================================================
    # JOBS
    # =========================================================================

    def trigger_stats_sync(self, job: StatsSyncJob) -> SyncSummary:
        logger.info("Manually triggering social media stats update...")
        return job.sync_all()
