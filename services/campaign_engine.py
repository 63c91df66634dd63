# Campaign Engine
# Campaign lifecycle, application intake, influencer selection and proof of work.
#
# Campaign is the aggregate root: applications, selected influencers and their
# proof of work are only ever changed through a loaded campaign and committed
# together in one transaction per operation.

import json
import logging
from datetime import datetime, timezone
from typing import List, Optional, Tuple, Union

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from config.app_config import MAX_PROOF_FILES
from core.errors import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    PolicyError,
    StateError,
    ValidationError,
)
from core.storage import FileStorage, IncomingFile, get_file_storage
from database.models import User, UserRole
from database.marketplace_models import (
    ApplicationStatusDB,
    Campaign,
    CampaignApplication,
    CampaignDeliverable,
    CampaignStatusDB,
    CategoryDB,
    InfluencerStatusDB,
    ProofOfWork,
    SelectedInfluencer,
    SelectionStatusDB,
)
from schemas.forms import build_model
from schemas.marketplace import ApplicationDecision, CampaignCreate, ProofData
from services.notification_service import NotificationService, get_notification_service
from services.profile_service import ProfileService

logger = logging.getLogger(__name__)


# ============================================================================
# SELECTED INFLUENCER STATE MACHINE
# ============================================================================

SELECTION_TRANSITIONS = {
    SelectionStatusDB.ASSIGNED: {SelectionStatusDB.IN_PROGRESS},
    SelectionStatusDB.IN_PROGRESS: {SelectionStatusDB.SUBMITTED},
    SelectionStatusDB.SUBMITTED: {SelectionStatusDB.APPROVED, SelectionStatusDB.REJECTED},
    # Terminal states
    SelectionStatusDB.APPROVED: set(),
    SelectionStatusDB.REJECTED: set(),
}

TRANSITION_TIMESTAMPS = {
    SelectionStatusDB.ASSIGNED: "assigned_at",
    SelectionStatusDB.IN_PROGRESS: "started_at",
    SelectionStatusDB.SUBMITTED: "submitted_at",
    SelectionStatusDB.APPROVED: "approved_at",
    SelectionStatusDB.REJECTED: "rejected_at",
}


def can_transition(from_status: SelectionStatusDB, to_status: SelectionStatusDB) -> bool:
    return to_status in SELECTION_TRANSITIONS.get(from_status, set())


def to_utc_naive(value: datetime) -> datetime:
    """Timestamps are stored as naive UTC."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def parse_enum(enum_cls, value, field: str):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        raise ValidationError(
            f"Invalid {field}: {value}",
            {"field": field, "allowed": [e.value for e in enum_cls]},
        )


class CampaignEngine:
    """
    Owns the campaign lifecycle.

    Every operation loads the campaign aggregate, checks its preconditions,
    mutates it and commits once. Failed preconditions raise a MarketplaceError
    before anything is written.
    """

    def __init__(self, db: Session, storage: Optional[FileStorage] = None,
                 notifications: Optional[NotificationService] = None,
                 profiles: Optional[ProfileService] = None):
        self.db = db
        self.storage = storage or get_file_storage()
        self.notifications = notifications or get_notification_service()
        self.profiles = profiles or ProfileService(db, self.storage, self.notifications)

    # =========================================================================
    # HELPERS
    # =========================================================================

    def get(self, campaign_id: str) -> Campaign:
        campaign = self.db.query(Campaign).filter(Campaign.id == campaign_id).first()
        if campaign is None:
            raise NotFoundError("Campaign not found")
        return campaign

    def _owned_campaign(self, brand_user: User, campaign_id: str) -> Campaign:
        """Load a campaign the user may manage: its owning brand, or any admin."""
        if brand_user.role == UserRole.ADMIN:
            return self.get(campaign_id)

        brand = self.profiles.require_brand(brand_user.id)
        campaign = self.get(campaign_id)
        if campaign.brand_id != brand.id:
            raise AuthorizationError("Not authorized to manage this campaign")
        return campaign

    def _selection(self, campaign: Campaign, influencer_id: str) -> SelectedInfluencer:
        selection = campaign.find_selection(influencer_id)
        if selection is None:
            raise NotFoundError("Influencer is not selected for this campaign")
        return selection

    def _transition(self, selection: SelectedInfluencer, to_status: SelectionStatusDB):
        if not can_transition(selection.status, to_status):
            raise StateError(
                f"Cannot move selected influencer from {selection.status.value} to {to_status.value}",
                {"current_status": selection.status.value, "requested_status": to_status.value},
            )
        selection.status = to_status
        setattr(selection, TRANSITION_TIMESTAMPS[to_status], datetime.utcnow())
        logger.info(
            f"Campaign {selection.campaign_id}: influencer {selection.influencer_id} -> {to_status.value}"
        )

    # =========================================================================
    # CAMPAIGN LIFECYCLE
    # =========================================================================

    def create(self, brand_user: User, spec: CampaignCreate) -> Campaign:
        brand = self.profiles.require_brand(brand_user.id)
        if not brand.has_active_subscription:
            raise PolicyError("Active subscription required to create campaigns")

        if spec.budget.min > spec.budget.max:
            raise ValidationError("Minimum budget cannot exceed maximum budget")
        if not spec.deliverables:
            raise ValidationError("At least one deliverable is required")

        now = datetime.utcnow()
        deadline = to_utc_naive(spec.timeline.application_deadline)
        start = to_utc_naive(spec.timeline.campaign_start)
        end = to_utc_naive(spec.timeline.campaign_end)

        if deadline <= now:
            raise ValidationError("Application deadline must be in the future")
        if start <= deadline:
            raise ValidationError("Campaign start must be after application deadline")
        if end <= start:
            raise ValidationError("Campaign end must be after campaign start")

        campaign = Campaign(
            brand_id=brand.id,
            title=spec.title.strip(),
            description=spec.description.strip(),
            category=spec.category,
            budget_min=spec.budget.min,
            budget_max=spec.budget.max,
            currency=spec.budget.currency.upper(),
            requirements=spec.requirements.model_dump(mode="json") if spec.requirements else {},
            application_deadline=deadline,
            campaign_start=start,
            campaign_end=end,
            status=CampaignStatusDB.ACTIVE,
            total_budget_allocated=0.0,
        )
        campaign.deliverables = [
            CampaignDeliverable(
                position=i,
                type=d.type,
                platform=d.platform,
                quantity=d.quantity,
                description=d.description,
            )
            for i, d in enumerate(spec.deliverables)
        ]
        brand.campaigns_created = (brand.campaigns_created or 0) + 1

        self.db.add(campaign)
        self.db.commit()
        self.db.refresh(campaign)

        logger.info(f"Campaign {campaign.id} '{campaign.title}' created by brand {brand.id}")
        return campaign

    def update_status(self, brand_user: User, campaign_id: str,
                      new_status: Union[CampaignStatusDB, str]) -> Campaign:
        """Any status to any status; only ownership is checked."""
        status = parse_enum(CampaignStatusDB, new_status, "status")
        campaign = self._owned_campaign(brand_user, campaign_id)

        previous = campaign.status
        campaign.status = status
        self.db.commit()
        self.db.refresh(campaign)

        logger.info(f"Campaign {campaign.id} status {previous.value} -> {status.value}")
        return campaign

    # =========================================================================
    # APPLICATIONS
    # =========================================================================

    def apply(self, influencer_user: User, campaign_id: str, proposed_rate: float,
              message: Optional[str] = None) -> CampaignApplication:
        if proposed_rate is None or proposed_rate < 0:
            raise ValidationError("Proposed rate must be a non-negative number")

        influencer = self.profiles.require_influencer(influencer_user.id)
        if influencer.status != InfluencerStatusDB.APPROVED:
            raise PolicyError("Influencer profile must be approved to apply")

        campaign = self.get(campaign_id)
        if campaign.status != CampaignStatusDB.ACTIVE:
            raise PolicyError("Campaign is not active")
        if datetime.utcnow() > campaign.application_deadline:
            raise PolicyError("Application deadline has passed")
        if campaign.find_application(influencer.id) is not None:
            raise ConflictError("Already applied to this campaign")

        application = CampaignApplication(
            campaign_id=campaign.id,
            influencer_id=influencer.id,
            proposed_rate=proposed_rate,
            message=message.strip() if message else None,
            status=ApplicationStatusDB.PENDING,
            applied_at=datetime.utcnow(),
        )
        self.db.add(application)
        try:
            self.db.commit()
        except IntegrityError:
            # Lost a race against a concurrent apply for the same pair
            self.db.rollback()
            raise ConflictError("Already applied to this campaign")
        self.db.refresh(application)

        logger.info(f"Influencer {influencer.id} applied to campaign {campaign.id} at rate {proposed_rate}")
        brand = campaign.brand
        self.notifications.notify_campaign_application(
            brand.user.email if brand and brand.user else None,
            influencer.display_name,
            campaign.title,
        )
        return application

    def review_application(self, brand_user: User, campaign_id: str, application_id: str,
                           decision: Union[ApplicationDecision, str],
                           agreed_rate: Optional[float] = None) -> CampaignApplication:
        """
        Accept or reject a pending application.

        Accepting creates (or resets) the influencer's selection in `assigned`
        with the agreed rate, defaulting to the proposed rate, and recomputes
        the campaign's allocated budget. Rejecting only marks the application.
        """
        decision = parse_enum(ApplicationDecision, decision, "decision")
        if agreed_rate is not None and agreed_rate < 0:
            raise ValidationError("Agreed rate must be a non-negative number")

        campaign = self._owned_campaign(brand_user, campaign_id)
        application = next((a for a in campaign.applications if a.id == application_id), None)
        if application is None:
            raise NotFoundError("Application not found")
        if application.status != ApplicationStatusDB.PENDING:
            raise StateError(f"Application has already been {application.status.value}")

        now = datetime.utcnow()
        application.reviewed_at = now

        if decision == ApplicationDecision.REJECT:
            application.status = ApplicationStatusDB.REJECTED
            self.db.commit()
            logger.info(f"Application {application.id} on campaign {campaign.id} rejected")
            return application

        application.status = ApplicationStatusDB.ACCEPTED
        rate = agreed_rate if agreed_rate is not None else application.proposed_rate

        selection = campaign.find_selection(application.influencer_id)
        if selection is None:
            selection = SelectedInfluencer(influencer_id=application.influencer_id)
            campaign.selected_influencers.append(selection)
        selection.agreed_rate = rate
        selection.status = SelectionStatusDB.ASSIGNED
        selection.assigned_at = now

        campaign.calculate_total_budget()
        self.db.commit()
        self.db.refresh(application)

        logger.info(
            f"Application {application.id} accepted; influencer {application.influencer_id} "
            f"assigned to campaign {campaign.id} at {rate}"
        )
        influencer = application.influencer
        self.notifications.notify_campaign_accepted(
            influencer.user.email if influencer and influencer.user else None,
            campaign.title,
            campaign.brand.company_name if campaign.brand else "",
        )
        return application

    # =========================================================================
    # SELECTED INFLUENCERS
    # =========================================================================

    def start_work(self, actor_user: User, campaign_id: str, influencer_id: str) -> SelectedInfluencer:
        """assigned -> in_progress, by the selected influencer or the owning brand."""
        campaign = self.get(campaign_id)
        selection = self._selection(campaign, influencer_id)

        if actor_user.role != UserRole.ADMIN:
            influencer = self.profiles.find_influencer_by_user(actor_user.id)
            brand = self.profiles.find_brand_by_user(actor_user.id)
            is_selected = influencer is not None and influencer.id == influencer_id
            is_owner = brand is not None and brand.id == campaign.brand_id
            if not (is_selected or is_owner):
                raise AuthorizationError("Not authorized for this campaign")

        self._transition(selection, SelectionStatusDB.IN_PROGRESS)
        self.db.commit()
        self.db.refresh(selection)
        return selection

    def submit_proof(self, influencer_user: User, campaign_id: str,
                     proof_data: Union[ProofData, dict, str, None],
                     files: Optional[List[IncomingFile]] = None) -> SelectedInfluencer:
        files = files or []
        influencer = self.profiles.require_influencer(influencer_user.id)
        campaign = self.get(campaign_id)

        selection = campaign.find_selection(influencer.id)
        if selection is None:
            raise AuthorizationError("Not authorized for this campaign")
        if selection.status != SelectionStatusDB.IN_PROGRESS:
            raise StateError(
                "Campaign is not in progress",
                {"current_status": selection.status.value},
            )

        proof = self._parse_proof_data(proof_data)
        if len(files) > MAX_PROOF_FILES:
            raise ValidationError(f"At most {MAX_PROOF_FILES} proof files are allowed")
        if not files and not proof.urls:
            raise ValidationError("At least one proof file or URL is required")

        now = datetime.utcnow()
        position = len(selection.proof_of_work)
        stored = []
        try:
            items = []
            for f in files:
                stored.append(self.storage.store(f))
                items.append(ProofOfWork(
                    url=stored[-1],
                    platform=proof.platform or "unknown",
                    type=proof.type or "file",
                ))
            for entry in proof.urls:
                items.append(ProofOfWork(
                    url=entry.url,
                    platform=entry.platform,
                    type=entry.type or "link",
                ))
            for item in items:
                item.position = position
                item.submitted_at = now
                position += 1
                selection.proof_of_work.append(item)

            self._transition(selection, SelectionStatusDB.SUBMITTED)
            self.db.commit()
        except Exception:
            self.db.rollback()
            for url in stored:
                self.storage.delete(url)
            raise

        self.db.refresh(selection)
        return selection

    def _parse_proof_data(self, proof_data) -> ProofData:
        if proof_data is None or proof_data == "":
            return ProofData()
        if isinstance(proof_data, ProofData):
            return proof_data
        if isinstance(proof_data, str):
            try:
                proof_data = json.loads(proof_data)
            except ValueError:
                raise ValidationError("Invalid proof data format")
        if not isinstance(proof_data, dict):
            raise ValidationError("Invalid proof data format")
        return build_model(ProofData, proof_data)

    def review_submission(self, brand_user: User, campaign_id: str, influencer_id: str,
                          approve: bool) -> SelectedInfluencer:
        """submitted -> approved | rejected, by the owning brand."""
        campaign = self._owned_campaign(brand_user, campaign_id)
        selection = self._selection(campaign, influencer_id)

        target = SelectionStatusDB.APPROVED if approve else SelectionStatusDB.REJECTED
        self._transition(selection, target)
        if approve and selection.influencer is not None:
            selection.influencer.completed_campaigns = (selection.influencer.completed_campaigns or 0) + 1

        self.db.commit()
        self.db.refresh(selection)
        return selection

    def update_agreed_rate(self, brand_user: User, campaign_id: str, influencer_id: str,
                           rate: float) -> Campaign:
        if rate is None or rate < 0:
            raise ValidationError("Agreed rate must be a non-negative number")

        campaign = self._owned_campaign(brand_user, campaign_id)
        selection = self._selection(campaign, influencer_id)
        selection.agreed_rate = rate
        campaign.calculate_total_budget()

        self.db.commit()
        self.db.refresh(campaign)
        return campaign

    # =========================================================================
    # QUERIES
    # =========================================================================

    def list_campaigns(self, category: Optional[str] = None, min_budget: Optional[float] = None,
                       max_budget: Optional[float] = None, status: Optional[str] = "active",
                       page: int = 1, limit: int = 10) -> Tuple[List[Campaign], int]:
        """Filtered listing, newest first. min_budget bounds budget.min, max_budget bounds budget.max."""
        query = self.db.query(Campaign)

        if status:
            query = query.filter(Campaign.status == parse_enum(CampaignStatusDB, status, "status"))
        if category:
            query = query.filter(Campaign.category == parse_enum(CategoryDB, category, "category"))
        if min_budget is not None:
            query = query.filter(Campaign.budget_min >= min_budget)
        if max_budget is not None:
            query = query.filter(Campaign.budget_max <= max_budget)

        total = query.count()
        items = (
            query.order_by(Campaign.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return items, total

    def list_for_brand(self, brand_user: User) -> List[Campaign]:
        brand = self.profiles.require_brand(brand_user.id)
        return (
            self.db.query(Campaign)
            .filter(Campaign.brand_id == brand.id)
            .order_by(Campaign.created_at.desc())
            .all()
        )
