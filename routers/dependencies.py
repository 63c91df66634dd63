# Shared router dependencies
# Builds request-scoped services on top of the database session

import math

from fastapi import Depends
from sqlalchemy.orm import Session

from core.storage import FileStorage, get_file_storage
from database.config import get_db, SessionLocal
from jobs.stats_sync import StatsSyncJob
from schemas.marketplace import Pagination
from services.admin_service import AdminService
from services.campaign_engine import CampaignEngine
from services.chat_engine import ChatEngine
from services.notification_service import NotificationService, get_notification_service
from services.profile_service import ProfileService


def get_profile_service(
    db: Session = Depends(get_db),
    storage: FileStorage = Depends(get_file_storage),
    notifications: NotificationService = Depends(get_notification_service),
) -> ProfileService:
    return ProfileService(db, storage, notifications)


def get_campaign_engine(
    db: Session = Depends(get_db),
    storage: FileStorage = Depends(get_file_storage),
    notifications: NotificationService = Depends(get_notification_service),
) -> CampaignEngine:
    return CampaignEngine(db, storage, notifications)


def get_chat_engine(
    db: Session = Depends(get_db),
    storage: FileStorage = Depends(get_file_storage),
) -> ChatEngine:
    return ChatEngine(db, storage)


def get_admin_service(
    db: Session = Depends(get_db),
    notifications: NotificationService = Depends(get_notification_service),
) -> AdminService:
    return AdminService(db, notifications)


def get_stats_sync_job() -> StatsSyncJob:
    return StatsSyncJob(SessionLocal)


def paginate(page: int, limit: int, total: int) -> Pagination:
    return Pagination(
        page=page,
        limit=limit,
        total=total,
        pages=math.ceil(total / limit) if limit else 0,
    )
