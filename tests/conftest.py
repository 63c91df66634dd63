"""
Root conftest.py - database, storage, notification and API client fixtures.

Tests run against an in-memory SQLite database. Tables are created and
dropped around every test so each one starts empty.
"""
import os
import sys
import tempfile

# Must be set before any project module reads config.app_config
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENABLE_SCHEDULER"] = "false"
os.environ["EMAIL_HOST"] = ""
os.environ["STORAGE_BACKEND"] = "local"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="marketplace-uploads-")

# Add project root to path
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, PROJECT_ROOT)

import pytest
from fastapi.testclient import TestClient

import auth.utils
from core.storage import LocalFileStorage, get_file_storage
from database.config import SessionLocal, engine, get_db
from database.models import Base, UserRole
from database import marketplace_models, chat_models  # noqa: F401  register tables
from services.admin_service import AdminService
from services.campaign_engine import CampaignEngine
from services.chat_engine import ChatEngine
from services.notification_service import NotificationService, get_notification_service
from services.profile_service import ProfileService

from tests.fixtures import RecordingSender, make_brand, make_influencer, make_user


@pytest.fixture(autouse=True)
def fast_password_hashing(monkeypatch):
    """Minimum bcrypt cost keeps user factories fast."""
    monkeypatch.setattr(auth.utils, "BCRYPT_ROUNDS", 4)


# =============================================================================
# Infrastructure
# =============================================================================

@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def storage(tmp_path):
    return LocalFileStorage(str(tmp_path / "uploads"))


@pytest.fixture
def sender():
    return RecordingSender()


@pytest.fixture
def notifications(sender):
    return NotificationService(sender=sender)


# =============================================================================
# Services
# =============================================================================

@pytest.fixture
def profiles(db, storage, notifications):
    return ProfileService(db, storage, notifications)


@pytest.fixture
def campaigns(db, storage, notifications, profiles):
    return CampaignEngine(db, storage, notifications, profiles)


@pytest.fixture
def chats(db, storage):
    return ChatEngine(db, storage)


@pytest.fixture
def admin_service(db, notifications):
    return AdminService(db, notifications)


# =============================================================================
# Actors
# =============================================================================

@pytest.fixture
def brand_user(db):
    user = make_user(db, UserRole.BRAND)
    make_brand(db, user)
    return user


@pytest.fixture
def influencer_user(db):
    user = make_user(db, UserRole.INFLUENCER)
    make_influencer(db, user)
    return user


@pytest.fixture
def admin_user(db):
    return make_user(db, UserRole.ADMIN)


# =============================================================================
# API
# =============================================================================

@pytest.fixture
def client(db, storage, notifications):
    from server import app

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_file_storage] = lambda: storage
    app.dependency_overrides[get_notification_service] = lambda: notifications
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
