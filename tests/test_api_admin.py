"""API tests for admin moderation, reporting and jobs."""
import random

from database.config import SessionLocal
from database.models import UserRole
from database.marketplace_models import InfluencerStatusDB, KycDocument
from jobs.stats_sync import MockStatsProvider, StatsSyncJob
from routers.dependencies import get_stats_sync_job
from tests.fixtures import auth_headers, make_campaign, make_influencer, make_user


class TestAdminAccess:
    def test_non_admins_are_rejected(self, client, brand_user, influencer_user):
        for user in (brand_user, influencer_user):
            response = client.get("/api/admin/dashboard", headers=auth_headers(user))
            assert response.status_code == 403
            assert response.json()["message"] == "Admin access required"

    def test_dashboard(self, client, campaigns, admin_user, brand_user):
        make_campaign(campaigns, brand_user)

        data = client.get("/api/admin/dashboard", headers=auth_headers(admin_user)).json()["data"]

        assert data["users"]["brands"] == 1
        assert data["campaigns"]["active"] == 1

    def test_analytics_period_bounds(self, client, admin_user):
        headers = auth_headers(admin_user)
        assert client.get("/api/admin/analytics?period=7", headers=headers).json()["data"]["period"] == "7 days"
        assert client.get("/api/admin/analytics?period=0", headers=headers).status_code == 400


class TestInfluencerVerificationApi:
    def test_approved_influencer_can_apply(self, client, db, campaigns, admin_user, brand_user, sender):
        user = make_user(db, UserRole.INFLUENCER)
        profile = make_influencer(db, user, status=InfluencerStatusDB.PENDING_VERIFICATION)
        campaign = make_campaign(campaigns, brand_user)

        pending = client.get("/api/admin/influencers/pending", headers=auth_headers(admin_user)).json()
        assert [p["id"] for p in pending["data"]] == [profile.id]

        response = client.put(
            f"/api/admin/influencers/{profile.id}/verify", json={"action": "approve"}, headers=auth_headers(admin_user),
        )
        assert response.json()["message"] == "Influencer approved"
        assert sender.sent[-1]["template"] == "influencer_approved"

        response = client.post(
            f"/api/campaigns/{campaign.id}/apply", json={"proposed_rate": 400}, headers=auth_headers(user),
        )
        assert response.status_code == 200

    def test_reject_with_reason(self, client, db, admin_user):
        profile = make_influencer(db, status=InfluencerStatusDB.PENDING_VERIFICATION)

        response = client.put(
            f"/api/admin/influencers/{profile.id}/verify",
            json={"action": "reject", "rejection_reason": "ID photo unreadable"},
            headers=auth_headers(admin_user),
        )

        data = response.json()["data"]
        assert data["status"] == "rejected"
        assert data["rejection_reason"] == "ID photo unreadable"

    def test_unknown_action(self, client, db, admin_user):
        profile = make_influencer(db, status=InfluencerStatusDB.PENDING_VERIFICATION)
        response = client.put(
            f"/api/admin/influencers/{profile.id}/verify", json={"action": "ban"}, headers=auth_headers(admin_user),
        )
        assert response.status_code == 400

    def test_verify_kyc_document(self, client, db, admin_user):
        profile = make_influencer(db)
        profile.kyc_documents.append(KycDocument(document_url="uploads/documents/id.pdf"))
        db.commit()
        document_id = profile.kyc_documents[0].id

        response = client.put(
            f"/api/admin/kyc/{profile.id}/{document_id}/verify", json={"verified": True},
            headers=auth_headers(admin_user),
        )

        assert response.status_code == 200
        assert response.json()["data"]["verified"] is True


class TestUserModerationApi:
    def test_deactivated_user_loses_access(self, client, admin_user, brand_user):
        response = client.put(f"/api/admin/users/{brand_user.id}/toggle-status", headers=auth_headers(admin_user))

        assert response.json()["message"] == "User deactivated successfully"
        assert client.get("/api/auth/me", headers=auth_headers(brand_user)).status_code == 403

        response = client.put(f"/api/admin/users/{brand_user.id}/toggle-status", headers=auth_headers(admin_user))
        assert response.json()["message"] == "User activated successfully"

    def test_list_users_by_role(self, client, admin_user, brand_user, influencer_user):
        body = client.get("/api/admin/users?role=brand", headers=auth_headers(admin_user)).json()
        assert [u["id"] for u in body["data"]] == [brand_user.id]
        assert body["pagination"]["total"] == 1

    def test_list_campaigns(self, client, campaigns, admin_user, brand_user):
        make_campaign(campaigns, brand_user)
        body = client.get("/api/admin/campaigns?status=active", headers=auth_headers(admin_user)).json()
        assert body["pagination"]["total"] == 1


class TestStatsSyncApi:
    def test_manual_sync(self, client, admin_user, influencer_user):
        from server import app

        app.dependency_overrides[get_stats_sync_job] = lambda: StatsSyncJob(
            SessionLocal, MockStatsProvider(random.Random(1))
        )

        response = client.post("/api/admin/stats-sync", headers=auth_headers(admin_user))

        assert response.status_code == 200
        assert response.json()["data"] == {"processed": 1, "updated": 1, "failed": 0}
