"""API tests for the campaign lifecycle endpoints."""
from database.models import UserRole
from database.marketplace_models import InfluencerProfile
from tests.fixtures import (
    auth_headers,
    make_brand,
    make_campaign_payload,
    make_influencer,
    make_user,
    proof_payload,
)


def _create(client, user, **overrides):
    response = client.post("/api/campaigns/create", json=make_campaign_payload(**overrides), headers=auth_headers(user))
    assert response.status_code == 201, response.text
    return response.json()["data"]


def _influencer_id(db, user):
    return db.query(InfluencerProfile).filter(InfluencerProfile.user_id == user.id).one().id


class TestCampaignWorkflowApi:
    def test_full_workflow(self, client, db, brand_user, influencer_user, sender):
        brand = auth_headers(brand_user)
        creator = auth_headers(influencer_user)
        influencer_id = _influencer_id(db, influencer_user)

        campaign = _create(client, brand_user)
        assert campaign["status"] == "active"
        assert campaign["applications"] == []
        campaign_id = campaign["id"]

        response = client.post(
            f"/api/campaigns/{campaign_id}/apply",
            json={"proposed_rate": 800, "message": "Love this brand"},
            headers=creator,
        )
        assert response.status_code == 200
        applied = response.json()["data"]
        assert applied["application_status"] == "pending"
        assert "campaign_application" in sender.templates

        response = client.post(
            f"/api/campaigns/{campaign_id}/applications/{applied['application_id']}/review",
            json={"decision": "accept"},
            headers=brand,
        )
        body = response.json()
        assert body["message"] == "Application accepted"
        assert body["data"]["campaign"]["total_budget_allocated"] == 800
        assert body["data"]["campaign"]["selected_influencers"][0]["status"] == "assigned"

        response = client.post(f"/api/campaigns/{campaign_id}/influencers/{influencer_id}/start", headers=creator)
        assert response.json()["data"]["status"] == "in_progress"

        response = client.post(
            f"/api/campaigns/{campaign_id}/proof",
            data={"proofData": proof_payload("https://instagram.com/p/abc")},
            files=[("proofFiles", ("shot.png", b"\x89PNG", "image/png"))],
            headers=creator,
        )
        assert response.status_code == 200
        proof = response.json()["data"]
        assert proof["status"] == "submitted"
        assert proof["proof_of_work"][0]["url"].startswith("uploads/misc/")
        assert proof["proof_of_work"][1]["url"] == "https://instagram.com/p/abc"

        response = client.post(
            f"/api/campaigns/{campaign_id}/influencers/{influencer_id}/review",
            json={"approve": True},
            headers=brand,
        )
        assert response.json()["message"] == "Submission approved"
        assert response.json()["data"]["approved_at"] is not None

    def test_update_agreed_rate(self, client, db, brand_user, influencer_user):
        campaign = _create(client, brand_user)
        applied = client.post(
            f"/api/campaigns/{campaign['id']}/apply", json={"proposed_rate": 600}, headers=auth_headers(influencer_user),
        ).json()["data"]
        client.post(
            f"/api/campaigns/{campaign['id']}/applications/{applied['application_id']}/review",
            json={"decision": "accept", "agreed_rate": 700},
            headers=auth_headers(brand_user),
        )

        response = client.put(
            f"/api/campaigns/{campaign['id']}/influencers/{_influencer_id(db, influencer_user)}/rate",
            json={"agreed_rate": 950},
            headers=auth_headers(brand_user),
        )

        assert response.status_code == 200
        assert response.json()["data"]["total_budget_allocated"] == 950

    def test_proof_before_start_is_rejected(self, client, db, brand_user, influencer_user):
        campaign = _create(client, brand_user)
        response = client.post(
            f"/api/campaigns/{campaign['id']}/proof",
            data={"proofData": proof_payload("https://instagram.com/p/abc")},
            headers=auth_headers(influencer_user),
        )
        assert response.status_code == 403
        assert response.json()["error"] == "AuthorizationError"

    def test_empty_proof(self, client, db, brand_user, influencer_user, campaigns):
        campaign = _create(client, brand_user)
        influencer_id = _influencer_id(db, influencer_user)
        application = campaigns.apply(influencer_user, campaign["id"], 500)
        campaigns.review_application(brand_user, campaign["id"], application.id, "accept")
        campaigns.start_work(influencer_user, campaign["id"], influencer_id)

        response = client.post(
            f"/api/campaigns/{campaign['id']}/proof",
            data={"proofData": proof_payload()},
            headers=auth_headers(influencer_user),
        )

        assert response.status_code == 400
        assert response.json()["message"] == "At least one proof file or URL is required"


class TestCampaignPolicyApi:
    def test_subscription_required(self, client, db):
        user = make_user(db, UserRole.BRAND)
        make_brand(db, user, active_subscription=False)

        response = client.post("/api/campaigns/create", json=make_campaign_payload(), headers=auth_headers(user))

        assert response.status_code == 403
        assert response.json()["error"] == "PolicyError"

    def test_influencers_cannot_create(self, client, influencer_user):
        response = client.post(
            "/api/campaigns/create", json=make_campaign_payload(), headers=auth_headers(influencer_user),
        )
        assert response.status_code == 403

    def test_invalid_budget_rejected(self, client, brand_user):
        response = client.post(
            "/api/campaigns/create",
            json=make_campaign_payload(budget={"min": 3000, "max": 100}),
            headers=auth_headers(brand_user),
        )
        assert response.status_code == 400

    def test_duplicate_application(self, client, brand_user, influencer_user):
        campaign = _create(client, brand_user)
        url = f"/api/campaigns/{campaign['id']}/apply"

        client.post(url, json={"proposed_rate": 500}, headers=auth_headers(influencer_user))
        response = client.post(url, json={"proposed_rate": 500}, headers=auth_headers(influencer_user))

        assert response.status_code == 409
        assert response.json()["message"] == "Already applied to this campaign"

    def test_other_brand_cannot_manage(self, client, db, brand_user):
        campaign = _create(client, brand_user)
        rival = make_user(db, UserRole.BRAND)
        make_brand(db, rival, company_name="Rival")

        response = client.put(
            f"/api/campaigns/{campaign['id']}/status", json={"status": "paused"}, headers=auth_headers(rival),
        )
        assert response.status_code == 403

    def test_invalid_status_value(self, client, brand_user):
        campaign = _create(client, brand_user)
        response = client.put(
            f"/api/campaigns/{campaign['id']}/status", json={"status": "archived"}, headers=auth_headers(brand_user),
        )
        assert response.status_code == 400
        assert response.json()["error"] == "ValidationError"


class TestCampaignQueriesApi:
    def test_public_listing(self, client, brand_user):
        _create(client, brand_user, title="Fashion drop")
        _create(client, brand_user, title="Tech review", category="tech")
        _create(client, brand_user, title="Big spender", budget={"min": 5000, "max": 9000})

        response = client.get("/api/campaigns?limit=2")
        body = response.json()
        assert body["pagination"] == {"page": 1, "limit": 2, "total": 3, "pages": 2}
        assert body["data"][0]["applications"] is None

        titles = [c["title"] for c in client.get("/api/campaigns?category=tech").json()["data"]]
        assert titles == ["Tech review"]

        titles = [c["title"] for c in client.get("/api/campaigns?min_budget=1000").json()["data"]]
        assert titles == ["Big spender"]

    def test_paused_campaigns_hidden_by_default(self, client, brand_user):
        campaign = _create(client, brand_user)
        client.put(
            f"/api/campaigns/{campaign['id']}/status", json={"status": "paused"}, headers=auth_headers(brand_user),
        )

        assert client.get("/api/campaigns").json()["data"] == []
        assert len(client.get("/api/campaigns?status=paused").json()["data"]) == 1

    def test_detail_includes_applications(self, client, db, brand_user, influencer_user):
        campaign = _create(client, brand_user)
        client.post(
            f"/api/campaigns/{campaign['id']}/apply", json={"proposed_rate": 500}, headers=auth_headers(influencer_user),
        )

        data = client.get(f"/api/campaigns/{campaign['id']}").json()["data"]

        assert data["brand_name"] == "Acme Apparel"
        assert data["applications"][0]["influencer_name"] == "Jane Doe"

    def test_unknown_campaign(self, client):
        response = client.get("/api/campaigns/does-not-exist")
        assert response.status_code == 404

    def test_my_campaigns(self, client, db, brand_user):
        _create(client, brand_user)
        other = make_user(db, UserRole.BRAND)
        make_brand(db, other)
        _create(client, other)

        data = client.get("/api/campaigns/my", headers=auth_headers(brand_user)).json()["data"]
        assert len(data) == 1

    def test_influencer_profile_required_to_apply(self, client, db, brand_user):
        campaign = _create(client, brand_user)
        newcomer = make_user(db, UserRole.INFLUENCER)

        response = client.post(
            f"/api/campaigns/{campaign['id']}/apply", json={"proposed_rate": 100}, headers=auth_headers(newcomer),
        )
        assert response.status_code == 404

    def test_unapproved_influencer_cannot_apply(self, client, db, brand_user):
        from database.marketplace_models import InfluencerStatusDB

        campaign = _create(client, brand_user)
        user = make_user(db, UserRole.INFLUENCER)
        make_influencer(db, user, status=InfluencerStatusDB.PENDING_VERIFICATION)

        response = client.post(
            f"/api/campaigns/{campaign['id']}/apply", json={"proposed_rate": 100}, headers=auth_headers(user),
        )
        assert response.status_code == 403
