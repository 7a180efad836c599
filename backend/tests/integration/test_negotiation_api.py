"""
Integration tests for the negotiation API.

WHAT: Exercise every endpoint through the FastAPI app
WHY: Ensure API contract compliance and error handling
HOW: FastAPI TestClient with the platform dependency pointed at a test database
"""

import pytest

from pricematch.core.config import settings
from tests.fixtures.identities import auth_headers

API = "/api/v1"


def create(client, user, counterpart_email, **fields):
    data = {"title": "Road bike", "counterpart_email": counterpart_email}
    data.update(fields)
    return client.post(f"{API}/negotiations", data=data, headers=auth_headers(user))


def submit(client, user, negotiation_id, low, high):
    return client.post(
        f"{API}/negotiations/{negotiation_id}/price-range",
        json={"min_price": low, "max_price": high},
        headers=auth_headers(user),
    )


@pytest.mark.integration
class TestAuthentication:

    def test_missing_identity_headers(self, client):
        response = client.get(f"{API}/negotiations")

        assert response.status_code == 401
        assert response.json()["error"] == "AUTHENTICATION_REQUIRED"

    def test_unknown_role_header(self, client, alice):
        headers = auth_headers(alice)
        headers["X-User-Role"] = "superuser"

        response = client.get(f"{API}/negotiations", headers=headers)

        assert response.status_code == 400
        assert response.json()["error"] == "VALIDATION_ERROR"

    def test_profile_created_on_first_visit(self, client, alice):
        response = client.get(f"{API}/users/me", headers=auth_headers(alice))

        assert response.status_code == 200
        assert response.json()["user"]["email"] == "alice@example.com"


@pytest.mark.integration
class TestCreateNegotiation:

    def test_create_with_attachment(self, client, alice, bob):
        response = client.post(
            f"{API}/negotiations",
            data={"title": "Camera", "counterpart_email": bob.email, "initiator_role": "seller"},
            files={"attachment": ("photo.jpg", b"jpeg-bytes", "image/jpeg")},
            headers=auth_headers(alice),
        )

        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "pending"
        assert body["initiator_role"] == "seller"
        assert body["attachment_url"].startswith("http://testserver/files/negotiations/user_alice/")
        assert body["attachment_url"].endswith("-photo.jpg")

    def test_oversized_attachment_rejected(self, client, alice, bob, monkeypatch):
        monkeypatch.setattr(settings, "MAX_ATTACHMENT_BYTES", 8)

        response = client.post(
            f"{API}/negotiations",
            data={"title": "Camera", "counterpart_email": bob.email},
            files={"attachment": ("photo.jpg", b"x" * 64, "image/jpeg")},
            headers=auth_headers(alice),
        )

        assert response.status_code == 413
        assert response.json()["error"] == "ATTACHMENT_TOO_LARGE"
        assert response.json()["details"]["max_allowed"] == 8
        assert client.get(f"{API}/negotiations", headers=auth_headers(alice)).json() == []

    def test_invalid_counterpart_email(self, client, alice):
        response = create(client, alice, "not-an-email")

        assert response.status_code == 400
        assert response.json()["error"] == "VALIDATION_ERROR"

    def test_expiration_above_maximum(self, client, alice, bob):
        response = create(client, alice, bob.email, expiration_days="31")

        assert response.status_code == 400

    def test_self_invite_rejected(self, client, alice):
        response = create(client, alice, alice.email)

        assert response.status_code == 400

    def test_listed_for_initiator(self, client, alice, bob):
        create(client, alice, bob.email, title="Desk")

        response = client.get(f"{API}/negotiations", headers=auth_headers(alice))

        assert response.status_code == 200
        assert [n["title"] for n in response.json()] == ["Desk"]


@pytest.mark.integration
class TestNegotiationFlow:

    def test_full_flow_creates_deal(self, client, alice, bob):
        negotiation_id = create(client, alice, bob.email).json()["id"]

        first = submit(client, alice, negotiation_id, 700, 1000)
        assert first.status_code == 200
        assert first.json()["evaluation"]["evaluated"] is False

        second = submit(client, bob, negotiation_id, 900, 1200)
        assert second.status_code == 200
        evaluation = second.json()["evaluation"]
        assert evaluation["deal_found"] is True
        assert evaluation["deal"]["agreed_price"] == 950.0
        assert evaluation["deal"]["platform_fee"] == pytest.approx(9.5)
        assert evaluation["deal"]["final_price"] == pytest.approx(940.5)

        details = client.get(f"{API}/negotiations/{negotiation_id}", headers=auth_headers(alice)).json()
        assert details["progress"] == "deal_created"
        assert details["negotiation"]["status"] == "completed"
        assert details["your_range"]["min_price"] == 700.0

        dashboard = client.get(f"{API}/dashboard", headers=auth_headers(bob)).json()
        assert dashboard["stats"]["total_value"] == pytest.approx(940.5)

    def test_no_overlap(self, client, alice, bob):
        negotiation_id = create(client, alice, bob.email).json()["id"]
        submit(client, alice, negotiation_id, 600, 800)

        evaluation = submit(client, bob, negotiation_id, 850, 1000).json()["evaluation"]

        assert evaluation["deal_found"] is False
        assert evaluation["reason"] == "no_overlap"

    def test_min_above_max_rejected(self, client, alice, bob):
        negotiation_id = create(client, alice, bob.email).json()["id"]

        response = submit(client, alice, negotiation_id, 1000, 700)

        assert response.status_code == 400
        assert response.json()["error"] == "VALIDATION_ERROR"

    @pytest.mark.parametrize("literal", ["Infinity", "NaN", "-Infinity"])
    def test_non_finite_price_rejected(self, client, alice, bob, literal):
        negotiation_id = create(client, alice, bob.email).json()["id"]
        headers = auth_headers(alice)
        headers["Content-Type"] = "application/json"

        response = client.post(
            f"{API}/negotiations/{negotiation_id}/price-range",
            content=f'{{"min_price": 1, "max_price": {literal}}}',
            headers=headers,
        )

        assert response.status_code == 400
        assert response.json()["error"] == "VALIDATION_ERROR"

    def test_duplicate_submission_conflict(self, client, alice, bob):
        negotiation_id = create(client, alice, bob.email).json()["id"]
        submit(client, alice, negotiation_id, 700, 1000)

        response = submit(client, alice, negotiation_id, 700, 1000)

        assert response.status_code == 409
        assert response.json()["error"] == "PRICE_RANGE_ALREADY_SUBMITTED"

    def test_outsider_forbidden(self, client, alice, bob, carol):
        negotiation_id = create(client, alice, bob.email).json()["id"]

        response = client.get(f"{API}/negotiations/{negotiation_id}", headers=auth_headers(carol))

        assert response.status_code == 403
        assert response.json()["error"] == "NOT_A_PARTICIPANT"

    def test_unknown_negotiation(self, client, alice):
        response = client.get(f"{API}/negotiations/neg_missing", headers=auth_headers(alice))

        assert response.status_code == 404


@pytest.mark.integration
class TestNotifications:

    def test_counterpart_joined_then_read(self, client, alice, bob):
        negotiation_id = create(client, alice, bob.email).json()["id"]
        client.get(f"{API}/negotiations/{negotiation_id}", headers=auth_headers(bob))

        listing = client.get(f"{API}/notifications", headers=auth_headers(alice)).json()
        assert listing["unread"] == 1
        notification_id = listing["notifications"][0]["id"]

        forbidden = client.post(f"{API}/notifications/{notification_id}/read", headers=auth_headers(bob))
        assert forbidden.status_code == 404

        read = client.post(f"{API}/notifications/{notification_id}/read", headers=auth_headers(alice))
        assert read.status_code == 200
        assert read.json()["read_status"] is True


@pytest.mark.integration
class TestAdminAndFees:

    def test_admin_stats_requires_admin(self, client, alice, admin):
        assert client.get(f"{API}/admin/stats", headers=auth_headers(alice)).status_code == 403

        response = client.get(f"{API}/admin/stats", headers=auth_headers(admin))

        assert response.status_code == 200
        assert response.json()["total_users"] == 1

    def test_fee_schedule_lowest_volume_first(self, client):
        tiers = client.get(f"{API}/fees/schedule").json()["tiers"]

        assert [(t["min_negotiations"], t["max_negotiations"], t["rate"]) for t in tiers] == [
            (0, 9, 0.01),
            (10, 19, 0.009),
            (20, 49, 0.008),
            (50, 99, 0.007),
            (100, None, 0.005),
        ]

    def test_fee_quote(self, client):
        body = client.get(f"{API}/fees/quote", params={"amount": 950, "negotiation_count": 10}).json()

        assert body["rate"] == 0.009
        assert body["platform_fee"] == pytest.approx(8.55)
        assert body["net_amount"] == pytest.approx(941.45)

    @pytest.mark.parametrize("amount", ["inf", "nan", "0", "-5"])
    def test_fee_quote_rejects_non_finite_or_non_positive(self, client, amount):
        response = client.get(f"{API}/fees/quote", params={"amount": amount})

        assert response.status_code == 400
        assert response.json()["error"] == "VALIDATION_ERROR"


@pytest.mark.integration
class TestStatus:

    def test_health(self, client):
        body = client.get(f"{API}/health").json()

        assert body["status"] == "healthy"
        assert body["components"]["database"]["available"] is True
        assert body["components"]["storage"]["available"] is True

    def test_root(self, client):
        assert client.get("/").json()["status"] == "running"
