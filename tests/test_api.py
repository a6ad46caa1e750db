import pytest

PROPERTIES_URL = "/api/v1/properties"
ANALYTICS_URL = "/api/v1/analytics"


@pytest.fixture
def created_property(client, auth_headers, make_payload):
    response = client.post(f"{PROPERTIES_URL}/", json=make_payload(), headers=auth_headers)
    assert response.status_code == 201
    return response.json()


class TestPropertyEndpoints:

    def test_root_and_health(self, client):
        assert client.get("/").json() == {"message": "Real Estate Marketplace API"}

        health = client.get("/health").json()
        assert health["status"] == "healthy"
        assert health["services"]["database"] == "healthy"

    def test_create_property(self, created_property, owner):
        assert created_property["propertyId"].startswith("TVICL")
        assert created_property["owner"] == str(owner.id)
        assert created_property["approvalStatus"] == "Pending"
        assert created_property["media"][0]["isPrimary"] is True
        assert created_property["fullAddress"] == "12 Admiralty Way, Lekki Phase 1, Lagos, Lagos"

    def test_create_requires_authentication(self, client, make_payload):
        response = client.post(f"{PROPERTIES_URL}/", json=make_payload())
        assert response.status_code in (401, 403)

    def test_create_with_invalid_token(self, client, make_payload):
        response = client.post(
            f"{PROPERTIES_URL}/", json=make_payload(), headers={"Authorization": "Bearer not-a-token"}
        )
        assert response.status_code == 401

    def test_create_reports_every_error(self, client, auth_headers, make_payload):
        payload = make_payload(listingType="For Sale", bedrooms=-1)
        del payload["flatType"]

        response = client.post(f"{PROPERTIES_URL}/", json=payload, headers=auth_headers)

        assert response.status_code == 422
        body = response.json()
        assert body["detail"] == "Validation failed"
        assert sorted(error["path"] for error in body["errors"]) == [
            "bedrooms", "flatType", "transactionType"
        ]

    def test_get_counts_views(self, client, created_property):
        url = f"{PROPERTIES_URL}/{created_property['propertyId']}"

        assert client.get(url).json()["views"] == 1
        assert client.get(url).json()["views"] == 2

    def test_get_by_slug(self, client, created_property):
        response = client.get(f"{PROPERTIES_URL}/slug/{created_property['slug']}")

        assert response.status_code == 200
        assert response.json()["propertyId"] == created_property["propertyId"]

    def test_get_missing_property(self, client):
        response = client.get(f"{PROPERTIES_URL}/TVICLMISSING000")

        assert response.status_code == 404
        assert "not found" in response.json()["detail"]

    def test_update_property(self, client, auth_headers, created_property):
        response = client.patch(
            f"{PROPERTIES_URL}/{created_property['propertyId']}",
            json={"price": {"amount": 7500000, "negotiable": True}},
            headers=auth_headers
        )

        assert response.status_code == 200
        assert response.json()["price"] == {"amount": 7500000.0, "currency": "NGN", "negotiable": True}

    def test_update_invalid_merge(self, client, auth_headers, created_property):
        response = client.patch(
            f"{PROPERTIES_URL}/{created_property['propertyId']}",
            json={"listingType": "For Sale"},
            headers=auth_headers
        )

        assert response.status_code == 422
        assert [error["path"] for error in response.json()["errors"]] == ["transactionType"]

    def test_delete_and_restore(self, client, auth_headers, created_property):
        url = f"{PROPERTIES_URL}/{created_property['propertyId']}"

        assert client.delete(url, headers=auth_headers).status_code == 204
        assert client.get(url).status_code == 404
        assert client.delete(url, headers=auth_headers).status_code == 204

        restored = client.post(f"{url}/restore", headers=auth_headers)
        assert restored.status_code == 200
        assert restored.json()["isDeleted"] is False
        assert client.get(url).status_code == 200

    def test_verification(self, client, auth_headers, created_property):
        url = f"{PROPERTIES_URL}/{created_property['propertyId']}/verification"

        rejected = client.post(url, json={"approved": False}, headers=auth_headers).json()
        assert rejected["approvalStatus"] == "Rejected"
        assert rejected["rejectionReason"] == "No reason provided"

        approved = client.post(url, json={"approved": True}, headers=auth_headers).json()
        assert approved["approvalStatus"] == "Approved"
        assert approved["isVerified"] is True

    def test_engagement_counters(self, client, created_property):
        base = f"{PROPERTIES_URL}/{created_property['propertyId']}"

        assert client.post(f"{base}/save").json() == {
            "propertyId": created_property["propertyId"], "counter": "saves"
        }
        client.post(f"{base}/share")
        client.post(f"{base}/inquire")

        fetched = client.get(f"{PROPERTIES_URL}/slug/{created_property['slug']}").json()
        assert (fetched["saves"], fetched["shares"], fetched["inquiries"]) == (1, 1, 1)

    def test_engagement_on_missing_property(self, client):
        assert client.post(f"{PROPERTIES_URL}/TVICLMISSING000/save").status_code == 404


class TestSearchEndpoints:

    def test_search_filters_and_pages(self, client, auth_headers, make_payload):
        for amount in (5_000_000, 15_000_000, 25_000_000):
            payload = make_payload(price={"amount": amount})
            client.post(f"{PROPERTIES_URL}/", json=payload, headers=auth_headers)

        response = client.get(f"{PROPERTIES_URL}/", params={"min_price": 10_000_000, "page_size": 1})

        assert response.status_code == 200
        body = response.json()
        assert body["total"] == 2
        assert body["pageSize"] == 1
        assert body["items"][0]["price"]["amount"] == 25_000_000

    def test_page_size_follows_configured_maximum(self, test_engine, test_db_session, test_settings):
        from fastapi.testclient import TestClient
        from marketplace.core.database import Database
        from marketplace.main import create_app

        settings = test_settings.model_copy(update={"MAX_PAGE_SIZE": 150})
        with TestClient(create_app(settings, Database(test_engine))) as wide_client:
            response = wide_client.get(f"{PROPERTIES_URL}/", params={"page_size": 120})
            clamped = wide_client.get(f"{PROPERTIES_URL}/", params={"page_size": 500})

        assert response.status_code == 200
        assert response.json()["pageSize"] == 120
        assert clamped.json()["pageSize"] == 150

    def test_page_size_clamped_to_default_maximum(self, client):
        response = client.get(f"{PROPERTIES_URL}/", params={"page_size": 500})

        assert response.status_code == 200
        assert response.json()["pageSize"] == 100

    def test_search_rejects_inverted_price_range(self, client):
        response = client.get(f"{PROPERTIES_URL}/", params={"min_price": 10, "max_price": 5})
        assert response.status_code == 422

    def test_related(self, client, auth_headers, make_payload):
        ids = []
        for amount in (10_000_000, 10_800_000, 13_000_000):
            created = client.post(
                f"{PROPERTIES_URL}/", json=make_payload(price={"amount": amount}), headers=auth_headers
            ).json()
            ids.append(created["propertyId"])

        related = client.get(f"{PROPERTIES_URL}/{ids[0]}/related").json()
        assert [item["propertyId"] for item in related] == [ids[1]]


class TestAnalyticsEndpoints:

    def test_average_price(self, client, auth_headers, make_payload):
        for amount in (10_000_000, 20_000_000):
            payload = make_payload(propertyType="Bungalow", price={"amount": amount})
            client.post(f"{PROPERTIES_URL}/", json=payload, headers=auth_headers)

        response = client.get(f"{ANALYTICS_URL}/average-price")

        assert response.json() == [
            {"propertyType": "Bungalow", "averagePrice": 15_000_000, "count": 2}
        ]

    def test_counts(self, client, created_property):
        assert client.get(f"{ANALYTICS_URL}/listing-types").json() == [
            {"listingType": "For Rent", "count": 1}
        ]
        assert client.get(f"{ANALYTICS_URL}/states").json() == [{"state": "Lagos", "count": 1}]

    def test_top_viewed_recent_and_trending(self, client, created_property):
        client.get(f"{PROPERTIES_URL}/{created_property['propertyId']}")

        top = client.get(f"{ANALYTICS_URL}/top-viewed", params={"limit": 5}).json()
        recent = client.get(f"{ANALYTICS_URL}/recent").json()
        trending = client.get(f"{ANALYTICS_URL}/trending").json()

        assert top[0]["views"] == 1
        assert recent[0]["propertyId"] == created_property["propertyId"]
        assert trending[0]["score"] == 0.5

    def test_analytics_limit_bounds(self, client):
        assert client.get(f"{ANALYTICS_URL}/top-viewed", params={"limit": 0}).status_code == 422

    def test_recommendations_from_viewing_history(self, client, auth_headers, created_property, make_payload):
        similar = client.post(
            f"{PROPERTIES_URL}/", json=make_payload(tags=["waterfront"]), headers=auth_headers
        ).json()
        client.post(f"{PROPERTIES_URL}/", json=make_payload(tags=["gated"]), headers=auth_headers)

        client.get(f"{PROPERTIES_URL}/{created_property['propertyId']}", headers=auth_headers)
        response = client.get(f"{ANALYTICS_URL}/recommendations", headers=auth_headers)

        assert response.status_code == 200
        assert [item["propertyId"] for item in response.json()] == [similar["propertyId"]]

    def test_recommendations_require_authentication(self, client):
        assert client.get(f"{ANALYTICS_URL}/recommendations").status_code in (401, 403)
