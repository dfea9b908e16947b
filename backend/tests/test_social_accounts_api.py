"""
Aether Intel - Social Accounts API Tests

Run: python -m pytest -xvs tests/test_social_accounts_api.py
"""

import pytest

from conftest import assert_valid_response, create_competitor


class TestCreateSocialAccount:

    def test_create_normalizes_platform(self, test_client, auth_headers, sample_competitor):
        response = test_client.post(
            "/api/social-accounts",
            json={"competitorId": sample_competitor["id"], "platform": "X", "handle": " acme_news "},
            headers=auth_headers,
        )

        data = assert_valid_response(response, 201)
        assert data["platform"] == "twitter"
        assert data["handle"] == "acme_news"
        assert data["isActive"] is True
        assert data["profileUrl"] == "https://twitter.com/acme_news"

    @pytest.mark.parametrize("body,code", [
        ({"platform": "twitter", "handle": "a"}, "MISSING_COMPETITOR_ID"),
        ({"competitorId": 1, "handle": "a"}, "MISSING_PLATFORM"),
        ({"competitorId": 1, "platform": "twitter"}, "MISSING_HANDLE"),
        ({"competitorId": 1, "platform": "myspace", "handle": "a"}, "INVALID_PLATFORM"),
        ({"competitorId": "abc", "platform": "twitter", "handle": "a"}, "INVALID_COMPETITOR_ID"),
    ])
    def test_validation_codes(self, test_client, auth_headers, body, code):
        response = test_client.post("/api/social-accounts", json=body, headers=auth_headers)

        data = assert_valid_response(response, 400)
        assert data["code"] == code

    @pytest.mark.parametrize("url", ["acme.io/news", "ftp://acme.io/news", "javascript:alert(1)", "https://"])
    def test_non_http_url_override_rejected(self, test_client, auth_headers, sample_competitor, url):
        response = test_client.post(
            "/api/social-accounts",
            json={"competitorId": sample_competitor["id"], "platform": "twitter", "handle": "acme", "url": url},
            headers=auth_headers,
        )

        data = assert_valid_response(response, 400)
        assert data["code"] == "INVALID_URL"

    def test_foreign_competitor_forbidden(self, test_client, auth_headers, other_user):
        theirs = create_competitor(other_user["id"])

        response = test_client.post(
            "/api/social-accounts",
            json={"competitorId": theirs, "platform": "twitter", "handle": "acme"},
            headers=auth_headers,
        )

        data = assert_valid_response(response, 403)
        assert data["code"] == "COMPETITOR_ACCESS_DENIED"


class TestListSocialAccounts:

    def test_list_filtered_by_competitor(self, test_client, auth_headers, user):
        first = create_competitor(user["id"], accounts=[{"platform": "twitter", "handle": "one"}])
        create_competitor(user["id"], accounts=[{"platform": "linkedin", "handle": "two"}])

        everything = test_client.get("/api/social-accounts", headers=auth_headers).json()
        assert {a["handle"] for a in everything} == {"one", "two"}

        filtered = test_client.get(f"/api/social-accounts?competitorId={first}", headers=auth_headers).json()
        assert [a["handle"] for a in filtered] == ["one"]

    def test_list_foreign_competitor_forbidden(self, test_client, auth_headers, other_user):
        theirs = create_competitor(other_user["id"])
        response = test_client.get(f"/api/social-accounts?competitorId={theirs}", headers=auth_headers)
        assert response.status_code == 403

    def test_list_invalid_competitor_id(self, test_client, auth_headers):
        response = test_client.get("/api/social-accounts?competitorId=abc", headers=auth_headers)
        assert response.json()["code"] == "INVALID_COMPETITOR_ID"


class TestUpdateDeleteSocialAccount:

    def _account_id(self, test_client, auth_headers, competitor_id):
        return test_client.get(
            f"/api/social-accounts?competitorId={competitor_id}", headers=auth_headers
        ).json()[0]["id"]

    def test_deactivate_and_override_url(self, test_client, auth_headers, sample_competitor):
        account_id = self._account_id(test_client, auth_headers, sample_competitor["id"])

        response = test_client.put(
            f"/api/social-accounts/{account_id}",
            json={"isActive": False, "url": "https://twitter.com/acme_official"},
            headers=auth_headers,
        )

        data = assert_valid_response(response)
        assert data["isActive"] is False
        assert data["profileUrl"] == "https://twitter.com/acme_official"

    def test_relative_url_update_rejected(self, test_client, auth_headers, sample_competitor):
        account_id = self._account_id(test_client, auth_headers, sample_competitor["id"])

        response = test_client.put(
            f"/api/social-accounts/{account_id}", json={"url": "acme.io/news"}, headers=auth_headers
        )

        data = assert_valid_response(response, 400)
        assert data["code"] == "INVALID_URL"

    def test_foreign_account_not_found(self, test_client, auth_headers, other_auth_headers, sample_competitor):
        account_id = self._account_id(test_client, auth_headers, sample_competitor["id"])

        response = test_client.put(
            f"/api/social-accounts/{account_id}", json={"isActive": False}, headers=other_auth_headers
        )
        assert response.status_code == 404
        assert test_client.delete(f"/api/social-accounts/{account_id}", headers=other_auth_headers).status_code == 404

    def test_delete(self, test_client, auth_headers, sample_competitor):
        account_id = self._account_id(test_client, auth_headers, sample_competitor["id"])

        data = assert_valid_response(test_client.delete(f"/api/social-accounts/{account_id}", headers=auth_headers))

        assert data["id"] == account_id
        remaining = test_client.get(
            f"/api/social-accounts?competitorId={sample_competitor['id']}", headers=auth_headers
        ).json()
        assert remaining == []
