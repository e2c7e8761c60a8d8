import pytest

from helpers import headers_for

BASE = "/api/admin/email-filters"


@pytest.fixture
def csrf_headers(client, admin_headers):
    token = client.get("/api/csrf-token").json()["token"]
    return {**admin_headers, "x-csrf-token": token}


class TestCsrf:

    def test_token_endpoint_sets_signed_cookie(self, client):
        response = client.get("/api/csrf-token")

        token = response.json()["token"]
        assert len(token) == 64
        cookie = response.cookies.get("csrf_token")
        assert cookie.startswith(f"{token}.")

    def test_mutation_without_token_is_forbidden(self, client, admin_headers):
        response = client.post(BASE, json={"type": "blacklist", "email_domain": "spam.com"}, headers=admin_headers)
        assert response.status_code == 403
        assert response.json() == {"error": "Invalid or missing CSRF token"}

    def test_mismatched_token_is_forbidden(self, client, admin_headers):
        client.get("/api/csrf-token")
        response = client.post(BASE, json={"type": "blacklist", "email_domain": "spam.com"},
                               headers={**admin_headers, "x-csrf-token": "forged"})
        assert response.status_code == 403

    def test_reads_do_not_need_token(self, client, admin_headers):
        response = client.get(BASE, headers=admin_headers)
        assert response.status_code == 200
        assert response.json() == {"success": True, "data": []}


class TestEmailFilterCrud:

    def test_create_domain_rule(self, client, csrf_headers, admin_user):
        response = client.post(BASE, json={"type": "blacklist", "email_domain": " Spam.COM ", "reason": "Spam"},
                               headers=csrf_headers)

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["email_domain"] == "spam.com"
        assert data["email_address"] is None
        assert data["is_active"] is True
        assert data["created_by"] == str(admin_user.id)

    @pytest.mark.parametrize("payload,message", [
        ({"type": "greylist", "email_domain": "a.com"}, 'Invalid type. Must be "whitelist" or "blacklist"'),
        ({"type": "whitelist"}, "Either email_domain or email_address is required"),
        ({"type": "whitelist", "email_domain": "a.com", "email_address": "x@a.com"},
         "Cannot specify both email_domain and email_address"),
    ])
    def test_create_validation(self, client, csrf_headers, payload, message):
        response = client.post(BASE, json=payload, headers=csrf_headers)
        assert response.status_code == 400
        assert response.json() == {"error": message}

    def test_update_and_delete(self, client, csrf_headers):
        created = client.post(BASE, json={"type": "whitelist", "email_address": "boss@nrma.com.au"},
                              headers=csrf_headers).json()["data"]

        updated = client.patch(f"{BASE}/{created['id']}", json={"is_active": False, "reason": "Left company"},
                               headers=csrf_headers).json()["data"]
        assert updated["is_active"] is False
        assert updated["reason"] == "Left company"

        assert client.delete(f"{BASE}/{created['id']}", headers=csrf_headers).json() == {"success": True}
        assert client.get(BASE, headers=csrf_headers).json()["data"] == []

    def test_list_filtered_by_type(self, client, csrf_headers):
        client.post(BASE, json={"type": "whitelist", "email_domain": "nrma.com.au"}, headers=csrf_headers)
        client.post(BASE, json={"type": "blacklist", "email_domain": "spam.com"}, headers=csrf_headers)

        data = client.get(f"{BASE}?type=whitelist", headers=csrf_headers).json()["data"]
        assert [f["email_domain"] for f in data] == ["nrma.com.au"]

    def test_manager_cannot_manage_filters(self, client, manager_user):
        response = client.get(BASE, headers=headers_for(manager_user))
        assert response.status_code == 403


class TestEmailFilterCheck:

    def test_whitelist_wins_over_blacklist(self, client, csrf_headers):
        client.post(BASE, json={"type": "blacklist", "email_domain": "nrma.com.au"}, headers=csrf_headers)
        client.post(BASE, json={"type": "whitelist", "email_address": "claims@nrma.com.au", "reason": "Insurer"},
                    headers=csrf_headers)

        allowed = client.get(f"{BASE}/check?email=Claims@NRMA.com.au", headers=csrf_headers).json()
        denied = client.get(f"{BASE}/check?email=other@nrma.com.au", headers=csrf_headers).json()

        assert allowed == {"isWhitelisted": True, "isBlacklisted": False, "filterType": "whitelist", "reason": "Insurer"}
        assert denied["isBlacklisted"] is True
        assert denied["filterType"] == "blacklist"

    def test_inactive_rule_is_ignored(self, client, csrf_headers):
        client.post(BASE, json={"type": "blacklist", "email_domain": "spam.com", "is_active": False},
                    headers=csrf_headers)

        result = client.get(f"{BASE}/check?email=a@spam.com", headers=csrf_headers).json()
        assert result == {"isWhitelisted": False, "isBlacklisted": False, "filterType": None, "reason": None}
