import pytest
from jose import jwt

from backend.app.config import IDENTITY_PROVIDER_SECRET, IDENTITY_TOKEN_HEADER
from backend.app.models.user import User
from backend.app.services.identity_provider import get_identity_verifier
from backend.app.services.route_authorization import ExternalIdentity
from backend.app.utils.jwt import create_access_token


def _auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def _identity_token(email: str = "a@b.com", secret: str = IDENTITY_PROVIDER_SECRET) -> str:
    return jwt.encode({"sub": "uid-123", "email": email}, secret, algorithm="HS256")


def _decision(client, path: str, headers: dict | None = None) -> dict:
    r = client.get("/pages/decision", params={"path": path}, headers=headers or {})
    assert r.status_code == 200, r.text
    return r.json()


def test_anonymous_request_redirects_to_auth(client):
    r = client.get("/pages/candidate/dashboard", follow_redirects=False)
    assert r.status_code == 307
    assert r.headers["location"] == "/pages/auth"


def test_auth_page_is_public(client):
    r = client.get("/pages/auth")
    assert r.status_code == 200, r.text
    assert r.json()["page"]["name"] == "auth"


def test_scenario_candidate_in_recruiter_area(client, candidate_token):
    data = _decision(client, "/recruiter/dashboard", _auth_headers(candidate_token))
    assert data == {
        "path": "/recruiter/dashboard",
        "decision": "redirect",
        "redirect": "/candidate/dashboard",
    }


def test_scenario_recruiter_at_root(client, recruiter_token):
    data = _decision(client, "/", _auth_headers(recruiter_token))
    assert data["redirect"] == "/recruiter/dashboard"


def test_scenario_identity_only_is_sent_to_auth(client):
    headers = {IDENTITY_TOKEN_HEADER: _identity_token()}
    data = _decision(client, "/candidate/profile", headers)
    assert data["redirect"] == "/auth"


def test_scenario_recruiter_renders_candidates_page(client, recruiter_token):
    r = client.get("/pages/recruiter/candidates", headers=_auth_headers(recruiter_token))
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["action"] == "render"
    assert body["page"]["name"] == "recruiter-candidates"


def test_session_cookie_is_accepted(client):
    r = client.post(
        "/auth/signup",
        json={"email": "cookie@example.com", "password": "Testpass123!", "role": "candidate"},
    )
    assert r.status_code == 200, r.text

    r = client.get("/pages/", follow_redirects=False)
    assert r.status_code == 307
    assert r.headers["location"] == "/pages/candidate/dashboard"


def test_redirects_are_followed_to_final_page(client, candidate_token):
    r = client.get("/pages/recruiter/analytics", headers=_auth_headers(candidate_token))
    assert r.status_code == 200, r.text
    assert r.json()["page"]["name"] == "candidate-dashboard"


def test_json_clients_get_redirect_payload(client, candidate_token):
    headers = {**_auth_headers(candidate_token), "Accept": "application/json"}
    r = client.get("/pages/recruiter/analytics", headers=headers, follow_redirects=False)
    assert r.status_code == 200
    assert r.json() == {"action": "navigate", "path": "/recruiter/analytics", "redirect": "/candidate/dashboard"}


@pytest.mark.parametrize("header", ["X-Session-Loading", "X-Identity-Loading"])
def test_pending_client_state_shows_loading(client, recruiter_token, header):
    headers = {**_auth_headers(recruiter_token), header: "1"}
    r = client.get("/pages/recruiter/dashboard", headers=headers)
    assert r.status_code == 202
    assert r.json()["action"] == "loading"


def test_invalid_tokens_count_as_absent(client):
    headers = {
        "Authorization": "Bearer not-a-token",
        IDENTITY_TOKEN_HEADER: _identity_token(secret="wrong-secret"),
    }
    data = _decision(client, "/auth", headers)
    assert data["decision"] == "render"
    data = _decision(client, "/recruiter/help", headers)
    assert data["redirect"] == "/auth"


def test_unknown_page_is_not_found_for_signed_in_user(client, recruiter_token):
    r = client.get("/pages/recruiter/job-postings/12", headers=_auth_headers(recruiter_token))
    assert r.status_code == 404
    assert r.json()["page"]["name"] == "not-found"


def test_edit_posting_page_exposes_path_params(client, recruiter_token):
    r = client.get("/pages/recruiter/job-postings/12/edit", headers=_auth_headers(recruiter_token))
    assert r.status_code == 200, r.text
    assert r.json()["page"]["params"] == {"id": "12"}


def test_failing_identity_verifier_does_not_break_routing(app, client, recruiter_token):
    class ExplodingVerifier:
        def verify(self, token):
            raise RuntimeError("provider unreachable")

    app.dependency_overrides[get_identity_verifier] = lambda: ExplodingVerifier()
    try:
        headers = {**_auth_headers(recruiter_token), IDENTITY_TOKEN_HEADER: "anything"}
        data = _decision(client, "/recruiter/settings", headers)
        assert data["decision"] == "render"
    finally:
        app.dependency_overrides.clear()


def test_custom_identity_verifier_can_be_injected(app, client):
    class StaticVerifier:
        def verify(self, token):
            return ExternalIdentity(email="sso@example.com", uid=token, provider="test")

    app.dependency_overrides[get_identity_verifier] = lambda: StaticVerifier()
    try:
        data = _decision(client, "/auth", {IDENTITY_TOKEN_HEADER: "u-1"})
        assert data["decision"] == "render"
        data = _decision(client, "/", {IDENTITY_TOKEN_HEADER: "u-1"})
        assert data["redirect"] == "/auth"
    finally:
        app.dependency_overrides.clear()


def _unknown_role_token(db_session) -> str:
    user = User(email="admin@example.com", password="hashed", role="admin", name="Admin")
    db_session.add(user)
    db_session.commit()
    return create_access_token({"sub": str(user.id), "role": user.role})


def test_unknown_role_bouncing_between_portals_is_a_conflict(client, db_session):
    token = _unknown_role_token(db_session)
    r = client.get("/pages/candidate/dashboard", headers=_auth_headers(token), follow_redirects=False)
    assert r.status_code == 409, r.text
    body = r.json()
    assert body["success"] is False
    assert body["details"]["chain"] == ["/candidate/dashboard", "/recruiter/dashboard", "/candidate/dashboard"]


def test_unknown_role_still_renders_neutral_pages(client, db_session):
    token = _unknown_role_token(db_session)
    r = client.get("/pages/", headers=_auth_headers(token))
    assert r.status_code == 200, r.text
    assert r.json()["action"] == "render"


def test_redirect_loop_chain_stops_at_first_repeat(client, db_session):
    token = _unknown_role_token(db_session)
    headers = {**_auth_headers(token), "Accept": "application/json"}
    r = client.get("/pages/candidate/applications", headers=headers, follow_redirects=False)
    assert r.status_code == 409, r.text
    assert r.json()["details"]["chain"] == [
        "/candidate/applications",
        "/recruiter/dashboard",
        "/candidate/dashboard",
        "/recruiter/dashboard",
    ]
