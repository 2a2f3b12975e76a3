from backend.app.utils.error_handlers import get_error_message


def _signup(client, *, email: str, password: str, role: str, name: str = "Test User"):
    return client.post(
        "/auth/signup",
        json={"email": email, "password": password, "role": role, "name": name},
    )


def _login(client, *, email: str, password: str, role: str | None):
    body = {"email": email, "password": password}
    if role is not None:
        body["role"] = role
    return client.post("/auth/login", json=body)


def _auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def test_signup_recruiter_success(client):
    r = _signup(
        client,
        email="recruiter@example.com",
        password="Testpass123!",
        role="recruiter",
        name="Recruiter",
    )
    assert r.status_code == 200, r.text
    data = r.json()
    assert data["user"]["role"] == "recruiter"
    assert isinstance(data.get("access_token"), str) and len(data["access_token"]) > 10
    assert "access_token" in r.cookies


def test_signup_candidate_success(client):
    r = _signup(
        client,
        email="candidate@example.com",
        password="Testpass123!",
        role="candidate",
        name="Candidate",
    )
    assert r.status_code == 200, r.text
    assert r.json()["user"]["role"] == "candidate"


def test_signup_normalizes_role_and_email(client):
    r = _signup(client, email="  Mixed@Example.COM ", password="Testpass123!", role=" Recruiter ")
    assert r.status_code == 200, r.text
    assert r.json()["user"] == {"id": 1, "email": "mixed@example.com", "role": "recruiter", "name": "Test User"}


def test_signup_rejects_unknown_role(client):
    r = _signup(client, email="admin@example.com", password="Testpass123!", role="admin")
    assert r.status_code == 400, r.text
    assert "role" in r.json()["error"].lower()


def test_signup_duplicate_email_fails(client):
    _signup(client, email="dup@example.com", password="Testpass123!", role="candidate")
    r = _signup(client, email="dup@example.com", password="Testpass123!", role="recruiter")
    assert r.status_code == 400, r.text
    assert "exists" in r.json()["error"].lower()


def test_login_role_mismatch_fails(client):
    _signup(
        client,
        email="cand2@example.com",
        password="Testpass123!",
        role="candidate",
        name="Cand2",
    )
    r = _login(client, email="cand2@example.com", password="Testpass123!", role="recruiter")
    assert r.status_code == 403, r.text


def test_login_invalid_credentials_fails(client):
    _signup(
        client,
        email="rec2@example.com",
        password="Testpass123!",
        role="recruiter",
        name="Rec2",
    )
    r = _login(client, email="rec2@example.com", password="wrong", role="recruiter")
    assert r.status_code == 401, r.text
    assert "invalid email or password" in r.json()["error"].lower()


def test_me_returns_session_user(client):
    _signup(client, email="me@example.com", password="Testpass123!", role="candidate", name="Me")
    client.cookies.clear()
    token = _login(client, email="me@example.com", password="Testpass123!", role=None).json()["access_token"]

    r = client.get("/auth/me", headers=_auth_headers(token))
    assert r.status_code == 200, r.text
    assert r.json()["user"]["email"] == "me@example.com"
    assert r.json()["user"]["role"] == "candidate"


def test_me_requires_session(client):
    r = client.get("/auth/me")
    assert r.status_code == 401, r.text
    assert r.json()["success"] is False
    assert r.json()["error"] == get_error_message("unauthorized")


def test_garbage_bearer_token_is_unauthorized(client):
    r = client.get("/api/candidate/applications", headers=_auth_headers("not-a-jwt"))
    assert r.status_code == 401, r.text
    assert r.json() == {
        "success": False,
        "error": get_error_message("unauthorized"),
        "status_code": 401,
    }


def test_logout_clears_session_cookie(client):
    _signup(client, email="out@example.com", password="Testpass123!", role="recruiter")
    assert client.get("/auth/me").status_code == 200

    r = client.post("/auth/logout")
    assert r.status_code == 200, r.text
    assert "message" in r.json()
    assert client.get("/auth/me").status_code == 401


def test_candidate_cannot_create_job(client):
    _signup(
        client,
        email="cand3@example.com",
        password="Testpass123!",
        role="candidate",
        name="Cand3",
    )
    client.cookies.clear()
    token = _login(client, email="cand3@example.com", password="Testpass123!", role="candidate").json()["access_token"]

    r = client.post(
        "/api/jobs",
        json={
            "title": "PM",
            "company": "Acme",
            "location": "Remote",
            "description": "A" * 20,
            "department": "Product",
        },
        headers=_auth_headers(token),
    )
    assert r.status_code == 403, r.text
