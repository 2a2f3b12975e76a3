import os
import sys
from pathlib import Path

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient


# Ensure `import backend.app...` works regardless of where pytest is run from.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


@pytest.fixture(scope="session")
def test_db_path(tmp_path_factory: pytest.TempPathFactory) -> Path:
    return tmp_path_factory.mktemp("db") / "test.sqlite3"


@pytest.fixture()
def app(test_db_path: Path) -> FastAPI:
    """
    Create a FastAPI app wired to a temporary SQLite DB.
    """
    # Must be set before importing app.database so engine init doesn't pick up a developer .env.
    os.environ["DISABLE_DOTENV"] = "1"
    os.environ["DATABASE_URL"] = f"sqlite+pysqlite:///{test_db_path}"

    from backend.app import database as db

    # Rebind the shared database module so router dependencies use the test DB.
    db.configure_engine(os.environ["DATABASE_URL"])
    db.init_db(drop_existing=True)

    from backend.app.main import create_app

    return create_app()


@pytest.fixture()
def client(app: FastAPI) -> TestClient:
    return TestClient(app)


@pytest.fixture()
def db_session(app: FastAPI):
    """
    Direct SQLAlchemy session bound to the same temporary SQLite DB used by the test app.
    """
    from backend.app import database

    db = database.SessionLocal()
    try:
        yield db
    finally:
        db.close()


def _signup_token(client: TestClient, *, email: str, role: str, name: str) -> str:
    r = client.post(
        "/auth/signup",
        json={"email": email, "password": "Testpass123!", "role": role, "name": name},
    )
    assert r.status_code == 200, r.text
    # Tests pass tokens explicitly; don't let the session cookie leak between users.
    client.cookies.clear()
    return r.json()["access_token"]


@pytest.fixture()
def recruiter_token(client: TestClient) -> str:
    return _signup_token(client, email="recruiter@example.com", role="recruiter", name="Recruiter")


@pytest.fixture()
def candidate_token(client: TestClient) -> str:
    return _signup_token(client, email="candidate@example.com", role="candidate", name="Candidate")
