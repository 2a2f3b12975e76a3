import os
from pathlib import Path
from dotenv import load_dotenv

# Override=True so changes in backend/.env take effect on process reload.
#
# For automated tests (SQLite), we need to prevent backend/.env from overriding the
# test DATABASE_URL. Set DISABLE_DOTENV=1 to skip loading .env.
if os.getenv("DISABLE_DOTENV") != "1":
    load_dotenv(override=True)

_raw_database_url = (os.getenv("DATABASE_URL") or "").strip()
# Default to a local SQLite DB for dev so the backend can start out-of-the-box.
# Use an absolute path so it works regardless of current working directory.
_default_sqlite_path = (Path(__file__).resolve().parent.parent / "dev.db").as_posix()
DATABASE_URL = _raw_database_url or f"sqlite:///{_default_sqlite_path}"

# Auth / JWT (first-party session)
# NOTE: keep a default for local dev so the server can boot even if SECRET_KEY isn't set.
SECRET_KEY = os.getenv("SECRET_KEY", "dev_secret_change_me")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24 * 7)) or "10080")
SESSION_COOKIE_NAME = os.getenv("SESSION_COOKIE_NAME", "access_token")

# External identity provider. Tokens are minted by the provider; we only verify them.
IDENTITY_PROVIDER_NAME = os.getenv("IDENTITY_PROVIDER_NAME", "firebase")
IDENTITY_PROVIDER_SECRET = os.getenv("IDENTITY_PROVIDER_SECRET", "dev_identity_secret_change_me")
IDENTITY_TOKEN_HEADER = os.getenv("IDENTITY_TOKEN_HEADER", "X-Identity-Token")

LOG_LEVEL = (os.getenv("LOG_LEVEL", "INFO") or "INFO").strip().upper()

FRONTEND_ORIGINS = [
    origin.strip()
    for origin in os.getenv("FRONTEND_ORIGINS", "").split(",")
    if origin.strip()
]
