import bcrypt

# bcrypt only looks at the first 72 bytes; longer inputs are rejected outright.
BCRYPT_MAX_BYTES = 72


def _password_bytes(password: str) -> bytes | None:
    if not password:
        return None
    pw_bytes = password.encode("utf-8")
    if len(pw_bytes) > BCRYPT_MAX_BYTES:
        return None
    return pw_bytes


def hash_password(password: str) -> str:
    """Hash a session password with bcrypt."""
    if not password:
        raise ValueError("Password is required")
    pw_bytes = _password_bytes(password)
    if pw_bytes is None:
        raise ValueError(f"Password must be {BCRYPT_MAX_BYTES} bytes or less")
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    pw_bytes = _password_bytes(password)
    if pw_bytes is None or not hashed:
        return False
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash.
        return False
