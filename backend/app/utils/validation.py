"""
Request field validation. Failures raise HTTPException(400) with a readable detail.
"""
import re
from typing import Any
from fastapi import HTTPException

from ..schemas.job_board import ApplicationStatus
from ..services.route_authorization import Role, parse_role


def validate_email(email: str) -> str:
    """Validate email format."""
    if not email or not isinstance(email, str):
        raise HTTPException(status_code=400, detail="Email is required")

    email = email.strip().lower()
    if len(email) > 255:
        raise HTTPException(status_code=400, detail="Email too long (max 255 characters)")

    # Basic email regex
    pattern = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
    if not re.match(pattern, email):
        raise HTTPException(status_code=400, detail="Invalid email format")

    return email


def validate_password(password: str) -> None:
    """Validate password strength."""
    if not password or not isinstance(password, str):
        raise HTTPException(status_code=400, detail="Password is required")

    if len(password) < 6:
        raise HTTPException(status_code=400, detail="Password must be at least 6 characters")

    # bcrypt limit
    if len(password.encode("utf-8")) > 72:
        raise HTTPException(status_code=400, detail="Password too long (max 72 bytes)")


def validate_string_field(
    value: Any,
    field_name: str,
    min_length: int = 1,
    max_length: int = 1000,
    required: bool = True,
    pattern: str | None = None,
) -> str | None:
    """Validate a string field with common rules."""
    if value is None:
        if required:
            raise HTTPException(status_code=400, detail=f"{field_name} is required")
        return None

    if not isinstance(value, str):
        raise HTTPException(status_code=400, detail=f"{field_name} must be a string")

    value = value.strip()

    if not value:
        if required:
            raise HTTPException(status_code=400, detail=f"{field_name} cannot be empty")
        return None

    if len(value) < min_length:
        raise HTTPException(
            status_code=400,
            detail=f"{field_name} must be at least {min_length} characters"
        )

    if len(value) > max_length:
        raise HTTPException(
            status_code=400,
            detail=f"{field_name} must not exceed {max_length} characters"
        )

    if pattern and not re.match(pattern, value):
        raise HTTPException(status_code=400, detail=f"{field_name} format is invalid")

    return value


def validate_integer_field(
    value: Any,
    field_name: str,
    min_value: int | None = None,
    max_value: int | None = None,
    required: bool = True,
) -> int | None:
    """Validate an integer field."""
    if value is None:
        if required:
            raise HTTPException(status_code=400, detail=f"{field_name} is required")
        return None

    if isinstance(value, bool):
        raise HTTPException(status_code=400, detail=f"{field_name} must be a valid integer")

    if not isinstance(value, int):
        try:
            value = int(value)
        except (ValueError, TypeError):
            raise HTTPException(status_code=400, detail=f"{field_name} must be a valid integer")

    if min_value is not None and value < min_value:
        raise HTTPException(
            status_code=400,
            detail=f"{field_name} must be at least {min_value}"
        )

    if max_value is not None and value > max_value:
        raise HTTPException(
            status_code=400,
            detail=f"{field_name} must not exceed {max_value}"
        )

    return value


def validate_role(role: str) -> str:
    """Validate user role."""
    if not role or not isinstance(role, str):
        raise HTTPException(status_code=400, detail="Role is required")

    parsed = parse_role(role.strip().lower())
    if parsed is None:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid role. Must be one of: {', '.join(r.value for r in Role)}"
        )

    return parsed.value


def validate_application_status(status: str | None) -> str:
    """Validate application status."""
    if not status or not isinstance(status, str):
        raise HTTPException(status_code=400, detail="Status is required")

    try:
        return ApplicationStatus(status.strip().lower()).value
    except ValueError:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid status. Must be one of: {', '.join(s.value for s in ApplicationStatus)}"
        )


def validate_skills(skills: Any) -> list[str]:
    """Validate a list of skill names; blanks and duplicates are dropped."""
    if skills is None:
        return []
    if isinstance(skills, str):
        skills = skills.split(",")
    if not isinstance(skills, list):
        raise HTTPException(status_code=400, detail="Skills must be a list of strings")

    cleaned: list[str] = []
    seen: set[str] = set()
    for item in skills:
        if not isinstance(item, str):
            raise HTTPException(status_code=400, detail="Skills must be a list of strings")
        item = item.strip()
        if item and item.lower() not in seen:
            seen.add(item.lower())
            cleaned.append(item)
    if len(cleaned) > 50:
        raise HTTPException(status_code=400, detail="Too many skills (max 50)")
    return cleaned
