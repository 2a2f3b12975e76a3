"""
Centralized error handling and user-friendly error messages.
"""
import logging
from fastapi import HTTPException
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base application error."""
    def __init__(self, message: str, status_code: int = 500, details: dict | None = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class NotFoundError(AppError):
    """Resource not found error."""
    def __init__(self, message: str = "Resource not found", details: dict | None = None):
        super().__init__(message, status_code=404, details=details)


class UnauthorizedError(AppError):
    """Unauthorized access error."""
    def __init__(self, message: str = "Unauthorized access", details: dict | None = None):
        super().__init__(message, status_code=401, details=details)


class ForbiddenError(AppError):
    """Forbidden access error."""
    def __init__(self, message: str = "Access forbidden", details: dict | None = None):
        super().__init__(message, status_code=403, details=details)


# User-friendly error messages
ERROR_MESSAGES = {
    # Authentication
    "invalid_credentials": "Invalid email or password. Please try again.",
    "email_exists": "An account with this email already exists. Please login instead.",
    "weak_password": "Password must be at least 6 characters long.",
    "role_mismatch": "Role mismatch. Please select the correct account type.",

    # Jobs
    "job_not_found": "Job posting not found or has been removed.",
    "job_closed": "This job posting is no longer accepting applications.",
    "job_not_owned": "Not authorized to manage this job posting.",
    "invalid_job_data": "Job information is incomplete. Please fill in all required fields.",

    # Applications
    "application_not_found": "Application not found. It may have been withdrawn.",
    "already_applied": "You have already applied to this job.",

    # Profiles
    "recruiter_profile_not_found": "Recruiter profile not found. Add your company details first.",

    # Pages
    "redirect_loop": "This page keeps redirecting. Please contact support about your account role.",

    # General
    "unauthorized": "Please login to access this feature.",
    "server_error": "Something went wrong on our end. Please try again later.",
    "database_error": "Database connection issue. Please try again later.",
    "validation_error": "Please check your input and try again.",
}


def get_error_message(error_key: str, default: str | None = None) -> str:
    """Get a user-friendly error message."""
    return ERROR_MESSAGES.get(error_key, default or ERROR_MESSAGES["server_error"])


def handle_database_error(error: Exception, operation: str = "") -> HTTPException:
    """Handle database errors with user-friendly messages."""
    logger.error(f"Database error during {operation}: {error}")

    error_str = str(error).lower()

    # Detect specific DB errors
    if "duplicate" in error_str or "unique" in error_str:
        return HTTPException(
            status_code=409,
            detail="This record already exists. Please check your input."
        )

    if "foreign key" in error_str:
        return HTTPException(
            status_code=400,
            detail="Invalid reference. The related record may have been deleted."
        )

    if "connection" in error_str or "operational" in error_str:
        return HTTPException(
            status_code=503,
            detail=get_error_message("database_error")
        )

    return HTTPException(
        status_code=500,
        detail=get_error_message("server_error")
    )


def create_error_response(
    status_code: int,
    message: str,
    details: dict | None = None
) -> JSONResponse:
    """Create a standardized error response."""
    content = {
        "success": False,
        "error": message,
        "status_code": status_code,
    }

    if details:
        content["details"] = details

    return JSONResponse(
        status_code=status_code,
        content=content
    )
