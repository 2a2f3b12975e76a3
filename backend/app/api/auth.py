from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
import logging

from ..config import ACCESS_TOKEN_EXPIRE_MINUTES, SESSION_COOKIE_NAME
from ..database import get_db
from ..models.recruiter_profile import RecruiterProfile
from ..models.user import User
from ..services.route_authorization import Role
from ..utils.dependencies import get_current_user
from ..utils.jwt import create_access_token
from ..utils.security import hash_password, verify_password
from ..utils.validation import validate_email, validate_password, validate_role, validate_string_field
from ..utils.error_handlers import get_error_message, handle_database_error

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


class SignupRequest(BaseModel):
    email: str
    password: str
    role: str  # recruiter / candidate
    name: str | None = None  # optional (frontend collects name)
    company: str | None = None  # recruiters: seeds the recruiter profile
    position: str | None = None


class LoginRequest(BaseModel):
    email: str
    password: str
    role: str | None = None  # optional role gate (frontend-selected role)


def _user_to_public(user: User) -> dict:
    return {"id": user.id, "email": user.email, "role": user.role, "name": user.name}


def _issue_session(response: Response, user: User) -> str:
    try:
        token = create_access_token({"sub": str(user.id), "role": user.role})
    except Exception as e:
        logger.error(f"Token creation error: {e}")
        raise HTTPException(status_code=500, detail=get_error_message("server_error"))

    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=token,
        max_age=ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        httponly=True,
        samesite="lax",
    )
    return token


@router.post("/signup")
def signup(payload: SignupRequest, response: Response, db: Session = Depends(get_db)):
    # Validate input
    email = validate_email(payload.email)
    validate_password(payload.password)
    role = validate_role(payload.role)
    name = validate_string_field(payload.name, "Name", max_length=255, required=False)
    company = validate_string_field(payload.company, "Company", max_length=150, required=False)
    position = validate_string_field(payload.position, "Position", max_length=150, required=False)

    # Check if email already exists
    try:
        existing = db.query(User).filter(User.email == email).first()
    except SQLAlchemyError as e:
        raise handle_database_error(e, "checking existing user")
    if existing:
        raise HTTPException(status_code=400, detail=get_error_message("email_exists"))

    # Hash password
    try:
        hashed = hash_password(payload.password)
    except ValueError:
        raise HTTPException(status_code=400, detail=get_error_message("weak_password"))

    user = User(name=name, email=email, password=hashed, role=role)
    try:
        db.add(user)
        db.flush()
        if role == Role.RECRUITER.value and company:
            db.add(RecruiterProfile(user_id=user.id, company=company, position=position or ""))
        db.commit()
        db.refresh(user)
    except SQLAlchemyError as e:
        db.rollback()
        raise handle_database_error(e, "creating user")

    logger.info("Registered %s account id=%s", role, user.id)
    token = _issue_session(response, user)

    return {
        "message": "User created successfully",
        "user": _user_to_public(user),
        "access_token": token,
        "token_type": "bearer",
    }


@router.post("/login")
def login(payload: LoginRequest, response: Response, db: Session = Depends(get_db)):
    email = validate_email(payload.email)
    if not payload.password:
        raise HTTPException(status_code=400, detail="Password is required")

    try:
        user = db.query(User).filter(User.email == email).first()
    except SQLAlchemyError as e:
        raise handle_database_error(e, "login")

    # Verify credentials
    if not user or not verify_password(payload.password, user.password):
        raise HTTPException(status_code=401, detail=get_error_message("invalid_credentials"))

    # Check role match if provided
    if payload.role and user.role != payload.role:
        raise HTTPException(status_code=403, detail=get_error_message("role_mismatch"))

    token = _issue_session(response, user)

    return {
        "access_token": token,
        "token_type": "bearer",
        "user": _user_to_public(user),
    }


@router.post("/logout")
def logout(response: Response):
    response.delete_cookie(SESSION_COOKIE_NAME)
    return {"message": "Logged out successfully"}


@router.get("/me")
def me(user: User = Depends(get_current_user)):
    return {"user": _user_to_public(user)}
