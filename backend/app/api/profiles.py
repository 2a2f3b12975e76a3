import json
import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..database import get_db
from ..models.candidate_profile import CandidateProfile
from ..models.recruiter_profile import RecruiterProfile
from ..models.user import User
from ..schemas.profiles import (
    CandidateProfileUpdate,
    CandidateProfileView,
    RecruiterProfileUpdate,
    RecruiterProfileView,
)
from ..utils.error_handlers import NotFoundError, get_error_message, handle_database_error
from ..utils.roles import candidate_only, recruiter_only
from ..utils.validation import validate_skills, validate_string_field

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Profiles"])

# (field, label, max_length)
_CANDIDATE_TEXT_FIELDS = (
    ("experience", "Experience", 20000),
    ("education", "Education", 20000),
    ("resume_text", "Resume text", 100000),
    ("summary", "Summary", 5000),
)


def _save(db: Session, obj, operation: str) -> None:
    try:
        db.add(obj)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise handle_database_error(e, operation)
    db.refresh(obj)


def get_or_create_candidate_profile(db: Session, user: User) -> CandidateProfile:
    profile = db.query(CandidateProfile).filter(CandidateProfile.user_id == user.id).first()
    if profile:
        return profile

    profile = CandidateProfile(user_id=user.id, skills="[]", experience="", education="", resume_text="")
    try:
        db.add(profile)
        db.commit()
    except IntegrityError:
        # Another request created it first.
        db.rollback()
        return db.query(CandidateProfile).filter(CandidateProfile.user_id == user.id).one()
    except SQLAlchemyError as e:
        db.rollback()
        raise handle_database_error(e, "creating candidate profile")
    db.refresh(profile)
    logger.info("Created empty profile for candidate %s", user.id)
    return profile


@router.get("/candidate/profile")
def get_candidate_profile(user: User = Depends(candidate_only), db: Session = Depends(get_db)):
    profile = get_or_create_candidate_profile(db, user)
    return CandidateProfileView.from_model(profile).model_dump(mode="json")


@router.patch("/candidate/profile")
def update_candidate_profile(
    payload: CandidateProfileUpdate,
    user: User = Depends(candidate_only),
    db: Session = Depends(get_db),
):
    changes = payload.model_dump(exclude_unset=True)
    profile = get_or_create_candidate_profile(db, user)

    for field, label, max_length in _CANDIDATE_TEXT_FIELDS:
        if field in changes:
            value = validate_string_field(changes[field], label, max_length=max_length, required=False)
            if value is None and field != "summary":
                value = ""
            setattr(profile, field, value)
    if "skills" in changes:
        profile.skills = json.dumps(validate_skills(changes["skills"]))

    _save(db, profile, "updating candidate profile")
    return CandidateProfileView.from_model(profile).model_dump(mode="json")


@router.get("/recruiter/profile")
def get_recruiter_profile(user: User = Depends(recruiter_only), db: Session = Depends(get_db)):
    profile = db.query(RecruiterProfile).filter(RecruiterProfile.user_id == user.id).first()
    if not profile:
        raise NotFoundError(get_error_message("recruiter_profile_not_found"))
    return RecruiterProfileView.from_model(profile).model_dump(mode="json")


@router.patch("/recruiter/profile")
def update_recruiter_profile(
    payload: RecruiterProfileUpdate,
    user: User = Depends(recruiter_only),
    db: Session = Depends(get_db),
):
    changes = payload.model_dump(exclude_unset=True)
    profile = db.query(RecruiterProfile).filter(RecruiterProfile.user_id == user.id).first()

    if profile is None:
        # First save needs a company; position may follow later.
        if not changes.get("company"):
            raise NotFoundError(get_error_message("recruiter_profile_not_found"))
        profile = RecruiterProfile(user_id=user.id, position="")
    elif not changes:
        raise HTTPException(status_code=400, detail=get_error_message("validation_error"))

    if "company" in changes:
        profile.company = validate_string_field(changes["company"], "Company", max_length=150)
    if "position" in changes:
        profile.position = validate_string_field(changes["position"], "Position", max_length=150, required=False) or ""

    _save(db, profile, "updating recruiter profile")
    return RecruiterProfileView.from_model(profile).model_dump(mode="json")
