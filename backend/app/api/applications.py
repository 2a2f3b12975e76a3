import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from ..database import get_db
from ..models.application import Application
from ..models.job_posting import JobPosting
from ..models.user import User
from ..schemas.job_board import ApplicationCreate, ApplicationUpdate, ApplicationView, clamp_score
from ..utils.error_handlers import NotFoundError, get_error_message, handle_database_error
from ..utils.roles import candidate_only, recruiter_only
from ..utils.validation import validate_application_status, validate_string_field
from .jobs import get_owned_job

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Applications"])


@router.post("/applications", status_code=201)
def apply_to_job(payload: ApplicationCreate, user: User = Depends(candidate_only), db: Session = Depends(get_db)):
    job = db.query(JobPosting).filter(JobPosting.id == payload.job_id).first()
    if not job:
        raise NotFoundError(get_error_message("job_not_found"))
    if not job.is_active:
        raise HTTPException(status_code=400, detail=get_error_message("job_closed"))

    existing = (
        db.query(Application)
        .filter(Application.candidate_id == user.id, Application.job_id == job.id)
        .first()
    )
    if existing:
        raise HTTPException(status_code=400, detail=get_error_message("already_applied"))

    application = Application(candidate_id=user.id, job_id=job.id, status="applied")
    try:
        db.add(application)
        db.commit()
    except IntegrityError:
        # Lost a race with a concurrent submit for the same job.
        db.rollback()
        raise HTTPException(status_code=400, detail=get_error_message("already_applied"))
    except SQLAlchemyError as e:
        db.rollback()
        raise handle_database_error(e, "creating application")
    db.refresh(application)

    logger.info("Candidate %s applied to job %s", user.id, job.id)
    return ApplicationView.from_model(application).model_dump(mode="json")


@router.get("/candidate/applications")
def list_candidate_applications(user: User = Depends(candidate_only), db: Session = Depends(get_db)):
    applications = (
        db.query(Application)
        .options(joinedload(Application.job))
        .filter(Application.candidate_id == user.id)
        .order_by(Application.created_at.desc(), Application.id.desc())
        .all()
    )
    return [ApplicationView.from_model(a, with_job=True).model_dump(mode="json") for a in applications]


@router.get("/jobs/{job_id}/applications")
def list_job_applications(job_id: int, user: User = Depends(recruiter_only), db: Session = Depends(get_db)):
    job = get_owned_job(db, job_id, user)
    applications = (
        db.query(Application)
        .options(joinedload(Application.candidate))
        .filter(Application.job_id == job.id)
        .order_by(Application.created_at.desc(), Application.id.desc())
        .all()
    )
    return [ApplicationView.from_model(a, with_candidate=True).model_dump(mode="json") for a in applications]


@router.patch("/applications/{application_id}")
def update_application(
    application_id: int,
    payload: ApplicationUpdate,
    user: User = Depends(recruiter_only),
    db: Session = Depends(get_db),
):
    status = validate_application_status(payload.status)
    score = clamp_score(payload.score)
    notes = validate_string_field(payload.notes, "Notes", max_length=5000, required=False)

    application = db.query(Application).filter(Application.id == application_id).first()
    if not application:
        raise NotFoundError(get_error_message("application_not_found"))
    get_owned_job(db, application.job_id, user)

    application.status = status
    fields_set = payload.model_fields_set
    if "score" in fields_set:
        application.ai_score = score
    if "notes" in fields_set:
        application.ai_notes = notes
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise handle_database_error(e, "updating application")
    db.refresh(application)

    return ApplicationView.from_model(application).model_dump(mode="json")
