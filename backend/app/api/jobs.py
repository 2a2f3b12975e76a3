import json
import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..database import get_db
from ..models.job_posting import JobPosting
from ..models.user import User
from ..schemas.job_board import JobPostingCreate, JobPostingUpdate, JobPostingView
from ..utils.error_handlers import ForbiddenError, NotFoundError, get_error_message, handle_database_error
from ..utils.roles import recruiter_only
from ..utils.validation import validate_integer_field, validate_skills, validate_string_field

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Jobs"])

# (field, label, max_length)
_TEXT_FIELDS = (
    ("title", "Title", 150),
    ("company", "Company", 150),
    ("location", "Location", 100),
    ("description", "Description", 20000),
    ("job_type", "Job type", 30),
    ("department", "Department", 100),
)


def get_owned_job(db: Session, job_id: int, user: User) -> JobPosting:
    job = db.query(JobPosting).filter(JobPosting.id == job_id).first()
    if not job:
        raise NotFoundError(get_error_message("job_not_found"))
    if job.recruiter_id != user.id:
        raise ForbiddenError(get_error_message("job_not_owned"))
    return job


def _commit(db: Session, operation: str) -> None:
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise handle_database_error(e, operation)


@router.get("/jobs")
def list_active_jobs(
    limit: int | None = Query(None),
    offset: int | None = Query(None),
    db: Session = Depends(get_db),
):
    limit = validate_integer_field(limit, "limit", min_value=1, max_value=100, required=False)
    offset = validate_integer_field(offset, "offset", min_value=0, required=False)

    q = db.query(JobPosting).filter(JobPosting.is_active.is_(True)).order_by(JobPosting.created_at.desc(), JobPosting.id.desc())
    if offset:
        q = q.offset(offset)
    if limit:
        q = q.limit(limit)
    return [JobPostingView.from_model(j).model_dump(mode="json") for j in q.all()]


@router.get("/jobs/{job_id}")
def get_job(job_id: int, db: Session = Depends(get_db)):
    job = db.query(JobPosting).filter(JobPosting.id == job_id).first()
    if not job:
        raise NotFoundError(get_error_message("job_not_found"))
    return JobPostingView.from_model(job).model_dump(mode="json")


@router.post("/jobs", status_code=201)
def create_job(payload: JobPostingCreate, user: User = Depends(recruiter_only), db: Session = Depends(get_db)):
    values = {}
    for field, label, max_length in _TEXT_FIELDS:
        values[field] = validate_string_field(getattr(payload, field), label, max_length=max_length)
    values["salary"] = validate_string_field(payload.salary, "Salary", max_length=50, required=False)

    job = JobPosting(
        recruiter_id=user.id,
        skills=json.dumps(validate_skills(payload.skills)),
        is_active=payload.is_active,
        **values,
    )
    db.add(job)
    _commit(db, "creating job posting")
    db.refresh(job)

    logger.info("Recruiter %s created job posting %s", user.id, job.id)
    return JobPostingView.from_model(job).model_dump(mode="json")


@router.patch("/jobs/{job_id}")
def update_job(
    job_id: int,
    payload: JobPostingUpdate,
    user: User = Depends(recruiter_only),
    db: Session = Depends(get_db),
):
    job = get_owned_job(db, job_id, user)
    changes = payload.model_dump(exclude_unset=True)
    if not changes:
        raise HTTPException(status_code=400, detail=get_error_message("invalid_job_data"))

    for field, label, max_length in _TEXT_FIELDS:
        if field in changes:
            setattr(job, field, validate_string_field(changes[field], label, max_length=max_length))
    if "salary" in changes:
        job.salary = validate_string_field(changes["salary"], "Salary", max_length=50, required=False)
    if "skills" in changes:
        job.skills = json.dumps(validate_skills(changes["skills"]))
    if "is_active" in changes and changes["is_active"] is not None:
        job.is_active = bool(changes["is_active"])

    _commit(db, "updating job posting")
    db.refresh(job)
    return JobPostingView.from_model(job).model_dump(mode="json")


@router.get("/recruiter/jobs")
def list_recruiter_jobs(user: User = Depends(recruiter_only), db: Session = Depends(get_db)):
    jobs = (
        db.query(JobPosting)
        .filter(JobPosting.recruiter_id == user.id)
        .order_by(JobPosting.created_at.desc(), JobPosting.id.desc())
        .all()
    )
    return [JobPostingView.from_model(j).model_dump(mode="json") for j in jobs]
