from datetime import datetime
from enum import Enum
import json

from pydantic import BaseModel, Field, field_validator


class ApplicationStatus(str, Enum):
    APPLIED = "applied"
    UNDER_REVIEW = "under_review"
    INTERVIEW_SCHEDULED = "interview_scheduled"
    REJECTED = "rejected"
    ACCEPTED = "accepted"


def clamp_score(v):
    """Scores are stored as whole numbers in 0-100; anything unparseable is dropped."""
    if v is None:
        return None
    try:
        v2 = int(v)
    except Exception:
        return None
    if v2 < 0:
        return 0
    if v2 > 100:
        return 100
    return v2


def parse_skills(raw) -> list[str]:
    try:
        skills = json.loads(raw) if raw else []
    except (TypeError, ValueError):
        return []
    if not isinstance(skills, list):
        return []
    return [s for s in skills if isinstance(s, str)]


class JobPostingView(BaseModel):
    id: int
    recruiter_id: int
    title: str
    company: str
    location: str
    description: str
    salary: str | None = None
    job_type: str
    department: str
    skills: list[str] = Field(default_factory=list)
    is_active: bool = True
    created_at: datetime | None = None

    @classmethod
    def from_model(cls, job) -> "JobPostingView":
        return cls(
            id=job.id,
            recruiter_id=job.recruiter_id,
            title=job.title,
            company=job.company,
            location=job.location,
            description=job.description,
            salary=job.salary,
            job_type=job.job_type,
            department=job.department,
            skills=parse_skills(job.skills),
            is_active=bool(job.is_active),
            created_at=job.created_at,
        )


class CandidateSummary(BaseModel):
    id: int
    email: str
    name: str | None = None


class ApplicationView(BaseModel):
    id: int
    candidate_id: int
    job_id: int
    status: ApplicationStatus = ApplicationStatus.APPLIED
    score: int | None = None  # 0-100
    notes: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    job: JobPostingView | None = None
    candidate: CandidateSummary | None = None

    @field_validator("score", mode="before")
    @classmethod
    def _clamp(cls, v):
        return clamp_score(v)

    @classmethod
    def from_model(cls, application, *, with_job: bool = False, with_candidate: bool = False) -> "ApplicationView":
        job = application.job if with_job else None
        candidate = application.candidate if with_candidate else None
        return cls(
            id=application.id,
            candidate_id=application.candidate_id,
            job_id=application.job_id,
            status=application.status or ApplicationStatus.APPLIED,
            score=application.ai_score,
            notes=application.ai_notes,
            created_at=application.created_at,
            updated_at=application.updated_at,
            job=JobPostingView.from_model(job) if job is not None else None,
            candidate=(
                CandidateSummary(id=candidate.id, email=candidate.email, name=candidate.name)
                if candidate is not None
                else None
            ),
        )


class JobPostingCreate(BaseModel):
    title: str
    company: str
    location: str
    description: str
    salary: str | None = None
    job_type: str = "Full-time"
    department: str
    skills: list[str] | str | None = None
    is_active: bool = True


class JobPostingUpdate(BaseModel):
    title: str | None = None
    company: str | None = None
    location: str | None = None
    description: str | None = None
    salary: str | None = None
    job_type: str | None = None
    department: str | None = None
    skills: list[str] | str | None = None
    is_active: bool | None = None


class ApplicationCreate(BaseModel):
    job_id: int


class ApplicationUpdate(BaseModel):
    status: str
    score: int | None = None
    notes: str | None = None
