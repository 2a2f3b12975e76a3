from datetime import datetime

from pydantic import BaseModel, Field

from .job_board import ApplicationStatus, JobPostingView, parse_skills


class CandidateProfileView(BaseModel):
    id: int
    user_id: int
    skills: list[str] = Field(default_factory=list)
    experience: str = ""
    education: str = ""
    resume_text: str = ""
    summary: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_model(cls, profile) -> "CandidateProfileView":
        return cls(
            id=profile.id,
            user_id=profile.user_id,
            skills=parse_skills(profile.skills),
            experience=profile.experience or "",
            education=profile.education or "",
            resume_text=profile.resume_text or "",
            summary=profile.summary,
            created_at=profile.created_at,
            updated_at=profile.updated_at,
        )


class CandidateProfileUpdate(BaseModel):
    skills: list[str] | str | None = None
    experience: str | None = None
    education: str | None = None
    resume_text: str | None = None
    summary: str | None = None


class RecruiterProfileView(BaseModel):
    id: int
    user_id: int
    company: str
    position: str = ""
    created_at: datetime | None = None

    @classmethod
    def from_model(cls, profile) -> "RecruiterProfileView":
        return cls(
            id=profile.id,
            user_id=profile.user_id,
            company=profile.company,
            position=profile.position or "",
            created_at=profile.created_at,
        )


class RecruiterProfileUpdate(BaseModel):
    company: str | None = None
    position: str | None = None


def empty_status_breakdown() -> dict[str, int]:
    return {status.value: 0 for status in ApplicationStatus}


class JobApplicationStats(JobPostingView):
    application_count: int = 0
    status_breakdown: dict[str, int] = Field(default_factory=empty_status_breakdown)


class RecruiterAnalytics(BaseModel):
    total_jobs: int = 0
    active_jobs: int = 0
    total_applications: int = 0
    applications_by_status: dict[str, int] = Field(default_factory=empty_status_breakdown)
    jobs_with_applications: list[JobApplicationStats] = Field(default_factory=list)
