import logging

from fastapi import APIRouter, Depends
from sqlalchemy import func
from sqlalchemy.orm import Session

from ..database import get_db
from ..models.application import Application
from ..models.job_posting import JobPosting
from ..models.user import User
from ..schemas.job_board import JobPostingView
from ..schemas.profiles import JobApplicationStats, RecruiterAnalytics, empty_status_breakdown
from ..utils.roles import recruiter_only

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Analytics"])


def build_recruiter_analytics(db: Session, recruiter_id: int) -> RecruiterAnalytics:
    """Posting and application counts across one recruiter's job postings."""
    jobs = (
        db.query(JobPosting)
        .filter(JobPosting.recruiter_id == recruiter_id)
        .order_by(JobPosting.created_at.desc(), JobPosting.id.desc())
        .all()
    )
    rows = (
        db.query(Application.job_id, Application.status, func.count(Application.id))
        .join(JobPosting, JobPosting.id == Application.job_id)
        .filter(JobPosting.recruiter_id == recruiter_id)
        .group_by(Application.job_id, Application.status)
        .all()
    )

    per_job: dict[int, dict[str, int]] = {}
    for job_id, status, count in rows:
        breakdown = per_job.setdefault(job_id, empty_status_breakdown())
        # Statuses outside the known set still count towards the job total.
        breakdown[status] = breakdown.get(status, 0) + count

    totals = empty_status_breakdown()
    stats = []
    for job in jobs:
        breakdown = per_job.get(job.id, empty_status_breakdown())
        for status, count in breakdown.items():
            if status in totals:
                totals[status] += count
        stats.append(
            JobApplicationStats(
                **JobPostingView.from_model(job).model_dump(),
                application_count=sum(breakdown.values()),
                status_breakdown=breakdown,
            )
        )

    return RecruiterAnalytics(
        total_jobs=len(jobs),
        active_jobs=sum(1 for job in jobs if job.is_active),
        total_applications=sum(s.application_count for s in stats),
        applications_by_status=totals,
        jobs_with_applications=stats,
    )


@router.get("/recruiter/analytics")
def recruiter_analytics(user: User = Depends(recruiter_only), db: Session = Depends(get_db)):
    analytics = build_recruiter_analytics(db, user.id)
    logger.debug("Analytics for recruiter %s: %s jobs", user.id, analytics.total_jobs)
    return analytics.model_dump(mode="json")
