import sys
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

PROJECT_ROOT = Path(__file__).resolve().parents[2]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from backend.app.database import Base
from backend.app.models.application import Application
from backend.app.models.candidate_profile import CandidateProfile
from backend.app.models.job_posting import JobPosting
from backend.app.models.recruiter_profile import RecruiterProfile
from backend.app.models.user import User


@pytest.fixture()
def db_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


def _seed(db_session):
    recruiter = User(email="crud_recruiter@example.com", password="hashed", role="recruiter", name="Recruiter")
    candidate = User(email="crud_candidate@example.com", password="hashed", role="candidate", name="Cand")
    db_session.add_all([recruiter, candidate])
    db_session.commit()

    job = JobPosting(
        recruiter_id=recruiter.id,
        title="CRUD Job",
        company="Acme",
        location="Remote",
        description="A" * 20,
        job_type="Full-time",
        department="Engineering",
        skills='["Python"]',
    )
    db_session.add(job)
    db_session.commit()
    db_session.refresh(job)
    return recruiter, candidate, job


def test_db_crud_operations_and_relationships(db_session):
    recruiter, candidate, job = _seed(db_session)
    assert job.recruiter.email == "crud_recruiter@example.com"
    assert job.is_active is True
    assert len(recruiter.job_postings) == 1

    application = Application(job_id=job.id, candidate_id=candidate.id, ai_score=90, ai_notes="Good fit")
    db_session.add(application)
    db_session.commit()
    db_session.refresh(application)
    assert application.status == "applied"
    assert application.job.id == job.id
    assert application.candidate.id == candidate.id
    assert application.created_at is not None

    # Update application
    application.status = "under_review"
    db_session.commit()
    updated = db_session.query(Application).filter(Application.id == application.id).first()
    assert updated.status == "under_review"

    # Deleting a job removes its applications.
    db_session.delete(job)
    db_session.commit()
    assert db_session.query(Application).count() == 0


def test_one_application_per_candidate_and_job(db_session):
    _, candidate, job = _seed(db_session)
    db_session.add(Application(job_id=job.id, candidate_id=candidate.id))
    db_session.commit()

    db_session.add(Application(job_id=job.id, candidate_id=candidate.id))
    with pytest.raises(IntegrityError):
        db_session.commit()
    db_session.rollback()


def test_profiles_are_one_per_user(db_session):
    recruiter, candidate, _ = _seed(db_session)
    db_session.add(CandidateProfile(user_id=candidate.id, skills='["SQL"]', experience="3 years"))
    db_session.add(RecruiterProfile(user_id=recruiter.id, company="Acme", position="Talent Lead"))
    db_session.commit()
    db_session.refresh(candidate)
    db_session.refresh(recruiter)
    assert candidate.candidate_profile.experience == "3 years"
    assert recruiter.recruiter_profile.company == "Acme"

    db_session.add(CandidateProfile(user_id=candidate.id))
    with pytest.raises(IntegrityError):
        db_session.commit()
    db_session.rollback()
