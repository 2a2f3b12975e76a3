from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..database import Base


class JobPosting(Base):
    __tablename__ = "job_postings"

    id = Column(Integer, primary_key=True, index=True)
    recruiter_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    title = Column(String(150), nullable=False)
    company = Column(String(150), nullable=False)
    location = Column(String(100), nullable=False)
    description = Column(Text, nullable=False)
    salary = Column(String(50), nullable=True)
    job_type = Column(String(30), nullable=False)  # Full-time, Part-time, Contract
    department = Column(String(100), nullable=False)
    skills = Column(Text, nullable=True)  # JSON string list of required skills
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    recruiter = relationship("User", back_populates="job_postings")
    applications = relationship("Application", back_populates="job", cascade="all, delete-orphan")
