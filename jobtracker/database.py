"""
Database schema and connection management.

Uses SQLAlchemy for job storage. The engine is created once per process by
init_database() and shared by every session afterwards.
"""

import uuid
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

from sqlalchemy import (
    create_engine,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import declarative_base, relationship, sessionmaker
from sqlalchemy.pool import StaticPool

Base = declarative_base()

_engine: Optional[Engine] = None
_Session: Optional[sessionmaker] = None


def _new_id() -> str:
    return str(uuid.uuid4())


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


class Resume(Base):
    """Resume version a user can attach to applications."""

    __tablename__ = "resumes"

    id = Column(String(36), primary_key=True, default=_new_id)
    owner_id = Column(String, nullable=False, index=True)
    name = Column(String(200), nullable=False)
    version = Column(String(50), nullable=True)
    focus_area = Column(String(100), nullable=True)
    file_url = Column(String(500), nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.now)
    updated_at = Column(DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)

    jobs = relationship("Job", back_populates="resume")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "ownerId": self.owner_id,
            "name": self.name,
            "version": self.version,
            "focusArea": self.focus_area,
            "fileUrl": self.file_url,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }


class Job(Base):
    """Tracked job application."""

    __tablename__ = "jobs"

    id = Column(String(36), primary_key=True, default=_new_id)
    owner_id = Column(String, nullable=False, index=True)
    position = Column(String(200), nullable=False)
    company = Column(String(200), nullable=False)
    location = Column(String(200), nullable=False)
    status = Column(String(20), nullable=False)  # see enums.JobStatus
    mode = Column(String(20), nullable=False)  # see enums.JobMode
    applied_date = Column(DateTime, nullable=False, default=datetime.now, index=True)
    last_contact = Column(DateTime, nullable=True)
    next_follow_up = Column(DateTime, nullable=True)
    salary_range = Column(String(100), nullable=True)
    job_url = Column(String(500), nullable=True)
    website = Column(String(500), nullable=True)
    resume_id = Column(String(36), ForeignKey("resumes.id", ondelete="SET NULL"), nullable=True)
    cover_letter_url = Column(String(500), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.now)
    updated_at = Column(DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)

    resume = relationship("Resume", back_populates="jobs")
    interviews = relationship(
        "Interview", back_populates="job", cascade="all, delete-orphan", order_by="Interview.date"
    )
    contacts = relationship("JobContact", back_populates="job", cascade="all, delete-orphan")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "ownerId": self.owner_id,
            "position": self.position,
            "company": self.company,
            "location": self.location,
            "status": self.status,
            "mode": self.mode,
            "appliedDate": _iso(self.applied_date),
            "lastContact": _iso(self.last_contact),
            "nextFollowUp": _iso(self.next_follow_up),
            "salaryRange": self.salary_range,
            "jobUrl": self.job_url,
            "website": self.website,
            "resumeId": self.resume_id,
            "coverLetterUrl": self.cover_letter_url,
            "notes": self.notes,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }


class Contact(Base):
    """Recruiter or hiring contact."""

    __tablename__ = "contacts"

    id = Column(String(36), primary_key=True, default=_new_id)
    owner_id = Column(String, nullable=False, index=True)
    name = Column(String(200), nullable=False)
    email = Column(String(200), nullable=True)
    phone = Column(String(50), nullable=True)
    title = Column(String(200), nullable=True)
    company = Column(String(200), nullable=True)
    linkedin = Column(String(500), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.now)
    updated_at = Column(DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)

    jobs = relationship("JobContact", back_populates="contact", cascade="all, delete-orphan")


class Interview(Base):
    """Interview round for a job; removed together with its job."""

    __tablename__ = "interviews"

    id = Column(String(36), primary_key=True, default=_new_id)
    job_id = Column(String(36), ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False, index=True)
    round = Column(String(100), nullable=False)
    date = Column(DateTime, nullable=False)
    duration = Column(Integer, nullable=True)  # minutes
    interviewer = Column(String(200), nullable=True)
    outcome = Column(String(50), nullable=True)  # passed, failed, waiting
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.now)

    job = relationship("Job", back_populates="interviews")


class JobContact(Base):
    """Link between a job and a contact."""

    __tablename__ = "job_contacts"

    job_id = Column(String(36), ForeignKey("jobs.id", ondelete="CASCADE"), primary_key=True)
    contact_id = Column(String(36), ForeignKey("contacts.id", ondelete="CASCADE"), primary_key=True)
    role = Column(String(100), nullable=True)

    job = relationship("Job", back_populates="contacts")
    contact = relationship("Contact", back_populates="jobs")


class ApiToken(Base):
    """Bearer token issued to an owner identity."""

    __tablename__ = "api_tokens"

    token = Column(String(64), primary_key=True)
    owner_id = Column(String, nullable=False, index=True)
    created_at = Column(DateTime, nullable=False, default=datetime.now)


def init_database(url: str) -> Engine:
    """
    Initialize the process-wide engine and create tables.

    Calling again with the same URL reuses the existing engine.

    Args:
        url: SQLAlchemy database URL

    Returns:
        The shared engine
    """
    global _engine, _Session

    if _engine is not None and str(_engine.url) == str(make_url(url)):
        return _engine
    dispose_database()

    parsed = make_url(url)
    kwargs: Dict[str, Any] = {}
    if parsed.get_backend_name() == "sqlite":
        kwargs["connect_args"] = {"check_same_thread": False}
        if parsed.database in (None, "", ":memory:"):
            kwargs["poolclass"] = StaticPool
        else:
            Path(parsed.database).parent.mkdir(parents=True, exist_ok=True)

    _engine = create_engine(url, **kwargs)
    Base.metadata.create_all(_engine)
    _Session = sessionmaker(bind=_engine, expire_on_commit=False)
    return _engine


def get_engine() -> Engine:
    if _engine is None:
        raise RuntimeError("Database not initialized; call init_database() first")
    return _engine


def get_session():
    """
    Get database session bound to the shared engine.

    Returns:
        SQLAlchemy session
    """
    if _Session is None:
        raise RuntimeError("Database not initialized; call init_database() first")
    return _Session()


def dispose_database() -> None:
    """Drop the shared engine (useful for testing)."""
    global _engine, _Session
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _Session = None
