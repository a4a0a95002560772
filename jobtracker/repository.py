"""
Owner-scoped repositories for jobs and resumes.

Every query filters on the owner identity the repository was built with;
ownership is never read from client input. Storage failures are logged and
downgraded: single-record operations return None, list reads return empty
results.
"""

import math
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError

from .database import Job, Resume, get_session
from .errors import FieldError, ValidationError
from .logger import get_logger

MUTABLE_JOB_FIELDS = [
    "position",
    "company",
    "location",
    "status",
    "mode",
    "applied_date",
    "last_contact",
    "next_follow_up",
    "salary_range",
    "job_url",
    "website",
    "resume_id",
    "cover_letter_url",
    "notes",
]


# largest value a 64-bit SQL integer column or LIMIT/OFFSET accepts
MAX_ROW_INDEX = 2 ** 63 - 1


def empty_page() -> Dict[str, Any]:
    return {"jobs": [], "count": 0, "page": 1, "totalPages": 0}


class _OwnerScoped:
    def __init__(self, owner_id: str, session_factory: Callable = get_session):
        if not owner_id:
            raise ValueError("owner_id is required")
        self.owner_id = owner_id
        self._session_factory = session_factory

    def _storage_failed(self, operation: str, error: Exception, **context) -> None:
        logger = get_logger()
        logger.record_failure(operation, type(error).__name__)
        logger.error(
            f"{operation} failed",
            owner_id=self.owner_id,
            error=str(error),
            **context,
        )


class JobRepository(_OwnerScoped):
    """CRUD and paginated reads of one owner's jobs."""

    def _scoped(self, session):
        return session.query(Job).filter(Job.owner_id == self.owner_id)

    def _check_resume(self, session, resume_id: Optional[str]) -> None:
        if resume_id is None:
            return
        owned = (
            session.query(Resume.id)
            .filter(Resume.id == resume_id, Resume.owner_id == self.owner_id)
            .first()
        )
        if owned is None:
            raise ValidationError([FieldError("resumeId", "resumeId does not match any of your resumes")])

    def create(self, data: Dict[str, Any]) -> Optional[Job]:
        """
        Persist a new job for the owner.

        Args:
            data: Sanitized input from schema.parse_job_input

        Returns:
            The stored job, or None if storage failed
        """
        logger = get_logger()
        logger.record_attempt("create_job")
        fields = {k: data.get(k) for k in MUTABLE_JOB_FIELDS}
        if fields["applied_date"] is None:
            fields["applied_date"] = datetime.now()
        try:
            with self._session_factory() as session:
                self._check_resume(session, fields["resume_id"])
                job = Job(owner_id=self.owner_id, **fields)
                session.add(job)
                session.commit()
                logger.record_success("create_job")
                logger.info("Job created", owner_id=self.owner_id, job_id=job.id)
                return job
        except SQLAlchemyError as e:
            self._storage_failed("create_job", e)
            return None

    def list(
        self,
        search: Optional[str] = None,
        status: Optional[str] = None,
        page: int = 1,
        limit: int = 10,
    ) -> Dict[str, Any]:
        """
        Return one page of the owner's jobs, newest applied first.

        Args:
            search: Case-insensitive substring matched against position or company
            status: Exact status filter; "all" or empty means no filter
            page: 1-indexed page number
            limit: Page size

        Returns:
            {"jobs", "count", "page", "totalPages"}; count ignores pagination
        """
        logger = get_logger()
        logger.record_attempt("list_jobs")
        page = max(page, 1)
        limit = min(max(limit, 1), MAX_ROW_INDEX)
        offset = (page - 1) * limit
        try:
            with self._session_factory() as session:
                query = self._scoped(session)
                if search:
                    query = query.filter(
                        or_(
                            Job.position.icontains(search, autoescape=True),
                            Job.company.icontains(search, autoescape=True),
                        )
                    )
                if status and status != "all":
                    query = query.filter(Job.status == status)

                count = query.count()
                if offset > MAX_ROW_INDEX:
                    jobs = []
                else:
                    jobs = (
                        query.order_by(Job.applied_date.desc(), Job.created_at.desc(), Job.id)
                        .offset(offset)
                        .limit(limit)
                        .all()
                    )
                logger.record_success("list_jobs")
                return {
                    "jobs": jobs,
                    "count": count,
                    "page": page,
                    "totalPages": math.ceil(count / limit),
                }
        except SQLAlchemyError as e:
            self._storage_failed("list_jobs", e, search=search, status=status, page=page)
            return empty_page()

    def get_one(self, job_id: str) -> Optional[Job]:
        """Return the owner's job with this id, or None.

        Another owner's job is indistinguishable from a missing one.
        """
        logger = get_logger()
        logger.record_attempt("get_job")
        try:
            with self._session_factory() as session:
                job = self._scoped(session).filter(Job.id == job_id).first()
                logger.record_success("get_job")
                return job
        except SQLAlchemyError as e:
            self._storage_failed("get_job", e, job_id=job_id)
            return None

    def update(self, job_id: str, data: Dict[str, Any]) -> Optional[Job]:
        """
        Replace every mutable field of the owner's job.

        An absent applied date keeps the stored one.

        Returns:
            The updated job, or None if it does not exist for this owner
            or storage failed
        """
        logger = get_logger()
        logger.record_attempt("update_job")
        try:
            with self._session_factory() as session:
                job = self._scoped(session).filter(Job.id == job_id).first()
                if job is None:
                    logger.warning("Update of unknown job", owner_id=self.owner_id, job_id=job_id)
                    return None
                self._check_resume(session, data.get("resume_id"))
                for field in MUTABLE_JOB_FIELDS:
                    value = data.get(field)
                    if field == "applied_date" and value is None:
                        continue
                    setattr(job, field, value)
                session.commit()
                logger.record_success("update_job")
                logger.info("Job updated", owner_id=self.owner_id, job_id=job_id)
                return job
        except SQLAlchemyError as e:
            self._storage_failed("update_job", e, job_id=job_id)
            return None

    def delete(self, job_id: str) -> Optional[Job]:
        """Remove the owner's job; returns the deleted job or None."""
        logger = get_logger()
        logger.record_attempt("delete_job")
        try:
            with self._session_factory() as session:
                job = self._scoped(session).filter(Job.id == job_id).first()
                if job is None:
                    logger.warning("Delete of unknown job", owner_id=self.owner_id, job_id=job_id)
                    return None
                session.delete(job)
                session.commit()
                logger.record_success("delete_job")
                logger.info("Job deleted", owner_id=self.owner_id, job_id=job_id)
                return job
        except SQLAlchemyError as e:
            self._storage_failed("delete_job", e, job_id=job_id)
            return None

    def list_all_for_owner(self) -> List[Job]:
        """Every job of the owner, newest applied first, unpaginated."""
        logger = get_logger()
        logger.record_attempt("list_all_jobs")
        try:
            with self._session_factory() as session:
                jobs = self._scoped(session).order_by(Job.applied_date.desc(), Job.created_at.desc()).all()
                logger.record_success("list_all_jobs")
                return jobs
        except SQLAlchemyError as e:
            self._storage_failed("list_all_jobs", e)
            return []


class ResumeRepository(_OwnerScoped):
    """Create and list one owner's resumes."""

    def create(self, data: Dict[str, Any]) -> Optional[Resume]:
        logger = get_logger()
        logger.record_attempt("create_resume")
        try:
            with self._session_factory() as session:
                resume = Resume(owner_id=self.owner_id, **data)
                session.add(resume)
                session.commit()
                logger.record_success("create_resume")
                return resume
        except SQLAlchemyError as e:
            self._storage_failed("create_resume", e)
            return None

    def list(self) -> List[Resume]:
        logger = get_logger()
        logger.record_attempt("list_resumes")
        try:
            with self._session_factory() as session:
                resumes = (
                    session.query(Resume)
                    .filter(Resume.owner_id == self.owner_id)
                    .order_by(Resume.created_at.desc())
                    .all()
                )
                logger.record_success("list_resumes")
                return resumes
        except SQLAlchemyError as e:
            self._storage_failed("list_resumes", e)
            return []
