"""
Tests for owner-scoped job and resume repositories.
"""

import uuid
from datetime import datetime, timedelta

import pytest
from sqlalchemy.exc import OperationalError

from jobtracker.errors import ValidationError
from jobtracker.logger import get_logger
from jobtracker.repository import JobRepository, ResumeRepository, empty_page
from jobtracker.schema import parse_job_input


def broken_session():
    raise OperationalError("SELECT 1", {}, Exception("database is locked"))


class TestCreateAndGet:
    def test_round_trip(self, db, valid_job_input):
        repo = JobRepository("user_a")
        data = parse_job_input(valid_job_input)
        before = datetime.now()
        created = repo.create(data)

        fetched = repo.get_one(created.id)
        assert fetched is not None
        assert fetched.owner_id == "user_a"
        for field, value in data.items():
            assert getattr(fetched, field) == value
        assert before <= fetched.created_at <= datetime.now()
        assert fetched.updated_at is not None
        uuid.UUID(fetched.id)

    def test_absent_applied_date_defaults_to_now(self, db, valid_job_input):
        valid_job_input["appliedDate"] = ""
        before = datetime.now()
        job = JobRepository("user_a").create(parse_job_input(valid_job_input))
        assert job.applied_date >= before

    def test_owner_comes_from_repository_not_input(self, db, valid_job_input):
        data = parse_job_input(valid_job_input)
        data["owner_id"] = "user_b"
        job = JobRepository("user_a").create(data)
        assert job.owner_id == "user_a"

    def test_get_other_owners_job_is_not_found(self, db, make_job):
        job = make_job("user_b")
        repo = JobRepository("user_a")
        assert repo.get_one(job.id) is None
        assert repo.get_one(str(uuid.uuid4())) is None

    def test_resume_must_belong_to_owner(self, db, valid_job_input):
        other_resume = ResumeRepository("user_b").create({"name": "Other resume"})
        valid_job_input["resumeId"] = other_resume.id
        with pytest.raises(ValidationError) as excinfo:
            JobRepository("user_a").create(parse_job_input(valid_job_input))
        assert excinfo.value.fields == ["resumeId"]

    def test_own_resume_is_accepted(self, db, valid_job_input):
        resume = ResumeRepository("user_a").create({"name": "My resume"})
        valid_job_input["resumeId"] = resume.id
        job = JobRepository("user_a").create(parse_job_input(valid_job_input))
        assert job.resume_id == resume.id

    def test_own_resume_accepted_in_uppercase(self, db, valid_job_input):
        resume = ResumeRepository("user_a").create({"name": "My resume"})
        valid_job_input["resumeId"] = resume.id.upper()
        job = JobRepository("user_a").create(parse_job_input(valid_job_input))
        assert job.resume_id == resume.id

    def test_requires_owner(self):
        with pytest.raises(ValueError):
            JobRepository("")


class TestList:
    def test_never_returns_other_owners_jobs(self, db, make_job):
        for i in range(3):
            make_job("user_a", position=f"a job {i}")
            make_job("user_b", position=f"b job {i}")

        result = JobRepository("user_a").list(limit=50)
        assert result["count"] == 3
        assert {job.owner_id for job in result["jobs"]} == {"user_a"}

    def test_pagination(self, db, make_job):
        start = datetime(2025, 1, 1)
        for i in range(25):
            make_job("user_a", applied_date=start + timedelta(days=i))

        repo = JobRepository("user_a")
        first = repo.list(page=1, limit=10)
        assert len(first["jobs"]) == 10
        assert first["count"] == 25
        assert first["totalPages"] == 3
        assert first["page"] == 1

        last = repo.list(page=3, limit=10)
        assert len(last["jobs"]) == 5
        assert last["page"] == 3

    def test_newest_applied_first(self, db, make_job):
        make_job(position="middle", applied_date=datetime(2025, 5, 1))
        make_job(position="newest", applied_date=datetime(2025, 9, 1))
        make_job(position="oldest", applied_date=datetime(2025, 1, 1))

        jobs = JobRepository("user_a").list()["jobs"]
        assert [j.position for j in jobs] == ["newest", "middle", "oldest"]

    def test_search_matches_position_or_company_case_insensitive(self, db, make_job):
        make_job(position="Data Engineer", company="Globex")
        make_job(position="Designer", company="DATAWORKS")
        make_job(position="Accountant", company="Initech")

        result = JobRepository("user_a").list(search="data")
        assert result["count"] == 2
        assert {j.position for j in result["jobs"]} == {"Data Engineer", "Designer"}

    @pytest.mark.parametrize("term", ["_", "%", "1%", "/"])
    def test_search_treats_wildcards_literally(self, db, make_job, term):
        make_job(position="Engineer", company=f"Acme {term} Labs")
        make_job(position="Engineer", company="Globex")

        result = JobRepository("user_a").list(search=term)
        assert result["count"] == 1
        assert result["jobs"][0].company == f"Acme {term} Labs"

    def test_page_past_integer_range_is_empty(self, db, make_job):
        make_job()

        result = JobRepository("user_a").list(page=10 ** 19)
        assert result["jobs"] == []
        assert result["count"] == 1
        assert result["page"] == 10 ** 19

    def test_huge_limit_returns_everything(self, db, make_job):
        make_job()
        make_job()

        result = JobRepository("user_a").list(limit=10 ** 20)
        assert len(result["jobs"]) == 2
        assert result["totalPages"] == 1

    def test_status_filter_and_all_sentinel(self, db, make_job):
        make_job(status="offer")
        make_job(status="applied")
        make_job(status="applied")

        repo = JobRepository("user_a")
        assert repo.list(status="applied")["count"] == 2
        assert repo.list(status="offer")["count"] == 1
        assert repo.list(status="all")["count"] == 3

    def test_search_and_status_combined(self, db, make_job):
        make_job(position="Backend Engineer", status="offer")
        make_job(position="Backend Engineer", status="rejected")
        make_job(position="Frontend Engineer", status="offer")

        result = JobRepository("user_a").list(search="backend", status="offer")
        assert result["count"] == 1

    def test_empty_result(self, db):
        assert JobRepository("user_a").list() == {"jobs": [], "count": 0, "page": 1, "totalPages": 0}

    def test_list_all_for_owner(self, db, make_job):
        for i in range(12):
            make_job("user_a", applied_date=datetime(2025, 1, 1) + timedelta(days=i))
        make_job("user_b")

        jobs = JobRepository("user_a").list_all_for_owner()
        assert len(jobs) == 12
        assert jobs[0].applied_date > jobs[-1].applied_date


class TestUpdateAndDelete:
    def test_update_replaces_fields(self, db, make_job, valid_job_input):
        job = make_job(notes="old notes", salary_range="$1")
        valid_job_input["notes"] = ""
        valid_job_input["status"] = "offer"

        updated = JobRepository("user_a").update(job.id, parse_job_input(valid_job_input))
        assert updated.status == "offer"
        assert updated.notes is None
        assert updated.salary_range == "$150k-180k"
        assert updated.owner_id == "user_a"

    def test_update_keeps_applied_date_when_absent(self, db, make_job, valid_job_input):
        job = make_job(applied_date=datetime(2024, 3, 3))
        valid_job_input.pop("appliedDate")
        updated = JobRepository("user_a").update(job.id, parse_job_input(valid_job_input))
        assert updated.applied_date == datetime(2024, 3, 3)

    def test_update_other_owners_job_fails(self, db, make_job, valid_job_input):
        job = make_job("user_b", position="untouched")
        assert JobRepository("user_a").update(job.id, parse_job_input(valid_job_input)) is None
        assert JobRepository("user_b").get_one(job.id).position == "untouched"

    def test_delete(self, db, make_job):
        job = make_job()
        repo = JobRepository("user_a")
        deleted = repo.delete(job.id)
        assert deleted.id == job.id
        assert repo.get_one(job.id) is None
        assert repo.delete(job.id) is None

    def test_delete_other_owners_job_fails(self, db, make_job):
        job = make_job("user_b")
        assert JobRepository("user_a").delete(job.id) is None
        assert JobRepository("user_b").get_one(job.id) is not None


class TestStorageFailures:
    """Storage errors are logged and downgraded, never raised."""

    def test_single_record_operations_return_none(self, valid_job_input):
        repo = JobRepository("user_a", session_factory=broken_session)
        data = parse_job_input(valid_job_input)
        assert repo.create(data) is None
        assert repo.get_one("x") is None
        assert repo.update("x", data) is None
        assert repo.delete("x") is None

    def test_list_reads_return_empty(self):
        repo = JobRepository("user_a", session_factory=broken_session)
        assert repo.list(search="x", page=2) == empty_page()
        assert repo.list_all_for_owner() == []
        assert ResumeRepository("user_a", session_factory=broken_session).list() == []

    def test_failures_are_counted(self):
        JobRepository("user_a", session_factory=broken_session).list()
        metrics = get_logger().get_metrics()
        assert metrics["failed"] == 1
        assert metrics["errors_by_type"]["OperationalError"] == 1
