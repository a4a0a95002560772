"""
Pytest configuration and shared fixtures.
"""

import pytest
from datetime import datetime
from typing import Dict, Any

from jobtracker.auth import issue_token
from jobtracker.database import Job, dispose_database, get_session, init_database
from jobtracker.env import Settings
from jobtracker.logger import get_logger, reset_logger
from jobtracker.web import create_app


@pytest.fixture(autouse=True)
def quiet_logger(tmp_path):
    """Route the global logger to a temp directory, no console output."""
    reset_logger()
    get_logger(log_dir=tmp_path / "logs", enable_console=False)
    yield
    reset_logger()


@pytest.fixture
def db_url(tmp_path) -> str:
    return f"sqlite:///{tmp_path / 'test.db'}"


@pytest.fixture
def db(db_url):
    """Initialise a fresh SQLite database for the test."""
    dispose_database()
    init_database(db_url)
    yield
    dispose_database()


@pytest.fixture
def make_job(db):
    """Insert a job directly, bypassing validation, with controllable timestamps."""

    def _make(owner_id: str = "user_a", **overrides) -> Job:
        fields = {
            "position": "software engineer",
            "company": "acme corp",
            "location": "remote",
            "status": "applied",
            "mode": "full-time",
            "applied_date": datetime(2025, 10, 1),
        }
        fields.update(overrides)
        with get_session() as session:
            job = Job(owner_id=owner_id, **fields)
            session.add(job)
            session.commit()
            return job

    return _make


@pytest.fixture
def valid_job_input() -> Dict[str, Any]:
    """Raw job input as a client would post it."""
    return {
        "position": "Senior Software Engineer",
        "company": "Google",
        "location": "Mountain View, CA",
        "status": "interview",
        "mode": "full-time",
        "salaryRange": "$150k-180k",
        "jobUrl": "https://careers.google.com/jobs/123456",
        "website": "https://google.com",
        "coverLetterUrl": "https://example.com/cover-letters/google-swe.pdf",
        "notes": "Focus on distributed systems experience.",
        "appliedDate": "2025-09-01",
    }


@pytest.fixture
def settings(tmp_path, db_url) -> Settings:
    return Settings(database_url=db_url, log_dir=tmp_path / "logs", secret_key="test")


@pytest.fixture
def client(db, settings):
    app = create_app(settings)
    app.testing = True
    return app.test_client()


@pytest.fixture
def auth_a(db) -> Dict[str, str]:
    return {"Authorization": f"Bearer {issue_token('user_a')}"}


@pytest.fixture
def auth_b(db) -> Dict[str, str]:
    return {"Authorization": f"Bearer {issue_token('user_b')}"}
