#!/usr/bin/env python3
"""
Populate the database with demo data for one owner.

Existing jobs, interviews, resumes and contacts of that owner are removed first.

Usage:
    python scripts/seed.py --owner user_123 [--database-url sqlite:///data/jobtracker.db]
"""

import argparse
from datetime import datetime
from pathlib import Path
import sys

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from jobtracker.auth import issue_token
from jobtracker.database import (
    ApiToken,
    Contact,
    Interview,
    Job,
    JobContact,
    Resume,
    get_session,
    init_database,
)
from jobtracker.env import get_settings

RESUMES = [
    {"name": "Full-Stack Developer Resume", "version": "v2.1", "focus_area": "Full-Stack",
     "file_url": "https://example.com/resumes/fullstack-v2.1.pdf"},
    {"name": "Frontend Specialist Resume", "version": "v1.5", "focus_area": "Frontend",
     "file_url": "https://example.com/resumes/frontend-v1.5.pdf"},
    {"name": "Backend Engineer Resume", "version": "v3.0", "focus_area": "Backend", "file_url": None},
]

CONTACTS = [
    {"name": "Sarah Johnson", "email": "sarah.johnson@google.com", "phone": "555-0101",
     "title": "Senior Technical Recruiter", "company": "Google",
     "linkedin": "https://linkedin.com/in/sarahjohnson", "notes": "Very responsive, prefers email contact"},
    {"name": "Michael Chen", "email": "mchen@apple.com", "phone": None,
     "title": "Engineering Manager", "company": "Apple",
     "linkedin": "https://linkedin.com/in/michaelchen", "notes": "Connected through mutual friend"},
    {"name": "Emily Rodriguez", "email": "emily.r@meta.com", "phone": "555-0103",
     "title": "Talent Acquisition Specialist", "company": "Meta", "linkedin": None, "notes": None},
]

# (resume index, contact index or None, job fields)
JOBS = [
    (0, 0, {"position": "Senior Software Engineer", "company": "Google", "location": "Mountain View, CA",
            "status": "interview", "mode": "full-time", "salary_range": "$150k-180k",
            "job_url": "https://careers.google.com/jobs/123456", "website": "https://google.com",
            "notes": "Focus on distributed systems experience.",
            "applied_date": datetime(2024, 12, 1), "last_contact": datetime(2024, 12, 15),
            "next_follow_up": datetime(2024, 12, 28)}),
    (1, 1, {"position": "Frontend Developer", "company": "Apple", "location": "Cupertino, CA",
            "status": "applied", "mode": "full-time", "salary_range": "$130k-160k",
            "job_url": "https://jobs.apple.com/en-us/details/200498765", "website": "https://apple.com",
            "applied_date": datetime(2024, 12, 5), "next_follow_up": datetime(2024, 12, 22)}),
    (0, 2, {"position": "Full Stack Engineer", "company": "Meta", "location": "Menlo Park, CA",
            "status": "offer", "mode": "full-time", "salary_range": "$140k-170k",
            "job_url": "https://www.metacareers.com/jobs/987654321", "website": "https://meta.com",
            "notes": "Offer received. React and GraphQL stack.",
            "applied_date": datetime(2024, 11, 15), "last_contact": datetime(2024, 12, 18)}),
    (2, None, {"position": "Software Engineer", "company": "Netflix", "location": "Los Gatos, CA",
               "status": "rejected", "mode": "full-time", "salary_range": "$160k-200k",
               "applied_date": datetime(2024, 11, 20), "last_contact": datetime(2024, 12, 10)}),
    (2, None, {"position": "Backend Engineer", "company": "Amazon", "location": "Seattle, WA",
               "status": "screening", "mode": "hybrid",
               "applied_date": datetime(2024, 12, 10), "next_follow_up": datetime(2024, 12, 24)}),
    (1, None, {"position": "React Developer", "company": "Airbnb", "location": "Remote",
               "status": "applied", "mode": "remote",
               "applied_date": datetime(2024, 12, 12)}),
]

# (job index, interview fields)
INTERVIEWS = [
    (0, {"round": "Phone Screen", "date": datetime(2024, 12, 8, 10), "duration": 45,
         "interviewer": "Sarah Johnson", "outcome": "passed"}),
    (0, {"round": "System Design", "date": datetime(2024, 12, 20, 15), "duration": 90,
         "interviewer": "Jennifer Lee", "outcome": "waiting"}),
    (2, {"round": "Technical Interview", "date": datetime(2024, 12, 2, 13), "duration": 75,
         "interviewer": "Marcus Johnson", "outcome": "passed"}),
]


def clear_owner(session, owner_id: str) -> None:
    """Delete everything owned by owner_id."""
    for job in session.query(Job).filter(Job.owner_id == owner_id).all():
        session.delete(job)  # interviews and links cascade
    for contact in session.query(Contact).filter(Contact.owner_id == owner_id).all():
        session.delete(contact)
    session.query(Resume).filter(Resume.owner_id == owner_id).delete()
    session.query(ApiToken).filter(ApiToken.owner_id == owner_id).delete()
    session.commit()


def seed(owner_id: str) -> dict:
    session = get_session()
    try:
        print(f"Cleaning up existing data for {owner_id}...")
        clear_owner(session, owner_id)

        resumes = [Resume(owner_id=owner_id, **r) for r in RESUMES]
        contacts = [Contact(owner_id=owner_id, **c) for c in CONTACTS]
        session.add_all(resumes + contacts)
        session.flush()

        jobs = []
        for resume_idx, contact_idx, fields in JOBS:
            job = Job(owner_id=owner_id, resume_id=resumes[resume_idx].id, **fields)
            if contact_idx is not None:
                job.contacts.append(JobContact(contact=contacts[contact_idx], role="Recruiter"))
            jobs.append(job)
        session.add_all(jobs)
        session.flush()

        for job_idx, fields in INTERVIEWS:
            session.add(Interview(job_id=jobs[job_idx].id, **fields))

        session.commit()
        counts = {
            "resumes": len(resumes),
            "contacts": len(contacts),
            "jobs": len(jobs),
            "interviews": len(INTERVIEWS),
        }
    finally:
        session.close()
    return counts


def main():
    parser = argparse.ArgumentParser(description="Seed demo data for one owner")
    parser.add_argument("--owner", required=True, help="Owner identity to seed")
    parser.add_argument("--database-url", help="Override JOBTRACKER_DATABASE_URL")
    args = parser.parse_args()

    settings = get_settings()
    init_database(args.database_url or settings.database_url)

    counts = seed(args.owner)
    for name, count in counts.items():
        print(f"✅ Created {count} {name}")
    token = issue_token(args.owner)
    print(f"Token for {args.owner}: {token}")


if __name__ == "__main__":
    main()
