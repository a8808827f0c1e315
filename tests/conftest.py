import asyncio
import os
from datetime import datetime, timedelta

# Console logging only, before jobboard reads its settings
os.environ.setdefault("LOG_DIR", "")

import pytest
from fastapi.testclient import TestClient

from fakes import (
    InMemoryApplicationRepository,
    InMemoryJobRepository,
    InMemoryUserRepository,
    RecordingNotifier,
)
from jobboard.dependencies import (
    get_application_repository,
    get_job_repository,
    get_notifier,
    get_user_repository,
)
from jobboard.main import app
from jobboard.models.job import Job
from jobboard.models.user import User
from jobboard.services.application_engine import ApplicationEngine
from jobboard.utils.auth import create_access_token
from jobboard.utils.rate_limit import limiter
from jobboard.utils.security import get_password_hash

PASSWORD = "secret123"
RESUME = "https://files.example.com/resume.pdf"


def run(coro):
    return asyncio.run(coro)


@pytest.fixture
def users():
    return InMemoryUserRepository()


@pytest.fixture
def jobs():
    return InMemoryJobRepository()


@pytest.fixture
def applications():
    return InMemoryApplicationRepository()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def engine(applications, jobs, users, notifier):
    return ApplicationEngine(applications, jobs, users, notifier)


@pytest.fixture(scope="session")
def password_hash():
    return get_password_hash(PASSWORD)


@pytest.fixture
def make_user(users, password_hash):
    counter = iter(range(1, 1000))

    def factory(role="job_seeker", name=None, is_active=True, **extra):
        n = next(counter)
        return run(users.create(User(
            name=name or f"{role} {n}",
            email=extra.pop("email", f"{role}{n}@example.com"),
            password=password_hash,
            role=role,
            is_active=is_active,
            **extra,
        )))

    return factory


@pytest.fixture
def make_job(jobs):
    def factory(owner, **overrides):
        fields = {
            "title": "Backend Engineer",
            "company": "Acme Inc",
            "description": "Build and run APIs",
            "requirements": "Python, MongoDB",
            "location": "Berlin",
            "job_type": "full-time",
            "experience_level": "mid-level",
            "salary": {"min": 60000, "max": 80000, "currency": "EUR"},
            "skills": ["python", "mongodb"],
        }
        fields.update(overrides)
        return run(jobs.create(Job(posted_by=owner.id, **fields)))

    return factory


@pytest.fixture
def seeker(make_user):
    return make_user("job_seeker", name="Sam Seeker")


@pytest.fixture
def recruiter(make_user):
    return make_user("recruiter", name="Rita Recruiter")


@pytest.fixture
def admin(make_user):
    return make_user("admin", name="Ada Admin")


@pytest.fixture
def job(make_job, recruiter):
    return make_job(recruiter)


@pytest.fixture
def past_deadline():
    return datetime.utcnow() - timedelta(days=1)


def auth(user):
    return {"Authorization": f"Bearer {create_access_token(user)}"}


@pytest.fixture
def client(users, jobs, applications, notifier):
    app.dependency_overrides[get_user_repository] = lambda: users
    app.dependency_overrides[get_job_repository] = lambda: jobs
    app.dependency_overrides[get_application_repository] = lambda: applications
    app.dependency_overrides[get_notifier] = lambda: notifier
    limiter.enabled = False

    # No context manager: the lifespan would try to reach MongoDB
    yield TestClient(app)

    app.dependency_overrides.clear()
    limiter.enabled = True
