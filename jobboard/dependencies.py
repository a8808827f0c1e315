"""
FastAPI dependency providers for storage, notifications and the engine.

Tests swap these out through ``app.dependency_overrides``.
"""

from fastapi import Depends

from jobboard.database import get_db
from jobboard.repositories.applications import MongoApplicationRepository
from jobboard.repositories.base import ApplicationRepository, JobRepository, UserRepository
from jobboard.repositories.jobs import MongoJobRepository
from jobboard.repositories.users import MongoUserRepository
from jobboard.services.application_engine import ApplicationEngine
from jobboard.services.notifications import EmailNotifier, Notifier

_notifier = None


def get_user_repository() -> UserRepository:
    return MongoUserRepository(get_db())


def get_job_repository() -> JobRepository:
    return MongoJobRepository(get_db())


def get_application_repository() -> ApplicationRepository:
    return MongoApplicationRepository(get_db())


def get_notifier() -> Notifier:
    global _notifier
    if _notifier is None:
        _notifier = EmailNotifier()
    return _notifier


def shutdown_notifier():
    global _notifier
    if _notifier is not None:
        _notifier.shutdown()
        _notifier = None


def get_application_engine(
    applications: ApplicationRepository = Depends(get_application_repository),
    jobs: JobRepository = Depends(get_job_repository),
    users: UserRepository = Depends(get_user_repository),
    notifier: Notifier = Depends(get_notifier),
) -> ApplicationEngine:
    return ApplicationEngine(applications, jobs, users, notifier)
