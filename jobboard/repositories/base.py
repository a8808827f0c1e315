"""
Storage contracts used by the routes and the application engine.

The Mongo implementations live next to this module; tests substitute
in-memory versions with the same behaviour (unique constraints, conditional
updates, counters).
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Tuple

from jobboard.models.application import Application
from jobboard.models.job import Job
from jobboard.models.user import User


@dataclass
class JobSearch:
    search: Optional[str] = None
    location: Optional[str] = None
    job_type: Optional[str] = None
    experience_level: Optional[str] = None
    company: Optional[str] = None
    min_salary: Optional[float] = None
    max_salary: Optional[float] = None
    posted_by: Optional[str] = None
    is_active: Optional[bool] = None
    sort_by: str = "created_at"
    sort_order: str = "desc"


class UserRepository(ABC):

    @abstractmethod
    async def get(self, user_id: str) -> Optional[User]: ...

    @abstractmethod
    async def get_many(self, user_ids: Iterable[str]) -> Dict[str, User]: ...

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[User]: ...

    @abstractmethod
    async def get_by_reset_token(self, token_hash: str, now: datetime) -> Optional[User]:
        """User whose reset token matches and has not expired."""

    @abstractmethod
    async def create(self, user: User) -> User:
        """Insert a user; raises ConflictError when the email is taken."""

    @abstractmethod
    async def update(self, user_id: str, fields: dict) -> Optional[User]: ...

    @abstractmethod
    async def search_by_name(self, name: str) -> List[User]: ...


class JobRepository(ABC):

    @abstractmethod
    async def get(self, job_id: str) -> Optional[Job]: ...

    @abstractmethod
    async def get_many(self, job_ids: Iterable[str]) -> Dict[str, Job]: ...

    @abstractmethod
    async def create(self, job: Job) -> Job: ...

    @abstractmethod
    async def update(self, job_id: str, fields: dict) -> Optional[Job]: ...

    @abstractmethod
    async def delete(self, job_id: str) -> bool: ...

    @abstractmethod
    async def search(self, criteria: JobSearch, skip: int, limit: int) -> Tuple[List[Job], int]: ...

    @abstractmethod
    async def ids_owned_by(self, user_id: str) -> List[str]: ...

    @abstractmethod
    async def increment_views(self, job_ids: Iterable[str]) -> None: ...

    @abstractmethod
    async def attach_application(self, job_id: str) -> None:
        """Count one more non-withdrawn application against the job."""

    @abstractmethod
    async def detach_application(self, job_id: str) -> bool:
        """Count one fewer; never goes below zero. False when nothing changed."""


class ApplicationRepository(ABC):

    @abstractmethod
    async def get(self, application_id: str) -> Optional[Application]: ...

    @abstractmethod
    async def find_for_pair(self, job_id: str, applicant_id: str) -> Optional[Application]: ...

    @abstractmethod
    async def create(self, application: Application) -> Application:
        """Insert; raises ConflictError when (job, applicant) already exists."""

    @abstractmethod
    async def transition(self, application_id: str, allowed_from: Iterable[str], fields: dict) -> Optional[Application]:
        """
        Atomically apply ``fields`` if the current status is in ``allowed_from``.

        Returns the updated application, or None when the application is gone
        or its status no longer matches.
        """

    @abstractmethod
    async def page(
        self,
        skip: int,
        limit: int,
        applicant_id: Optional[str] = None,
        job_id: Optional[str] = None,
        status: Optional[str] = None,
    ) -> Tuple[List[Application], int]:
        """Newest first."""

    @abstractmethod
    async def count_by_status(self, job_ids: List[str]) -> List[dict]: ...

    @abstractmethod
    async def count_for_jobs(self, job_ids: List[str]) -> int: ...

    @abstractmethod
    async def recent_for_jobs(self, job_ids: List[str], limit: int = 5) -> List[Application]: ...

    @abstractmethod
    async def list_all(self) -> List[Application]: ...
