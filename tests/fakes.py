"""In-memory stand-ins for the Mongo repositories and the email notifier."""

import asyncio
import itertools
from collections import Counter
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Tuple

from bson import ObjectId

from jobboard.models.application import Application
from jobboard.models.job import Job
from jobboard.models.user import User
from jobboard.repositories.base import ApplicationRepository, JobRepository, JobSearch, UserRepository
from jobboard.services.notifications import Notifier
from jobboard.utils.errors import ConflictError


def _new_id() -> str:
    return str(ObjectId())


def _merge(model, fields: dict):
    data = model.model_dump()
    data.update(fields)
    data["updated_at"] = datetime.utcnow()
    return type(model).model_validate(data)


class InMemoryUserRepository(UserRepository):

    def __init__(self):
        self.items: Dict[str, User] = {}

    async def get(self, user_id: str) -> Optional[User]:
        user = self.items.get(str(user_id))
        return user.model_copy(deep=True) if user else None

    async def get_many(self, user_ids: Iterable[str]) -> Dict[str, User]:
        return {uid: self.items[uid].model_copy(deep=True) for uid in map(str, user_ids) if uid in self.items}

    async def get_by_email(self, email: str) -> Optional[User]:
        for user in self.items.values():
            if user.email == email.lower():
                return user.model_copy(deep=True)
        return None

    async def get_by_reset_token(self, token_hash: str, now: datetime) -> Optional[User]:
        for user in self.items.values():
            if (
                user.password_reset_token == token_hash
                and user.password_reset_expires is not None
                and user.password_reset_expires > now
            ):
                return user.model_copy(deep=True)
        return None

    async def create(self, user: User) -> User:
        if any(u.email == user.email.lower() for u in self.items.values()):
            raise ConflictError("User already exists with this email")
        stored = user.model_copy(update={"id": _new_id(), "email": user.email.lower()})
        self.items[stored.id] = stored
        return stored.model_copy(deep=True)

    async def update(self, user_id: str, fields: dict) -> Optional[User]:
        user = self.items.get(str(user_id))
        if user is None:
            return None
        self.items[user.id] = _merge(user, fields)
        return self.items[user.id].model_copy(deep=True)

    async def search_by_name(self, name: str) -> List[User]:
        return [u.model_copy(deep=True) for u in self.items.values() if name.lower() in u.name.lower()]


class InMemoryJobRepository(JobRepository):

    def __init__(self):
        self.items: Dict[str, Job] = {}

    async def get(self, job_id: str) -> Optional[Job]:
        job = self.items.get(str(job_id))
        return job.model_copy(deep=True) if job else None

    async def get_many(self, job_ids: Iterable[str]) -> Dict[str, Job]:
        return {jid: self.items[jid].model_copy(deep=True) for jid in map(str, job_ids) if jid in self.items}

    async def create(self, job: Job) -> Job:
        stored = job.model_copy(update={"id": _new_id()})
        self.items[stored.id] = stored
        return stored.model_copy(deep=True)

    async def update(self, job_id: str, fields: dict) -> Optional[Job]:
        job = self.items.get(str(job_id))
        if job is None:
            return None
        self.items[job.id] = _merge(job, fields)
        return self.items[job.id].model_copy(deep=True)

    async def delete(self, job_id: str) -> bool:
        return self.items.pop(str(job_id), None) is not None

    def _matches(self, job: Job, c: JobSearch) -> bool:
        if c.is_active is not None and job.is_active != c.is_active:
            return False
        if c.posted_by and job.posted_by != c.posted_by:
            return False
        if c.search:
            text = c.search.lower()
            if not any(text in value.lower() for value in (job.title, job.company, job.description)):
                return False
        if c.location and c.location.lower() not in job.location.lower():
            return False
        if c.job_type and job.job_type != c.job_type:
            return False
        if c.experience_level and job.experience_level != c.experience_level:
            return False
        if c.company and c.company.lower() not in job.company.lower():
            return False
        if c.min_salary is not None and (job.salary.min is None or job.salary.min < c.min_salary):
            return False
        if c.max_salary is not None and (job.salary.max is None or job.salary.max > c.max_salary):
            return False
        return True

    async def search(self, criteria: JobSearch, skip: int, limit: int) -> Tuple[List[Job], int]:
        matched = [job for job in self.items.values() if self._matches(job, criteria)]
        matched.sort(
            key=lambda job: (getattr(job, criteria.sort_by) is not None, getattr(job, criteria.sort_by)),
            reverse=criteria.sort_order != "asc",
        )
        return [job.model_copy(deep=True) for job in matched[skip:skip + limit]], len(matched)

    async def ids_owned_by(self, user_id: str) -> List[str]:
        return [job.id for job in self.items.values() if job.posted_by == str(user_id)]

    async def increment_views(self, job_ids: Iterable[str]) -> None:
        for job_id in job_ids:
            job = self.items.get(str(job_id))
            if job:
                job.views_count += 1

    async def attach_application(self, job_id: str) -> None:
        job = self.items.get(str(job_id))
        if job:
            job.applications_count += 1

    async def detach_application(self, job_id: str) -> bool:
        job = self.items.get(str(job_id))
        if not job or job.applications_count <= 0:
            return False
        job.applications_count -= 1
        return True


class InMemoryApplicationRepository(ApplicationRepository):

    def __init__(self):
        self.items: Dict[str, Application] = {}
        self._order: Dict[str, int] = {}
        self._sequence = itertools.count()

    async def get(self, application_id: str) -> Optional[Application]:
        application = self.items.get(str(application_id))
        return application.model_copy(deep=True) if application else None

    def _pair(self, job_id: str, applicant_id: str) -> Optional[Application]:
        for application in self.items.values():
            if application.job_id == str(job_id) and application.applicant_id == str(applicant_id):
                return application
        return None

    async def find_for_pair(self, job_id: str, applicant_id: str) -> Optional[Application]:
        found = self._pair(job_id, applicant_id)
        # yield like a real round trip, so concurrent requests interleave after the read
        await asyncio.sleep(0)
        return found.model_copy(deep=True) if found else None

    async def create(self, application: Application) -> Application:
        # unique (job_id, applicant_id), like the Mongo index; no await between check and insert
        if self._pair(application.job_id, application.applicant_id):
            raise ConflictError("You have already applied for this job")
        stored = application.model_copy(update={"id": _new_id()})
        self.items[stored.id] = stored
        self._order[stored.id] = next(self._sequence)
        return stored.model_copy(deep=True)

    async def transition(self, application_id: str, allowed_from: Iterable[str], fields: dict) -> Optional[Application]:
        application = self.items.get(str(application_id))
        if application is None or application.status not in set(allowed_from):
            return None
        self.items[application.id] = _merge(application, fields)
        return self.items[application.id].model_copy(deep=True)

    def _newest_first(self, applications: List[Application]) -> List[Application]:
        return sorted(applications, key=lambda a: (a.created_at, self._order[a.id]), reverse=True)

    async def page(
        self,
        skip: int,
        limit: int,
        applicant_id: Optional[str] = None,
        job_id: Optional[str] = None,
        status: Optional[str] = None,
    ) -> Tuple[List[Application], int]:
        matched = [
            a for a in self.items.values()
            if (applicant_id is None or a.applicant_id == str(applicant_id))
            and (job_id is None or a.job_id == str(job_id))
            and (status is None or a.status == status)
        ]
        ordered = self._newest_first(matched)
        return [a.model_copy(deep=True) for a in ordered[skip:skip + limit]], len(matched)

    async def count_by_status(self, job_ids: List[str]) -> List[dict]:
        counts = Counter(a.status for a in self.items.values() if a.job_id in job_ids)
        return [{"status": status, "count": count} for status, count in sorted(counts.items())]

    async def count_for_jobs(self, job_ids: List[str]) -> int:
        return sum(1 for a in self.items.values() if a.job_id in job_ids)

    async def recent_for_jobs(self, job_ids: List[str], limit: int = 5) -> List[Application]:
        matched = [a for a in self.items.values() if a.job_id in job_ids]
        return [a.model_copy(deep=True) for a in self._newest_first(matched)[:limit]]

    async def list_all(self) -> List[Application]:
        return [a.model_copy(deep=True) for a in self._newest_first(list(self.items.values()))]


class RecordingNotifier(Notifier):
    """Collects notifications instead of sending them."""

    def __init__(self, fail: bool = False):
        self.sent: List[Tuple[str, str, dict]] = []
        self.fail = fail

    def notify(self, kind: str, recipient_email: str, template_data: dict) -> None:
        if self.fail:
            raise RuntimeError("SMTP relay unreachable")
        self.sent.append((kind, recipient_email, template_data))

    def kinds(self) -> List[str]:
        return [kind for kind, _, _ in self.sent]
