"""
Application lifecycle: apply, withdraw, review/decide, listings and stats.

The engine only talks to the repository and notifier contracts it is given.
Role gates run in front of it (``jobboard.utils.auth``); ownership and
status legality are checked here.
"""

import logging
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple

from jobboard.models.application import Application, ApplicationStatus
from jobboard.models.user import Role, User
from jobboard.repositories.base import ApplicationRepository, JobRepository, UserRepository
from jobboard.services.lifecycle import Operation, allowed_from, ensure_allowed, status_message
from jobboard.services.notifications import Notifier
from jobboard.utils.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from jobboard.utils.pagination import Page

logger = logging.getLogger("jobboard.applications")

RECENT_LIMIT = 5


class ApplicationEngine:

    def __init__(
        self,
        applications: ApplicationRepository,
        jobs: JobRepository,
        users: UserRepository,
        notifier: Notifier,
    ):
        self.applications = applications
        self.jobs = jobs
        self.users = users
        self.notifier = notifier

    # ===========================
    # LIFECYCLE
    # ===========================

    async def apply(self, caller: User, job_id: str, cover_letter: Optional[str], resume: str) -> Tuple[dict, bool]:
        """Submit (or re-open a withdrawn) application. Returns (application, created)."""
        if caller.role != Role.JOB_SEEKER:
            raise ForbiddenError("Only job seekers can apply for jobs")

        job = await self.jobs.get(job_id)
        if not job:
            raise NotFoundError("Job not found")
        if not job.is_active:
            raise ConflictError("Job is no longer accepting applications")
        if job.deadline_passed():
            raise ConflictError("Application deadline has passed")

        existing = await self.applications.find_for_pair(job.id, caller.id)
        if existing is None:
            application = await self.applications.create(Application(
                job_id=job.id,
                applicant_id=caller.id,
                cover_letter=cover_letter,
                resume=resume,
            ))
            created = True
        else:
            application = await self._transition(existing, Operation.REOPEN, {
                "status": ApplicationStatus.PENDING.value,
                "cover_letter": cover_letter,
                "resume": resume,
                "applied_at": datetime.utcnow(),
                "reviewed_at": None,
                "reviewed_by": None,
                "feedback": None,
            })
            created = False

        # one count per non-withdrawn slot: a fresh insert or a reopened withdrawal
        await self.jobs.attach_application(job.id)
        logger.info(
            "Application %s %s for job %s by %s",
            application.id, "created" if created else "reopened", job.id, caller.id,
        )

        # one batched read serves both the notification and the response
        people = await self.users.get_many([job.posted_by])
        people[str(caller.id)] = caller
        self._dispatch_safely(self._notify_owner, job, people.get(str(job.posted_by)), caller)

        presented = await self._present([application], job_fields=("title", "company"), users=people)
        return presented[0], created

    async def withdraw(self, caller: User, application_id: str) -> Application:
        application = await self._get(application_id)

        if str(application.applicant_id) != str(caller.id):
            raise ForbiddenError("Not authorized to withdraw this application")

        updated = await self._transition(application, Operation.WITHDRAW, {
            "status": ApplicationStatus.WITHDRAWN.value,
        })
        await self.jobs.detach_application(updated.job_id)

        logger.info("Application %s withdrawn by %s", updated.id, caller.id)
        return updated

    async def update_status(
        self,
        caller: User,
        application_id: str,
        new_status: str,
        feedback: Optional[str] = None,
    ) -> dict:
        application = await self._get(application_id)

        job = await self.jobs.get(application.job_id)
        if not job:
            raise NotFoundError("Job not found")
        if not (caller.is_admin or job.is_owned_by(caller.id)):
            raise ForbiddenError("Not authorized to update this application")

        try:
            status = ApplicationStatus(new_status)
        except ValueError:
            raise ValidationError(f"Invalid status: {new_status}")

        updated = await self._transition(application, Operation.UPDATE_STATUS, {
            "status": status.value,
            "feedback": feedback,
            "reviewed_at": datetime.utcnow(),
            "reviewed_by": caller.id,
        })
        if status is ApplicationStatus.WITHDRAWN:
            await self.jobs.detach_application(job.id)

        logger.info(
            "Application %s moved %s -> %s by %s",
            updated.id, application.status, status.value, caller.id,
        )

        people = await self.users.get_many([updated.applicant_id])
        applicant = people.get(str(updated.applicant_id))
        self._dispatch_safely(self._notify_applicant, updated, applicant, job, status)

        presented = await self._present(
            [updated], job_fields=("title", "company", "posted_by"), users=people
        )
        return presented[0]

    # ===========================
    # QUERIES
    # ===========================

    async def list_mine(self, caller: User, page: Page, status: Optional[str] = None) -> Tuple[List[dict], dict]:
        applications, total = await self.applications.page(
            page.skip, page.limit, applicant_id=caller.id, status=status
        )
        items = await self._present(
            applications,
            job_fields=("title", "company", "location", "job_type", "salary", "is_active"),
            with_applicant=False,
        )
        return items, page.meta(total)

    async def list_for_job(
        self,
        caller: User,
        job_id: str,
        page: Page,
        status: Optional[str] = None,
    ) -> Tuple[List[dict], dict]:
        job = await self.jobs.get(job_id)
        if not job:
            raise NotFoundError("Job not found")
        if not (caller.is_admin or job.is_owned_by(caller.id)):
            raise ForbiddenError("Not authorized to view applications for this job")

        applications, total = await self.applications.page(
            page.skip, page.limit, job_id=job.id, status=status
        )
        items = await self._present(applications, with_job=False, applicant_profile=True)
        return items, page.meta(total)

    async def get_one(self, caller: User, application_id: str) -> dict:
        application = await self._get(application_id)
        job = await self.jobs.get(application.job_id)

        is_applicant = str(application.applicant_id) == str(caller.id)
        is_job_owner = job is not None and job.is_owned_by(caller.id)
        if not (is_applicant or is_job_owner or caller.is_admin):
            raise ForbiddenError("Not authorized to view this application")

        presented = await self._present(
            [application],
            job_fields=("title", "company", "location", "job_type", "salary", "posted_by"),
            applicant_profile=True,
        )
        return presented[0]

    async def stats_for_recruiter(self, caller: User) -> dict:
        job_ids = await self.jobs.ids_owned_by(caller.id)

        stats = await self.applications.count_by_status(job_ids)
        total = await self.applications.count_for_jobs(job_ids)
        recent = await self.applications.recent_for_jobs(job_ids, RECENT_LIMIT)

        return {
            "stats": stats,
            "total_applications": total,
            "recent_applications": await self._present(recent, job_fields=("title",)),
        }

    async def list_all(self, caller: User) -> List[dict]:
        if not caller.is_admin:
            raise ForbiddenError("Only admins can list all applications")
        applications = await self.applications.list_all()
        return await self._present(applications, job_fields=("title",))

    # ===========================
    # HELPERS
    # ===========================

    async def _get(self, application_id: str) -> Application:
        application = await self.applications.get(application_id)
        if not application:
            raise NotFoundError("Application not found")
        return application

    async def _transition(self, application: Application, operation: Operation, fields: dict) -> Application:
        ensure_allowed(operation, application.status)

        updated = await self.applications.transition(application.id, allowed_from(operation), fields)
        if updated is None:
            # Status changed between the read and the conditional update
            current = await self.applications.get(application.id)
            if current is None:
                raise NotFoundError("Application not found")
            ensure_allowed(operation, current.status)
            raise ConflictError("Application was modified by another request, please retry")
        return updated

    async def _present(
        self,
        applications: Sequence[Application],
        job_fields: Sequence[str] = (),
        with_job: bool = True,
        with_applicant: bool = True,
        applicant_profile: bool = False,
        users: Optional[Dict[str, User]] = None,
    ) -> List[dict]:
        """Attach job and applicant summaries to application records.

        ``users`` lets a caller that already loaded the applicants skip the lookup.
        """
        jobs = {}
        if with_job:
            jobs = await self.jobs.get_many(a.job_id for a in applications)
        if with_applicant and users is None:
            users = await self.users.get_many(a.applicant_id for a in applications)

        result = []
        for application in applications:
            item = application.model_dump()
            if with_job:
                job = jobs.get(str(application.job_id))
                item["job"] = job.summary(*job_fields) if job else None
            if with_applicant:
                applicant = users.get(str(application.applicant_id))
                item["applicant"] = applicant.summary(with_profile=applicant_profile) if applicant else None
            result.append(item)
        return result

    def _dispatch_safely(self, handler, *args) -> None:
        # Notification problems are logged, never surfaced to the caller
        try:
            handler(*args)
        except Exception:
            logger.exception("Notification dispatch failed")

    def _notify_owner(self, job, owner: Optional[User], applicant: User) -> None:
        if not owner:
            logger.warning("Job %s has no owner to notify", job.id)
            return
        self.notifier.notify("application_received", owner.email, {
            "recruiter_name": owner.name,
            "job_title": job.title,
            "applicant_name": applicant.name,
            "applicant_email": applicant.email,
        })

    def _notify_applicant(
        self, application: Application, applicant: Optional[User], job, status: ApplicationStatus
    ) -> None:
        if not applicant:
            logger.warning("Application %s has no applicant to notify", application.id)
            return
        self.notifier.notify("application_status", applicant.email, {
            "applicant_name": applicant.name,
            "job_title": job.title,
            "company": job.company,
            "status": status.value,
            "message": status_message(status),
        })
