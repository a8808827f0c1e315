# ========================================
# jobboard/routes/job.py
# ========================================

import logging
from fastapi import APIRouter, Depends, Query
from typing import Dict, List, Literal, Optional

from jobboard.dependencies import get_job_repository, get_user_repository
from jobboard.models.job import ExperienceLevel, Job, JobType
from jobboard.models.user import User
from jobboard.repositories.base import JobRepository, JobSearch, UserRepository
from jobboard.schemas.job import JobCreate, JobUpdate, SortField, SortOrder
from jobboard.utils.auth import get_optional_user, recruiter_required
from jobboard.utils.errors import ForbiddenError, NotFoundError, ValidationError
from jobboard.utils.ids import validate_object_id
from jobboard.utils.pagination import Page

router = APIRouter(prefix="/api/jobs", tags=["Jobs"])

logger = logging.getLogger("jobboard.jobs")


async def present_jobs(jobs: List[Job], users: UserRepository) -> List[dict]:
    """Job records with the posting recruiter's public details attached."""
    recruiters: Dict[str, User] = await users.get_many(job.posted_by for job in jobs)
    result = []
    for job in jobs:
        item = job.model_dump()
        recruiter = recruiters.get(str(job.posted_by))
        item["recruiter"] = {
            "id": recruiter.id,
            "name": recruiter.name,
            "company": recruiter.profile.company,
            "website": recruiter.profile.website,
        } if recruiter else None
        result.append(item)
    return result


async def get_owned_job(job_id: str, current_user: User, jobs: JobRepository, action: str) -> Job:
    validate_object_id(job_id, "job ID")
    job = await jobs.get(job_id)
    if not job:
        raise NotFoundError("Job not found")
    if not (current_user.is_admin or job.is_owned_by(current_user.id)):
        raise ForbiddenError(f"Not authorized to {action} this job")
    return job


# ===========================
# PUBLIC ENDPOINTS
# ===========================

# ✅ 1. GET ALL JOBS WITH SEARCH AND FILTERS (Public)
@router.get("")
async def get_all_jobs(
    search: Optional[str] = Query(None, description="Search in title, company, or description"),
    location: Optional[str] = Query(None, description="Filter by location"),
    job_type: Optional[JobType] = Query(None, description="Filter by job type"),
    experience_level: Optional[ExperienceLevel] = Query(None, description="Filter by experience level"),
    company: Optional[str] = Query(None, description="Filter by company"),
    min_salary: Optional[float] = Query(None, ge=0, description="Minimum salary floor"),
    max_salary: Optional[float] = Query(None, ge=0, description="Maximum salary ceiling"),
    sort_by: SortField = Query("created_at"),
    sort_order: SortOrder = Query("desc"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: Optional[User] = Depends(get_optional_user),
    jobs: JobRepository = Depends(get_job_repository),
    users: UserRepository = Depends(get_user_repository),
):
    """Active jobs only. Signed-in visitors count as a view on every job returned."""
    criteria = JobSearch(
        search=search,
        location=location,
        job_type=job_type,
        experience_level=experience_level,
        company=company,
        min_salary=min_salary,
        max_salary=max_salary,
        is_active=True,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    paging = Page(page=page, limit=limit)
    results, total = await jobs.search(criteria, paging.skip, paging.limit)

    if current_user:
        await jobs.increment_views(job.id for job in results)

    return {
        "success": True,
        "data": await present_jobs(results, users),
        "pagination": paging.meta(total),
    }


# ===========================
# RECRUITER ENDPOINTS
# ===========================

# ✅ 2. GET MY POSTED JOBS (Recruiter)
@router.get("/recruiter/my-jobs")
async def get_my_jobs(
    status: Optional[Literal["active", "inactive"]] = Query(None, description="Filter by status"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: User = Depends(recruiter_required),
    jobs: JobRepository = Depends(get_job_repository),
):
    """Jobs posted by the current recruiter, newest first."""
    criteria = JobSearch(
        posted_by=current_user.id,
        is_active=None if status is None else status == "active",
    )
    paging = Page(page=page, limit=limit)
    results, total = await jobs.search(criteria, paging.skip, paging.limit)

    return {
        "success": True,
        "data": [job.model_dump() for job in results],
        "pagination": paging.meta(total),
    }


# ✅ 3. GET SINGLE JOB DETAILS (Public)
@router.get("/{job_id}")
async def get_job_details(
    job_id: str,
    jobs: JobRepository = Depends(get_job_repository),
    users: UserRepository = Depends(get_user_repository),
):
    """Get detailed information about a specific job."""
    validate_object_id(job_id, "job ID")

    job = await jobs.get(job_id)
    if not job:
        raise NotFoundError("Job not found")
    if not job.is_active:
        raise ValidationError("Job is no longer active")

    await jobs.increment_views([job.id])

    presented = await present_jobs([job], users)
    return {"success": True, "data": presented[0]}


# ✅ 4. POST A JOB (Recruiter/Admin)
@router.post("", status_code=201)
async def create_job(
    job: JobCreate,
    current_user: User = Depends(recruiter_required),
    jobs: JobRepository = Depends(get_job_repository),
):
    """Create a new job posting owned by the caller."""
    created = await jobs.create(Job(**job.model_dump(), posted_by=current_user.id))
    logger.info("Job %s posted by %s", created.id, current_user.id)
    return {"success": True, "data": created.model_dump()}


# ✅ 5. UPDATE/EDIT JOB (Owner/Admin)
@router.put("/{job_id}")
async def update_job(
    job_id: str,
    job_update: JobUpdate,
    current_user: User = Depends(recruiter_required),
    jobs: JobRepository = Depends(get_job_repository),
):
    """Update job details. Only the job owner or admin can update."""
    await get_owned_job(job_id, current_user, jobs, "update")

    update_data = job_update.model_dump(exclude_unset=True)
    if not update_data:
        raise ValidationError("No fields to update")

    updated = await jobs.update(job_id, update_data)
    if not updated:
        raise NotFoundError("Job not found")
    return {"success": True, "data": updated.model_dump()}


# ✅ 6. DELETE JOB (Owner/Admin)
@router.delete("/{job_id}")
async def delete_job(
    job_id: str,
    current_user: User = Depends(recruiter_required),
    jobs: JobRepository = Depends(get_job_repository),
):
    """Delete a job posting. Only the job owner or admin can delete."""
    await get_owned_job(job_id, current_user, jobs, "delete")
    await jobs.delete(job_id)
    logger.info("Job %s deleted by %s", job_id, current_user.id)
    return {"success": True, "message": "Job deleted successfully"}


# ✅ 7. TOGGLE JOB STATUS (Owner/Admin)
@router.patch("/{job_id}/toggle-status")
async def toggle_job_status(
    job_id: str,
    current_user: User = Depends(recruiter_required),
    jobs: JobRepository = Depends(get_job_repository),
):
    """Open or close a job for new applications."""
    job = await get_owned_job(job_id, current_user, jobs, "update")
    updated = await jobs.update(job_id, {"is_active": not job.is_active})
    return {"success": True, "data": updated.model_dump()}
