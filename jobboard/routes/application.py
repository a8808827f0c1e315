# ========================================
# jobboard/routes/application.py
# ========================================

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder
from typing import Optional

from jobboard.dependencies import get_application_engine
from jobboard.models.application import ApplicationStatus
from jobboard.models.user import User
from jobboard.schemas.application import ApplicationCreate, ApplicationStatusUpdate
from jobboard.services.application_engine import ApplicationEngine
from jobboard.utils.auth import admin_required, get_current_user, job_seeker_required, recruiter_required
from jobboard.utils.ids import validate_object_id
from jobboard.utils.pagination import Page
from jobboard.utils.rate_limit import application_limit

router = APIRouter(prefix="/api/applications", tags=["Applications"])


def page_params(
    page: int = Query(1, ge=1, description="Page number (1-indexed)"),
    limit: int = Query(10, ge=1, le=100, description="Results per page"),
) -> Page:
    return Page(page=page, limit=limit)


# ===========================
# JOB SEEKER ENDPOINTS
# ===========================

# ✅ 1. APPLY FOR JOB (Job seeker)
@router.post("", status_code=201)
@application_limit
async def apply_job(
    request: Request,
    application: ApplicationCreate,
    current_user: User = Depends(job_seeker_required),
    engine: ApplicationEngine = Depends(get_application_engine),
):
    """Submit a job application, or re-apply after a withdrawal."""
    job_id = validate_object_id(application.job_id, "job ID")

    data, created = await engine.apply(current_user, job_id, application.cover_letter, application.resume)

    if created:
        return {"success": True, "data": data}
    return JSONResponse(
        status_code=200,
        content=jsonable_encoder({
            "success": True,
            "message": "You have successfully re-applied for this job",
            "data": data,
        }),
    )


# ✅ 2. GET MY APPLICATIONS (Job seeker)
@router.get("/my-applications")
async def get_my_applications(
    status: Optional[ApplicationStatus] = Query(None, description="Filter by status"),
    page: Page = Depends(page_params),
    current_user: User = Depends(job_seeker_required),
    engine: ApplicationEngine = Depends(get_application_engine),
):
    """Get the applications submitted by the current job seeker, newest first."""
    items, pagination = await engine.list_mine(current_user, page, status.value if status else None)
    return {"success": True, "data": items, "pagination": pagination}


# ✅ 3. WITHDRAW APPLICATION (Job seeker)
@router.delete("/{application_id}")
async def withdraw_application(
    application_id: str,
    current_user: User = Depends(job_seeker_required),
    engine: ApplicationEngine = Depends(get_application_engine),
):
    """Withdraw an application that has not been decided yet."""
    await engine.withdraw(current_user, validate_object_id(application_id, "application ID"))
    return {"success": True, "message": "Application withdrawn successfully"}


# ===========================
# RECRUITER ENDPOINTS
# ===========================

# ✅ 4. GET APPLICATIONS FOR A JOB (Recruiter/Admin)
@router.get("/job/{job_id}")
async def get_job_applications(
    job_id: str,
    status: Optional[ApplicationStatus] = Query(None, description="Filter by status"),
    page: Page = Depends(page_params),
    current_user: User = Depends(recruiter_required),
    engine: ApplicationEngine = Depends(get_application_engine),
):
    """Applications for one job. Only the job owner or an admin."""
    items, pagination = await engine.list_for_job(
        current_user,
        validate_object_id(job_id, "job ID"),
        page,
        status.value if status else None,
    )
    return {"success": True, "data": items, "pagination": pagination}


# ✅ 5. UPDATE APPLICATION STATUS (Recruiter/Admin)
@router.patch("/{application_id}/status")
async def update_status(
    application_id: str,
    status_update: ApplicationStatusUpdate,
    current_user: User = Depends(recruiter_required),
    engine: ApplicationEngine = Depends(get_application_engine),
):
    """Review or decide an application. The applicant is emailed in the background."""
    data = await engine.update_status(
        current_user,
        validate_object_id(application_id, "application ID"),
        status_update.status,
        status_update.feedback,
    )
    return {
        "success": True,
        "data": data,
        "message": "Application status updated successfully",
    }


# ✅ 6. APPLICATION STATS (Recruiter)
@router.get("/stats")
async def get_application_stats(
    current_user: User = Depends(recruiter_required),
    engine: ApplicationEngine = Depends(get_application_engine),
):
    """Counts by status, total and the five latest applications across the caller's jobs."""
    return {"success": True, "data": await engine.stats_for_recruiter(current_user)}


# ===========================
# ADMIN ENDPOINTS
# ===========================

# ✅ 7. VIEW ALL APPLICATIONS (Admin)
@router.get("")
async def get_all_applications(
    current_user: User = Depends(admin_required),
    engine: ApplicationEngine = Depends(get_application_engine),
):
    applications = await engine.list_all(current_user)
    return {"success": True, "count": len(applications), "data": applications}


# ===========================
# SHARED ENDPOINTS
# ===========================

# ✅ 8. GET APPLICATION DETAILS (Applicant / Job owner / Admin)
@router.get("/{application_id}")
async def get_application_details(
    application_id: str,
    current_user: User = Depends(get_current_user),
    engine: ApplicationEngine = Depends(get_application_engine),
):
    data = await engine.get_one(current_user, validate_object_id(application_id, "application ID"))
    return {"success": True, "data": data}
