# ========================================
# jobboard/schemas/application.py
# ========================================

from pydantic import BaseModel, Field, field_validator
from typing import Optional

from jobboard.models.application import ApplicationStatus


# 1. Input: Apply for a job
class ApplicationCreate(BaseModel):
    job_id: str
    cover_letter: Optional[str] = Field(None, max_length=1000)
    resume: str  # URL to resume file

    @field_validator("resume")
    @classmethod
    def resume_required(cls, v):
        if not v or not v.strip():
            raise ValueError("Resume is required")
        return v.strip()


# 2. Input: Recruiter decision
class ApplicationStatusUpdate(BaseModel):
    status: ApplicationStatus
    feedback: Optional[str] = Field(None, max_length=1000)
