# ========================================
# jobboard/schemas/job.py
# ========================================

from pydantic import BaseModel, Field, field_validator
from typing import List, Optional, Literal
from datetime import datetime, timezone

from jobboard.models.job import ExperienceLevel, JobType, Salary


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Deadlines are stored as naive UTC, like every other timestamp."""
    if value is not None and value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def future_deadline(value: Optional[datetime]) -> Optional[datetime]:
    value = to_naive_utc(value)
    if value is not None and value <= datetime.utcnow():
        raise ValueError("Application deadline must be in the future")
    return value


# 1. Input: What the Recruiter sends
class JobCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=100)
    company: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1, max_length=2000)
    requirements: str = Field(..., min_length=1, max_length=1000)
    location: str = Field(..., min_length=1)
    job_type: JobType
    experience_level: ExperienceLevel
    salary: Salary = Field(default_factory=Salary)
    skills: List[str] = []
    benefits: List[str] = []
    application_deadline: Optional[datetime] = None

    class Config:
        str_strip_whitespace = True

    check_deadline = field_validator("application_deadline")(future_deadline)


# 2. Input: Update existing job (counters and owner are not editable)
class JobUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=100)
    company: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, min_length=1, max_length=2000)
    requirements: Optional[str] = Field(None, min_length=1, max_length=1000)
    location: Optional[str] = Field(None, min_length=1)
    job_type: Optional[JobType] = None
    experience_level: Optional[ExperienceLevel] = None
    salary: Optional[Salary] = None
    skills: Optional[List[str]] = None
    benefits: Optional[List[str]] = None
    application_deadline: Optional[datetime] = None

    class Config:
        str_strip_whitespace = True

    check_deadline = field_validator("application_deadline")(future_deadline)


# 3. Query: listing sort options
SortField = Literal["created_at", "title", "company", "views_count", "applications_count", "application_deadline"]
SortOrder = Literal["asc", "desc"]
