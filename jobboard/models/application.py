from enum import Enum
from typing import Optional
from datetime import datetime

from pydantic import Field

from .base import MongoBaseModel, PyObjectId


class ApplicationStatus(str, Enum):
    PENDING = "pending"
    REVIEWED = "reviewed"
    SHORTLISTED = "shortlisted"
    INTERVIEWED = "interviewed"
    OFFERED = "offered"
    REJECTED = "rejected"
    WITHDRAWN = "withdrawn"


class Application(MongoBaseModel):
    job_id: PyObjectId
    applicant_id: PyObjectId
    cover_letter: Optional[str] = Field(default=None, max_length=1000)
    resume: str  # URL to resume file
    status: ApplicationStatus = ApplicationStatus.PENDING
    notes: Optional[str] = Field(default=None, max_length=500)
    applied_at: datetime = Field(default_factory=datetime.utcnow)
    reviewed_at: Optional[datetime] = None
    reviewed_by: Optional[PyObjectId] = None
    feedback: Optional[str] = Field(default=None, max_length=1000)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
