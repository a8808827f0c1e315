from typing import List, Literal, Optional
from datetime import datetime

from pydantic import BaseModel, Field

from .base import MongoBaseModel, PyObjectId

JobType = Literal["full-time", "part-time", "contract", "internship", "remote"]
ExperienceLevel = Literal["entry-level", "mid-level", "senior-level", "executive"]


class Salary(BaseModel):
    min: Optional[float] = Field(default=None, ge=0)
    max: Optional[float] = Field(default=None, ge=0)
    currency: str = "USD"


class Job(MongoBaseModel):
    title: str
    company: str
    description: str
    requirements: str
    location: str
    job_type: JobType
    experience_level: ExperienceLevel
    salary: Salary = Field(default_factory=Salary)
    skills: List[str] = []
    benefits: List[str] = []
    application_deadline: Optional[datetime] = None
    posted_by: PyObjectId
    is_active: bool = True
    applications_count: int = 0
    views_count: int = 0
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    def is_owned_by(self, user_id: str) -> bool:
        return str(self.posted_by) == str(user_id)

    def deadline_passed(self, now: datetime = None) -> bool:
        if self.application_deadline is None:
            return False
        return self.application_deadline <= (now or datetime.utcnow())

    def summary(self, *fields: str) -> dict:
        data = {"id": self.id}
        for field in fields:
            value = getattr(self, field)
            data[field] = value.model_dump() if isinstance(value, BaseModel) else value
        return data
