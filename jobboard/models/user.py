from enum import Enum
from typing import List, Optional
from datetime import datetime

from pydantic import BaseModel, Field

from .base import MongoBaseModel


class Role(str, Enum):
    JOB_SEEKER = "job_seeker"
    RECRUITER = "recruiter"
    ADMIN = "admin"


class Profile(BaseModel):
    phone: Optional[str] = None
    location: Optional[str] = None
    bio: Optional[str] = None
    skills: List[str] = []
    experience: Optional[str] = None
    education: Optional[str] = None
    resume: Optional[str] = None  # url
    avatar: Optional[str] = None  # url
    company: Optional[str] = None  # recruiters
    website: Optional[str] = None  # recruiters


class User(MongoBaseModel):
    name: str
    email: str
    password: str  # argon2 hash, never serialized outward
    role: Role = Role.JOB_SEEKER
    profile: Profile = Field(default_factory=Profile)
    is_active: bool = True
    last_login: Optional[datetime] = None
    password_reset_token: Optional[str] = None
    password_reset_expires: Optional[datetime] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    def public(self) -> dict:
        return self.model_dump(exclude={"password", "password_reset_token", "password_reset_expires"})

    def summary(self, with_profile: bool = False) -> dict:
        data = {"id": self.id, "name": self.name, "email": self.email}
        if with_profile:
            data["profile"] = self.profile.model_dump()
        return data
