from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional, List, Literal

from jobboard.models.user import Profile


# 1. For Registration (Input)
class UserCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=4)
    # admins are provisioned directly in the database
    role: Literal["job_seeker", "recruiter"] = "job_seeker"
    profile: Optional[Profile] = None

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v):
        return v.lower()


# 2. For Login (Input)
class UserLogin(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


# 3. For Updating Profile (Input)
class ProfileUpdate(BaseModel):
    phone: Optional[str] = None
    location: Optional[str] = None
    bio: Optional[str] = None
    skills: Optional[List[str]] = None
    experience: Optional[str] = None
    education: Optional[str] = None
    resume: Optional[str] = None
    avatar: Optional[str] = None
    company: Optional[str] = None
    website: Optional[str] = None


class UserUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=50)
    profile: Optional[ProfileUpdate] = None


# 4. Password change (Input)
class PasswordChange(BaseModel):
    current_password: Optional[str] = None
    new_password: Optional[str] = Field(None, min_length=4)


# 5. Re-activate a deactivated account (Input)
class AccountActivate(BaseModel):
    email: str
    password: str
