from pydantic import BaseModel, EmailStr, Field, model_validator
from typing import Optional


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    password: str = Field(..., min_length=4)
    password_confirm: Optional[str] = None

    @model_validator(mode="after")
    def passwords_match(self):
        if self.password_confirm is not None and self.password_confirm != self.password:
            raise ValueError("Passwords do not match")
        return self
