import logging
from datetime import datetime, timedelta
from fastapi import APIRouter, Depends, Request

from jobboard.config import settings
from jobboard.dependencies import get_notifier, get_user_repository
from jobboard.repositories.base import UserRepository
from jobboard.schemas.password_reset import ForgotPasswordRequest, ResetPasswordRequest
from jobboard.services.notifications import Notifier
from jobboard.utils.auth import create_access_token
from jobboard.utils.errors import NotFoundError, ValidationError
from jobboard.utils.rate_limit import auth_limit
from jobboard.utils.security import generate_reset_token, get_password_hash, hash_reset_token

router = APIRouter(prefix="/api/auth", tags=["Password Reset"])

logger = logging.getLogger("jobboard.auth")


@router.patch("/forgot-password")
@auth_limit
async def forgot_password(
    request: Request,
    body: ForgotPasswordRequest,
    users: UserRepository = Depends(get_user_repository),
    notifier: Notifier = Depends(get_notifier),
):
    """
    Step 1: Request password reset - email a one-time reset link.
    Only the sha256 of the token is stored.
    """
    user = await users.get_by_email(body.email)
    if not user:
        raise NotFoundError("There is no user with email address.")

    token, token_hash = generate_reset_token()
    expires_minutes = settings.password_reset_expire_minutes
    await users.update(user.id, {
        "password_reset_token": token_hash,
        "password_reset_expires": datetime.utcnow() + timedelta(minutes=expires_minutes),
    })

    reset_url = str(request.url_for("reset_password", reset_token=token))
    notifier.notify("password_reset", user.email, {
        "name": user.name,
        "reset_url": reset_url,
        "expires_minutes": expires_minutes,
    })
    logger.info("Password reset requested for %s", user.id)

    return {"success": True, "message": "Token sent to email!"}


@router.put("/reset-password/{reset_token}", name="reset_password")
async def reset_password(
    reset_token: str,
    body: ResetPasswordRequest,
    users: UserRepository = Depends(get_user_repository),
):
    """
    Step 2: Set a new password with the emailed token.
    """
    user = await users.get_by_reset_token(hash_reset_token(reset_token), datetime.utcnow())
    if not user:
        raise ValidationError("Token is invalid or has expired")

    user = await users.update(user.id, {
        "password": get_password_hash(body.password),
        "password_reset_token": None,
        "password_reset_expires": None,
    })
    logger.info("Password reset completed for %s", user.id)

    return {
        "success": True,
        "token": create_access_token(user),
        "message": "Password updated successfully",
    }
