# ========================================
# jobboard/routes/user.py
# ========================================

import logging
from datetime import datetime
from fastapi import APIRouter, Depends, Query, Request
from typing import Optional

from jobboard.dependencies import get_notifier, get_user_repository
from jobboard.models.user import Profile, User
from jobboard.repositories.base import UserRepository
from jobboard.schemas.user import AccountActivate, PasswordChange, UserCreate, UserLogin, UserUpdate
from jobboard.services.notifications import Notifier
from jobboard.utils.auth import admin_required, create_access_token, get_current_user
from jobboard.utils.errors import ConflictError, NotFoundError, UnauthorizedError, ValidationError
from jobboard.utils.ids import validate_object_id
from jobboard.utils.rate_limit import auth_limit
from jobboard.utils.security import get_password_hash, verify_password

router = APIRouter(prefix="/api/auth", tags=["Auth"])

logger = logging.getLogger("jobboard.auth")


# ===========================
# PUBLIC ENDPOINTS
# ===========================

# ✅ 1. REGISTER
@router.post("/register", status_code=201)
@auth_limit
async def register_user(
    request: Request,
    user: UserCreate,
    users: UserRepository = Depends(get_user_repository),
    notifier: Notifier = Depends(get_notifier),
):
    """Register a new job seeker or recruiter."""
    if await users.get_by_email(user.email):
        raise ConflictError("User already exists with this email")

    created = await users.create(User(
        name=user.name,
        email=user.email,
        password=get_password_hash(user.password),
        role=user.role,
        profile=user.profile or Profile(),
        last_login=datetime.utcnow(),
    ))
    logger.info("Registered %s %s", created.role, created.id)

    # Welcome email (don't wait for it)
    notifier.notify("welcome", created.email, {"name": created.name, "role": created.role})

    return {
        "success": True,
        "data": {"user": created.public(), "token": create_access_token(created)},
    }


# ✅ 2. LOGIN
@router.post("/login")
@auth_limit
async def login(
    request: Request,
    credentials: UserLogin,
    users: UserRepository = Depends(get_user_repository),
):
    """Login and get JWT access token."""
    if not credentials.email or not credentials.password:
        raise ValidationError("Please provide email and password!")

    user = await users.get_by_email(credentials.email)
    if not user or not verify_password(credentials.password, user.password):
        raise UnauthorizedError("Incorrect email or password")

    if not user.is_active:
        raise UnauthorizedError("Account is deactivated")

    user = await users.update(user.id, {"last_login": datetime.utcnow()})
    return {
        "success": True,
        "data": {"user": user.public(), "token": create_access_token(user)},
    }


# ✅ 3. RE-ACTIVATE ACCOUNT
@router.patch("/activate")
@auth_limit
async def activate_account(
    request: Request,
    credentials: AccountActivate,
    users: UserRepository = Depends(get_user_repository),
):
    """Re-activate a deactivated account with its email and password."""
    user = await users.get_by_email(credentials.email)
    if not user:
        raise NotFoundError("There is no user with email address.")
    if not verify_password(credentials.password, user.password):
        raise UnauthorizedError("Incorrect email or password")
    if user.is_active:
        raise ConflictError("Account is already active")

    await users.update(user.id, {"is_active": True})
    logger.info("Account %s re-activated", user.id)
    return {"success": True, "message": "Account activated successfully"}


# ===========================
# AUTHENTICATED USER ENDPOINTS
# ===========================

# ✅ 4. GET MY PROFILE
@router.get("/me")
async def get_me(current_user: User = Depends(get_current_user)):
    return {"success": True, "data": current_user.public()}


# ✅ 5. UPDATE MY PROFILE
@router.patch("/me")
async def update_profile(
    profile_data: UserUpdate,
    current_user: User = Depends(get_current_user),
    users: UserRepository = Depends(get_user_repository),
):
    """Update name and merge the given profile fields into the stored profile."""
    update_data = {}
    if profile_data.name:
        update_data["name"] = profile_data.name
    if profile_data.profile:
        merged = current_user.profile.model_dump()
        merged.update(profile_data.profile.model_dump(exclude_unset=True))
        update_data["profile"] = merged

    if not update_data:
        return {"success": True, "data": current_user.public(), "message": "No changes provided"}

    user = await users.update(current_user.id, update_data)
    return {"success": True, "data": user.public()}


# ✅ 6. CHANGE PASSWORD
@router.put("/password")
async def change_password(
    passwords: PasswordChange,
    current_user: User = Depends(get_current_user),
    users: UserRepository = Depends(get_user_repository),
):
    if not passwords.current_password or not passwords.new_password:
        raise ValidationError("Please provide current and new password")

    if not verify_password(passwords.current_password, current_user.password):
        raise ValidationError("Current password is incorrect")

    await users.update(current_user.id, {"password": get_password_hash(passwords.new_password)})
    return {"success": True, "message": "Password updated successfully"}


# ✅ 7. DEACTIVATE MY ACCOUNT
@router.delete("/me")
async def deactivate_account(
    current_user: User = Depends(get_current_user),
    users: UserRepository = Depends(get_user_repository),
):
    """Soft delete: the account stays, but can no longer sign in."""
    await users.update(current_user.id, {"is_active": False})
    logger.info("Account %s deactivated", current_user.id)
    return {"success": True, "message": "Account deactivated successfully"}


# ===========================
# ADMIN ENDPOINTS
# ===========================

# ✅ 8. SEARCH USERS BY NAME (Admin)
@router.get("/search-users")
async def search_users(
    name: Optional[str] = Query(None, description="Case-insensitive name search"),
    current_user: User = Depends(admin_required),
    users: UserRepository = Depends(get_user_repository),
):
    if not name:
        raise ValidationError("Please provide a name to search")
    found = await users.search_by_name(name)
    return {"success": True, "data": [user.public() for user in found]}


# ✅ 9. GET USER (Admin)
@router.get("/users/{user_id}")
async def get_user(
    user_id: str,
    current_user: User = Depends(admin_required),
    users: UserRepository = Depends(get_user_repository),
):
    user = await users.get(validate_object_id(user_id, "user ID"))
    if not user:
        raise NotFoundError("User not found")
    return {"success": True, "data": user.public()}
