from datetime import datetime, timedelta
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError, jwt

from jobboard.config import settings
from jobboard.dependencies import get_user_repository
from jobboard.models.user import Role, User
from jobboard.repositories.base import UserRepository
from jobboard.utils.errors import ForbiddenError, UnauthorizedError

# auto_error=False so a missing header gets our own 401 message
security = HTTPBearer(auto_error=False)


def create_access_token(user: User) -> str:
    expire = datetime.utcnow() + timedelta(minutes=settings.access_token_expire_minutes)
    to_encode = {"sub": str(user.id), "role": user.role, "exp": expire}
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> str:
    """Return the user id carried by the token."""
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except ExpiredSignatureError:
        raise UnauthorizedError("Your token has expired, please login again")
    except JWTError:
        raise UnauthorizedError("Invalid token, please login again")

    user_id = payload.get("sub")
    if not user_id:
        raise UnauthorizedError("Invalid token, please login again")
    return user_id


async def resolve_user(token: str, users: UserRepository) -> User:
    user = await users.get(decode_access_token(token))
    if user is None:
        raise UnauthorizedError("The user belonging to this token does no longer exist.")
    if not user.is_active:
        raise UnauthorizedError("Account is deactivated")
    return user


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    users: UserRepository = Depends(get_user_repository),
) -> User:
    if credentials is None:
        raise UnauthorizedError("You are not logged in! Please log in to get access.")
    return await resolve_user(credentials.credentials, users)


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    users: UserRepository = Depends(get_user_repository),
) -> Optional[User]:
    """Like get_current_user, but anonymous or invalid credentials just mean no user."""
    if credentials is None:
        return None
    try:
        return await resolve_user(credentials.credentials, users)
    except UnauthorizedError:
        return None


def require_roles(*roles: Role):
    """Dependency factory: current user must hold one of ``roles``."""
    allowed = {Role(r).value for r in roles}

    async def checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in allowed:
            raise ForbiddenError(f"Role {current_user.role} is not authorized to access this resource")
        return current_user

    return checker


job_seeker_required = require_roles(Role.JOB_SEEKER)
recruiter_required = require_roles(Role.RECRUITER, Role.ADMIN)
admin_required = require_roles(Role.ADMIN)
