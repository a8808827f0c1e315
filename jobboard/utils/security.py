import hashlib
import secrets
from typing import Tuple

from passlib.context import CryptContext

# Password hashing (Argon2)
pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


def verify_password(plain_password, hashed_password):
    """Checks if the typed password matches the saved hash."""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password):
    """Converts a plain password into a secret hash."""
    return pwd_context.hash(password)


def hash_reset_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def generate_reset_token() -> Tuple[str, str]:
    """Return (token for the email link, sha256 of it for storage)."""
    token = secrets.token_hex(20)
    return token, hash_reset_token(token)
