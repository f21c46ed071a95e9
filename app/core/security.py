import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from app.core.config import Settings

logger = logging.getLogger(__name__)

pwd_context = CryptContext(
    schemes=["argon2"],
    default="argon2",
    deprecated="auto",
)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


# Password hashing configuration and verification
def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        # Stored value is not a recognised hash
        return False


def unusable_password_hash() -> str:
    """Hash of a random secret nobody knows, for accounts created by Google sign-in"""
    return hash_password(secrets.token_urlsafe(32))


def create_access_token(user_id: int, email: str, role: str, settings: Settings) -> str:
    """
    Sign a session token carrying the user's id, email and role.

    The token expires after settings.token_expiry_hours; nothing is stored
    server-side.
    """
    expire = datetime.now(timezone.utc) + timedelta(hours=settings.token_expiry_hours)
    to_encode = {"id": user_id, "email": email, "role": role, "exp": expire}
    return jwt.encode(to_encode, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_token(token: str, settings: Settings) -> Optional[dict]:
    """Return the token claims, or None when the signature or expiry check fails"""
    try:
        return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError as e:
        logger.info(f"Rejected session token: {str(e)}")
        return None
