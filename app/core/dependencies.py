from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.core.config import Settings
from app.core.errors import Forbidden, Unauthorized
from app.core.security import decode_token
from app.database import get_db
from app.models.users import User

bearer_scheme = HTTPBearer(auto_error=False)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> User:
    """
    Dependency to get the current authenticated user from the database.
    Validates the bearer token and returns the User object.
    """
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise Unauthorized("Missing bearer token")

    payload = decode_token(credentials.credentials, settings)
    if not payload or payload.get("id") is None:
        raise Unauthorized("Invalid or expired token")

    user = db.query(User).filter(User.id == int(payload["id"])).first()
    if not user:
        raise Unauthorized("User not found")

    return user


def require_role(allowed_roles: list):
    """
    Dependency factory to check if the user has a required role.
    Usage: Depends(require_role(["designer"]))
    """
    def role_checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in allowed_roles:
            raise Forbidden(f"Access denied. Required role: {', '.join(allowed_roles)}")
        return current_user
    return role_checker
