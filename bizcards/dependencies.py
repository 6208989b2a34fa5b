from typing import Optional

from fastapi import Depends, HTTPException, status, Request
from sqlalchemy.orm import Session
from sqlalchemy import select
from bizcards.database import get_db
from bizcards.models.user import User, UserRole
from bizcards.core.security import decode_session_token
from bizcards.core.config import settings


def _extract_token(request: Request) -> Optional[str]:
    token = request.cookies.get(settings.COOKIE_NAME)
    if token:
        return token

    authorization = request.headers.get("Authorization")
    if authorization and authorization.startswith("Bearer "):
        return authorization.replace("Bearer ", "", 1)
    return None


def get_optional_user(
    request: Request,
    db: Session = Depends(get_db)
) -> Optional[User]:
    """
    Resolve the session user from the cookie (or a Bearer header).

    Returns None when there is no valid session or the subject has no
    ``users`` row; callers decide whether that is an error.
    """
    payload = decode_session_token(_extract_token(request))
    if payload is None:
        return None

    stmt = select(User).where(User.id == payload["sub"])
    return db.execute(stmt).scalar_one_or_none()


def get_current_user(user: Optional[User] = Depends(get_optional_user)) -> User:
    """
    Require an authenticated user.

    Raises:
        HTTPException 401: If the session is missing, invalid or orphaned
    """
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def require_role(*roles: UserRole):
    """Dependency factory restricting a route to the given roles."""

    def checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions"
            )
        return current_user

    return checker
