from typing import Optional
from datetime import datetime, timedelta, timezone
from jose import JWTError, jwt
import bcrypt
from bizcards.core.config import settings

ALGORITHM = settings.ALGORITHM


def get_password_hash(password: str) -> str:
    """Hash a password using bcrypt."""
    password_bytes = password.encode('utf-8')
    salt = bcrypt.gensalt()
    hashed = bcrypt.hashpw(password_bytes, salt)
    return hashed.decode('utf-8')


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """Verify a password against its hash. Users without a hash never match."""
    if not hashed_password:
        return False
    password_bytes = plain_password.encode('utf-8')
    hashed_bytes = hashed_password.encode('utf-8')
    try:
        return bcrypt.checkpw(password_bytes, hashed_bytes)
    except ValueError:
        # Malformed stored hash
        return False


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a JWT session token.

    Args:
        data: Claims; ``sub`` must hold the user id
        expires_delta: Optional custom lifetime. Defaults to ACCESS_TOKEN_EXPIRE_MINUTES.

    Returns:
        Encoded JWT token string
    """
    to_encode = data.copy()

    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    expire = datetime.now(timezone.utc) + expires_delta

    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=ALGORITHM)


def verify_token(token: str) -> dict:
    """
    Verify and decode a JWT token.

    Raises:
        JWTError: If token is invalid or expired
    """
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGORITHM])


def decode_session_token(token: Optional[str]) -> Optional[dict]:
    """Decode a session cookie value, returning None on any failure."""
    if not token:
        return None
    try:
        payload = verify_token(token)
    except JWTError:
        return None
    if not payload.get("sub"):
        return None
    return payload


def token_needs_refresh(payload: dict, now: Optional[datetime] = None) -> bool:
    """True when the token expires within SESSION_REFRESH_THRESHOLD_MINUTES."""
    exp = payload.get("exp")
    if exp is None:
        return False
    now = now or datetime.now(timezone.utc)
    remaining = datetime.fromtimestamp(exp, tz=timezone.utc) - now
    return remaining < timedelta(minutes=settings.SESSION_REFRESH_THRESHOLD_MINUTES)


def set_session_cookie(response, token: str) -> None:
    response.set_cookie(
        key=settings.COOKIE_NAME,
        value=token,
        max_age=settings.cookie_max_age,
        httponly=True,
        secure=settings.cookie_secure,
        samesite=settings.cookie_samesite,
        path="/",
    )


def clear_session_cookie(response) -> None:
    response.delete_cookie(key=settings.COOKIE_NAME, path="/")
