from typing import Optional
from sqlalchemy.orm import Session
from sqlalchemy import select
from bizcards.core.errors import ActionResult, ErrorKind
from bizcards.core.logging_config import logger, log_diagnostic
from bizcards.core.rate_limiter import (
    PasswordAttemptTracker,
    RateLimiter,
    minutes_left,
    password_attempts,
    rate_limiter,
)
from bizcards.core.security import create_access_token, verify_password
from bizcards.crud.user import user as user_crud
from bizcards.i18n import translate
from bizcards.models.user import User, UserRole
from bizcards.schemas.user import UserCreate, UserResponse


def role_redirect_path(role: Optional[str]) -> str:
    """Dashboard path for a role; unknown roles go back to sign-in."""
    if role == UserRole.super_admin:
        return "/dashboard/admin"
    if role == UserRole.company_admin:
        return "/dashboard/company"
    if role == UserRole.employee:
        return "/dashboard/employee"
    return "/signin"


def verify_password_for_user(db: Session, user: User, password: str) -> bool:
    """
    Re-check a password against the stored hash.

    The hash is re-read from the database rather than trusted from the
    session-bound object.
    """
    stmt = select(User.password_hash).where(User.id == user.id)
    stored_hash = db.execute(stmt).scalar_one_or_none()
    return verify_password(password, stored_hash)


class AuthService:
    """Sign-in, sign-up and password reverification."""

    def __init__(
        self,
        limiter: Optional[RateLimiter] = None,
        attempts: Optional[PasswordAttemptTracker] = None
    ):
        self.limiter = limiter or rate_limiter
        self.attempts = attempts or password_attempts

    def authenticate(self, db: Session, email: str, password: str, client_ip: str) -> ActionResult:
        """
        Check credentials and issue a session token.

        The failure message never reveals whether the email exists.

        Returns:
            ActionResult with ``{"user": UserResponse, "token": str}``
        """
        limit = self.limiter.check(client_ip, "auth")
        if not limit.allowed:
            logger.warning("Sign-in rate limit exceeded")
            return ActionResult.fail(translate("rate_limited"), ErrorKind.rate_limited, code="rate_limited")

        user = user_crud.get_by_email(db, email=email)
        if not user or not verify_password(password, user.password_hash):
            log_diagnostic("Sign-in failed", email=email)
            return ActionResult.fail(
                translate("invalid_credentials"), ErrorKind.unauthorized, code="invalid_credentials"
            )

        token = create_access_token(data={"sub": str(user.id), "role": user.role.value})
        logger.info("User signed in")
        return ActionResult.ok({"user": UserResponse.model_validate(user), "token": token})

    def register(self, db: Session, data: UserCreate) -> ActionResult:
        """Create an unassigned employee account; a company admin links it later."""
        try:
            user = user_crud.create(
                db=db,
                email=data.email,
                password=data.password,
                role=UserRole.employee,
                company_id=None,
                first_name=data.first_name,
                last_name=data.last_name,
            )
        except ValueError as e:
            log_diagnostic("Sign-up failed", email=data.email, error=str(e))
            return ActionResult.fail(translate("signup_failed"), ErrorKind.validation, code="signup_failed")

        logger.info("User signed up")
        return ActionResult.ok(UserResponse.model_validate(user))

    def reverify_password(self, db: Session, user: User, password: str) -> ActionResult:
        """
        Confirm the current user's password before a destructive action.

        Five wrong passwords lock the user out for seven minutes; while
        locked, the countdown message replaces the incorrect-password one.
        """
        key = str(user.id)
        remaining = self.attempts.lockout_remaining(key)
        if remaining is not None:
            minutes = minutes_left(remaining)
            return ActionResult.fail(
                translate("too_many_attempts", minutes=minutes),
                ErrorKind.rate_limited,
                code="too_many_attempts",
                minutes=minutes,
            )

        if verify_password_for_user(db, user, password):
            self.attempts.reset(key)
            return ActionResult.ok()

        lockout = self.attempts.record_failure(key)
        log_diagnostic("Password reverification failed", user_id=key)
        if lockout is not None:
            minutes = minutes_left(lockout)
            return ActionResult.fail(
                translate("too_many_attempts", minutes=minutes),
                ErrorKind.rate_limited,
                code="too_many_attempts",
                minutes=minutes,
            )
        return ActionResult.fail(translate("incorrect_password"), ErrorKind.unauthorized, code="incorrect_password")


# Create singleton instance
auth_service = AuthService()
