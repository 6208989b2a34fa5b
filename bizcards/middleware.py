"""
Locale routing and dashboard access control.

Every page request is resolved to ``/{locale}{canonical path}``. Pages under
``/dashboard`` additionally require a session whose role matches the
dashboard; anything ambiguous is sent to sign-in before a route runs.
"""
from typing import Optional, Tuple
from urllib.parse import quote

from fastapi import Request
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import RedirectResponse, Response

from bizcards.core.config import settings
from bizcards.core.logging_config import logger
from bizcards.core.security import (
    create_access_token,
    decode_session_token,
    set_session_cookie,
    token_needs_refresh,
)
from bizcards.database import SessionLocal
from bizcards.i18n import DEFAULT_LOCALE, LOCALE_COOKIE, is_supported_locale, negotiate_locale
from bizcards.models.user import User, UserRole
from bizcards.services.auth import role_redirect_path

PROTECTED_PREFIX = "/dashboard"

# Dashboard section -> role allowed in it
ROLE_ROUTES = (
    ("/dashboard/admin", UserRole.super_admin),
    ("/dashboard/company", UserRole.company_admin),
    ("/dashboard/employee", UserRole.employee),
)


def split_locale(path: str) -> Tuple[Optional[str], str]:
    """
    Separate a leading locale segment from the path.

    A two-letter segment that is not a supported locale is treated as a
    bad locale and dropped, so it gets replaced rather than nested.

    Returns:
        (locale or None, canonical path starting with "/")
    """
    segments = path.split("/")
    first = segments[1] if len(segments) > 1 else ""
    rest = "/" + "/".join(segments[2:])

    if is_supported_locale(first):
        return first, rest if rest != "/" else "/"
    if len(first) == 2 and first.isalpha():
        return None, rest
    return None, path


def is_protected(canonical: str) -> bool:
    return canonical == PROTECTED_PREFIX or canonical.startswith(PROTECTED_PREFIX + "/")


def required_role(canonical: str) -> Optional[UserRole]:
    for prefix, role in ROLE_ROUTES:
        if canonical == prefix or canonical.startswith(prefix + "/"):
            return role
    return None


def load_session_user(user_id: str) -> Optional[Tuple[UserRole, Optional[str]]]:
    """Point lookup of (role, company_id) for the session subject."""
    db = SessionLocal()
    try:
        row = db.execute(
            select(User.role, User.company_id).where(User.id == user_id)
        ).first()
        return (row.role, row.company_id) if row else None
    finally:
        db.close()


def _redirect(url: str) -> RedirectResponse:
    return RedirectResponse(url=url, status_code=307)


class LocaleAuthMiddleware(BaseHTTPMiddleware):
    """
    Locale prefixing plus the role gate for dashboards.

    Sets request.state attributes:
    - locale: resolved locale of the page
    - user_id, role, company_id: for dashboard requests that passed the gate
    """

    # Paths outside the localized site
    EXCLUDED_PATHS = (
        "/api/",
        "/health",
        "/docs",
        "/openapi.json",
        "/redoc",
    )

    async def dispatch(self, request: Request, call_next) -> Response:
        path = request.url.path
        if any(path.startswith(excluded) for excluded in self.EXCLUDED_PATHS):
            return await call_next(request)

        if path == "/":
            return _redirect(f"/{DEFAULT_LOCALE}/home")

        locale, canonical = split_locale(path)
        if locale is None:
            locale = negotiate_locale(
                request.cookies.get(LOCALE_COOKIE),
                request.headers.get("accept-language"),
            )
            target = f"/{locale}{canonical}" if canonical != "/" else f"/{locale}/home"
            if request.url.query:
                target = f"{target}?{request.url.query}"
            return _redirect(target)

        if canonical == "/":
            return _redirect(f"/{locale}/home")

        request.state.locale = locale

        if not is_protected(canonical):
            response = await call_next(request)
            response.headers["x-locale"] = locale
            return response

        signin_url = f"/{locale}/signin?redirect={quote(canonical, safe='/')}"

        payload = decode_session_token(request.cookies.get(settings.COOKIE_NAME))
        if payload is None:
            return _redirect(signin_url)

        try:
            session_user = await run_in_threadpool(load_session_user, payload["sub"])
        except SQLAlchemyError as e:
            logger.error(f"Session user lookup failed: {str(e)}")
            session_user = None

        # Orphaned sessions look exactly like missing ones
        if session_user is None:
            return _redirect(signin_url)

        role, company_id = session_user
        if required_role(canonical) != role:
            return _redirect(f"/{locale}{role_redirect_path(role)}")

        request.state.user_id = payload["sub"]
        request.state.role = role
        request.state.company_id = company_id

        response = await call_next(request)
        response.headers["x-user-id"] = payload["sub"]
        response.headers["x-user-role"] = role.value
        response.headers["x-locale"] = locale

        if token_needs_refresh(payload):
            token = create_access_token(data={"sub": payload["sub"], "role": role.value})
            set_session_cookie(response, token)

        return response
