from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from bizcards.database import get_db
from bizcards.core.errors import ActionResult
from bizcards.core.exception_handlers import action_response, request_locale
from bizcards.core.rate_limiter import get_client_ip
from bizcards.core.security import clear_session_cookie, set_session_cookie
from bizcards.core.logging_config import logger
from bizcards.dependencies import get_current_user
from bizcards.i18n import is_supported_locale
from bizcards.models.user import User
from bizcards.schemas.user import PasswordConfirmation, SignInRequest, SignInResponse, UserCreate
from bizcards.services.auth import auth_service, role_redirect_path

router = APIRouter()


@router.post("/signin")
def signin(credentials: SignInRequest, request: Request, db: Session = Depends(get_db)):
    """
    Sign in with email and password.

    Sets the HTTP-only session cookie and tells the client which
    dashboard to open. Limited to 5 attempts per 15 minutes per client IP.

    Returns:
        The signed-in user and the localized dashboard path
    """
    locale = credentials.locale if is_supported_locale(credentials.locale) else request_locale(request)
    result = auth_service.authenticate(
        db=db,
        email=credentials.email,
        password=credentials.password,
        client_ip=get_client_ip(request),
    )
    if not result.success:
        return action_response(result, locale)

    user = result.data["user"]
    body = SignInResponse(user=user, redirect_to=f"/{locale}{role_redirect_path(user.role)}")
    response = action_response(ActionResult.ok(body))
    set_session_cookie(response, result.data["token"])
    return response


@router.post("/signup")
def signup(user_data: UserCreate, request: Request, db: Session = Depends(get_db)):
    """
    Register an unassigned account.

    The new user has role ``employee`` and no company until a company
    admin links them.
    """
    result = auth_service.register(db=db, data=user_data)
    if result.success:
        logger.info(f"Signup completed: id={result.data.id}")
    return action_response(result, request_locale(request))


@router.post("/signout")
def signout():
    response = JSONResponse(content={"success": True})
    clear_session_cookie(response)
    return response


@router.post("/verify-password")
def verify_password(
    confirmation: PasswordConfirmation,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Re-check the current user's password.

    Five wrong passwords lock further attempts for seven minutes; the
    response then carries a countdown message with status 429.
    """
    result = auth_service.reverify_password(db=db, user=current_user, password=confirmation.password)
    return action_response(result, request_locale(request))
