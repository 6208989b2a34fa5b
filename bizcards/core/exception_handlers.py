"""
HTTP boundary: locale detection, ActionResult responses and exception handlers.

Message codes produced by validation and services are translated here and
nowhere else.
"""
from typing import Any, Dict, List, Optional, Sequence

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from bizcards.core.errors import ActionResult, ErrorKind, FieldError
from bizcards.core.logging_config import logger
from bizcards.i18n import LOCALE_COOKIE, is_supported_locale, negotiate_locale, translate


def request_locale(request: Request) -> str:
    """Locale for API messages: ``?locale=``, middleware state, cookie, Accept-Language."""
    query_locale = request.query_params.get("locale")
    if is_supported_locale(query_locale):
        return query_locale

    state_locale = getattr(request.state, "locale", None)
    if is_supported_locale(state_locale):
        return state_locale

    return negotiate_locale(
        request.cookies.get(LOCALE_COOKIE),
        request.headers.get("accept-language"),
    )


def _message(code: str, locale: str, fallback: str, **params: Any) -> str:
    translated = translate(code, locale, **params)
    return fallback if translated == code else translated


def field_errors_from(errors: Sequence[Dict[str, Any]], locale: str) -> List[FieldError]:
    """
    Convert pydantic error dicts into translated field errors.

    Custom validators raise with a message code as the error type; built-in
    pydantic errors keep their own message.
    """
    field_errors = []
    for error in errors:
        location = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        code = error.get("type", "validation_failed")
        field_errors.append(
            FieldError(
                field=".".join(location) or "body",
                code=code,
                message=_message(code, locale, error.get("msg", "")),
            )
        )
    return field_errors


def validation_failure(errors: Sequence[Dict[str, Any]], locale: str) -> ActionResult:
    return ActionResult.fail(
        translate("validation_failed", locale),
        ErrorKind.validation,
        field_errors=field_errors_from(errors, locale),
        code="validation_failed",
    )


def localize_result(result: ActionResult, locale: str) -> ActionResult:
    if result.success:
        return result

    updates: Dict[str, Any] = {}
    if result.code:
        updates["error"] = _message(result.code, locale, result.error or "", **(result.params or {}))
    if result.field_errors:
        updates["field_errors"] = [
            field_error.model_copy(update={"message": _message(field_error.code, locale, field_error.message)})
            for field_error in result.field_errors
        ]
    return result.model_copy(update=updates)


def action_response(result: ActionResult, locale: Optional[str] = None) -> JSONResponse:
    """Render an ActionResult with the status matching its error kind."""
    if locale:
        result = localize_result(result, locale)
    return JSONResponse(status_code=result.status_code, content=result.to_body())


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    locale = request_locale(request)
    result = validation_failure(exc.errors(), locale)
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=result.to_body())


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {str(exc)}", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"success": False, "error": "Internal server error"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
