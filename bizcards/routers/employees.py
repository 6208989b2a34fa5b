from typing import Optional, Type, TypeVar

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError
from sqlalchemy.orm import Session

from bizcards.core.errors import ActionResult
from bizcards.core.exception_handlers import action_response, request_locale, validation_failure
from bizcards.core.logging_config import logger
from bizcards.core.tenant_context import get_company_id
from bizcards.database import get_db
from bizcards.dependencies import get_current_user
from bizcards.models.user import User
from bizcards.schemas.employee import EmployeeCreate, EmployeeStatusUpdate, EmployeeUpdate
from bizcards.schemas.user import PasswordConfirmation
from bizcards.services.auth import auth_service
from bizcards.services.employee import PhotoUpload, employee_service
from bizcards.utils.file_validation import MAX_FILE_SIZE

router = APIRouter()

SchemaType = TypeVar("SchemaType", bound=BaseModel)


def _parse_form_payload(schema: Type[SchemaType], payload: str, locale: str) -> SchemaType | JSONResponse:
    """Validate the JSON ``payload`` form field of a multipart request."""
    try:
        return schema.model_validate_json(payload)
    except ValidationError as e:
        return action_response(validation_failure(e.errors(), locale))


def _photo_upload(photo: Optional[UploadFile]) -> Optional[PhotoUpload]:
    if photo is None or not photo.filename:
        return None
    # One byte past the limit is enough for the size check to reject it
    data = photo.file.read(MAX_FILE_SIZE + 1)
    return PhotoUpload(filename=photo.filename, content_type=photo.content_type, data=data)


@router.get("/companies/{company_id}/employees")
def list_employees(
    company_id: str,
    request: Request,
    db: Session = Depends(get_db),
    _company_id: Optional[str] = Depends(get_company_id)
):
    """
    List the company's employee cards, newest first.

    Args:
        company_id: Company whose cards are listed
        db: Database session
        _company_id: Company of the signed-in company admin

    Returns:
        ActionResult with the list of cards
    """
    result = employee_service.get_employees_by_company(
        db=db,
        company_id=company_id,
        caller_company_id=_company_id
    )
    return action_response(result, request_locale(request))


@router.post("/companies/{company_id}/employees")
def create_employee(
    company_id: str,
    request: Request,
    payload: str = Form(...),
    photo: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    _company_id: Optional[str] = Depends(get_company_id)
):
    """
    Provision a new employee card.

    Multipart form: ``payload`` holds the employee JSON, ``photo`` an
    optional JPEG/PNG/WebP/GIF image of at most 5MB.

    Returns:
        ActionResult with the created card (201)
    """
    locale = request_locale(request)
    data = _parse_form_payload(EmployeeCreate, payload, locale)
    if isinstance(data, JSONResponse):
        return data

    logger.info(f"Creating employee card: company_id={company_id}")
    result = employee_service.create_employee(
        db=db,
        company_id=company_id,
        data=data,
        caller_company_id=_company_id,
        photo=_photo_upload(photo)
    )
    response = action_response(result, locale)
    if result.success:
        response.status_code = 201
    return response


@router.patch("/employees/{employee_id}")
def update_employee(
    employee_id: str,
    request: Request,
    payload: str = Form("{}"),
    photo: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    _company_id: Optional[str] = Depends(get_company_id)
):
    """
    Partially update an employee card.

    Only fields present in ``payload`` change; a new ``photo`` replaces
    the stored one.
    """
    locale = request_locale(request)
    data = _parse_form_payload(EmployeeUpdate, payload, locale)
    if isinstance(data, JSONResponse):
        return data

    result = employee_service.update_employee(
        db=db,
        employee_id=employee_id,
        data=data,
        caller_company_id=_company_id,
        photo=_photo_upload(photo)
    )
    return action_response(result, locale)


@router.post("/employees/{employee_id}/status")
def set_employee_status(
    employee_id: str,
    status_update: EmployeeStatusUpdate,
    request: Request,
    db: Session = Depends(get_db),
    _company_id: Optional[str] = Depends(get_company_id)
):
    """Activate or deactivate a card; inactive cards disappear from public URLs."""
    result = employee_service.toggle_employee_status(
        db=db,
        employee_id=employee_id,
        is_active=status_update.is_active,
        caller_company_id=_company_id
    )
    return action_response(result, request_locale(request))


@router.post("/employees/{employee_id}/delete")
def delete_employee(
    employee_id: str,
    confirmation: PasswordConfirmation,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    _company_id: Optional[str] = Depends(get_company_id)
):
    """
    Delete a card after re-verifying the admin's password.

    Wrong passwords count towards a seven minute lockout.
    """
    locale = request_locale(request)
    verification = auth_service.reverify_password(db=db, user=current_user, password=confirmation.password)
    if not verification.success:
        return action_response(verification, locale)

    result: ActionResult = employee_service.delete_employee(
        db=db,
        employee_id=employee_id,
        caller_company_id=_company_id
    )
    return action_response(result, locale)
