from typing import Optional
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session
from bizcards.database import get_db
from bizcards.core.exception_handlers import action_response, request_locale
from bizcards.core.tenant_context import get_company_id
from bizcards.schemas.company import CompanyServiceCreate, CompanyServiceUpdate, CompanyUpdate
from bizcards.services.company import company_profile_service

router = APIRouter()


@router.get("/{company_id}")
def get_company(
    company_id: str,
    request: Request,
    db: Session = Depends(get_db),
    _company_id: Optional[str] = Depends(get_company_id)
):
    """Company settings for its company admin."""
    result = company_profile_service.get_company(db=db, company_id=company_id, caller_company_id=_company_id)
    return action_response(result, request_locale(request))


@router.patch("/{company_id}")
def update_company(
    company_id: str,
    company_data: CompanyUpdate,
    request: Request,
    db: Session = Depends(get_db),
    _company_id: Optional[str] = Depends(get_company_id)
):
    """
    Update company settings.

    URLs are sanitized; dangerous schemes such as ``javascript:`` are
    rejected as validation errors.

    Args:
        company_id: Company to update
        company_data: Fields to change
        db: Database session
        _company_id: Company of the signed-in company admin
    """
    result = company_profile_service.update_company(
        db=db,
        company_id=company_id,
        data=company_data,
        caller_company_id=_company_id
    )
    return action_response(result, request_locale(request))


@router.get("/{company_id}/services")
def list_services(
    company_id: str,
    request: Request,
    db: Session = Depends(get_db),
    _company_id: Optional[str] = Depends(get_company_id)
):
    result = company_profile_service.get_services(db=db, company_id=company_id, caller_company_id=_company_id)
    return action_response(result, request_locale(request))


@router.post("/{company_id}/services")
def add_service(
    company_id: str,
    service_data: CompanyServiceCreate,
    request: Request,
    db: Session = Depends(get_db),
    _company_id: Optional[str] = Depends(get_company_id)
):
    """Add a marketing tile shown in the public card carousel."""
    result = company_profile_service.add_service(
        db=db,
        company_id=company_id,
        data=service_data,
        caller_company_id=_company_id
    )
    response = action_response(result, request_locale(request))
    if result.success:
        response.status_code = 201
    return response


@router.patch("/{company_id}/services/{service_id}")
def update_service(
    company_id: str,
    service_id: str,
    service_data: CompanyServiceUpdate,
    request: Request,
    db: Session = Depends(get_db),
    _company_id: Optional[str] = Depends(get_company_id)
):
    result = company_profile_service.update_service(
        db=db,
        company_id=company_id,
        service_id=service_id,
        data=service_data,
        caller_company_id=_company_id
    )
    return action_response(result, request_locale(request))


@router.delete("/{company_id}/services/{service_id}")
def delete_service(
    company_id: str,
    service_id: str,
    request: Request,
    db: Session = Depends(get_db),
    _company_id: Optional[str] = Depends(get_company_id)
):
    result = company_profile_service.delete_service(
        db=db,
        company_id=company_id,
        service_id=service_id,
        caller_company_id=_company_id
    )
    return action_response(result, request_locale(request))
