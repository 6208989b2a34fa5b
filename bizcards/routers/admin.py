from fastapi import APIRouter, Depends, HTTPException, status, Header
from sqlalchemy.orm import Session
from bizcards.database import get_db
from bizcards.core.config import settings
from bizcards.core.exception_handlers import action_response
from bizcards.core.logging_config import logger
from bizcards.crud.user import user as user_crud
from bizcards.schemas.company import CompanyCreate
from bizcards.services.company import company_profile_service

router = APIRouter()


def verify_admin_key(x_admin_key: str = Header(...)):
    """Verify the admin API key from the x-admin-key header."""
    if x_admin_key != settings.ADMIN_API_KEY:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid admin API key"
        )


@router.post("/companies", status_code=status.HTTP_201_CREATED)
def create_company(
    request: CompanyCreate,
    db: Session = Depends(get_db),
    _: None = Depends(verify_admin_key)
):
    """
    Create a new company and its first company admin.

    Protected by x-admin-key header.

    Args:
        request: Company name and the admin's credentials
        db: Database session

    Returns:
        Created company and admin user information

    Raises:
        HTTPException 400: If the email already exists
    """
    existing_user = user_crud.get_by_email(db, email=request.admin_email)
    if existing_user:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="User with this email already exists"
        )

    result = company_profile_service.create_company(db=db, data=request)
    if result.success:
        logger.info(f"Company invited: {result.data['company'].slug}")
        response = action_response(result)
        response.status_code = status.HTTP_201_CREATED
        return response
    return action_response(result)
