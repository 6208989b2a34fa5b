from bizcards.crud.base import CRUDBase
from bizcards.crud.user import user
from .company import company
from .company_service import company_service
from .employee_card import employee_card

__all__ = ["CRUDBase", "user", "company", "company_service", "employee_card"]
