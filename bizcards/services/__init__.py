from bizcards.services.auth import auth_service
from bizcards.services.employee import employee_service
from .company import company_profile_service
from .card import public_card_service

__all__ = ["auth_service", "employee_service", "company_profile_service", "public_card_service"]
