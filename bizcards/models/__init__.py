from .analytics_event import AnalyticsEvent
from .company import Company
from .company_service import CompanyService
from .employee_card import EmployeeCard
from .nfc_tag import NFCTag
from .user import User
