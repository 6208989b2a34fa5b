from typing import List, Optional
from sqlalchemy.orm import Session
from sqlalchemy import select, func
from sqlalchemy.exc import SQLAlchemyError
from bizcards.core.errors import ActionResult, ErrorKind, UNAUTHORIZED_COMPANY
from bizcards.core.logging_config import logger, log_diagnostic
from bizcards.crud.company import company as company_crud
from bizcards.crud.company_service import company_service as company_service_crud
from bizcards.models.employee_card import EmployeeCard
from bizcards.schemas.company import (
    CompanyCreate,
    CompanyOverview,
    CompanyResponse,
    CompanyServiceCreate,
    CompanyServiceResponse,
    CompanyServiceUpdate,
    CompanyUpdate,
)


def _owns(company_id: str, caller_company_id: Optional[str]) -> bool:
    return bool(caller_company_id) and str(caller_company_id) == str(company_id)


class CompanyProfileService:
    """
    Company settings and marketing tiles.

    Mirrors EmployeeService: tenant checks fail closed and return
    ActionResult failures.
    """

    def __init__(self):
        self.crud = company_crud
        self.services_crud = company_service_crud

    def get_company(self, db: Session, company_id: str, caller_company_id: Optional[str]) -> ActionResult:
        if not _owns(company_id, caller_company_id):
            return ActionResult.fail(UNAUTHORIZED_COMPANY, ErrorKind.unauthorized)

        company = self.crud.get(db, company_id)
        if company is None:
            return ActionResult.fail("Company not found", ErrorKind.not_found)
        return ActionResult.ok(CompanyResponse.model_validate(company))

    def update_company(
        self,
        db: Session,
        company_id: str,
        data: CompanyUpdate,
        caller_company_id: Optional[str]
    ) -> ActionResult:
        """
        Update company settings; only supplied fields change.

        URLs were sanitized by the schema; an empty translation map clears
        the stored translations.
        """
        if not _owns(company_id, caller_company_id):
            return ActionResult.fail(UNAUTHORIZED_COMPANY, ErrorKind.unauthorized)

        company = self.crud.get(db, company_id)
        if company is None:
            return ActionResult.fail("Company not found", ErrorKind.not_found)

        update_data = data.model_dump(exclude_unset=True)
        if "business_hours" in update_data and data.business_hours is not None:
            update_data["business_hours"] = data.business_hours.model_dump(exclude_none=True)
        if update_data.get("description_translations") == {}:
            update_data["description_translations"] = None
        if "name" in update_data and not update_data["name"]:
            update_data.pop("name")

        try:
            company = self.crud.update(db, db_obj=company, update_data=update_data)
        except SQLAlchemyError as e:
            db.rollback()
            log_diagnostic("Company update failed", company_id=company_id, error=str(e))
            return ActionResult.fail(f"Failed to update company: {e}", ErrorKind.upstream)

        logger.info(f"Updated company {company.slug}")
        return ActionResult.ok(CompanyResponse.model_validate(company))

    def get_services(self, db: Session, company_id: str, caller_company_id: Optional[str]) -> ActionResult:
        if not _owns(company_id, caller_company_id):
            return ActionResult.fail(UNAUTHORIZED_COMPANY, ErrorKind.unauthorized)

        services = self.services_crud.get_multi(db=db, company_id=company_id)
        return ActionResult.ok([CompanyServiceResponse.model_validate(s) for s in services])

    def add_service(
        self,
        db: Session,
        company_id: str,
        data: CompanyServiceCreate,
        caller_company_id: Optional[str]
    ) -> ActionResult:
        if not _owns(company_id, caller_company_id):
            return ActionResult.fail(UNAUTHORIZED_COMPANY, ErrorKind.unauthorized)

        try:
            service = self.services_crud.create(db=db, obj_in=data, company_id=company_id)
        except SQLAlchemyError as e:
            db.rollback()
            log_diagnostic("Company service insert failed", company_id=company_id, error=str(e))
            return ActionResult.fail(f"Failed to create service: {e}", ErrorKind.upstream)
        return ActionResult.ok(CompanyServiceResponse.model_validate(service))

    def update_service(
        self,
        db: Session,
        company_id: str,
        service_id: str,
        data: CompanyServiceUpdate,
        caller_company_id: Optional[str]
    ) -> ActionResult:
        """Edit a tile; only supplied fields change and empty translation maps clear."""
        if not _owns(company_id, caller_company_id):
            return ActionResult.fail(UNAUTHORIZED_COMPANY, ErrorKind.unauthorized)

        service = self.services_crud.get(db, service_id, company_id)
        if service is None:
            return ActionResult.fail("Service not found", ErrorKind.not_found)

        update_data = data.model_dump(exclude_unset=True)
        # Required columns cannot be cleared
        for key in ("title", "description", "display_order"):
            if key in update_data and update_data[key] is None:
                update_data.pop(key)
        for key in ("title_translations", "description_translations"):
            if update_data.get(key) == {}:
                update_data[key] = None

        try:
            service = self.services_crud.update(db, db_obj=service, update_data=update_data)
        except SQLAlchemyError as e:
            db.rollback()
            log_diagnostic("Company service update failed", service_id=service_id, error=str(e))
            return ActionResult.fail(f"Failed to update service: {e}", ErrorKind.upstream)
        return ActionResult.ok(CompanyServiceResponse.model_validate(service))

    def delete_service(
        self,
        db: Session,
        company_id: str,
        service_id: str,
        caller_company_id: Optional[str]
    ) -> ActionResult:
        if not _owns(company_id, caller_company_id):
            return ActionResult.fail(UNAUTHORIZED_COMPANY, ErrorKind.unauthorized)

        deleted = self.services_crud.delete(db=db, id=service_id, company_id=company_id)
        if deleted is None:
            return ActionResult.fail("Service not found", ErrorKind.not_found)
        return ActionResult.ok({"id": service_id})

    def create_company(self, db: Session, data: CompanyCreate) -> ActionResult:
        """Operator flow: create a company and its first company admin."""
        try:
            company, admin = self.crud.create_with_admin(
                db=db,
                name=data.name,
                email=data.admin_email,
                password=data.admin_password,
                subscription_plan=data.subscription_plan,
                slug=data.slug,
                first_name=data.admin_first_name,
                last_name=data.admin_last_name,
            )
        except ValueError as e:
            return ActionResult.fail(str(e), ErrorKind.conflict)

        logger.info(f"Created company {company.slug}")
        return ActionResult.ok({
            "company": CompanyResponse.model_validate(company),
            "admin_user_id": admin.id,
            "admin_email": admin.email,
        })

    def get_overview(self, db: Session) -> List[CompanyOverview]:
        """Companies with their card counts, for the super-admin dashboard."""
        counts = dict(
            db.execute(
                select(EmployeeCard.company_id, func.count(EmployeeCard.id))
                .group_by(EmployeeCard.company_id)
            ).all()
        )
        return [
            CompanyOverview(
                id=company.id,
                name=company.name,
                slug=company.slug,
                subscription_plan=company.subscription_plan,
                subscription_status=company.subscription_status,
                employee_count=counts.get(company.id, 0),
                services=[CompanyServiceResponse.model_validate(s) for s in company.services],
            )
            for company in self.crud.get_all(db)
        ]


# Create singleton instance
company_profile_service = CompanyProfileService()
