from typing import List
from sqlalchemy.orm import Session
from sqlalchemy import select
from bizcards.crud.base import CRUDBase
from bizcards.models.company_service import CompanyService
from bizcards.schemas.company import CompanyServiceCreate, CompanyServiceUpdate


class CRUDCompanyService(CRUDBase[CompanyService, CompanyServiceCreate, CompanyServiceUpdate]):
    """Marketing tiles, always returned in display order."""

    def get_multi(
        self,
        db: Session,
        *,
        company_id: str,
        skip: int = 0,
        limit: int = 100
    ) -> List[CompanyService]:
        stmt = (
            select(CompanyService)
            .where(CompanyService.company_id == company_id)
            .order_by(CompanyService.display_order, CompanyService.created_at)
            .offset(skip)
            .limit(limit)
        )
        return list(db.execute(stmt).scalars().all())


company_service = CRUDCompanyService(CompanyService)
