from typing import Any, Dict, List, Optional
from sqlalchemy.orm import Session, load_only
from sqlalchemy.exc import OperationalError, ProgrammingError
from sqlalchemy import select
from bizcards.models.employee_card import EmployeeCard

# Error fragments meaning employee_cards.company_id is not migrated yet
MISSING_COLUMN_MARKERS = ("does not exist", "no such column", "PGRST116", "42703")

# Everything the pre-migration table has
LEGACY_COLUMNS = (
    EmployeeCard.id,
    EmployeeCard.employee_id,
    EmployeeCard.public_slug,
    EmployeeCard.photo_url,
    EmployeeCard.contact_links,
    EmployeeCard.social_links,
    EmployeeCard.business_hours,
    EmployeeCard.theme,
    EmployeeCard.is_active,
    EmployeeCard.created_at,
    EmployeeCard.updated_at,
)


def is_missing_column_error(exc: Exception) -> bool:
    if not isinstance(exc, (OperationalError, ProgrammingError)):
        return False
    message = str(exc)
    return any(marker in message for marker in MISSING_COLUMN_MARKERS)


class CRUDEmployeeCard:
    """
    CRUD operations for EmployeeCard.

    Cards are addressed by ``employee_id`` (the owner's user id) rather
    than their row id, and tenant checks happen in the service layer
    because the owning company may live in the theme instead of the column.
    """

    def __init__(self):
        self.model = EmployeeCard

    def get_by_employee_id(self, db: Session, employee_id: str) -> Optional[EmployeeCard]:
        stmt = select(EmployeeCard).where(EmployeeCard.employee_id == employee_id)
        return db.execute(stmt).scalar_one_or_none()

    def get_by_slug(self, db: Session, slug: str) -> Optional[EmployeeCard]:
        stmt = select(EmployeeCard).where(EmployeeCard.public_slug == slug)
        return db.execute(stmt).scalar_one_or_none()

    def slug_exists(self, db: Session, slug: str) -> bool:
        stmt = select(EmployeeCard.id).where(EmployeeCard.public_slug == slug)
        return db.execute(stmt).first() is not None

    def get_multi_by_company_column(self, db: Session, company_id: str) -> List[EmployeeCard]:
        stmt = (
            select(EmployeeCard)
            .where(EmployeeCard.company_id == company_id)
            .order_by(EmployeeCard.created_at.desc())
        )
        return list(db.execute(stmt).scalars().all())

    def get_all_legacy(self, db: Session) -> List[EmployeeCard]:
        """
        Fetch every card without touching the company_id column.

        Callers must not read ``company_id`` on the returned objects; doing
        so would lazy-load the missing column.
        """
        stmt = (
            select(EmployeeCard)
            .options(load_only(*LEGACY_COLUMNS))
            .order_by(EmployeeCard.created_at.desc())
        )
        return list(db.execute(stmt).scalars().all())

    def create(self, db: Session, *, values: Dict[str, Any]) -> EmployeeCard:
        """
        Insert a card and commit.

        Raises:
            IntegrityError: On a unique violation (slug or employee_id);
                the session is rolled back first
        """
        db_obj = EmployeeCard(**values)
        db.add(db_obj)
        try:
            db.commit()
        except Exception:
            db.rollback()
            raise
        db.refresh(db_obj)
        return db_obj

    def save(self, db: Session, db_obj: EmployeeCard) -> EmployeeCard:
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def delete(self, db: Session, db_obj: EmployeeCard) -> None:
        db.delete(db_obj)
        db.commit()


# Create singleton instance
employee_card = CRUDEmployeeCard()
