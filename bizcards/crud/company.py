from typing import List, Optional, Tuple
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from sqlalchemy import select
from bizcards.models.company import Company
from bizcards.models.user import User, UserRole
from bizcards.crud.user import user as user_crud
from bizcards.utils.slug import generate_slug, generate_unique_slug


class CRUDCompany:
    """
    CRUD operations for Company model.

    Note: Company is the tenant root and has no company_id of its own,
    so we don't inherit from CRUDBase.
    """

    def __init__(self):
        self.model = Company

    def get(self, db: Session, company_id: str) -> Optional[Company]:
        stmt = select(Company).where(Company.id == company_id)
        return db.execute(stmt).scalar_one_or_none()

    def get_by_slug(self, db: Session, slug: str) -> Optional[Company]:
        stmt = select(Company).where(Company.slug == slug)
        return db.execute(stmt).scalar_one_or_none()

    def get_all(self, db: Session) -> List[Company]:
        stmt = select(Company).order_by(Company.created_at.desc())
        return list(db.execute(stmt).scalars().all())

    def update(self, db: Session, *, db_obj: Company, update_data: dict) -> Company:
        for field, value in update_data.items():
            setattr(db_obj, field, value)
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def create_with_admin(
        self,
        db: Session,
        *,
        name: str,
        email: str,
        password: str,
        subscription_plan: str = "basic",
        slug: Optional[str] = None,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None
    ) -> Tuple[Company, User]:
        """
        Create a company and its first company admin atomically.

        Args:
            db: Database session
            name: Company display name
            email: Admin user email
            password: Admin user password (will be hashed)
            subscription_plan: Plan label
            slug: Explicit slug; derived from the name when omitted
            first_name: Admin given name
            last_name: Admin family name

        Returns:
            Tuple of (created Company, created User)

        Raises:
            ValueError: If a user with this email or a company with this slug exists
        """
        base_slug = generate_slug(slug or name)
        company_slug = generate_unique_slug(
            base_slug,
            lambda candidate: self.get_by_slug(db, candidate) is not None,
        )

        try:
            company = Company(name=name, slug=company_slug, subscription_plan=subscription_plan)
            db.add(company)
            db.flush()  # Get company.id without committing

            admin = user_crud.create(
                db=db,
                email=email,
                password=password,
                role=UserRole.company_admin,
                company_id=company.id,
                first_name=first_name,
                last_name=last_name,
                commit=False
            )

            # Commit both company and admin atomically
            db.commit()
            db.refresh(company)
            db.refresh(admin)

            return company, admin

        except IntegrityError as e:
            db.rollback()
            if "unique" in str(e).lower():
                raise ValueError("A company or user with these details already exists")
            raise e


# Create singleton instance
company = CRUDCompany()
