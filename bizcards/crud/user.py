from typing import Optional
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from sqlalchemy import select, func
from bizcards.models.user import User, UserRole
from bizcards.core.security import get_password_hash


class CRUDUser:
    """
    CRUD operations for User model.

    Users are looked up globally (sign-in, session subject), so this does
    not inherit the company-scoped CRUDBase.
    """

    def __init__(self):
        self.model = User

    def get_by_email(self, db: Session, email: str) -> Optional[User]:
        """
        Retrieve user by email address, case-insensitively.

        Args:
            db: Database session
            email: User email

        Returns:
            User instance or None if not found
        """
        stmt = select(User).where(func.lower(User.email) == email.strip().lower())
        result = db.execute(stmt)
        return result.scalar_one_or_none()

    def get(self, db: Session, user_id: str) -> Optional[User]:
        stmt = select(User).where(User.id == user_id)
        result = db.execute(stmt)
        return result.scalar_one_or_none()

    def create(
        self,
        db: Session,
        *,
        email: str,
        password: str,
        role: UserRole = UserRole.employee,
        company_id: Optional[str] = None,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        commit: bool = True
    ) -> User:
        """
        Create a new user with hashed password.

        Args:
            db: Database session
            email: User email
            password: Plain text password (will be hashed)
            role: Role deciding which dashboard the user reaches
            company_id: Owning company; None leaves the user unassigned
            first_name: Optional given name
            last_name: Optional family name
            commit: Whether to commit immediately

        Returns:
            Created User instance

        Raises:
            ValueError: If a user with this email already exists
        """
        db_user = User(
            email=email.strip().lower(),
            password_hash=get_password_hash(password),
            role=role,
            company_id=company_id,
            first_name=first_name,
            last_name=last_name,
        )
        db.add(db_user)

        try:
            if commit:
                db.commit()
                db.refresh(db_user)
            else:
                db.flush()  # Get ID without committing
        except IntegrityError as e:
            db.rollback()
            if "unique" in str(e).lower() or "users_email_key" in str(e):
                raise ValueError(f"User with email {email} already exists")
            raise e

        return db_user


# Create singleton instance
user = CRUDUser()
