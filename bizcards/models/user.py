import enum
from sqlalchemy import Column, String, ForeignKey, Enum
from sqlalchemy.orm import relationship
from bizcards.database import Base, TimestampMixin, GUID, new_uuid


class UserRole(str, enum.Enum):
    super_admin = "super_admin"
    company_admin = "company_admin"
    employee = "employee"


class User(Base, TimestampMixin):
    __tablename__ = "users"

    # Also the session subject
    id = Column(GUID, primary_key=True, default=new_uuid)
    company_id = Column(GUID, ForeignKey("companies.id", ondelete="SET NULL"), nullable=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=True)
    role = Column(Enum(UserRole, name="user_role"), nullable=False, default=UserRole.employee)
    first_name = Column(String, nullable=True)
    last_name = Column(String, nullable=True)
    title = Column(String, nullable=True)

    company = relationship("Company", back_populates="users")
