from sqlalchemy import Column, String, Boolean, ForeignKey
from bizcards.database import Base, TimestampMixin, GUID, JSONType, new_uuid


class EmployeeCard(Base, TimestampMixin):
    __tablename__ = "employee_cards"

    id = Column(GUID, primary_key=True, default=new_uuid)
    # Soft link to users.id; the user row may not exist
    employee_id = Column(GUID, unique=True, index=True, nullable=False)
    public_slug = Column(String, unique=True, index=True, nullable=False)
    photo_url = Column(String, nullable=True)
    # {"phone", "phone2", "whatsapp", "whatsapp2", "email", "website"}
    contact_links = Column(JSONType, nullable=False, default=dict)
    social_links = Column(JSONType, nullable=False, default=dict)
    business_hours = Column(JSONType, nullable=True)
    # {"name", "title", "title_translations", "company_id"}
    theme = Column(JSONType, nullable=False, default=dict)
    is_active = Column(Boolean, nullable=False, default=True)
    # Added by migration 0002; legacy rows carry the company only in theme
    company_id = Column(GUID, ForeignKey("companies.id", ondelete="CASCADE"), nullable=True, index=True)
