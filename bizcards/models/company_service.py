from sqlalchemy import Column, String, Text, Integer, ForeignKey
from sqlalchemy.orm import relationship
from bizcards.database import Base, TimestampMixin, GUID, JSONType, new_uuid


class CompanyService(Base, TimestampMixin):
    __tablename__ = "company_services"

    id = Column(GUID, primary_key=True, default=new_uuid)
    company_id = Column(GUID, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    title_translations = Column(JSONType, nullable=True)
    description_translations = Column(JSONType, nullable=True)
    # Emoji or image URL
    icon_name = Column(String, nullable=True)
    display_order = Column(Integer, nullable=False, default=0)

    company = relationship("Company", back_populates="services")
