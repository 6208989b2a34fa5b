import enum
from sqlalchemy import Column, String, Text, Enum
from sqlalchemy.orm import relationship
from bizcards.database import Base, TimestampMixin, GUID, JSONType, new_uuid


class SubscriptionStatus(str, enum.Enum):
    active = "active"
    expired = "expired"
    pending = "pending"
    cancelled = "cancelled"


class Company(Base, TimestampMixin):
    __tablename__ = "companies"

    id = Column(GUID, primary_key=True, default=new_uuid)
    name = Column(String, nullable=False)
    slug = Column(String, unique=True, index=True, nullable=False)
    subscription_plan = Column(String, nullable=False, default="basic")
    subscription_status = Column(
        Enum(SubscriptionStatus, name="subscription_status"),
        nullable=False,
        default=SubscriptionStatus.active,
    )
    description = Column(Text, nullable=True)
    description_translations = Column(JSONType, nullable=True)
    banner_url = Column(String, nullable=True)
    logo_url = Column(String, nullable=True)
    footer_text = Column(String, nullable=True)
    website_url = Column(String, nullable=True)
    linkedin_url = Column(String, nullable=True)
    facebook_url = Column(String, nullable=True)
    instagram_url = Column(String, nullable=True)
    # {"monday": {"open": "08:00", "close": "17:00", "closed": false}, ...}
    business_hours = Column(JSONType, nullable=True)

    users = relationship("User", back_populates="company")
    services = relationship(
        "CompanyService",
        back_populates="company",
        order_by="CompanyService.display_order",
        cascade="all, delete-orphan",
    )
