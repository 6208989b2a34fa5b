import enum
from sqlalchemy import Column, String, ForeignKey
from bizcards.database import Base, TimestampMixin, GUID, JSONType, new_uuid


class AnalyticsEventType(str, enum.Enum):
    scan = "scan"
    visit = "visit"
    click = "click"


class AnalyticsEvent(Base, TimestampMixin):
    __tablename__ = "analytics_events"

    id = Column(GUID, primary_key=True, default=new_uuid)
    card_id = Column(GUID, ForeignKey("employee_cards.id", ondelete="CASCADE"), nullable=False, index=True)
    event_type = Column(String, nullable=False)
    metadata_ = Column("metadata", JSONType, nullable=False, default=dict)
