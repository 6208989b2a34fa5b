from sqlalchemy import Column, String
from bizcards.database import Base, TimestampMixin, GUID, new_uuid


class NFCTag(Base, TimestampMixin):
    __tablename__ = "nfc_tags"

    id = Column(GUID, primary_key=True, default=new_uuid)
    employee_id = Column(GUID, nullable=False, index=True)
    encoded_url = Column(String, nullable=False)
    qr_image_url = Column(String, nullable=False)
