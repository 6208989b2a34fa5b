from pydantic import BaseModel, Field, field_validator
from typing import Optional, Dict, Any
from datetime import datetime
from bizcards.core.config import settings
from bizcards.schemas.common import (
    BusinessHours,
    SocialLinks,
    clean_translations,
    clean_url,
    code_error,
)
from bizcards.utils.validators import (
    normalize_phone_number,
    validate_employee_email,
    validate_name,
    validate_phone,
)


class ContactLinks(BaseModel):
    phone: str
    phone2: Optional[str] = None
    whatsapp: Optional[str] = None
    whatsapp2: Optional[str] = None
    email: str
    website: Optional[str] = None

    @field_validator("phone")
    @classmethod
    def validate_primary_phone(cls, v):
        error = validate_phone(v, required=True)
        if error:
            raise code_error(error)
        return normalize_phone_number(v)

    @field_validator("phone2", "whatsapp", "whatsapp2")
    @classmethod
    def validate_optional_phone(cls, v):
        error = validate_phone(v, required=False)
        if error:
            raise code_error(error)
        return normalize_phone_number(v)

    @field_validator("email")
    @classmethod
    def validate_company_email(cls, v):
        error = validate_employee_email(v, settings.ALLOWED_EMAIL_DOMAINS)
        if error:
            raise code_error(error)
        return v.strip()

    @field_validator("website")
    @classmethod
    def sanitize_website(cls, v):
        return clean_url(v)


class EmployeeBase(BaseModel):
    first_name: str
    last_name: str
    title: str = Field(..., max_length=255)
    photo_url: Optional[str] = None
    contact_links: ContactLinks
    social_links: Optional[SocialLinks] = None
    business_hours: Optional[BusinessHours] = None
    is_active: bool = True
    title_translations: Optional[Dict[str, str]] = None

    @field_validator("first_name", "last_name")
    @classmethod
    def validate_person_name(cls, v):
        error = validate_name(v)
        if error:
            raise code_error(error)
        return v.strip()

    @field_validator("title")
    @classmethod
    def validate_title(cls, v):
        if not v or not v.strip():
            raise code_error("title_required")
        return v.strip()

    @field_validator("photo_url")
    @classmethod
    def sanitize_photo_url(cls, v):
        return clean_url(v)

    @field_validator("title_translations")
    @classmethod
    def validate_translations(cls, v):
        return clean_translations(v)


class EmployeeCreate(EmployeeBase):
    pass


class EmployeeUpdate(BaseModel):
    """Partial update: only fields present in the payload are applied."""
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    title: Optional[str] = Field(None, max_length=255)
    photo_url: Optional[str] = None
    contact_links: Optional[ContactLinks] = None
    social_links: Optional[SocialLinks] = None
    business_hours: Optional[BusinessHours] = None
    is_active: Optional[bool] = None
    title_translations: Optional[Dict[str, str]] = None

    @field_validator("first_name", "last_name")
    @classmethod
    def validate_person_name(cls, v):
        if v is None:
            return v
        error = validate_name(v)
        if error:
            raise code_error(error)
        return v.strip()

    @field_validator("photo_url")
    @classmethod
    def sanitize_photo_url(cls, v):
        return clean_url(v)

    @field_validator("title_translations")
    @classmethod
    def validate_translations(cls, v):
        return clean_translations(v)


class EmployeeStatusUpdate(BaseModel):
    is_active: bool


class EmployeeCardResponse(BaseModel):
    id: str
    employee_id: str
    public_slug: str
    photo_url: Optional[str] = None
    contact_links: Dict[str, Any]
    social_links: Dict[str, Any]
    business_hours: Optional[Dict[str, Any]] = None
    theme: Dict[str, Any]
    is_active: bool
    company_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    # Lifted from theme
    name: Optional[str] = None
    title: Optional[str] = None
    title_translations: Optional[Dict[str, str]] = None

    class Config:
        from_attributes = True
