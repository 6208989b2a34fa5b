from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional, Dict, Any, List
from datetime import datetime
from bizcards.models.company import SubscriptionStatus
from bizcards.schemas.common import BusinessHours, clean_translations, clean_url, code_error


class CompanyBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    description_translations: Optional[Dict[str, str]] = None
    logo_url: Optional[str] = None
    banner_url: Optional[str] = None
    footer_text: Optional[str] = Field(None, max_length=500)
    website_url: Optional[str] = None
    linkedin_url: Optional[str] = None
    facebook_url: Optional[str] = None
    instagram_url: Optional[str] = None
    business_hours: Optional[BusinessHours] = None


class CompanyCreate(BaseModel):
    """Operator flow: a company together with its first company admin."""
    name: str = Field(..., min_length=1, max_length=255)
    slug: Optional[str] = None
    subscription_plan: str = "basic"
    admin_email: EmailStr
    admin_password: str = Field(..., min_length=8)
    admin_first_name: Optional[str] = None
    admin_last_name: Optional[str] = None


class CompanyUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    description_translations: Optional[Dict[str, str]] = None
    logo_url: Optional[str] = None
    banner_url: Optional[str] = None
    footer_text: Optional[str] = Field(None, max_length=500)
    website_url: Optional[str] = None
    linkedin_url: Optional[str] = None
    facebook_url: Optional[str] = None
    instagram_url: Optional[str] = None
    business_hours: Optional[BusinessHours] = None

    @field_validator(
        "logo_url", "banner_url", "website_url", "linkedin_url", "facebook_url", "instagram_url"
    )
    @classmethod
    def sanitize_urls(cls, v):
        return clean_url(v)

    @field_validator("description_translations")
    @classmethod
    def validate_translations(cls, v):
        return clean_translations(v)


class CompanyResponse(CompanyBase):
    id: str
    slug: str
    subscription_plan: str
    subscription_status: SubscriptionStatus
    business_hours: Optional[Dict[str, Any]] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


def clean_icon(value: Optional[str]) -> Optional[str]:
    """Service icons are a short emoji or an image URL."""
    if not value:
        return value
    if "/" in value:
        return clean_url(value)
    if len(value) > 16:
        raise code_error("url_invalid")
    return value


class CompanyServiceBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    title_translations: Optional[Dict[str, str]] = None
    description_translations: Optional[Dict[str, str]] = None
    icon_name: Optional[str] = Field(None, max_length=500)
    display_order: int = Field(0, ge=0)

    @field_validator("title_translations", "description_translations")
    @classmethod
    def validate_translations(cls, v):
        return clean_translations(v)

    @field_validator("icon_name")
    @classmethod
    def validate_icon(cls, v):
        return clean_icon(v)


class CompanyServiceCreate(CompanyServiceBase):
    pass


class CompanyServiceUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, min_length=1)
    title_translations: Optional[Dict[str, str]] = None
    description_translations: Optional[Dict[str, str]] = None
    icon_name: Optional[str] = Field(None, max_length=500)
    display_order: Optional[int] = Field(None, ge=0)

    @field_validator("title_translations", "description_translations")
    @classmethod
    def validate_translations(cls, v):
        return clean_translations(v)

    @field_validator("icon_name")
    @classmethod
    def validate_icon(cls, v):
        return clean_icon(v)


class CompanyServiceResponse(CompanyServiceBase):
    id: str
    company_id: str

    class Config:
        from_attributes = True


class CompanyOverview(BaseModel):
    """Row of the super-admin companies table."""
    id: str
    name: str
    slug: str
    subscription_plan: str
    subscription_status: SubscriptionStatus
    employee_count: int = 0
    services: List[CompanyServiceResponse] = []
