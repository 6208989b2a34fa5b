from pydantic import BaseModel
from typing import Optional, Dict, Any, List


class PublicService(BaseModel):
    id: str
    title: str
    description: str
    icon_name: Optional[str] = None
    display_order: int = 0


class PublicCompany(BaseModel):
    id: str
    name: str
    slug: str
    description: Optional[str] = None
    logo_url: Optional[str] = None
    banner_url: Optional[str] = None
    footer_text: Optional[str] = None
    website_url: Optional[str] = None
    linkedin_url: Optional[str] = None
    facebook_url: Optional[str] = None
    instagram_url: Optional[str] = None
    business_hours: Optional[Dict[str, Any]] = None
    services: List[PublicService] = []


class PublicCard(BaseModel):
    """Everything the public card page renders, already localized."""
    slug: str
    name: str
    title: Optional[str] = None
    photo_url: Optional[str] = None
    email: Optional[str] = None
    contact_links: Dict[str, Any]
    social_links: Dict[str, Any]
    business_hours: Optional[Dict[str, Any]] = None
    company: Optional[PublicCompany] = None
    locale: str
    dir: str
    card_url: str
