from pydantic import BaseModel, Field, field_validator
from pydantic_core import PydanticCustomError
from typing import Dict, Optional
from bizcards.i18n import LOCALES, translate
from bizcards.utils.url_sanitizer import sanitize_url


def code_error(code: str) -> PydanticCustomError:
    """Validation error carrying a message code; translated at the HTTP boundary."""
    return PydanticCustomError(code, translate(code, "en"))


def clean_url(value: Optional[str]) -> Optional[str]:
    """Sanitize an optional URL field; empty input stays None."""
    if value is None or not value.strip():
        return None
    sanitized = sanitize_url(value)
    if not sanitized:
        raise code_error("url_invalid")
    return sanitized


def clean_translations(value: Optional[Dict[str, str]]) -> Optional[Dict[str, str]]:
    """Drop blank entries and reject unsupported locale keys."""
    if value is None:
        return None
    cleaned = {}
    for locale, text in value.items():
        if locale not in LOCALES:
            raise code_error("invalid_locale")
        if text and text.strip():
            cleaned[locale] = text.strip()
    return cleaned


class DayHours(BaseModel):
    open: Optional[str] = Field(None, pattern=r"^([01]\d|2[0-3]):[0-5]\d$")
    close: Optional[str] = Field(None, pattern=r"^([01]\d|2[0-3]):[0-5]\d$")
    closed: bool = False


class BusinessHours(BaseModel):
    monday: Optional[DayHours] = None
    tuesday: Optional[DayHours] = None
    wednesday: Optional[DayHours] = None
    thursday: Optional[DayHours] = None
    friday: Optional[DayHours] = None
    saturday: Optional[DayHours] = None
    sunday: Optional[DayHours] = None


class SocialLinks(BaseModel):
    linkedin: Optional[str] = ""
    facebook: Optional[str] = None
    instagram: Optional[str] = None

    @field_validator("linkedin", "facebook", "instagram")
    @classmethod
    def sanitize(cls, v):
        return clean_url(v) or ("" if v == "" else None)
