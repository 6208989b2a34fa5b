"""
Locale-independent validation for employee card input.

Every validator returns a machine-readable error code (or None). Turning a
code into a sentence is done at the HTTP boundary by ``bizcards.i18n``.
"""
import re
import unicodedata
from typing import Iterable, Optional

import phonenumbers

# Maximum national-number digits per region, tighter than generic validity
COUNTRY_MAX_NATIONAL_LENGTH = {
    "MZ": 9,   # Mozambique
    "PT": 9,   # Portugal
    "US": 10,
    "CA": 10,
    "DE": 11,  # Germany
    "GB": 10,
    "FR": 9,
    "ES": 9,
    "IT": 11,
    "BR": 11,
    "ZA": 9,
    "AO": 9,   # Angola
    "CN": 11,
    "JP": 10,
    "RU": 10,
    "IN": 10,
}

# ITU-T E.164 bounds on total digits (country code included)
MIN_TOTAL_DIGITS = 7
MAX_TOTAL_DIGITS = 15

DEFAULT_EMAIL_DOMAINS = ("cfm.com", "cfm.co.mz")

_EMAIL_SHAPE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_NAME_PUNCTUATION = frozenset(" .-'’")

MIN_NAME_LETTERS = 3


def normalize_phone_number(raw: Optional[str]) -> Optional[str]:
    """
    Reduce user input to E.164 form.

    "+258 84 123 4567" -> "+258841234567", "00351 912..." -> "+351912...".

    Returns:
        Normalized number, or None when no digits are present
    """
    if not raw:
        return None

    stripped = raw.strip()
    digits = re.sub(r"\D", "", stripped)
    if not digits:
        return None

    if not stripped.startswith("+") and digits.startswith("00"):
        digits = digits[2:]
        if not digits:
            return None
    return f"+{digits}"


def is_valid_phone_number_for_country(e164: Optional[str]) -> bool:
    """
    Validate an E.164 number with the phone metadata plus per-country limits.

    A number must be generically valid, have 7-15 digits in total, and not
    exceed its region's national-number length (e.g. 9 digits in Mozambique).
    """
    if not e164 or not e164.startswith("+"):
        return False

    try:
        parsed = phonenumbers.parse(e164, None)
    except phonenumbers.NumberParseException:
        return False

    if not phonenumbers.is_valid_number(parsed):
        return False

    national = str(parsed.national_number)
    total_digits = len(str(parsed.country_code)) + len(national)
    if total_digits < MIN_TOTAL_DIGITS or total_digits > MAX_TOTAL_DIGITS:
        return False

    region = phonenumbers.region_code_for_number(parsed)
    max_length = COUNTRY_MAX_NATIONAL_LENGTH.get(region)
    if max_length is not None and len(national) > max_length:
        return False

    return True


def validate_phone(raw: Optional[str], required: bool = True) -> Optional[str]:
    if not raw or not raw.strip():
        return "phone_required" if required else None

    normalized = normalize_phone_number(raw)
    if not is_valid_phone_number_for_country(normalized):
        return "phone_invalid"
    return None


def validate_employee_email(email: Optional[str], allowed_domains: Optional[Iterable[str]] = None) -> Optional[str]:
    """
    Accept only addresses on the company's own domains.

    The domain must equal one of ``allowed_domains`` exactly (ignoring case);
    subdomains and look-alikes such as cfm.org are rejected.
    """
    if not email or not email.strip():
        return "email_required"

    email = email.strip()
    if not _EMAIL_SHAPE.match(email):
        return "email_invalid"

    domains = {d.lower() for d in (allowed_domains or DEFAULT_EMAIL_DOMAINS)}
    domain = email.rsplit("@", 1)[1].lower()
    if domain not in domains:
        return "email_domain_not_allowed"
    return None


def validate_name(value: Optional[str], min_letters: int = MIN_NAME_LETTERS) -> Optional[str]:
    """Letters of any script, combining marks, spaces, periods, hyphens and apostrophes."""
    if not value or not value.strip():
        return "name_required"

    letters = 0
    for ch in value:
        category = unicodedata.category(ch)
        if category.startswith("L"):
            letters += 1
        elif category.startswith("M") or ch in _NAME_PUNCTUATION:
            continue
        else:
            return "name_invalid_characters"

    if letters < min_letters:
        return "name_too_short"
    return None
