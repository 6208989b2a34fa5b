import re
from typing import Dict, Optional

from bizcards.i18n.messages import MESSAGES, translate

# Normalized English titles that have catalog entries
PREDEFINED_TITLE_MAP = {
    "head of the technical unit": "titleHeadTechnicalUnit",
    "head of technical unit": "titleHeadTechnicalUnit",
    "director of communication and image": "titleDirectorCommunicationImage",
    "director of comunication and image": "titleDirectorCommunicationImage",
    "executive board director": "titleExecutiveBoardDirector",
    "executive director": "titleExecutiveBoardDirector",
    "chairman of the board of directors": "titleChairmanBoardDirectors",
    "chairman of board of directors": "titleChairmanBoardDirectors",
}


def normalize_title(title: str) -> str:
    normalized = re.sub(r"\s+", " ", title.strip().lower())
    normalized = re.sub(r"\s*&\s*", " and ", normalized)
    return re.sub(r"\s*\+\s*", " and ", normalized)


def translate_title(
    title: Optional[str],
    title_translations: Optional[Dict[str, str]] = None,
    locale: Optional[str] = None,
) -> Optional[str]:
    """
    Localize an employee title.

    Predefined titles use the message catalog for the locale (when that
    locale has an entry); otherwise custom per-locale translations apply,
    falling back to their English entry and finally to the stored title.
    """
    if not title:
        return None

    current = locale or "en"
    key = PREDEFINED_TITLE_MAP.get(normalize_title(title))
    if key and key in MESSAGES.get(current, {}):
        translated = translate(key, current)
        if translated:
            return translated

    if title_translations:
        if title_translations.get(current):
            return title_translations[current]
        if title_translations.get("en"):
            return title_translations["en"]

    return title


def localize_text(default: Optional[str], translations: Optional[Dict[str, str]], locale: Optional[str]) -> Optional[str]:
    """Pick a per-locale variant of a company or service text."""
    if isinstance(translations, dict) and locale:
        value = translations.get(locale) or translations.get(locale.lower()) or translations.get("en")
        if value:
            return value
    return default
