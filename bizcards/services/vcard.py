"""
vCard 3.0 export for public cards.
"""

import base64
import re
import httpx
from typing import Optional, Tuple
from bizcards.core.config import settings
from bizcards.core.logging_config import logger
from bizcards.schemas.card import PublicCard
from bizcards.utils.file_validation import MAX_FILE_SIZE, validate_file_content

PHOTO_TYPES = {
    "image/jpeg": "JPEG",
    "image/jpg": "JPEG",
    "image/png": "PNG",
    "image/gif": "GIF",
    "image/webp": "WEBP",
}

_PHONE_CHARS = re.compile(r"[^\d+]")


def escape_vcard_value(value: str) -> str:
    return (
        value.replace("\\", "\\\\")
        .replace(",", "\\,")
        .replace(";", "\\;")
        .replace("\n", "\\n")
    )


def vcard_filename(name: Optional[str]) -> str:
    if not name or not name.strip():
        return "contact.vcf"
    return re.sub(r"\s+", "-", name.strip()) + ".vcf"


def photo_fetch_allowed(url: str) -> bool:
    """Only objects served by our own public storage are fetched server-side."""
    if url == settings.DEFAULT_PROFILE_PICTURE_URL:
        return True
    prefix = f"{settings.STORAGE_URL.rstrip('/')}/object/public/"
    return url.startswith(prefix) and ".." not in url[len(prefix):]


def fetch_photo(url: Optional[str], transport: Optional[httpx.BaseTransport] = None) -> Optional[Tuple[str, str]]:
    """
    Download a photo for embedding.

    Only storage URLs are fetched, redirects are not followed and the body
    must be an image of at most MAX_FILE_SIZE whose bytes match its
    content type.

    Returns:
        (base64 data, vCard image type) or None when the photo is referenced by URL
    """
    if not url:
        return None
    if not photo_fetch_allowed(url):
        logger.info("Photo is not in storage, using URL reference in vCard")
        return None

    body = bytearray()
    try:
        with httpx.Client(transport=transport, timeout=settings.PHOTO_FETCH_TIMEOUT_SECONDS) as client:
            with client.stream("GET", url, follow_redirects=False) as response:
                response.raise_for_status()
                mime = response.headers.get("content-type", "").split(";")[0].strip().lower()
                if mime not in PHOTO_TYPES:
                    logger.warning(f"Photo has content type {mime or 'none'}, using URL reference")
                    return None
                for chunk in response.iter_bytes():
                    body.extend(chunk)
                    if len(body) > MAX_FILE_SIZE:
                        logger.warning("Photo exceeds the upload size limit, using URL reference")
                        return None
    except httpx.HTTPError as e:
        logger.warning(f"Could not fetch photo for vCard, using URL reference: {str(e)}")
        return None

    if not validate_file_content(bytes(body), mime):
        logger.warning("Photo content does not match its content type, using URL reference")
        return None
    return base64.b64encode(bytes(body)).decode("ascii"), PHOTO_TYPES[mime]


def generate_vcard(
    card: PublicCard,
    photo: Optional[Tuple[str, str]] = None
) -> str:
    """
    Build the VCARD 3.0 text for a public card.

    Args:
        card: Localized public card
        photo: Optional (base64, type) from fetch_photo; without it the
            photo is referenced by URL

    Returns:
        vCard text with CRLF line endings
    """
    contact = card.contact_links
    company = card.company
    lines = ["BEGIN:VCARD", "VERSION:3.0"]

    if card.name:
        parts = card.name.split()
        last_name = parts[-1] if len(parts) > 1 else ""
        first_name = " ".join(parts[:-1]) if len(parts) > 1 else (parts[0] if parts else "")
        lines.append(f"FN:{escape_vcard_value(card.name)}")
        lines.append(f"N:{escape_vcard_value(last_name)};{escape_vcard_value(first_name)};;;")

    if card.title:
        lines.append(f"TITLE:{escape_vcard_value(card.title)}")
    if company and company.name:
        lines.append(f"ORG:{escape_vcard_value(company.name)}")

    for key, kind in (("phone", "VOICE"), ("phone2", "VOICE"), ("whatsapp", "WA"), ("whatsapp2", "WA")):
        number = contact.get(key)
        if number:
            lines.append(f"TEL;TYPE=CELL,{kind}:{_PHONE_CHARS.sub('', number)}")

    if contact.get("email"):
        lines.append(f"EMAIL;TYPE=INTERNET:{escape_vcard_value(contact['email'])}")

    if contact.get("website"):
        lines.append(f"URL:{escape_vcard_value(contact['website'])}")
    elif company and company.website_url:
        lines.append(f"URL:{escape_vcard_value(company.website_url)}")

    if photo:
        data, photo_type = photo
        lines.append(f"PHOTO;ENCODING=b;TYPE={photo_type}:{data}")
    elif card.photo_url:
        lines.append(f"PHOTO;VALUE=URI;TYPE=URL:{card.photo_url}")

    notes = []
    if company and company.description:
        notes.append(company.description)
    if card.title and company and company.name:
        notes.append(f"{card.title} at {company.name}")
    if notes:
        note = "\n".join(notes)
        lines.append(f"NOTE:{escape_vcard_value(note)}")

    if company:
        for network in ("linkedin", "facebook", "instagram"):
            url = getattr(company, f"{network}_url")
            if url:
                lines.append(f"X-SOCIALPROFILE;TYPE={network}:{url}")

    lines.append(f"URL;TYPE=OTHER:{escape_vcard_value(card.card_url)}")

    lines.append("END:VCARD")
    return "\r\n".join(lines) + "\r\n"
