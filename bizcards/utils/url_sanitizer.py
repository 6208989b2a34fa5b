from typing import Dict, Optional

DANGEROUS_PROTOCOLS = (
    "javascript:",
    "data:",
    "vbscript:",
    "file:",
    "about:",
    "chrome:",
    "chrome-extension:",
    "moz-extension:",
)

SAFE_PROTOCOLS = ("http:", "https:", "mailto:", "tel:", "sms:", "ftp:")


def sanitize_url(url: Optional[str]) -> str:
    """
    Make a user-supplied URL safe to render as a link.

    Dangerous schemes yield an empty string, protocol-relative URLs become
    https, relative paths are kept and bare domains get https://.
    """
    if not url or not isinstance(url, str):
        return ""

    trimmed = url.strip()
    if not trimmed:
        return ""

    lowered = trimmed.lower()
    if lowered.startswith(DANGEROUS_PROTOCOLS):
        return ""

    if lowered.startswith(SAFE_PROTOCOLS):
        return trimmed

    if trimmed.startswith("//"):
        return f"https:{trimmed}"
    if trimmed.startswith("/"):
        return trimmed
    return f"https://{trimmed}"


def is_url_safe(url: Optional[str]) -> bool:
    return sanitize_url(url) != ""


def sanitize_urls(urls: Dict[str, Optional[str]]) -> Dict[str, str]:
    return {key: sanitize_url(value) for key, value in urls.items()}
