from typing import Dict, List, Optional

ALLOWED_MIME_TYPES = (
    "image/jpeg",
    "image/jpg",
    "image/png",
    "image/webp",
    "image/gif",
)

MAX_FILE_SIZE = 5 * 1024 * 1024  # 5MB

# Leading bytes per image type; image/jpg is an alias of image/jpeg
IMAGE_SIGNATURES: Dict[str, List[bytes]] = {
    "image/jpeg": [b"\xFF\xD8\xFF"],
    "image/png": [b"\x89PNG\r\n\x1a\n"],
    "image/gif": [b"GIF87a", b"GIF89a"],
    "image/webp": [b"RIFF"],
}

MIME_ALIASES = {"image/jpg": "image/jpeg"}

MIME_TO_EXTENSION = {
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
    "image/gif": "gif",
}


def validate_file_content(data: bytes, declared_mime: str) -> bool:
    """
    Check the file's magic bytes against its declared MIME type.

    Protects against spoofed uploads such as an executable renamed to
    photo.jpg and sent as image/jpeg.

    Args:
        data: File content (only the first 8 bytes are inspected)
        declared_mime: MIME type claimed by the client

    Returns:
        True if the content starts with a known signature for that type
    """
    mime = MIME_ALIASES.get(declared_mime, declared_mime)
    signatures = IMAGE_SIGNATURES.get(mime)
    if not signatures:
        return False

    head = data[:8]
    return any(head.startswith(signature) for signature in signatures)


def validate_file_upload(filename: Optional[str], content_type: Optional[str], size: int) -> Optional[str]:
    """
    Validate upload metadata before looking at the content.

    Returns:
        Error code or None when the upload shape is acceptable
    """
    if content_type not in ALLOWED_MIME_TYPES:
        return "invalid_file_type"

    if size > MAX_FILE_SIZE:
        return "file_too_large"

    # Double extensions (photo.jpg.exe)
    if filename and len(filename.split(".")) > 2:
        return "invalid_filename"

    return None


def extension_for_mime(mime: str) -> str:
    """Storage extension for a MIME type; the client filename is never trusted."""
    return MIME_TO_EXTENSION.get(mime, "jpg")
