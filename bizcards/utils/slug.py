"""
URL slug generation for public card links.

Slugs are lowercase ASCII words joined by single hyphens. Uniqueness is
checked against the store, but the unique constraint on
``employee_cards.public_slug`` remains the authoritative check: callers must
treat an insert-time violation as retryable (see ``randomize``).
"""
import hashlib
import re
import secrets
import unicodedata
from typing import Callable

_NON_ALNUM = re.compile(r"[^a-z0-9]+")

MAX_SEQUENTIAL_ATTEMPTS = 50
MAX_RANDOM_ATTEMPTS = 10


def generate_slug(name: str) -> str:
    """
    Derive a URL-safe slug from a display name.

    "Maria Silva" -> "maria-silva", "José d'Ávila" -> "jose-d-avila".
    Names without any ASCII-representable character fall back to a stable
    ``card-<hash>`` slug.

    Raises:
        ValueError: If name is empty
    """
    if not name:
        raise ValueError("Cannot generate a slug from an empty name")

    decomposed = unicodedata.normalize("NFKD", name)
    ascii_only = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    ascii_only = ascii_only.encode("ascii", "ignore").decode("ascii").lower()
    slug = _NON_ALNUM.sub("-", ascii_only).strip("-")

    if not slug:
        digest = hashlib.sha1(name.encode("utf-8")).hexdigest()[:8]
        slug = f"card-{digest}"
    return slug


def _random_suffix() -> str:
    return secrets.token_hex(3)


def generate_unique_slug(
    base: str,
    exists: Callable[[str], bool],
    *,
    max_attempts: int = MAX_SEQUENTIAL_ATTEMPTS,
    randomize: bool = False,
) -> str:
    """
    Resolve a base slug to one that is not yet taken.

    Tries ``base``, then ``base-1``, ``base-2``... and finally random hex
    suffixes. The number of lookups is bounded, so this always returns.

    Args:
        base: Slug produced by generate_slug
        exists: Callback returning True when the slug is already used
        max_attempts: Number of sequential suffixes to try
        randomize: Skip straight to random suffixes (after an insert conflict)

    Returns:
        A slug that was free when checked
    """
    if not randomize:
        if not exists(base):
            return base
        for counter in range(1, max_attempts + 1):
            candidate = f"{base}-{counter}"
            if not exists(candidate):
                return candidate

    for _ in range(MAX_RANDOM_ATTEMPTS):
        candidate = f"{base}-{_random_suffix()}"
        if not exists(candidate):
            return candidate

    # Give up probing; the unique constraint decides
    return f"{base}-{secrets.token_hex(6)}"
