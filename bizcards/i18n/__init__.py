from typing import Optional

LOCALES = ("en", "pt", "es", "fr", "de", "it", "zh", "ja", "ar", "ru")
DEFAULT_LOCALE = "en"

# he, fa and ur are not in LOCALES and so never reach is_rtl through routing
RTL_LOCALES = ("ar", "he", "fa", "ur")

LOCALE_COOKIE = "NEXT_LOCALE"


def is_supported_locale(locale: Optional[str]) -> bool:
    return locale in LOCALES


def is_rtl(locale: Optional[str]) -> bool:
    return locale in RTL_LOCALES


def text_direction(locale: Optional[str]) -> str:
    return "rtl" if is_rtl(locale) else "ltr"


def negotiate_locale(cookie_locale: Optional[str] = None, accept_language: Optional[str] = None) -> str:
    """
    Pick the locale to inject into an unprefixed URL.

    Preference order: locale cookie, Accept-Language (by q-value), default.
    """
    if is_supported_locale(cookie_locale):
        return cookie_locale

    if accept_language:
        candidates = []
        for position, part in enumerate(accept_language.split(",")):
            pieces = part.strip().split(";")
            tag = pieces[0].strip().lower()
            if not tag or tag == "*":
                continue
            quality = 1.0
            for param in pieces[1:]:
                param = param.strip()
                if param.startswith("q="):
                    try:
                        quality = float(param[2:])
                    except ValueError:
                        quality = 0.0
            if quality <= 0:
                continue
            candidates.append((-quality, position, tag.split("-")[0]))

        for _, _, language in sorted(candidates):
            if language in LOCALES:
                return language

    return DEFAULT_LOCALE


from bizcards.i18n.messages import translate  # noqa: E402
from bizcards.i18n.titles import translate_title, localize_text  # noqa: E402

__all__ = [
    "LOCALES",
    "DEFAULT_LOCALE",
    "RTL_LOCALES",
    "LOCALE_COOKIE",
    "is_supported_locale",
    "is_rtl",
    "text_direction",
    "negotiate_locale",
    "translate",
    "translate_title",
    "localize_text",
]
