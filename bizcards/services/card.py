from typing import Any, Dict, Optional, Tuple
import httpx
from sqlalchemy.orm import Session
from bizcards.core.config import settings
from bizcards.core.errors import ActionResult, ErrorKind
from bizcards.core.logging_config import logger
from bizcards.crud.company import company as company_crud
from bizcards.crud.employee_card import employee_card as employee_card_crud
from bizcards.crud.user import user as user_crud
from bizcards.i18n import localize_text, text_direction, translate_title
from bizcards.models.company import Company
from bizcards.schemas.card import PublicCard, PublicCompany, PublicService
from bizcards.services.vcard import fetch_photo, generate_vcard, vcard_filename

MANIFEST_FALLBACK_NAME = "CFM Card"
MANIFEST_THEME_COLOR = "#16a34a"


def _public_company(company: Company, locale: str) -> PublicCompany:
    return PublicCompany(
        id=company.id,
        name=company.name,
        slug=company.slug,
        description=localize_text(company.description, company.description_translations, locale),
        logo_url=company.logo_url,
        banner_url=company.banner_url,
        footer_text=company.footer_text,
        website_url=company.website_url,
        linkedin_url=company.linkedin_url,
        facebook_url=company.facebook_url,
        instagram_url=company.instagram_url,
        business_hours=company.business_hours,
        services=[
            PublicService(
                id=service.id,
                title=localize_text(service.title, service.title_translations, locale),
                description=localize_text(service.description, service.description_translations, locale),
                icon_name=service.icon_name,
                display_order=service.display_order,
            )
            for service in company.services
        ],
    )


class PublicCardService:
    """
    Read side of the public card page.

    Loads are sequential on the request's session: card, then the
    owning user, then the company with its ordered services.
    """

    def __init__(self, photo_transport: Optional[httpx.BaseTransport] = None):
        self.photo_transport = photo_transport

    def get_public_card(self, db: Session, slug: str, locale: str) -> ActionResult:
        """
        Resolve an active card by slug, localized for display.

        Inactive and unknown slugs are indistinguishable to the caller.

        Returns:
            ActionResult with a PublicCard
        """
        card = employee_card_crud.get_by_slug(db, slug)
        if card is None or not card.is_active:
            return ActionResult.fail("Card not found", ErrorKind.not_found)

        theme = card.theme or {}
        # The user row is a soft link and may be missing
        owner = user_crud.get(db, card.employee_id)

        company_id = (owner.company_id if owner else None) or theme.get("company_id") or card.company_id
        company = company_crud.get(db, company_id) if company_id else None

        name = theme.get("name")
        if not name and owner:
            name = " ".join(part for part in (owner.first_name, owner.last_name) if part)
        raw_title = theme.get("title") or (owner.title if owner else None)

        contact_links = card.contact_links or {}
        public_card = PublicCard(
            slug=card.public_slug,
            name=name or "",
            title=translate_title(raw_title, theme.get("title_translations"), locale),
            photo_url=card.photo_url or settings.DEFAULT_PROFILE_PICTURE_URL,
            email=contact_links.get("email") or (owner.email if owner else None),
            contact_links=contact_links,
            social_links=card.social_links or {},
            business_hours=card.business_hours or (company.business_hours if company else None),
            company=_public_company(company, locale) if company else None,
            locale=locale,
            dir=text_direction(locale),
            card_url=f"{settings.PUBLIC_BASE_URL.rstrip('/')}/{locale}/card/{card.public_slug}",
        )
        return ActionResult.ok(public_card)

    def get_manifest(self, db: Session, slug: str, locale: str) -> Dict[str, Any]:
        """PWA manifest named after the card owner; unknown cards get a generic name."""
        card = employee_card_crud.get_by_slug(db, slug)
        theme = (card.theme or {}) if card is not None and card.is_active else {}
        owner_name = theme.get("name") or MANIFEST_FALLBACK_NAME
        icon = settings.DEFAULT_PROFILE_PICTURE_URL

        return {
            "name": owner_name,
            "short_name": owner_name,
            "description": f"Digital Business Card - {owner_name}",
            "start_url": f"/{locale}/card/{slug}",
            "display": "standalone",
            "background_color": "#ffffff",
            "theme_color": MANIFEST_THEME_COLOR,
            "icons": [
                {"src": icon, "sizes": "192x192", "type": "image/jpeg", "purpose": "any maskable"},
                {"src": icon, "sizes": "512x512", "type": "image/jpeg", "purpose": "any maskable"},
            ],
        }

    def get_vcard(self, db: Session, slug: str, locale: str) -> Optional[Tuple[str, str]]:
        """
        Build the vCard download for a card.

        Returns:
            (filename, vCard text) or None when the card is not public
        """
        result = self.get_public_card(db, slug, locale)
        if not result.success:
            return None

        card: PublicCard = result.data
        photo = fetch_photo(card.photo_url, transport=self.photo_transport)
        logger.info(f"Exporting vCard for {slug}")
        return vcard_filename(card.name), generate_vcard(card, photo=photo)


# Create singleton instance
public_card_service = PublicCardService()
