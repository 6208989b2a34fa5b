"""
Localized pages.

Rendering is left to the frontend; each page returns the document it
would render. Locale and dashboard access were already enforced by
LocaleAuthMiddleware.
"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse, Response
from sqlalchemy.orm import Session

from bizcards.core.exception_handlers import action_response
from bizcards.database import get_db
from bizcards.dependencies import get_current_user
from bizcards.i18n import is_supported_locale, text_direction
from bizcards.models.user import User
from bizcards.services.card import public_card_service
from bizcards.services.company import company_profile_service
from bizcards.services.employee import employee_service

router = APIRouter()


def valid_locale(locale: str) -> str:
    if not is_supported_locale(locale):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")
    return locale


def _page(name: str, locale: str, **extra) -> dict:
    return {"page": name, "locale": locale, "dir": text_direction(locale), **extra}


@router.get("/{locale}/home")
def home(locale: str = Depends(valid_locale)):
    return _page("home", locale)


@router.get("/{locale}/signin")
def signin_page(redirect: Optional[str] = None, locale: str = Depends(valid_locale)):
    # Only same-site paths are honoured after sign-in
    if redirect and (not redirect.startswith("/") or redirect.startswith("//")):
        redirect = None
    return _page("signin", locale, redirect=redirect)


@router.get("/{locale}/signup")
def signup_page(locale: str = Depends(valid_locale)):
    return _page("signup", locale)


@router.get("/{locale}/card/{slug}")
def public_card(slug: str, locale: str = Depends(valid_locale), db: Session = Depends(get_db)):
    """
    Public card page.

    Inactive cards answer exactly like unknown slugs (404).
    """
    result = public_card_service.get_public_card(db=db, slug=slug, locale=locale)
    return action_response(result, locale)


@router.get("/{locale}/card/{slug}/manifest.json")
def card_manifest(slug: str, locale: str = Depends(valid_locale), db: Session = Depends(get_db)):
    """PWA manifest themed with the card owner's name."""
    manifest = public_card_service.get_manifest(db=db, slug=slug, locale=locale)
    return JSONResponse(
        content=manifest,
        media_type="application/manifest+json",
        headers={"Cache-Control": "public, max-age=3600"},
    )


@router.get("/{locale}/card/{slug}/vcard")
def card_vcard(slug: str, locale: str = Depends(valid_locale), db: Session = Depends(get_db)):
    """Download the card as a VCARD 3.0 contact."""
    exported = public_card_service.get_vcard(db=db, slug=slug, locale=locale)
    if exported is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Card not found")

    filename, vcard = exported
    return Response(
        content=vcard,
        media_type="text/vcard; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/{locale}/dashboard/admin")
def admin_dashboard(
    locale: str = Depends(valid_locale),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    companies = company_profile_service.get_overview(db)
    return _page("dashboard/admin", locale, companies=[c.model_dump(mode="json") for c in companies])


@router.get("/{locale}/dashboard/company")
def company_dashboard(
    locale: str = Depends(valid_locale),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Company profile and its employee cards for the company admin."""
    company_id = current_user.company_id
    company = company_profile_service.get_company(db=db, company_id=company_id, caller_company_id=company_id)
    if not company.success:
        return action_response(company, locale)

    employees = employee_service.get_employees_by_company(db=db, company_id=company_id, caller_company_id=company_id)
    if not employees.success:
        return action_response(employees, locale)

    return _page(
        "dashboard/company",
        locale,
        company=company.data.model_dump(mode="json"),
        employees=[e.model_dump(mode="json") for e in employees.data],
    )


@router.get("/{locale}/dashboard/employee")
def employee_dashboard(
    locale: str = Depends(valid_locale),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    card = employee_service.get_card_for_employee(db=db, user=current_user)
    return _page(
        "dashboard/employee",
        locale,
        user_id=current_user.id,
        card=card.model_dump(mode="json") if card else None,
    )
