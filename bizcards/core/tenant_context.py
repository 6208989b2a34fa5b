"""
Tenant scoping for employee cards.

Cards created before the ``employee_cards.company_id`` column existed carry
their company only in ``theme["company_id"]``. The owning company is
resolved once, at read time, into one of two explicit variants.
"""
from dataclasses import dataclass
from typing import Optional, Union

from fastapi import Depends

from bizcards.models.user import User, UserRole
from bizcards.dependencies import require_role


@dataclass(frozen=True)
class ColumnScoped:
    company_id: str


@dataclass(frozen=True)
class ThemeScoped:
    company_id: str


CardScope = Union[ColumnScoped, ThemeScoped]


def resolve_card_scope(card) -> Optional[CardScope]:
    """
    Determine which company owns a card.

    Prefers the first-class column and falls back to the theme.

    Returns:
        ColumnScoped, ThemeScoped, or None for an orphaned card
    """
    if card.company_id:
        return ColumnScoped(company_id=str(card.company_id))

    theme = card.theme or {}
    theme_value = theme.get("company_id") if isinstance(theme, dict) else None
    if theme_value:
        return ThemeScoped(company_id=str(theme_value))
    return None


def caller_owns(scope: Optional[CardScope], caller_company_id: Optional[str]) -> bool:
    """Fail closed: no scope or no caller company never matches."""
    if scope is None or not caller_company_id:
        return False
    return scope.company_id == str(caller_company_id)


def get_company_id(current_user: User = Depends(require_role(UserRole.company_admin))) -> Optional[str]:
    """
    FastAPI dependency returning the company admin's company id.

    Unassigned users yield None, which every tenant check rejects.
    """
    return current_user.company_id
