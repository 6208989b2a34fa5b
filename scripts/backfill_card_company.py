"""
python -m scripts.backfill_card_company [--dry-run]

Repairs tenant linkage for cards created before employee_cards.company_id
existed: copies theme.company_id into the column where it is missing.
"""

import argparse
import sys

sys.path.insert(0, ".")

from dotenv import load_dotenv
load_dotenv()

from sqlalchemy import select
from sqlalchemy.orm import Session

from bizcards.database import SessionLocal
from bizcards.models.company import Company
from bizcards.models.employee_card import EmployeeCard


def backfill_card_company(db: Session, dry_run: bool = False) -> int:
    """
    Set company_id from the theme on cards that lack it.

    Cards whose theme points at a company that no longer exists are
    left untouched.

    Returns:
        Number of cards updated (or that would be, with dry_run)
    """
    company_ids = set(db.execute(select(Company.id)).scalars().all())
    cards = db.execute(
        select(EmployeeCard).where(EmployeeCard.company_id.is_(None))
    ).scalars().all()

    updated = 0
    for card in cards:
        theme_company = (card.theme or {}).get("company_id")
        if theme_company and theme_company in company_ids:
            print(f"{card.public_slug}: company_id -> {theme_company}")
            if not dry_run:
                card.company_id = theme_company
            updated += 1
        elif theme_company:
            print(f"{card.public_slug}: theme company {theme_company} not found, skipped")

    if dry_run:
        db.rollback()
    else:
        db.commit()
    return updated


def main():
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--dry-run", action="store_true", help="Report without writing")
    args = parser.parse_args()

    db = SessionLocal()
    try:
        updated = backfill_card_company(db, dry_run=args.dry_run)
        print(f"\n{'Would update' if args.dry_run else 'Updated'} {updated} cards")
    except Exception as e:
        db.rollback()
        print(f"Error: {e}")
        raise
    finally:
        db.close()


if __name__ == "__main__":
    main()
