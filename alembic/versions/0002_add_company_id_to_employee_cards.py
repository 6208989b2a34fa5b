"""add_company_id_to_employee_cards

Revision ID: 0002
Revises: 0001
Create Date: 2025-10-14 09:30:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '0002'
down_revision: Union[str, None] = '0001'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

GUID = sa.String(36).with_variant(postgresql.UUID(as_uuid=False), 'postgresql')


def upgrade() -> None:
    """Promote theme->company_id to a first-class, indexed column."""
    with op.batch_alter_table('employee_cards') as batch_op:
        batch_op.add_column(sa.Column('company_id', GUID, nullable=True))
        batch_op.create_foreign_key(
            'fk_employee_cards_company_id',
            'companies',
            ['company_id'],
            ['id'],
            ondelete='CASCADE',
        )
        batch_op.create_index('ix_employee_cards_company_id', ['company_id'])

    # Backfill only where the theme points at an existing company
    if op.get_bind().dialect.name == 'postgresql':
        op.execute(
            """
            UPDATE employee_cards
            SET company_id = (theme->>'company_id')::uuid
            WHERE company_id IS NULL
              AND theme ? 'company_id'
              AND (theme->>'company_id') IN (SELECT id::text FROM companies)
            """
        )
    else:
        op.execute(
            """
            UPDATE employee_cards
            SET company_id = json_extract(theme, '$.company_id')
            WHERE company_id IS NULL
              AND json_extract(theme, '$.company_id') IN (SELECT id FROM companies)
            """
        )


def downgrade() -> None:
    """Drop the column; theme->company_id still carries the tenant."""
    with op.batch_alter_table('employee_cards') as batch_op:
        batch_op.drop_index('ix_employee_cards_company_id')
        batch_op.drop_constraint('fk_employee_cards_company_id', type_='foreignkey')
        batch_op.drop_column('company_id')
