"""add_translations_and_social_urls

Revision ID: 0003
Revises: 0002
Create Date: 2025-11-20 14:45:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '0003'
down_revision: Union[str, None] = '0002'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

JSON = sa.JSON().with_variant(postgresql.JSONB(), 'postgresql')


def upgrade() -> None:
    """Per-locale texts, social URLs and business hours on companies; translations on services."""
    with op.batch_alter_table('companies') as batch_op:
        batch_op.add_column(sa.Column('description_translations', JSON, nullable=True))
        batch_op.add_column(sa.Column('linkedin_url', sa.String(), nullable=True))
        batch_op.add_column(sa.Column('facebook_url', sa.String(), nullable=True))
        batch_op.add_column(sa.Column('instagram_url', sa.String(), nullable=True))
        batch_op.add_column(sa.Column('business_hours', JSON, nullable=True))

    with op.batch_alter_table('company_services') as batch_op:
        batch_op.add_column(sa.Column('title_translations', JSON, nullable=True))
        batch_op.add_column(sa.Column('description_translations', JSON, nullable=True))


def downgrade() -> None:
    with op.batch_alter_table('company_services') as batch_op:
        batch_op.drop_column('description_translations')
        batch_op.drop_column('title_translations')

    with op.batch_alter_table('companies') as batch_op:
        batch_op.drop_column('business_hours')
        batch_op.drop_column('instagram_url')
        batch_op.drop_column('facebook_url')
        batch_op.drop_column('linkedin_url')
        batch_op.drop_column('description_translations')
