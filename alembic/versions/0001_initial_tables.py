"""initial_tables

Revision ID: 0001
Revises:
Create Date: 2025-09-02 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

GUID = sa.String(36).with_variant(postgresql.UUID(as_uuid=False), 'postgresql')
JSON = sa.JSON().with_variant(postgresql.JSONB(), 'postgresql')


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    """Create the tenant, user and card tables. Cards are scoped through theme->company_id."""
    op.create_table(
        'companies',
        sa.Column('id', GUID, primary_key=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('slug', sa.String(), nullable=False),
        sa.Column('subscription_plan', sa.String(), nullable=False, server_default='basic'),
        sa.Column(
            'subscription_status',
            sa.Enum('active', 'expired', 'pending', 'cancelled', name='subscription_status'),
            nullable=False,
            server_default='active',
        ),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('banner_url', sa.String(), nullable=True),
        sa.Column('logo_url', sa.String(), nullable=True),
        sa.Column('footer_text', sa.String(), nullable=True),
        sa.Column('website_url', sa.String(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_companies_slug', 'companies', ['slug'], unique=True)

    op.create_table(
        'users',
        sa.Column('id', GUID, primary_key=True),
        sa.Column('company_id', GUID, sa.ForeignKey('companies.id', ondelete='SET NULL'), nullable=True),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('password_hash', sa.String(), nullable=True),
        sa.Column(
            'role',
            sa.Enum('super_admin', 'company_admin', 'employee', name='user_role'),
            nullable=False,
            server_default='employee',
        ),
        sa.Column('first_name', sa.String(), nullable=True),
        sa.Column('last_name', sa.String(), nullable=True),
        sa.Column('title', sa.String(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_company_id', 'users', ['company_id'])

    op.create_table(
        'employee_cards',
        sa.Column('id', GUID, primary_key=True),
        sa.Column('employee_id', GUID, nullable=False),
        sa.Column('public_slug', sa.String(), nullable=False),
        sa.Column('photo_url', sa.String(), nullable=True),
        sa.Column('contact_links', JSON, nullable=False),
        sa.Column('social_links', JSON, nullable=False),
        sa.Column('business_hours', JSON, nullable=True),
        sa.Column('theme', JSON, nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index('ix_employee_cards_employee_id', 'employee_cards', ['employee_id'], unique=True)
    op.create_index('ix_employee_cards_public_slug', 'employee_cards', ['public_slug'], unique=True)

    op.create_table(
        'company_services',
        sa.Column('id', GUID, primary_key=True),
        sa.Column('company_id', GUID, sa.ForeignKey('companies.id', ondelete='CASCADE'), nullable=False),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('icon_name', sa.String(), nullable=True),
        sa.Column('display_order', sa.Integer(), nullable=False, server_default='0'),
        *_timestamps(),
    )
    op.create_index('ix_company_services_company_id', 'company_services', ['company_id'])

    op.create_table(
        'nfc_tags',
        sa.Column('id', GUID, primary_key=True),
        sa.Column('employee_id', GUID, nullable=False),
        sa.Column('encoded_url', sa.String(), nullable=False),
        sa.Column('qr_image_url', sa.String(), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_nfc_tags_employee_id', 'nfc_tags', ['employee_id'])

    op.create_table(
        'analytics_events',
        sa.Column('id', GUID, primary_key=True),
        sa.Column('card_id', GUID, sa.ForeignKey('employee_cards.id', ondelete='CASCADE'), nullable=False),
        sa.Column('event_type', sa.String(), nullable=False),
        sa.Column('metadata', JSON, nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_analytics_events_card_id', 'analytics_events', ['card_id'])


def downgrade() -> None:
    """Drop all tables and enum types."""
    op.drop_table('analytics_events')
    op.drop_table('nfc_tags')
    op.drop_table('company_services')
    op.drop_table('employee_cards')
    op.drop_table('users')
    op.drop_table('companies')
    sa.Enum(name='user_role').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='subscription_status').drop(op.get_bind(), checkfirst=True)
