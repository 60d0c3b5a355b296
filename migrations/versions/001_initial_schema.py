"""Initial schema: listings and search alerts.

Revision ID: 001_initial
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Create listings table
    op.create_table(
        'listings',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('url', sa.Text(), nullable=False),
        sa.Column('title', sa.String(500), nullable=False),
        sa.Column('description', sa.Text(), nullable=False, server_default=''),
        sa.Column('platform', sa.String(20), nullable=False),
        sa.Column('category', sa.String(20), nullable=False),
        sa.Column('price', sa.Float(), nullable=False, server_default='0'),
        sa.Column('currency', sa.String(10), nullable=False, server_default='USD'),
        sa.Column('location', sa.String(255), nullable=False, server_default=''),
        sa.Column('latitude', sa.Float(), nullable=True),
        sa.Column('longitude', sa.Float(), nullable=True),
        sa.Column('image_urls', sa.JSON(), nullable=False),
        sa.Column('contact_info', sa.JSON(), nullable=True),
        sa.Column('metadata', sa.JSON(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('posted_at', sa.DateTime(), nullable=True),
        sa.Column('scraped_at', sa.DateTime(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        # Dedup key; also resolves concurrent inserts of the same url
        sa.UniqueConstraint('url'),
    )
    op.create_index('ix_listings_title', 'listings', ['title'])
    op.create_index('ix_listings_platform', 'listings', ['platform'])
    op.create_index('ix_listings_category', 'listings', ['category'])
    op.create_index('ix_listings_location', 'listings', ['location'])
    op.create_index('ix_listings_is_active', 'listings', ['is_active'])
    op.create_index('ix_listings_scraped_at', 'listings', ['scraped_at'])
    op.create_index(
        'ix_listings_platform_category_active',
        'listings',
        ['platform', 'category', 'is_active', 'scraped_at'],
    )
    op.create_index(
        'ix_listings_category_price_active',
        'listings',
        ['category', 'price', 'is_active'],
    )

    # Create search_alerts table
    op.create_table(
        'search_alerts',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.String(100), nullable=False),
        sa.Column('name', sa.String(255), nullable=False, server_default='My Alert'),
        sa.Column('keywords', sa.JSON(), nullable=False),
        sa.Column('categories', sa.JSON(), nullable=False),
        sa.Column('locations', sa.JSON(), nullable=False),
        sa.Column('platforms', sa.JSON(), nullable=False),
        sa.Column('price_min', sa.Float(), nullable=False, server_default='0'),
        sa.Column('price_max', sa.Float(), nullable=True),
        sa.Column('telegram_enabled', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('telegram_chat_id', sa.String(100), nullable=True),
        sa.Column('whatsapp_enabled', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('whatsapp_phone_number', sa.String(50), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('last_notified_at', sa.DateTime(), nullable=True),
        sa.Column('match_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_search_alerts_user_id', 'search_alerts', ['user_id'])
    op.create_index('ix_search_alerts_user_active', 'search_alerts', ['user_id', 'is_active'])


def downgrade() -> None:
    op.drop_table('search_alerts')
    op.drop_table('listings')
