"""initial schema: site options, content, users

Revision ID: 4f1c2a9d7e30
Revises:
Create Date: 2026-10-18 12:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '4f1c2a9d7e30'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

POST_TYPES = ('post', 'page', 'case_studies', 'faqs', 'videos', 'advantage')
CONTENT_STATUSES = ('draft', 'published')


def upgrade() -> None:
    # Options records (Site Essentials lives under "site_essentials")
    op.create_table(
        'site_options',
        sa.Column('name', sa.String(191), primary_key=True),
        sa.Column('value', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    op.create_table(
        'content_items',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('post_type', sa.Enum(*POST_TYPES, name='post_type'), nullable=False),
        sa.Column('status', sa.Enum(*CONTENT_STATUSES, name='content_status'), nullable=False),
        sa.Column('locale', sa.String(16), nullable=False),
        sa.Column('slug', sa.String(200), nullable=False),
        sa.Column('title', sa.String(256), nullable=False),
        sa.Column('content_html', sa.Text(), nullable=False),
        sa.Column('excerpt', sa.String(512), nullable=True),
        sa.Column('template', sa.String(64), nullable=True),
        sa.Column('thumbnail_url', sa.String(512), nullable=True),
        sa.Column('fields', sa.JSON(), nullable=False),
        sa.Column('terms', sa.JSON(), nullable=False),
        sa.Column('translation_group', sa.String(64), nullable=True),
        sa.Column('menu_order', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('published_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint('post_type', 'locale', 'slug', name='uq_content_type_locale_slug'),
    )
    op.create_index('ix_content_type_locale_status', 'content_items', ['post_type', 'locale', 'status'])
    op.create_index('ix_content_items_translation_group', 'content_items', ['translation_group'])

    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('username', sa.String(64), nullable=False),
        sa.Column('display_name', sa.String(128), nullable=False),
        sa.Column('password_hash', sa.String(128), nullable=False),
        sa.Column('is_admin', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('last_login', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_users_username', 'users', ['username'], unique=True)

    op.create_table(
        'sessions',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('token_hash', sa.String(64), nullable=False, unique=True),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )


def downgrade() -> None:
    op.drop_table('sessions')
    op.drop_index('ix_users_username', table_name='users')
    op.drop_table('users')
    op.drop_index('ix_content_items_translation_group', table_name='content_items')
    op.drop_index('ix_content_type_locale_status', table_name='content_items')
    op.drop_table('content_items')
    op.drop_table('site_options')

    sa.Enum(name='content_status').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='post_type').drop(op.get_bind(), checkfirst=True)
