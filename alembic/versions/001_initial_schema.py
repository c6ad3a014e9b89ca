"""initial_schema

Revision ID: 001
Revises: 
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    # Create users table
    op.create_table(
        'users',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email')
    )
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=False)
    op.create_index(op.f('ix_users_id'), 'users', ['id'], unique=False)

    # Create websites table
    op.create_table(
        'websites',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('user_id', sa.String(36), nullable=False),
        sa.Column('url', sa.String(), nullable=False),
        sa.Column('name', sa.String(), nullable=True),
        sa.Column('scan_frequency', sa.Enum('hourly', 'daily', 'weekly', 'monthly', name='scanfrequency'), nullable=False),
        sa.Column('last_scan_at', sa.DateTime(), nullable=True),
        sa.Column('next_scan_at', sa.DateTime(), nullable=True),
        sa.Column('status', sa.Enum('pending', 'active', 'error', name='websitestatus'), nullable=False),
        sa.Column('email_notifications', sa.Boolean(), nullable=False),
        sa.Column('telegram_notifications', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_websites_id'), 'websites', ['id'], unique=False)
    op.create_index(op.f('ix_websites_user_id'), 'websites', ['user_id'], unique=False)
    op.create_index(op.f('ix_websites_status'), 'websites', ['status'], unique=False)
    op.create_index('ix_websites_status_next_scan_at', 'websites', ['status', 'next_scan_at'], unique=False)

    # Create scans table
    op.create_table(
        'scans',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('website_id', sa.String(36), nullable=False),
        sa.Column('status', sa.Enum('pending', 'running', 'completed', 'failed', name='scanstatus'), nullable=False),
        sa.Column('start_time', sa.DateTime(), nullable=True),
        sa.Column('end_time', sa.DateTime(), nullable=True),
        sa.Column('performance_score', sa.Float(), nullable=True),
        sa.Column('accessibility_score', sa.Float(), nullable=True),
        sa.Column('best_practices_score', sa.Float(), nullable=True),
        sa.Column('seo_score', sa.Float(), nullable=True),
        sa.Column('pwa_score', sa.Float(), nullable=True),
        sa.Column('first_contentful_paint', sa.Float(), nullable=True),
        sa.Column('largest_contentful_paint', sa.Float(), nullable=True),
        sa.Column('cumulative_layout_shift', sa.Float(), nullable=True),
        sa.Column('total_blocking_time', sa.Float(), nullable=True),
        sa.Column('time_to_interactive', sa.Float(), nullable=True),
        sa.Column('speed_index', sa.Float(), nullable=True),
        sa.Column('report_path', sa.String(), nullable=True),
        sa.Column('error_message', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['website_id'], ['websites.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_scans_id'), 'scans', ['id'], unique=False)
    op.create_index(op.f('ix_scans_website_id'), 'scans', ['website_id'], unique=False)
    op.create_index(op.f('ix_scans_status'), 'scans', ['status'], unique=False)
    op.create_index('idx_scans_website_status_created', 'scans', ['website_id', 'status', 'created_at'], unique=False)

    # Create recommendations table
    op.create_table(
        'recommendations',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('scan_id', sa.String(36), nullable=False),
        sa.Column('category', sa.Enum('Performance', 'Accessibility', 'Best Practices', 'SEO', name='recommendationcategory'), nullable=False),
        sa.Column('title', sa.String(512), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('impact', sa.Enum('high', 'medium', 'low', name='recommendationimpact'), nullable=False),
        sa.Column('score', sa.Float(), nullable=True),
        sa.Column('details', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['scan_id'], ['scans.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_recommendations_id'), 'recommendations', ['id'], unique=False)
    op.create_index(op.f('ix_recommendations_scan_id'), 'recommendations', ['scan_id'], unique=False)
    op.create_index(op.f('ix_recommendations_category'), 'recommendations', ['category'], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('recommendations')
    op.drop_table('scans')
    op.drop_table('websites')
    op.drop_table('users')
    sa.Enum(name='recommendationimpact').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='recommendationcategory').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='scanstatus').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='websitestatus').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='scanfrequency').drop(op.get_bind(), checkfirst=True)
