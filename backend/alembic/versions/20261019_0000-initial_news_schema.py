"""initial news schema

Revision ID: initial_news_schema
Revises: 
Create Date: 2026-10-19 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'initial_news_schema'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Create news_sources table
    op.create_table('news_sources',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('url', sa.String(), nullable=False),
        sa.Column('feed_url', sa.String(), nullable=True),
        sa.Column('source_type', sa.String(), nullable=False),
        sa.Column('categories', sa.JSON(), nullable=True),
        sa.Column('reliability_score', sa.Float(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        sa.Column('last_fetched', sa.DateTime(), nullable=True),
        sa.Column('fetch_frequency_minutes', sa.Integer(), nullable=False),
        sa.Column('metadata', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.CheckConstraint('fetch_frequency_minutes > 0', name='ck_news_sources_cadence'),
        sa.CheckConstraint("source_type IN ('rss', 'api', 'scraper', 'newsletter')", name='ck_news_sources_type'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('url')
    )
    op.create_index(op.f('ix_news_sources_id'), 'news_sources', ['id'], unique=False)
    op.create_index(op.f('ix_news_sources_is_active'), 'news_sources', ['is_active'], unique=False)

    # Create news_articles table
    op.create_table('news_articles',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('source_id', sa.Integer(), nullable=False),
        sa.Column('external_id', sa.String(), nullable=False),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('summary', sa.Text(), nullable=True),
        sa.Column('content', sa.Text(), nullable=True),
        sa.Column('author', sa.String(), nullable=True),
        sa.Column('published_at', sa.DateTime(), nullable=True),
        sa.Column('url', sa.String(), nullable=False),
        sa.Column('image_url', sa.String(), nullable=True),
        sa.Column('tags', sa.JSON(), nullable=True),
        sa.Column('sentiment', sa.Float(), nullable=True),
        sa.Column('relevance_score', sa.Float(), nullable=True),
        sa.Column('engagement_metrics', sa.JSON(), nullable=True),
        sa.Column('ai_summary', sa.Text(), nullable=True),
        sa.Column('ai_key_points', sa.JSON(), nullable=True),
        sa.Column('ai_action_items', sa.JSON(), nullable=True),
        sa.Column('metadata', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['source_id'], ['news_sources.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('source_id', 'external_id', name='uq_news_articles_source_external')
    )
    op.create_index(op.f('ix_news_articles_id'), 'news_articles', ['id'], unique=False)
    op.create_index(op.f('ix_news_articles_published_at'), 'news_articles', ['published_at'], unique=False)
    op.create_index(op.f('ix_news_articles_relevance_score'), 'news_articles', ['relevance_score'], unique=False)
    op.create_index(op.f('ix_news_articles_created_at'), 'news_articles', ['created_at'], unique=False)

    # Create news_article_categories table
    op.create_table('news_article_categories',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('article_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.ForeignKeyConstraint(['article_id'], ['news_articles.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('article_id', 'name', name='uq_news_article_category')
    )
    op.create_index(op.f('ix_news_article_categories_article_id'), 'news_article_categories', ['article_id'], unique=False)
    op.create_index(op.f('ix_news_article_categories_name'), 'news_article_categories', ['name'], unique=False)

    # Create user_news_preferences table
    op.create_table('user_news_preferences',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.String(), nullable=False),
        sa.Column('categories', sa.JSON(), nullable=True),
        sa.Column('keywords', sa.JSON(), nullable=True),
        sa.Column('companies', sa.JSON(), nullable=True),
        sa.Column('industries', sa.JSON(), nullable=True),
        sa.Column('excluded_sources', sa.JSON(), nullable=True),
        sa.Column('excluded_keywords', sa.JSON(), nullable=True),
        sa.Column('notification_settings', sa.JSON(), nullable=True),
        sa.Column('reading_history_retention_days', sa.Integer(), nullable=True),
        sa.Column('ai_personalization_enabled', sa.Boolean(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_user_news_preferences_id'), 'user_news_preferences', ['id'], unique=False)
    op.create_index(op.f('ix_user_news_preferences_user_id'), 'user_news_preferences', ['user_id'], unique=True)

    # Create news_interactions table
    op.create_table('news_interactions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.String(), nullable=False),
        sa.Column('article_id', sa.Integer(), nullable=False),
        sa.Column('action', sa.String(), nullable=False),
        sa.Column('reading_time_seconds', sa.Integer(), nullable=True),
        sa.Column('scroll_depth', sa.Float(), nullable=True),
        sa.Column('feedback', sa.String(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['article_id'], ['news_articles.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'article_id', 'action', name='uq_news_interaction_action')
    )
    op.create_index(op.f('ix_news_interactions_id'), 'news_interactions', ['id'], unique=False)
    op.create_index(op.f('ix_news_interactions_user_id'), 'news_interactions', ['user_id'], unique=False)
    op.create_index(op.f('ix_news_interactions_created_at'), 'news_interactions', ['created_at'], unique=False)
    op.create_index('idx_news_interactions_user_article', 'news_interactions', ['user_id', 'article_id'], unique=False)

    # Create saved_articles table
    op.create_table('saved_articles',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.String(), nullable=False),
        sa.Column('article_id', sa.Integer(), nullable=False),
        sa.Column('folder', sa.String(), nullable=True),
        sa.Column('tags', sa.JSON(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('priority', sa.Integer(), nullable=True),
        sa.Column('is_archived', sa.Boolean(), nullable=True),
        sa.Column('reminder_date', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['article_id'], ['news_articles.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'article_id', name='uq_saved_article_user')
    )
    op.create_index(op.f('ix_saved_articles_id'), 'saved_articles', ['id'], unique=False)
    op.create_index(op.f('ix_saved_articles_user_id'), 'saved_articles', ['user_id'], unique=False)
    op.create_index(op.f('ix_saved_articles_article_id'), 'saved_articles', ['article_id'], unique=False)
    op.create_index(op.f('ix_saved_articles_created_at'), 'saved_articles', ['created_at'], unique=False)
    op.create_index('idx_saved_articles_user_folder', 'saved_articles', ['user_id', 'folder'], unique=False)

    # Create news_digests table
    op.create_table('news_digests',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.String(), nullable=False),
        sa.Column('digest_type', sa.String(), nullable=False),
        sa.Column('period_start', sa.DateTime(), nullable=False),
        sa.Column('period_end', sa.DateTime(), nullable=False),
        sa.Column('period_key', sa.Date(), nullable=False),
        sa.Column('article_ids', sa.JSON(), nullable=True),
        sa.Column('summary', sa.Text(), nullable=False),
        sa.Column('key_trends', sa.JSON(), nullable=True),
        sa.Column('action_items', sa.JSON(), nullable=True),
        sa.Column('personalization_score', sa.Float(), nullable=True),
        sa.Column('was_sent', sa.Boolean(), nullable=True),
        sa.Column('sent_at', sa.DateTime(), nullable=True),
        sa.Column('was_read', sa.Boolean(), nullable=True),
        sa.Column('read_at', sa.DateTime(), nullable=True),
        sa.Column('user_feedback', sa.String(), nullable=True),
        sa.Column('metadata', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'digest_type', 'period_key', name='uq_news_digest_period')
    )
    op.create_index(op.f('ix_news_digests_id'), 'news_digests', ['id'], unique=False)
    op.create_index(op.f('ix_news_digests_user_id'), 'news_digests', ['user_id'], unique=False)


def downgrade() -> None:
    op.drop_table('news_digests')
    op.drop_table('saved_articles')
    op.drop_table('news_interactions')
    op.drop_table('user_news_preferences')
    op.drop_table('news_article_categories')
    op.drop_table('news_articles')
    op.drop_table('news_sources')
