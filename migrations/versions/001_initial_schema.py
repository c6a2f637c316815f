"""Initial ReadyForms schema

Revision ID: 001
Revises:
Create Date: 2026-10-19

Users, topics, tags, templates with their fixed question slots, form
responses, comments and likes. Every mutable table carries a ``version``
column used for optimistic locking.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

QUESTION_KINDS = ('string', 'text', 'int', 'checkbox')
SLOTS_PER_KIND = 4


def _slot_keys():
    for kind in QUESTION_KINDS:
        for n in range(1, SLOTS_PER_KIND + 1):
            yield kind, f'custom_{kind}{n}'


def _answer_type(kind: str):
    return {
        'string': sa.String(500),
        'text': sa.Text(),
        'int': sa.Integer(),
        'checkbox': sa.Boolean(),
    }[kind]


def _row_columns():
    return [
        sa.Column('version', sa.Integer, nullable=False, server_default=sa.text('1')),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    ]


def upgrade() -> None:
    # === USERS ===
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(320), nullable=False),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('is_admin', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('blocked', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('language', sa.String(16), nullable=False, server_default='en'),
        sa.Column('theme', sa.String(16), nullable=False, server_default='light'),
        sa.Column('last_login_at', sa.DateTime(timezone=True)),
        *_row_columns(),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_blocked', 'users', ['blocked'])
    op.create_index('ix_users_created_at', 'users', ['created_at'])

    # === TOPICS ===
    op.create_table(
        'topics',
        sa.Column('id', sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text, nullable=False, server_default=''),
        *_row_columns(),
    )
    op.create_index('ix_topics_name', 'topics', ['name'], unique=True)
    op.create_index('ix_topics_created_at', 'topics', ['created_at'])

    # === TAGS ===
    op.create_table(
        'tags',
        sa.Column('id', sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column('name', sa.String(64), nullable=False),
        sa.Column('description', sa.Text),
        *_row_columns(),
    )
    op.create_index('ix_tags_name', 'tags', ['name'], unique=True)
    op.create_index('ix_tags_created_at', 'tags', ['created_at'])

    # === TEMPLATES ===
    slot_columns = []
    for _, key in _slot_keys():
        slot_columns.append(sa.Column(f'{key}_state', sa.Boolean, nullable=False, server_default=sa.false()))
        slot_columns.append(sa.Column(f'{key}_question', sa.String(500)))

    op.create_table(
        'templates',
        sa.Column('id', sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text, nullable=False, server_default=''),
        sa.Column('is_public', sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column('user_id', sa.Uuid(as_uuid=True),
                  sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('topic_id', sa.Uuid(as_uuid=True),
                  sa.ForeignKey('topics.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('is_quiz', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('show_score_immediately', sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column('scoring_criteria', sa.JSON),
        sa.Column('allowed_users', sa.JSON),
        sa.Column('question_order', sa.JSON),
        *slot_columns,
        *_row_columns(),
    )
    op.create_index('ix_templates_title', 'templates', ['title'])
    op.create_index('ix_templates_is_public', 'templates', ['is_public'])
    op.create_index('ix_templates_user_id', 'templates', ['user_id'])
    op.create_index('ix_templates_topic_id', 'templates', ['topic_id'])
    op.create_index('ix_templates_created_at', 'templates', ['created_at'])

    # === TEMPLATE_TAGS ===
    op.create_table(
        'template_tags',
        sa.Column('template_id', sa.Uuid(as_uuid=True),
                  sa.ForeignKey('templates.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('tag_id', sa.Uuid(as_uuid=True),
                  sa.ForeignKey('tags.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_template_tags_tag_id', 'template_tags', ['tag_id'])
    op.create_index('ix_template_tags_created_at', 'template_tags', ['created_at'])

    # === FORM_RESPONSES ===
    answer_columns = [sa.Column(f'{key}_answer', _answer_type(kind)) for kind, key in _slot_keys()]

    op.create_table(
        'form_responses',
        sa.Column('id', sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column('template_id', sa.Uuid(as_uuid=True),
                  sa.ForeignKey('templates.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.Uuid(as_uuid=True),
                  sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        *answer_columns,
        sa.Column('score', sa.Integer),
        sa.Column('total_possible_points', sa.Integer),
        sa.Column('score_viewed', sa.Boolean, nullable=False, server_default=sa.false()),
        *_row_columns(),
    )
    op.create_index('ix_form_responses_template_id', 'form_responses', ['template_id'])
    op.create_index('ix_form_responses_user_id', 'form_responses', ['user_id'])
    op.create_index('ix_form_responses_created_at', 'form_responses', ['created_at'])

    # === COMMENTS ===
    op.create_table(
        'comments',
        sa.Column('id', sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column('template_id', sa.Uuid(as_uuid=True),
                  sa.ForeignKey('templates.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.Uuid(as_uuid=True),
                  sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('content', sa.Text, nullable=False),
        *_row_columns(),
    )
    op.create_index('ix_comments_template_id', 'comments', ['template_id'])
    op.create_index('ix_comments_user_id', 'comments', ['user_id'])
    op.create_index('ix_comments_created_at', 'comments', ['created_at'])

    # === LIKES ===
    op.create_table(
        'likes',
        sa.Column('id', sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column('user_id', sa.Uuid(as_uuid=True),
                  sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('template_id', sa.Uuid(as_uuid=True),
                  sa.ForeignKey('templates.id', ondelete='CASCADE'), nullable=False),
        *_row_columns(),
        sa.UniqueConstraint('user_id', 'template_id', name='uq_likes_user_template'),
    )
    op.create_index('ix_likes_user_id', 'likes', ['user_id'])
    op.create_index('ix_likes_template_id', 'likes', ['template_id'])
    op.create_index('ix_likes_created_at', 'likes', ['created_at'])


def downgrade() -> None:
    op.drop_table('likes')
    op.drop_table('comments')
    op.drop_table('form_responses')
    op.drop_table('template_tags')
    op.drop_table('templates')
    op.drop_table('tags')
    op.drop_table('topics')
    op.drop_table('users')
