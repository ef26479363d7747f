"""Create ingestion cursor and replicated GitHub tables

Revision ID: 7d2e4b9c1a30
Revises:
Create Date: 2026-10-19 09:12:41.208113

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '7d2e4b9c1a30'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ITEM_TABLES = ('github_issue', 'github_pull_request', 'github_discussion')
COMMENT_TABLES = (
    'github_issue_comment',
    'github_pull_request_comment',
    'github_discussion_comment',
)


def _base_columns() -> list:
    return [
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('modified_at', sa.DateTime(timezone=True), nullable=False),
    ]


def _record_columns() -> list:
    return [
        sa.Column('repo_id', sa.String(), nullable=False),
        sa.Column('external_id', sa.String(), nullable=False),
        sa.Column('author_login', sa.String(), nullable=True),
        sa.Column('body', sa.Text(), nullable=True),
        sa.Column('created_at_upstream', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('raw_payload', sa.JSON(), nullable=False),
        sa.Column('ingested_at', sa.DateTime(timezone=True), nullable=False),
    ]


def _create_record_table(table: str, extra_columns: list) -> None:
    op.create_table(
        table,
        *_record_columns(),
        *extra_columns,
        *_base_columns(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('repo_id', 'external_id', name=f'uq_{table}_repo_ext'),
    )
    op.create_index(f'idx_{table}_repo_updated', table, ['repo_id', 'updated_at'], unique=False)


def upgrade() -> None:
    op.create_table(
        'ingestion_cursor',
        sa.Column('repo_id', sa.String(), nullable=False),
        sa.Column('entity_type', sa.String(length=32), nullable=False),
        sa.Column('cursor', sa.String(), nullable=True),
        sa.Column('last_synced_at', sa.DateTime(timezone=True), nullable=True),
        *_base_columns(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('repo_id', 'entity_type', name='uq_ingestion_cursor_repo_entity'),
    )

    for table in ITEM_TABLES:
        _create_record_table(
            table,
            [
                sa.Column('number', sa.Integer(), nullable=False),
                sa.Column('title', sa.String(), nullable=False),
                sa.Column('state', sa.String(length=32), nullable=False),
                sa.Column('url', sa.String(), nullable=False),
                sa.Column('labels', sa.JSON(), nullable=False),
                sa.Column('comment_count', sa.Integer(), nullable=False),
            ],
        )

    for table in COMMENT_TABLES:
        _create_record_table(
            table, [sa.Column('parent_external_id', sa.String(), nullable=False)]
        )


def downgrade() -> None:
    for table in (*COMMENT_TABLES, *ITEM_TABLES):
        op.drop_index(f'idx_{table}_repo_updated', table_name=table)
        op.drop_table(table)
    op.drop_table('ingestion_cursor')
