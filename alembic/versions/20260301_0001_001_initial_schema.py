"""Initial schema for episodes and transcripts

Revision ID: 001
Revises:
Create Date: 2026-03-01

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'episodes',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=False),
        sa.Column('show_id', sa.Integer, nullable=True),
        sa.Column('title', sa.String(512), nullable=False),
        sa.Column('description', sa.Text, nullable=True),
        sa.Column('published_at', sa.DateTime, nullable=True),
        sa.Column('duration_seconds', sa.Integer, nullable=True),
        sa.Column('download_url', sa.String(2048), nullable=False),
        sa.Column('created_at', sa.DateTime, nullable=True),
    )
    op.create_index('ix_episodes_show_id', 'episodes', ['show_id'])
    op.create_index('ix_episodes_published_at', 'episodes', ['published_at'])

    op.create_table(
        'transcripts',
        sa.Column(
            'episode_id',
            sa.Integer,
            sa.ForeignKey('episodes.id', ondelete='CASCADE'),
            primary_key=True,
            autoincrement=False,
        ),
        sa.Column('language', sa.String(32), nullable=True),
        sa.Column('segments', sa.JSON, nullable=False),
        sa.Column('text', sa.Text, nullable=False),
        sa.Column('created_at', sa.DateTime, nullable=True),
    )


def downgrade() -> None:
    op.drop_table('transcripts')
    op.drop_index('ix_episodes_published_at', table_name='episodes')
    op.drop_index('ix_episodes_show_id', table_name='episodes')
    op.drop_table('episodes')
