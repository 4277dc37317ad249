"""Local record store schema

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-18 10:00:00.000000

"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '0001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'prompts',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('user_id', sa.String(length=64), nullable=False),
        sa.Column('folder_id', sa.String(length=64), nullable=True),
        sa.Column('title', sa.Text(), nullable=False),
        sa.Column('body_md', sa.Text(), nullable=False),
        sa.Column('is_pinned', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('created_at', sa.String(length=32), nullable=False),
        sa.Column('updated_at', sa.String(length=32), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_prompts_user_id', 'prompts', ['user_id'])
    op.create_index('ix_prompts_folder_id', 'prompts', ['folder_id'])
    op.create_index('ix_prompts_is_pinned', 'prompts', ['is_pinned'])

    op.create_table(
        'revisions',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('prompt_id', sa.String(length=64), nullable=False),
        sa.Column('parent_revision_id', sa.String(length=64), nullable=True),
        sa.Column('body_md', sa.Text(), nullable=False),
        sa.Column('command_text', sa.Text(), nullable=True),
        sa.Column('llm_provider', sa.String(length=32), nullable=False),
        sa.Column('token_usage', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.String(length=32), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_revisions_prompt_id', 'revisions', ['prompt_id'])

    # Folders and tags are scanned and filtered by owner, so no owner index.
    op.create_table(
        'folders',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('user_id', sa.String(length=64), nullable=False),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('created_at', sa.String(length=32), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )

    op.create_table(
        'tags',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('user_id', sa.String(length=64), nullable=False),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('color', sa.String(length=32), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )

    op.create_table(
        'prompt_tags',
        sa.Column('prompt_id', sa.String(length=64), nullable=False),
        sa.Column('tag_id', sa.String(length=64), nullable=False),
        sa.PrimaryKeyConstraint('prompt_id', 'tag_id')
    )
    op.create_index('ix_prompt_tags_prompt_id', 'prompt_tags', ['prompt_id'])
    op.create_index('ix_prompt_tags_tag_id', 'prompt_tags', ['tag_id'])


def downgrade() -> None:
    op.drop_index('ix_prompt_tags_tag_id', table_name='prompt_tags')
    op.drop_index('ix_prompt_tags_prompt_id', table_name='prompt_tags')
    op.drop_table('prompt_tags')
    op.drop_table('tags')
    op.drop_table('folders')
    op.drop_index('ix_revisions_prompt_id', table_name='revisions')
    op.drop_table('revisions')
    op.drop_index('ix_prompts_is_pinned', table_name='prompts')
    op.drop_index('ix_prompts_folder_id', table_name='prompts')
    op.drop_index('ix_prompts_user_id', table_name='prompts')
    op.drop_table('prompts')
