"""create generated_images and user_profiles

Revision ID: 3f9a1c7d2b84
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '3f9a1c7d2b84'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'generated_images',
        sa.Column('id', sa.String(length=32), primary_key=True),
        sa.Column('user_id', sa.String(), nullable=False),
        sa.Column('session_id', sa.String(), nullable=True),
        sa.Column('prompt', sa.Text(), nullable=False),
        sa.Column('image_url', sa.Text(), nullable=False),
        sa.Column('text_content', sa.Text(), nullable=True),
        sa.Column('timestamp', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('settings', sa.JSON(), nullable=True),
    )
    op.create_index('ix_generated_images_user_id', 'generated_images', ['user_id'])
    op.create_index('ix_generated_images_user_timestamp', 'generated_images', ['user_id', 'timestamp'])

    op.create_table(
        'user_profiles',
        sa.Column('user_id', sa.String(), primary_key=True),
        sa.Column('data', sa.JSON(), nullable=False),
        sa.Column('onboarding_complete', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('skipped', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    )


def downgrade() -> None:
    op.drop_table('user_profiles')
    op.drop_index('ix_generated_images_user_timestamp', table_name='generated_images')
    op.drop_index('ix_generated_images_user_id', table_name='generated_images')
    op.drop_table('generated_images')
