"""add_users_is_active_and_review_notes

Revision ID: 8d41f2c6a7e9
Revises: 5c1e7a90b3d2
Create Date: 2026-10-20 10:03:18.552901

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '8d41f2c6a7e9'
down_revision: Union[str, None] = '5c1e7a90b3d2'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Add account activation to users and a separate reviewer note to applications."""
    from sqlalchemy import inspect

    inspector = inspect(op.get_bind())

    user_columns = [col['name'] for col in inspector.get_columns('users')]
    if 'is_active' not in user_columns:
        op.add_column('users', sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()))
        op.create_index(op.f('ix_users_is_active'), 'users', ['is_active'], unique=False)

    application_columns = [col['name'] for col in inspector.get_columns('applications')]
    if 'review_notes' not in application_columns:
        op.add_column('applications', sa.Column('review_notes', sa.Text(), nullable=True))


def downgrade() -> None:
    op.drop_column('applications', 'review_notes')
    op.drop_index(op.f('ix_users_is_active'), table_name='users')
    op.drop_column('users', 'is_active')
