"""create_credential_and_catalog_tables

Revision ID: 4c1f9a2e7b30
Revises: 
Create Date: 2026-10-17 09:12:41.208315

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '4c1f9a2e7b30'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'provider_credentials',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('owner_id', sa.String(length=100), nullable=False),
        sa.Column('provider', sa.String(length=100), nullable=False),
        sa.Column('encrypted_key', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('owner_id', 'provider', name='uq_provider_credentials_owner_provider'),
    )
    op.create_index('ix_provider_credentials_owner_id', 'provider_credentials', ['owner_id'])

    op.create_table(
        'catalog_models',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('provider', sa.String(length=100), nullable=False),
        sa.Column('model_id', sa.String(length=255), nullable=False),
        sa.Column('display_name', sa.String(length=255), nullable=False),
        sa.Column('family', sa.String(length=100), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('context_window', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('provider', 'model_id', name='uq_catalog_models_provider_model'),
    )
    op.create_index('ix_catalog_models_provider', 'catalog_models', ['provider'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('ix_catalog_models_provider', table_name='catalog_models')
    op.drop_table('catalog_models')
    op.drop_index('ix_provider_credentials_owner_id', table_name='provider_credentials')
    op.drop_table('provider_credentials')
