"""create_account_tables

Revision ID: 3f1d6c2a9b70
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = '3f1d6c2a9b70'
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table('accounts',
        sa.Column('id', sa.String(length=36), nullable=False, comment='Account ID (UUID)'),
        sa.Column('email', sa.String(length=255), nullable=False, comment='Normalized email address'),
        sa.Column('display_name', sa.String(length=50), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=True, comment='Hashed password (argon2)'),
        sa.Column('profile_image_url', sa.String(length=1024), nullable=True),
        sa.Column('profile_image_public_id', sa.String(length=255), nullable=True),
        sa.Column('status', sa.Enum('active', 'inactive', 'suspended', 'deleted', name='accountstatus', native_enum=False, length=16), nullable=False),
        sa.Column('status_changed_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.Column('status_changed_by', sa.String(length=36), nullable=True),
        sa.Column('email_verified', sa.Boolean(), nullable=False),
        sa.Column('verification_token', sa.String(length=64), nullable=True),
        sa.Column('reset_token_hash', sa.String(length=255), nullable=True),
        sa.Column('reset_token_expiry', sa.DateTime(timezone=True), nullable=True),
        sa.Column('failed_login_count', sa.Integer(), nullable=False),
        sa.Column('locked_until', sa.DateTime(timezone=True), nullable=True),
        sa.Column('last_login_at', sa.DateTime(timezone=True), nullable=True, comment='Timestamp of last successful login'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email')
    )
    with op.batch_alter_table('accounts', schema=None) as batch_op:
        batch_op.create_index('ix_accounts_status', ['status'], unique=False)
        batch_op.create_index('ix_accounts_verification_token', ['verification_token'], unique=False)

    op.create_table('account_oauth_providers',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('account_id', sa.String(length=36), nullable=False),
        sa.Column('provider', sa.String(length=20), nullable=False),
        sa.Column('provider_id', sa.String(length=255), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.ForeignKeyConstraint(['account_id'], ['accounts.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('provider', 'provider_id', name='uq_oauth_provider_identity')
    )
    with op.batch_alter_table('account_oauth_providers', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_account_oauth_providers_account_id'), ['account_id'], unique=False)

    op.create_table('refresh_tokens',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('token_hash', sa.String(length=64), nullable=False),
        sa.Column('account_id', sa.String(length=36), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.ForeignKeyConstraint(['account_id'], ['accounts.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('refresh_tokens', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_refresh_tokens_account_id'), ['account_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_refresh_tokens_token_hash'), ['token_hash'], unique=True)


def downgrade() -> None:
    """Downgrade schema."""
    with op.batch_alter_table('refresh_tokens', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_refresh_tokens_token_hash'))
        batch_op.drop_index(batch_op.f('ix_refresh_tokens_account_id'))

    op.drop_table('refresh_tokens')

    with op.batch_alter_table('account_oauth_providers', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_account_oauth_providers_account_id'))

    op.drop_table('account_oauth_providers')

    with op.batch_alter_table('accounts', schema=None) as batch_op:
        batch_op.drop_index('ix_accounts_verification_token')
        batch_op.drop_index('ix_accounts_status')

    op.drop_table('accounts')
