"""create_odoo_sync_tables

Revision ID: 001
Revises:
Create Date: 2026-10-19 10:12:41.503118

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    bind = op.get_bind()
    inspector = sa.inspect(bind)

    if not inspector.has_table('odoo_raw_records'):
        op.create_table('odoo_raw_records',
        sa.Column('model', sa.Text(), nullable=False),
        sa.Column('odoo_id', sa.BigInteger(), nullable=False),
        sa.Column('write_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('create_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('payload', postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column('synced_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('run_id', postgresql.UUID(as_uuid=False), nullable=True),
        sa.PrimaryKeyConstraint('model', 'odoo_id')
        )
        op.create_index('idx_odoo_raw_records_model_write_date', 'odoo_raw_records', ['model', 'write_date'], unique=False)
        op.create_index('idx_odoo_raw_records_payload_gin', 'odoo_raw_records', ['payload'], unique=False, postgresql_using='gin')

    if not inspector.has_table('odoo_sync_state'):
        op.create_table('odoo_sync_state',
        sa.Column('model', sa.Text(), nullable=False),
        sa.Column('cursor_field', sa.Text(), server_default='write_date', nullable=False),
        sa.Column('cursor_value', sa.DateTime(timezone=True), nullable=True),
        sa.Column('cursor_id', sa.BigInteger(), nullable=True),
        sa.Column('last_success_run_id', postgresql.UUID(as_uuid=False), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('model')
        )

    if not inspector.has_table('odoo_sync_runs'):
        op.create_table('odoo_sync_runs',
        sa.Column('run_id', postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column('model', sa.Text(), nullable=False),
        sa.Column('status', sa.Text(), nullable=False),
        sa.Column('started_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('finished_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('records_read', sa.BigInteger(), server_default='0', nullable=False),
        sa.Column('records_upserted', sa.BigInteger(), server_default='0', nullable=False),
        sa.Column('pages_processed', sa.BigInteger(), server_default='0', nullable=False),
        sa.Column('error_message', sa.Text(), nullable=True),
        sa.CheckConstraint("status IN ('running', 'success', 'failed')", name='ck_odoo_sync_runs_status'),
        sa.PrimaryKeyConstraint('run_id')
        )
        op.create_index(
            'idx_odoo_sync_runs_model_started_at',
            'odoo_sync_runs',
            ['model', sa.text('started_at DESC')],
            unique=False,
        )


def downgrade() -> None:
    """Downgrade schema."""
    bind = op.get_bind()
    inspector = sa.inspect(bind)

    if inspector.has_table('odoo_sync_runs'):
        op.drop_index('idx_odoo_sync_runs_model_started_at', table_name='odoo_sync_runs')
        op.drop_table('odoo_sync_runs')
    if inspector.has_table('odoo_sync_state'):
        op.drop_table('odoo_sync_state')
    if inspector.has_table('odoo_raw_records'):
        op.drop_index('idx_odoo_raw_records_payload_gin', table_name='odoo_raw_records')
        op.drop_index('idx_odoo_raw_records_model_write_date', table_name='odoo_raw_records')
        op.drop_table('odoo_raw_records')
