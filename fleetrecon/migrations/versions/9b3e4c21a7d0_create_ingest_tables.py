"""Create uploads, work_sessions, trips and transactions tables

Revision ID: 9b3e4c21a7d0
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import mysql


# revision identifiers, used by Alembic.
revision: str = '9b3e4c21a7d0'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column('created_on', sa.DateTime(), server_default=sa.func.now(), nullable=False, comment='Row creation time'),
        sa.Column('updated_on', sa.DateTime(), server_default=sa.func.now(), nullable=False, comment='Last modification time'),
    ]


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table('uploads',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('session_id', sa.String(length=64), nullable=False, comment='Work session the file was uploaded into'),
        sa.Column('filename', sa.String(length=255), nullable=False),
        sa.Column('mime_type', sa.String(length=100), nullable=True),
        sa.Column('size', sa.Integer(), nullable=False, comment='Size in bytes'),
        sa.Column('platform', sa.String(length=10), nullable=True, comment='uber | bolt, NULL when the header was not recognized'),
        sa.Column('file_type', sa.String(length=10), nullable=False, comment='trips | payments | campaign | other'),
        sa.Column('content', sa.LargeBinary().with_variant(mysql.LONGBLOB(), 'mysql'), nullable=False, comment='Original file bytes'),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_uploads_id'), 'uploads', ['id'], unique=False)
    op.create_index(op.f('ix_uploads_session_id'), 'uploads', ['session_id'], unique=False)
    op.create_index('idx_upload_session_type', 'uploads', ['session_id', 'file_type'], unique=False)

    op.create_table('work_sessions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('session_id', sa.String(length=64), nullable=False, comment='Opaque partition key sent by the client'),
        sa.Column('company_name', sa.String(length=255), nullable=True, comment='Fleet company name, taken from the first payment file that carries one'),
        sa.Column('current_step', sa.Integer(), nullable=False),
        sa.Column('last_activity_at', sa.DateTime(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_work_sessions_id'), 'work_sessions', ['id'], unique=False)
    op.create_index(op.f('ix_work_sessions_session_id'), 'work_sessions', ['session_id'], unique=True)

    op.create_table('trips',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('session_id', sa.String(length=64), nullable=False),
        sa.Column('upload_id', sa.Integer(), nullable=True, comment='Upload the row was read from'),
        sa.Column('trip_id', sa.String(length=64), nullable=True, comment='Platform trip id when the export has one'),
        sa.Column('license_plate', sa.String(length=20), nullable=False, comment='Normalized plate: uppercase, no whitespace'),
        sa.Column('driver_name', sa.String(length=255), nullable=True),
        sa.Column('order_time', sa.DateTime(), nullable=False),
        sa.Column('trip_status', sa.String(length=50), nullable=False),
        sa.Column('platform', sa.String(length=10), nullable=False),
        sa.Column('raw_data', sa.JSON(), nullable=False, comment='Original CSV row'),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['upload_id'], ['uploads.id'], ondelete='SET NULL'),
        sa.UniqueConstraint('session_id', 'license_plate', 'order_time', name='uq_trip_session_plate_time'),
    )
    op.create_index(op.f('ix_trips_id'), 'trips', ['id'], unique=False)
    op.create_index(op.f('ix_trips_session_id'), 'trips', ['session_id'], unique=False)
    op.create_index(op.f('ix_trips_license_plate'), 'trips', ['license_plate'], unique=False)
    op.create_index('idx_trip_session_order_time', 'trips', ['session_id', 'order_time'], unique=False)
    op.create_index('idx_trip_session_driver', 'trips', ['session_id', 'platform', 'driver_name'], unique=False)

    op.create_table('transactions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('session_id', sa.String(length=64), nullable=False),
        sa.Column('upload_id', sa.Integer(), nullable=True),
        sa.Column('license_plate', sa.String(length=20), nullable=False, server_default='', comment='Empty until the cross-reference pass fills it for driver keyed rows'),
        sa.Column('driver_name', sa.String(length=255), nullable=True),
        sa.Column('transaction_time', sa.DateTime(), nullable=False),
        sa.Column('amount', sa.BigInteger(), nullable=False, comment='Cents'),
        sa.Column('revenue', sa.BigInteger(), nullable=True, comment='Gross cents'),
        sa.Column('fare_price', sa.BigInteger(), nullable=True, comment='Fare cents'),
        sa.Column('description', sa.String(length=500), nullable=True),
        sa.Column('trip_uuid', sa.String(length=64), nullable=True, comment='Per-ride correlation id'),
        sa.Column('platform', sa.String(length=10), nullable=False),
        sa.Column('category', sa.String(length=10), nullable=False, comment='payment | campaign'),
        sa.Column('distance', sa.Integer(), nullable=False, server_default='0', comment='Centi-km, 0 when unknown'),
        sa.Column('duration_seconds', sa.Integer(), nullable=True),
        sa.Column('dedup_key', sa.String(length=300), nullable=False, comment='plate-epochms-cents, or ~driver-epochms-cents when plate is unknown at ingest'),
        sa.Column('raw_data', sa.JSON(), nullable=False, comment='Original CSV row'),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['upload_id'], ['uploads.id'], ondelete='SET NULL'),
        sa.UniqueConstraint('session_id', 'dedup_key', name='uq_transaction_session_dedup'),
    )
    op.create_index(op.f('ix_transactions_id'), 'transactions', ['id'], unique=False)
    op.create_index(op.f('ix_transactions_session_id'), 'transactions', ['session_id'], unique=False)
    op.create_index(op.f('ix_transactions_license_plate'), 'transactions', ['license_plate'], unique=False)
    op.create_index('idx_transaction_session_time', 'transactions', ['session_id', 'transaction_time'], unique=False)
    op.create_index('idx_transaction_session_trip_uuid', 'transactions', ['session_id', 'trip_uuid'], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('transactions')
    op.drop_table('trips')
    op.drop_table('work_sessions')
    op.drop_table('uploads')
