"""initial

Revision ID: 0001_initial
Revises: 
Create Date: 2026-10-19 00:00:00.000000
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '0001_initial'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table('users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('full_name', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('hashed_password', sa.String(length=255), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_users_full_name', 'users', ['full_name'], unique=True)
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table('buses',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('plate_id', sa.String(length=64), nullable=False),
        sa.Column('total_seats', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint('total_seats > 0', name='ck_bus_total_seats_positive'),
    )
    op.create_index('ix_buses_plate_id', 'buses', ['plate_id'], unique=True)

    op.create_table('trips',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('source', sa.String(length=128), nullable=False),
        sa.Column('destination', sa.String(length=128), nullable=False),
        sa.Column('trip_date', sa.Date(), nullable=False),
        sa.Column('departure_time', sa.Time(), nullable=False),
        sa.Column('arrival_time', sa.Time(), nullable=True),
        sa.Column('trip_price', sa.Numeric(10, 2), nullable=False, server_default='0'),
        sa.Column('tier', sa.String(length=50), nullable=False, server_default='economy'),
        sa.Column('bus_id', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['bus_id'], ['buses.id'], ondelete='RESTRICT'),
    )
    op.create_index('ix_trips_source', 'trips', ['source'], unique=False)
    op.create_index('ix_trips_destination', 'trips', ['destination'], unique=False)
    op.create_index('ix_trips_trip_date', 'trips', ['trip_date'], unique=False)
    op.create_index('ix_trips_tier', 'trips', ['tier'], unique=False)
    op.create_index('ix_trips_bus_id', 'trips', ['bus_id'], unique=False)

    op.create_table('reservations',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('trip_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('seat_number', sa.Integer(), nullable=False),
        sa.Column('meal', sa.String(length=64), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['trip_id'], ['trips.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.UniqueConstraint('trip_id', 'seat_number', name='uq_reservation_trip_seat'),
        sa.CheckConstraint('seat_number >= 1', name='ck_reservation_seat_number_positive'),
    )
    op.create_index('ix_reservations_trip_id', 'reservations', ['trip_id'], unique=False)
    op.create_index('ix_reservations_user_id', 'reservations', ['user_id'], unique=False)


def downgrade():
    op.drop_table('reservations')
    op.drop_table('trips')
    op.drop_table('buses')
    op.drop_table('users')
