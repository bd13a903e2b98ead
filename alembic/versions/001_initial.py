"""Initial schema: catalog, pricing, holds, bookings, payments

Revision ID: 001_initial
Revises:
Create Date: 2026-10-18
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def timestamps():
    return [
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        'units',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('slug', sa.String(100), nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('type', sa.String(30), nullable=False),
        sa.Column('capacity', sa.Integer(), nullable=False),
        sa.Column('beds', sa.Integer(), nullable=True),
        sa.Column('baths', sa.Integer(), nullable=True),
        sa.Column('amenities', sa.JSON(), nullable=True),
        sa.Column('features', sa.JSON(), nullable=True),
        sa.Column('photos', sa.JSON(), nullable=True),
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *timestamps(),
    )
    op.create_index('ix_units_slug', 'units', ['slug'], unique=True)
    op.create_index('ix_units_type', 'units', ['type'])

    op.create_table(
        'rate_plans',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('unit_id', sa.String(36), sa.ForeignKey('units.id', ondelete='CASCADE'), nullable=True),
        sa.Column('category', sa.String(30), nullable=True),
        sa.Column('nightly', sa.Integer(), nullable=True),
        sa.Column('weekly', sa.Integer(), nullable=True),
        sa.Column('monthly', sa.Integer(), nullable=True),
        sa.Column('four_month', sa.Integer(), nullable=True),
        sa.Column('currency', sa.String(3), nullable=True),
        *timestamps(),
        sa.CheckConstraint('(unit_id IS NULL) <> (category IS NULL)', name='ck_rate_plan_unit_xor_category'),
    )
    op.create_index('ix_rate_plans_unit_id', 'rate_plans', ['unit_id'])
    op.create_index('ix_rate_plans_category', 'rate_plans', ['category'])

    op.create_table(
        'seasons',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=False),
        sa.Column('discount_pct', sa.Integer(), nullable=False),
        *timestamps(),
        sa.CheckConstraint('end_date >= start_date', name='ck_season_dates'),
        sa.CheckConstraint('discount_pct >= 0 AND discount_pct <= 100', name='ck_season_discount_range'),
    )

    op.create_table(
        'fees',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('amount', sa.Integer(), nullable=False),
        sa.Column('per_stay', sa.Boolean(), nullable=False),
        *timestamps(),
    )

    op.create_table(
        'customers',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('first_name', sa.String(100), nullable=False),
        sa.Column('last_name', sa.String(100), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('phone', sa.String(30), nullable=True),
        *timestamps(),
    )
    op.create_index('ix_customers_email', 'customers', ['email'], unique=True)

    op.create_table(
        'bookings',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('unit_id', sa.String(36), sa.ForeignKey('units.id', ondelete='CASCADE'), nullable=False),
        sa.Column('customer_id', sa.String(36), sa.ForeignKey('customers.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('check_in', sa.Date(), nullable=False),
        sa.Column('check_out', sa.Date(), nullable=False),
        sa.Column('guests', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('total_cents', sa.Integer(), nullable=False),
        sa.Column('currency', sa.String(3), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        *timestamps(),
        sa.CheckConstraint('check_out > check_in', name='ck_booking_dates'),
    )
    op.create_index('ix_booking_unit_status_dates', 'bookings', ['unit_id', 'status', 'check_in', 'check_out'])

    op.create_table(
        'holds',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('unit_id', sa.String(36), sa.ForeignKey('units.id', ondelete='CASCADE'), nullable=False),
        sa.Column('check_in', sa.Date(), nullable=False),
        sa.Column('check_out', sa.Date(), nullable=False),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('booking_id', sa.String(36), sa.ForeignKey('bookings.id', ondelete='SET NULL'), nullable=True),
        *timestamps(),
        sa.CheckConstraint('check_out > check_in', name='ck_hold_dates'),
    )
    op.create_index('ix_hold_unit_status_expires', 'holds', ['unit_id', 'status', 'expires_at'])

    op.create_table(
        'payments',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('booking_id', sa.String(36), sa.ForeignKey('bookings.id', ondelete='CASCADE'), nullable=False, unique=True),
        sa.Column('provider', sa.String(20), nullable=False),
        sa.Column('provider_intent_id', sa.String(255), nullable=False),
        sa.Column('amount_cents', sa.Integer(), nullable=False),
        sa.Column('currency', sa.String(3), nullable=False),
        sa.Column('status', sa.String(40), nullable=False),
        *timestamps(),
    )
    op.create_index('ix_payments_provider_intent_id', 'payments', ['provider_intent_id'], unique=True)


def downgrade() -> None:
    op.drop_table('payments')
    op.drop_table('holds')
    op.drop_table('bookings')
    op.drop_table('customers')
    op.drop_table('fees')
    op.drop_table('seasons')
    op.drop_table('rate_plans')
    op.drop_table('units')
