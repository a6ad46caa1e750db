"""Create users, properties, property tags and interactions

Revision ID: 3c1f7a9d2e41
Revises:
Create Date: 2026-10-19 09:12:44.118203

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '3c1f7a9d2e41'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table('users',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=True),
        sa.Column('roles', sa.JSON(), nullable=False),
        sa.Column('active_role', sa.String(length=20), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email')
    )
    op.create_index('idx_users_email', 'users', ['email'], unique=False)

    op.create_table('properties',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('property_id', sa.String(length=64), nullable=False),
        sa.Column('slug', sa.String(length=400), nullable=False),
        sa.Column('title', sa.String(length=250), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('address_street', sa.String(length=250), nullable=True),
        sa.Column('address_area', sa.String(length=200), nullable=False),
        sa.Column('address_city', sa.String(length=100), nullable=False),
        sa.Column('address_state', sa.String(length=100), nullable=False),
        sa.Column('address_lga', sa.String(length=100), nullable=True),
        sa.Column('address_postal_code', sa.String(length=20), nullable=True),
        sa.Column('address_country', sa.String(length=100), nullable=False),
        sa.Column('address_landmark', sa.String(length=250), nullable=True),
        sa.Column('location', sa.JSON(), nullable=True),
        sa.Column('property_type', sa.String(length=50), nullable=False),
        sa.Column('flat_type', sa.String(length=20), nullable=True),
        sa.Column('listing_type', sa.String(length=20), nullable=False),
        sa.Column('transaction_type', sa.String(length=20), nullable=True),
        sa.Column('furnishing_status', sa.String(length=20), nullable=False),
        sa.Column('property_condition', sa.String(length=20), nullable=False),
        sa.Column('possession_status', sa.String(length=30), nullable=False),
        sa.Column('available_from', sa.Date(), nullable=False),
        sa.Column('year_built', sa.Integer(), nullable=True),
        sa.Column('facing', sa.String(length=20), nullable=True),
        sa.Column('bedrooms', sa.Integer(), nullable=False),
        sa.Column('bathrooms', sa.Integer(), nullable=False),
        sa.Column('kitchens', sa.Integer(), nullable=False),
        sa.Column('balconies', sa.Integer(), nullable=False),
        sa.Column('floor', sa.Integer(), nullable=True),
        sa.Column('total_floors', sa.Integer(), nullable=True),
        sa.Column('parking', sa.JSON(), nullable=True),
        sa.Column('floor_size', sa.JSON(), nullable=True),
        sa.Column('carpet_area', sa.JSON(), nullable=True),
        sa.Column('price_amount', sa.Float(), nullable=False),
        sa.Column('price_currency', sa.String(length=8), nullable=False),
        sa.Column('price_negotiable', sa.Boolean(), nullable=False),
        sa.Column('payment_plans', sa.JSON(), nullable=True),
        sa.Column('rental_details', sa.JSON(), nullable=True),
        sa.Column('utilities', sa.JSON(), nullable=True),
        sa.Column('amenities', sa.JSON(), nullable=True),
        sa.Column('additional_rooms', sa.JSON(), nullable=True),
        sa.Column('highlights', sa.JSON(), nullable=True),
        sa.Column('nearby_places', sa.JSON(), nullable=True),
        sa.Column('legal_documents', sa.JSON(), nullable=True),
        sa.Column('floor_plan', sa.JSON(), nullable=True),
        sa.Column('registry_reference', sa.String(length=200), nullable=True),
        sa.Column('media', sa.JSON(), nullable=True),
        sa.Column('contact_person', sa.JSON(), nullable=False),
        sa.Column('owner_id', sa.Uuid(), nullable=False),
        sa.Column('is_verified', sa.Boolean(), nullable=False),
        sa.Column('verified_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('approval_status', sa.String(length=20), nullable=False),
        sa.Column('rejection_reason', sa.Text(), nullable=True),
        sa.Column('is_deleted', sa.Boolean(), nullable=False),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('views', sa.Integer(), nullable=False),
        sa.Column('saves', sa.Integer(), nullable=False),
        sa.Column('shares', sa.Integer(), nullable=False),
        sa.Column('inquiries', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('last_modified_by', sa.Uuid(), nullable=True),
        sa.Column('last_modified_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['owner_id'], ['users.id']),
        sa.ForeignKeyConstraint(['last_modified_by'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('property_id'),
        sa.UniqueConstraint('slug')
    )

    # Indexes for listing reads
    op.create_index('idx_properties_city_area', 'properties', ['address_city', 'address_area'], unique=False)
    op.create_index('idx_properties_type_listing', 'properties', ['property_type', 'listing_type'], unique=False)
    op.create_index('idx_properties_price', 'properties', ['price_amount'], unique=False)
    op.create_index('idx_properties_approval_status', 'properties', ['approval_status'], unique=False)
    op.create_index('idx_properties_created_at', 'properties', ['created_at'], unique=False)
    op.create_index('idx_properties_state', 'properties', ['address_state'], unique=False)

    op.create_table('property_tags',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('property_pk', sa.Uuid(), nullable=False),
        sa.Column('tag', sa.String(length=100), nullable=False),
        sa.ForeignKeyConstraint(['property_pk'], ['properties.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_property_tags_unique', 'property_tags', ['property_pk', 'tag'], unique=True)
    op.create_index('idx_property_tags_tag', 'property_tags', ['tag'], unique=False)

    op.create_table('interactions',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.String(length=64), nullable=False),
        sa.Column('property_id', sa.String(length=64), nullable=True),
        sa.Column('action', sa.String(length=20), nullable=False),
        sa.Column('search_query', sa.Text(), nullable=True),
        sa.Column('timestamp', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_interactions_user_action_time', 'interactions', ['user_id', 'action', 'timestamp'], unique=False)
    op.create_index('idx_interactions_property_id', 'interactions', ['property_id'], unique=False)


def downgrade() -> None:
    op.drop_index('idx_interactions_property_id', table_name='interactions')
    op.drop_index('idx_interactions_user_action_time', table_name='interactions')
    op.drop_table('interactions')
    op.drop_index('idx_property_tags_tag', table_name='property_tags')
    op.drop_index('idx_property_tags_unique', table_name='property_tags')
    op.drop_table('property_tags')
    op.drop_index('idx_properties_state', table_name='properties')
    op.drop_index('idx_properties_created_at', table_name='properties')
    op.drop_index('idx_properties_approval_status', table_name='properties')
    op.drop_index('idx_properties_price', table_name='properties')
    op.drop_index('idx_properties_type_listing', table_name='properties')
    op.drop_index('idx_properties_city_area', table_name='properties')
    op.drop_table('properties')
    op.drop_index('idx_users_email', table_name='users')
    op.drop_table('users')
