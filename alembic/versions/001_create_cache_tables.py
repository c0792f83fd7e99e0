"""Create cache tables for customers, draft orders and their lookups

Revision ID: 001
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Create countries table
    op.create_table('countries',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('country_code', sa.Text(), nullable=False),
        sa.Column('country_name', sa.Text(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('country_code')
    )

    # Create companies table
    op.create_table('companies',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('price_level', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name')
    )

    # Create addresses table
    op.create_table('addresses',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('address1', sa.Text(), nullable=True),
        sa.Column('address2', sa.Text(), nullable=True),
        sa.Column('city', sa.Text(), nullable=True),
        sa.Column('province', sa.Text(), nullable=True),
        sa.Column('zip_code', sa.Text(), nullable=True),
        sa.Column('country_id', sa.String(length=36), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['country_id'], ['countries.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_addresses_country_id'), 'addresses', ['country_id'], unique=False)

    # Create customers table
    op.create_table('customers',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('shopify_gid', sa.Text(), nullable=False),
        sa.Column('first_name', sa.Text(), nullable=True),
        sa.Column('last_name', sa.Text(), nullable=True),
        sa.Column('email', sa.Text(), nullable=True),
        sa.Column('company_id', sa.String(length=36), nullable=True),
        sa.Column('default_address_id', sa.String(length=36), nullable=True),
        sa.Column('price_level', sa.Text(), nullable=True),
        sa.Column('tags', postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column('last_synced_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['company_id'], ['companies.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['default_address_id'], ['addresses.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('shopify_gid')
    )
    op.create_index('ix_customers_price_level', 'customers', ['price_level'], unique=False)

    # Create draft_orders table
    op.create_table('draft_orders',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('shopify_gid', sa.Text(), nullable=False),
        sa.Column('name', sa.Text(), nullable=True),
        sa.Column('note', sa.Text(), nullable=True),
        sa.Column('customer_id', sa.String(length=36), nullable=True),
        sa.Column('customer_shopify_gid', sa.Text(), nullable=True),
        sa.Column('shipping_address_id', sa.String(length=36), nullable=True),
        sa.Column('shipping_line', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('line_items', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('status', sa.Text(), nullable=True),
        sa.Column('invoice_url', sa.Text(), nullable=True),
        sa.Column('date_created', sa.DateTime(timezone=True), nullable=True),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('last_synced_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['customer_id'], ['customers.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['shipping_address_id'], ['addresses.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('shopify_gid')
    )
    op.create_index(op.f('ix_draft_orders_customer_id'), 'draft_orders', ['customer_id'], unique=False)
    op.create_index(op.f('ix_draft_orders_customer_shopify_gid'), 'draft_orders', ['customer_shopify_gid'], unique=False)
    op.create_index(op.f('ix_draft_orders_status'), 'draft_orders', ['status'], unique=False)
    op.create_index(op.f('ix_draft_orders_date_created'), 'draft_orders', ['date_created'], unique=False)

    # Create draft_order_tags table
    op.create_table('draft_order_tags',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('draft_order_id', sa.String(length=36), nullable=False),
        sa.Column('tag', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['draft_order_id'], ['draft_orders.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('draft_order_id', 'tag', name='uq_draft_order_tags_draft_order_tag')
    )


def downgrade() -> None:
    op.drop_table('draft_order_tags')
    op.drop_index(op.f('ix_draft_orders_date_created'), table_name='draft_orders')
    op.drop_index(op.f('ix_draft_orders_status'), table_name='draft_orders')
    op.drop_index(op.f('ix_draft_orders_customer_shopify_gid'), table_name='draft_orders')
    op.drop_index(op.f('ix_draft_orders_customer_id'), table_name='draft_orders')
    op.drop_table('draft_orders')
    op.drop_index('ix_customers_price_level', table_name='customers')
    op.drop_table('customers')
    op.drop_index(op.f('ix_addresses_country_id'), table_name='addresses')
    op.drop_table('addresses')
    op.drop_table('companies')
    op.drop_table('countries')
