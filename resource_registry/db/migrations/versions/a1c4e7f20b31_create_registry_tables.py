"""Create registry tables

Revision ID: a1c4e7f20b31
Revises:
Create Date: 2026-10-19

Creates the registry state singleton, listings with their categories,
collaborator grants, verifications and the append-only update log.
"""
from __future__ import annotations

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "a1c4e7f20b31"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "registry_state",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("paused", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("admin", sa.String(length=128), nullable=False),
        sa.Column("next_listing_id", sa.Integer, nullable=False, server_default="1"),
        sa.Column("block_height", sa.Integer, nullable=False, server_default="0"),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )

    op.create_table(
        "listings",
        sa.Column("listing_id", sa.Integer, primary_key=True, autoincrement=False),
        sa.Column("owner", sa.String(length=128), nullable=False),
        sa.Column("resource_type", sa.String, nullable=False),
        sa.Column("quantity", sa.Integer, nullable=False),
        sa.Column("unit", sa.String, nullable=False),
        sa.Column("location", sa.String(length=100), nullable=False),
        sa.Column("expiration", sa.Integer, nullable=True),
        sa.Column("price", sa.Integer, nullable=True),
        sa.Column("description", sa.Text, nullable=False),
        sa.Column("metadata", sa.Text, nullable=True),
        sa.Column(
            "status",
            sa.Enum(
                "active", "cancelled", "sold", "pending",
                name="listing_status",
                create_constraint=True,
            ),
            nullable=False,
        ),
        sa.Column("created_at", sa.Integer, nullable=False),
        sa.Column("last_updated", sa.Integer, nullable=False),
        sa.Column("update_count", sa.Integer, nullable=False, server_default="0"),
    )
    op.create_index("ix_listings_owner", "listings", ["owner"])
    op.create_index("ix_listings_status", "listings", ["status"])
    op.create_index("ix_listings_owner_status", "listings", ["owner", "status"])
    op.create_index("ix_listings_resource_type", "listings", ["resource_type"])

    op.create_table(
        "listing_categories",
        sa.Column(
            "listing_id",
            sa.Integer,
            sa.ForeignKey("listings.listing_id"),
            primary_key=True,
        ),
        sa.Column("category", sa.String, nullable=False),
        sa.Column("tags", sa.JSON, nullable=False),
    )

    op.create_table(
        "listing_collaborators",
        sa.Column(
            "listing_id",
            sa.Integer,
            sa.ForeignKey("listings.listing_id"),
            primary_key=True,
        ),
        sa.Column("principal", sa.String(length=128), primary_key=True),
        sa.Column("role", sa.String, nullable=False),
        sa.Column("permissions", sa.JSON, nullable=False),
        sa.Column("added_at", sa.Integer, nullable=False),
    )
    op.create_index(
        "ix_listing_collaborators_principal", "listing_collaborators", ["principal"]
    )

    op.create_table(
        "listing_verifications",
        sa.Column(
            "listing_id",
            sa.Integer,
            sa.ForeignKey("listings.listing_id"),
            primary_key=True,
        ),
        sa.Column("verified_by", sa.String(length=128), nullable=False),
        sa.Column("verification_notes", sa.Text, nullable=False),
        sa.Column("verified_at", sa.Integer, nullable=False),
    )

    op.create_table(
        "listing_updates",
        sa.Column(
            "listing_id",
            sa.Integer,
            sa.ForeignKey("listings.listing_id"),
            primary_key=True,
        ),
        sa.Column("update_id", sa.Integer, primary_key=True, autoincrement=False),
        sa.Column("updater", sa.String(length=128), nullable=False),
        sa.Column("notes", sa.Text, nullable=False),
        sa.Column("timestamp", sa.Integer, nullable=False),
        sa.Column("changes", sa.JSON, nullable=False),
        sa.Column(
            "recorded_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )
    op.create_index("ix_listing_updates_updater", "listing_updates", ["updater"])
    op.create_index(
        "ix_listing_updates_listing_ts", "listing_updates", ["listing_id", "timestamp"]
    )


def downgrade() -> None:
    op.drop_index("ix_listing_updates_listing_ts", table_name="listing_updates")
    op.drop_index("ix_listing_updates_updater", table_name="listing_updates")
    op.drop_table("listing_updates")
    op.drop_table("listing_verifications")
    op.drop_index("ix_listing_collaborators_principal", table_name="listing_collaborators")
    op.drop_table("listing_collaborators")
    op.drop_table("listing_categories")
    op.drop_index("ix_listings_resource_type", table_name="listings")
    op.drop_index("ix_listings_owner_status", table_name="listings")
    op.drop_index("ix_listings_status", table_name="listings")
    op.drop_index("ix_listings_owner", table_name="listings")
    op.drop_table("listings")
    sa.Enum(name="listing_status").drop(op.get_bind(), checkfirst=True)
