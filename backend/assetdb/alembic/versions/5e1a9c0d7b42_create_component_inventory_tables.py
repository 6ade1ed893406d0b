"""Create companies, users, catalog, assets, components and audit tables.

Revision ID: 5e1a9c0d7b42
Revises:
Create Date: 2026-10-19 09:00:00.000000
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect


# revision identifiers, used by Alembic.
revision = "5e1a9c0d7b42"
down_revision = None
branch_labels = None
depends_on = None


ACCOUNT_ROLES = ("SUPERUSER", "ADMIN", "ASSET_MANAGER", "TECHNICIAN", "VIEW_ONLY")
CATEGORY_TYPES = ("asset", "accessory", "consumable", "component", "license")


def _table_exists(table_name: str) -> bool:
    bind = op.get_bind()
    return bool(inspect(bind).has_table(table_name))


def upgrade() -> None:
    if not _table_exists("companies"):
        op.create_table(
            "companies",
            sa.Column("id", sa.String(length=36), primary_key=True),
            sa.Column("name", sa.String(length=255), nullable=False),
            sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
            sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        )
        op.create_index("ix_companies_name", "companies", ["name"], unique=True)
        op.create_index("ix_companies_is_active", "companies", ["is_active"])

    if not _table_exists("users"):
        op.create_table(
            "users",
            sa.Column("id", sa.String(length=36), primary_key=True),
            sa.Column(
                "company_id",
                sa.String(length=36),
                sa.ForeignKey("companies.id", ondelete="SET NULL"),
                nullable=True,
            ),
            sa.Column("email", sa.String(length=255), nullable=False),
            sa.Column("full_name", sa.String(length=255), nullable=False),
            sa.Column("role", sa.Enum(*ACCOUNT_ROLES, name="account_role_enum"), nullable=False),
            sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
            sa.Column("is_superuser", sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column("hashed_password", sa.String(length=255), nullable=False),
            sa.Column("last_login_at", sa.DateTime(timezone=True), nullable=True),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
            sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
            sa.UniqueConstraint("email", name="uq_users_email"),
        )
        op.create_index("ix_users_company_id", "users", ["company_id"])
        op.create_index("ix_users_email", "users", ["email"])
        op.create_index("ix_users_role", "users", ["role"])
        op.create_index("ix_users_is_active", "users", ["is_active"])
        op.create_index("ix_users_is_superuser", "users", ["is_superuser"])
        op.create_index("idx_users_role_active", "users", ["role", "is_active"])

    if not _table_exists("categories"):
        op.create_table(
            "categories",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("name", sa.String(length=255), nullable=False),
            sa.Column(
                "category_type",
                sa.Enum(*CATEGORY_TYPES, name="category_type_enum", native_enum=False),
                nullable=False,
            ),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
            sa.UniqueConstraint("name", "category_type", name="uq_categories_name_type"),
        )
        op.create_index("ix_categories_id", "categories", ["id"])
        op.create_index("ix_categories_name", "categories", ["name"])
        op.create_index("ix_categories_category_type", "categories", ["category_type"])

    if not _table_exists("locations"):
        op.create_table(
            "locations",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column(
                "company_id",
                sa.String(length=36),
                sa.ForeignKey("companies.id", ondelete="SET NULL"),
                nullable=True,
            ),
            sa.Column("name", sa.String(length=255), nullable=False),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        )
        op.create_index("ix_locations_id", "locations", ["id"])
        op.create_index("ix_locations_company_id", "locations", ["company_id"])
        op.create_index("ix_locations_name", "locations", ["name"])

    if not _table_exists("assets"):
        op.create_table(
            "assets",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column(
                "company_id",
                sa.String(length=36),
                sa.ForeignKey("companies.id", ondelete="SET NULL"),
                nullable=True,
            ),
            sa.Column("asset_tag", sa.String(length=64), nullable=False),
            sa.Column("name", sa.String(length=255), nullable=True),
            sa.Column("serial", sa.String(length=128), nullable=True),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        )
        op.create_index("ix_assets_id", "assets", ["id"])
        op.create_index("ix_assets_company_id", "assets", ["company_id"])
        op.create_index("ix_assets_asset_tag", "assets", ["asset_tag"], unique=True)
        op.create_index("ix_assets_serial", "assets", ["serial"])

    if not _table_exists("components"):
        op.create_table(
            "components",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("name", sa.String(length=255), nullable=False),
            sa.Column(
                "category_id",
                sa.Integer(),
                sa.ForeignKey("categories.id", ondelete="RESTRICT"),
                nullable=False,
            ),
            sa.Column(
                "location_id",
                sa.Integer(),
                sa.ForeignKey("locations.id", ondelete="SET NULL"),
                nullable=True,
            ),
            sa.Column(
                "company_id",
                sa.String(length=36),
                sa.ForeignKey("companies.id", ondelete="SET NULL"),
                nullable=True,
            ),
            sa.Column("order_number", sa.String(length=255), nullable=True),
            sa.Column("min_amt", sa.Integer(), nullable=True),
            sa.Column("serial", sa.String(length=255), nullable=True),
            sa.Column("purchase_date", sa.Date(), nullable=True),
            sa.Column("purchase_cost", sa.Numeric(12, 2), nullable=True),
            sa.Column("qty", sa.Integer(), nullable=False, server_default="1"),
            sa.Column(
                "user_id",
                sa.String(length=36),
                sa.ForeignKey("users.id", ondelete="SET NULL"),
                nullable=True,
            ),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
            sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
            sa.CheckConstraint("qty >= 0", name="ck_components_qty_nonneg"),
            sa.CheckConstraint("min_amt IS NULL OR min_amt >= 0", name="ck_components_min_amt_nonneg"),
            sa.CheckConstraint("purchase_cost IS NULL OR purchase_cost >= 0", name="ck_components_cost_nonneg"),
        )
        op.create_index("ix_components_id", "components", ["id"])
        op.create_index("ix_components_name", "components", ["name"])
        op.create_index("ix_components_category_id", "components", ["category_id"])
        op.create_index("ix_components_location_id", "components", ["location_id"])
        op.create_index("ix_components_company_id", "components", ["company_id"])
        op.create_index("ix_components_serial", "components", ["serial"])
        op.create_index("ix_components_user_id", "components", ["user_id"])
        op.create_index("ix_components_company_name", "components", ["company_id", "name"])

    if not _table_exists("components_assets"):
        op.create_table(
            "components_assets",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column(
                "component_id",
                sa.Integer(),
                sa.ForeignKey("components.id", ondelete="RESTRICT"),
                nullable=False,
            ),
            sa.Column(
                "asset_id",
                sa.Integer(),
                sa.ForeignKey("assets.id", ondelete="CASCADE"),
                nullable=False,
            ),
            sa.Column(
                "user_id",
                sa.String(length=36),
                sa.ForeignKey("users.id", ondelete="SET NULL"),
                nullable=True,
            ),
            sa.Column("assigned_qty", sa.Integer(), nullable=False, server_default="1"),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
            sa.CheckConstraint("assigned_qty >= 1", name="ck_components_assets_qty_positive"),
        )
        op.create_index("ix_components_assets_id", "components_assets", ["id"])
        op.create_index("ix_components_assets_component_id", "components_assets", ["component_id"])
        op.create_index("ix_components_assets_asset_id", "components_assets", ["asset_id"])
        op.create_index("ix_components_assets_user_id", "components_assets", ["user_id"])
        op.create_index("ix_components_assets_component", "components_assets", ["component_id", "created_at"])

    if not _table_exists("audit_events"):
        op.create_table(
            "audit_events",
            sa.Column("id", sa.String(length=36), primary_key=True),
            sa.Column(
                "company_id",
                sa.String(length=36),
                sa.ForeignKey("companies.id", ondelete="SET NULL"),
                nullable=True,
            ),
            sa.Column("entity_type", sa.String(length=64), nullable=False),
            sa.Column("entity_id", sa.String(length=64), nullable=False),
            sa.Column("action", sa.String(length=64), nullable=False),
            sa.Column(
                "actor_user_id",
                sa.String(length=36),
                sa.ForeignKey("users.id", ondelete="SET NULL"),
                nullable=True,
            ),
            sa.Column("target_type", sa.String(length=64), nullable=True),
            sa.Column("target_id", sa.String(length=64), nullable=True),
            sa.Column("note", sa.String(length=1024), nullable=True),
            sa.Column("occurred_at", sa.DateTime(timezone=True), nullable=False),
            sa.Column("before", sa.JSON(), nullable=True),
            sa.Column("after", sa.JSON(), nullable=True),
            sa.Column("metadata", sa.JSON(), nullable=True),
        )
        op.create_index("ix_audit_events_id", "audit_events", ["id"])
        op.create_index("ix_audit_events_company_id", "audit_events", ["company_id"])
        op.create_index("ix_audit_events_entity_type", "audit_events", ["entity_type"])
        op.create_index("ix_audit_events_entity_id", "audit_events", ["entity_id"])
        op.create_index("ix_audit_events_action", "audit_events", ["action"])
        op.create_index("ix_audit_events_actor_user_id", "audit_events", ["actor_user_id"])
        op.create_index("ix_audit_events_occurred_at", "audit_events", ["occurred_at"])
        op.create_index("ix_audit_events_entity", "audit_events", ["entity_type", "entity_id"])
        op.create_index("ix_audit_events_company_time", "audit_events", ["company_id", "occurred_at"])
        op.create_index("ix_audit_events_time_desc", "audit_events", [sa.text("occurred_at DESC")])


def downgrade() -> None:
    for table_name in (
        "audit_events",
        "components_assets",
        "components",
        "assets",
        "locations",
        "categories",
        "users",
        "companies",
    ):
        if _table_exists(table_name):
            op.drop_table(table_name)

    bind = op.get_bind()
    if bind.dialect.name == "postgresql":
        sa.Enum(name="account_role_enum").drop(bind, checkfirst=True)
