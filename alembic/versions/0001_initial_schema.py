"""initial_schema

Creates organisations, users, units, reservations, contracts, missions,
checklists and revenues, plus the two guards the reservation workflow
relies on: the ``no_unit_overlap`` exclusion constraint (needs btree_gist)
and the one-mission-per-(reservation, type) partial unique index.

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-17 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001_initial_schema'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
    ]


def _fk(column: str, target: str, ondelete: str, nullable: bool = False) -> sa.Column:
    return sa.Column(column, sa.UUID(), sa.ForeignKey(target, ondelete=ondelete), nullable=nullable)


def upgrade() -> None:
    op.execute("CREATE EXTENSION IF NOT EXISTS btree_gist")

    op.create_table(
        "organisations",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
    )

    op.create_table(
        "users",
        sa.Column("id", sa.UUID(), primary_key=True),
        _fk("organisation_id", "organisations.id", "CASCADE"),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("role", sa.String(50), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_organisation_id", "users", ["organisation_id"])

    op.create_table(
        "units",
        sa.Column("id", sa.UUID(), primary_key=True),
        _fk("organisation_id", "organisations.id", "CASCADE"),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("address_line1", sa.String(500), nullable=True),
        sa.Column("city", sa.String(200), nullable=True),
        sa.Column("max_guests", sa.Integer(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("status", sa.String(20), server_default="ACTIVE", nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_units_organisation_id", "units", ["organisation_id"])

    op.create_table(
        "reservations",
        sa.Column("id", sa.UUID(), primary_key=True),
        _fk("organisation_id", "organisations.id", "CASCADE"),
        _fk("unit_id", "units.id", "CASCADE"),
        sa.Column("guest_name", sa.String(200), nullable=False),
        sa.Column("guest_email", sa.String(255), nullable=True),
        sa.Column("guest_phone", sa.String(30), nullable=True),
        sa.Column("guest_count", sa.Integer(), nullable=False),
        sa.Column("check_in_date", sa.Date(), nullable=False),
        sa.Column("check_in_time", sa.Time(), nullable=True),
        sa.Column("check_out_date", sa.Date(), nullable=False),
        sa.Column("check_out_time", sa.Time(), nullable=True),
        sa.Column("platform", sa.String(20), nullable=False),
        sa.Column("amount", sa.Numeric(10, 2), nullable=True),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("payment_status", sa.String(20), nullable=False),
        sa.Column("payment_date", sa.Date(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("access_instructions", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_reservations_organisation_id", "reservations", ["organisation_id"])
    op.create_index("ix_reservations_unit_id", "reservations", ["unit_id"])
    op.create_index("ix_reservations_status", "reservations", ["status"])
    op.create_index("ix_reservations_unit_check_in", "reservations", ["unit_id", "check_in_date"])
    # '[)' lets a stay start on the day the previous one ends
    op.execute(
        """
        ALTER TABLE reservations
        ADD CONSTRAINT no_unit_overlap
        EXCLUDE USING gist (
            unit_id WITH =,
            daterange(check_in_date, check_out_date, '[)') WITH &&
        )
        WHERE (status <> 'CANCELLED')
        """
    )

    op.create_table(
        "contracts",
        sa.Column("id", sa.UUID(), primary_key=True),
        _fk("organisation_id", "organisations.id", "CASCADE"),
        _fk("unit_id", "units.id", "CASCADE", nullable=True),
        sa.Column("type", sa.String(20), nullable=False),
        sa.Column("commission_rate", sa.Numeric(5, 2), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("conditions", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint("commission_rate >= 0 AND commission_rate <= 100", name="ck_contracts_commission_rate"),
    )
    op.create_index("ix_contracts_organisation_id", "contracts", ["organisation_id"])
    op.create_index("ix_contracts_unit_id", "contracts", ["unit_id"])
    op.create_index("ix_contracts_status_dates", "contracts", ["status", "start_date", "end_date"])

    op.create_table(
        "missions",
        sa.Column("id", sa.UUID(), primary_key=True),
        _fk("organisation_id", "organisations.id", "CASCADE"),
        _fk("unit_id", "units.id", "CASCADE"),
        _fk("reservation_id", "reservations.id", "SET NULL", nullable=True),
        sa.Column("type", sa.String(20), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("priority", sa.String(20), nullable=False),
        sa.Column("scheduled_at", sa.DateTime(), nullable=False),
        sa.Column("completed_at", sa.DateTime(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_missions_organisation_id", "missions", ["organisation_id"])
    op.create_index("ix_missions_unit_id", "missions", ["unit_id"])
    op.create_index("ix_missions_reservation_id", "missions", ["reservation_id"])
    op.create_index("ix_missions_scheduled_at", "missions", ["scheduled_at"])
    op.create_index(
        "uq_missions_reservation_type",
        "missions",
        ["reservation_id", "type"],
        unique=True,
        postgresql_where=sa.text("reservation_id IS NOT NULL"),
    )

    op.create_table(
        "checklist_templates",
        sa.Column("id", sa.UUID(), primary_key=True),
        _fk("organisation_id", "organisations.id", "CASCADE"),
        _fk("unit_id", "units.id", "CASCADE"),
        sa.Column("mission_type", sa.String(20), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_checklist_templates_organisation_id", "checklist_templates", ["organisation_id"])
    op.create_index("ix_checklist_templates_unit_type", "checklist_templates", ["unit_id", "mission_type"])

    op.create_table(
        "checklist_template_items",
        sa.Column("id", sa.UUID(), primary_key=True),
        _fk("template_id", "checklist_templates.id", "CASCADE"),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("category", sa.String(100), nullable=True),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("photo_required", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_checklist_template_items_template_id", "checklist_template_items", ["template_id"])

    op.create_table(
        "mission_checklist_items",
        sa.Column("id", sa.UUID(), primary_key=True),
        _fk("mission_id", "missions.id", "CASCADE"),
        _fk("template_item_id", "checklist_template_items.id", "SET NULL", nullable=True),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("category", sa.String(100), nullable=True),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("photo_required", sa.Boolean(), nullable=False),
        sa.Column("completed", sa.Boolean(), nullable=False),
        sa.Column("completed_at", sa.DateTime(), nullable=True),
        _fk("completed_by_id", "users.id", "SET NULL", nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_mission_checklist_items_mission_id", "mission_checklist_items", ["mission_id"])

    op.create_table(
        "revenues",
        sa.Column("id", sa.UUID(), primary_key=True),
        _fk("organisation_id", "organisations.id", "CASCADE"),
        _fk("reservation_id", "reservations.id", "CASCADE"),
        _fk("unit_id", "units.id", "CASCADE"),
        _fk("contract_id", "contracts.id", "SET NULL", nullable=True),
        sa.Column("gross_amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("commission_rate", sa.Numeric(5, 2), nullable=False),
        sa.Column("commission_amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("net_amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("check_in_date", sa.Date(), nullable=False),
        sa.Column("check_out_date", sa.Date(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("reservation_id", name="uq_revenues_reservation_id"),
    )
    op.create_index("ix_revenues_organisation_id", "revenues", ["organisation_id"])
    op.create_index("ix_revenues_unit_id", "revenues", ["unit_id"])


def downgrade() -> None:
    op.drop_table("revenues")
    op.drop_table("mission_checklist_items")
    op.drop_table("checklist_template_items")
    op.drop_table("checklist_templates")
    op.drop_table("missions")
    op.drop_table("contracts")
    op.drop_table("reservations")
    op.drop_table("units")
    op.drop_table("users")
    op.drop_table("organisations")
    # btree_gist stays installed: other objects may depend on it.
