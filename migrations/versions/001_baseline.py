"""
Alembic migration: baseline ATS records schema.

Creates users, the seven entity tables with their notes and history tables,
and the custom field definition tables. History tables keep ``entity_id``
without a foreign key so DELETE entries outlive the deleted row.

Revision ID: 001
Revises:
Create Date: 2026-10-18 09:00:00.000000
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

JSON = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")

# entity table -> (notes table, history table)
ENTITY_TABLES = {
    "organizations": ("organization_notes", "organization_history"),
    "hiring_managers": ("hiring_manager_notes", "hiring_manager_history"),
    "jobs": ("job_notes", "job_history"),
    "job_seekers": ("job_seeker_notes", "job_seeker_history"),
    "leads": ("lead_notes", "lead_history"),
    "tasks": ("task_notes", "task_history"),
    "placements": ("placement_notes", "placement_history"),
}


def _timestamp(name: str, nullable: bool = False) -> sa.Column:
    return sa.Column(
        name,
        sa.DateTime(timezone=True),
        nullable=nullable,
        server_default=None if nullable else sa.func.now(),
    )


def _record_columns() -> list[sa.Column]:
    return [
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("created_by", sa.Integer(), sa.ForeignKey("users.id"), nullable=False, index=True),
        sa.Column("custom_fields", JSON, nullable=False, server_default=sa.text("'{}'")),
        _timestamp("created_at"),
        _timestamp("updated_at"),
    ]


def _archive_columns() -> list[sa.Column]:
    return [
        sa.Column("archived_at", sa.DateTime(timezone=True), nullable=True, index=True),
        sa.Column("archive_reason", sa.String(50), nullable=True),
    ]


def _person_columns() -> list[sa.Column]:
    return [
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
    ]


def upgrade() -> None:
    """Create the baseline schema."""
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("role", sa.String(9), nullable=False, server_default="recruiter"),
        _timestamp("created_at"),
        sa.CheckConstraint(
            "role IN ('candidate', 'recruiter', 'developer', 'admin', 'owner')",
            name="user_role",
        ),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "organizations",
        *_record_columns(),
        sa.Column("name", sa.String(255), nullable=False, index=True),
        sa.Column("nicknames", sa.String(255)),
        sa.Column("parent_organization", sa.String(255)),
        sa.Column("website", sa.String(255)),
        sa.Column("status", sa.String(50), nullable=False, server_default="Active"),
        sa.Column("contract_on_file", sa.String(50)),
        sa.Column("contract_signed_by", sa.String(255)),
        sa.Column("date_contract_signed", sa.Date()),
        sa.Column("year_founded", sa.Integer()),
        sa.Column("overview", sa.Text()),
        sa.Column("perm_fee", sa.Float()),
        sa.Column("num_employees", sa.Integer()),
        sa.Column("num_offices", sa.Integer()),
        sa.Column("contact_phone", sa.String(50)),
        sa.Column("address", sa.Text()),
        sa.Column("city", sa.String(100)),
        sa.Column("state", sa.String(100)),
        sa.Column("zip_code", sa.String(20)),
        *_archive_columns(),
    )

    op.create_table(
        "hiring_managers",
        *_record_columns(),
        *_person_columns(),
        sa.Column("status", sa.String(50), nullable=False, server_default="Active"),
        sa.Column("nickname", sa.String(100)),
        sa.Column("title", sa.String(255)),
        sa.Column("organization_id", sa.Integer(), sa.ForeignKey("organizations.id"), index=True),
        sa.Column("organization_name", sa.String(255)),
        sa.Column("department", sa.String(255)),
        sa.Column("reports_to", sa.String(255)),
        sa.Column("owner", sa.String(255)),
        sa.Column("secondary_owners", JSON),
        sa.Column("email", sa.String(255), unique=True),
        sa.Column("email2", sa.String(255)),
        sa.Column("office_phone", sa.String(50)),
        sa.Column("mobile_phone", sa.String(50)),
        sa.Column("direct_line", sa.String(50)),
        sa.Column("linkedin_url", sa.String(255)),
        sa.Column("address", sa.Text()),
        sa.Column("date_added", sa.Date()),
        sa.Column("last_contact_date", sa.Date()),
        *_archive_columns(),
    )

    op.create_table(
        "jobs",
        *_record_columns(),
        sa.Column("job_title", sa.String(255), nullable=False, index=True),
        sa.Column("job_type", sa.String(100)),
        sa.Column("category", sa.String(100)),
        sa.Column(
            "organization_id",
            sa.Integer(),
            sa.ForeignKey("organizations.id", ondelete="CASCADE"),
            index=True,
        ),
        sa.Column("hiring_manager", sa.String(255)),
        sa.Column("status", sa.String(50), nullable=False, server_default="Open"),
        sa.Column("priority", sa.String(50)),
        sa.Column("employment_type", sa.String(100)),
        sa.Column("start_date", sa.Date()),
        sa.Column("worksite_location", sa.String(255)),
        sa.Column("remote_option", sa.String(100)),
        sa.Column("job_description", sa.Text()),
        sa.Column("salary_type", sa.String(50)),
        sa.Column("min_salary", sa.Float()),
        sa.Column("max_salary", sa.Float()),
        sa.Column("benefits", sa.Text()),
        sa.Column("required_skills", sa.Text()),
        sa.Column("job_board_status", sa.String(50)),
        sa.Column("owner", sa.String(255)),
        sa.Column("date_added", sa.Date()),
        *_archive_columns(),
    )

    op.create_table(
        "job_seekers",
        *_record_columns(),
        *_person_columns(),
        sa.Column("email", sa.String(255), unique=True),
        sa.Column("phone", sa.String(50)),
        sa.Column("mobile_phone", sa.String(50)),
        sa.Column("address", sa.Text()),
        sa.Column("city", sa.String(100)),
        sa.Column("state", sa.String(100)),
        sa.Column("zip", sa.String(20)),
        sa.Column("status", sa.String(50), nullable=False, server_default="New lead"),
        sa.Column("current_organization", sa.String(255)),
        sa.Column("title", sa.String(255)),
        sa.Column("resume_text", sa.Text()),
        sa.Column("skills", sa.Text()),
        sa.Column("desired_salary", sa.Float()),
        sa.Column("owner", sa.String(255)),
        sa.Column("date_added", sa.Date()),
        sa.Column("last_contact_date", sa.Date()),
    )

    op.create_table(
        "leads",
        *_record_columns(),
        *_person_columns(),
        sa.Column("status", sa.String(50), nullable=False, server_default="New Lead"),
        sa.Column("nickname", sa.String(100)),
        sa.Column("title", sa.String(255)),
        sa.Column("organization_id", sa.Integer(), sa.ForeignKey("organizations.id"), index=True),
        sa.Column("organization_name", sa.String(255)),
        sa.Column("department", sa.String(255)),
        sa.Column("reports_to", sa.String(255)),
        sa.Column("owner", sa.String(255)),
        sa.Column("secondary_owners", JSON),
        sa.Column("email", sa.String(255)),
        sa.Column("email2", sa.String(255)),
        sa.Column("phone", sa.String(50)),
        sa.Column("mobile_phone", sa.String(50)),
        sa.Column("linkedin_url", sa.String(255)),
        sa.Column("address", sa.Text()),
        sa.Column("date_added", sa.Date()),
        sa.Column("last_contact_date", sa.Date()),
    )

    op.create_table(
        "tasks",
        *_record_columns(),
        sa.Column("title", sa.String(255), nullable=False, index=True),
        sa.Column("description", sa.Text()),
        sa.Column("is_completed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("due_date", sa.Date(), index=True),
        sa.Column("due_time", sa.Time()),
        sa.Column("organization_id", sa.Integer(), sa.ForeignKey("organizations.id", ondelete="CASCADE")),
        sa.Column("job_seeker_id", sa.Integer(), sa.ForeignKey("job_seekers.id", ondelete="CASCADE")),
        sa.Column("hiring_manager_id", sa.Integer(), sa.ForeignKey("hiring_managers.id", ondelete="CASCADE")),
        sa.Column("job_id", sa.Integer(), sa.ForeignKey("jobs.id", ondelete="CASCADE")),
        sa.Column("lead_id", sa.Integer(), sa.ForeignKey("leads.id", ondelete="CASCADE")),
        sa.Column("owner", sa.String(255)),
        sa.Column("priority", sa.String(50)),
        sa.Column("status", sa.String(50)),
        sa.Column("assigned_to", sa.Integer(), sa.ForeignKey("users.id"), index=True),
        sa.Column("completed_at", sa.DateTime(timezone=True)),
        sa.Column("completed_by", sa.Integer(), sa.ForeignKey("users.id")),
        sa.Column("reminder_minutes_before_due", sa.Integer()),
        sa.Column("reminder_sent_at", sa.DateTime(timezone=True)),
        *_archive_columns(),
    )

    op.create_table(
        "placements",
        *_record_columns(),
        sa.Column(
            "job_id",
            sa.Integer(),
            sa.ForeignKey("jobs.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column(
            "job_seeker_id",
            sa.Integer(),
            sa.ForeignKey("job_seekers.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column("placement_type", sa.String(50)),
        sa.Column("status", sa.String(50), nullable=False, server_default="Pending"),
        sa.Column("start_date", sa.Date()),
        sa.Column("salary", sa.Float()),
        sa.Column("placement_fee_percent", sa.Float()),
        sa.Column("placement_fee_flat", sa.Float()),
        sa.Column("days_guaranteed", sa.Integer()),
        sa.Column("hours_of_operation", sa.String(100)),
        sa.Column("hours_per_day", sa.Float()),
        sa.Column("pay_rate", sa.Float()),
        sa.Column("effective_date", sa.Date()),
        sa.Column("overtime_exemption", sa.Boolean()),
        *_archive_columns(),
    )

    for entity_table, (notes_table, history_table) in ENTITY_TABLES.items():
        op.create_table(
            notes_table,
            sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
            sa.Column(
                "entity_id",
                sa.Integer(),
                sa.ForeignKey(f"{entity_table}.id", ondelete="CASCADE"),
                nullable=False,
                index=True,
            ),
            sa.Column("text", sa.Text(), nullable=False),
            sa.Column("action", sa.String(255)),
            sa.Column("about_references", JSON),
            sa.Column("created_by", sa.Integer(), sa.ForeignKey("users.id")),
            _timestamp("created_at"),
        )
        op.create_table(
            history_table,
            sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
            sa.Column("entity_id", sa.Integer(), nullable=False, index=True),
            sa.Column("action", sa.String(50), nullable=False),
            sa.Column("details", JSON),
            sa.Column("performed_by", sa.Integer(), sa.ForeignKey("users.id")),
            sa.Column(
                "performed_at",
                sa.DateTime(timezone=True),
                nullable=False,
                server_default=sa.func.now(),
                index=True,
            ),
        )

    op.create_table(
        "custom_field_definitions",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("entity_type", sa.String(50), nullable=False, index=True),
        sa.Column("field_name", sa.String(100), nullable=False),
        sa.Column("field_label", sa.String(255), nullable=False),
        sa.Column("field_type", sa.String(50), nullable=False),
        sa.Column("is_required", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_hidden", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("options", JSON),
        sa.Column("placeholder", sa.String(255)),
        sa.Column("default_value", JSON),
        sa.Column("lookup_type", sa.String(50)),
        sa.Column("created_by", sa.Integer(), sa.ForeignKey("users.id")),
        sa.Column("updated_by", sa.Integer(), sa.ForeignKey("users.id")),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.UniqueConstraint(
            "entity_type", "field_name", name="uq_custom_field_entity_type_name"
        ),
    )
    op.create_index(
        "ix_custom_field_entity_type_sort",
        "custom_field_definitions",
        ["entity_type", "sort_order"],
    )

    op.create_table(
        "custom_field_definition_history",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("field_definition_id", sa.Integer(), nullable=False, index=True),
        sa.Column("action", sa.String(50), nullable=False),
        sa.Column("old_values", JSON),
        sa.Column("new_values", JSON),
        sa.Column("changed_fields", JSON),
        sa.Column("performed_by", sa.Integer(), sa.ForeignKey("users.id")),
        _timestamp("performed_at"),
    )


def downgrade() -> None:
    """Drop the baseline schema."""
    op.drop_table("custom_field_definition_history")
    op.drop_index("ix_custom_field_entity_type_sort", table_name="custom_field_definitions")
    op.drop_table("custom_field_definitions")

    for notes_table, history_table in reversed(list(ENTITY_TABLES.values())):
        op.drop_table(history_table)
        op.drop_table(notes_table)

    for entity_table in ("placements", "tasks", "leads", "job_seekers", "jobs", "hiring_managers", "organizations"):
        op.drop_table(entity_table)

    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
