"""Initial reminder schema

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19
"""

from __future__ import annotations

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None

_ACTIVE_LOG_STATUSES = "status IN ('sending', 'sent')"
_STARTED_JOB = "status = 'started'"


def upgrade() -> None:
    op.create_table(
        "employees",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("employee_id", sa.String(length=50), nullable=False),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("position", sa.String(length=120), nullable=True),
        sa.Column("department", sa.String(length=120), nullable=True),
        sa.Column("manager_email", sa.String(length=255), nullable=True),
        sa.Column("hr_email", sa.String(length=255), nullable=True),
        sa.Column("birthday", sa.Date(), nullable=True),
        sa.Column("work_anniversary", sa.Date(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_employees_employee_id", "employees", ["employee_id"], unique=True)

    op.create_table(
        "reminder_types",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=120), nullable=False, unique=True),
        sa.Column("enabled", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("recurrence", sa.String(length=30), nullable=False, server_default="one_off"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_table(
        "reminder_intervals",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "reminder_type_id", sa.Integer(), sa.ForeignKey("reminder_types.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("days_before", sa.Integer(), nullable=False),
        sa.UniqueConstraint("reminder_type_id", "days_before", name="uq_reminder_interval_days"),
        sa.CheckConstraint("days_before >= 0", name="ck_reminder_interval_non_negative"),
    )
    op.create_index("ix_reminder_intervals_reminder_type_id", "reminder_intervals", ["reminder_type_id"])
    op.create_table(
        "email_templates",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "reminder_type_id",
            sa.Integer(),
            sa.ForeignKey("reminder_types.id", ondelete="CASCADE"),
            nullable=False,
            unique=True,
        ),
        sa.Column("subject_template", sa.String(length=500), nullable=False),
        sa.Column("body_template", sa.Text(), nullable=False),
    )
    op.create_table(
        "recipient_configs",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "reminder_type_id",
            sa.Integer(),
            sa.ForeignKey("reminder_types.id", ondelete="CASCADE"),
            nullable=False,
            unique=True,
        ),
        sa.Column("notify_employee", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("notify_manager", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("notify_hr", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("additional_emails", sa.JSON(), nullable=False),
    )

    op.create_table(
        "recurring_reminders",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column(
            "reminder_type_id", sa.Integer(), sa.ForeignKey("reminder_types.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("frequency", sa.String(length=20), nullable=False, server_default="monthly"),
        sa.Column("interval", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("next_due_date", sa.Date(), nullable=False),
        sa.Column("anchor_date", sa.Date(), nullable=True),
        sa.Column("enabled", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("last_processed", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_recurring_reminders_reminder_type_id", "recurring_reminders", ["reminder_type_id"])

    op.create_table(
        "employee_reminders",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("employee_id", sa.Integer(), sa.ForeignKey("employees.id", ondelete="CASCADE"), nullable=False),
        sa.Column(
            "reminder_type_id", sa.Integer(), sa.ForeignKey("reminder_types.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("due_date", sa.Date(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("priority", sa.String(length=20), nullable=False, server_default="normal"),
        sa.Column("source", sa.String(length=20), nullable=False, server_default="manual"),
        sa.Column(
            "recurring_reminder_id",
            sa.Integer(),
            sa.ForeignKey("recurring_reminders.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint(
            "recurring_reminder_id", "employee_id", "due_date", name="uq_employee_reminder_recurring_cycle"
        ),
    )
    op.create_index("ix_employee_reminders_employee_id", "employee_reminders", ["employee_id"])
    op.create_index("ix_employee_reminders_reminder_type_id", "employee_reminders", ["reminder_type_id"])
    op.create_index("ix_employee_reminders_due_date", "employee_reminders", ["due_date"])

    op.create_table(
        "reminder_logs",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "employee_reminder_id",
            sa.Integer(),
            sa.ForeignKey("employee_reminders.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("days_before", sa.Integer(), nullable=False),
        sa.Column("cycle_due_date", sa.Date(), nullable=False),
        sa.Column("recipients", sa.JSON(), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="sending"),
        sa.Column("trigger_type", sa.String(length=20), nullable=False, server_default="scheduled"),
        sa.Column("reminder_type", sa.String(length=120), nullable=True),
        sa.Column("message_ids", sa.JSON(), nullable=False),
        sa.Column("error", sa.Text(), nullable=True),
        sa.Column("sent_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_reminder_logs_employee_reminder_id", "reminder_logs", ["employee_reminder_id"])
    op.create_index(
        "uq_reminder_log_active_interval",
        "reminder_logs",
        ["employee_reminder_id", "days_before", "cycle_due_date"],
        unique=True,
        sqlite_where=sa.text(_ACTIVE_LOG_STATUSES),
        postgresql_where=sa.text(_ACTIVE_LOG_STATUSES),
    )

    op.create_table(
        "cron_job_logs",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("job_type", sa.String(length=50), nullable=False),
        sa.Column("trigger_type", sa.String(length=20), nullable=False, server_default="scheduled"),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="started"),
        sa.Column("details", sa.JSON(), nullable=False),
        sa.Column("result_data", sa.JSON(), nullable=True),
        sa.Column("executed_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_cron_job_logs_job_type", "cron_job_logs", ["job_type"])
    op.create_index(
        "uq_cron_job_log_single_started",
        "cron_job_logs",
        ["job_type"],
        unique=True,
        sqlite_where=sa.text(_STARTED_JOB),
        postgresql_where=sa.text(_STARTED_JOB),
    )


def downgrade() -> None:
    op.drop_index("uq_cron_job_log_single_started", table_name="cron_job_logs")
    op.drop_index("ix_cron_job_logs_job_type", table_name="cron_job_logs")
    op.drop_table("cron_job_logs")
    op.drop_index("uq_reminder_log_active_interval", table_name="reminder_logs")
    op.drop_index("ix_reminder_logs_employee_reminder_id", table_name="reminder_logs")
    op.drop_table("reminder_logs")
    op.drop_index("ix_employee_reminders_due_date", table_name="employee_reminders")
    op.drop_index("ix_employee_reminders_reminder_type_id", table_name="employee_reminders")
    op.drop_index("ix_employee_reminders_employee_id", table_name="employee_reminders")
    op.drop_table("employee_reminders")
    op.drop_index("ix_recurring_reminders_reminder_type_id", table_name="recurring_reminders")
    op.drop_table("recurring_reminders")
    op.drop_table("recipient_configs")
    op.drop_table("email_templates")
    op.drop_index("ix_reminder_intervals_reminder_type_id", table_name="reminder_intervals")
    op.drop_table("reminder_intervals")
    op.drop_table("reminder_types")
    op.drop_index("ix_employees_employee_id", table_name="employees")
    op.drop_table("employees")
