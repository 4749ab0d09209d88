"""init metrics engine tables

Revision ID: 0001_init
Revises:
Create Date: 2026-10-19
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


revision = "0001_init"
down_revision = None
branch_labels = None
depends_on = None


def _id() -> sa.Column:
    return sa.Column("id", sa.String(), primary_key=True, nullable=False)


def upgrade() -> None:
    op.create_table(
        "users",
        _id(),
        sa.Column("email", sa.String(), nullable=True),
        sa.Column("role", sa.String(), nullable=False),
        sa.Column("department", sa.String(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    op.create_table(
        "risks",
        _id(),
        sa.Column("standard", sa.String(), nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("status", sa.String(), nullable=False, server_default="ACTIVE"),
        sa.Column("likelihood", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("severity", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("detectability", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("risk_score", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("risk_level", sa.String(), nullable=False, server_default="LOW"),
        sa.Column("control_effectiveness", sa.Integer(), nullable=True),
        sa.Column("residual_score", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_risks_standard", "risks", ["standard"], unique=False)
    op.create_index("ix_risks_standard_status", "risks", ["standard", "status"], unique=False)

    op.create_table(
        "process_risks",
        _id(),
        sa.Column("process_name", sa.String(), nullable=False),
        sa.Column("failure_mode", sa.String(), nullable=False),
        sa.Column("likelihood", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("severity", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("detectability", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("risk_score", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("risk_level", sa.String(), nullable=False, server_default="LOW"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    op.create_table(
        "environmental_aspects",
        _id(),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("aspect_type", sa.String(), nullable=True),
        sa.Column("scale", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("frequency", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("legal_impact", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("reversibility", sa.Integer(), nullable=True),
        sa.Column("stakeholder_concern", sa.Integer(), nullable=True),
        sa.Column("significance_score", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("significance_level", sa.String(), nullable=False, server_default="NEGLIGIBLE"),
        sa.Column("is_significant", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # Period metrics are keyed by (year, month); recalculation upserts on that pair.
    op.create_table(
        "safety_metrics",
        _id(),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("month", sa.Integer(), nullable=False),
        sa.Column("hours_worked", sa.Float(), nullable=False, server_default="0"),
        sa.Column("lost_time_injuries", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_recordable_injuries", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("days_lost", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("near_misses", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("first_aid_cases", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("ltifr", sa.Float(), nullable=False, server_default="0"),
        sa.Column("trir", sa.Float(), nullable=False, server_default="0"),
        sa.Column("severity_rate", sa.Float(), nullable=False, server_default="0"),
        sa.Column("near_miss_rate", sa.Float(), nullable=False, server_default="0"),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("year", "month", name="uq_safety_metrics_period"),
    )

    op.create_table(
        "quality_metrics",
        _id(),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("month", sa.Integer(), nullable=False),
        sa.Column("prevention_cost", sa.Float(), nullable=False, server_default="0"),
        sa.Column("appraisal_cost", sa.Float(), nullable=False, server_default="0"),
        sa.Column("internal_failure_cost", sa.Float(), nullable=False, server_default="0"),
        sa.Column("external_failure_cost", sa.Float(), nullable=False, server_default="0"),
        sa.Column("total_units", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("defective_units", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("defect_opportunities", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("total_copq", sa.Float(), nullable=False, server_default="0"),
        sa.Column("dpmo", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("first_pass_yield", sa.Float(), nullable=False, server_default="0"),
        sa.Column("process_sigma", sa.Float(), nullable=False, server_default="0"),
        sa.Column("defect_rate", sa.Float(), nullable=False, server_default="0"),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("year", "month", name="uq_quality_metrics_period"),
    )

    op.create_table(
        "objectives",
        _id(),
        sa.Column("standard", sa.String(), nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("unit", sa.String(), nullable=True),
        sa.Column("baseline_value", sa.Float(), nullable=True),
        sa.Column("target_value", sa.Float(), nullable=True),
        sa.Column("current_value", sa.Float(), nullable=True),
        sa.Column("progress_percent", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("status", sa.String(), nullable=False, server_default="NOT_STARTED"),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("target_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_objectives_standard", "objectives", ["standard"], unique=False)

    op.create_table(
        "objective_progress",
        _id(),
        sa.Column("objective_id", sa.String(), sa.ForeignKey("objectives.id"), nullable=False),
        sa.Column("value", sa.Float(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("recorded_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_objective_progress_objective_id", "objective_progress", ["objective_id"], unique=False)

    op.create_table(
        "actions",
        _id(),
        sa.Column("standard", sa.String(), nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("action_type", sa.String(), nullable=False, server_default="CORRECTIVE"),
        sa.Column("priority", sa.String(), nullable=False, server_default="MEDIUM"),
        sa.Column("status", sa.String(), nullable=False, server_default="OPEN"),
        sa.Column("due_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("verified_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("verification_notes", sa.Text(), nullable=True),
        sa.Column("effectiveness_rating", sa.Integer(), nullable=True),
        sa.Column("objective_id", sa.String(), sa.ForeignKey("objectives.id"), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_actions_standard", "actions", ["standard"], unique=False)
    # Serves the overdue sweep filter (status IN (...) AND due_date < now).
    op.create_index("ix_actions_status_due_date", "actions", ["status", "due_date"], unique=False)
    op.create_index("ix_actions_standard_status", "actions", ["standard", "status"], unique=False)

    op.create_table(
        "incidents",
        _id(),
        sa.Column("standard", sa.String(), nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("status", sa.String(), nullable=False, server_default="REPORTED"),
        sa.Column("date_occurred", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_incidents_standard", "incidents", ["standard"], unique=False)

    op.create_table(
        "legal_requirements",
        _id(),
        sa.Column("standard", sa.String(), nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("compliance_status", sa.String(), nullable=False, server_default="NOT_ASSESSED"),
    )
    op.create_index("ix_legal_requirements_standard", "legal_requirements", ["standard"], unique=False)

    op.create_table(
        "compliance_scores",
        _id(),
        sa.Column("standard", sa.String(), nullable=False, unique=True),
        sa.Column("risk_score", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("incident_score", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("legal_score", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("objective_score", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("action_score", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("overall_score", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_items", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("compliant_items", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("calculated_at", sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        "training_courses",
        _id(),
        sa.Column("standard", sa.String(), nullable=True),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("required_for_roles", sa.String(), nullable=True),
        sa.Column("required_for_departments", sa.String(), nullable=True),
        sa.Column("validity_months", sa.Integer(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
    )

    op.create_table(
        "training_records",
        _id(),
        sa.Column("user_id", sa.String(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("course_id", sa.String(), sa.ForeignKey("training_courses.id"), nullable=False),
        sa.Column("status", sa.String(), nullable=False, server_default="NOT_STARTED"),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_training_records_user_id", "training_records", ["user_id"], unique=False)
    op.create_index("ix_training_records_course_id", "training_records", ["course_id"], unique=False)
    op.create_index(
        "ix_training_records_status_expires",
        "training_records",
        ["status", "expires_at"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("ix_training_records_status_expires", table_name="training_records")
    op.drop_index("ix_training_records_course_id", table_name="training_records")
    op.drop_index("ix_training_records_user_id", table_name="training_records")
    op.drop_table("training_records")
    op.drop_table("training_courses")
    op.drop_table("compliance_scores")
    op.drop_index("ix_legal_requirements_standard", table_name="legal_requirements")
    op.drop_table("legal_requirements")
    op.drop_index("ix_incidents_standard", table_name="incidents")
    op.drop_table("incidents")
    op.drop_index("ix_actions_standard_status", table_name="actions")
    op.drop_index("ix_actions_status_due_date", table_name="actions")
    op.drop_index("ix_actions_standard", table_name="actions")
    op.drop_table("actions")
    op.drop_index("ix_objective_progress_objective_id", table_name="objective_progress")
    op.drop_table("objective_progress")
    op.drop_index("ix_objectives_standard", table_name="objectives")
    op.drop_table("objectives")
    op.drop_table("quality_metrics")
    op.drop_table("safety_metrics")
    op.drop_table("environmental_aspects")
    op.drop_table("process_risks")
    op.drop_index("ix_risks_standard_status", table_name="risks")
    op.drop_index("ix_risks_standard", table_name="risks")
    op.drop_table("risks")
    op.drop_table("users")
