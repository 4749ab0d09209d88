from __future__ import annotations

from datetime import datetime
from uuid import uuid4

from sqlalchemy import (
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def _new_id() -> str:
    return uuid4().hex


class Base(DeclarativeBase):
    pass


class User(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=_new_id)
    email: Mapped[str | None] = mapped_column(String, nullable=True)
    # Role and department drive training requirement resolution.
    role: Mapped[str] = mapped_column(String)
    department: Mapped[str | None] = mapped_column(String, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())


class Risk(Base):
    __tablename__ = "risks"
    __table_args__ = (
        Index("ix_risks_standard_status", "standard", "status"),
    )

    id: Mapped[str] = mapped_column(String, primary_key=True, default=_new_id)
    standard: Mapped[str] = mapped_column(String, index=True)
    title: Mapped[str] = mapped_column(String)
    status: Mapped[str] = mapped_column(String, default="ACTIVE", nullable=False)
    likelihood: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    severity: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    detectability: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    # Derived on every write that touches the three factors.
    risk_score: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    risk_level: Mapped[str] = mapped_column(String, default="LOW", nullable=False)
    control_effectiveness: Mapped[int | None] = mapped_column(Integer, nullable=True)
    residual_score: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )


class ProcessRisk(Base):
    __tablename__ = "process_risks"

    # Quality process risks (FMEA style) share the L x S x D scorer with generic risks.
    id: Mapped[str] = mapped_column(String, primary_key=True, default=_new_id)
    process_name: Mapped[str] = mapped_column(String)
    failure_mode: Mapped[str] = mapped_column(String)
    likelihood: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    severity: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    detectability: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    risk_score: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    risk_level: Mapped[str] = mapped_column(String, default="LOW", nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())


class EnvironmentalAspect(Base):
    __tablename__ = "environmental_aspects"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=_new_id)
    title: Mapped[str] = mapped_column(String)
    aspect_type: Mapped[str | None] = mapped_column(String, nullable=True)
    scale: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    frequency: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    legal_impact: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    reversibility: Mapped[int | None] = mapped_column(Integer, nullable=True)
    stakeholder_concern: Mapped[int | None] = mapped_column(Integer, nullable=True)
    significance_score: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    significance_level: Mapped[str] = mapped_column(String, default="NEGLIGIBLE", nullable=False)
    is_significant: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())


class SafetyMetric(Base):
    __tablename__ = "safety_metrics"
    __table_args__ = (
        UniqueConstraint("year", "month", name="uq_safety_metrics_period"),
    )

    id: Mapped[str] = mapped_column(String, primary_key=True, default=_new_id)
    year: Mapped[int] = mapped_column(Integer)
    month: Mapped[int] = mapped_column(Integer)
    hours_worked: Mapped[float] = mapped_column(Float, default=0, nullable=False)
    lost_time_injuries: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    total_recordable_injuries: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    days_lost: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    near_misses: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    first_aid_cases: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    ltifr: Mapped[float] = mapped_column(Float, default=0, nullable=False)
    trir: Mapped[float] = mapped_column(Float, default=0, nullable=False)
    severity_rate: Mapped[float] = mapped_column(Float, default=0, nullable=False)
    near_miss_rate: Mapped[float] = mapped_column(Float, default=0, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )


class QualityMetric(Base):
    __tablename__ = "quality_metrics"
    __table_args__ = (
        UniqueConstraint("year", "month", name="uq_quality_metrics_period"),
    )

    id: Mapped[str] = mapped_column(String, primary_key=True, default=_new_id)
    year: Mapped[int] = mapped_column(Integer)
    month: Mapped[int] = mapped_column(Integer)
    prevention_cost: Mapped[float] = mapped_column(Float, default=0, nullable=False)
    appraisal_cost: Mapped[float] = mapped_column(Float, default=0, nullable=False)
    internal_failure_cost: Mapped[float] = mapped_column(Float, default=0, nullable=False)
    external_failure_cost: Mapped[float] = mapped_column(Float, default=0, nullable=False)
    total_units: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    defective_units: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    defect_opportunities: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    total_copq: Mapped[float] = mapped_column(Float, default=0, nullable=False)
    dpmo: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    first_pass_yield: Mapped[float] = mapped_column(Float, default=0, nullable=False)
    process_sigma: Mapped[float] = mapped_column(Float, default=0, nullable=False)
    defect_rate: Mapped[float] = mapped_column(Float, default=0, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )


class Objective(Base):
    __tablename__ = "objectives"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=_new_id)
    standard: Mapped[str] = mapped_column(String, index=True)
    title: Mapped[str] = mapped_column(String)
    unit: Mapped[str | None] = mapped_column(String, nullable=True)
    baseline_value: Mapped[float | None] = mapped_column(Float, nullable=True)
    target_value: Mapped[float | None] = mapped_column(Float, nullable=True)
    current_value: Mapped[float | None] = mapped_column(Float, nullable=True)
    progress_percent: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    status: Mapped[str] = mapped_column(String, default="NOT_STARTED", nullable=False)
    start_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    target_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())


class ObjectiveProgress(Base):
    __tablename__ = "objective_progress"

    # Append-only history; rows are never updated after insert.
    id: Mapped[str] = mapped_column(String, primary_key=True, default=_new_id)
    objective_id: Mapped[str] = mapped_column(String, ForeignKey("objectives.id"), index=True)
    value: Mapped[float] = mapped_column(Float)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    recorded_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))


class Action(Base):
    __tablename__ = "actions"
    __table_args__ = (
        Index("ix_actions_status_due_date", "status", "due_date"),
        Index("ix_actions_standard_status", "standard", "status"),
    )

    id: Mapped[str] = mapped_column(String, primary_key=True, default=_new_id)
    standard: Mapped[str] = mapped_column(String, index=True)
    title: Mapped[str] = mapped_column(String)
    action_type: Mapped[str] = mapped_column(String, default="CORRECTIVE", nullable=False)
    priority: Mapped[str] = mapped_column(String, default="MEDIUM", nullable=False)
    status: Mapped[str] = mapped_column(String, default="OPEN", nullable=False)
    due_date: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    verified_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    verification_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    effectiveness_rating: Mapped[int | None] = mapped_column(Integer, nullable=True)
    objective_id: Mapped[str | None] = mapped_column(String, ForeignKey("objectives.id"), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())


class Incident(Base):
    __tablename__ = "incidents"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=_new_id)
    standard: Mapped[str] = mapped_column(String, index=True)
    title: Mapped[str] = mapped_column(String)
    status: Mapped[str] = mapped_column(String, default="REPORTED", nullable=False)
    date_occurred: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


class LegalRequirement(Base):
    __tablename__ = "legal_requirements"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=_new_id)
    standard: Mapped[str] = mapped_column(String, index=True)
    title: Mapped[str] = mapped_column(String)
    compliance_status: Mapped[str] = mapped_column(String, default="NOT_ASSESSED", nullable=False)


class ComplianceScore(Base):
    __tablename__ = "compliance_scores"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=_new_id)
    # One row per standard; recalculation upserts on this key.
    standard: Mapped[str] = mapped_column(String, unique=True)
    risk_score: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    incident_score: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    legal_score: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    objective_score: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    action_score: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    overall_score: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    total_items: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    compliant_items: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    calculated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))


class TrainingCourse(Base):
    __tablename__ = "training_courses"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=_new_id)
    standard: Mapped[str | None] = mapped_column(String, nullable=True)
    title: Mapped[str] = mapped_column(String)
    # Comma-delimited role / department lists; both empty means required for everyone.
    required_for_roles: Mapped[str | None] = mapped_column(String, nullable=True)
    required_for_departments: Mapped[str | None] = mapped_column(String, nullable=True)
    validity_months: Mapped[int | None] = mapped_column(Integer, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)


class TrainingRecord(Base):
    __tablename__ = "training_records"
    __table_args__ = (
        Index("ix_training_records_status_expires", "status", "expires_at"),
    )

    id: Mapped[str] = mapped_column(String, primary_key=True, default=_new_id)
    user_id: Mapped[str] = mapped_column(String, ForeignKey("users.id"), index=True)
    course_id: Mapped[str] = mapped_column(String, ForeignKey("training_courses.id"), index=True)
    status: Mapped[str] = mapped_column(String, default="NOT_STARTED", nullable=False)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
