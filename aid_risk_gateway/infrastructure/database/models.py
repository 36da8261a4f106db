"""SQLAlchemy ORM models for the risk assessment audit table"""

import uuid
from sqlalchemy import Column, String, Boolean, Float, DateTime, Text, JSON, ForeignKey, Uuid
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class RiskAssessmentRecord(Base):
    """
    One assessment of one spending transaction.

    Rows are append-only: a review or re-score inserts a new row that
    points at the assessment it supersedes.
    """

    __tablename__ = "risk_assessment"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    tx_hash = Column(Text, nullable=True, index=True)
    sender = Column(Text, nullable=False, index=True)
    recipient = Column(Text, nullable=False)
    category = Column(Text, nullable=False, index=True)
    amount = Column(String(80), nullable=False)  # base-unit integer as text, beyond BIGINT range
    risk_level = Column(Text, nullable=False, index=True)
    total_score = Column(Float, nullable=False)
    requires_review = Column(Boolean, nullable=False)
    action = Column(Text, nullable=False)
    findings = Column(JSON, nullable=False)
    evaluated_at = Column(DateTime(timezone=True), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    # Review trail
    supersedes_id = Column(Uuid(as_uuid=True), ForeignKey("risk_assessment.id"), nullable=True)
    reviewed_by = Column(Text, nullable=True)
    review_decision = Column(Text, nullable=True)  # approved | rejected
    review_notes = Column(Text, nullable=True)
