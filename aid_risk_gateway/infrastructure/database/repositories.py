"""Data access layer for persisted risk assessments"""

import uuid
from datetime import datetime
from typing import List, Optional
from sqlalchemy.orm import Session
from aid_risk_gateway.infrastructure.database.models import RiskAssessmentRecord
from aid_risk_gateway.domain.models import AssessedTransaction, RiskAssessment, RiskLevel, Transaction


class AssessmentRepository:
    """Repository for risk assessments"""

    def __init__(self, db: Session):
        self.db = db

    def create_assessment(
        self,
        candidate: Transaction,
        assessment: RiskAssessment,
        supersedes_id: Optional[uuid.UUID] = None,
        reviewed_by: Optional[str] = None,
        review_decision: Optional[str] = None,
        review_notes: Optional[str] = None,
    ) -> RiskAssessmentRecord:
        """Persist an assessment alongside the transaction it scored"""
        record = RiskAssessmentRecord(
            tx_hash=candidate.tx_hash,
            sender=candidate.sender,
            recipient=candidate.recipient,
            category=candidate.category,
            amount=str(candidate.amount),
            risk_level=assessment.risk_level.value,
            total_score=assessment.total_score,
            requires_review=assessment.requires_review,
            action=assessment.action.value,
            findings=[f.to_dict() for f in assessment.findings],
            evaluated_at=assessment.evaluated_at,
            supersedes_id=supersedes_id,
            reviewed_by=reviewed_by,
            review_decision=review_decision,
            review_notes=review_notes,
        )
        self.db.add(record)
        self.db.flush()  # Get ID without committing
        return record

    def get_assessment_by_id(self, assessment_id: uuid.UUID) -> Optional[RiskAssessmentRecord]:
        """Fetch a single assessment"""
        return (
            self.db.query(RiskAssessmentRecord)
            .filter(RiskAssessmentRecord.id == assessment_id)
            .first()
        )

    def get_assessments_by_sender(self, sender: str, limit: int = 20) -> List[RiskAssessmentRecord]:
        """Fetch recent assessments for a beneficiary"""
        return (
            self.db.query(RiskAssessmentRecord)
            .filter(RiskAssessmentRecord.sender == sender)
            .order_by(RiskAssessmentRecord.evaluated_at.desc())
            .limit(limit)
            .all()
        )

    def get_spend_time_assessments_since(self, since: datetime) -> List[AssessedTransaction]:
        """
        Spend-time assessments (not review rows) evaluated at or after `since`,
        shaped for the fraud report.
        """
        records = (
            self.db.query(RiskAssessmentRecord)
            .filter(RiskAssessmentRecord.evaluated_at >= since)
            .filter(RiskAssessmentRecord.supersedes_id.is_(None))
            .order_by(RiskAssessmentRecord.evaluated_at.asc())
            .all()
        )
        return [to_assessed_transaction(r) for r in records]


def to_assessed_transaction(record: RiskAssessmentRecord) -> AssessedTransaction:
    """Reporting view of a stored assessment"""
    return AssessedTransaction(
        category=record.category,
        amount=int(record.amount),
        risk_level=RiskLevel(record.risk_level),
        patterns=tuple(f["pattern"] for f in record.findings or []),
        evaluated_at=record.evaluated_at,
    )
