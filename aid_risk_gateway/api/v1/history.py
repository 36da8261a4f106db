"""GET /v1/assessments - Fetch a beneficiary's assessment history"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from aid_risk_gateway.api.v1.schemas import HistoryResponse, HistoryItem
from aid_risk_gateway.infrastructure.database.session import get_db
from aid_risk_gateway.infrastructure.database.repositories import AssessmentRepository
from aid_risk_gateway.utils.date_utils import ensure_utc

router = APIRouter()


@router.get("/assessments", response_model=HistoryResponse)
def get_assessment_history(
    sender: str = Query(..., min_length=1, description="Beneficiary address"),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
):
    """
    Retrieve recent assessments for a beneficiary, review rows included.

    Returns:
        Assessments newest first, with level, score and recommended action
    """
    assessments = AssessmentRepository(db).get_assessments_by_sender(sender, limit=limit)

    history_items = [
        HistoryItem(
            assessment_id=str(a.id),
            category=a.category,
            amount=a.amount,
            risk_level=a.risk_level,
            total_score=a.total_score,
            action=a.action,
            evaluated_at=ensure_utc(a.evaluated_at).isoformat(),
            review_decision=a.review_decision,
        )
        for a in assessments
    ]

    return HistoryResponse(sender=sender, assessments=history_items)
