"""POST /v1/assessments/{assessment_id}/review - record an auditor's review decision"""

import uuid
import logging
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from aid_risk_gateway.api.v1.evaluate import to_assessment_response
from aid_risk_gateway.api.v1.schemas import AssessmentResponse, ReviewRequest
from aid_risk_gateway.api.dependencies import get_request_id, get_risk_engine
from aid_risk_gateway.infrastructure.database.session import get_db
from aid_risk_gateway.infrastructure.database.repositories import AssessmentRepository
from aid_risk_gateway.services.risk_engine import RiskEngine
from aid_risk_gateway.domain.models import Transaction
from aid_risk_gateway.infrastructure.observability.metrics import record_assessment
from aid_risk_gateway.utils.date_utils import ensure_utc

router = APIRouter()


@router.post("/assessments/{assessment_id}/review", response_model=AssessmentResponse)
async def review_assessment(
    assessment_id: str,
    request_body: ReviewRequest,
    request: Request,
    db: Session = Depends(get_db),
    engine: RiskEngine = Depends(get_risk_engine),
):
    """
    Re-score a previously assessed transaction and attach the reviewer's decision.

    The stored assessment is never modified: the re-score is saved as a new
    row that supersedes it. The re-score uses the original evaluation instant,
    and the ledger entry for the transaction itself (matched by tx_hash) is
    left out of its own history.
    """
    request_id = get_request_id(request)

    try:
        original_id = uuid.UUID(assessment_id)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid assessment ID format")

    repo = AssessmentRepository(db)
    original = repo.get_assessment_by_id(original_id)

    if not original:
        raise HTTPException(status_code=404, detail="Assessment not found")

    try:
        candidate = Transaction(
            sender=original.sender,
            recipient=original.recipient,
            category=original.category,
            amount=int(original.amount),
            timestamp=ensure_utc(original.evaluated_at),
            status="pending",
            tx_hash=original.tx_hash,
        )
        # Re-score as of the original evaluation so windows match what was first scored
        assessment = await engine.evaluate(candidate, now=candidate.timestamp)

        record = repo.create_assessment(
            candidate,
            assessment,
            supersedes_id=original.id,
            reviewed_by=request_body.reviewer,
            review_decision=request_body.decision,
            review_notes=request_body.notes,
        )
        db.commit()
        record_assessment(assessment)

        logging.info(
            "Assessment reviewed",
            extra={
                "request_id": request_id,
                "assessment_id": str(original.id),
                "review_assessment_id": str(record.id),
                "reviewer": request_body.reviewer,
                "review_decision": request_body.decision,
                "risk_level": assessment.risk_level.value,
            },
        )
        return to_assessment_response(record)

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")
