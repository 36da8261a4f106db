"""POST /v1/evaluate - spending risk evaluation endpoint"""

import time
import logging
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from aid_risk_gateway.api.v1.schemas import AssessmentResponse, EvaluateRequest, FindingSchema
from aid_risk_gateway.api.dependencies import get_request_id, get_risk_engine
from aid_risk_gateway.infrastructure.database.session import get_db
from aid_risk_gateway.infrastructure.database.models import RiskAssessmentRecord
from aid_risk_gateway.infrastructure.database.repositories import AssessmentRepository
from aid_risk_gateway.services.risk_engine import RiskEngine
from aid_risk_gateway.domain.models import Transaction
from aid_risk_gateway.domain.exceptions import InvalidTransactionDataError
from aid_risk_gateway.infrastructure.observability.metrics import record_assessment
from aid_risk_gateway.infrastructure.observability.logging import log_assessment
from aid_risk_gateway.utils.date_utils import ensure_utc

router = APIRouter()


def to_assessment_response(record: RiskAssessmentRecord) -> AssessmentResponse:
    """Render a stored assessment"""
    return AssessmentResponse(
        assessment_id=str(record.id),
        risk_level=record.risk_level,
        total_score=record.total_score,
        requires_review=record.requires_review,
        action=record.action,
        findings=[FindingSchema(**f) for f in record.findings],
        evaluated_at=ensure_utc(record.evaluated_at).isoformat(),
        supersedes_id=str(record.supersedes_id) if record.supersedes_id else None,
    )


@router.post("/evaluate", response_model=AssessmentResponse)
async def evaluate_transaction(
    request_body: EvaluateRequest,
    request: Request,
    db: Session = Depends(get_db),
    engine: RiskEngine = Depends(get_risk_engine),
):
    """
    Score a candidate spending transaction before it is recorded.

    Flow:
    1. Validate and build the candidate transaction
    2. Evaluate risk (history + limits fetched concurrently; degrades instead of failing)
    3. Persist the assessment to the audit table
    4. Return level, score, findings and the recommended action
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        # 1. Build candidate; evaluation time is captured inside the engine
        candidate = Transaction(
            sender=request_body.sender,
            recipient=request_body.recipient,
            category=request_body.category.strip(),
            amount=request_body.amount,
            timestamp=engine.clock(),
            status="pending",
            tx_hash=request_body.tx_hash,
        )
    except InvalidTransactionDataError as e:
        logging.warning(f"Invalid candidate transaction: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    try:
        # 2. Score (never raises; collaborator outages come back as risk_level=unknown)
        assessment = await engine.evaluate(candidate, now=candidate.timestamp)

        # 3. Persist
        record = AssessmentRepository(db).create_assessment(candidate, assessment)
        db.commit()

        # Record metrics and logs
        duration_ms = (time.time() - start_time) * 1000
        record_assessment(assessment)
        log_assessment(request_id, candidate, assessment, duration_ms)

        return to_assessment_response(record)

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")
