"""GET /v1/fraud-report - flagged-transaction statistics for auditors"""

from datetime import datetime, timedelta
from typing import Callable
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from aid_risk_gateway.api.v1.schemas import (
    CategoryStatsSchema,
    FraudReportResponse,
    PatternCountSchema,
    TrendPointSchema,
)
from aid_risk_gateway.api.dependencies import get_clock
from aid_risk_gateway.config import settings
from aid_risk_gateway.infrastructure.database.session import get_db
from aid_risk_gateway.infrastructure.database.repositories import AssessmentRepository
from aid_risk_gateway.domain.reporting import build_fraud_report
from aid_risk_gateway.utils.amounts import format_units

router = APIRouter()


@router.get("/fraud-report", response_model=FraudReportResponse)
def get_fraud_report(
    window_days: int = Query(settings.report_window_days, ge=1, le=365),
    top_n: int = Query(settings.report_top_n, ge=1, le=50),
    db: Session = Depends(get_db),
    clock: Callable[[], datetime] = Depends(get_clock),
):
    """
    Summarize flagged spending over a trailing window.

    Returns:
        Totals, per-category breakdown, top categories and patterns, and a daily trend
    """
    now = clock()
    records = AssessmentRepository(db).get_spend_time_assessments_since(now - timedelta(days=window_days))
    report = build_fraud_report(records, now=now, window_days=window_days, top_n=top_n)

    return FraudReportResponse(
        window_days=report.window_days,
        total_flagged=report.total_flagged,
        scoring_gaps=report.scoring_gaps,
        by_category=[
            CategoryStatsSchema(
                category=s.category,
                flagged_count=s.flagged_count,
                flagged_amount=str(s.flagged_amount),
                flagged_amount_units=format_units(s.flagged_amount),
                risk_distribution=s.risk_distribution,
            )
            for s in report.by_category
        ],
        top_categories=report.top_categories,
        top_patterns=[PatternCountSchema(pattern=p.pattern, count=p.count) for p in report.top_patterns],
        trend=[TrendPointSchema(date=t.day, count=t.count) for t in report.trend],
        generated_at=report.generated_at.isoformat(),
    )
