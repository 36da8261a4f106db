"""Risk aggregation - turns detector findings into a single risk assessment"""

from datetime import datetime
from typing import Sequence

from aid_risk_gateway.domain.detectors import DetectionContext, run_detectors
from aid_risk_gateway.domain.models import (
    Action,
    AnalysisErrorEvidence,
    DetectorFinding,
    Pattern,
    RiskAssessment,
    RiskLevel,
    Severity,
)

REVIEW_LEVELS = frozenset({RiskLevel.HIGH, RiskLevel.CRITICAL})


def calculate_total_score(findings: Sequence[DetectorFinding]) -> float:
    """Sum of score contributions; detectors that did not trigger contribute nothing"""
    return sum((f.score for f in findings), 0.0)


def classify_risk_level(total_score: float) -> RiskLevel:
    """
    Map a summed score to a risk level.

    Score bands (lower bound inclusive):
    - 50+:    critical
    - 30-50:  high
    - 15-30:  medium
    - 5-15:   low
    - 0-5:    minimal
    """
    if total_score >= 50:
        return RiskLevel.CRITICAL
    elif total_score >= 30:
        return RiskLevel.HIGH
    elif total_score >= 15:
        return RiskLevel.MEDIUM
    elif total_score >= 5:
        return RiskLevel.LOW
    else:
        return RiskLevel.MINIMAL


def recommend_action(risk_level: RiskLevel) -> Action:
    """
    Decision handed back to the spending path.

    An unscored transaction is allowed: a scoring outage must not block aid.
    """
    if risk_level == RiskLevel.CRITICAL:
        return Action.BLOCK
    elif risk_level == RiskLevel.HIGH:
        return Action.REVIEW
    elif risk_level == RiskLevel.MEDIUM:
        return Action.FLAG
    else:
        return Action.ALLOW


def aggregate_findings(findings: Sequence[DetectorFinding], evaluated_at: datetime) -> RiskAssessment:
    """Build the assessment for a completed evaluation"""
    total_score = calculate_total_score(findings)
    risk_level = classify_risk_level(total_score)

    return RiskAssessment(
        risk_level=risk_level,
        total_score=total_score,
        findings=tuple(findings),
        requires_review=risk_level in REVIEW_LEVELS,
        evaluated_at=evaluated_at,
        action=recommend_action(risk_level),
    )


def degraded_assessment(error: BaseException, evaluated_at: datetime) -> RiskAssessment:
    """Assessment returned when scoring could not complete; a gap, never a block"""
    finding = DetectorFinding(
        pattern=Pattern.ANALYSIS_ERROR,
        severity=Severity.LOW,
        score=0.0,
        description="Unable to complete fraud analysis",
        evidence=AnalysisErrorEvidence(error_type=type(error).__name__, error=str(error)),
    )
    return RiskAssessment(
        risk_level=RiskLevel.UNKNOWN,
        total_score=0.0,
        findings=(finding,),
        requires_review=False,
        evaluated_at=evaluated_at,
        action=recommend_action(RiskLevel.UNKNOWN),
    )


def assess(ctx: DetectionContext) -> RiskAssessment:
    """
    Main entry point for a prepared snapshot: run all detectors and aggregate.

    Returns complete RiskAssessment with level, score, findings and review flag.
    """
    return aggregate_findings(run_detectors(ctx), evaluated_at=ctx.now)
