"""Prometheus metrics for monitoring risk levels, detector hit rates, and collaborator health"""

from prometheus_client import Counter, Histogram

from aid_risk_gateway.domain.models import RiskAssessment

# Assessment metrics
assessment_counter = Counter(
    "aid_risk_assessment_total",
    "Total spending risk assessments made",
    ["risk_level"],  # minimal | low | medium | high | critical | unknown
)

finding_counter = Counter(
    "aid_risk_finding_total",
    "Detector findings by pattern",
    ["pattern"],
)

scoring_failure_counter = Counter(
    "aid_risk_scoring_failures_total",
    "Evaluations that fell back to a degraded assessment",
)

evaluation_latency_histogram = Histogram(
    "aid_risk_evaluation_seconds",
    "Time to collect history and score a candidate transaction",
    buckets=[0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5],
)

# Ledger collaborator metrics
ledger_fetch_failures_counter = Counter(
    "ledger_fetch_failures_total",
    "Failed ledger API calls",
    ["endpoint"],  # transactions | category_limits
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_assessment(assessment: RiskAssessment) -> None:
    """Record assessment metrics for monitoring risk distribution and detector hit rates"""
    assessment_counter.labels(risk_level=assessment.risk_level.value).inc()

    for finding in assessment.findings:
        finding_counter.labels(pattern=finding.pattern.value).inc()
