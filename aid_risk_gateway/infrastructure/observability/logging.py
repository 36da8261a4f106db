"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict

from pythonjsonlogger.json import JsonFormatter

from aid_risk_gateway.domain.models import RiskAssessment, Transaction


class CustomJsonFormatter(JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = "aid-risk-gateway"


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    # JSON handler for stdout
    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_assessment(
    request_id: str,
    candidate: Transaction,
    assessment: RiskAssessment,
    duration_ms: float,
) -> None:
    """Log structured assessment outcome for audit analysis"""
    logging.info(
        "Risk assessment completed",
        extra={
            "request_id": request_id,
            "sender": candidate.sender,
            "category": candidate.category,
            "step": "assessment_complete",
            "risk_level": assessment.risk_level.value,
            "total_score": assessment.total_score,
            "action": assessment.action.value,
            "patterns": [f.pattern.value for f in assessment.findings],
            "duration_ms": duration_ms,
        },
    )


def log_scoring_failure(candidate: Transaction, error: BaseException) -> None:
    """Report a scoring outage; the transaction proceeds unscored"""
    logging.error(
        f"Risk scoring failed, returning degraded assessment: {error}",
        extra={
            "sender": candidate.sender,
            "category": candidate.category,
            "step": "assessment_degraded",
            "error_type": type(error).__name__,
        },
        exc_info=error,
    )
