"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, Field
from datetime import date
from typing import Any, Dict, List, Literal, Optional


class EvaluateRequest(BaseModel):
    """Request body for POST /v1/evaluate"""

    sender: str = Field(..., min_length=1, description="Beneficiary address")
    recipient: str = Field(..., min_length=1, description="Vendor address")
    category: str = Field(..., min_length=1, pattern=r"\S", description="Aid spending category")
    amount: int = Field(..., ge=0, description="Amount in base units (18 decimals); numeric strings accepted")
    tx_hash: Optional[str] = Field(None, description="Ledger transaction hash, when already known")


class FindingSchema(BaseModel):
    """Single detector finding"""

    pattern: str
    severity: str
    score: float
    description: str
    metadata: Dict[str, Any]


class AssessmentResponse(BaseModel):
    """Response for POST /v1/evaluate and POST /v1/assessments/{id}/review"""

    assessment_id: str
    risk_level: str
    total_score: float
    requires_review: bool
    action: str
    findings: List[FindingSchema]
    evaluated_at: str
    supersedes_id: Optional[str] = None


class ReviewRequest(BaseModel):
    """Request body for POST /v1/assessments/{id}/review"""

    reviewer: str = Field(..., min_length=1, description="Reviewer address")
    decision: Literal["approved", "rejected"]
    notes: str = ""


class HistoryItem(BaseModel):
    """Single assessment in a beneficiary's history"""

    assessment_id: str
    category: str
    amount: str
    risk_level: str
    total_score: float
    action: str
    evaluated_at: str
    review_decision: Optional[str] = None


class HistoryResponse(BaseModel):
    """Response for GET /v1/assessments"""

    sender: str
    assessments: List[HistoryItem]


class CategoryStatsSchema(BaseModel):
    category: str
    flagged_count: int
    flagged_amount: str  # base units
    flagged_amount_units: str  # human units, presentation only
    risk_distribution: Dict[str, int]


class PatternCountSchema(BaseModel):
    pattern: str
    count: int


class TrendPointSchema(BaseModel):
    date: date
    count: int


class FraudReportResponse(BaseModel):
    """Response for GET /v1/fraud-report"""

    window_days: int
    total_flagged: int
    scoring_gaps: int
    by_category: List[CategoryStatsSchema]
    top_categories: List[str]
    top_patterns: List[PatternCountSchema]
    trend: List[TrendPointSchema]
    generated_at: str
