"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import asdict, dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Literal, Optional, Tuple, Union

from aid_risk_gateway.domain.exceptions import InvalidTransactionDataError


@dataclass(frozen=True)
class Transaction:
    """Spending transaction as recorded (or proposed) on the aid ledger"""

    sender: str
    recipient: str
    category: str
    amount: int  # base units, 18 decimal places
    timestamp: datetime
    status: str = "confirmed"  # "pending" | "confirmed" | "failed"
    tx_hash: Optional[str] = None

    def __post_init__(self) -> None:
        if self.amount < 0:
            raise InvalidTransactionDataError(f"Amount must be non-negative, got {self.amount}")
        if not self.category or not self.category.strip():
            raise InvalidTransactionDataError("Category is required for spending transactions")


@dataclass(frozen=True)
class CategoryLimit:
    """Configured spending ceilings for one aid category (base units)"""

    category: str
    daily_limit: int
    weekly_limit: int
    monthly_limit: int
    per_transaction_limit: int
    emergency_override: bool = False
    override_expiry: Optional[datetime] = None

    def __post_init__(self) -> None:
        limits = (self.daily_limit, self.weekly_limit, self.monthly_limit, self.per_transaction_limit)
        if any(limit < 0 for limit in limits):
            raise InvalidTransactionDataError(f"Limits for {self.category} must be non-negative")

    def override_active(self, now: datetime) -> bool:
        """Emergency override applies while set and not yet expired"""
        if not self.emergency_override:
            return False
        if self.override_expiry is None:
            return True
        return now < self.override_expiry


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class RiskLevel(str, Enum):
    MINIMAL = "minimal"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"
    UNKNOWN = "unknown"  # scoring failed; a gap, not a flag


class Action(str, Enum):
    """Recommendation handed back to the spending-validation caller"""

    ALLOW = "allow"
    FLAG = "flag"
    REVIEW = "review"
    BLOCK = "block"


class Pattern(str, Enum):
    """Closed set of finding kinds"""

    HIGH_FREQUENCY = "high_frequency"
    UNUSUAL_AMOUNT = "unusual_amount"
    CROSS_CATEGORY_VELOCITY = "cross_category_velocity"
    VENDOR_CONCENTRATION = "vendor_concentration"
    TIME_PATTERN_ANOMALY = "time_pattern_anomaly"
    CATEGORY_LIMIT_VIOLATION = "category_limit_violation"
    BEHAVIOR_ANOMALY = "behavior_anomaly"
    ANALYSIS_ERROR = "analysis_error"


# Evidence records: one typed payload per pattern


@dataclass(frozen=True)
class HighFrequencyEvidence:
    count: int
    threshold: int
    window_hours: int


@dataclass(frozen=True)
class UnusualAmountEvidence:
    ratio: float
    comparison: Literal["personal_history", "category_average"]
    baseline_units: str  # Decimal rendered as string to stay exact


@dataclass(frozen=True)
class CrossCategoryEvidence:
    categories: Tuple[str, ...]
    threshold: int
    window_hours: int


@dataclass(frozen=True)
class VendorConcentrationEvidence:
    recipient: str
    fraction: float
    threshold: float
    vendor_count: int


@dataclass(frozen=True)
class TimePatternEvidence:
    current_hour: int
    hour_share: float
    sample_size: int


@dataclass(frozen=True)
class LimitViolationEvidence:
    limit_type: str
    limit: int
    spent_today: int
    overflow: int


@dataclass(frozen=True)
class BehaviorEvidence:
    anomaly_type: Literal["new_category", "frequency_anomaly"]
    history_size: int
    avg_days_between: Optional[float] = None
    days_since_last: Optional[float] = None


@dataclass(frozen=True)
class AnalysisErrorEvidence:
    error_type: str
    error: str


Evidence = Union[
    HighFrequencyEvidence,
    UnusualAmountEvidence,
    CrossCategoryEvidence,
    VendorConcentrationEvidence,
    TimePatternEvidence,
    LimitViolationEvidence,
    BehaviorEvidence,
    AnalysisErrorEvidence,
]


@dataclass(frozen=True)
class DetectorFinding:
    """Output of one detector that triggered"""

    pattern: Pattern
    severity: Severity
    score: float
    description: str
    evidence: Evidence

    def __post_init__(self) -> None:
        if self.score < 0:
            raise ValueError(f"Score contribution must be non-negative, got {self.score}")

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready representation for persistence and API responses"""
        evidence = asdict(self.evidence)
        if "categories" in evidence:
            evidence["categories"] = list(evidence["categories"])
        return {
            "pattern": self.pattern.value,
            "severity": self.severity.value,
            "score": self.score,
            "description": self.description,
            "metadata": evidence,
        }


@dataclass(frozen=True)
class RiskAssessment:
    """Output of one evaluation; never mutated once created"""

    risk_level: RiskLevel
    total_score: float
    findings: Tuple[DetectorFinding, ...]
    requires_review: bool
    evaluated_at: datetime
    action: Action = Action.ALLOW

    @property
    def is_flagged(self) -> bool:
        return bool(self.findings) and self.risk_level != RiskLevel.UNKNOWN


@dataclass(frozen=True)
class AssessedTransaction:
    """A persisted assessment joined with the transaction it scored, for reporting"""

    category: str
    amount: int
    risk_level: RiskLevel
    patterns: Tuple[str, ...]
    evaluated_at: datetime

    @property
    def is_flagged(self) -> bool:
        return bool(self.patterns) and self.risk_level != RiskLevel.UNKNOWN
