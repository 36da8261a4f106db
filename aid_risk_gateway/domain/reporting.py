"""Fraud reporting - read-only aggregation over persisted assessments"""

from collections import Counter
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List

from aid_risk_gateway.domain.models import AssessedTransaction, RiskLevel
from aid_risk_gateway.utils.date_utils import ensure_utc, generate_date_range

DISTRIBUTION_LEVELS = (
    RiskLevel.CRITICAL,
    RiskLevel.HIGH,
    RiskLevel.MEDIUM,
    RiskLevel.LOW,
    RiskLevel.MINIMAL,
)


@dataclass
class CategoryFraudStats:
    category: str
    flagged_count: int = 0
    flagged_amount: int = 0  # base units
    risk_distribution: Dict[str, int] = field(
        default_factory=lambda: {level.value: 0 for level in DISTRIBUTION_LEVELS}
    )


@dataclass
class PatternCount:
    pattern: str
    count: int


@dataclass
class TrendPoint:
    day: date
    count: int


@dataclass
class FraudReport:
    window_days: int
    total_flagged: int
    scoring_gaps: int
    by_category: List[CategoryFraudStats]
    top_categories: List[str]
    top_patterns: List[PatternCount]
    trend: List[TrendPoint]
    generated_at: datetime


def build_fraud_report(
    records: Iterable[AssessedTransaction],
    now: datetime,
    window_days: int = 30,
    top_n: int = 5,
) -> FraudReport:
    """
    Group flagged assessments inside the trailing window.

    Flagged = at least one finding and a known risk level. Assessments with level
    "unknown" are counted as scoring gaps, never as flags. An empty window gives a
    zero-valued report with a zero-filled trend.

    The trend runs from the day containing `now - window_days` through today, both
    inclusive, so it has window_days + 1 points; the first and last are partial days.
    """
    now = ensure_utc(now)
    since = now - timedelta(days=window_days)

    stats: Dict[str, CategoryFraudStats] = {}
    patterns: Counter = Counter()
    per_day: Counter = Counter()
    total_flagged = 0
    scoring_gaps = 0

    for record in records:
        evaluated_at = ensure_utc(record.evaluated_at)
        if not since <= evaluated_at <= now:
            continue

        if record.risk_level == RiskLevel.UNKNOWN:
            scoring_gaps += 1
            continue
        if not record.is_flagged:
            continue

        total_flagged += 1
        category = stats.setdefault(record.category, CategoryFraudStats(category=record.category))
        category.flagged_count += 1
        category.flagged_amount += record.amount
        category.risk_distribution[record.risk_level.value] += 1

        patterns.update(record.patterns)
        per_day[evaluated_at.date()] += 1

    # Most flagged first; ties by name for stable output
    ranked = sorted(stats.values(), key=lambda s: (-s.flagged_count, s.category))

    trend = [TrendPoint(day=d, count=per_day[d]) for d in generate_date_range(since.date(), now.date())]

    return FraudReport(
        window_days=window_days,
        total_flagged=total_flagged,
        scoring_gaps=scoring_gaps,
        by_category=ranked,
        top_categories=[s.category for s in ranked[:top_n]],
        top_patterns=[
            PatternCount(pattern=p, count=c)
            for p, c in sorted(patterns.items(), key=lambda item: (-item[1], item[0]))[:top_n]
        ],
        trend=trend,
        generated_at=now,
    )
