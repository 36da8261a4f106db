"""Spending anomaly detectors - pure functions over a single history snapshot"""

from collections import Counter
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Callable, List, Optional, Sequence, Tuple

from aid_risk_gateway.domain.models import (
    BehaviorEvidence,
    CategoryLimit,
    CrossCategoryEvidence,
    DetectorFinding,
    HighFrequencyEvidence,
    LimitViolationEvidence,
    Pattern,
    Severity,
    TimePatternEvidence,
    Transaction,
    UnusualAmountEvidence,
    VendorConcentrationEvidence,
)
from aid_risk_gateway.utils.amounts import amount_ratio, mean_units
from aid_risk_gateway.utils.date_utils import days_between, mean_interval_days, start_of_day

# Lookback windows
FREQUENCY_WINDOW = timedelta(hours=1)
RECENT_WINDOW = timedelta(hours=24)
PERSONAL_BASELINE_WINDOW = timedelta(days=30)
BEHAVIOR_WINDOW = timedelta(days=60)
HISTORY_WINDOW = BEHAVIOR_WINDOW  # longest window; the snapshot must cover it

# Trigger thresholds
HIGH_FREQUENCY_COUNT = 10
UNUSUAL_AMOUNT_RATIO = 5.0
CROSS_CATEGORY_COUNT = 3
VENDOR_CONCENTRATION_SHARE = 0.8
TIME_PATTERN_MIN_HISTORY = 5
TIME_PATTERN_HOUR_SHARE = 0.1
BUSINESS_HOURS = range(9, 19)  # 09:00-18:59 UTC
BEHAVIOR_MIN_HISTORY = 10
NEW_CATEGORY_OTHER_COUNT = 5
FREQUENCY_ANOMALY_FACTOR = 0.1


@dataclass(frozen=True)
class DetectionContext:
    """
    Everything a detector may read, fetched once per evaluation.

    `history` holds the sender's confirmed spending over HISTORY_WINDOW across all
    categories; every narrower window is sliced from it relative to `now`, so all
    detectors agree on the same instant.
    """

    candidate: Transaction
    now: datetime
    history: Tuple[Transaction, ...]
    category_average_units: Decimal
    limit: Optional[CategoryLimit] = None

    def window(self, span: timedelta, category: Optional[str] = None) -> List[Transaction]:
        """Sender transactions within `span` before now, optionally for one category"""
        since = self.now - span
        return [
            tx
            for tx in self.history
            if since <= tx.timestamp <= self.now and (category is None or tx.category == category)
        ]


Detector = Callable[[DetectionContext], Optional[DetectorFinding]]


def detect_high_frequency(ctx: DetectionContext) -> Optional[DetectorFinding]:
    """Many same-category purchases within the last hour. Score = min(count * 2, 20)."""
    count = len(ctx.window(FREQUENCY_WINDOW, ctx.candidate.category))
    if count < HIGH_FREQUENCY_COUNT:
        return None

    return DetectorFinding(
        pattern=Pattern.HIGH_FREQUENCY,
        severity=Severity.MEDIUM,
        score=float(min(count * 2, 20)),
        description=(
            f"Unusually high transaction frequency: {count} transactions in "
            f"{ctx.candidate.category} within 1 hour"
        ),
        evidence=HighFrequencyEvidence(count=count, threshold=HIGH_FREQUENCY_COUNT, window_hours=1),
    )


def detect_unusual_amount(ctx: DetectionContext) -> Optional[DetectorFinding]:
    """
    Candidate amount far above the usual spend for its category.

    Two baselines, kept as separate paths:
    - personal_history: sender's own 30-day mean in this category (x2 score, cap 20, high at 8x)
    - category_average: global category mean when the sender has no history (x3 score, cap 25, high at 10x)
    """
    personal = ctx.window(PERSONAL_BASELINE_WINDOW, ctx.candidate.category)

    if personal:
        baseline = mean_units(tx.amount for tx in personal)
        ratio = amount_ratio(ctx.candidate.amount, baseline)
        if ratio < UNUSUAL_AMOUNT_RATIO:
            return None
        comparison = "personal_history"
        severity = Severity.HIGH if ratio >= 8 else Severity.MEDIUM
        score = min(ratio * 2, 20.0)
    else:
        baseline = ctx.category_average_units
        ratio = amount_ratio(ctx.candidate.amount, baseline)
        if ratio < UNUSUAL_AMOUNT_RATIO:
            return None
        comparison = "category_average"
        severity = Severity.HIGH if ratio >= 10 else Severity.MEDIUM
        score = min(ratio * 3, 25.0)

    return DetectorFinding(
        pattern=Pattern.UNUSUAL_AMOUNT,
        severity=severity,
        score=score,
        description=(
            f"Transaction amount is {ratio:.1f}x the {comparison.replace('_', ' ')} "
            f"for {ctx.candidate.category}"
        ),
        evidence=UnusualAmountEvidence(
            ratio=round(ratio, 1),
            comparison=comparison,
            baseline_units=str(baseline),
        ),
    )


def detect_cross_category_velocity(ctx: DetectionContext) -> Optional[DetectorFinding]:
    """Spending across many categories within the last hour. Score = categories * 5."""
    categories = sorted({tx.category for tx in ctx.window(FREQUENCY_WINDOW)})
    if len(categories) < CROSS_CATEGORY_COUNT:
        return None

    return DetectorFinding(
        pattern=Pattern.CROSS_CATEGORY_VELOCITY,
        severity=Severity.HIGH,
        score=float(len(categories) * 5),
        description=f"Rapid spending across {len(categories)} categories within 1 hour",
        evidence=CrossCategoryEvidence(
            categories=tuple(categories),
            threshold=CROSS_CATEGORY_COUNT,
            window_hours=1,
        ),
    )


def detect_vendor_concentration(ctx: DetectionContext) -> Optional[DetectorFinding]:
    """Most of the last 24h of spend (candidate included) going to one vendor. Score = share * 15."""
    recent = ctx.window(RECENT_WINDOW)
    if not recent:
        return None

    spend_by_vendor: Counter = Counter()
    for tx in recent:
        spend_by_vendor[tx.recipient] += tx.amount
    spend_by_vendor[ctx.candidate.recipient] += ctx.candidate.amount

    total = sum(spend_by_vendor.values())
    if total == 0:
        return None

    # Integer amounts until the final share
    fraction = spend_by_vendor[ctx.candidate.recipient] / total
    if fraction < VENDOR_CONCENTRATION_SHARE:
        return None

    return DetectorFinding(
        pattern=Pattern.VENDOR_CONCENTRATION,
        severity=Severity.MEDIUM,
        score=fraction * 15,
        description=f"High concentration of spending with a single vendor: {fraction:.1%}",
        evidence=VendorConcentrationEvidence(
            recipient=ctx.candidate.recipient,
            fraction=round(fraction, 4),
            threshold=VENDOR_CONCENTRATION_SHARE,
            vendor_count=len(spend_by_vendor),
        ),
    )


def detect_time_pattern_anomaly(ctx: DetectionContext) -> Optional[DetectorFinding]:
    """Spending at an hour the sender rarely uses, outside business hours. Flat score 8."""
    recent = ctx.window(RECENT_WINDOW)
    if len(recent) < TIME_PATTERN_MIN_HISTORY:
        return None

    current_hour = ctx.now.hour
    hour_share = sum(1 for tx in recent if tx.timestamp.hour == current_hour) / len(recent)

    if hour_share >= TIME_PATTERN_HOUR_SHARE or current_hour in BUSINESS_HOURS:
        return None

    return DetectorFinding(
        pattern=Pattern.TIME_PATTERN_ANOMALY,
        severity=Severity.LOW,
        score=8.0,
        description=f"Unusual transaction time: {current_hour:02d}:00 UTC is rare for this beneficiary",
        evidence=TimePatternEvidence(
            current_hour=current_hour,
            hour_share=round(hour_share, 4),
            sample_size=len(recent),
        ),
    )


def detect_category_limit_violation(ctx: DetectionContext) -> Optional[DetectorFinding]:
    """Today's confirmed category spend plus the candidate exceeds the daily limit. Flat score 25."""
    limit = ctx.limit
    if limit is None or limit.override_active(ctx.now):
        return None

    midnight = start_of_day(ctx.now)
    spent_today = sum(
        tx.amount
        for tx in ctx.history
        if tx.category == ctx.candidate.category and midnight <= tx.timestamp <= ctx.now
    )
    projected = spent_today + ctx.candidate.amount

    if projected <= limit.daily_limit:
        return None

    return DetectorFinding(
        pattern=Pattern.CATEGORY_LIMIT_VIOLATION,
        severity=Severity.HIGH,
        score=25.0,
        description=f"Transaction would violate daily limit for {ctx.candidate.category}",
        evidence=LimitViolationEvidence(
            limit_type="daily",
            limit=limit.daily_limit,
            spent_today=spent_today,
            overflow=projected - limit.daily_limit,
        ),
    )


def detect_behavior_anomaly(ctx: DetectionContext) -> Optional[DetectorFinding]:
    """
    Departure from the sender's 60-day spending habits.

    new_category (score 10) wins over frequency_anomaly (score 12) when both apply.
    """
    history = ctx.window(BEHAVIOR_WINDOW)
    if len(history) < BEHAVIOR_MIN_HISTORY:
        return None

    same_category = [tx for tx in history if tx.category == ctx.candidate.category]
    other_count = len(history) - len(same_category)

    if not same_category and other_count > NEW_CATEGORY_OTHER_COUNT:
        return DetectorFinding(
            pattern=Pattern.BEHAVIOR_ANOMALY,
            severity=Severity.MEDIUM,
            score=10.0,
            description=f"First time spending in {ctx.candidate.category}",
            evidence=BehaviorEvidence(anomaly_type="new_category", history_size=len(history)),
        )

    avg_days = mean_interval_days([tx.timestamp for tx in same_category])
    if avg_days <= 0:
        return None

    last_seen = max(tx.timestamp for tx in same_category)
    days_since_last = days_between(last_seen, ctx.now)
    if days_since_last >= avg_days * FREQUENCY_ANOMALY_FACTOR:
        return None

    return DetectorFinding(
        pattern=Pattern.BEHAVIOR_ANOMALY,
        severity=Severity.MEDIUM,
        score=12.0,
        description=(
            f"Spending in {ctx.candidate.category} {days_since_last:.1f} days after the last purchase, "
            f"against a usual gap of {avg_days:.1f} days"
        ),
        evidence=BehaviorEvidence(
            anomaly_type="frequency_anomaly",
            history_size=len(history),
            avg_days_between=round(avg_days, 1),
            days_since_last=round(days_since_last, 1),
        ),
    )


DETECTORS: Tuple[Detector, ...] = (
    detect_high_frequency,
    detect_unusual_amount,
    detect_cross_category_velocity,
    detect_vendor_concentration,
    detect_time_pattern_anomaly,
    detect_category_limit_violation,
    detect_behavior_anomaly,
)


def run_detectors(ctx: DetectionContext, detectors: Sequence[Detector] = DETECTORS) -> List[DetectorFinding]:
    """Run every detector against the same context, keeping only those that triggered"""
    findings = []
    for detector in detectors:
        finding = detector(ctx)
        if finding is not None:
            findings.append(finding)
    return findings
