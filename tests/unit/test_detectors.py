"""Unit tests for the spending anomaly detectors"""

import pytest
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from conftest import BENEFICIARY, NOW, OTHER_VENDOR, VENDOR, make_tx
from aid_risk_gateway.domain.detectors import (
    DetectionContext,
    detect_behavior_anomaly,
    detect_category_limit_violation,
    detect_cross_category_velocity,
    detect_high_frequency,
    detect_time_pattern_anomaly,
    detect_unusual_amount,
    detect_vendor_concentration,
    run_detectors,
)
from aid_risk_gateway.domain.models import CategoryLimit, Pattern, Severity, Transaction
from aid_risk_gateway.utils.amounts import from_units


def context(
    units=10,
    history=(),
    category="Food",
    recipient=VENDOR,
    average=Decimal(100),
    limit=None,
    now=NOW,
) -> DetectionContext:
    candidate = make_tx(units, category=category, ago=timedelta(0), recipient=recipient, now=now)
    return DetectionContext(
        candidate=candidate,
        now=now,
        history=tuple(history),
        category_average_units=average,
        limit=limit,
    )


def food_limit(daily_units=500, override=False, expiry=None) -> CategoryLimit:
    return CategoryLimit(
        category="Food",
        daily_limit=from_units(daily_units),
        weekly_limit=from_units(2000),
        monthly_limit=from_units(8000),
        per_transaction_limit=from_units(200),
        emergency_override=override,
        override_expiry=expiry,
    )


def test_no_history_produces_no_findings():
    """Absence of data is never evidence of fraud"""
    assert run_detectors(context(units=50)) == []


# High frequency


def test_high_frequency_triggers_at_ten_in_the_hour():
    history = [make_tx(ago=timedelta(minutes=5 * i)) for i in range(1, 11)]

    finding = detect_high_frequency(context(history=history))

    assert finding.pattern == Pattern.HIGH_FREQUENCY
    assert finding.score == 20.0
    assert finding.evidence.count == 10


def test_high_frequency_ignores_older_and_other_category_transactions():
    history = [make_tx(ago=timedelta(minutes=5 * i)) for i in range(1, 10)]
    history.append(make_tx(ago=timedelta(minutes=61)))
    history.append(make_tx(category="Medical", ago=timedelta(minutes=1)))

    assert detect_high_frequency(context(history=history)) is None


# Unusual amount


def test_unusual_amount_against_personal_history():
    history = [make_tx(10, ago=timedelta(days=d)) for d in (1, 5, 9)]

    finding = detect_unusual_amount(context(units=60, history=history))

    assert finding.evidence.comparison == "personal_history"
    assert finding.evidence.ratio == 6.0
    assert finding.severity == Severity.MEDIUM
    assert finding.score == pytest.approx(12.0)


def test_unusual_amount_personal_history_escalates_and_caps():
    history = [make_tx(10, ago=timedelta(days=d)) for d in (1, 5, 9)]

    finding = detect_unusual_amount(context(units=100, history=history))

    assert finding.severity == Severity.HIGH
    assert finding.score == 20.0


def test_unusual_amount_against_category_average_caps_at_25():
    finding = detect_unusual_amount(context(units=4000, average=Decimal(100)))

    assert finding.evidence.comparison == "category_average"
    assert finding.evidence.ratio == 40.0
    assert finding.severity == Severity.HIGH
    assert finding.score == 25.0


def test_unusual_amount_category_average_medium_band():
    finding = detect_unusual_amount(context(units=700, average=Decimal(100)))

    assert finding.severity == Severity.MEDIUM
    assert finding.score == pytest.approx(21.0)


def test_unusual_amount_personal_history_outside_30_days_falls_back_to_category():
    history = [make_tx(10, ago=timedelta(days=40))]

    finding = detect_unusual_amount(context(units=600, history=history, average=Decimal(100)))

    assert finding.evidence.comparison == "category_average"


def test_unusual_amount_below_ratio_or_zero_baseline_is_not_risky():
    assert detect_unusual_amount(context(units=50, average=Decimal(100))) is None
    assert detect_unusual_amount(context(units=50, average=Decimal(0))) is None


# Cross-category velocity


def test_cross_category_velocity_three_categories_in_an_hour():
    history = [
        make_tx(category=c, ago=timedelta(minutes=m))
        for c, m in (("Food", 10), ("Medical", 20), ("Water", 30))
    ]

    finding = detect_cross_category_velocity(context(history=history))

    assert finding.severity == Severity.HIGH
    assert finding.score == 15.0
    assert finding.evidence.categories == ("Food", "Medical", "Water")


def test_cross_category_velocity_two_categories_is_fine():
    history = [make_tx(category="Food", ago=timedelta(minutes=10)), make_tx(category="Water", ago=timedelta(minutes=20))]
    history.append(make_tx(category="Medical", ago=timedelta(hours=2)))

    assert detect_cross_category_velocity(context(history=history)) is None


# Vendor concentration


def test_vendor_concentration_includes_candidate():
    history = [make_tx(10, recipient=OTHER_VENDOR, ago=timedelta(hours=3))]

    finding = detect_vendor_concentration(context(units=40, history=history))

    assert finding.evidence.fraction == 0.8
    assert finding.score == pytest.approx(12.0)
    assert finding.evidence.vendor_count == 2


def test_vendor_concentration_spread_spending_is_fine():
    history = [make_tx(10, recipient=OTHER_VENDOR, ago=timedelta(hours=3))]

    assert detect_vendor_concentration(context(units=10, history=history)) is None


def test_vendor_concentration_needs_recent_history():
    history = [make_tx(10, recipient=VENDOR, ago=timedelta(hours=30))]

    assert detect_vendor_concentration(context(units=10, history=history)) is None


# Time pattern


NIGHT = datetime(2026, 3, 10, 3, 0, tzinfo=timezone.utc)


def daytime_history(now):
    # Five purchases yesterday between 10:00 and 14:00
    return [make_tx(ago=timedelta(hours=h), now=now) for h in (13, 14, 15, 16, 17)]


def test_time_pattern_night_purchase_triggers():
    finding = detect_time_pattern_anomaly(context(history=daytime_history(NIGHT), now=NIGHT))

    assert finding.pattern == Pattern.TIME_PATTERN_ANOMALY
    assert finding.score == 8.0
    assert finding.evidence.current_hour == 3


def test_time_pattern_business_hours_never_trigger():
    evening = datetime(2026, 3, 10, 18, 30, tzinfo=timezone.utc)
    assert detect_time_pattern_anomaly(context(history=daytime_history(evening), now=evening)) is None

    late = datetime(2026, 3, 10, 19, 0, tzinfo=timezone.utc)
    assert detect_time_pattern_anomaly(context(history=daytime_history(late), now=late)) is not None


def test_time_pattern_habitual_hour_or_thin_history_is_fine():
    habitual = daytime_history(NIGHT)[:4] + [make_tx(ago=timedelta(hours=23, minutes=30), now=NIGHT)]
    assert detect_time_pattern_anomaly(context(history=habitual, now=NIGHT)) is None

    assert detect_time_pattern_anomaly(context(history=daytime_history(NIGHT)[:4], now=NIGHT)) is None


# Category limit violation


SPENT_TODAY = from_units(300)
DAILY_LIMIT = from_units(500)


def today_history():
    # 14:00 now: 11:00 and 12:00 today, plus 23:00 yesterday which must not count
    return [
        make_tx(150, ago=timedelta(hours=2)),
        make_tx(150, ago=timedelta(hours=3)),
        make_tx(400, ago=timedelta(hours=15)),
    ]


@pytest.mark.parametrize("delta,triggers", [(-1, False), (0, False), (1, True)])
def test_limit_violation_boundary(delta, triggers):
    """Triggers iff spent_today + amount > daily limit"""
    candidate = Transaction(
        sender=BENEFICIARY,
        recipient=VENDOR,
        category="Food",
        amount=DAILY_LIMIT - SPENT_TODAY + delta,
        timestamp=NOW,
    )
    ctx = DetectionContext(
        candidate=candidate,
        now=NOW,
        history=tuple(today_history()),
        category_average_units=Decimal(100),
        limit=food_limit(),
    )

    finding = detect_category_limit_violation(ctx)

    assert (finding is not None) is triggers
    if triggers:
        assert finding.score == 25.0
        assert finding.severity == Severity.HIGH
        assert finding.evidence.spent_today == SPENT_TODAY
        assert finding.evidence.overflow == 1


def test_limit_violation_suspended_by_active_override():
    limit = food_limit(override=True, expiry=NOW + timedelta(days=1))
    assert detect_category_limit_violation(context(units=300, history=today_history(), limit=limit)) is None

    open_ended = food_limit(override=True, expiry=None)
    assert detect_category_limit_violation(context(units=300, history=today_history(), limit=open_ended)) is None


def test_limit_violation_expired_override_is_enforced():
    limit = food_limit(override=True, expiry=NOW - timedelta(hours=1))

    finding = detect_category_limit_violation(context(units=300, history=today_history(), limit=limit))

    assert finding.evidence.overflow == from_units(100)


def test_limit_violation_without_configured_limit():
    assert detect_category_limit_violation(context(units=10_000, history=today_history())) is None


# Behavior anomaly


def test_behavior_new_category():
    history = [make_tx(category="Medical", ago=timedelta(days=5 * i)) for i in range(1, 11)]

    finding = detect_behavior_anomaly(context(history=history))

    assert finding.evidence.anomaly_type == "new_category"
    assert finding.score == 10.0
    assert finding.severity == Severity.MEDIUM


def test_behavior_frequency_anomaly():
    history = [make_tx(ago=timedelta(days=5 * i)) for i in range(1, 10)]
    history.append(make_tx(ago=timedelta(hours=4)))

    finding = detect_behavior_anomaly(context(history=history))

    assert finding.evidence.anomaly_type == "frequency_anomaly"
    assert finding.score == 12.0
    assert finding.evidence.days_since_last == pytest.approx(0.2, abs=0.05)


def test_behavior_regular_cadence_is_fine():
    history = [make_tx(ago=timedelta(days=5 * i)) for i in range(1, 11)]

    assert detect_behavior_anomaly(context(history=history)) is None


def test_behavior_needs_ten_transactions_of_history():
    history = [make_tx(category="Medical", ago=timedelta(days=5 * i)) for i in range(1, 10)]

    assert detect_behavior_anomaly(context(history=history)) is None
