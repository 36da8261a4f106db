"""Risk engine - collects a consistent history snapshot and scores a candidate transaction"""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Callable, Optional

from aid_risk_gateway.domain.detectors import HISTORY_WINDOW, PERSONAL_BASELINE_WINDOW, DetectionContext
from aid_risk_gateway.domain.interfaces import CategoryLimitProvider, TransactionLogReader
from aid_risk_gateway.domain.models import RiskAssessment, Transaction
from aid_risk_gateway.domain.scoring import assess, degraded_assessment
from aid_risk_gateway.infrastructure.observability.logging import log_scoring_failure
from aid_risk_gateway.infrastructure.observability.metrics import (
    evaluation_latency_histogram,
    scoring_failure_counter,
)
from aid_risk_gateway.utils.amounts import mean_units
from aid_risk_gateway.utils.date_utils import ensure_utc, utc_now


@dataclass(frozen=True)
class RiskEngine:
    """
    Stateless scoring engine.

    Holds only its collaborators and configuration; the candidate and the
    evaluation instant are passed per call, so one instance is safe to share.
    """

    ledger: TransactionLogReader
    limits: CategoryLimitProvider
    category_average_fallback_units: Decimal = Decimal(100)
    clock: Callable[[], datetime] = field(default=utc_now)

    async def collect_context(self, candidate: Transaction, now: datetime) -> DetectionContext:
        """
        Fetch everything the detectors read, concurrently, relative to one instant.

        The sender's history covers the longest detector window; narrower windows
        are sliced from it by the detectors themselves. A ledger entry carrying the
        candidate's own tx_hash (already confirmed when re-scoring for review) is
        dropped so the candidate is never counted as its own history.
        """
        results = await asyncio.gather(
            self.ledger.find_transactions(
                sender=candidate.sender,
                category=None,
                since=now - HISTORY_WINDOW,
            ),
            self.ledger.find_transactions(
                sender=None,
                category=candidate.category,
                since=now - PERSONAL_BASELINE_WINDOW,
            ),
            self.limits.get_active_limit(candidate.category),
            return_exceptions=True,
        )
        # Every read has settled here; surface the first failure
        for result in results:
            if isinstance(result, BaseException):
                raise result
        history, category_wide, limit = results

        if candidate.tx_hash is not None:
            history = [tx for tx in history if tx.tx_hash != candidate.tx_hash]
            category_wide = [tx for tx in category_wide if tx.tx_hash != candidate.tx_hash]

        category_average = (
            mean_units(tx.amount for tx in category_wide)
            if category_wide
            else self.category_average_fallback_units
        )

        return DetectionContext(
            candidate=candidate,
            now=now,
            history=tuple(history),
            category_average_units=category_average,
            limit=limit,
        )

    async def evaluate(self, candidate: Transaction, now: Optional[datetime] = None) -> RiskAssessment:
        """
        Score a candidate spending transaction.

        Never raises: if history or limits cannot be read (or anything else fails),
        the failure is logged and a degraded "unknown" assessment is returned so the
        disbursement is not blocked by a scoring outage. No retries are attempted.
        """
        evaluated_at = ensure_utc(now) if now is not None else self.clock()

        with evaluation_latency_histogram.time():
            try:
                ctx = await self.collect_context(candidate, evaluated_at)
                return assess(ctx)
            except Exception as e:
                scoring_failure_counter.inc()
                log_scoring_failure(candidate, e)
                return degraded_assessment(e, evaluated_at)
