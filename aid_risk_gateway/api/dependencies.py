"""Dependency injection for FastAPI endpoints"""

from datetime import datetime
from decimal import Decimal
from typing import Callable
from fastapi import Depends, Request
from aid_risk_gateway.config import settings
from aid_risk_gateway.domain.interfaces import CategoryLimitProvider, TransactionLogReader
from aid_risk_gateway.infrastructure.clients.ledger import LedgerClient
from aid_risk_gateway.infrastructure.clients.limits import CategoryLimitClient
from aid_risk_gateway.services.risk_engine import RiskEngine
from aid_risk_gateway.utils.date_utils import utc_now


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_clock() -> Callable[[], datetime]:
    """Provide the wall clock used for evaluation and report windows"""
    return utc_now


def get_ledger_client() -> TransactionLogReader:
    """Provide ledger transaction-log client instance"""
    return LedgerClient()


def get_limit_client() -> CategoryLimitProvider:
    """Provide category limit client instance"""
    return CategoryLimitClient()


def get_risk_engine(
    ledger: TransactionLogReader = Depends(get_ledger_client),
    limits: CategoryLimitProvider = Depends(get_limit_client),
    clock: Callable[[], datetime] = Depends(get_clock),
) -> RiskEngine:
    """Provide an immutable risk engine bound to the request's collaborators"""
    return RiskEngine(
        ledger=ledger,
        limits=limits,
        category_average_fallback_units=Decimal(settings.category_average_fallback_units),
        clock=clock,
    )
