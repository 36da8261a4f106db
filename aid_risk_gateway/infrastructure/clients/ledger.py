"""Ledger API HTTP client for windowed transaction history queries"""

import httpx
from datetime import datetime
from typing import Any, Dict, List, Optional
from aid_risk_gateway.domain.interfaces import TransactionLogReader
from aid_risk_gateway.domain.models import Transaction
from aid_risk_gateway.domain.exceptions import InvalidTransactionDataError, LedgerAPIError
from aid_risk_gateway.config import settings
from aid_risk_gateway.infrastructure.observability.metrics import ledger_fetch_failures_counter
from aid_risk_gateway.utils.date_utils import ensure_utc


def parse_transaction(txn: Dict[str, Any]) -> Transaction:
    """Build a Transaction from the ledger's JSON shape (amount as an integer string)"""
    return Transaction(
        sender=txn["sender"],
        recipient=txn["recipient"],
        category=txn["category"],
        amount=int(txn["amount"]),
        timestamp=ensure_utc(datetime.fromisoformat(txn["timestamp"])),
        status=txn.get("status", "confirmed"),
        tx_hash=txn.get("tx_hash"),
    )


class LedgerClient(TransactionLogReader):
    """Client for the external ledger's transaction log"""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url or settings.ledger_api_base
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport

    async def find_transactions(
        self,
        sender: Optional[str],
        category: Optional[str],
        since: datetime,
        type: str = "spending",
        status: str = "confirmed",
    ) -> List[Transaction]:
        """
        Fetch transactions at or after `since`, oldest first.

        Raises:
            LedgerAPIError: On timeout, HTTP errors, or invalid response
        """
        params = {"since": since.isoformat(), "type": type, "status": status}
        if sender is not None:
            params["sender"] = sender
        if category is not None:
            params["category"] = category

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.get(f"{self.base_url}/ledger/transactions", params=params)
                response.raise_for_status()
                data = response.json()

                transactions = [parse_transaction(txn) for txn in data.get("transactions", [])]
                return sorted(transactions, key=lambda t: t.timestamp)

            except httpx.TimeoutException as e:
                ledger_fetch_failures_counter.labels(endpoint="transactions").inc()
                raise LedgerAPIError(f"Ledger API timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                ledger_fetch_failures_counter.labels(endpoint="transactions").inc()
                raise LedgerAPIError(f"Ledger API error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                ledger_fetch_failures_counter.labels(endpoint="transactions").inc()
                raise LedgerAPIError(f"Ledger API unreachable: {e}") from e
            except (AttributeError, KeyError, ValueError, TypeError, InvalidTransactionDataError) as e:
                ledger_fetch_failures_counter.labels(endpoint="transactions").inc()
                raise LedgerAPIError(f"Invalid transaction data from ledger: {e}") from e
