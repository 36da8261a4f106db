"""Category limit HTTP client"""

import httpx
from urllib.parse import quote
from datetime import datetime
from typing import Optional
from aid_risk_gateway.domain.interfaces import CategoryLimitProvider
from aid_risk_gateway.domain.models import CategoryLimit
from aid_risk_gateway.domain.exceptions import InvalidTransactionDataError, LedgerAPIError
from aid_risk_gateway.config import settings
from aid_risk_gateway.infrastructure.observability.metrics import ledger_fetch_failures_counter
from aid_risk_gateway.utils.date_utils import ensure_utc


class CategoryLimitClient(CategoryLimitProvider):
    """Client for the ledger's configured per-category spending limits"""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url or settings.limits_api_base
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport

    async def get_active_limit(self, category: str) -> Optional[CategoryLimit]:
        """
        Fetch the active limit for a category.

        A 404 means no limit is configured and yields None.

        Raises:
            LedgerAPIError: On timeout, HTTP errors, or invalid response
        """
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.get(f"{self.base_url}/ledger/category-limits/{quote(category, safe='')}")
                if response.status_code == 404:
                    return None
                response.raise_for_status()
                data = response.json()

                expiry = data.get("override_expiry")
                return CategoryLimit(
                    category=data["category"],
                    daily_limit=int(data["daily_limit"]),
                    weekly_limit=int(data["weekly_limit"]),
                    monthly_limit=int(data["monthly_limit"]),
                    per_transaction_limit=int(data["per_transaction_limit"]),
                    emergency_override=bool(data.get("emergency_override", False)),
                    override_expiry=ensure_utc(datetime.fromisoformat(expiry)) if expiry else None,
                )

            except httpx.TimeoutException as e:
                ledger_fetch_failures_counter.labels(endpoint="category_limits").inc()
                raise LedgerAPIError(f"Category limit API timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                ledger_fetch_failures_counter.labels(endpoint="category_limits").inc()
                raise LedgerAPIError(f"Category limit API error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                ledger_fetch_failures_counter.labels(endpoint="category_limits").inc()
                raise LedgerAPIError(f"Category limit API unreachable: {e}") from e
            except (AttributeError, KeyError, ValueError, TypeError, InvalidTransactionDataError) as e:
                ledger_fetch_failures_counter.labels(endpoint="category_limits").inc()
                raise LedgerAPIError(f"Invalid category limit data: {e}") from e
