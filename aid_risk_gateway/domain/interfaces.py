"""Read-only collaborator contracts consumed by the risk engine"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from aid_risk_gateway.domain.models import CategoryLimit, Transaction


class TransactionLogReader(ABC):
    """Time-bounded queries over past ledger transactions"""

    @abstractmethod
    async def find_transactions(
        self,
        sender: Optional[str],
        category: Optional[str],
        since: datetime,
        type: str = "spending",
        status: str = "confirmed",
    ) -> List[Transaction]:
        """
        Transactions at or after `since`, oldest first.

        `sender=None` queries across all senders (category-wide baselines);
        `category=None` queries across all categories.
        """


class CategoryLimitProvider(ABC):
    """Active per-category spending ceilings"""

    @abstractmethod
    async def get_active_limit(self, category: str) -> Optional[CategoryLimit]:
        """Active limit for a category, or None when none is configured"""
