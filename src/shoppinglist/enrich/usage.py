"""Accounting of AI calls, passed back to callers instead of kept in globals."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from shoppinglist.config import settings
from shoppinglist.logging_config import get_logger
from shoppinglist.models import AIUsageStats

logger = get_logger(__name__)


@dataclass(frozen=True)
class AIUsage:
    """Calls and tokens spent by one unit of work."""

    calls: int = 0
    tokens: int = 0

    def __add__(self, other: "AIUsage") -> "AIUsage":
        return AIUsage(calls=self.calls + other.calls, tokens=self.tokens + other.tokens)

    def __bool__(self) -> bool:
        return self.calls > 0 or self.tokens > 0

    def cost_estimate(self, cost_per_token: float | None = None) -> float:
        """Estimated spend in USD."""
        rate = settings.ai_cost_per_token if cost_per_token is None else cost_per_token
        return self.tokens * rate


async def record_ai_usage(db: AsyncSession, usage: AIUsage) -> None:
    """Add ``usage`` to the running totals row, creating it on first use.

    The increment happens in SQL so concurrent requests do not overwrite
    each other's counts. The caller commits.
    """
    if not usage:
        return

    cost = Decimal(str(round(usage.cost_estimate(), 4)))
    first_row = select(func.min(AIUsageStats.id)).scalar_subquery()
    result = await db.execute(
        update(AIUsageStats)
        .where(AIUsageStats.id == first_row)
        .values(
            total_calls=AIUsageStats.total_calls + usage.calls,
            total_tokens=AIUsageStats.total_tokens + usage.tokens,
            total_cost_estimate=AIUsageStats.total_cost_estimate + cost,
            last_updated=datetime.utcnow(),
        )
    )
    if result.rowcount == 0:
        db.add(
            AIUsageStats(
                total_calls=usage.calls,
                total_tokens=usage.tokens,
                total_cost_estimate=cost,
            )
        )
        await db.flush()

    logger.info(f"Recorded AI usage: {usage.calls} calls, {usage.tokens} tokens")
