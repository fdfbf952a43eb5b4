"""Budget windows enforced on top of the quota log."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Literal, Sequence

from ..catalog_api.settings import ProviderBudgets
from ..catalog_api.stores.quota_store import QuotaStore
from ..catalog_api.utils.timestamps import start_of_day, start_of_month, utcnow
from .errors import BudgetExhausted

logger = logging.getLogger(__name__)

BudgetPeriod = Literal["day", "month"]
_PERIOD_LABELS = {"day": "Daily", "month": "Monthly"}


@dataclass(frozen=True, slots=True)
class QuotaBudget:
    """A ceiling on successful calls to one provider within a UTC window."""

    provider: str
    limit: int
    period: BudgetPeriod

    def window_start(self, now: datetime) -> datetime:
        if self.period == "month":
            return start_of_month(now)
        return start_of_day(now)


class BudgetGuard:
    """Answers whether a provider may make another call right now."""

    def __init__(
        self,
        quota_store: QuotaStore,
        budgets: Sequence[QuotaBudget],
        *,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        if not budgets:
            raise ValueError("BudgetGuard needs at least one budget")
        providers = {budget.provider for budget in budgets}
        if len(providers) != 1:
            raise ValueError(f"Budgets span several providers: {sorted(providers)}")
        self._quota_store = quota_store
        self._budgets = tuple(budgets)
        self._clock = clock
        self.provider = budgets[0].provider

    def usage(self) -> list[tuple[QuotaBudget, int]]:
        now = self._clock()
        return [
            (budget, self._quota_store.count_calls(budget.provider, budget.window_start(now)))
            for budget in self._budgets
        ]

    def remaining(self) -> int:
        """Calls still allowed, the minimum across all windows and never negative."""

        return max(0, min(budget.limit - used for budget, used in self.usage()))

    def check(self) -> None:
        """Raise :class:`BudgetExhausted` when any window is used up."""

        for budget, used in self.usage():
            if used >= budget.limit:
                reason = f"{_PERIOD_LABELS[budget.period]} budget exhausted ({used}/{budget.limit})"
                logger.debug("Budget check failed for %s: %s", self.provider, reason)
                raise BudgetExhausted(self.provider, reason)


def watchmode_budgets(budgets: ProviderBudgets) -> list[QuotaBudget]:
    return [
        QuotaBudget("watchmode", budgets.watchmode_daily, "day"),
        QuotaBudget("watchmode", budgets.watchmode_monthly, "month"),
    ]


def motn_budgets(budgets: ProviderBudgets) -> list[QuotaBudget]:
    return [QuotaBudget("motn", budgets.motn_daily, "day")]
