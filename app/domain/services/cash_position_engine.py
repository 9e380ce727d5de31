"""
CASH POSITION ENGINE
Available cash and daily burn rate from accounts and transactions.

RULES:
❌ No DB access
✅ Integer cents throughout
✅ Balance of exactly 0 is treated as "never set" when transactions exist
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional, Sequence

from app.domain.models import (
    Account,
    CASH_ACCOUNT_TYPES,
    FinancialSnapshot,
    ScheduledBill,
    Transaction,
    TransactionType,
)
from app.domain.services.risk_classifier import compute_runway_days
from app.domain.services.schedule_resolver import (
    compute_days_until_pay,
    resolve_next_payday,
    resolve_upcoming_bills,
)
from app.utils.time import trailing_window_start

BURN_WINDOW_DAYS = 30


def compute_cash_available(
    accounts: Iterable[Account],
    transactions: Sequence[Transaction],
) -> int:
    """
    Sum of checking/savings/cash balances.

    Users who never entered a balance show 0 here; for them, fall back to
    lifetime income minus lifetime expenses.
    """
    cash = sum(
        account.balance_cents or 0
        for account in accounts
        if account.type in CASH_ACCOUNT_TYPES
    )

    if cash == 0 and transactions:
        total_income = sum(
            abs(tx.amount_cents) for tx in transactions if tx.type == TransactionType.INCOME
        )
        total_expense = sum(
            abs(tx.amount_cents) for tx in transactions if tx.type == TransactionType.EXPENSE
        )
        cash = total_income - total_expense

    return cash


def compute_daily_burn(transactions: Iterable[Transaction], as_of: datetime) -> int:
    """Average daily spend over the trailing 30 days, floored."""
    window_start = trailing_window_start(as_of, BURN_WINDOW_DAYS)
    spent = sum(
        abs(tx.amount_cents)
        for tx in transactions
        if tx.type == TransactionType.EXPENSE and tx.date >= window_start
    )
    return spent // BURN_WINDOW_DAYS


@dataclass(frozen=True)
class CashPosition:
    """Immutable snapshot of a user's short-term liquidity"""
    cash_available: int
    daily_burn: int
    next_payday: datetime
    days_until_pay: int
    upcoming_bills_total: int = 0
    next_bill: Optional[ScheduledBill] = None

    def __post_init__(self):
        if self.days_until_pay < 1:
            raise ValueError("days_until_pay must be at least 1")
        if self.daily_burn < 0:
            raise ValueError("daily_burn cannot be negative")

    @property
    def available_after_bills(self) -> int:
        return self.cash_available - self.upcoming_bills_total

    @property
    def runway_days(self) -> int:
        return compute_runway_days(self.available_after_bills, self.daily_burn)

    @property
    def daily_budget(self) -> int:
        """Flexible spend per day until payday, never negative."""
        return max(0, self.available_after_bills // self.days_until_pay)


def build_cash_position(snapshot: FinancialSnapshot, as_of: datetime) -> CashPosition:
    """Run the schedule resolver and the aggregator over one snapshot."""
    next_payday = resolve_next_payday(snapshot.income_schedules, as_of)
    upcoming = resolve_upcoming_bills(snapshot.bills, next_payday)

    return CashPosition(
        cash_available=compute_cash_available(snapshot.accounts, snapshot.transactions),
        daily_burn=compute_daily_burn(snapshot.transactions, as_of),
        next_payday=next_payday,
        days_until_pay=compute_days_until_pay(as_of, next_payday),
        upcoming_bills_total=upcoming.total_cents,
        next_bill=upcoming.next_bill,
    )
