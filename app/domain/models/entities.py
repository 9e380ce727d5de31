"""
Domain Models - Entities
Read-only financial inputs, as owned by the collaborator services.
Pure domain objects with no infrastructure dependencies
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import List, Optional


class AccountType(str, Enum):
    """Account kind"""
    CHECKING = "checking"
    SAVINGS = "savings"
    CREDIT = "credit"
    CASH = "cash"


class TransactionType(str, Enum):
    """Transaction direction"""
    INCOME = "income"
    EXPENSE = "expense"


class PlanTier(str, Enum):
    """Subscription tier"""
    FREE = "free"
    PRO = "pro"
    PREMIUM = "premium"


# Accounts whose balance counts as spendable cash
CASH_ACCOUNT_TYPES = frozenset({AccountType.CHECKING, AccountType.SAVINGS, AccountType.CASH})
PAID_PLANS = frozenset({PlanTier.PRO, PlanTier.PREMIUM})
ACTIVE = "active"


@dataclass(frozen=True)
class Account:
    """Bank/cash account balance"""
    type: AccountType
    balance_cents: Optional[int] = None


@dataclass(frozen=True)
class Transaction:
    """Single ledger entry"""
    date: date
    amount_cents: int
    type: TransactionType


@dataclass(frozen=True)
class ScheduledBill:
    """Recurring fixed expense, resolved to its next occurrence"""
    name: str
    amount_cents: int
    next_due_date: Optional[date]
    status: str = ACTIVE
    id: Optional[str] = None

    @property
    def is_active(self) -> bool:
        return self.status == ACTIVE


@dataclass(frozen=True)
class ScheduledIncome:
    """Recurring paycheck, resolved to its next occurrence"""
    next_pay_date: Optional[date]
    status: str = ACTIVE
    name: str = ""
    id: Optional[str] = None

    @property
    def is_active(self) -> bool:
        return self.status == ACTIVE


@dataclass(frozen=True)
class Debt:
    """Outstanding debt"""
    name: str
    current_balance_cents: int
    apr_percent: float
    minimum_payment_cents: Optional[int] = None
    status: str = ACTIVE
    id: Optional[str] = None

    def __post_init__(self):
        if self.apr_percent < 0:
            raise ValueError("APR cannot be negative")

    @property
    def is_active(self) -> bool:
        return self.status == ACTIVE


@dataclass(frozen=True)
class UserAccount:
    """The slice of the user record the decision engine needs"""
    id: str
    plan: PlanTier = PlanTier.FREE
    plan_expires_at: Optional[int] = None  # epoch ms
    timezone: Optional[str] = None

    def effective_plan(self, now_ms: int) -> PlanTier:
        """Paid tiers lapse to free once ``plan_expires_at`` has passed."""
        if self.plan in PAID_PLANS and self.plan_expires_at is not None:
            if self.plan_expires_at <= now_ms:
                return PlanTier.FREE
        return self.plan


@dataclass(frozen=True)
class FinancialSnapshot:
    """Everything read from collaborators for one decision computation"""
    accounts: List[Account] = field(default_factory=list)
    transactions: List[Transaction] = field(default_factory=list)
    bills: List[ScheduledBill] = field(default_factory=list)
    income_schedules: List[ScheduledIncome] = field(default_factory=list)
    debts: List[Debt] = field(default_factory=list)
