"""
Domain Models Package
Export all domain entities
"""

from .entities import (
    # Enums
    AccountType,
    PlanTier,
    TransactionType,

    # Constants
    CASH_ACCOUNT_TYPES,
    PAID_PLANS,

    # Entities
    Account,
    Debt,
    FinancialSnapshot,
    ScheduledBill,
    ScheduledIncome,
    Transaction,
    UserAccount,
)
from .decision import (
    # Enums
    ChosenPath,
    CommandType,
    RiskLevel,

    # Constants
    MAX_SUGGESTIONS,
    MAX_WARNINGS,

    # Entities
    CommandPlan,
    DecisionBasis,
    DecisionOutput,
    DecisionResult,
    DecisionState,
    NextAction,
    PrimaryCommand,
)

__all__ = [
    # Enums
    "AccountType",
    "ChosenPath",
    "CommandType",
    "PlanTier",
    "RiskLevel",
    "TransactionType",

    # Constants
    "CASH_ACCOUNT_TYPES",
    "MAX_SUGGESTIONS",
    "MAX_WARNINGS",
    "PAID_PLANS",

    # Entities
    "Account",
    "CommandPlan",
    "Debt",
    "DecisionBasis",
    "DecisionOutput",
    "DecisionResult",
    "DecisionState",
    "FinancialSnapshot",
    "NextAction",
    "PrimaryCommand",
    "ScheduledBill",
    "ScheduledIncome",
    "Transaction",
    "UserAccount",
]
