"""
DOMAIN MODELS - DAILY DECISION

Pure, immutable structures representing the daily financial decision.
This layer contains NO database or service logic.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

MAX_WARNINGS = 2
MAX_SUGGESTIONS = 1


class RiskLevel(str, Enum):
    """Near-term cash-flow pressure, mildest first"""
    SAFE = "safe"
    CAUTION = "caution"
    WARNING = "warning"
    DANGER = "danger"
    CRITICAL = "critical"


class CommandType(str, Enum):
    """Kind of primary directive"""
    PAY = "pay"
    SAVE = "save"
    SPEND = "spend"
    FREEZE = "freeze"
    WAIT = "wait"


class ChosenPath(str, Enum):
    """Which generator branch produced the command"""
    CRITICAL_DEFICIT = "CRITICAL_DEFICIT"
    DANGER_DAILY_LIMIT = "DANGER_DAILY_LIMIT"
    WARNING_DAILY_LIMIT = "WARNING_DAILY_LIMIT"
    DEBT_EXTRA_PAYMENT = "DEBT_EXTRA_PAYMENT"
    SAFE_SPEND_WITH_DEBT = "SAFE_SPEND_WITH_DEBT"
    SAFE_SPEND = "SAFE_SPEND"


@dataclass(frozen=True)
class PrimaryCommand:
    """The one directive the user should follow today"""
    type: CommandType
    text: str
    amount_cents: Optional[int] = None
    target: Optional[str] = None
    date: Optional[str] = None  # ISO date

    def __post_init__(self):
        if not self.text:
            raise ValueError("Command text cannot be empty")


@dataclass(frozen=True)
class NextAction:
    """Call to action shown under the command"""
    text: str
    url: str


@dataclass(frozen=True)
class DecisionBasis:
    """
    Context the decision was computed from.

    Serialized verbatim into ``decision_basis_json`` and read back for the
    "why?" view. Keys are camelCase on the wire for the web client.
    """
    cash_available: int
    days_until_pay: int
    upcoming_bills_total: int
    available_after_bills: int
    runway_days: int
    daily_burn: int
    chosen_path: ChosenPath
    next_bill_date: Optional[str] = None
    next_bill_amount: int = 0
    daily_budget: int = 0

    def to_payload(self) -> Dict[str, Any]:
        return {
            "cashAvailable": self.cash_available,
            "daysUntilPay": self.days_until_pay,
            "upcomingBillsTotal": self.upcoming_bills_total,
            "availableAfterBills": self.available_after_bills,
            "runwayDays": self.runway_days,
            "dailyBurn": self.daily_burn,
            "chosenPath": self.chosen_path.value,
            "nextBillDate": self.next_bill_date,
            "nextBillAmount": self.next_bill_amount,
            "dailyBudget": self.daily_budget,
        }


@dataclass(frozen=True)
class CommandPlan:
    """Command generator output for one risk branch"""
    primary_command: PrimaryCommand
    next_action: NextAction
    chosen_path: ChosenPath
    warnings: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class DecisionOutput:
    """Full result of one engine run, before persistence"""
    risk_level: RiskLevel
    primary_command: PrimaryCommand
    warnings: List[str]
    suggestions: List[str]
    next_action: NextAction
    basis: DecisionBasis

    def __post_init__(self):
        if len(self.warnings) > MAX_WARNINGS:
            raise ValueError(f"At most {MAX_WARNINGS} warnings allowed")
        if len(self.suggestions) > MAX_SUGGESTIONS:
            raise ValueError(f"At most {MAX_SUGGESTIONS} suggestion allowed")


@dataclass(frozen=True)
class DecisionState:
    """A persisted decision row (current or historical)"""
    id: str
    user_id: str
    decision_version: str
    risk_level: RiskLevel
    primary_command: PrimaryCommand
    warnings: List[str]
    suggestions: List[str]
    next_action: NextAction
    basis: Dict[str, Any]
    computed_at: int  # epoch ms
    expires_at: int  # epoch ms
    is_locked: bool = False
    acknowledged_at: Optional[int] = None

    def is_expired(self, now_ms: int) -> bool:
        return self.expires_at <= now_ms


@dataclass(frozen=True)
class DecisionResult:
    """What the cache manager hands to the plan gate"""
    state: DecisionState
    hours_remaining: int
    is_new: bool
    has_expired_decision: bool
