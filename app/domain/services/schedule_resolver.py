"""
SCHEDULE RESOLVER
Next payday and the bills that fall due before it.

Missing schedule data degrades instead of failing:
- no active income schedule -> payday defaults to 14 days out
- no bills -> nothing upcoming, total 0
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Iterable, List, Optional

from app.domain.models import ScheduledBill, ScheduledIncome
from app.utils.time import days_until, start_of_day

DEFAULT_PAY_INTERVAL_DAYS = 14


@dataclass(frozen=True)
class UpcomingBills:
    """Active bills due on or before the next payday"""
    bills: List[ScheduledBill] = field(default_factory=list)
    total_cents: int = 0
    next_bill: Optional[ScheduledBill] = None


def resolve_next_payday(
    income_schedules: Iterable[ScheduledIncome],
    as_of: datetime,
) -> datetime:
    """
    First active schedule's next pay date (start of that day, in ``as_of``'s
    timezone), or ``as_of + 14 days`` when there is none.
    """
    for schedule in income_schedules:
        if schedule.is_active and schedule.next_pay_date is not None:
            return start_of_day(schedule.next_pay_date, as_of.tzinfo)
    return as_of + timedelta(days=DEFAULT_PAY_INTERVAL_DAYS)


def resolve_upcoming_bills(
    bills: Iterable[ScheduledBill],
    next_payday: datetime,
) -> UpcomingBills:
    """Active bills with ``next_due_date <= next_payday``; earliest first."""
    upcoming = [
        bill
        for bill in bills
        if bill.is_active
        and bill.next_due_date is not None
        and start_of_day(bill.next_due_date, next_payday.tzinfo) <= next_payday
    ]
    # stable: bills sharing a due date keep their source order
    upcoming.sort(key=lambda bill: bill.next_due_date)

    return UpcomingBills(
        bills=upcoming,
        total_cents=sum(bill.amount_cents for bill in upcoming),
        next_bill=upcoming[0] if upcoming else None,
    )


def compute_days_until_pay(as_of: datetime, next_payday: datetime) -> int:
    """Never less than one day."""
    return max(1, days_until(as_of, next_payday))


def days_until_bill(as_of: datetime, bill: ScheduledBill) -> Optional[int]:
    """Days until the bill falls due, or None if it has no due date."""
    if bill.next_due_date is None:
        return None
    return days_until(as_of, start_of_day(bill.next_due_date, as_of.tzinfo))
