"""
COMMAND GENERATOR
Turns a classified cash position into the day's directive.

Branch priority:
1. CRITICAL          -> freeze, shortfall amount
2. DANGER / WARNING  -> freeze, daily limit until payday
3. SAFE / CAUTION with a positive-balance debt
                     -> pay extra to the highest-APR debt, or weekly spend
4. SAFE / CAUTION    -> weekly spend

Copy is Spanish (product locale); amounts are whole dollars.
"""

from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional, Sequence

from app.domain.models import (
    ChosenPath,
    CommandPlan,
    CommandType,
    Debt,
    MAX_SUGGESTIONS,
    MAX_WARNINGS,
    NextAction,
    PrimaryCommand,
    RiskLevel,
)
from app.domain.services.cash_position_engine import CashPosition
from app.domain.services.schedule_resolver import days_until_bill

# Debt path
SAFE_BUFFER_DAYS = 14
MIN_EXTRA_PAYMENT_CENTS = 5000

# Warning windows (days until the next bill)
DAILY_LIMIT_BILL_WINDOW = 3
SAFE_SPEND_BILL_WINDOW = 5

# Suggestions
DEBT_SUGGESTION_MIN_AVAILABLE = 10000
DEBT_SUGGESTION_CAP_CENTS = 5000
DEBT_SUGGESTION_MIN_CENTS = 2500
DEBT_SUGGESTION_DEFAULT_MINIMUM = 5000
SOLID_MARGIN_DAILY_BUDGET = 5000

MAX_PROJECTION_MONTHS = 360

_WEEKDAYS_ES = ("lun", "mar", "mié", "jue", "vie", "sáb", "dom")
_MONTHS_ES = ("ene", "feb", "mar", "abr", "may", "jun", "jul", "ago", "sept", "oct", "nov", "dic")

DASHBOARD_URL = "/dashboard"
FIXED_EXPENSES_URL = "/gastos-fijos"


def format_cents(cents: int) -> str:
    """``123456`` -> ``$1235`` (absolute value, whole dollars, half-up)."""
    dollars = (Decimal(abs(cents)) / 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return f"${dollars}"


def format_short_date(day: date) -> str:
    """``2026-10-24`` -> ``sáb, 24 oct``"""
    return f"{_WEEKDAYS_ES[day.weekday()]}, {day.day} {_MONTHS_ES[day.month - 1]}"


def _half_up(value: float) -> int:
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def estimate_payoff_months(debts: Sequence[Debt], lump_sum_cents: int = 0) -> int:
    """
    Months to clear all debts paying only minimums (simplified avalanche:
    pooled balance, average APR). Capped at 30 years.
    """
    balance = sum(d.current_balance_cents for d in debts) - lump_sum_cents
    if balance <= 0:
        return 0

    monthly_payment = sum(d.minimum_payment_cents or 0 for d in debts)
    if monthly_payment <= 0:
        return MAX_PROJECTION_MONTHS

    monthly_rate = (sum(d.apr_percent for d in debts) / len(debts)) / 100 / 12
    months = 0
    remaining = float(balance)
    while remaining > 0 and months < MAX_PROJECTION_MONTHS:
        remaining -= monthly_payment - remaining * monthly_rate
        months += 1
    return months


def months_saved_by_payment(debts: Sequence[Debt], extra_cents: int) -> int:
    """How much sooner the debt-free date arrives after a one-off extra payment."""
    if not debts or extra_cents <= 0:
        return 0
    return max(0, estimate_payoff_months(debts) - estimate_payoff_months(debts, extra_cents))


def active_debts_by_apr(debts: Sequence[Debt]) -> List[Debt]:
    """Active debts, highest APR first."""
    return sorted((d for d in debts if d.is_active), key=lambda d: d.apr_percent, reverse=True)


def qualifying_debt(debts: Sequence[Debt]) -> Optional[Debt]:
    """The highest-APR active debt, if it still carries a balance."""
    ranked = active_debts_by_apr(debts)
    if ranked and ranked[0].current_balance_cents > 0:
        return ranked[0]
    return None


class CommandGenerator:
    """
    Command Generator
    Primary command, warnings and suggestion per risk branch
    """

    def generate(
        self,
        position: CashPosition,
        risk: RiskLevel,
        debts: Sequence[Debt],
        as_of: datetime,
    ) -> CommandPlan:
        """
        Build the command plan for a classified position.

        Args:
            position: Cash position the risk was classified from
            risk: Output of the risk classifier
            debts: User debts (any order, any status)
            as_of: Local "now" of the user

        Returns:
            CommandPlan with at most two warnings
        """
        match risk:
            case RiskLevel.CRITICAL:
                plan = self._critical_deficit(position)
            case RiskLevel.DANGER | RiskLevel.WARNING:
                plan = self._daily_limit(position, risk, as_of)
            case RiskLevel.SAFE | RiskLevel.CAUTION:
                debt = qualifying_debt(debts)
                if debt is not None:
                    plan = self._debt_path(position, debt, active_debts_by_apr(debts), as_of)
                else:
                    plan = self._safe_spend(position, as_of)
            case _:
                raise ValueError(f"Unhandled risk level: {risk!r}")

        return CommandPlan(
            primary_command=plan.primary_command,
            next_action=plan.next_action,
            chosen_path=plan.chosen_path,
            warnings=plan.warnings[:MAX_WARNINGS],
        )

    def _critical_deficit(self, position: CashPosition) -> CommandPlan:
        deficit = abs(position.available_after_bills)
        warnings = []

        bill = position.next_bill
        if bill is not None:
            warnings.append(
                f"{bill.name} ({format_cents(bill.amount_cents)}) vence "
                f"{bill.next_due_date.isoformat()}. No puedes cubrirlo."
            )

        return CommandPlan(
            primary_command=PrimaryCommand(
                type=CommandType.FREEZE,
                text=(
                    f"CONGELA todo gasto. Te faltan {format_cents(deficit)} para cubrir "
                    "tus gastos fijos. Cualquier compra ahora significa un pago perdido."
                ),
                amount_cents=deficit,
            ),
            next_action=NextAction(text="Ver qué gastos diferir", url=FIXED_EXPENSES_URL),
            chosen_path=ChosenPath.CRITICAL_DEFICIT,
            warnings=warnings,
        )

    def _daily_limit(
        self,
        position: CashPosition,
        risk: RiskLevel,
        as_of: datetime,
    ) -> CommandPlan:
        daily_safe = position.daily_budget
        payday = position.next_payday.date()
        bill = position.next_bill
        bill_at_risk = bill.name if bill is not None else "tus gastos fijos"
        warnings = []

        if bill is not None:
            days = days_until_bill(as_of, bill)
            if days is not None and days <= DAILY_LIMIT_BILL_WINDOW:
                unit = "día" if days == 1 else "días"
                warnings.append(
                    f"{bill.name} ({format_cents(bill.amount_cents)}) vence en {days} {unit}."
                )

        if risk == RiskLevel.DANGER:
            warnings.append(f"Runway: {position.runway_days} días. Cada peso cuenta.")

        return CommandPlan(
            primary_command=PrimaryCommand(
                type=CommandType.FREEZE,
                text=(
                    f"No excedas {format_cents(daily_safe)}/día hasta {format_short_date(payday)}. "
                    f"Pasarte significa que {bill_at_risk} no se paga."
                ),
                amount_cents=daily_safe,
                date=payday.isoformat(),
            ),
            next_action=NextAction(text="Entendido", url=DASHBOARD_URL),
            chosen_path=(
                ChosenPath.DANGER_DAILY_LIMIT
                if risk == RiskLevel.DANGER
                else ChosenPath.WARNING_DAILY_LIMIT
            ),
            warnings=warnings,
        )

    def _debt_path(
        self,
        position: CashPosition,
        debt: Debt,
        active_debts: Sequence[Debt],
        as_of: datetime,
    ) -> CommandPlan:
        safe_buffer = position.daily_burn * SAFE_BUFFER_DAYS
        minimum_total = sum(d.minimum_payment_cents or 0 for d in active_debts)
        extra = max(0, position.available_after_bills - safe_buffer - minimum_total)

        if extra <= MIN_EXTRA_PAYMENT_CENTS:
            weekly_safe = self._weekly_safe(position)
            return CommandPlan(
                primary_command=PrimaryCommand(
                    type=CommandType.SPEND,
                    text=(
                        f"Puedes gastar {format_cents(weekly_safe)} esta semana. Esto mantiene "
                        "tus gastos fijos cubiertos y tus pagos de deuda al día."
                    ),
                    amount_cents=weekly_safe,
                ),
                next_action=NextAction(text="Entendido", url=DASHBOARD_URL),
                chosen_path=ChosenPath.SAFE_SPEND_WITH_DEBT,
            )

        months_saved = months_saved_by_payment(active_debts, extra)
        if months_saved > 0:
            unit = "mes" if months_saved == 1 else "meses"
            consequence = f"Esto adelanta tu fecha de libertad financiera {months_saved} {unit}."
        else:
            consequence = "Esto acelera tu fecha de libertad financiera."

        return CommandPlan(
            primary_command=PrimaryCommand(
                type=CommandType.PAY,
                text=f"Paga {format_cents(extra)} extra a {debt.name} hoy. {consequence}",
                amount_cents=extra,
                target=debt.name,
                date=as_of.date().isoformat(),
            ),
            next_action=NextAction(text="Marcar como pagado", url=f"/deudas/{debt.id or ''}"),
            chosen_path=ChosenPath.DEBT_EXTRA_PAYMENT,
        )

    def _safe_spend(self, position: CashPosition, as_of: datetime) -> CommandPlan:
        weekly_safe = self._weekly_safe(position)
        warnings = []

        bill = position.next_bill
        if bill is not None:
            days = days_until_bill(as_of, bill)
            if days is not None and days <= SAFE_SPEND_BILL_WINDOW:
                warnings.append(
                    f"{bill.name} ({format_cents(bill.amount_cents)}) vence en {days} días. "
                    "Estás cubierto."
                )

        return CommandPlan(
            primary_command=PrimaryCommand(
                type=CommandType.SPEND,
                text=(
                    f"Puedes gastar {format_cents(weekly_safe)} esta semana. Esto mantiene todos "
                    "tus gastos fijos cubiertos y tu runway arriba de 14 días."
                ),
                amount_cents=weekly_safe,
            ),
            next_action=NextAction(text="Entendido", url=DASHBOARD_URL),
            chosen_path=ChosenPath.SAFE_SPEND,
            warnings=warnings,
        )

    @staticmethod
    def _weekly_safe(position: CashPosition) -> int:
        return (position.available_after_bills * 7) // position.days_until_pay

    def suggest(
        self,
        position: CashPosition,
        risk: RiskLevel,
        debts: Sequence[Debt],
    ) -> List[str]:
        """At most one tip, first applicable rule wins."""
        suggestions: List[str] = []
        available = position.available_after_bills
        daily_budget = position.daily_budget
        active_debts = active_debts_by_apr(debts)
        debt = qualifying_debt(debts)

        if debt is not None and available > DEBT_SUGGESTION_MIN_AVAILABLE:
            extra = min(DEBT_SUGGESTION_CAP_CENTS, int(available * 0.1))
            months = max(
                1,
                _half_up(extra / (debt.minimum_payment_cents or DEBT_SUGGESTION_DEFAULT_MINIMUM)),
            )
            if extra >= DEBT_SUGGESTION_MIN_CENTS:
                unit = "mes" if months == 1 else "meses"
                suggestions.append(
                    f"Si pagas {format_cents(extra)} extra a {debt.name}, "
                    f"podrías terminar {months} {unit} antes."
                )

        if not suggestions:
            if risk == RiskLevel.SAFE and daily_budget > SOLID_MARGIN_DAILY_BUDGET:
                suggestions.append(
                    "Tu margen financiero es sólido. Considera ahorrar o pagar deuda extra."
                )
            elif risk == RiskLevel.CAUTION and position.next_bill is not None:
                due = position.next_bill.next_due_date
                suggestions.append(
                    "Tienes gastos fijos próximos. Evita compras grandes hasta el "
                    f"{due.isoformat() if due else 'próximo pago'}."
                )
            elif daily_budget == 0 and available > 0:
                suggestions.append(
                    "Tu presupuesto flexible hoy es $0, pero técnicamente tienes margen. "
                    "Guárdalo para emergencias."
                )

        if not suggestions and active_debts:
            total_debt = sum(d.current_balance_cents for d in active_debts)
            suggestions.append(
                f"Tienes {format_cents(total_debt)} en deudas activas. "
                "Habla con tu asesor para optimizar tu estrategia de pago."
            )

        return suggestions[:MAX_SUGGESTIONS]
