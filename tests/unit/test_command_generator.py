from datetime import date, datetime, timedelta, timezone

import pytest

from app.domain.models import (
    ChosenPath,
    CommandType,
    Debt,
    MAX_WARNINGS,
    RiskLevel,
    ScheduledBill,
)
from app.domain.services.cash_position_engine import CashPosition
from app.domain.services.command_generator import (
    CommandGenerator,
    estimate_payoff_months,
    format_cents,
    format_short_date,
    months_saved_by_payment,
    qualifying_debt,
)
from app.domain.services.decision_engine import DecisionEngine

# Saturday
AS_OF = datetime(2026, 10, 17, 10, 0, tzinfo=timezone.utc)
PAYDAY = datetime(2026, 10, 24, tzinfo=timezone.utc)


def _position(cash, bills=0, burn=0, days=7, next_bill=None, payday=PAYDAY):
    return CashPosition(
        cash_available=cash,
        daily_burn=burn,
        next_payday=payday,
        days_until_pay=days,
        upcoming_bills_total=bills,
        next_bill=next_bill,
    )


def _run(position, debts=()):
    generator = CommandGenerator()
    risk = DecisionEngine.classify(position)
    return risk, generator.generate(position, risk, list(debts), AS_OF)


@pytest.mark.unit
def test_format_helpers():
    assert format_cents(123456) == "$1235"
    assert format_cents(150) == "$2"
    assert format_cents(-500) == "$5"
    assert format_cents(0) == "$0"
    assert format_short_date(date(2026, 10, 24)) == "sáb, 24 oct"
    assert format_short_date(date(2026, 9, 7)) == "lun, 7 sept"


@pytest.mark.unit
def test_critical_deficit_freezes_the_shortfall():
    bill = ScheduledBill(name="Renta", amount_cents=1500, next_due_date=date(2026, 10, 20))
    risk, plan = _run(_position(cash=1000, bills=1500, next_bill=bill))

    assert risk == RiskLevel.CRITICAL
    assert plan.chosen_path == ChosenPath.CRITICAL_DEFICIT
    assert plan.primary_command.type == CommandType.FREEZE
    assert plan.primary_command.amount_cents == 500
    assert "Te faltan $5" in plan.primary_command.text
    assert plan.warnings == ["Renta ($15) vence 2026-10-20. No puedes cubrirlo."]
    assert plan.next_action.url == "/gastos-fijos"


@pytest.mark.unit
def test_danger_sets_daily_limit_until_payday():
    bill = ScheduledBill(name="Luz", amount_cents=5000, next_due_date=date(2026, 10, 19))
    # 5200 cash - 5000 bill = 200 after bills, burn 100 -> runway 2
    risk, plan = _run(_position(cash=5200, bills=5000, burn=100, next_bill=bill))

    assert risk == RiskLevel.DANGER
    assert plan.chosen_path == ChosenPath.DANGER_DAILY_LIMIT
    command = plan.primary_command
    assert command.type == CommandType.FREEZE
    assert command.amount_cents == 200 // 7
    assert command.date == "2026-10-24"
    assert "hasta sáb, 24 oct" in command.text
    assert "Luz no se paga" in command.text
    assert plan.warnings == [
        "Luz ($50) vence en 2 días.",
        "Runway: 2 días. Cada peso cuenta.",
    ]
    assert len(plan.warnings) <= MAX_WARNINGS


@pytest.mark.unit
def test_warning_level_has_no_runway_warning():
    # 500 after bills, burn 100 -> runway 5
    risk, plan = _run(_position(cash=500, burn=100))

    assert risk == RiskLevel.WARNING
    assert plan.chosen_path == ChosenPath.WARNING_DAILY_LIMIT
    assert plan.warnings == []
    assert "tus gastos fijos no se paga" in plan.primary_command.text


@pytest.mark.unit
def test_safe_spend_weekly_amount():
    position = _position(cash=5000, burn=50, days=10, payday=AS_OF + timedelta(days=10))
    assert position.daily_budget == 500
    assert position.runway_days == 100

    risk, plan = _run(position)

    assert risk == RiskLevel.SAFE
    assert plan.chosen_path == ChosenPath.SAFE_SPEND
    assert plan.primary_command.type == CommandType.SPEND
    assert plan.primary_command.amount_cents == 3500
    assert "Puedes gastar $35 esta semana" in plan.primary_command.text
    assert plan.warnings == []


@pytest.mark.unit
def test_safe_spend_warns_about_close_bill():
    bill = ScheduledBill(name="Renta", amount_cents=1000, next_due_date=date(2026, 10, 20))
    # 1000 after bills, burn 100 -> runway 10
    risk, plan = _run(_position(cash=2000, bills=1000, burn=100, next_bill=bill))

    assert risk == RiskLevel.CAUTION
    assert plan.chosen_path == ChosenPath.SAFE_SPEND
    assert plan.warnings == ["Renta ($10) vence en 3 días. Estás cubierto."]


@pytest.mark.unit
def test_extra_payment_to_highest_apr_debt():
    debts = [
        Debt(name="Auto", current_balance_cents=500000, apr_percent=9.5, minimum_payment_cents=0, id="d2"),
        Debt(name="Tarjeta", current_balance_cents=100000, apr_percent=24.0, minimum_payment_cents=3000, id="d1"),
        Debt(name="Vieja", current_balance_cents=0, apr_percent=35.0, minimum_payment_cents=9999, status="paid_off"),
    ]
    # buffer 100 * 14 = 1400, minimums 3000 -> 20000 - 1400 - 3000
    risk, plan = _run(_position(cash=20000, burn=100, days=14), debts)

    assert risk == RiskLevel.SAFE
    assert plan.chosen_path == ChosenPath.DEBT_EXTRA_PAYMENT
    command = plan.primary_command
    assert command.type == CommandType.PAY
    assert command.amount_cents == 15600
    assert command.target == "Tarjeta"
    assert command.date == "2026-10-17"
    assert command.text.startswith("Paga $156 extra a Tarjeta hoy.")
    assert plan.next_action.url == "/deudas/d1"
    assert plan.warnings == []


@pytest.mark.unit
def test_small_surplus_with_debt_spends_instead():
    debts = [Debt(name="Tarjeta", current_balance_cents=100000, apr_percent=24.0, minimum_payment_cents=3000)]
    # 8000 - 1400 - 3000 = 3600, not above 5000
    risk, plan = _run(_position(cash=8000, burn=100, days=14), debts)

    assert risk == RiskLevel.SAFE
    assert plan.chosen_path == ChosenPath.SAFE_SPEND_WITH_DEBT
    assert plan.primary_command.type == CommandType.SPEND
    assert plan.primary_command.amount_cents == 4000
    assert plan.warnings == []


@pytest.mark.unit
def test_paid_off_top_debt_does_not_qualify():
    debts = [Debt(name="Tarjeta", current_balance_cents=0, apr_percent=24.0, minimum_payment_cents=3000)]
    assert qualifying_debt(debts) is None

    _, plan = _run(_position(cash=20000, burn=100, days=14), debts)
    assert plan.chosen_path == ChosenPath.SAFE_SPEND


@pytest.mark.unit
def test_payoff_projection():
    debts = [Debt(name="Tarjeta", current_balance_cents=100000, apr_percent=24.0, minimum_payment_cents=5000)]

    assert estimate_payoff_months(debts, lump_sum_cents=100000) == 0
    assert estimate_payoff_months(
        [Debt(name="x", current_balance_cents=1000, apr_percent=10.0)]
    ) == 360
    assert months_saved_by_payment(debts, 50000) > 0
    assert months_saved_by_payment(debts, 0) == 0
    assert months_saved_by_payment([], 50000) == 0


@pytest.mark.unit
def test_suggestion_extra_debt_payment():
    generator = CommandGenerator()
    debts = [Debt(name="Tarjeta", current_balance_cents=100000, apr_percent=24.0, minimum_payment_cents=3000)]
    position = _position(cash=30000, days=14)

    assert generator.suggest(position, RiskLevel.SAFE, debts) == [
        "Si pagas $30 extra a Tarjeta, podrías terminar 1 mes antes."
    ]


@pytest.mark.unit
def test_suggestion_solid_margin():
    generator = CommandGenerator()
    position = _position(cash=100000, days=10)
    suggestions = generator.suggest(position, RiskLevel.SAFE, [])
    assert suggestions == ["Tu margen financiero es sólido. Considera ahorrar o pagar deuda extra."]


@pytest.mark.unit
def test_suggestion_caution_with_upcoming_bill():
    generator = CommandGenerator()
    bill = ScheduledBill(name="Renta", amount_cents=1000, next_due_date=date(2026, 10, 20))
    position = _position(cash=2000, bills=1000, burn=100, next_bill=bill)
    suggestions = generator.suggest(position, RiskLevel.CAUTION, [])
    assert suggestions == [
        "Tienes gastos fijos próximos. Evita compras grandes hasta el 2026-10-20."
    ]


@pytest.mark.unit
def test_suggestion_zero_budget_with_margin():
    generator = CommandGenerator()
    position = _position(cash=5, days=10)
    suggestions = generator.suggest(position, RiskLevel.SAFE, [])
    assert len(suggestions) == 1
    assert suggestions[0].startswith("Tu presupuesto flexible hoy es $0")


@pytest.mark.unit
def test_suggestion_falls_back_to_debt_total():
    generator = CommandGenerator()
    debts = [Debt(name="Tarjeta", current_balance_cents=100000, apr_percent=24.0, minimum_payment_cents=3000)]
    # 10% of 20000 is under the 25 dollar floor
    position = _position(cash=20000, days=14)
    suggestions = generator.suggest(position, RiskLevel.SAFE, debts)
    assert suggestions == [
        "Tienes $1000 en deudas activas. Habla con tu asesor para optimizar tu estrategia de pago."
    ]


@pytest.mark.unit
def test_no_suggestion_when_nothing_applies():
    generator = CommandGenerator()
    position = _position(cash=15000, days=10)
    assert generator.suggest(position, RiskLevel.SAFE, []) == []
