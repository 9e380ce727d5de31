"""
Plan Gate
Shapes a decision for the caller's subscription tier.

Paid tiers get the full decision. Free tier gets the risk level, warnings
stripped of amounts and names, and a teaser - signals, not specifics.
"""

import re
from typing import Callable, Tuple, Union

from app.domain.models import DecisionResult, PAID_PLANS, PlanTier
from app.domain.schemas.decision import (
    DecisionContextResponse,
    FreeDecisionResponse,
    NextActionResponse,
    PaidDecisionResponse,
    PrimaryCommandResponse,
)

TEASER = "Tu próxima acción financiera está lista."
GENERIC_WARNING = "Hay poco espacio para errores esta semana"

# First match wins
_WARNING_REWRITES: Tuple[Tuple[re.Pattern, Callable[[re.Match], str]], ...] = (
    (re.compile(r"vence en (\d+)"), lambda m: f"Gasto fijo vence en {m.group(1)} días"),
    (re.compile(r"runway", re.IGNORECASE), lambda m: "Tu margen financiero es limitado"),
    (
        re.compile(r"No puedes cubrirlo|peso cuenta"),
        lambda m: "El margen actual no cubre todos los compromisos",
    ),
)

_CONTEXT_KEYS = {
    "cash_available": ("cashAvailable", 0),
    "days_until_pay": ("daysUntilPay", 0),
    "upcoming_bills_total": ("upcomingBillsTotal", 0),
    "runway_days": ("runwayDays", 0),
    "next_bill_date": ("nextBillDate", None),
    "next_bill_amount": ("nextBillAmount", 0),
    "daily_budget": ("dailyBudget", 0),
}


def is_paid(plan: PlanTier) -> bool:
    return plan in PAID_PLANS


def redact_warning(warning: str) -> str:
    """Rewrite a warning so it keeps at most a day count."""
    for pattern, rewrite in _WARNING_REWRITES:
        match = pattern.search(warning)
        if match:
            return rewrite(match)
    return GENERIC_WARNING


def build_context(basis: dict) -> DecisionContextResponse:
    """
    "Why?" facts from the stored basis. Rows written before a field existed
    fall back to its default.
    """
    values = {}
    for field_name, (key, default) in _CONTEXT_KEYS.items():
        value = basis.get(key)
        values[field_name] = default if value is None else value
    return DecisionContextResponse(**values)


def shape_decision(
    result: DecisionResult,
    plan: PlanTier,
) -> Union[PaidDecisionResponse, FreeDecisionResponse]:
    """Apply the tier's visibility rules to a decision."""
    state = result.state

    if not is_paid(plan):
        return FreeDecisionResponse(
            id=state.id,
            risk_level=state.risk_level.value,
            warnings=[redact_warning(w) for w in state.warnings],
            teaser=TEASER,
            has_expired_decision=result.has_expired_decision,
        )

    command = state.primary_command
    return PaidDecisionResponse(
        id=state.id,
        risk_level=state.risk_level.value,
        primary_command=PrimaryCommandResponse(
            type=command.type.value,
            text=command.text,
            amount_cents=command.amount_cents,
            target=command.target,
            date=command.date,
        ),
        warnings=list(state.warnings),
        next_action=NextActionResponse(text=state.next_action.text, url=state.next_action.url),
        hours_remaining=result.hours_remaining,
        has_expired_decision=result.has_expired_decision,
        computed_at=state.computed_at,
        expires_at=state.expires_at,
        context=build_context(state.basis),
        suggestions=list(state.suggestions),
    )
