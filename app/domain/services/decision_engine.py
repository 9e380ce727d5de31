"""
DECISION ENGINE - CORE ORCHESTRATOR
Daily financial decision generation

RESPONSIBILITIES:
- Schedule resolver -> cash position -> risk classifier -> command generator
- Build the basis stored for the "why?" view

RULES:
❌ No DB access (snapshot is passed in)
❌ No state mutation
✅ Deterministic for a given snapshot and instant
"""

from datetime import datetime
from typing import Optional

from app.domain.models import (
    DecisionBasis,
    DecisionOutput,
    FinancialSnapshot,
    RiskLevel,
)
from app.domain.services.cash_position_engine import CashPosition, build_cash_position
from app.domain.services.command_generator import CommandGenerator
from app.domain.services.risk_classifier import classify_risk


class DecisionEngine:
    """
    Decision Engine - The Brain
    Orchestrates the pure components to produce one decision
    """

    def __init__(self, command_generator: Optional[CommandGenerator] = None):
        self.command_generator = command_generator or CommandGenerator()

    def generate_decision(self, snapshot: FinancialSnapshot, as_of: datetime) -> DecisionOutput:
        """
        Generate the decision for a snapshot.

        Args:
            snapshot: Read-only financial data of one user
            as_of: Aware datetime in the user's timezone

        Returns:
            DecisionOutput
        """
        position = build_cash_position(snapshot, as_of)
        return self.decide(position, snapshot, as_of)

    def decide(
        self,
        position: CashPosition,
        snapshot: FinancialSnapshot,
        as_of: datetime,
    ) -> DecisionOutput:
        """Classify an already-built position and generate its command."""
        risk = self.classify(position)
        plan = self.command_generator.generate(position, risk, snapshot.debts, as_of)
        suggestions = self.command_generator.suggest(position, risk, snapshot.debts)

        next_bill = position.next_bill
        basis = DecisionBasis(
            cash_available=position.cash_available,
            days_until_pay=position.days_until_pay,
            upcoming_bills_total=position.upcoming_bills_total,
            available_after_bills=position.available_after_bills,
            runway_days=position.runway_days,
            daily_burn=position.daily_burn,
            chosen_path=plan.chosen_path,
            next_bill_date=(
                next_bill.next_due_date.isoformat()
                if next_bill is not None and next_bill.next_due_date
                else None
            ),
            next_bill_amount=next_bill.amount_cents if next_bill is not None else 0,
            daily_budget=position.daily_budget,
        )

        return DecisionOutput(
            risk_level=risk,
            primary_command=plan.primary_command,
            warnings=list(plan.warnings),
            suggestions=suggestions,
            next_action=plan.next_action,
            basis=basis,
        )

    @staticmethod
    def classify(position: CashPosition) -> RiskLevel:
        return classify_risk(position.available_after_bills, position.runway_days)
