"""
Financial Data Repository
Read-only access to collaborator-owned tables (accounts, transactions,
scheduled bills/income, debts, users). Never writes.
"""

import logging
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from app.infrastructure.db.models import (
    AccountModel,
    DebtModel,
    ScheduledBillModel,
    ScheduledIncomeModel,
    TransactionModel,
    UserModel,
)
from app.domain.models import (
    Account,
    AccountType,
    Debt,
    FinancialSnapshot,
    PlanTier,
    ScheduledBill,
    ScheduledIncome,
    Transaction,
    TransactionType,
    UserAccount,
)
from app.domain.models.entities import ACTIVE

logger = logging.getLogger(__name__)


class FinancialDataRepository:
    """Repository for the decision engine's inputs"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def load_snapshot(self, user_id: str) -> FinancialSnapshot:
        """Everything the engine reads for one user"""
        return FinancialSnapshot(
            accounts=await self.get_accounts(user_id),
            transactions=await self.get_transactions(user_id),
            bills=await self.get_active_bills(user_id),
            income_schedules=await self.get_active_income(user_id),
            debts=await self.get_active_debts(user_id),
        )

    async def get_accounts(self, user_id: str) -> List[Account]:
        result = await self.session.execute(
            select(AccountModel).where(AccountModel.user_id == user_id)
        )
        accounts = []
        for model in result.scalars().all():
            try:
                account_type = AccountType(model.type)
            except ValueError:
                logger.warning("Skipping account %s with unknown type %r", model.id, model.type)
                continue
            accounts.append(Account(type=account_type, balance_cents=model.current_balance_cents))
        return accounts

    async def get_transactions(self, user_id: str) -> List[Transaction]:
        result = await self.session.execute(
            select(TransactionModel)
            .where(TransactionModel.user_id == user_id)
            .order_by(TransactionModel.date)
        )
        return [
            Transaction(
                date=model.date,
                amount_cents=model.amount_cents,
                type=TransactionType(model.type),
            )
            for model in result.scalars().all()
            if model.type in (TransactionType.INCOME.value, TransactionType.EXPENSE.value)
        ]

    async def get_active_bills(self, user_id: str) -> List[ScheduledBill]:
        result = await self.session.execute(
            select(ScheduledBillModel)
            .where(
                ScheduledBillModel.user_id == user_id,
                ScheduledBillModel.status == ACTIVE,
            )
            .order_by(ScheduledBillModel.next_due_date)
        )
        return [
            ScheduledBill(
                id=model.id,
                name=model.name,
                amount_cents=model.amount_cents,
                next_due_date=model.next_due_date,
                status=model.status,
            )
            for model in result.scalars().all()
        ]

    async def get_active_income(self, user_id: str) -> List[ScheduledIncome]:
        """Soonest pay date first; schedules without a date last"""
        result = await self.session.execute(
            select(ScheduledIncomeModel)
            .where(
                ScheduledIncomeModel.user_id == user_id,
                ScheduledIncomeModel.status == ACTIVE,
            )
            .order_by(
                ScheduledIncomeModel.next_pay_date.is_(None),
                ScheduledIncomeModel.next_pay_date,
            )
        )
        return [
            ScheduledIncome(
                id=model.id,
                name=model.name,
                next_pay_date=model.next_pay_date,
                status=model.status,
            )
            for model in result.scalars().all()
        ]

    async def get_active_debts(self, user_id: str) -> List[Debt]:
        """Highest APR first"""
        result = await self.session.execute(
            select(DebtModel)
            .where(
                DebtModel.user_id == user_id,
                DebtModel.status == ACTIVE,
            )
            .order_by(DebtModel.apr_percent.desc())
        )
        debts = []
        for model in result.scalars().all():
            try:
                debt = Debt(
                    id=model.id,
                    name=model.name,
                    current_balance_cents=model.current_balance_cents,
                    apr_percent=model.apr_percent,
                    minimum_payment_cents=model.minimum_payment_cents,
                    status=model.status,
                )
            except ValueError as exc:
                logger.warning("Skipping debt %s: %s", model.id, exc)
                continue
            debts.append(debt)
        return debts


class UserRepository:
    """Read-only view of the user record"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, user_id: str) -> Optional[UserAccount]:
        result = await self.session.execute(
            select(UserModel).where(UserModel.id == user_id)
        )
        model = result.scalar_one_or_none()
        if model is None:
            return None

        try:
            plan = PlanTier(model.plan)
        except ValueError:
            logger.warning("Unknown plan %r for user %s, treating as free", model.plan, user_id)
            plan = PlanTier.FREE

        return UserAccount(
            id=model.id,
            plan=plan,
            plan_expires_at=model.plan_expires_at,
            timezone=model.timezone,
        )
