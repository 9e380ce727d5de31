"""
Decision State Repository
Persistence for computed decisions (current + locked history)
"""

import json
import logging
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, func
from typing import Optional

from app.infrastructure.db.models import (
    DecisionStateModel,
    RiskLevelEnum,
    CommandTypeEnum,
)
from app.domain.models import (
    CommandType,
    DecisionState,
    NextAction,
    PrimaryCommand,
    RiskLevel,
)

logger = logging.getLogger(__name__)


class DecisionStateRepository:
    """Repository for DecisionState"""

    def __init__(self, session: AsyncSession):
        """Initialize with database session"""
        self.session = session

    async def get_active(self, user_id: str) -> Optional[DecisionState]:
        """
        Get the user's current (unlocked) decision, expired or not

        Args:
            user_id: Owner of the decision

        Returns:
            DecisionState or None
        """
        result = await self.session.execute(
            select(DecisionStateModel)
            .where(
                DecisionStateModel.user_id == user_id,
                DecisionStateModel.is_locked.is_(False),
            )
            .order_by(DecisionStateModel.computed_at.desc())
            .limit(1)
        )
        model = result.scalar_one_or_none()

        return self._to_domain(model) if model else None

    async def get_by_id(self, decision_id: str) -> Optional[DecisionState]:
        result = await self.session.execute(
            select(DecisionStateModel).where(DecisionStateModel.id == decision_id)
        )
        model = result.scalar_one_or_none()

        return self._to_domain(model) if model else None

    async def has_locked(self, user_id: str) -> bool:
        """Whether any superseded decision exists for the user"""
        result = await self.session.execute(
            select(DecisionStateModel.id)
            .where(
                DecisionStateModel.user_id == user_id,
                DecisionStateModel.is_locked.is_(True),
            )
            .limit(1)
        )
        return result.first() is not None

    async def count_unlocked(self, user_id: str) -> int:
        result = await self.session.execute(
            select(func.count())
            .select_from(DecisionStateModel)
            .where(
                DecisionStateModel.user_id == user_id,
                DecisionStateModel.is_locked.is_(False),
            )
        )
        return int(result.scalar_one())

    async def supersede(
        self,
        previous_id: Optional[str],
        new_state: DecisionState,
    ) -> DecisionState:
        """
        Lock the previous decision and insert its replacement

        Both statements run in the caller's transaction; commit or roll back
        them together. The unlocked-per-user unique index rejects the insert
        if another writer slipped in first.

        Args:
            previous_id: Current unlocked decision to retire, if any
            new_state: Replacement (must be unlocked)

        Returns:
            The inserted DecisionState
        """
        if new_state.is_locked:
            raise ValueError("Replacement decision must be unlocked")

        if previous_id is not None:
            await self.session.execute(
                update(DecisionStateModel)
                .where(
                    DecisionStateModel.id == previous_id,
                    DecisionStateModel.is_locked.is_(False),
                )
                .values(is_locked=True)
            )

        self.session.add(self._to_model(new_state))
        await self.session.flush()

        return new_state

    async def acknowledge(self, decision_id: str, acknowledged_at: int) -> bool:
        """
        Stamp acknowledged_at once; later calls leave the first stamp alone

        Returns:
            True if a row was updated
        """
        result = await self.session.execute(
            update(DecisionStateModel)
            .where(
                DecisionStateModel.id == decision_id,
                DecisionStateModel.acknowledged_at.is_(None),
            )
            .values(acknowledged_at=acknowledged_at)
        )
        return (result.rowcount or 0) > 0

    @staticmethod
    def _to_model(state: DecisionState) -> DecisionStateModel:
        warnings = list(state.warnings) + [None, None]
        command = state.primary_command
        return DecisionStateModel(
            id=state.id,
            user_id=state.user_id,
            decision_version=state.decision_version,
            risk_level=RiskLevelEnum(state.risk_level.value),
            primary_command_type=CommandTypeEnum(command.type.value),
            primary_command_text=command.text,
            primary_command_amount_cents=command.amount_cents,
            primary_command_target=command.target,
            primary_command_date=command.date,
            warning_1=warnings[0],
            warning_2=warnings[1],
            suggestion=state.suggestions[0] if state.suggestions else None,
            next_action_text=state.next_action.text,
            next_action_url=state.next_action.url,
            decision_basis_json=json.dumps(state.basis),
            computed_at=state.computed_at,
            expires_at=state.expires_at,
            is_locked=state.is_locked,
            acknowledged_at=state.acknowledged_at,
        )

    @staticmethod
    def _to_domain(model: Optional[DecisionStateModel]) -> Optional[DecisionState]:
        """Convert database model to domain entity"""
        if model is None:
            return None

        basis = {}
        if model.decision_basis_json:
            try:
                basis = json.loads(model.decision_basis_json)
            except json.JSONDecodeError:
                logger.warning("Unreadable decision basis on %s", model.id)

        return DecisionState(
            id=model.id,
            user_id=model.user_id,
            decision_version=model.decision_version,
            risk_level=RiskLevel(model.risk_level.value),
            primary_command=PrimaryCommand(
                type=CommandType(model.primary_command_type.value),
                text=model.primary_command_text,
                amount_cents=model.primary_command_amount_cents,
                target=model.primary_command_target,
                date=model.primary_command_date,
            ),
            warnings=[w for w in (model.warning_1, model.warning_2) if w],
            suggestions=[model.suggestion] if model.suggestion else [],
            next_action=NextAction(text=model.next_action_text, url=model.next_action_url),
            basis=basis,
            computed_at=model.computed_at,
            expires_at=model.expires_at,
            is_locked=bool(model.is_locked),
            acknowledged_at=model.acknowledged_at,
        )
