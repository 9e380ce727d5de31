"""
Decision Cache Manager
Fetch-or-compute of the user's single current decision

STATES (per user, derived - not stored):
- NONE     no row
- ACTIVE   unlocked, expires_at > now
- EXPIRED  unlocked, expires_at <= now
- LOCKED   superseded history

At most one unlocked row per user, guaranteed by:
1. a per-user asyncio.Lock around read-then-write inside this process
2. lock-old + insert-new in ONE transaction (never lock without replace)
3. the partial unique index on (user_id) WHERE NOT is_locked across processes
"""

import asyncio
import logging
import weakref
from datetime import datetime, tzinfo
from typing import Callable, Optional
from uuid import uuid4

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.domain.models import DecisionResult, DecisionState
from app.domain.services.decision_engine import DecisionEngine
from app.infrastructure.db.repositories.decision_repository import DecisionStateRepository
from app.infrastructure.db.repositories.financial_repository import FinancialDataRepository
from app.utils.time import (
    end_of_day_ms,
    hours_remaining,
    resolve_timezone,
    to_epoch_ms,
    utc_now,
)

logger = logging.getLogger(__name__)


class DecisionCacheManager:
    """
    Decision Cache Manager
    Serves the cached decision or computes, persists and returns a fresh one
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        decision_engine: DecisionEngine,
        decision_version: str = "v1.0.0",
        default_timezone: str = "UTC",
        clock: Callable[[], datetime] = utc_now,
    ):
        """
        Initialize with explicit dependencies

        Args:
            session_factory: Builds one AsyncSession per operation
            decision_engine: Pure decision computation
            decision_version: Tag stored on every new row
            default_timezone: Used when the user has none on file
            clock: Returns an aware "now"; injectable for tests
        """
        self.session_factory = session_factory
        self.decision_engine = decision_engine
        self.decision_version = decision_version
        self.default_timezone = default_timezone
        self.clock = clock
        # Entries vanish once no request holds or waits on the lock
        self._user_locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()

    def now_ms(self) -> int:
        return to_epoch_ms(self.clock())

    def _lock_for(self, user_id: str) -> asyncio.Lock:
        lock = self._user_locks.get(user_id)
        if lock is None:
            lock = asyncio.Lock()
            self._user_locks[user_id] = lock
        return lock

    async def get_or_compute(
        self,
        user_id: str,
        force_refresh: bool = False,
        timezone_name: Optional[str] = None,
    ) -> DecisionResult:
        """
        Return the current decision, computing a new one when needed

        Args:
            user_id: Decision owner
            force_refresh: Supersede the current decision even if unexpired
            timezone_name: User's IANA timezone (end-of-day expiry)

        Returns:
            DecisionResult
        """
        tz = resolve_timezone(timezone_name, self.default_timezone)

        async with self._lock_for(user_id):
            try:
                return await self._get_or_compute(user_id, force_refresh, tz)
            except IntegrityError:
                # Another process inserted first; its row is the current one
                logger.warning(
                    "Concurrent decision write for user %s rolled back; serving the winner",
                    user_id,
                )
                return await self._load_current(user_id)

    async def _get_or_compute(
        self,
        user_id: str,
        force_refresh: bool,
        tz: tzinfo,
    ) -> DecisionResult:
        now = self.clock()
        now_ms = to_epoch_ms(now)

        async with self.session_factory() as session:
            async with session.begin():
                repo = DecisionStateRepository(session)
                existing = await repo.get_active(user_id)

                if existing is not None and not existing.is_expired(now_ms) and not force_refresh:
                    logger.debug("Decision cache hit for user %s (%s)", user_id, existing.id)
                    return DecisionResult(
                        state=existing,
                        hours_remaining=hours_remaining(existing.expires_at, now_ms),
                        is_new=False,
                        has_expired_decision=await repo.has_locked(user_id),
                    )

                snapshot = await FinancialDataRepository(session).load_snapshot(user_id)
                output = self.decision_engine.generate_decision(snapshot, now.astimezone(tz))

                new_state = DecisionState(
                    id=str(uuid4()),
                    user_id=user_id,
                    decision_version=self.decision_version,
                    risk_level=output.risk_level,
                    primary_command=output.primary_command,
                    warnings=list(output.warnings),
                    suggestions=list(output.suggestions),
                    next_action=output.next_action,
                    basis=output.basis.to_payload(),
                    computed_at=now_ms,
                    expires_at=end_of_day_ms(now, tz),
                    is_locked=False,
                )
                await repo.supersede(existing.id if existing else None, new_state)
                has_expired_decision = existing is not None or await repo.has_locked(user_id)

        if existing is None:
            reason = "first"
        elif force_refresh and not existing.is_expired(now_ms):
            reason = "forced"
        else:
            reason = "expired"
        logger.info(
            "Computed decision %s for user %s (%s): risk=%s path=%s",
            new_state.id,
            user_id,
            reason,
            new_state.risk_level.value,
            output.basis.chosen_path.value,
        )

        return DecisionResult(
            state=new_state,
            hours_remaining=hours_remaining(new_state.expires_at, now_ms),
            is_new=True,
            has_expired_decision=has_expired_decision,
        )

    async def _load_current(self, user_id: str) -> DecisionResult:
        now_ms = self.now_ms()
        async with self.session_factory() as session:
            repo = DecisionStateRepository(session)
            current = await repo.get_active(user_id)
            if current is None:
                raise RuntimeError(f"No current decision for user {user_id} after concurrent write")
            return DecisionResult(
                state=current,
                hours_remaining=hours_remaining(current.expires_at, now_ms),
                is_new=False,
                has_expired_decision=await repo.has_locked(user_id),
            )

    async def acknowledge(self, decision_id: str) -> bool:
        """
        Mark a decision as seen; idempotent

        Unknown ids are accepted (logged only).

        Returns:
            True if this call set acknowledged_at
        """
        async with self.session_factory() as session:
            async with session.begin():
                repo = DecisionStateRepository(session)
                updated = await repo.acknowledge(decision_id, self.now_ms())
                if not updated and await repo.get_by_id(decision_id) is None:
                    logger.warning("Acknowledge for unknown decision %s", decision_id)

        return updated
