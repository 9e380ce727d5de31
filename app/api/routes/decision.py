"""
Decision API Routes
The daily decision and its acknowledgment
"""

from fastapi import APIRouter, HTTPException, Depends, Header, Request
from typing import Optional
import logging

from app.infrastructure.db.repositories.financial_repository import UserRepository
from app.domain.models import UserAccount
from app.domain.schemas.decision import (
    AcknowledgeRequest,
    AcknowledgeResponse,
    DecisionEnvelope,
)
from app.services.decision_service import DecisionCacheManager
from app.services.plan_gate import shape_decision

logger = logging.getLogger(__name__)
router = APIRouter()


def get_decision_manager(request: Request) -> DecisionCacheManager:
    return request.app.state.decision_manager


async def get_current_user(
    request: Request,
    x_user_id: Optional[str] = Header(default=None),
) -> UserAccount:
    """
    Resolve the caller

    Authentication happens upstream; it forwards the user id in X-User-Id.
    Users without a record are served as free tier. The lookup session is
    closed before the decision manager opens its own.
    """
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Missing X-User-Id header")

    async with request.app.state.session_factory() as session:
        user = await UserRepository(session).get(x_user_id)
    if user is None:
        logger.debug("No user record for %s, serving free tier", x_user_id)
        return UserAccount(id=x_user_id)
    return user


@router.get("/decision", response_model=DecisionEnvelope)
async def get_decision(
    refresh: bool = False,
    user: UserAccount = Depends(get_current_user),
    manager: DecisionCacheManager = Depends(get_decision_manager),
):
    """
    Get the current decision

    Returns the cached decision while valid, otherwise computes a new one.
    refresh=true supersedes the cached decision immediately.
    """
    try:
        result = await manager.get_or_compute(
            user.id,
            force_refresh=refresh,
            timezone_name=user.timezone,
        )
        plan = user.effective_plan(manager.now_ms())
        logger.info(
            "Decision %s for user %s (plan=%s, new=%s, refresh=%s)",
            result.state.id,
            user.id,
            plan.value,
            result.is_new,
            refresh,
        )
        return DecisionEnvelope(data=shape_decision(result, plan))

    except Exception:
        logger.exception("Failed to get decision for user %s", user.id)
        raise HTTPException(
            status_code=500,
            detail="Failed to get decision"
        )


@router.post("/decision/acknowledge", response_model=AcknowledgeResponse)
async def acknowledge_decision(
    request: AcknowledgeRequest,
    user: UserAccount = Depends(get_current_user),
    manager: DecisionCacheManager = Depends(get_decision_manager),
):
    """
    Mark that the user saw and acknowledged a decision

    Succeeds for any id, including unknown or already acknowledged ones.
    """
    try:
        await manager.acknowledge(request.decision_id)
        return AcknowledgeResponse(success=True)

    except Exception:
        logger.exception("Failed to acknowledge decision %s", request.decision_id)
        raise HTTPException(
            status_code=500,
            detail="Failed to acknowledge decision"
        )
