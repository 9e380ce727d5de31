"""
RISK CLASSIFIER
Pure mapping from cash position to one of five risk levels.

Ordered predicates, first match wins:
1. available after bills < 0 -> CRITICAL
2. runway < 3 days           -> DANGER
3. runway < 7 days           -> WARNING
4. runway < 14 days          -> CAUTION
5. otherwise                 -> SAFE
"""

from typing import Tuple

from app.domain.models import RiskLevel

# Runway reported when nothing is being spent
RUNWAY_SENTINEL = 999

_RUNWAY_THRESHOLDS: Tuple[Tuple[int, RiskLevel], ...] = (
    (3, RiskLevel.DANGER),
    (7, RiskLevel.WARNING),
    (14, RiskLevel.CAUTION),
)


def compute_runway_days(available_after_bills: int, daily_burn: int) -> int:
    """Days the post-bill balance lasts at the recent burn rate."""
    if daily_burn <= 0:
        return RUNWAY_SENTINEL
    return max(0, available_after_bills) // daily_burn


def classify_risk(available_after_bills: int, runway_days: int) -> RiskLevel:
    """Classify near-term cash-flow pressure."""
    if available_after_bills < 0:
        return RiskLevel.CRITICAL

    for threshold, level in _RUNWAY_THRESHOLDS:
        if runway_days < threshold:
            return level

    return RiskLevel.SAFE
