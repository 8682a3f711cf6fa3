"""
Subscription quota policy.

Maps a caller's subscription facts to exactly one plan tier and its limits.
The table is immutable and shared read-only across concurrent requests.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from ..core.models import SubscriptionSnapshot

UNLIMITED = -1

# Credit balance at or above which an account is treated as unlimited
UNLIMITED_CREDITS_THRESHOLD = 999_999

PAID_PLANS = ("pack", "pro", "enterprise")

DEFAULT_PLAN = "free"


@dataclass(frozen=True)
class PlanLimits:
    """Limits of one subscription tier."""

    max_files: int
    max_repos: int

    @property
    def has_file_limit(self) -> bool:
        return self.max_files > 0

    def allows_repository_count(self, repository_count: int) -> bool:
        """Whether a caller on this tier may hold the given number of repositories."""
        if self.max_repos == UNLIMITED:
            return True
        return repository_count <= self.max_repos


PLAN_LIMITS: Mapping[str, PlanLimits] = MappingProxyType(
    {
        "free": PlanLimits(max_files=100, max_repos=3),
        "pack": PlanLimits(max_files=200, max_repos=10),
        "pro": PlanLimits(max_files=500, max_repos=50),
        "enterprise": PlanLimits(max_files=2000, max_repos=UNLIMITED),
    }
)


def resolve_plan_type(
    plan_type: Optional[str] = None,
    subscription: Optional[SubscriptionSnapshot] = None,
) -> str:
    """
    Resolve the effective tier for a caller.

    Precedence (highest first): active paid plan, unlimited-credit override,
    any positive credit or a pack plan, free.

    Args:
        plan_type: Tier name supplied by the caller
        subscription: Billing facts; when absent the plan is taken as active

    Returns:
        One of the PLAN_LIMITS keys
    """
    if subscription is None:
        subscription = SubscriptionSnapshot(plan_type=plan_type, status="active")

    plan = (subscription.plan_type or plan_type or "").strip().lower()
    status = (subscription.status or "").strip().lower()
    credits = subscription.credits_remaining or 0

    if status == "active" and plan in PAID_PLANS:
        return plan
    if credits >= UNLIMITED_CREDITS_THRESHOLD:
        return "enterprise"
    if plan == "pack" or credits > 0:
        return "pack"
    return DEFAULT_PLAN


class QuotaPolicy:
    """Read-only view over the plan limits table."""

    def __init__(self, limits: Mapping[str, PlanLimits] = PLAN_LIMITS):
        if DEFAULT_PLAN not in limits:
            raise ValueError(f"Quota table must define the '{DEFAULT_PLAN}' plan")
        self._limits = MappingProxyType(dict(limits))

    def resolve(
        self,
        plan_type: Optional[str] = None,
        subscription: Optional[SubscriptionSnapshot] = None,
    ) -> Tuple[str, PlanLimits]:
        """
        Resolve a caller to (plan_type, PlanLimits).

        Tiers missing from a custom table fall back to the free tier.
        """
        resolved = resolve_plan_type(plan_type, subscription)
        if resolved not in self._limits:
            resolved = DEFAULT_PLAN
        return resolved, self._limits[resolved]

    def limits_for(self, plan_type: str) -> PlanLimits:
        return self._limits.get(plan_type, self._limits[DEFAULT_PLAN])

    @property
    def plans(self) -> Mapping[str, PlanLimits]:
        return self._limits
