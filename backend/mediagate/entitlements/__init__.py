"""
Entitlement resolution: subscription lifecycle and content access.
"""

from mediagate.entitlements.errors import (
    ActiveSubscriptionExistsError,
    ContentNotAccessibleError,
    ContentNotPublishedError,
    PlanNotAvailableError,
    SubscriptionExpiredError,
    SubscriptionInactiveError,
)
from mediagate.entitlements.lifecycle import current_status, is_live
from mediagate.entitlements.resolver import EntitlementResolver

__all__ = [
    "ActiveSubscriptionExistsError",
    "ContentNotAccessibleError",
    "ContentNotPublishedError",
    "EntitlementResolver",
    "PlanNotAvailableError",
    "SubscriptionExpiredError",
    "SubscriptionInactiveError",
    "current_status",
    "is_live",
]
