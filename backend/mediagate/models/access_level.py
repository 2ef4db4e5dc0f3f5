"""
Entitlement tiers shared by plans and content.

The tiers form a total order: free < basic < premium. A plan at level L
unlocks every content item whose required level is <= L.
"""

import enum


class AccessLevel(str, enum.Enum):
    """Ordered entitlement tier."""
    FREE = "free"
    BASIC = "basic"
    PREMIUM = "premium"

    @property
    def rank(self) -> int:
        return _RANKS[self]

    def satisfies(self, required: "AccessLevel") -> bool:
        """True if a subscriber at this level may view content at ``required``."""
        return self.rank >= AccessLevel(required).rank


_RANKS = {
    AccessLevel.FREE: 0,
    AccessLevel.BASIC: 1,
    AccessLevel.PREMIUM: 2,
}
