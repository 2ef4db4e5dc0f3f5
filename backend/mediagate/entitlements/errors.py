"""Entitlement and subscription lifecycle errors."""

from fastapi import status

from mediagate.platform.errors import AppError, ConflictError, PermissionDeniedError


class ContentNotPublishedError(PermissionDeniedError):
    """Unpublished content is hidden from every caller (403)."""

    def __init__(self, content_id: str):
        super().__init__(
            message="Content is not published",
            code="CONTENT_NOT_PUBLISHED",
            details={"content_id": content_id},
        )


class ContentNotAccessibleError(PermissionDeniedError):
    """Caller's plan level is below the content's required level (403)."""

    def __init__(self, content_id: str, required_level: str):
        super().__init__(
            message="Content requires a higher subscription level",
            code="CONTENT_NOT_ACCESSIBLE",
            details={"content_id": content_id, "required_level": required_level},
        )


class ActiveSubscriptionExistsError(ConflictError):
    def __init__(self, subscription_id: str):
        super().__init__(
            message="User already has an active subscription",
            code="ACTIVE_SUBSCRIPTION_EXISTS",
            details={"subscription_id": subscription_id},
        )


class _SubscriptionStateError(AppError):
    def __init__(self, code: str, message: str, details: dict):
        super().__init__(
            code=code,
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            details=details,
        )


class PlanNotAvailableError(_SubscriptionStateError):
    def __init__(self, plan_id: str):
        super().__init__(
            "PLAN_NOT_AVAILABLE",
            "Plan is not available for subscription",
            {"plan_id": plan_id},
        )


class SubscriptionExpiredError(_SubscriptionStateError):
    def __init__(self, subscription_id: str):
        super().__init__(
            "SUBSCRIPTION_EXPIRED",
            "Subscription has expired",
            {"subscription_id": subscription_id},
        )


class SubscriptionInactiveError(_SubscriptionStateError):
    def __init__(self, subscription_id: str):
        super().__init__(
            "SUBSCRIPTION_INACTIVE",
            "Subscription is not active",
            {"subscription_id": subscription_id},
        )
