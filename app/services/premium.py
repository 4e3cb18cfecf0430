"""
Premium gate — decides whether a user's subscription unlocks premium rules.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.repository import SkinRepository
from app.schemas import SubscriptionStatus, SubscriptionTier

logger = logging.getLogger(__name__)

PREMIUM_TIERS = {SubscriptionTier.PREMIUM, SubscriptionTier.PROFESSIONAL}
# A running trial unlocks premium just like a paid subscription.
LIVE_STATUSES = {SubscriptionStatus.ACTIVE, SubscriptionStatus.TRIAL}

repo = SkinRepository()


def is_premium_subscription(
    tier: Optional[SubscriptionTier | str],
    status: Optional[SubscriptionStatus | str],
    expires_at: Optional[datetime] = None,
    now: Optional[datetime] = None,
) -> bool:
    """Premium-tier, not canceled or inactive, and not past its expiry."""
    if tier is None or status is None:
        return False
    try:
        tier = SubscriptionTier(tier)
        status = SubscriptionStatus(status)
    except ValueError:
        return False
    if tier not in PREMIUM_TIERS or status not in LIVE_STATUSES:
        return False
    if expires_at is None:
        return True

    now = now or datetime.now(timezone.utc)
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=timezone.utc)
    return expires_at > now


async def check_user_premium_status(
    db: AsyncSession,
    user_id: int,
    repository: Optional[SkinRepository] = None,
) -> bool:
    """Look up the user's subscription. Unknown users and failed lookups are not premium."""
    repository = repository or repo
    try:
        user = await repository.get_user(db, user_id)
    except Exception as e:
        logger.warning(f"Premium lookup failed for user {user_id}: {e}")
        return False

    if user is None:
        return False
    return is_premium_subscription(
        user.subscription_tier,
        user.subscription_status,
        user.subscription_expires_at,
    )
