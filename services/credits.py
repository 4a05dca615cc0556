"""
Meal Credits

Each generated recipe costs one credit. Checking the balance and deducting
it are separate steps: the suggestion flow checks first, persists what the
backend produced, then deducts for exactly what was saved.
"""

import logging

from sqlalchemy import case

from constants import INACTIVE_SUBSCRIPTION_STATUSES, UNLIMITED_PLANS
from models import db, User
from .errors import InvalidInput, QuotaExceeded
from .store import storage_errors

logger = logging.getLogger(__name__)


def has_unlimited_credits(user):
    return user.subscription_plan in UNLIMITED_PLANS


def check_quota(user, requested):
    """
    How many recipes the user may generate right now.

    Returns min(requested, remaining credits). Raises QuotaExceeded when that
    is zero or the subscription can no longer spend credits.
    """
    if requested < 1:
        raise InvalidInput('count must be at least 1')
    if user.subscription_status in INACTIVE_SUBSCRIPTION_STATUSES:
        raise QuotaExceeded('Your subscription is not active. Renew it to generate more meals.')
    if has_unlimited_credits(user):
        return requested
    if (user.meal_credits or 0) <= 0:
        raise QuotaExceeded('Insufficient meal credits. Upgrade your plan to generate more meals.')
    return min(requested, user.meal_credits)


def deduct_credits(user_id, count):
    """
    Spend count credits (never going below zero) and record the usage.

    Done with a single UPDATE so concurrent requests cannot resurrect
    credits that were already spent. Returns the refreshed User.
    """
    if count <= 0:
        return db.session.get(User, user_id)

    user = db.session.get(User, user_id)
    unlimited = user is not None and has_unlimited_credits(user)
    values = {User.total_meals_used: User.total_meals_used + count}
    if not unlimited:
        values[User.meal_credits] = case(
            (User.meal_credits > count, User.meal_credits - count),
            else_=0,
        )

    with storage_errors('deduct meal credits'):
        User.query.filter_by(id=user_id).update(values, synchronize_session=False)

    user = db.session.get(User, user_id)
    logger.info("Deducted %d credits from user %s (remaining=%s)",
                0 if unlimited else count, user_id, user.meal_credits if user else None)
    return user
