"""
Current User Resolution

Sign-in itself happens elsewhere. Requests reach us with the user id in a
trusted header (set by the auth proxy) or in the Flask session; services
only ever receive that id as an explicit argument.
"""

import logging

from flask import current_app, session

from models import db, User
from services.errors import Unauthenticated
from services.store import insert_ignore, storage_errors

logger = logging.getLogger(__name__)


def resolve_current_user(request):
    """Return the id of the user making this request, or raise Unauthenticated."""
    header = current_app.config['USER_ID_HEADER']
    user_id = (request.headers.get(header) or '').strip() or session.get('user_id')
    if not user_id:
        raise Unauthenticated()
    return str(user_id)


def load_current_user(request):
    """Load the User row for this request, provisioning it when allowed."""
    user_id = resolve_current_user(request)
    user = db.session.get(User, user_id)
    if user is not None:
        return user

    if not current_app.config['AUTO_PROVISION_USERS']:
        raise Unauthenticated('Unknown user')

    # Concurrent first requests for the same id race here; only one insert lands
    with storage_errors('create user'):
        created = insert_ignore(User, {
            'id': user_id,
            'subscription_status': 'trial',
            'subscription_plan': 'trial',
            'meal_credits': current_app.config['DEFAULT_MEAL_CREDITS'],
            'total_meals_used': 0,
        }, conflict_columns=['id'])
    user = db.session.get(User, user_id)
    if user is None:
        raise Unauthenticated('Unknown user')
    if not created:
        return user

    logger.info("Provisioned user %s with %d trial credits", user_id, user.meal_credits)
    notifier = current_app.extensions.get('notifier')
    if notifier is not None:
        notifier.notify(user, 'welcome', {})
    return user
