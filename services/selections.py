"""
Meal Selection Service

The recipes a user picked for a week, kept until they build the grocery
list from them. Add and remove are idempotent on (user, recipe, week).
"""

import logging

from sqlalchemy.orm import joinedload

from models import UserMealSelection
from .dates import parse_date
from .recipes import get_recipe
from .store import insert_ignore, storage_errors

logger = logging.getLogger(__name__)


def add_selection(user_id, recipe_id, week_start_date):
    """Select a recipe for a week. Selecting it again returns the existing row."""
    week_start = parse_date(week_start_date, 'weekStartDate')
    recipe = get_recipe(recipe_id)
    with storage_errors('add meal selection'):
        inserted = insert_ignore(UserMealSelection,
                                 {'user_id': user_id, 'recipe_id': recipe.id,
                                  'week_start_date': week_start},
                                 conflict_columns=['user_id', 'recipe_id', 'week_start_date'])
    if inserted:
        logger.info("User %s selected recipe %s for week %s", user_id, recipe.id, week_start)
    return (UserMealSelection.query
            .filter_by(user_id=user_id, recipe_id=recipe.id, week_start_date=week_start)
            .one())


def remove_selection(user_id, recipe_id, week_start_date):
    """Drop a selection. Returns False when it was not selected."""
    week_start = parse_date(week_start_date, 'weekStartDate')
    with storage_errors('remove meal selection'):
        removed = (UserMealSelection.query
                   .filter_by(user_id=user_id, recipe_id=recipe_id, week_start_date=week_start)
                   .delete(synchronize_session=False))
    if removed:
        logger.info("User %s unselected recipe %s for week %s", user_id, recipe_id, week_start)
    return bool(removed)


def list_selections(user_id, week_start_date):
    """Selections for one week with their recipes, in the order they were picked."""
    week_start = parse_date(week_start_date, 'weekStartDate')
    return (UserMealSelection.query
            .options(joinedload(UserMealSelection.recipe))
            .filter_by(user_id=user_id, week_start_date=week_start)
            .order_by(UserMealSelection.selected_at, UserMealSelection.id)
            .all())
