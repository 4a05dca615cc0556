"""
Grocery List Aggregator

Resolves which recipes a list covers (an explicit selection, or everything
on the calendar for a week), hands their ingredients to the merge backend
and stores the result as the list for (user, week). Regenerating a week
overwrites the stored list completely.
"""

import logging
from datetime import date

from flask import current_app

from constants import MAX_LENGTHS
from models import GroceryList
from models.base import utcnow
from utils.sanitizer import sanitize_text
from .calendar import scheduled_recipe_ids
from .dates import parse_date, start_of_week
from .errors import InvalidInput, MealPlannerError, NotFound, UpstreamFailure
from .recipes import get_recipes
from .store import storage_errors, upsert

logger = logging.getLogger(__name__)

EMPTY_WEEK_MESSAGE = 'No meals scheduled this week. Add meals to your calendar first.'


def parse_recipe_ids(raw):
    """Unique recipe ids in first-seen order."""
    if not isinstance(raw, (list, tuple)):
        raise InvalidInput('mealIds must be a list of recipe ids')

    ids = []
    for value in raw:
        if isinstance(value, bool):
            raise InvalidInput(f'Invalid recipe id: {value!r}')
        try:
            recipe_id = int(value)
        except (TypeError, ValueError):
            raise InvalidInput(f'Invalid recipe id: {value!r}') from None
        if recipe_id not in ids:
            ids.append(recipe_id)
    return ids


def build_merge_request(recipes):
    """[{title, ingredients}] for the merge backend, one per recipe occurrence."""
    return [
        {'title': recipe.title, 'ingredients': list(recipe.ingredients or [])}
        for recipe in recipes
    ]


def clean_categories(raw):
    """
    Keep categories that have a name and at least one non-blank item.
    Categories with the same name are folded together in first-seen order.
    """
    merged = {}
    for entry in raw or []:
        if not isinstance(entry, dict):
            continue
        name = sanitize_text(entry.get('category'), max_length=MAX_LENGTHS['tag'])
        items = entry.get('items')
        if not name or not isinstance(items, list):
            continue
        cleaned = [sanitize_text(item, max_length=MAX_LENGTHS['ingredient_text']) for item in items]
        cleaned = [item for item in cleaned if item]
        if not cleaned:
            continue
        merged.setdefault(name, []).extend(cleaned)
    return [{'category': name, 'items': items} for name, items in merged.items()]


def _resolve_selection(recipe_ids):
    ids = parse_recipe_ids(recipe_ids)
    if not ids:
        raise InvalidInput('No meals selected')
    if len(ids) > MAX_LENGTHS['recipes_per_grocery_list']:
        raise InvalidInput('Too many meals selected for one grocery list')

    found = get_recipes(ids)
    if not found:
        raise InvalidInput('No valid meals found')
    missing = [rid for rid in ids if rid not in found]
    if missing:
        logger.warning("Skipping unknown recipe ids %s", missing)
    return [found[rid] for rid in ids if rid in found]


def _resolve_week(user_id, week_start):
    ids = scheduled_recipe_ids(user_id, week_start)
    if not ids:
        raise InvalidInput(EMPTY_WEEK_MESSAGE)
    found = get_recipes(ids)
    # Same recipe on two days is cooked twice, so it is sent twice
    return [found[rid] for rid in ids if rid in found]


def default_week_start(today=None):
    today = today or date.today()
    return start_of_week(today, current_app.config['WEEK_STARTS_ON'])


def generate_grocery_list(user_id, recipe_ids=None, week_start_date=None, merger=None,
                          notifier=None, user=None):
    """
    Build and store the grocery list for (user, week).

    With recipe_ids, exactly those recipes are used (duplicates collapse) and
    week_start_date only names the week the list is stored under (default:
    the current week). Without recipe_ids, every meal scheduled in the 7 days
    from week_start_date is used.
    """
    if recipe_ids is None and week_start_date is None:
        raise InvalidInput('Provide mealIds or weekStartDate')

    if week_start_date is not None:
        week_start = parse_date(week_start_date, 'weekStartDate')
    else:
        week_start = default_week_start()

    if recipe_ids is not None:
        recipes = _resolve_selection(recipe_ids)
    else:
        recipes = _resolve_week(user_id, week_start)

    if merger is None:
        raise UpstreamFailure('No ingredient merge backend configured')

    merge_request = build_merge_request(recipes)
    try:
        raw = merger.merge(merge_request)
    except MealPlannerError:
        raise
    except Exception as e:
        logger.exception("Merge backend failed for user %s", user_id)
        raise UpstreamFailure('Failed to generate grocery list') from e

    if not isinstance(raw, list):
        logger.warning("Merge backend returned %s instead of a list for user %s",
                       type(raw).__name__, user_id)
        raise UpstreamFailure('Unexpected grocery list format from the recipe assistant')

    categories = clean_categories(raw)
    logger.info("Grocery list for user %s week %s: %d recipes -> %d categories",
                user_id, week_start, len(recipes), len(categories))

    with storage_errors('save grocery list'):
        upsert(GroceryList,
               {'user_id': user_id, 'week_start_date': week_start,
                'categories': categories, 'updated_at': utcnow()},
               conflict_columns=['user_id', 'week_start_date'],
               update_columns=['categories', 'updated_at'])

    grocery_list = get_grocery_list(user_id, week_start)
    if notifier is not None and user is not None:
        notifier.notify(user, 'grocery_list_ready', grocery_list.to_dict())
    return grocery_list


def get_grocery_list(user_id, week_start_date):
    week_start = parse_date(week_start_date, 'weekStartDate')
    grocery_list = GroceryList.query.filter_by(user_id=user_id, week_start_date=week_start).first()
    if grocery_list is None:
        raise NotFound(f'No grocery list for the week of {week_start.isoformat()}')
    return grocery_list
