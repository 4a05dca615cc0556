"""
Meal Calendar Service

Schedules recipes onto (date, slot) cells of a user's calendar. A cell
holds at most one recipe: scheduling into an occupied cell replaces it
through a single INSERT ... ON CONFLICT, never a read-then-write.
"""

import logging

from sqlalchemy.orm import joinedload

from constants import DEFAULT_MEAL_SLOT, MEAL_SLOTS
from models import MealCalendarEntry
from .dates import parse_date, week_window
from .errors import InvalidInput
from .recipes import get_recipe
from .store import storage_errors, upsert

logger = logging.getLogger(__name__)

SLOT_ORDER = {slot: index for index, slot in enumerate(MEAL_SLOTS)}


def normalize_slot(slot):
    """Lower-case slot name; None means the default slot (dinner)."""
    if slot is None or slot == '':
        return DEFAULT_MEAL_SLOT
    if not isinstance(slot, str) or slot.strip().lower() not in SLOT_ORDER:
        raise InvalidInput(f"Unknown meal type '{slot}'. Use one of: {', '.join(MEAL_SLOTS)}")
    return slot.strip().lower()


def _entry_sort_key(entry):
    return entry.scheduled_date, SLOT_ORDER.get(entry.meal_type, len(SLOT_ORDER)), entry.id


def get_entry(user_id, scheduled_date, slot):
    return (MealCalendarEntry.query
            .options(joinedload(MealCalendarEntry.recipe))
            .filter_by(user_id=user_id, scheduled_date=scheduled_date, meal_type=slot)
            .one_or_none())


def schedule_meal(user_id, scheduled_date, slot, recipe_id):
    """
    Put recipe_id into the (date, slot) cell, replacing whatever was there.

    Raises NotFound if the recipe does not exist.
    """
    scheduled_date = parse_date(scheduled_date, 'scheduledDate')
    slot = normalize_slot(slot)
    recipe = get_recipe(recipe_id)

    with storage_errors('schedule meal'):
        upsert(MealCalendarEntry,
               {'user_id': user_id, 'scheduled_date': scheduled_date,
                'meal_type': slot, 'recipe_id': recipe.id},
               conflict_columns=['user_id', 'scheduled_date', 'meal_type'],
               update_columns=['recipe_id'])

    logger.info("User %s scheduled recipe %s for %s %s", user_id, recipe.id, scheduled_date, slot)
    return get_entry(user_id, scheduled_date, slot)


def unschedule_meal(user_id, scheduled_date, slot):
    """Clear the (date, slot) cell. Clearing an empty cell is a no-op."""
    scheduled_date = parse_date(scheduled_date, 'scheduledDate')
    slot = normalize_slot(slot)

    with storage_errors('remove meal from calendar'):
        removed = (MealCalendarEntry.query
                   .filter_by(user_id=user_id, scheduled_date=scheduled_date, meal_type=slot)
                   .delete(synchronize_session=False))

    if removed:
        logger.info("User %s unscheduled %s %s", user_id, scheduled_date, slot)
    return bool(removed)


def list_calendar(user_id, start_date, end_date):
    """
    Entries with start_date <= date <= end_date, recipes loaded, ordered by
    date then breakfast, lunch, dinner, snack.
    """
    start_date = parse_date(start_date, 'startDate')
    end_date = parse_date(end_date, 'endDate')
    if start_date > end_date:
        raise InvalidInput('startDate must not be after endDate')

    entries = (MealCalendarEntry.query
               .options(joinedload(MealCalendarEntry.recipe))
               .filter(MealCalendarEntry.user_id == user_id,
                       MealCalendarEntry.scheduled_date >= start_date,
                       MealCalendarEntry.scheduled_date <= end_date)
               .all())
    return sorted(entries, key=_entry_sort_key)


def list_week(user_id, week_start):
    """Entries in the 7-day window starting at week_start."""
    start, end = week_window(parse_date(week_start, 'weekStartDate'))
    return list_calendar(user_id, start, end)


def scheduled_recipe_ids(user_id, week_start):
    """One recipe id per scheduled entry of the week, in calendar order."""
    return [entry.recipe_id for entry in list_week(user_id, week_start)]
