"""
Preference Service

One preference row per user. Reads never fail for a valid user; writes
upsert on user_id and replace only the fields that were supplied.
"""

import logging

from constants import MAX_LENGTHS
from models import UserPreferences
from models.base import utcnow
from utils.sanitizer import sanitize_tag
from .errors import InvalidInput
from .store import storage_errors, upsert

logger = logging.getLogger(__name__)

# Accepted input key -> model column
FIELD_ALIASES = {
    'protein': 'protein_preferences',
    'proteinPreferences': 'protein_preferences',
    'cuisine': 'cuisine_preferences',
    'cuisinePreferences': 'cuisine_preferences',
    'allergy': 'dietary_restrictions',
    'dietaryRestrictions': 'dietary_restrictions',
}


def empty_preferences():
    return {'protein': [], 'cuisine': [], 'allergy': []}


def preferences_to_dict(prefs):
    if prefs is None:
        return empty_preferences()
    return {
        'protein': list(prefs.protein_preferences or []),
        'cuisine': list(prefs.cuisine_preferences or []),
        'allergy': list(prefs.dietary_restrictions or []),
    }


def normalize_tags(values, field):
    """Clean a tag list, dropping blanks and repeats (first occurrence wins)."""
    if not isinstance(values, (list, tuple)):
        raise InvalidInput(f'{field} must be a list of strings')

    seen = set()
    tags = []
    for value in values:
        tag = sanitize_tag(value, max_length=MAX_LENGTHS['tag'])
        key = tag.lower()
        if tag and key not in seen:
            seen.add(key)
            tags.append(tag)
    return tags[:MAX_LENGTHS['tags_per_field']]


def get_preferences(user_id):
    """Stored preferences, or the empty default when the user never saved any."""
    prefs = UserPreferences.query.filter_by(user_id=user_id).first()
    return preferences_to_dict(prefs)


def set_preferences(user_id, partial):
    """
    Upsert the user's preferences.

    Each field present in partial replaces the stored list wholesale;
    absent fields keep their stored value (or start empty).
    """
    if not isinstance(partial, dict):
        raise InvalidInput('Preferences must be an object')

    updates = {}
    for key, value in partial.items():
        column = FIELD_ALIASES.get(key)
        if column is None:
            continue
        if column in updates:
            raise InvalidInput(f'{key} was given more than once')
        updates[column] = normalize_tags(value, key)

    if not updates:
        return get_preferences(user_id)

    values = {
        'user_id': user_id,
        'protein_preferences': [],
        'cuisine_preferences': [],
        'dietary_restrictions': [],
        'updated_at': utcnow(),
        **updates,
    }
    with storage_errors('save preferences'):
        upsert(UserPreferences, values,
               conflict_columns=['user_id'],
               update_columns=[*updates, 'updated_at'])
    logger.info("Saved preferences for user %s (%s)", user_id, ', '.join(sorted(updates)))
    return get_preferences(user_id)
