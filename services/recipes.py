"""
Recipe Store

Creates and reads recipe records. Recipes are immutable once stored; the
only way one disappears is the cascade from deleting its owning user.
"""

import logging
from decimal import Decimal

from sqlalchemy import or_

from constants import COOKING_TIME_RANGE, MAX_LENGTHS, RATING_RANGE
from models import db, Recipe
from utils.sanitizer import (
    sanitize_ingredient_text, sanitize_instructions, sanitize_recipe_name,
    sanitize_text, sanitize_url,
)
from .errors import InvalidInput, NotFound
from .store import storage_errors

logger = logging.getLogger(__name__)


def clamp(value, low, high):
    return max(low, min(high, value))


def _coerce_number(value, default, cast):
    try:
        return cast(value) if value not in (None, '') else default
    except (TypeError, ValueError):
        return default


def normalize_ingredients(raw):
    """Sanitized, non-empty ingredient lines in their original order."""
    if raw is None:
        return []
    if isinstance(raw, str):
        raw = raw.splitlines()
    if not isinstance(raw, (list, tuple)):
        raise InvalidInput('ingredients must be a list of strings')

    lines = []
    for item in raw[:MAX_LENGTHS['ingredients_per_recipe']]:
        text = sanitize_ingredient_text(item, max_length=MAX_LENGTHS['ingredient_text'])
        if text:
            lines.append(text)
    return lines


def build_recipe_fields(data):
    """Validate and normalize incoming recipe data into model column values."""
    if not isinstance(data, dict):
        raise InvalidInput('Recipe data must be an object')

    title = (data.get('title') or '').strip()
    if not title:
        raise InvalidInput('Recipe title is required')

    cooking_time = _coerce_number(data.get('cookingTime', data.get('cooking_time')), 30,
                                  lambda v: int(float(v)))
    rating = _coerce_number(data.get('rating'), None, float)
    if rating is not None:
        rating = Decimal(str(round(clamp(rating, *RATING_RANGE), 1)))

    return {
        'title': sanitize_recipe_name(title, max_length=MAX_LENGTHS['recipe_title']),
        'description': sanitize_text(data.get('description'), max_length=MAX_LENGTHS['description']),
        'cuisine': sanitize_text(data.get('cuisine'), max_length=MAX_LENGTHS['tag']),
        'protein': sanitize_text(data.get('protein'), max_length=MAX_LENGTHS['tag']),
        'cooking_time': clamp(cooking_time, *COOKING_TIME_RANGE),
        'rating': rating,
        'ingredients': normalize_ingredients(data.get('ingredients')),
        'instructions': sanitize_instructions(data.get('instructions'),
                                              max_length=MAX_LENGTHS['instructions']),
        'image_url': sanitize_url(data.get('imageUrl', data.get('image_url'))),
        'source_url': sanitize_url(data.get('sourceUrl', data.get('source_url')))[:MAX_LENGTHS['source_url']],
    }


def create_recipe(data, owner_user_id=None):
    """Store a new recipe. owner_user_id is None for generated recipes."""
    recipe = Recipe(owner_user_id=owner_user_id, **build_recipe_fields(data))
    with storage_errors('save recipe'):
        db.session.add(recipe)
    logger.info("Created recipe %s '%s' (owner=%s)", recipe.id, recipe.title, owner_user_id)
    return recipe


def get_recipe(recipe_id):
    recipe = db.session.get(Recipe, recipe_id)
    if recipe is None:
        raise NotFound(f'Recipe {recipe_id} not found')
    return recipe


def get_recipes(recipe_ids):
    """Map id -> Recipe for the ids that resolve; unknown ids are left out."""
    ids = {int(rid) for rid in recipe_ids}
    if not ids:
        return {}
    recipes = Recipe.query.filter(Recipe.id.in_(ids)).all()
    return {recipe.id: recipe for recipe in recipes}


def list_user_recipes(user_id):
    return (Recipe.query
            .filter_by(owner_user_id=user_id)
            .order_by(Recipe.created_at.desc(), Recipe.id.desc())
            .all())


def list_recipes_by_preferences(protein_prefs=None, cuisine_prefs=None, limit=10):
    """Stored recipes matching any of the given tags, highest rated first."""
    query = Recipe.query
    filters = []
    if protein_prefs:
        filters.append(Recipe.protein.in_(protein_prefs))
    if cuisine_prefs:
        filters.append(Recipe.cuisine.in_(cuisine_prefs))
    if filters:
        query = query.filter(or_(*filters))
    return (query
            .order_by(Recipe.rating.desc().nulls_last(), Recipe.id.desc())
            .limit(limit)
            .all())
