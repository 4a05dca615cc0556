"""
Favorites Service

Idempotent add/remove of (user, recipe) pairs.
"""

import logging

from sqlalchemy.orm import joinedload

from models import UserFavorite
from .recipes import get_recipe
from .store import insert_ignore, storage_errors

logger = logging.getLogger(__name__)


def add_favorite(user_id, recipe_id):
    """Favorite a recipe. Adding an existing favorite returns it unchanged."""
    recipe = get_recipe(recipe_id)
    with storage_errors('add favorite'):
        insert_ignore(UserFavorite, {'user_id': user_id, 'recipe_id': recipe.id},
                      conflict_columns=['user_id', 'recipe_id'])
    logger.info("User %s favorited recipe %s", user_id, recipe.id)
    return UserFavorite.query.filter_by(user_id=user_id, recipe_id=recipe.id).one()


def remove_favorite(user_id, recipe_id):
    """Un-favorite a recipe. Returns False when it was not a favorite."""
    with storage_errors('remove favorite'):
        removed = (UserFavorite.query
                   .filter_by(user_id=user_id, recipe_id=recipe_id)
                   .delete(synchronize_session=False))
    if removed:
        logger.info("User %s removed favorite %s", user_id, recipe_id)
    return bool(removed)


def list_favorites(user_id):
    """Favorites with their recipes, most recently favorited first."""
    return (UserFavorite.query
            .options(joinedload(UserFavorite.recipe))
            .filter_by(user_id=user_id)
            .order_by(UserFavorite.created_at.desc(), UserFavorite.id.desc())
            .all())
