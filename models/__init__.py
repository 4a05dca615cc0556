"""
Models Package

Exports all database models and the db instance for use throughout the application.
"""

from .base import db

from .user import User
from .recipe import Recipe
from .preferences import UserPreferences
from .favorite import UserFavorite
from .calendar import MealCalendarEntry
from .grocery import GroceryList
from .selection import UserMealSelection

__all__ = [
    'db',
    'User',
    'Recipe',
    'UserPreferences',
    'UserFavorite',
    'MealCalendarEntry',
    'GroceryList',
    'UserMealSelection',
]
