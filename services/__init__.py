"""
Services Package

Business logic modules for the meal planner.
"""

from .errors import (
    MealPlannerError,
    InvalidInput,
    Unauthenticated,
    QuotaExceeded,
    NotFound,
    Conflict,
    UpstreamFailure,
    Timeout,
)

from .recipes import (
    create_recipe,
    get_recipe,
    get_recipes,
    list_user_recipes,
    list_recipes_by_preferences,
)

from .preferences import (
    get_preferences,
    set_preferences,
)

from .favorites import (
    add_favorite,
    remove_favorite,
    list_favorites,
)

from .calendar import (
    schedule_meal,
    unschedule_meal,
    list_calendar,
    list_week,
)

from .grocery import (
    generate_grocery_list,
    get_grocery_list,
)

from .selections import (
    add_selection,
    remove_selection,
    list_selections,
)

from .credits import (
    check_quota,
    deduct_credits,
)

from .suggestions import (
    LLMRecipeSuggester,
    suggest_recipes,
)

from .merging import LLMIngredientMerger
from .notifications import EmailNotifier
from .importer import import_recipe_from_url

__all__ = [
    # Errors
    'MealPlannerError',
    'InvalidInput',
    'Unauthenticated',
    'QuotaExceeded',
    'NotFound',
    'Conflict',
    'UpstreamFailure',
    'Timeout',
    # Recipes
    'create_recipe',
    'get_recipe',
    'get_recipes',
    'list_user_recipes',
    'list_recipes_by_preferences',
    # Preferences
    'get_preferences',
    'set_preferences',
    # Favorites
    'add_favorite',
    'remove_favorite',
    'list_favorites',
    # Calendar
    'schedule_meal',
    'unschedule_meal',
    'list_calendar',
    'list_week',
    # Grocery lists
    'generate_grocery_list',
    'get_grocery_list',
    # Meal selections
    'add_selection',
    'remove_selection',
    'list_selections',
    # Credits and suggestions
    'check_quota',
    'deduct_credits',
    'LLMRecipeSuggester',
    'suggest_recipes',
    # Backends
    'LLMIngredientMerger',
    'EmailNotifier',
    'import_recipe_from_url',
]
