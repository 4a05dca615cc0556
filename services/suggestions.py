"""
Recipe Suggestion Gateway

Asks the generative backend for new recipes matching a user's
preferences, stores them and charges credits for them. All guessing about
the backend's response shape stays in LLMRecipeSuggester; callers always
get a plain list of recipe dicts.
"""

import logging

from constants import COOKING_TIME_RANGE, MAX_LENGTHS, RATING_RANGE
from .credits import check_quota, deduct_credits
from .errors import InvalidInput, MealPlannerError, UpstreamFailure
from .llm import ChatClient
from .preferences import get_preferences
from .recipes import clamp, create_recipe

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a professional chef and meal planning expert. Always respond "
    "with valid JSON arrays containing meal suggestions."
)

PROMPT_TEMPLATE = """Generate {count} diverse, delicious family-sized meal suggestions based on these preferences:

Protein preferences: {protein}
Cuisine preferences: {cuisine}
Dietary restrictions: {allergy}

For each meal, provide a title, a 1-2 sentence description, the cuisine, the primary protein,
the cooking time in minutes, a complete list of ingredients with quantities, basic cooking
instructions, an estimated rating between 4.0 and 5.0, and the source URL of the recipe if known.

Respond with a JSON array in this exact format:
[
  {{
    "title": "Meal Name",
    "description": "Brief description of the dish",
    "cuisine": "Cuisine Type",
    "protein": "Primary Protein",
    "cookingTime": 30,
    "ingredients": ["ingredient 1", "ingredient 2"],
    "instructions": "Basic cooking steps",
    "rating": 4.7,
    "imageUrl": "https://example.com/recipe-image.jpg",
    "sourceUrl": "https://website.com/recipe-url"
  }}
]"""

RESPONSE_KEYS = ('meals', 'suggestions', 'recipes')


def build_prompt(preferences, count):
    def joined(tags, fallback):
        return ', '.join(tags) if tags else fallback

    return PROMPT_TEMPLATE.format(
        count=count,
        protein=joined(preferences.get('protein'), 'Any'),
        cuisine=joined(preferences.get('cuisine'), 'Any'),
        allergy=joined(preferences.get('allergy'), 'None'),
    )


def unwrap_suggestions(parsed):
    if isinstance(parsed, list):
        return parsed
    if isinstance(parsed, dict):
        for key in RESPONSE_KEYS:
            if isinstance(parsed.get(key), list):
                return parsed[key]
        # A single recipe object
        if 'title' in parsed and 'ingredients' in parsed:
            return [parsed]
    raise UpstreamFailure('Unexpected response format from the recipe assistant')


def normalize_suggestion(raw):
    """Fill defaults and clamp numbers the way stored recipes expect them."""
    if not isinstance(raw, dict):
        return None

    try:
        cooking_time = int(float(raw.get('cookingTime') or 30))
    except (TypeError, ValueError):
        cooking_time = 30
    try:
        rating = float(raw.get('rating') or 4.5)
    except (TypeError, ValueError):
        rating = 4.5

    ingredients = raw.get('ingredients')
    return {
        'title': raw.get('title') or 'Untitled Meal',
        'description': raw.get('description') or 'Delicious meal',
        'cuisine': raw.get('cuisine') or 'International',
        'protein': raw.get('protein') or 'Mixed',
        'cookingTime': clamp(cooking_time, *COOKING_TIME_RANGE),
        'ingredients': [str(i) for i in ingredients] if isinstance(ingredients, list) else [],
        'instructions': raw.get('instructions') or '',
        'rating': clamp(rating, *RATING_RANGE),
        'imageUrl': raw.get('imageUrl') or '',
        'sourceUrl': raw.get('sourceUrl') or '',
    }


class LLMRecipeSuggester:
    """suggest(preferences, count) -> list of normalized recipe dicts."""

    def __init__(self, client, temperature=0.8):
        self.client = client
        self.temperature = temperature

    @classmethod
    def from_config(cls, config):
        return cls(ChatClient.from_config(config))

    def suggest(self, preferences, count):
        parsed = self.client.complete_json(SYSTEM_PROMPT, build_prompt(preferences, count),
                                           temperature=self.temperature)
        suggestions = [normalize_suggestion(item) for item in unwrap_suggestions(parsed)]
        return [s for s in suggestions if s is not None][:count]


def suggest_recipes(user, preferences=None, count=6, suggester=None, notifier=None):
    """
    Generate, store and charge for up to count new recipes.

    Returns {"recipes": [...], "requested": n, "granted": m}; granted is
    less than requested when the user's credits only cover part of the
    request (partial success, not an error). QuotaExceeded when nothing
    can be granted.
    """
    try:
        count = int(count)
    except (TypeError, ValueError):
        raise InvalidInput('count must be a number') from None
    count = min(count, MAX_LENGTHS['suggestion_count'])
    granted = check_quota(user, count)

    if preferences is None:
        preferences = get_preferences(user.id)
    if suggester is None:
        raise UpstreamFailure('No recipe suggestion backend configured')

    try:
        suggestions = suggester.suggest(preferences, granted)
    except MealPlannerError:
        raise
    except Exception as e:
        logger.exception("Suggestion backend failed for user %s", user.id)
        raise UpstreamFailure('Failed to generate meal suggestions') from e

    saved = []
    for suggestion in suggestions[:granted]:
        try:
            saved.append(create_recipe(suggestion))
        except InvalidInput as e:
            logger.warning("Dropping unusable suggestion '%s': %s", suggestion.get('title'), e)

    deduct_credits(user.id, len(saved))
    logger.info("Generated %d/%d recipes for user %s", len(saved), count, user.id)

    if notifier is not None and saved:
        notifier.notify(user, 'recipes_suggested', {'titles': [r.title for r in saved]})
    return {'recipes': saved, 'requested': count, 'granted': granted}
