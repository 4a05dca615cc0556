"""
Validation Constants

Contains whitelist values and bounds for validating user input and data
coming back from the generative backend.
"""

# Meal slots in display order; the order is also the calendar sort order
MEAL_SLOTS = ('breakfast', 'lunch', 'dinner', 'snack')
DEFAULT_MEAL_SLOT = 'dinner'

# Suggested vocabularies shown by the preference chips. Stored tags are not
# limited to these.
PROTEIN_OPTIONS = (
    'Chicken', 'Beef', 'Pork', 'Fish', 'Seafood', 'Turkey', 'Lamb',
    'Tofu', 'Beans', 'Eggs', 'Vegetarian',
)

CUISINE_OPTIONS = (
    'Italian', 'Mexican', 'Asian', 'Mediterranean', 'American', 'Indian',
    'French', 'Thai', 'Japanese', 'Greek', 'Middle Eastern',
)

DIETARY_OPTIONS = (
    'Gluten-Free', 'Dairy-Free', 'Nut-Free', 'Vegetarian', 'Vegan',
    'Low-Carb', 'Keto', 'Shellfish-Free',
)

# Maximum field lengths
MAX_LENGTHS = {
    'recipe_title': 200,
    'description': 2000,
    'tag': 50,
    'tags_per_field': 30,
    'instructions': 50000,
    'source_url': 500,
    'ingredient_text': 500,
    'ingredients_per_recipe': 100,
    'recipes_per_grocery_list': 60,
    'suggestion_count': 12,
}

# Ratings are 4.0-5.0 by convention; cooking time in minutes
RATING_RANGE = (4.0, 5.0)
COOKING_TIME_RANGE = (5, 180)

# Plans that never run out of credits
UNLIMITED_PLANS = {'unlimited'}

# Subscription states that may not spend credits
INACTIVE_SUBSCRIPTION_STATUSES = {'canceled', 'unpaid'}
