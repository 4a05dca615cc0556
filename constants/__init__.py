from .validation import (
    MEAL_SLOTS, DEFAULT_MEAL_SLOT, PROTEIN_OPTIONS, CUISINE_OPTIONS,
    DIETARY_OPTIONS, MAX_LENGTHS, RATING_RANGE, COOKING_TIME_RANGE,
    UNLIMITED_PLANS, INACTIVE_SUBSCRIPTION_STATUSES,
)
