"""
Ingredient Merge Backend

Turns several recipes' ingredient lines into one categorized shopping
list. Combining near-duplicates and summing quantities is left entirely to
the generative model; this module only builds the request and normalizes
the shape of the reply.
"""

import logging

from .errors import UpstreamFailure
from .llm import ChatClient

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a helpful grocery planning assistant. Always respond with valid "
    "JSON arrays containing categorized shopping lists."
)

PROMPT_TEMPLATE = """Based on these selected meals and their ingredients, create a comprehensive, organized grocery list:

{meals}

Organize the ingredients into logical grocery store categories (Proteins, Vegetables, Fruits, Dairy, Oils, Pantry Items, Spices & Seasonings, etc.).
Combine similar ingredients and provide reasonable quantities where possible.
Remove duplicates and group similar items together.

Respond with a JSON array in this exact format:
[
  {{"category": "Proteins", "items": ["2 lbs chicken breast", "1 lb salmon fillet"]}},
  {{"category": "Vegetables", "items": ["2 tomatoes", "1 cucumber", "1 red onion"]}}
]"""

# Wrapper keys the model sometimes puts around the array
RESPONSE_KEYS = ('groceryList', 'categories', 'grocery_list', 'items')


def build_prompt(meals):
    lines = [f"{meal['title']}: {', '.join(meal['ingredients'])}" for meal in meals]
    return PROMPT_TEMPLATE.format(meals='\n'.join(lines))


def unwrap_categories(parsed):
    """Accept a bare array or an object wrapping one; anything else is an error."""
    if isinstance(parsed, list):
        return parsed
    if isinstance(parsed, dict):
        for key in RESPONSE_KEYS:
            if isinstance(parsed.get(key), list):
                return parsed[key]
    raise UpstreamFailure('Unexpected grocery list format from the recipe assistant')


class LLMIngredientMerger:
    """
    Merge backend backed by a chat model.

    merge() takes [{"title": str, "ingredients": [str]}] and returns
    [{"category": str, "items": [str]}] exactly as the model produced it,
    apart from unwrapping. Cleaning empty categories is the aggregator's job.
    """

    def __init__(self, client, temperature=0.3):
        self.client = client
        self.temperature = temperature

    @classmethod
    def from_config(cls, config):
        return cls(ChatClient.from_config(config))

    def merge(self, meals):
        logger.info("Merging ingredients for %d meals", len(meals))
        parsed = self.client.complete_json(SYSTEM_PROMPT, build_prompt(meals),
                                           temperature=self.temperature)
        return unwrap_categories(parsed)
