# Utility modules for the meal planner
from .url_validator import is_safe_url, safe_fetch, SSRFError
from .sanitizer import (
    sanitize_text, sanitize_url, sanitize_recipe_name,
    sanitize_instructions, sanitize_ingredient_text, sanitize_tag
)
