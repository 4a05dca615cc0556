"""
Recipe Import Service

Turns a recipe web page into a recipe draft the user can review and save.
Most recipe sites publish schema.org JSON-LD, so that is the only source
read; without it the draft carries just the page title.
"""

import json
import logging
import re

import requests
from bs4 import BeautifulSoup

from utils.sanitizer import (
    sanitize_ingredient_text, sanitize_instructions, sanitize_recipe_name,
    sanitize_text, sanitize_url,
)
from utils.url_validator import SSRFError, safe_fetch
from .errors import InvalidInput, UpstreamFailure

logger = logging.getLogger(__name__)

ISO_DURATION_RE = re.compile(r'^P(?:(\d+)D)?(?:T(?:(\d+)H)?(?:(\d+)M)?)?', re.IGNORECASE)


def _is_recipe(item):
    if not isinstance(item, dict):
        return False
    kind = item.get('@type')
    return kind == 'Recipe' or (isinstance(kind, list) and 'Recipe' in kind)


def find_recipe_json_ld(soup):
    """Return the first schema.org Recipe object on the page, or None."""
    for script in soup.find_all('script', type='application/ld+json'):
        try:
            data = json.loads(script.string or '')
        except (json.JSONDecodeError, TypeError):
            continue

        candidates = data if isinstance(data, list) else [data]
        for candidate in candidates:
            if _is_recipe(candidate):
                return candidate
            if isinstance(candidate, dict):
                for item in candidate.get('@graph', []):
                    if _is_recipe(item):
                        return item
    return None


def parse_duration_minutes(value):
    """'PT1H15M' -> 75. None when the value is missing or not ISO 8601."""
    if not isinstance(value, str):
        return None
    match = ISO_DURATION_RE.match(value.strip())
    if not match or not any(match.groups()):
        return None
    days, hours, minutes = (int(g) if g else 0 for g in match.groups())
    return days * 1440 + hours * 60 + minutes


def _instruction_steps(inst_data):
    """Flatten HowToStep / HowToSection / plain string instructions into step texts."""
    steps = []
    for inst in inst_data or []:
        if isinstance(inst, str):
            text = inst
        elif isinstance(inst, dict) and inst.get('@type') == 'HowToSection':
            steps.extend(_instruction_steps(inst.get('itemListElement', [])))
            continue
        elif isinstance(inst, dict):
            text = inst.get('text') or inst.get('name') or ''
        else:
            continue
        text = sanitize_text(text)
        if text:
            steps.append(text)
    return steps


def _instructions_text(inst_data):
    if isinstance(inst_data, str):
        return sanitize_instructions(inst_data)
    steps = _instruction_steps(inst_data)
    return '\n'.join(f"{i}. {step}" for i, step in enumerate(steps, 1))


def _first(value):
    if isinstance(value, list):
        return value[0] if value else None
    return value


def _cuisine(value):
    value = _first(value)
    return sanitize_text(value, max_length=50) if value else ''


def recipe_from_json_ld(data, source_url):
    image_url = _first(data.get('image'))
    if isinstance(image_url, dict):
        image_url = image_url.get('url', '')

    rating = None
    aggregate = data.get('aggregateRating')
    if isinstance(aggregate, dict):
        rating = aggregate.get('ratingValue')

    cooking_time = (parse_duration_minutes(data.get('totalTime'))
                    or parse_duration_minutes(data.get('cookTime')))

    return {
        'title': sanitize_recipe_name(data.get('name'), default='Imported Recipe'),
        'description': sanitize_text(data.get('description'), max_length=2000),
        'cuisine': _cuisine(data.get('recipeCuisine')),
        'protein': '',
        'cookingTime': cooking_time or 30,
        'rating': rating,
        'ingredients': [sanitize_ingredient_text(i) for i in data.get('recipeIngredient', []) if i],
        'instructions': _instructions_text(data.get('recipeInstructions', [])),
        'imageUrl': sanitize_url(image_url if isinstance(image_url, str) else ''),
        'sourceUrl': sanitize_url(source_url),
    }


def import_recipe_from_url(url, timeout=10, max_size=5 * 1024 * 1024):
    """
    Fetch url and return a recipe draft (not saved).

    Raises InvalidInput for unsafe or malformed URLs and UpstreamFailure
    when the page cannot be fetched.
    """
    safe_url = sanitize_url(url)
    if not safe_url:
        raise InvalidInput('Invalid URL. Only http and https URLs are allowed.')

    try:
        response = safe_fetch(safe_url, timeout=timeout, max_size=max_size)
    except SSRFError as e:
        logger.warning("Blocked recipe import from %s: %s", safe_url, e)
        raise InvalidInput(f'URL blocked: {e}') from e
    except requests.Timeout as e:
        raise UpstreamFailure('The recipe page took too long to respond') from e
    except requests.RequestException as e:
        logger.warning("Could not fetch %s: %s", safe_url, e)
        raise UpstreamFailure(f'Could not fetch URL: {e}') from e

    soup = BeautifulSoup(response.text, 'html.parser')
    data = find_recipe_json_ld(soup)
    if data:
        draft = recipe_from_json_ld(data, safe_url)
        draft['structured'] = True
        logger.info("Imported '%s' from %s (%d ingredients)",
                    draft['title'], safe_url, len(draft['ingredients']))
        return draft

    # Fallback: page title only, the user fills in the rest
    heading = soup.find('h1') or soup.find('title')
    logger.info("No structured recipe data at %s", safe_url)
    return {
        'title': sanitize_recipe_name(heading.get_text() if heading else None, default='Imported Recipe'),
        'description': '',
        'cuisine': '',
        'protein': '',
        'cookingTime': 30,
        'rating': None,
        'ingredients': [],
        'instructions': '',
        'imageUrl': '',
        'sourceUrl': safe_url,
        'structured': False,
    }
