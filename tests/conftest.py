"""
Pytest configuration and shared fixtures.

Every test gets a fresh app bound to an in-memory SQLite database, with
the generative backends and the email notifier replaced by stubs.
"""

import re

import pytest

from app import create_app
from models import db, Recipe, User

QUANTITY_RE = re.compile(
    r'^[\d\s/.½¼¾]*(?:(?:tablespoons?|teaspoons?|tbsp|tsp|cups?|lbs?|pounds?|oz|ounces?|cloves?)\b)?\s*(?:of\s+)?',
    re.IGNORECASE,
)


def stub_merge(meals):
    """
    Deterministic stand-in for the merge backend: strips quantities, folds
    lines that name the same ingredient, files oils under "Oils".
    """
    categories = {}
    seen = set()
    for meal in meals:
        for line in meal['ingredients']:
            name = QUANTITY_RE.sub('', line.lower()).strip(' ,')
            if 'olive oil' in name:
                name = 'olive oil'
            if name in seen:
                continue
            seen.add(name)
            category = 'Oils' if 'oil' in name else 'Produce'
            categories.setdefault(category, []).append(name)
    return [{'category': c, 'items': items} for c, items in categories.items()]


class StubMerger:
    def __init__(self):
        self.calls = []
        self.result = None
        self.error = None

    def merge(self, meals):
        self.calls.append(meals)
        if self.error is not None:
            raise self.error
        if self.result is not None:
            return self.result
        return stub_merge(meals)


class StubSuggester:
    def __init__(self):
        self.calls = []
        self.error = None

    def suggest(self, preferences, count):
        self.calls.append((preferences, count))
        if self.error is not None:
            raise self.error
        protein = (preferences.get('protein') or ['Chicken'])[0]
        return [
            {
                'title': f'{protein} Dish {i + 1}',
                'description': 'Weeknight favorite',
                'cuisine': 'Italian',
                'protein': protein,
                'cookingTime': 30,
                'ingredients': ['1 lb pasta', '2 tbsp olive oil'],
                'instructions': 'Cook it.',
                'rating': 4.6,
            }
            for i in range(count)
        ]


class RecordingNotifier:
    def __init__(self):
        self.sent = []

    def notify(self, user, event_kind, payload=None):
        self.sent.append((user.id, event_kind, payload))
        return True


@pytest.fixture
def app():
    app = create_app('testing')
    app.extensions['ingredient_merger'] = StubMerger()
    app.extensions['recipe_suggester'] = StubSuggester()
    app.extensions['notifier'] = RecordingNotifier()

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def merger(app):
    return app.extensions['ingredient_merger']


@pytest.fixture
def suggester(app):
    return app.extensions['recipe_suggester']


@pytest.fixture
def notifier(app):
    return app.extensions['notifier']


@pytest.fixture
def make_user(app):
    def _make_user(user_id='user-1', **fields):
        fields.setdefault('meal_credits', 10)
        fields.setdefault('email', f'{user_id}@example.com')
        user = User(id=user_id, **fields)
        db.session.add(user)
        db.session.commit()
        return user
    return _make_user


@pytest.fixture
def user(make_user):
    return make_user()


@pytest.fixture
def make_recipe(app):
    def _make_recipe(title='Lemon Chicken', ingredients=None, owner_user_id=None, **fields):
        recipe = Recipe(
            title=title,
            ingredients=ingredients if ingredients is not None else ['2 chicken breasts', '1 lemon'],
            owner_user_id=owner_user_id,
            **fields,
        )
        db.session.add(recipe)
        db.session.commit()
        return recipe
    return _make_recipe


@pytest.fixture
def auth_headers(user):
    return {'X-User-Id': user.id}
