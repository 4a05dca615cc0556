import pytest

from models import db, User
from services import importer


def schedule(client, headers, meal_id, day='2025-07-04', meal_type='dinner'):
    return client.post('/api/calendar', headers=headers,
                       json={'mealId': meal_id, 'scheduledDate': day, 'mealType': meal_type})


# ---------------------------------------------------------------------------
# users
# ---------------------------------------------------------------------------

def test_requires_user(client):
    response = client.get('/api/favorites')
    assert response.status_code == 401
    assert response.get_json()['error'] == 'Unauthenticated'


def test_auth_user(client, auth_headers):
    body = client.get('/api/auth/user', headers=auth_headers).get_json()
    assert body['id'] == 'user-1'
    assert body['mealCredits'] == 10


def test_unknown_user_provisioned_with_welcome(client, notifier):
    body = client.get('/api/auth/user', headers={'X-User-Id': 'newcomer'}).get_json()
    assert body['mealCredits'] == 10
    assert body['subscriptionStatus'] == 'trial'
    assert notifier.sent == [('newcomer', 'welcome', {})]


def test_unknown_user_rejected_without_provisioning(app, client):
    app.config['AUTO_PROVISION_USERS'] = False
    response = client.get('/api/auth/user', headers={'X-User-Id': 'stranger'})
    assert response.status_code == 401


def test_provisioning_tolerates_concurrent_insert(client, make_user, notifier, monkeypatch):
    # Another request created the row between our lookup and our insert
    make_user('newbie')
    original_get = db.session.get
    misses = []

    def get_missing_once(model, ident, **kwargs):
        if not misses:
            misses.append(ident)
            return None
        return original_get(model, ident, **kwargs)

    monkeypatch.setattr(db.session, 'get', get_missing_once)
    response = client.get('/api/auth/user', headers={'X-User-Id': 'newbie'})
    assert response.status_code == 200
    assert response.get_json()['id'] == 'newbie'
    assert misses == ['newbie']
    assert notifier.sent == []
    assert User.query.filter_by(id='newbie').count() == 1


def test_session_user(client, user):
    with client.session_transaction() as flask_session:
        flask_session['user_id'] = user.id
    assert client.get('/api/auth/user').get_json()['id'] == user.id


# ---------------------------------------------------------------------------
# preferences and recipes
# ---------------------------------------------------------------------------

def test_preferences_roundtrip(client, auth_headers):
    assert client.get('/api/preferences', headers=auth_headers).get_json() == {
        'proteinPreferences': [], 'cuisinePreferences': [], 'dietaryRestrictions': [],
    }
    response = client.post('/api/preferences', headers=auth_headers,
                           json={'proteinPreferences': ['Chicken'], 'dietaryRestrictions': ['Nuts']})
    assert response.status_code == 200
    assert response.get_json()['proteinPreferences'] == ['Chicken']


def test_preference_options(client):
    body = client.get('/api/preferences/options').get_json()
    assert 'Chicken' in body['proteinPreferences']
    assert body['mealTypes'] == ['breakfast', 'lunch', 'dinner', 'snack']


def test_preferences_bad_body(client, auth_headers):
    response = client.post('/api/preferences', headers=auth_headers, json=['Chicken'])
    assert response.status_code == 400
    response = client.post('/api/preferences', headers=auth_headers,
                           json={'proteinPreferences': 'Chicken'})
    assert response.status_code == 400


def test_create_and_list_user_recipes(client, auth_headers):
    response = client.post('/api/recipes/create', headers=auth_headers, json={
        'title': 'Grandma Meatballs',
        'ingredients': ['1 lb beef', '1 egg'],
        'cookingTime': 45,
    })
    assert response.status_code == 201
    recipe = response.get_json()
    assert recipe['ownerUserId'] == 'user-1'

    listed = client.get('/api/recipes/user', headers=auth_headers).get_json()
    assert [r['title'] for r in listed] == ['Grandma Meatballs']
    assert client.get(f"/api/recipes/{recipe['id']}", headers=auth_headers).status_code == 200
    assert client.get('/api/recipes/999', headers=auth_headers).status_code == 404


def test_create_recipe_without_title(client, auth_headers):
    response = client.post('/api/recipes/create', headers=auth_headers, json={'title': ''})
    assert response.status_code == 400
    assert response.get_json()['error'] == 'InvalidInput'


def test_meals_by_preferences(client, auth_headers, make_recipe):
    make_recipe('Fish Tacos', protein='Fish')
    make_recipe('Beef Stew', protein='Beef')
    client.post('/api/preferences', headers=auth_headers, json={'protein': ['Fish']})

    meals = client.get('/api/meals', headers=auth_headers).get_json()
    assert [m['title'] for m in meals] == ['Fish Tacos']


def test_suggestions_endpoint(client, auth_headers, suggester):
    response = client.post('/api/meals/suggestions', headers=auth_headers,
                           json={'count': 3, 'proteinPreferences': ['Tofu']})
    assert response.status_code == 200
    body = response.get_json()
    assert [m['title'] for m in body['meals']] == ['Tofu Dish 1', 'Tofu Dish 2', 'Tofu Dish 3']
    assert (body['requested'], body['granted'], body['mealCredits']) == (3, 3, 7)


def test_suggestion_overrides_are_cleaned(client, auth_headers, suggester):
    response = client.post('/api/meals/suggestions', headers=auth_headers,
                           json={'count': 1, 'proteinPreferences': [1, ' <b>Fish</b> ']})
    assert response.status_code == 200
    preferences, count = suggester.calls[0]
    assert preferences['protein'] == ['1', 'Fish']

    response = client.post('/api/meals/suggestions', headers=auth_headers,
                           json={'cuisinePreferences': 'Thai'})
    assert response.status_code == 400
    assert response.get_json()['error'] == 'InvalidInput'


def test_suggestions_out_of_credits(client, make_user):
    make_user('broke', meal_credits=0)
    response = client.post('/api/meals/suggestions', headers={'X-User-Id': 'broke'},
                           json={'count': 2})
    assert response.status_code == 402
    assert response.get_json()['error'] == 'QuotaExceeded'


def test_parse_url(client, auth_headers, monkeypatch):
    class FakePage:
        text = '<html><body><h1>Mystery Casserole</h1></body></html>'

    monkeypatch.setattr(importer, 'safe_fetch', lambda url, **kw: FakePage())
    response = client.post('/api/recipes/parse-url', headers=auth_headers,
                           json={'url': 'https://recipes.example.com/casserole'})
    assert response.status_code == 200
    assert response.get_json()['title'] == 'Mystery Casserole'

    assert client.post('/api/recipes/parse-url', headers=auth_headers, json={}).status_code == 400


# ---------------------------------------------------------------------------
# favorites
# ---------------------------------------------------------------------------

def test_favorites_flow(client, auth_headers, make_recipe):
    recipe = make_recipe()
    assert client.post('/api/favorites', headers=auth_headers,
                       json={'mealId': recipe.id}).status_code == 200
    assert client.post(f'/api/favorites/{recipe.id}', headers=auth_headers).status_code == 200

    favorites = client.get('/api/favorites', headers=auth_headers).get_json()
    assert len(favorites) == 1
    assert favorites[0]['meal']['title'] == 'Lemon Chicken'

    removed = client.delete(f'/api/favorites/{recipe.id}', headers=auth_headers).get_json()
    assert removed == {'success': True, 'removed': True}
    again = client.delete(f'/api/favorites/{recipe.id}', headers=auth_headers).get_json()
    assert again == {'success': True, 'removed': False}


def test_favorite_unknown_recipe(client, auth_headers):
    assert client.post('/api/favorites/777', headers=auth_headers).status_code == 404
    assert client.post('/api/favorites', headers=auth_headers,
                       json={'mealId': 'abc'}).status_code == 400


# ---------------------------------------------------------------------------
# meal selections
# ---------------------------------------------------------------------------

def test_meal_selections_flow(client, auth_headers, make_recipe):
    pasta = make_recipe('Pasta')
    tacos = make_recipe('Tacos')
    for recipe in (pasta, tacos, pasta):
        response = client.post('/api/meal-selections', headers=auth_headers,
                               json={'mealId': recipe.id, 'weekStartDate': '2025-06-29'})
        assert response.status_code == 200
    client.post('/api/meal-selections', headers=auth_headers,
                json={'mealId': tacos.id, 'weekStartDate': '2025-07-06'})

    week = client.get('/api/meal-selections/2025-06-29', headers=auth_headers).get_json()
    assert [s['meal']['title'] for s in week] == ['Pasta', 'Tacos']
    assert week[0]['weekStartDate'] == '2025-06-29'

    removed = client.delete(f'/api/meal-selections/{pasta.id}/2025-06-29', headers=auth_headers)
    assert removed.get_json() == {'success': True, 'removed': True}
    again = client.delete(f'/api/meal-selections/{pasta.id}/2025-06-29', headers=auth_headers)
    assert again.get_json() == {'success': True, 'removed': False}

    week = client.get('/api/meal-selections/2025-06-29', headers=auth_headers).get_json()
    assert [s['mealId'] for s in week] == [tacos.id]


def test_meal_selection_errors(client, auth_headers, make_recipe):
    recipe = make_recipe()
    assert client.post('/api/meal-selections', headers=auth_headers,
                       json={'mealId': 777, 'weekStartDate': '2025-06-29'}).status_code == 404
    assert client.post('/api/meal-selections', headers=auth_headers,
                       json={'mealId': recipe.id}).status_code == 400
    assert client.post('/api/meal-selections', headers=auth_headers,
                       json={'mealId': 'abc', 'weekStartDate': '2025-06-29'}).status_code == 400
    assert client.get('/api/meal-selections/next-week', headers=auth_headers).status_code == 400
    assert client.get('/api/meal-selections/2025-06-29').status_code == 401


# ---------------------------------------------------------------------------
# calendar
# ---------------------------------------------------------------------------

def test_calendar_replace_same_cell(client, auth_headers, make_recipe):
    recipe_a = make_recipe('Recipe A')
    recipe_b = make_recipe('Recipe B')
    schedule(client, auth_headers, recipe_a.id)
    response = schedule(client, auth_headers, recipe_b.id)
    assert response.status_code == 200

    entries = client.get('/api/calendar?startDate=2025-07-04&endDate=2025-07-04',
                         headers=auth_headers).get_json()
    assert len(entries) == 1
    assert entries[0]['mealId'] == recipe_b.id
    assert entries[0]['meal']['title'] == 'Recipe B'


def test_calendar_meal_type_defaults_to_dinner(client, auth_headers, make_recipe):
    recipe = make_recipe()
    response = client.post('/api/calendar', headers=auth_headers,
                           json={'mealId': recipe.id, 'scheduledDate': '2025-07-04T00:00:00.000Z'})
    assert response.get_json()['mealType'] == 'dinner'
    assert response.get_json()['scheduledDate'] == '2025-07-04'


def test_calendar_month_view(client, auth_headers, make_recipe):
    recipe = make_recipe()
    schedule(client, auth_headers, recipe.id, day='2025-06-29')  # padding week before July
    schedule(client, auth_headers, recipe.id, day='2025-07-15')
    schedule(client, auth_headers, recipe.id, day='2025-08-03')  # outside the grid

    entries = client.get('/api/calendar?month=2025-07', headers=auth_headers).get_json()
    assert [e['scheduledDate'] for e in entries] == ['2025-06-29', '2025-07-15']


def test_calendar_errors(client, auth_headers, make_recipe):
    recipe = make_recipe()
    assert schedule(client, auth_headers, recipe.id, meal_type='brunch').status_code == 400
    assert schedule(client, auth_headers, recipe.id, day='July 4').status_code == 400
    assert schedule(client, auth_headers, 4242).status_code == 404
    assert client.get('/api/calendar?startDate=2025-07-05&endDate=2025-07-01',
                      headers=auth_headers).status_code == 400
    assert client.get('/api/calendar', headers=auth_headers).status_code == 400


def test_calendar_unschedule(client, auth_headers, make_recipe):
    recipe = make_recipe()
    schedule(client, auth_headers, recipe.id)
    url = '/api/calendar?scheduledDate=2025-07-04&mealType=dinner'

    assert client.delete(url, headers=auth_headers).get_json()['removed'] is True
    assert client.delete(url, headers=auth_headers).get_json()['removed'] is False


# ---------------------------------------------------------------------------
# grocery list
# ---------------------------------------------------------------------------

def test_grocery_generate_and_fetch(client, auth_headers, make_recipe, notifier):
    salad = make_recipe('Salad', ingredients=['2 tbsp olive oil', '1 cucumber'])
    pasta = make_recipe('Pasta', ingredients=['extra virgin olive oil', '1 lb pasta'])

    response = client.post('/api/grocery-list/generate', headers=auth_headers,
                           json={'mealIds': [salad.id, pasta.id], 'weekStartDate': '2025-06-29'})
    assert response.status_code == 200
    body = response.get_json()
    assert body['weekStartDate'] == '2025-06-29'
    oils = [c for c in body['ingredients'] if c['category'] == 'Oils']
    assert oils == [{'category': 'Oils', 'items': ['olive oil']}]
    assert notifier.sent[-1][1] == 'grocery_list_ready'

    fetched = client.get('/api/grocery-list/2025-06-29', headers=auth_headers).get_json()
    assert fetched['ingredients'] == body['ingredients']


def test_grocery_from_calendar_week(client, auth_headers, make_recipe, merger):
    recipe = make_recipe()
    schedule(client, auth_headers, recipe.id, day='2025-07-01')
    response = client.post('/api/grocery-list/generate', headers=auth_headers,
                           json={'weekStartDate': '2025-06-29'})
    assert response.status_code == 200
    assert merger.calls[0][0]['title'] == 'Lemon Chicken'


def test_grocery_rejections(client, auth_headers):
    response = client.post('/api/grocery-list/generate', headers=auth_headers, json={'mealIds': []})
    assert response.status_code == 400

    response = client.post('/api/grocery-list/generate', headers=auth_headers,
                           json={'weekStartDate': '2025-06-29'})
    assert response.status_code == 400
    assert 'No meals scheduled' in response.get_json()['message']

    assert client.get('/api/grocery-list/2025-06-29', headers=auth_headers).status_code == 404


def test_grocery_backend_failure(client, auth_headers, make_recipe, merger):
    recipe = make_recipe()
    merger.error = ValueError('bad model output')
    response = client.post('/api/grocery-list/generate', headers=auth_headers,
                           json={'mealIds': [recipe.id]})
    assert response.status_code == 502
    assert response.get_json()['error'] == 'UpstreamFailure'


def test_user_delete_removes_owned_rows(client, auth_headers, make_recipe):
    recipe = make_recipe()
    schedule(client, auth_headers, recipe.id)
    client.post('/api/favorites', headers=auth_headers, json={'mealId': recipe.id})

    db.session.delete(db.session.get(User, 'user-1'))
    db.session.commit()

    headers = {'X-User-Id': 'user-1'}
    assert client.get('/api/favorites', headers=headers).get_json() == []
    assert client.get('/api/calendar?month=2025-07', headers=headers).get_json() == []
