import logging
import os

from flask import Blueprint, Flask, current_app, jsonify, request
from flask_migrate import Migrate
from sqlalchemy.exc import SQLAlchemyError

from config import get_config
from constants import CUISINE_OPTIONS, DIETARY_OPTIONS, MEAL_SLOTS, PROTEIN_OPTIONS
from models import db
from services import (
    EmailNotifier, InvalidInput, LLMIngredientMerger, LLMRecipeSuggester,
    MealPlannerError, add_favorite, add_selection, create_recipe, generate_grocery_list,
    get_grocery_list, get_preferences, get_recipe, import_recipe_from_url,
    list_calendar, list_favorites, list_recipes_by_preferences, list_selections,
    list_user_recipes, remove_favorite, remove_selection, schedule_meal,
    set_preferences, suggest_recipes, unschedule_meal,
)
from services.dates import month_grid_range, parse_month
from services.preferences import FIELD_ALIASES, normalize_tags
from utils.auth import load_current_user, resolve_current_user

logger = logging.getLogger(__name__)

migrate = Migrate()
api = Blueprint('api', __name__, url_prefix='/api')


def get_json_body():
    """Request JSON as a dict; an absent body counts as {}."""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise InvalidInput('Request body must be a JSON object')
    return data


def parse_id(value, field='id'):
    try:
        return int(value)
    except (TypeError, ValueError):
        raise InvalidInput(f'{field} must be a number') from None


def preferences_payload(prefs):
    return {
        'proteinPreferences': prefs['protein'],
        'cuisinePreferences': prefs['cuisine'],
        'dietaryRestrictions': prefs['allergy'],
    }


def backend(name):
    return current_app.extensions[name]


# ============================================
# ROUTES - USER
# ============================================

@api.route('/auth/user')
def auth_user():
    return jsonify(load_current_user(request).to_dict())


# ============================================
# ROUTES - PREFERENCES
# ============================================

@api.route('/preferences', methods=['GET'])
def preferences_get():
    user_id = resolve_current_user(request)
    return jsonify(preferences_payload(get_preferences(user_id)))


@api.route('/preferences', methods=['POST'])
def preferences_set():
    user = load_current_user(request)
    prefs = set_preferences(user.id, get_json_body())
    return jsonify(preferences_payload(prefs))


@api.route('/preferences/options', methods=['GET'])
def preferences_options():
    """Suggested tags for the preference pickers. Any tag may be stored."""
    return jsonify({
        'proteinPreferences': list(PROTEIN_OPTIONS),
        'cuisinePreferences': list(CUISINE_OPTIONS),
        'dietaryRestrictions': list(DIETARY_OPTIONS),
        'mealTypes': list(MEAL_SLOTS),
    })


# ============================================
# ROUTES - RECIPES
# ============================================

@api.route('/meals/suggestions', methods=['POST'])
def meals_suggestions():
    user = load_current_user(request)
    data = get_json_body()

    # Preferences sent with the request override the stored ones field by field
    preferences = get_preferences(user.id)
    short_names = {'protein_preferences': 'protein', 'cuisine_preferences': 'cuisine',
                   'dietary_restrictions': 'allergy'}
    for key, column in FIELD_ALIASES.items():
        if key in data:
            preferences[short_names[column]] = normalize_tags(data[key], key)

    result = suggest_recipes(user, preferences=preferences, count=data.get('count', 6),
                             suggester=backend('recipe_suggester'),
                             notifier=backend('notifier'))
    refreshed = load_current_user(request)
    return jsonify({
        'meals': [recipe.to_dict() for recipe in result['recipes']],
        'requested': result['requested'],
        'granted': result['granted'],
        'mealCredits': refreshed.meal_credits,
    })


@api.route('/meals', methods=['GET'])
def meals_list():
    user_id = resolve_current_user(request)
    prefs = get_preferences(user_id)
    limit = min(max(parse_id(request.args.get('limit', 10), 'limit'), 1), 50)
    recipes = list_recipes_by_preferences(prefs['protein'], prefs['cuisine'], limit=limit)
    return jsonify([recipe.to_dict() for recipe in recipes])


@api.route('/recipes/create', methods=['POST'])
def recipes_create():
    user = load_current_user(request)
    recipe = create_recipe(get_json_body(), owner_user_id=user.id)
    return jsonify(recipe.to_dict()), 201


@api.route('/recipes/user', methods=['GET'])
def recipes_user():
    user_id = resolve_current_user(request)
    return jsonify([recipe.to_dict() for recipe in list_user_recipes(user_id)])


@api.route('/recipes/<int:recipe_id>', methods=['GET'])
def recipes_view(recipe_id):
    resolve_current_user(request)
    return jsonify(get_recipe(recipe_id).to_dict())


@api.route('/recipes/parse-url', methods=['POST'])
def recipes_parse_url():
    resolve_current_user(request)
    url = (get_json_body().get('url') or '').strip()
    if not url:
        raise InvalidInput('Please enter a URL')
    draft = import_recipe_from_url(url, timeout=current_app.config['IMPORT_TIMEOUT'],
                                   max_size=current_app.config['MAX_IMPORT_SIZE'])
    return jsonify(draft)


# ============================================
# ROUTES - FAVORITES
# ============================================

@api.route('/favorites', methods=['GET'])
def favorites_list():
    user_id = resolve_current_user(request)
    return jsonify([favorite.to_dict() for favorite in list_favorites(user_id)])


@api.route('/favorites', methods=['POST'])
@api.route('/favorites/<int:recipe_id>', methods=['POST'])
def favorites_add(recipe_id=None):
    user = load_current_user(request)
    if recipe_id is None:
        recipe_id = parse_id(get_json_body().get('mealId'), 'mealId')
    return jsonify(add_favorite(user.id, recipe_id).to_dict())


@api.route('/favorites/<int:recipe_id>', methods=['DELETE'])
def favorites_remove(recipe_id):
    user_id = resolve_current_user(request)
    removed = remove_favorite(user_id, recipe_id)
    return jsonify({'success': True, 'removed': removed})


# ============================================
# ROUTES - MEAL CALENDAR
# ============================================

@api.route('/calendar', methods=['GET'])
def calendar_list():
    user_id = resolve_current_user(request)
    month = request.args.get('month')
    if month:
        year, month_number = parse_month(month)
        start, end = month_grid_range(year, month_number, current_app.config['WEEK_STARTS_ON'])
    else:
        start, end = request.args.get('startDate'), request.args.get('endDate')
    entries = list_calendar(user_id, start, end)
    return jsonify([entry.to_dict() for entry in entries])


@api.route('/calendar', methods=['POST'])
def calendar_schedule():
    user = load_current_user(request)
    data = get_json_body()
    entry = schedule_meal(user.id, data.get('scheduledDate'), data.get('mealType'),
                          parse_id(data.get('mealId'), 'mealId'))
    return jsonify(entry.to_dict())


@api.route('/calendar', methods=['DELETE'])
def calendar_unschedule():
    user_id = resolve_current_user(request)
    removed = unschedule_meal(user_id, request.args.get('scheduledDate'), request.args.get('mealType'))
    return jsonify({'success': True, 'removed': removed})


# ============================================
# ROUTES - MEAL SELECTIONS
# ============================================

@api.route('/meal-selections/<week_start>', methods=['GET'])
def selections_list(week_start):
    user_id = resolve_current_user(request)
    return jsonify([selection.to_dict() for selection in list_selections(user_id, week_start)])


@api.route('/meal-selections', methods=['POST'])
def selections_add():
    user = load_current_user(request)
    data = get_json_body()
    selection = add_selection(user.id, parse_id(data.get('mealId'), 'mealId'),
                              data.get('weekStartDate'))
    return jsonify(selection.to_dict())


@api.route('/meal-selections/<int:recipe_id>/<week_start>', methods=['DELETE'])
def selections_remove(recipe_id, week_start):
    user_id = resolve_current_user(request)
    removed = remove_selection(user_id, recipe_id, week_start)
    return jsonify({'success': True, 'removed': removed})


# ============================================
# ROUTES - GROCERY LIST
# ============================================

@api.route('/grocery-list/generate', methods=['POST'])
def grocery_generate():
    user = load_current_user(request)
    data = get_json_body()
    grocery_list = generate_grocery_list(
        user.id,
        recipe_ids=data.get('mealIds'),
        week_start_date=data.get('weekStartDate'),
        merger=backend('ingredient_merger'),
        notifier=backend('notifier'),
        user=user,
    )
    return jsonify(grocery_list.to_dict())


@api.route('/grocery-list/<week_start>', methods=['GET'])
def grocery_get(week_start):
    user_id = resolve_current_user(request)
    return jsonify(get_grocery_list(user_id, week_start).to_dict())


# ============================================
# ERROR HANDLERS
# ============================================

def handle_service_error(error):
    if error.status_code >= 500:
        logger.warning("%s: %s", type(error).__name__, error.message)
    return jsonify(error.to_dict()), error.status_code


def handle_storage_error(error):
    db.session.rollback()
    logger.exception("Unhandled storage error")
    return jsonify({'message': 'Storage is unavailable, please try again',
                    'error': 'UpstreamFailure'}), 502


# ============================================
# APPLICATION
# ============================================

def create_app(env=None, **overrides):
    """Build the Flask app. overrides replace config values (used by tests)."""
    app = Flask(__name__)
    app.config.from_object(get_config(env))
    app.config.update(overrides)

    logging.basicConfig(
        level=getattr(logging, app.config['LOG_LEVEL'], logging.INFO),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    db.init_app(app)
    migrate.init_app(app, db)

    app.extensions['ingredient_merger'] = LLMIngredientMerger.from_config(app.config)
    app.extensions['recipe_suggester'] = LLMRecipeSuggester.from_config(app.config)
    app.extensions['notifier'] = EmailNotifier.from_config(app.config)

    app.register_blueprint(api)
    app.register_error_handler(MealPlannerError, handle_service_error)
    app.register_error_handler(SQLAlchemyError, handle_storage_error)

    @app.route('/')
    def index():
        return jsonify({'message': 'Meal planner API running'})

    @app.cli.command('init-db')
    def init_db_command():
        """Create all tables."""
        init_db(app)
        print('Database initialized')

    return app


def init_db(app):
    with app.app_context():
        db.create_all()


app = create_app()


if __name__ == '__main__':
    init_db(app)
    # host='0.0.0.0' allows access from other devices on the network
    app.run(debug=app.config.get('DEBUG', False), host='0.0.0.0',
            port=int(os.environ.get('PORT', 5000)), use_reloader=False)
