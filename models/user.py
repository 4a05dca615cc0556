"""
User Model

Contains the User model. Authentication and billing live outside this
application; the row only mirrors the identity, subscription status and
meal credit balance they hand us.
"""

from .base import db, utcnow


class User(db.Model):
    """Application user with subscription state and meal credits."""
    __tablename__ = 'users'

    id = db.Column(db.String(64), primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=True)
    first_name = db.Column(db.String(100), nullable=True)
    last_name = db.Column(db.String(100), nullable=True)

    # 'trial', 'active', 'past_due', 'canceled'
    subscription_status = db.Column(db.String(20), default='trial', nullable=False)
    # 'trial', 'basic', 'standard', 'premium', 'unlimited'
    subscription_plan = db.Column(db.String(20), default='trial', nullable=False)
    meal_credits = db.Column(db.Integer, default=10, nullable=False)
    total_meals_used = db.Column(db.Integer, default=0, nullable=False)

    created_at = db.Column(db.DateTime(timezone=True), default=utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    # Owned rows go with the user
    preferences = db.relationship('UserPreferences', uselist=False, cascade='all, delete-orphan',
                                  passive_deletes=True, backref='user')
    recipes = db.relationship('Recipe', cascade='all, delete-orphan', passive_deletes=True,
                              backref='owner')
    favorites = db.relationship('UserFavorite', cascade='all, delete-orphan', passive_deletes=True)
    calendar_entries = db.relationship('MealCalendarEntry', cascade='all, delete-orphan',
                                       passive_deletes=True)
    grocery_lists = db.relationship('GroceryList', cascade='all, delete-orphan', passive_deletes=True)
    meal_selections = db.relationship('UserMealSelection', cascade='all, delete-orphan',
                                      passive_deletes=True)

    def to_dict(self):
        return {
            'id': self.id,
            'email': self.email,
            'firstName': self.first_name,
            'lastName': self.last_name,
            'subscriptionStatus': self.subscription_status,
            'subscriptionPlan': self.subscription_plan,
            'mealCredits': self.meal_credits,
            'totalMealsUsed': self.total_meals_used,
        }
