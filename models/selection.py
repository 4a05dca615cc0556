"""
Meal Selection Model

Contains the UserMealSelection model: the recipes a user picked for a
week before building that week's grocery list.
"""

from .base import db, utcnow


class UserMealSelection(db.Model):
    """A recipe selected for a week. (user_id, recipe_id, week_start_date) is unique."""
    __tablename__ = 'user_meal_selections'
    __table_args__ = (
        db.UniqueConstraint('user_id', 'recipe_id', 'week_start_date',
                            name='uq_user_meal_selections_user_recipe_week'),
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(64), db.ForeignKey('users.id', ondelete='CASCADE'),
                        nullable=False, index=True)
    recipe_id = db.Column(db.Integer, db.ForeignKey('recipes.id', ondelete='CASCADE'),
                          nullable=False, index=True)
    week_start_date = db.Column(db.Date, nullable=False)
    selected_at = db.Column(db.DateTime(timezone=True), default=utcnow)

    recipe = db.relationship('Recipe')

    def to_dict(self):
        return {
            'id': self.id,
            'userId': self.user_id,
            'mealId': self.recipe_id,
            'weekStartDate': self.week_start_date.isoformat(),
            'selectedAt': self.selected_at.isoformat() if self.selected_at else None,
            'meal': self.recipe.to_dict() if self.recipe else None,
        }
