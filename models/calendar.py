"""
Meal Calendar Model

Contains the MealCalendarEntry model: one recipe per (user, date, slot).
"""

from .base import db, utcnow


class MealCalendarEntry(db.Model):
    """Scheduled meal. (user_id, scheduled_date, meal_type) is unique."""
    __tablename__ = 'meal_calendar'
    __table_args__ = (
        db.UniqueConstraint('user_id', 'scheduled_date', 'meal_type',
                            name='uq_meal_calendar_user_date_slot'),
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(64), db.ForeignKey('users.id', ondelete='CASCADE'),
                        nullable=False, index=True)
    recipe_id = db.Column(db.Integer, db.ForeignKey('recipes.id', ondelete='CASCADE'),
                          nullable=False, index=True)
    scheduled_date = db.Column(db.Date, nullable=False, index=True)
    meal_type = db.Column(db.String(20), nullable=False, default='dinner')  # breakfast, lunch, dinner, snack
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow)
    recipe = db.relationship('Recipe')

    def to_dict(self):
        return {
            'id': self.id,
            'userId': self.user_id,
            'mealId': self.recipe_id,
            'scheduledDate': self.scheduled_date.isoformat(),
            'mealType': self.meal_type,
            'meal': self.recipe.to_dict() if self.recipe else None,
        }
