"""
Grocery List Model

Contains the GroceryList model: one categorized list per (user, week).
"""

from .base import db, empty_list, utcnow


class GroceryList(db.Model):
    """Categorized shopping list. Regenerating a week replaces its categories."""
    __tablename__ = 'grocery_lists'
    __table_args__ = (
        db.UniqueConstraint('user_id', 'week_start_date', name='uq_grocery_lists_user_week'),
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(64), db.ForeignKey('users.id', ondelete='CASCADE'),
                        nullable=False, index=True)
    week_start_date = db.Column(db.Date, nullable=False)
    # [{"category": "Produce", "items": ["2 tomatoes", ...]}, ...]
    categories = db.Column(db.JSON, default=empty_list, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'userId': self.user_id,
            'weekStartDate': self.week_start_date.isoformat(),
            'ingredients': [
                {'category': c['category'], 'items': list(c['items'])}
                for c in (self.categories or [])
            ],
            'updatedAt': self.updated_at.isoformat() if self.updated_at else None,
        }
