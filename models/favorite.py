"""
Favorite Model

Many-to-many ledger of (user, recipe) pairs.
"""

from .base import db, utcnow


class UserFavorite(db.Model):
    """A recipe a user has favorited. The pair is unique."""
    __tablename__ = 'user_favorites'
    __table_args__ = (
        db.UniqueConstraint('user_id', 'recipe_id', name='uq_user_favorites_user_recipe'),
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(64), db.ForeignKey('users.id', ondelete='CASCADE'),
                        nullable=False, index=True)
    recipe_id = db.Column(db.Integer, db.ForeignKey('recipes.id', ondelete='CASCADE'),
                          nullable=False, index=True)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow)
    recipe = db.relationship('Recipe')

    def to_dict(self):
        return {
            'id': self.id,
            'userId': self.user_id,
            'mealId': self.recipe_id,
            'createdAt': self.created_at.isoformat() if self.created_at else None,
            'meal': self.recipe.to_dict() if self.recipe else None,
        }
