"""
Recipe Model

Contains the Recipe model. Recipes are created once (generated or entered
by hand) and never edited afterwards; favorites and calendar entries only
reference them.
"""

from .base import db, empty_list, utcnow


class Recipe(db.Model):
    """Recipe with metadata and its ordered ingredient lines."""
    __tablename__ = 'recipes'

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False, index=True)
    description = db.Column(db.Text, default='')
    cuisine = db.Column(db.String(50), default='', index=True)
    protein = db.Column(db.String(50), default='', index=True)
    cooking_time = db.Column(db.Integer, default=30)  # minutes
    rating = db.Column(db.Numeric(2, 1), nullable=True)  # 4.0-5.0 by convention
    ingredients = db.Column(db.JSON, default=empty_list, nullable=False)
    instructions = db.Column(db.Text, default='')
    image_url = db.Column(db.String(500), default='')
    source_url = db.Column(db.String(500), default='')
    # NULL for system-generated recipes
    owner_user_id = db.Column(db.String(64), db.ForeignKey('users.id', ondelete='CASCADE'),
                              nullable=True, index=True)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'title': self.title,
            'description': self.description or '',
            'cuisine': self.cuisine or '',
            'protein': self.protein or '',
            'cookingTime': self.cooking_time,
            'rating': float(self.rating) if self.rating is not None else None,
            'ingredients': list(self.ingredients or []),
            'instructions': self.instructions or '',
            'imageUrl': self.image_url or '',
            'sourceUrl': self.source_url or '',
            'ownerUserId': self.owner_user_id,
        }
