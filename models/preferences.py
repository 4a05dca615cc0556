"""
Preferences Model

One row per user holding protein, cuisine and dietary tags.
"""

from .base import db, empty_list, utcnow


class UserPreferences(db.Model):
    """Per-user preference tags, upserted on user_id."""
    __tablename__ = 'user_preferences'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(64), db.ForeignKey('users.id', ondelete='CASCADE'),
                        nullable=False, unique=True)
    protein_preferences = db.Column(db.JSON, default=empty_list, nullable=False)
    cuisine_preferences = db.Column(db.JSON, default=empty_list, nullable=False)
    dietary_restrictions = db.Column(db.JSON, default=empty_list, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), default=utcnow, onupdate=utcnow)
