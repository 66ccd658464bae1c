from datetime import datetime, timezone

from pickem import db


class Sport(db.Model):
    __tablename__ = "sports"

    id = db.Column(db.Integer, primary_key=True)
    slug = db.Column(db.String(50), nullable=False, unique=True, index=True)
    name = db.Column(db.String(100), nullable=False)

    # Timestamps
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    # Relationships
    seasons = db.relationship("Season", backref="sport", lazy="dynamic")
    teams = db.relationship("Team", backref="sport", lazy="dynamic")
    games = db.relationship("Game", backref="sport", lazy="dynamic")

    def __repr__(self):
        return f"<Sport {self.slug}>"

    @staticmethod
    def get_by_slug(slug):
        """Get a sport by its slug ("football", "basketball")"""
        if not slug:
            return None
        return Sport.query.filter_by(slug=slug.lower()).first()

    def to_dict(self):
        return {"id": self.id, "slug": self.slug, "name": self.name}
