from datetime import datetime, timezone

from pickem import db


class Season(db.Model):
    __tablename__ = "seasons"

    id = db.Column(db.Integer, primary_key=True)
    sport_id = db.Column(db.Integer, db.ForeignKey("sports.id"), nullable=False)
    year = db.Column(db.Integer, nullable=False, index=True)
    name = db.Column(db.String(50), nullable=False)  # e.g., "2024-25"

    # Season dates
    start_date = db.Column(db.Date, nullable=False)
    end_date = db.Column(db.Date, nullable=False)

    # Status
    is_active = db.Column(db.Boolean, default=False)

    # Timestamps
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(
        db.DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    games = db.relationship(
        "Game", backref="season", lazy="dynamic", cascade="all, delete-orphan"
    )

    # Database indexes and constraints
    __table_args__ = (
        db.UniqueConstraint("sport_id", "year", name="unique_sport_season_year"),
        db.Index("idx_season_sport_active", "sport_id", "is_active"),
    )

    def __repr__(self):
        return f"<Season {self.year} sport_id={self.sport_id}>"

    @staticmethod
    def get_active(sport):
        """Get the active season for a sport (Sport instance or id)"""
        sport_id = getattr(sport, "id", sport)
        return Season.query.filter_by(sport_id=sport_id, is_active=True).first()

    @staticmethod
    def create_season(sport, year, start_date, end_date, name=None):
        """Create a new season for a sport"""
        season = Season(
            sport_id=sport.id,
            year=year,
            name=name or f"{year}-{str(year + 1)[-2:]}",
            start_date=start_date,
            end_date=end_date,
        )
        db.session.add(season)
        return season

    def activate(self):
        """Activate this season (deactivates the sport's other seasons)"""
        Season.query.filter(
            Season.sport_id == self.sport_id, Season.id != self.id
        ).update({"is_active": False}, synchronize_session="fetch")
        self.is_active = True

    def to_dict(self):
        """Convert season to dictionary for API responses"""
        return {
            "id": self.id,
            "sport_id": self.sport_id,
            "year": self.year,
            "name": self.name,
            "start_date": self.start_date.isoformat() if self.start_date else None,
            "end_date": self.end_date.isoformat() if self.end_date else None,
            "is_active": self.is_active,
        }
