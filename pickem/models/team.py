from datetime import datetime, timezone

from pickem import db


class Team(db.Model):
    __tablename__ = "teams"

    id = db.Column(db.Integer, primary_key=True)
    sport_id = db.Column(db.Integer, db.ForeignKey("sports.id"), nullable=False)

    # Team identification
    name = db.Column(db.String(100), nullable=False)  # e.g. "Ohio State Buckeyes"
    short_name = db.Column(db.String(50), nullable=False)  # e.g. "Ohio State"
    abbreviation = db.Column(db.String(10), nullable=False, index=True)

    # Team details
    conference = db.Column(db.String(50))

    # Visual elements
    primary_color = db.Column(db.String(7))  # Hex color

    # Timestamps
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(
        db.DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    home_games = db.relationship(
        "Game",
        foreign_keys="Game.home_team_id",
        backref=db.backref("home_team", lazy="joined"),
        lazy="dynamic",
    )
    away_games = db.relationship(
        "Game",
        foreign_keys="Game.away_team_id",
        backref=db.backref("away_team", lazy="joined"),
        lazy="dynamic",
    )

    __table_args__ = (
        db.UniqueConstraint(
            "sport_id", "abbreviation", name="unique_team_sport_abbr"
        ),
    )

    def __repr__(self):
        return f"<Team {self.abbreviation} sport_id={self.sport_id}>"

    @staticmethod
    def get_by_abbreviation(abbreviation, sport_id):
        """Get team by abbreviation for a specific sport"""
        return Team.query.filter_by(
            abbreviation=abbreviation.upper(), sport_id=sport_id
        ).first()

    @staticmethod
    def get_map_for_sport(sport_id):
        """Map of abbreviation -> Team for every team of a sport"""
        teams = Team.query.filter_by(sport_id=sport_id).all()
        return {team.abbreviation: team for team in teams}

    def to_dict(self):
        """Convert team to dictionary for API responses"""
        return {
            "id": self.id,
            "sport_id": self.sport_id,
            "name": self.name,
            "short_name": self.short_name,
            "abbreviation": self.abbreviation,
            "conference": self.conference,
            "primary_color": self.primary_color,
        }
