import logging
from datetime import datetime, timezone

from pickem import db

logger = logging.getLogger(__name__)


def has_started_at(game_time, now=None):
    """True once now (default: current UTC time) reaches game_time"""
    if not game_time:
        return False

    # If game_time is timezone-naive, assume it's in UTC
    if game_time.tzinfo is None:
        game_time = game_time.replace(tzinfo=timezone.utc)

    return (now or datetime.now(timezone.utc)) >= game_time


class GameStatus:
    """Game lifecycle states; a game only ever moves forward through them"""

    SCHEDULED = "SCHEDULED"
    IN_PROGRESS = "IN_PROGRESS"
    FINAL = "FINAL"

    ALL = (SCHEDULED, IN_PROGRESS, FINAL)
    ORDER = {SCHEDULED: 0, IN_PROGRESS: 1, FINAL: 2}

    @classmethod
    def is_regression(cls, current, new):
        return cls.ORDER.get(new, 0) < cls.ORDER.get(current, 0)


# Basketball has no weeks; every basketball game is stored in week 1
BASKETBALL_WEEK = 1


class Game(db.Model):
    __tablename__ = "games"

    id = db.Column(db.Integer, primary_key=True)

    # Game identification
    sport_id = db.Column(db.Integer, db.ForeignKey("sports.id"), nullable=False)
    season_id = db.Column(db.Integer, db.ForeignKey("seasons.id"), nullable=False)
    week = db.Column(db.Integer, nullable=False)

    # Teams
    home_team_id = db.Column(db.Integer, db.ForeignKey("teams.id"), nullable=False)
    away_team_id = db.Column(db.Integer, db.ForeignKey("teams.id"), nullable=False)

    # Game timing
    game_time = db.Column(db.DateTime(timezone=True), nullable=False)
    venue = db.Column(db.String(200))

    # Scores
    home_score = db.Column(db.Integer)
    away_score = db.Column(db.Integer)

    # Game status
    status = db.Column(
        db.String(20), nullable=False, default=GameStatus.SCHEDULED, index=True
    )

    # Scoreboard game id, the sync idempotency key
    external_id = db.Column(db.String(50), unique=True, index=True)

    # Timestamps
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(
        db.DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    picks = db.relationship(
        "Pick", backref="game", lazy="dynamic", cascade="all, delete-orphan"
    )

    __table_args__ = (
        db.Index("idx_game_season_week", "season_id", "week"),
        db.Index("idx_game_time", "game_time"),
        db.CheckConstraint("home_team_id != away_team_id", name="different_teams"),
    )

    def __repr__(self):
        return f'<Game {self.away_team.abbreviation if self.away_team else "TBD"} @ {self.home_team.abbreviation if self.home_team else "TBD"} Week {self.week}>'

    @property
    def is_final(self):
        return self.status == GameStatus.FINAL

    @property
    def has_final_score(self):
        """Final with both scores known; scores are frozen from here on"""
        return (
            self.is_final and self.home_score is not None and self.away_score is not None
        )

    @property
    def is_tie(self):
        """Check if game ended in a tie"""
        return self.has_final_score and self.home_score == self.away_score

    @property
    def winning_team_id(self):
        """Id of the winning team (None if not final, scores missing or tie)"""
        if not self.has_final_score or self.home_score == self.away_score:
            return None

        if self.home_score > self.away_score:
            return self.home_team_id
        return self.away_team_id

    @property
    def matchup(self):
        away = self.away_team.short_name if self.away_team else "TBD"
        home = self.home_team.short_name if self.home_team else "TBD"
        return f"{away} @ {home}"

    def involves_team(self, team_id):
        return team_id in (self.home_team_id, self.away_team_id)

    def has_started(self, now=None):
        """Check if game has started"""
        return has_started_at(self.game_time, now)

    def is_pickable(self, now=None):
        """Check if game is available for picks (hasn't started yet)"""
        return not self.has_started(now) and self.status == GameStatus.SCHEDULED

    def apply_state(self, status, home_score, away_score):
        """
        Apply a scoreboard update to the mutable fields (status and scores).

        Status never moves backwards and the scores of a final game are
        frozen once both are known. Returns True if anything changed.
        """
        if status not in GameStatus.ALL:
            raise ValueError(f"Unknown game status: {status}")

        if GameStatus.is_regression(self.status, status):
            logger.warning(
                f"Ignoring status regression {self.status} -> {status} "
                f"for game {self.external_id or self.id}"
            )
            return False

        if self.has_final_score:
            if (home_score, away_score) != (self.home_score, self.away_score):
                logger.warning(
                    f"Ignoring score change {self.home_score}-{self.away_score} -> "
                    f"{home_score}-{away_score} for final game {self.external_id or self.id}"
                )
            return False

        changed = (
            self.status != status
            or self.home_score != home_score
            or self.away_score != away_score
        )
        self.status = status
        self.home_score = home_score
        self.away_score = away_score
        return changed

    @staticmethod
    def get_by_external_id(external_id):
        return Game.query.filter_by(external_id=str(external_id)).first()

    @staticmethod
    def get_games_for_season(season_id, week=None):
        """Get games of a season (optionally one week) with eager loading"""
        from sqlalchemy.orm import joinedload

        query = Game.query.filter_by(season_id=season_id).options(
            joinedload(Game.home_team), joinedload(Game.away_team)
        )
        if week is not None:
            query = query.filter_by(week=week)
        return query.order_by(Game.game_time).all()

    def to_dict(self):
        """Convert game to dictionary for API responses"""
        return {
            "id": self.id,
            "external_id": self.external_id,
            "sport_id": self.sport_id,
            "season_id": self.season_id,
            "week": self.week,
            "game_time": self.game_time.isoformat() if self.game_time else None,
            "venue": self.venue,
            "home_team": self.home_team.to_dict() if self.home_team else None,
            "away_team": self.away_team.to_dict() if self.away_team else None,
            "home_score": self.home_score,
            "away_score": self.away_score,
            "status": self.status,
            "winning_team_id": self.winning_team_id,
            "is_pickable": self.is_pickable(),
        }
