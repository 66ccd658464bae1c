from datetime import datetime, timezone

from pickem import db


class Pick(db.Model):
    __tablename__ = "picks"

    id = db.Column(db.Integer, primary_key=True)

    # Pick identification
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    game_id = db.Column(db.Integer, db.ForeignKey("games.id"), nullable=False)

    # Pick details
    picked_team_id = db.Column(db.Integer, db.ForeignKey("teams.id"), nullable=False)

    # Result: None until the game is final, then set exactly once
    is_correct = db.Column(db.Boolean)
    graded_at = db.Column(db.DateTime)

    # Timestamps
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(
        db.DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    picked_team = db.relationship("Team", foreign_keys=[picked_team_id])

    __table_args__ = (
        db.UniqueConstraint("user_id", "game_id", name="unique_user_game_pick"),
        db.Index("idx_pick_game", "game_id"),
        db.Index("idx_pick_ungraded", "is_correct"),
    )

    def __repr__(self):
        return f'<Pick user_id={self.user_id} game_id={self.game_id} team={self.picked_team.abbreviation if self.picked_team else "TBD"}>'

    @property
    def is_graded(self):
        return self.is_correct is not None

    def grade(self, winning_team_id):
        """
        Grade this pick against the game's winner.

        A pick is graded once; later calls leave it untouched and return False.
        """
        if self.is_graded or winning_team_id is None:
            return False

        self.is_correct = self.picked_team_id == winning_team_id
        self.graded_at = datetime.now(timezone.utc)
        return True

    @staticmethod
    def get_for_user_game(user_id, game_id):
        return Pick.query.filter_by(user_id=user_id, game_id=game_id).first()

    @staticmethod
    def upsert(user_id, game, picked_team_id):
        """Create or change a user's pick for a game. Caller validates the game."""
        pick = Pick.get_for_user_game(user_id, game.id)

        if pick:
            pick.picked_team_id = picked_team_id
            return pick, "Pick updated successfully"

        pick = Pick(user_id=user_id, game_id=game.id, picked_team_id=picked_team_id)
        pick.game = game
        db.session.add(pick)
        return pick, "Pick created successfully"

    @staticmethod
    def get_user_picks(user_id, season_id, week=None):
        """A user's picks in a season, optionally for one week"""
        from .game import Game

        query = Pick.query.join(Game).filter(
            Pick.user_id == user_id, Game.season_id == season_id
        )
        if week is not None:
            query = query.filter(Game.week == week)
        return query.order_by(Game.game_time).all()

    def to_dict(self):
        """Convert pick to dictionary for API responses"""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "game_id": self.game_id,
            "picked_team_id": self.picked_team_id,
            "picked_team": (
                self.picked_team.to_dict() if self.picked_team else None
            ),
            "game": self.game.to_dict() if self.game else None,
            "is_correct": self.is_correct,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
