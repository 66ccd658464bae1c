from datetime import datetime, timezone

from flask_login import UserMixin
from werkzeug.security import check_password_hash, generate_password_hash

from pickem import db


class User(UserMixin, db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), unique=True, nullable=False, index=True)
    email = db.Column(db.String(120), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)

    # Profile information
    display_name = db.Column(db.String(100))

    # Account status
    is_active = db.Column(db.Boolean, default=True)
    is_admin = db.Column(db.Boolean, default=False)

    # Timestamps
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(
        db.DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
    last_login = db.Column(db.DateTime)

    # Relationships
    picks = db.relationship(
        "Pick", backref="user", lazy="dynamic", cascade="all, delete-orphan"
    )

    def __repr__(self):
        return f"<User {self.username}>"

    def set_password(self, password):
        """Set password hash"""
        self.password_hash = generate_password_hash(password)

    def set_display_name(self, display_name):
        """Set display name with sanitization"""
        import html

        if display_name:
            self.display_name = html.escape(display_name.strip())
        else:
            self.display_name = display_name

    def check_password(self, password):
        """Check password against hash"""
        return check_password_hash(self.password_hash, password)

    @property
    def full_name(self):
        return self.display_name or self.username

    def update_last_login(self):
        self.last_login = datetime.now(timezone.utc)
        db.session.commit()

    def get_pick_stats(self, sport_id=None, season_id=None):
        """Pick accuracy summary, optionally limited to one sport or season

        Ungraded picks (future games, ties) count as pending and are left
        out of the accuracy figure.
        """
        from .game import Game
        from .pick import Pick

        query = Pick.query.join(Game).filter(Pick.user_id == self.id)
        if sport_id is not None:
            query = query.filter(Game.sport_id == sport_id)
        if season_id is not None:
            query = query.filter(Game.season_id == season_id)

        picks = query.all()
        correct = sum(1 for p in picks if p.is_correct is True)
        incorrect = sum(1 for p in picks if p.is_correct is False)
        graded = correct + incorrect

        return {
            "total": len(picks),
            "graded": graded,
            "correct": correct,
            "incorrect": incorrect,
            "pending": len(picks) - graded,
            "accuracy": round(correct / graded, 4) if graded else None,
        }

    def to_dict(self):
        return {
            "id": self.id,
            "username": self.username,
            "display_name": self.full_name,
            "is_admin": self.is_admin,
        }
