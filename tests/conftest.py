"""Shared pytest fixtures for NCAA Pick'em tests."""

from datetime import datetime, timedelta, timezone

import pytest

from pickem import create_app
from pickem import db as _db
from pickem.models import Game, GameStatus, Season, Sport, Team, User
from pickem.seed_data import seed_all
from pickem.services.scoreboard import FetchStatus, ScoreboardResult


class FakeScoreboardClient:
    """Scoreboard client stand-in serving canned results per unit.

    Values are lists of raw game records, a ScoreboardResult, or missing
    (which reads as an empty scoreboard).
    """

    def __init__(self, football=None, basketball=None, schedule=None):
        self.football = football or {}
        self.basketball = basketball or {}
        self.schedule = schedule or {}
        self.calls = []
        self.closed = False

    def _result(self, value):
        if isinstance(value, ScoreboardResult):
            return value
        games = list(value or [])
        status = FetchStatus.OK if games else FetchStatus.EMPTY
        return ScoreboardResult(status=status, games=games)

    def fetch_football(self, year, week, conference="all-conf"):
        self.calls.append(("football", year, week))
        return self._result(self.football.get((year, week)))

    def fetch_basketball(self, day):
        self.calls.append(("basketball", day))
        return self._result(self.basketball.get(day))

    def fetch_basketball_schedule(self, year, month):
        return self.schedule.get((year, month))

    def close(self):
        self.closed = True


FAILED_FETCH = ScoreboardResult(status=FetchStatus.FAILED, error="HTTP error 500")


@pytest.fixture
def app():
    app = create_app("testing")
    with app.app_context():
        seed_all()
        yield app
        _db.session.remove()
        _db.drop_all()


@pytest.fixture
def db(app):
    return _db


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def football(app):
    return Sport.get_by_slug("football")


@pytest.fixture
def basketball(app):
    return Sport.get_by_slug("basketball")


@pytest.fixture
def football_season(football):
    return Season.get_active(football)


@pytest.fixture
def basketball_season(basketball):
    return Season.get_active(basketball)


def _create_user(username, is_admin=False):
    user = User(username=username, email=f"{username}@example.com", is_admin=is_admin)
    user.set_password("password123")
    _db.session.add(user)
    _db.session.commit()
    return user


@pytest.fixture
def user(app):
    return _create_user("alice")


@pytest.fixture
def admin(app):
    return _create_user("coach", is_admin=True)


def login(client, username, password="password123"):
    return client.post("/auth/login", json={"username": username, "password": password})


@pytest.fixture
def auth_client(client, user):
    response = login(client, user.username)
    assert response.status_code == 200
    return client


@pytest.fixture
def admin_client(client, admin):
    response = login(client, admin.username)
    assert response.status_code == 200
    return client


@pytest.fixture
def make_game(app):
    """Factory for games between seeded teams"""

    def _make_game(
        sport,
        home,
        away,
        start=None,
        status=GameStatus.SCHEDULED,
        home_score=None,
        away_score=None,
        external_id=None,
        week=1,
    ):
        season = Season.get_active(sport)
        game = Game(
            sport_id=sport.id,
            season_id=season.id,
            week=week,
            home_team_id=Team.get_by_abbreviation(home, sport.id).id,
            away_team_id=Team.get_by_abbreviation(away, sport.id).id,
            game_time=start or datetime.now(timezone.utc) + timedelta(days=1),
            status=status,
            home_score=home_score,
            away_score=away_score,
            external_id=external_id,
        )
        _db.session.add(game)
        _db.session.commit()
        return game

    return _make_game


@pytest.fixture
def raw_game():
    """Factory for raw scoreboard game records"""

    def _raw_game(
        game_id,
        home="ohio-st",
        away="texas",
        state="pre",
        home_score=None,
        away_score=None,
        start=None,
    ):
        start = start or datetime.now(timezone.utc) + timedelta(days=1)
        home_side = {"names": {"seo": home}}
        away_side = {"names": {"seo": away}}
        if home_score is not None:
            home_side["score"] = str(home_score)
        if away_score is not None:
            away_side["score"] = str(away_score)

        record = {
            "gameState": state,
            "startTimeEpoch": str(int(start.timestamp())),
            "home": home_side,
            "away": away_side,
        }
        if game_id is not None:
            record["gameID"] = game_id
        return record

    return _raw_game
