"""Normalization of raw scoreboard game records"""

from collections import namedtuple
from datetime import datetime, timezone

from pickem.models.game import GameStatus

ParsedGameState = namedtuple("ParsedGameState", ["status", "home_score", "away_score"])

_STATE_MAP = {
    "final": GameStatus.FINAL,
    "live": GameStatus.IN_PROGRESS,
}


def _side(value):
    return value if isinstance(value, dict) else {}


def parse_score(value):
    """Score string -> int; None when absent, blank or not a number"""
    if value is None:
        return None
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value

    text = str(value).strip()
    if not text:
        return None
    try:
        return int(text)
    except ValueError:
        return None


def parse_game_state(raw):
    """
    Convert a raw scoreboard game into (status, home_score, away_score).

    "final" maps to FINAL, "live" to IN_PROGRESS and any other tag to
    SCHEDULED. Scores are optional in every state, final included.
    """
    if not isinstance(raw, dict):
        raw = {}
    state = str(raw.get("gameState") or "").strip().lower()
    status = _STATE_MAP.get(state, GameStatus.SCHEDULED)

    home = _side(raw.get("home"))
    away = _side(raw.get("away"))

    return ParsedGameState(
        status=status,
        home_score=parse_score(home.get("score")),
        away_score=parse_score(away.get("score")),
    )


def parse_start_time(epoch):
    """Epoch seconds (number or numeric string) -> aware UTC datetime, or None

    Fractional seconds are truncated.
    """
    if epoch is None or isinstance(epoch, bool):
        return None
    try:
        seconds = int(float(str(epoch).strip()))
    except (ValueError, OverflowError):
        return None
    try:
        return datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None


def team_slug(side):
    """Pull the SEO slug out of a home/away sub-record; "" when malformed"""
    names = _side(side).get("names")
    if not isinstance(names, dict):
        return ""
    slug = names.get("seo")
    return slug if isinstance(slug, str) else ""
