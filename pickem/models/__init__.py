from pickem import db  # noqa: F401 - imported for model imports

from .game import Game, GameStatus
from .pick import Pick
from .season import Season
from .sport import Sport
from .team import Team
from .user import User

__all__ = [
    "User",
    "Sport",
    "Season",
    "Team",
    "Game",
    "GameStatus",
    "Pick",
]
