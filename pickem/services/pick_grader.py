"""
Grades picks on finished games.

A pick is graded once: is_correct moves from None to True/False and never
changes again. Picks on tied games have no winner and stay ungraded.
"""

import logging

from sqlalchemy.exc import SQLAlchemyError

from pickem import db
from pickem.models import Game, GameStatus, Pick

logger = logging.getLogger(__name__)


class PickGrader:
    """Grades ungraded picks whose game is final with both scores"""

    def _grade_picks(self, picks):
        updated = 0
        ties = set()

        for pick in picks:
            game = pick.game
            winner = game.winning_team_id
            if winner is None:
                ties.add(game.id)
                continue
            if pick.grade(winner):
                updated += 1

        if ties:
            logger.debug(f"Left picks ungraded on {len(ties)} tied games: {sorted(ties)}")
        return updated

    def _commit(self, updated):
        if not updated:
            return
        try:
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Error committing graded picks: {e}", exc_info=True)
            raise

    def grade_completed_picks(self, sport_id=None):
        """Grade every pending pick on a final game; returns the number graded"""
        query = Pick.query.join(Game, Pick.game_id == Game.id).filter(
            Pick.is_correct.is_(None),
            Game.status == GameStatus.FINAL,
            Game.home_score.isnot(None),
            Game.away_score.isnot(None),
        )
        if sport_id is not None:
            query = query.filter(Game.sport_id == sport_id)

        updated = self._grade_picks(query.all())
        self._commit(updated)

        if updated:
            logger.info(f"Graded {updated} picks")
        return updated

    def grade_game(self, game):
        """Grade the pending picks of a single game"""
        if not game.has_final_score:
            return 0

        pending = game.picks.filter(Pick.is_correct.is_(None)).all()
        updated = self._grade_picks(pending)
        self._commit(updated)

        if updated:
            logger.info(f"Graded {updated} picks for game {game.id}")
        return updated
