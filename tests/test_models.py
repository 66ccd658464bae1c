from datetime import date, datetime, timedelta, timezone

import pytest
from sqlalchemy.exc import IntegrityError

from pickem.models import Game, GameStatus, Pick, Season, Team


def test_seed_creates_active_seasons_and_teams(football, basketball):
    assert Season.get_active(football).name == "2024-25"
    assert Season.get_active(basketball).name == "2024-25"

    assert Team.get_by_abbreviation("osu", football.id).short_name == "Ohio State"
    assert Team.get_by_abbreviation("GONZ", football.id) is None
    assert Team.get_by_abbreviation("GONZ", basketball.id).conference == "WCC"


def test_activate_only_touches_same_sport(db, football, basketball):
    old_football = Season.get_active(football)
    new_football = Season.create_season(football, 2025, date(2025, 8, 23), date(2026, 1, 19))
    db.session.flush()

    new_football.activate()
    db.session.commit()

    assert Season.get_active(football).id == new_football.id
    db.session.refresh(old_football)
    assert old_football.is_active is False
    assert Season.get_active(basketball) is not None
    assert new_football.name == "2025-26"


def test_winner_and_tie(make_game, football):
    game = make_game(football, "OSU", "TEX", status=GameStatus.FINAL, home_score=70, away_score=21)
    assert game.winning_team_id == game.home_team_id
    assert not game.is_tie

    tie = make_game(football, "ALA", "AUB", status=GameStatus.FINAL, home_score=24, away_score=24)
    assert tie.winning_team_id is None
    assert tie.is_tie


def test_no_winner_until_final_with_scores(make_game, football):
    live = make_game(football, "OSU", "TEX", status=GameStatus.IN_PROGRESS, home_score=7, away_score=0)
    assert live.winning_team_id is None

    final_without_scores = make_game(football, "ALA", "AUB", status=GameStatus.FINAL)
    assert final_without_scores.winning_team_id is None
    assert not final_without_scores.has_final_score


def test_apply_state_moves_forward(make_game, football):
    game = make_game(football, "OSU", "TEX")

    assert game.apply_state(GameStatus.IN_PROGRESS, 7, 3) is True
    assert game.apply_state(GameStatus.IN_PROGRESS, 7, 3) is False
    assert game.apply_state(GameStatus.FINAL, 28, 17) is True

    assert game.status == GameStatus.FINAL
    assert (game.home_score, game.away_score) == (28, 17)


def test_apply_state_ignores_regression(make_game, football):
    game = make_game(football, "OSU", "TEX", status=GameStatus.FINAL, home_score=28, away_score=17)

    assert game.apply_state(GameStatus.IN_PROGRESS, 30, 17) is False
    assert game.apply_state(GameStatus.SCHEDULED, None, None) is False

    assert game.status == GameStatus.FINAL
    assert (game.home_score, game.away_score) == (28, 17)


def test_final_scores_are_frozen(make_game, football):
    game = make_game(football, "OSU", "TEX", status=GameStatus.FINAL, home_score=28, away_score=17)

    assert game.apply_state(GameStatus.FINAL, 35, 17) is False
    assert (game.home_score, game.away_score) == (28, 17)


def test_final_without_scores_can_still_receive_them(make_game, football):
    game = make_game(football, "OSU", "TEX", status=GameStatus.FINAL)

    assert game.apply_state(GameStatus.FINAL, 28, 17) is True
    assert game.has_final_score


def test_apply_state_rejects_unknown_status(make_game, football):
    game = make_game(football, "OSU", "TEX")

    with pytest.raises(ValueError):
        game.apply_state("HALFTIME", 7, 7)


def test_pickable_only_before_start(make_game, football):
    future = make_game(football, "OSU", "TEX")
    past = make_game(
        football, "ALA", "AUB", start=datetime.now(timezone.utc) - timedelta(minutes=5)
    )
    live = make_game(football, "UGA", "CLEM", status=GameStatus.IN_PROGRESS)

    assert future.is_pickable()
    assert not past.is_pickable()
    assert past.has_started()
    assert not live.is_pickable()


def test_naive_game_time_is_treated_as_utc(make_game, football):
    game = make_game(football, "OSU", "TEX")
    game.game_time = datetime.now(timezone.utc).replace(tzinfo=None) - timedelta(minutes=1)

    assert game.has_started()


def test_distinct_teams_required(db, football, football_season):
    osu = Team.get_by_abbreviation("OSU", football.id)
    db.session.add(
        Game(
            sport_id=football.id,
            season_id=football_season.id,
            week=1,
            home_team_id=osu.id,
            away_team_id=osu.id,
            game_time=datetime.now(timezone.utc),
        )
    )

    with pytest.raises(IntegrityError):
        db.session.commit()
    db.session.rollback()


def test_pick_graded_once(db, make_game, football, user):
    game = make_game(football, "OSU", "TEX", status=GameStatus.FINAL, home_score=70, away_score=21)
    pick = Pick(user_id=user.id, game_id=game.id, picked_team_id=game.away_team_id)
    db.session.add(pick)
    db.session.commit()

    assert pick.grade(game.winning_team_id) is True
    assert pick.is_correct is False
    assert pick.graded_at is not None

    assert pick.grade(game.away_team_id) is False
    assert pick.is_correct is False


def test_pick_not_graded_without_winner(db, make_game, football, user):
    game = make_game(football, "OSU", "TEX", status=GameStatus.FINAL, home_score=21, away_score=21)
    pick = Pick(user_id=user.id, game_id=game.id, picked_team_id=game.home_team_id)
    db.session.add(pick)
    db.session.commit()

    assert pick.grade(game.winning_team_id) is False
    assert pick.is_correct is None


def test_pick_upsert_keeps_one_pick_per_game(db, make_game, football, user):
    game = make_game(football, "OSU", "TEX")

    pick, message = Pick.upsert(user.id, game, game.home_team_id)
    db.session.commit()
    assert message == "Pick created successfully"

    again, message = Pick.upsert(user.id, game, game.away_team_id)
    db.session.commit()
    assert message == "Pick updated successfully"
    assert again.id == pick.id
    assert Pick.query.filter_by(user_id=user.id, game_id=game.id).count() == 1
    assert again.picked_team_id == game.away_team_id


def test_user_pick_stats(db, make_game, football, basketball, user):
    won = make_game(football, "OSU", "TEX", status=GameStatus.FINAL, home_score=70, away_score=21)
    lost = make_game(football, "ALA", "AUB", status=GameStatus.FINAL, home_score=10, away_score=13)
    pending = make_game(basketball, "DUKE", "UNC")

    db.session.add_all(
        [
            Pick(user_id=user.id, game_id=won.id, picked_team_id=won.home_team_id, is_correct=True),
            Pick(user_id=user.id, game_id=lost.id, picked_team_id=lost.home_team_id, is_correct=False),
            Pick(user_id=user.id, game_id=pending.id, picked_team_id=pending.home_team_id),
        ]
    )
    db.session.commit()

    stats = user.get_pick_stats()
    assert stats["total"] == 3
    assert stats["correct"] == 1
    assert stats["incorrect"] == 1
    assert stats["pending"] == 1
    assert stats["accuracy"] == 0.5

    football_stats = user.get_pick_stats(sport_id=football.id)
    assert football_stats["total"] == 2
    assert football_stats["pending"] == 0

    basketball_stats = user.get_pick_stats(sport_id=basketball.id)
    assert basketball_stats["accuracy"] is None
