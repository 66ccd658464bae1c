from datetime import date, datetime, timedelta, timezone
from unittest.mock import patch

import pytest
from sqlalchemy.exc import IntegrityError

from conftest import FAILED_FETCH, FakeScoreboardClient, login
from pickem import cache
from pickem.models import Game, GameStatus, Pick, Team
from pickem.services.scheduler_service import SchedulerService
from pickem.services.sync_engine import SyncEngine
from pickem.services.team_resolver import TeamNameResolver
from pickem.utils.timezone_utils import get_current_time, local_day_bounds

CRON_HEADERS = {"Authorization": "Bearer test-cron-secret"}
PAST = datetime.now(timezone.utc) - timedelta(hours=3)


def patch_engine(**units):
    engine = SyncEngine(FakeScoreboardClient(**units), TeamNameResolver())
    return patch("pickem.routes.api.routes.get_sync_engine", return_value=engine)


@pytest.fixture
def game(make_game, football):
    return make_game(football, "OSU", "TEX")


class TestAuth:
    def test_login_and_me(self, client, user):
        response = login(client, "alice")

        assert response.status_code == 200
        assert response.get_json()["user"]["username"] == "alice"
        assert client.get("/auth/me").get_json()["user"]["id"] == user.id

    def test_wrong_password(self, client, user):
        response = login(client, "alice", "nope")

        assert response.status_code == 401
        assert response.get_json()["error"] == "Invalid username or password"

    def test_missing_fields(self, client):
        response = client.post("/auth/login", json={"username": "alice"})

        assert response.status_code == 400

    def test_deactivated_user(self, db, client, user):
        user.is_active = False
        db.session.commit()

        assert login(client, "alice").status_code == 403

    def test_logout(self, auth_client):
        assert auth_client.post("/auth/logout").status_code == 200
        assert auth_client.get("/auth/me").status_code == 401

    def test_me_requires_login(self, client):
        response = client.get("/auth/me")

        assert response.status_code == 401
        assert response.get_json() == {"error": "Unauthorized"}


class TestGames:
    def test_lists_active_season_games(self, client, make_game, football, basketball):
        make_game(football, "OSU", "TEX", week=1)
        make_game(football, "ALA", "UGA", week=2)
        make_game(basketball, "DUKE", "UNC")

        data = client.get("/api/games?sport=football").get_json()

        assert len(data["games"]) == 2
        assert data["season"]["year"] == 2024

    def test_filter_by_week_and_conference(self, client, make_game, football):
        make_game(football, "OSU", "TEX", week=1)
        make_game(football, "ALA", "UGA", week=1)
        make_game(football, "MICH", "PSU", week=2)

        week_one = client.get("/api/games?sport=football&week=1").get_json()
        big_ten = client.get("/api/games?sport=football&conference=Big Ten").get_json()
        everyone = client.get("/api/games?sport=football&conference=all").get_json()

        assert len(week_one["games"]) == 2
        assert {g["home_team"]["abbreviation"] for g in big_ten["games"]} == {"OSU", "MICH"}
        assert len(everyone["games"]) == 3

    def test_pickability_is_not_cached(self, app, client, make_game, football):
        cache.init_app(app, config={"CACHE_TYPE": "SimpleCache"})
        make_game(football, "OSU", "TEX")

        before = client.get("/api/games?sport=football").get_json()
        after_kickoff = datetime.now(timezone.utc) + timedelta(days=2)
        with patch("pickem.routes.api.routes.get_utc_time", return_value=after_kickoff):
            after = client.get("/api/games?sport=football").get_json()

        assert before["games"][0]["is_pickable"] is True
        assert after["games"][0]["is_pickable"] is False
        assert after["games"][0]["id"] == before["games"][0]["id"]

    def test_unknown_sport(self, client):
        response = client.get("/api/games?sport=lacrosse")

        assert response.status_code == 404
        assert response.get_json()["error"] == "Sport not found"


class TestPicks:
    def test_requires_login(self, client, game):
        response = client.post("/api/picks", json={"game_id": game.id, "picked_team_id": 1})

        assert response.status_code == 401

    def test_create_then_change_pick(self, db, auth_client, user, game):
        response = auth_client.post(
            "/api/picks", json={"game_id": game.id, "picked_team_id": game.home_team_id}
        )

        assert response.status_code == 200
        data = response.get_json()
        assert data["message"] == "Pick created successfully"
        assert data["pick"]["picked_team_id"] == game.home_team_id
        assert "no-store" in response.headers["Cache-Control"]

        response = auth_client.post(
            "/api/picks", json={"gameId": game.id, "pickedTeamId": game.away_team_id}
        )

        assert response.get_json()["message"] == "Pick updated successfully"
        db.session.expire_all()
        picks = Pick.query.filter_by(user_id=user.id).all()
        assert [p.picked_team_id for p in picks] == [game.away_team_id]

    def test_lost_insert_race_without_surviving_pick(self, db, auth_client, game):
        duplicate = IntegrityError("INSERT INTO picks", {}, Exception("UNIQUE constraint failed"))
        with patch.object(Pick, "get_for_user_game", return_value=None), patch.object(
            db.session(), "commit", side_effect=duplicate
        ):
            response = auth_client.post(
                "/api/picks", json={"game_id": game.id, "picked_team_id": game.home_team_id}
            )

        assert response.status_code == 409
        assert response.get_json() == {"error": "Could not save pick"}
        assert Pick.query.count() == 0

    def test_missing_fields(self, auth_client):
        response = auth_client.post("/api/picks", json={"game_id": 1})

        assert response.status_code == 400
        assert response.get_json()["error"] == "Game ID and picked team ID are required"

    def test_unknown_game(self, auth_client):
        response = auth_client.post("/api/picks", json={"game_id": 999, "picked_team_id": 1})

        assert response.status_code == 404

    def test_team_not_in_game(self, auth_client, game, football):
        alabama = Team.get_by_abbreviation("ALA", football.id)
        response = auth_client.post(
            "/api/picks", json={"game_id": game.id, "picked_team_id": alabama.id}
        )

        assert response.status_code == 400
        assert response.get_json()["error"] == "Invalid team selection"

    @pytest.mark.parametrize(
        "start, status",
        [
            (PAST, GameStatus.SCHEDULED),
            (None, GameStatus.IN_PROGRESS),
        ],
    )
    def test_locked_once_started(self, auth_client, make_game, football, start, status):
        game = make_game(football, "OSU", "TEX", start=start, status=status)

        response = auth_client.post(
            "/api/picks", json={"game_id": game.id, "picked_team_id": game.home_team_id}
        )

        assert response.status_code == 400
        assert response.get_json()["error"] == "Cannot pick after game has started"

    def test_list_picks(self, auth_client, make_game, football):
        first = make_game(football, "OSU", "TEX", week=1)
        second = make_game(football, "ALA", "UGA", week=2)
        for g in (first, second):
            auth_client.post("/api/picks", json={"game_id": g.id, "picked_team_id": g.home_team_id})

        all_picks = auth_client.get("/api/picks?sport=football").get_json()["picks"]
        week_two = auth_client.get("/api/picks?sport=football&week=2").get_json()["picks"]

        assert len(all_picks) == 2
        assert [p["game_id"] for p in week_two] == [second.id]

    def test_delete_pick(self, db, auth_client, game):
        auth_client.post(
            "/api/picks", json={"game_id": game.id, "picked_team_id": game.home_team_id}
        )

        response = auth_client.delete("/api/picks", json={"gameId": game.id})

        assert response.get_json() == {"success": True}
        db.session.expire_all()
        assert Pick.query.count() == 0
        assert auth_client.delete("/api/picks", json={"game_id": game.id}).status_code == 404

    def test_delete_locked_pick(self, db, auth_client, user, make_game, football):
        game = make_game(football, "OSU", "TEX", start=PAST)
        db.session.add(Pick(user_id=user.id, game_id=game.id, picked_team_id=game.home_team_id))
        db.session.commit()

        response = auth_client.delete("/api/picks", json={"game_id": game.id})

        assert response.status_code == 400
        assert response.get_json()["error"] == "Cannot undo after game has started"

    def test_delete_requires_game_id(self, auth_client):
        response = auth_client.delete("/api/picks", json={})

        assert response.status_code == 400
        assert response.get_json()["error"] == "Game ID is required"


class TestSync:
    def test_requires_admin_or_secret(self, auth_client):
        response = auth_client.post(
            "/api/sync", json={"sport": "football", "year": 2024, "week": 1}
        )

        assert response.status_code == 401

    def test_football_week_with_cron_secret(self, client, raw_game):
        with patch_engine(football={(2024, 1): [raw_game("X1", "ohio-st", "texas")]}):
            response = client.post(
                "/api/sync",
                json={"sport": "football", "year": 2024, "week": 1},
                headers=CRON_HEADERS,
            )

        assert response.status_code == 200
        data = response.get_json()
        assert (data["synced"], data["skipped"], data["total"]) == (1, 0, 1)
        assert Game.get_by_external_id("X1") is not None

    def test_basketball_day_as_admin(self, admin_client, raw_game):
        day = date(2025, 1, 5)
        with patch_engine(basketball={day: [raw_game("B1", "duke", "north-carolina")]}):
            response = admin_client.post(
                "/api/sync",
                json={"sport": "basketball", "year": 2025, "month": 1, "day": 5},
            )

        assert response.status_code == 200
        assert response.get_json()["unit"] == "2025-01-05"

    def test_upstream_failure_is_502(self, client):
        with patch_engine(football={(2024, 3): FAILED_FETCH}):
            response = client.post(
                "/api/sync",
                json={"sport": "football", "year": 2024, "week": 3},
                headers=CRON_HEADERS,
            )

        assert response.status_code == 502
        assert response.get_json()["error"] == "Failed to fetch NCAA data"

    @pytest.mark.parametrize(
        "body, error",
        [
            ({"sport": "hockey"}, "Invalid sport"),
            ({"sport": "football", "year": 2024}, "Valid year and week are required"),
            ({"sport": "basketball", "year": 2025, "month": 13, "day": 1}, "Valid year, month and day are required"),
        ],
    )
    def test_bad_requests(self, client, body, error):
        response = client.post("/api/sync", json=body, headers=CRON_HEADERS)

        assert response.status_code == 400
        assert response.get_json()["error"] == error

    def test_missing_season_is_404(self, db, client, football_season):
        football_season.is_active = False
        db.session.commit()

        with patch_engine():
            response = client.post(
                "/api/sync",
                json={"sport": "football", "year": 2024, "week": 1},
                headers=CRON_HEADERS,
            )

        assert response.status_code == 404

    def test_games_needing_update(self, client, make_game, basketball):
        start, end = local_day_bounds(get_current_time().date())
        midday = start + (end - start) / 2
        make_game(basketball, "DUKE", "UNC", start=midday, status=GameStatus.IN_PROGRESS)
        make_game(basketball, "KU", "BAY", start=midday, status=GameStatus.FINAL, home_score=70, away_score=60)
        make_game(basketball, "GONZ", "SMC", start=start - timedelta(hours=6))

        data = client.get("/api/sync?sport=basketball").get_json()

        assert data["gamesNeedingUpdate"] == 1
        assert data["games"][0]["status"] == GameStatus.IN_PROGRESS

    def test_games_needing_update_validation(self, client):
        assert client.get("/api/sync").status_code == 400
        assert client.get("/api/sync?sport=lacrosse").status_code == 404


class TestCron:
    def test_rejects_missing_secret(self, client):
        assert client.get("/api/cron/sync").status_code == 401

    def test_runs_scheduled_sync(self, client):
        with patch_engine() as get_engine:
            response = client.get("/api/cron/sync", headers=CRON_HEADERS)

        assert response.status_code == 200
        data = response.get_json()
        assert data["success"] is True
        assert len(data["results"]["basketball"]["units"]) == 2
        assert get_engine.return_value.client.closed

    def test_open_without_configured_secret(self, app, client):
        app.config["CRON_SECRET"] = None

        with patch_engine():
            assert client.get("/api/cron/sync").status_code == 200

    def test_missing_season_is_404(self, db, client, basketball_season):
        basketball_season.is_active = False
        db.session.commit()

        with patch_engine():
            response = client.get("/api/cron/sync", headers=CRON_HEADERS)

        assert response.status_code == 404


class TestGradeAndStats:
    def test_grade_endpoint(self, db, admin_client, admin, make_game, football):
        game = make_game(
            football, "OSU", "TEX", start=PAST, status=GameStatus.FINAL, home_score=21, away_score=14
        )
        db.session.add(Pick(user_id=admin.id, game_id=game.id, picked_team_id=game.home_team_id))
        db.session.commit()

        response = admin_client.post("/api/grade")

        assert response.get_json() == {"success": True, "picks_updated": 1}

    def test_grade_requires_access(self, auth_client):
        assert auth_client.post("/api/grade").status_code == 401

    def test_user_stats(self, db, auth_client, user, make_game, football, basketball):
        won = make_game(football, "OSU", "TEX", start=PAST, status=GameStatus.FINAL, home_score=21, away_score=14)
        lost = make_game(football, "ALA", "UGA", start=PAST, status=GameStatus.FINAL, home_score=3, away_score=10)
        pending = make_game(basketball, "DUKE", "UNC")
        for g, team_id in ((won, won.home_team_id), (lost, lost.home_team_id), (pending, pending.home_team_id)):
            db.session.add(Pick(user_id=user.id, game_id=g.id, picked_team_id=team_id))
        db.session.commit()
        auth_client.post("/api/grade", headers=CRON_HEADERS)

        overall = auth_client.get("/api/stats/user").get_json()
        football_only = auth_client.get("/api/stats/user?sport=football").get_json()

        assert overall["total"] == 3
        assert overall["pending"] == 1
        assert football_only["sport"] == "football"
        assert (football_only["correct"], football_only["incorrect"]) == (1, 1)
        assert football_only["accuracy"] == 0.5


class TestAdminScheduler:
    @pytest.fixture
    def service(self, app):
        service = SchedulerService()
        service.init_app(app)
        service.engine = SyncEngine(FakeScoreboardClient(), TeamNameResolver())
        with patch("pickem.services.scheduler_service.scheduler_service", service):
            yield service
        service.stop()

    def test_requires_admin(self, auth_client):
        assert auth_client.get("/api/admin/scheduler").status_code == 403
        assert auth_client.post("/api/admin/scheduler", json={"action": "stop"}).status_code == 403

    def test_requires_login(self, client):
        assert client.get("/api/admin/scheduler").status_code == 401

    def test_status(self, admin_client, service):
        data = admin_client.get("/api/admin/scheduler").get_json()

        assert data["is_running"] is False
        assert data["jobs"] == []
        assert data["stats"]["total_syncs"] == 0

    def test_force_sync(self, admin_client, service):
        response = admin_client.post("/api/admin/scheduler", json={"action": "force_sync"})

        assert response.get_json() == {"message": "Manual sync completed"}
        assert service.sync_stats["successful_syncs"] == 1
        status = admin_client.post("/api/admin/scheduler", json={"action": "status"})
        assert status.get_json()["stats"]["last_sync"] is not None

    def test_start_pause_resume_stop(self, admin_client, service):
        def act(action):
            return admin_client.post("/api/admin/scheduler", json={"action": action})

        assert act("start").get_json() == {"message": "Scheduler started successfully"}
        assert service.is_running
        assert act("pause_job").get_json()["message"].endswith("paused")
        assert act("resume_job").get_json()["message"].endswith("resumed")
        assert act("stop").status_code == 200
        assert not service.is_running

    def test_failed_action_is_500(self, admin_client, service):
        response = admin_client.post(
            "/api/admin/scheduler", json={"action": "pause_job", "job_id": "no-such-job"}
        )

        assert response.status_code == 500
        assert "Failed to pause job" in response.get_json()["error"]

    def test_unknown_action(self, admin_client, service):
        response = admin_client.post("/api/admin/scheduler", json={"action": "explode"})

        assert response.status_code == 400
        assert response.get_json() == {"error": "Unknown action"}
