import hmac
import logging
from datetime import date, datetime
from functools import wraps

from flask import current_app, jsonify, request
from flask_login import current_user, login_required
from sqlalchemy.exc import IntegrityError

from pickem import db, limiter
from pickem.forms.picks import DeletePickForm, PickForm
from pickem.models import Game, GameStatus, Pick, Season, Sport
from pickem.models.game import has_started_at
from pickem.routes.api import bp
from pickem.services.pick_grader import PickGrader
from pickem.services.scheduler_service import SCHEDULED_SYNC_JOB, run_scheduled_sync
from pickem.services.sync_engine import (
    FOOTBALL,
    SUPPORTED_SPORTS,
    FootballWeek,
    SyncEngine,
)
from pickem.utils.cache_utils import cached_route, invalidate_model_cache
from pickem.utils.timezone_utils import get_current_time, get_utc_time, local_day_bounds

logger = logging.getLogger(__name__)


def add_security_headers(f):
    """Add no-store caching headers to per-user API responses"""

    @wraps(f)
    def decorated_function(*args, **kwargs):
        response = current_app.make_response(f(*args, **kwargs))
        response.headers["Cache-Control"] = (
            "no-store, no-cache, must-revalidate, max-age=0"
        )
        return response

    return decorated_function


def has_cron_secret():
    """True when the request carries `Authorization: Bearer <CRON_SECRET>`"""
    secret = current_app.config.get("CRON_SECRET")
    if not secret:
        return False
    header = request.headers.get("Authorization", "")
    return hmac.compare_digest(header.encode(), f"Bearer {secret}".encode())


def sync_access_required(f):
    """Allow admins and callers holding the cron secret"""

    @wraps(f)
    def decorated_function(*args, **kwargs):
        if has_cron_secret():
            return f(*args, **kwargs)
        if current_user.is_authenticated and current_user.is_admin:
            return f(*args, **kwargs)
        return jsonify({"error": "Unauthorized"}), 401

    return decorated_function


def admin_required(f):
    """Logged-in admins only"""

    @wraps(f)
    @login_required
    def decorated_function(*args, **kwargs):
        if not current_user.is_admin:
            return jsonify({"error": "Access denied"}), 403
        return f(*args, **kwargs)

    return decorated_function


def get_sync_engine():
    return SyncEngine.from_config(current_app.config)


def resolve_sport_season(slug):
    """(sport, season, None) or (None, None, error response)"""
    sport = Sport.get_by_slug(slug)
    if not sport:
        return None, None, (jsonify({"error": "Sport not found"}), 404)

    season = Season.get_active(sport)
    if not season:
        return None, None, (jsonify({"error": "No active season"}), 404)

    return sport, season, None


def parse_sync_unit(sport, data):
    """Build the sync unit from a POST /api/sync body; None if incomplete"""
    try:
        if sport == FOOTBALL:
            return FootballWeek(week=int(data["week"]), year=int(data["year"]))
        return date(int(data["year"]), int(data["month"]), int(data["day"]))
    except (KeyError, TypeError, ValueError):
        return None


@bp.route("/sync", methods=["POST"])
@limiter.limit("30 per hour")
@sync_access_required
def sync():
    """Sync one football week or one basketball day from the NCAA scoreboard"""
    data = request.get_json(silent=True) or {}
    sport = str(data.get("sport") or "").lower()

    if sport not in SUPPORTED_SPORTS:
        return jsonify({"error": "Invalid sport"}), 400

    unit = parse_sync_unit(sport, data)
    if unit is None:
        required = "year and week" if sport == FOOTBALL else "year, month and day"
        return jsonify({"error": f"Valid {required} are required"}), 400

    engine = get_sync_engine()
    try:
        result = engine.sync(sport, unit)
    finally:
        engine.close()

    if result.synced:
        invalidate_model_cache("Game")

    if not result.success:
        return jsonify(result.to_dict()), result.http_status
    return jsonify(result.to_dict())


@bp.route("/sync", methods=["GET"])
def sync_status():
    """Today's games of a sport that still need score updates"""
    slug = request.args.get("sport")
    if not slug:
        return jsonify({"error": "Sport required"}), 400

    sport = Sport.get_by_slug(slug)
    if not sport:
        return jsonify({"error": "Sport not found"}), 404

    start, end = local_day_bounds(get_current_time().date())
    games = (
        Game.query.filter(
            Game.sport_id == sport.id,
            Game.game_time >= start,
            Game.game_time < end,
            Game.status.in_([GameStatus.SCHEDULED, GameStatus.IN_PROGRESS]),
        )
        .order_by(Game.game_time)
        .all()
    )

    return jsonify(
        {
            "gamesNeedingUpdate": len(games),
            "games": [
                {"id": game.id, "matchup": game.matchup, "status": game.status}
                for game in games
            ],
        }
    )


@bp.route("/cron/sync")
def cron_sync():
    """Scheduled sync trigger for external cron services"""
    if current_app.config.get("CRON_SECRET") and not has_cron_secret():
        return jsonify({"error": "Unauthorized"}), 401

    engine = get_sync_engine()
    try:
        summary = run_scheduled_sync(engine=engine)
    except Exception as e:
        db.session.rollback()
        logger.error(f"Cron sync error: {e}", exc_info=True)
        return jsonify({"error": "Sync failed"}), 500
    finally:
        engine.close()

    results = summary["results"]
    if not summary["success"] and any(r.get("error_kind") == "not_found" for r in results.values()):
        return jsonify({**summary, "error": "Sync setup incomplete"}), 404
    return jsonify(summary)


@bp.route("/grade", methods=["POST"])
@sync_access_required
def grade():
    """Grade pending picks on final games"""
    picks_updated = PickGrader().grade_completed_picks()
    if picks_updated:
        invalidate_model_cache("Pick")
    return jsonify({"success": True, "picks_updated": picks_updated})


@cached_route(timeout=300, key_prefix="games")
def season_games_payload():
    """Cached /api/games body; is_pickable is refreshed per request"""
    slug = request.args.get("sport", "football")
    week = request.args.get("week", type=int)
    conference = request.args.get("conference")

    sport, season, error = resolve_sport_season(slug)
    if error:
        response, status = error
        return response.get_json(), status

    season_games = Game.get_games_for_season(season.id, week=week)

    if conference and conference != "all":
        season_games = [
            game
            for game in season_games
            if conference in (game.home_team.conference, game.away_team.conference)
        ]

    return {
        "games": [game.to_dict() for game in season_games],
        "season": season.to_dict(),
    }


def with_current_pickability(game_data, now):
    game_time = game_data.get("game_time")
    start = datetime.fromisoformat(game_time) if game_time else None
    pickable = game_data["status"] == GameStatus.SCHEDULED and not has_started_at(start, now)
    return {**game_data, "is_pickable": pickable}


@bp.route("/games")
def games():
    """Games of the active season, optionally filtered by week and conference"""
    payload = season_games_payload()
    if isinstance(payload, tuple):
        return payload

    now = get_utc_time()
    return {
        **payload,
        "games": [with_current_pickability(game, now) for game in payload["games"]],
    }


@bp.route("/picks", methods=["GET"])
@login_required
@add_security_headers
def user_picks():
    """Current user's picks in the active season of a sport"""
    slug = request.args.get("sport", "football")
    week = request.args.get("week", type=int)

    sport, season, error = resolve_sport_season(slug)
    if error:
        return error

    picks = Pick.get_user_picks(current_user.id, season.id, week=week)
    return jsonify({"picks": [pick.to_dict() for pick in picks]})


@bp.route("/picks", methods=["POST"])
@login_required
@add_security_headers
def submit_pick():
    """Create or change the current user's pick for a game"""
    form = PickForm.from_json()
    if not form.validate():
        return (
            jsonify(
                {
                    "error": "Game ID and picked team ID are required",
                    "errors": form.errors,
                }
            ),
            400,
        )

    game = db.session.get(Game, form.game_id.data)
    if not game:
        return jsonify({"error": "Game not found"}), 404

    if not game.is_pickable():
        return jsonify({"error": "Cannot pick after game has started"}), 400

    picked_team_id = form.picked_team_id.data
    if not game.involves_team(picked_team_id):
        return jsonify({"error": "Invalid team selection"}), 400

    pick, message = Pick.upsert(current_user.id, game, picked_team_id)
    try:
        db.session.commit()
    except IntegrityError:
        # Same pick created by a parallel request; update that one instead
        db.session.rollback()
        pick = Pick.get_for_user_game(current_user.id, game.id)
        if pick is None:
            logger.error(
                f"Could not save pick of user {current_user.id} for game {game.id}",
                exc_info=True,
            )
            return jsonify({"error": "Could not save pick"}), 409
        pick.picked_team_id = picked_team_id
        message = "Pick updated successfully"
        db.session.commit()

    logger.info(
        f"User {current_user.id} picked team {picked_team_id} for game {game.id}"
    )
    return jsonify({"success": True, "message": message, "pick": pick.to_dict()})


@bp.route("/picks", methods=["DELETE"])
@login_required
@add_security_headers
def delete_pick():
    """Undo the current user's pick for a game that has not started"""
    form = DeletePickForm.from_json()
    if not form.validate():
        return jsonify({"error": "Game ID is required", "errors": form.errors}), 400

    game = db.session.get(Game, form.game_id.data)
    if not game:
        return jsonify({"error": "Game not found"}), 404

    if not game.is_pickable():
        return jsonify({"error": "Cannot undo after game has started"}), 400

    pick = Pick.get_for_user_game(current_user.id, game.id)
    if not pick:
        return jsonify({"error": "Pick not found"}), 404

    db.session.delete(pick)
    db.session.commit()

    return jsonify({"success": True})


@bp.route("/stats/user")
@login_required
@add_security_headers
def user_stats():
    """Pick accuracy of the current user, overall or for a sport's active season"""
    slug = request.args.get("sport")

    if not slug:
        return jsonify({"sport": None, "season_id": None, **current_user.get_pick_stats()})

    sport, season, error = resolve_sport_season(slug)
    if error:
        return error

    stats = current_user.get_pick_stats(sport_id=sport.id, season_id=season.id)
    return jsonify({"sport": sport.slug, "season_id": season.id, **stats})


@bp.route("/admin/scheduler")
@admin_required
@add_security_headers
def admin_scheduler():
    """Background scheduler status"""
    from pickem.services.scheduler_service import scheduler_service

    return jsonify(scheduler_service.get_status())


@bp.route("/admin/scheduler", methods=["POST"])
@admin_required
@add_security_headers
def admin_scheduler_action():
    """Start, stop, force a sync run, or pause/resume a scheduler job"""
    from pickem.services.scheduler_service import scheduler_service

    data = request.get_json(silent=True) or {}
    action = data.get("action")
    job_id = data.get("job_id") or SCHEDULED_SYNC_JOB

    try:
        if action == "start":
            scheduler_service.start()
            return jsonify({"message": "Scheduler started successfully"})

        elif action == "stop":
            scheduler_service.stop()
            return jsonify({"message": "Scheduler stopped successfully"})

        elif action == "status":
            return jsonify(scheduler_service.get_status())

        elif action == "force_sync":
            success, message = scheduler_service.force_sync()

        elif action == "pause_job":
            success, message = scheduler_service.pause_job(job_id)

        elif action == "resume_job":
            success, message = scheduler_service.resume_job(job_id)

        else:
            return jsonify({"error": "Unknown action"}), 400

    except Exception as e:
        logger.error(f"Scheduler action {action!r} failed: {e}", exc_info=True)
        return jsonify({"error": f"Scheduler action failed: {str(e)}"}), 500

    if success:
        return jsonify({"message": message})
    return jsonify({"error": message}), 500
