"""
Scoreboard -> database synchronization.

One sync run covers one sport and one or more units (a football week or a
basketball date). For every scoreboard record the two team slugs are
resolved to internal teams, the game state is parsed and the Game row keyed
by the scoreboard game id is created or updated. Records whose teams are not
seeded are skipped and counted, never fatal.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from pickem import db
from pickem.models import Game, Season, Sport, Team
from pickem.models.game import BASKETBALL_WEEK
from pickem.services.game_state import parse_game_state, parse_start_time, team_slug
from pickem.services.scoreboard import FetchStatus, ScoreboardClient
from pickem.services.team_resolver import TeamNameResolver

logger = logging.getLogger(__name__)

FOOTBALL = "football"
BASKETBALL = "basketball"
SUPPORTED_SPORTS = (FOOTBALL, BASKETBALL)


class ErrorKind:
    NOT_FOUND = "not_found"
    UPSTREAM = "upstream"
    BAD_REQUEST = "bad_request"
    DATABASE = "database"


ERROR_HTTP_STATUS = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.UPSTREAM: 502,
    ErrorKind.BAD_REQUEST: 400,
    ErrorKind.DATABASE: 500,
}


@dataclass(frozen=True)
class FootballWeek:
    """A football sync unit; year defaults to the active season's year"""

    week: int
    year: int = None

    def __str__(self):
        return f"{self.year or 'active'} week {self.week}"


@dataclass
class SyncResult:
    sport: str
    unit: str = None
    success: bool = True
    synced: int = 0
    skipped: int = 0
    total: int = 0
    created: int = 0
    updated: int = 0
    fetch_status: str = None
    error: str = None
    error_kind: str = None

    @classmethod
    def failure(cls, sport, error, error_kind, unit=None, fetch_status=None):
        return cls(
            sport=sport,
            unit=unit,
            success=False,
            error=error,
            error_kind=error_kind,
            fetch_status=fetch_status,
        )

    @property
    def http_status(self):
        if self.success:
            return 200
        return ERROR_HTTP_STATUS.get(self.error_kind, 500)

    def to_dict(self):
        data = {
            "success": self.success,
            "sport": self.sport,
            "unit": self.unit,
            "synced": self.synced,
            "skipped": self.skipped,
            "total": self.total,
            "created": self.created,
            "updated": self.updated,
            "fetch_status": self.fetch_status,
        }
        if not self.success:
            data["error"] = self.error
            data["error_kind"] = self.error_kind
        return data


@dataclass
class BatchSyncResult:
    """Outcome of syncing several units of one sport"""

    sport: str
    results: list = field(default_factory=list)
    error: str = None
    error_kind: str = None

    @property
    def synced(self):
        return sum(r.synced for r in self.results)

    @property
    def skipped(self):
        return sum(r.skipped for r in self.results)

    @property
    def total(self):
        return sum(r.total for r in self.results)

    @property
    def failed_units(self):
        return [r.unit for r in self.results if not r.success]

    @property
    def success(self):
        return self.error is None and not self.failed_units

    def to_dict(self):
        data = {
            "success": self.success,
            "synced": self.synced,
            "skipped": self.skipped,
            "total": self.total,
            "units": [r.to_dict() for r in self.results],
        }
        if self.error:
            data["error"] = self.error
            data["error_kind"] = self.error_kind
        return data


class SyncEngine:
    """Upserts scoreboard games for one sport at a time"""

    def __init__(self, client, resolver):
        self.client = client
        self.resolver = resolver

    @classmethod
    def from_config(cls, app_config):
        return cls(
            ScoreboardClient.from_config(app_config),
            TeamNameResolver.from_config(app_config),
        )

    def close(self):
        self.client.close()

    def resolve_context(self, sport_slug):
        """Find the sport and its active season

        Returns (sport, season, None) or (None, None, SyncResult failure).
        """
        slug = (sport_slug or "").lower()
        if slug not in SUPPORTED_SPORTS:
            return None, None, SyncResult.failure(
                slug, f"Invalid sport: {sport_slug!r}", ErrorKind.BAD_REQUEST
            )

        sport = Sport.get_by_slug(slug)
        if not sport:
            return None, None, SyncResult.failure(
                slug, f"{slug.capitalize()} sport not found", ErrorKind.NOT_FOUND
            )

        season = Season.get_active(sport)
        if not season:
            return None, None, SyncResult.failure(
                slug, f"No active season found for {slug}", ErrorKind.NOT_FOUND
            )

        return sport, season, None

    def sync(self, sport_slug, unit):
        """Sync a single unit: FootballWeek for football, date for basketball"""
        sport, season, failure = self.resolve_context(sport_slug)
        if failure:
            logger.warning(f"Sync aborted: {failure.error}")
            return failure
        return self.sync_unit(sport, season, unit)

    def sync_units(self, sport_slug, units):
        """Sync several units independently; a failed unit does not stop the rest"""
        sport, season, failure = self.resolve_context(sport_slug)
        if failure:
            logger.warning(f"Sync aborted: {failure.error}")
            return BatchSyncResult(
                sport=failure.sport, error=failure.error, error_kind=failure.error_kind
            )

        batch = BatchSyncResult(sport=sport.slug)
        team_map = Team.get_map_for_sport(sport.id)
        for unit in units:
            batch.results.append(self.sync_unit(sport, season, unit, team_map=team_map))
        return batch

    def _validate_unit(self, sport, unit):
        if sport.slug == FOOTBALL:
            if not isinstance(unit, FootballWeek) or int(unit.week) < 0:
                return None, "Football sync needs a week"
            return unit, None

        if isinstance(unit, datetime):
            unit = unit.date()
        if not isinstance(unit, date):
            return None, "Basketball sync needs a date"
        return unit, None

    def _fetch(self, sport, season, unit):
        if sport.slug == FOOTBALL:
            return self.client.fetch_football(unit.year or season.year, unit.week)
        return self.client.fetch_basketball(unit)

    def sync_unit(self, sport, season, unit, team_map=None):
        """
        Fetch one unit and upsert its games into the given season.

        The season is passed in rather than looked up so callers decide
        which season receives new games.
        """
        unit, error = self._validate_unit(sport, unit)
        if error:
            return SyncResult.failure(sport.slug, error, ErrorKind.BAD_REQUEST)

        unit_label = str(unit)
        fetched = self._fetch(sport, season, unit)

        if fetched.failed:
            logger.warning(f"No data for {sport.slug} {unit_label}: {fetched.error}")
            return SyncResult.failure(
                sport.slug,
                "Failed to fetch NCAA data",
                ErrorKind.UPSTREAM,
                unit=unit_label,
                fetch_status=FetchStatus.FAILED,
            )

        result = SyncResult(sport=sport.slug, unit=unit_label, fetch_status=fetched.status)
        result.total = len(fetched.games)
        if fetched.status == FetchStatus.EMPTY:
            logger.info(f"No games for {sport.slug} {unit_label}")
            return result

        if team_map is None:
            team_map = Team.get_map_for_sport(sport.id)
        week = unit.week if sport.slug == FOOTBALL else BASKETBALL_WEEK

        try:
            for raw in fetched.games:
                outcome = self._sync_record(sport, season, week, raw, team_map)
                if outcome is None:
                    result.skipped += 1
                    continue
                result.synced += 1
                if outcome == "created":
                    result.created += 1
                elif outcome == "updated":
                    result.updated += 1

            db.session.commit()

        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Database error syncing {sport.slug} {unit_label}: {e}", exc_info=True)
            failure = SyncResult.failure(
                sport.slug,
                "Database error during sync",
                ErrorKind.DATABASE,
                unit=unit_label,
                fetch_status=fetched.status,
            )
            failure.total = result.total
            return failure

        logger.info(
            f"Synced {sport.slug} {unit_label}: {result.synced} synced "
            f"({result.created} new, {result.updated} changed), "
            f"{result.skipped} skipped of {result.total}"
        )
        return result

    def _sync_record(self, sport, season, week, raw, team_map):
        """Upsert one scoreboard record; returns None when it must be skipped"""
        if not isinstance(raw, dict):
            logger.debug(f"Skipping malformed scoreboard record {raw!r}")
            return None

        external_id = raw.get("gameID")
        if not external_id:
            logger.debug("Skipping scoreboard record without gameID")
            return None
        external_id = str(external_id)

        home_slug = team_slug(raw.get("home"))
        away_slug = team_slug(raw.get("away"))
        if not home_slug or not away_slug:
            logger.debug(f"Skipping game {external_id}: missing or malformed team names")
            return None

        home_abbr = self.resolver.resolve(home_slug)
        away_abbr = self.resolver.resolve(away_slug)
        home_team = team_map.get(home_abbr)
        away_team = team_map.get(away_abbr)

        if not home_team or not away_team:
            logger.debug(
                f"Skipping game {external_id}: no team for "
                f"{home_abbr if not home_team else away_abbr}"
            )
            return None

        if home_team.id == away_team.id:
            logger.warning(f"Skipping game {external_id}: both sides resolve to {home_abbr}")
            return None

        state = parse_game_state(raw)

        game = Game.get_by_external_id(external_id)
        if game is not None:
            return "updated" if game.apply_state(*state) else "unchanged"

        game_time = parse_start_time(raw.get("startTimeEpoch"))
        if game_time is None:
            logger.warning(f"Skipping new game {external_id}: unusable start time")
            return None

        try:
            with db.session.begin_nested():
                game = Game(
                    external_id=external_id,
                    sport_id=sport.id,
                    season_id=season.id,
                    week=week,
                    home_team_id=home_team.id,
                    away_team_id=away_team.id,
                    game_time=game_time,
                    status=state.status,
                    home_score=state.home_score,
                    away_score=state.away_score,
                )
                db.session.add(game)
        except IntegrityError:
            # A concurrent sync inserted the same game first; converge on its row
            game = Game.get_by_external_id(external_id)
            if game is None:
                raise
            logger.info(f"Game {external_id} created concurrently, applying update")
            return "updated" if game.apply_state(*state) else "unchanged"

        return "created"
