"""
Client for the NCAA scoreboard API (https://github.com/henrygd/ncaa-api).

Every fetch is a single GET. Failures of any kind (network, timeout,
non-2xx, malformed body) come back as a ScoreboardResult with status
"failed" instead of an exception, so one bad day or week never aborts
a larger sync run. There is no retry; the next scheduled run retries.
"""

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime

import requests

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://ncaa-api.henrygd.me"

FOOTBALL_PATH = "football/fbs"
BASKETBALL_PATH = "basketball-men/d1"

SCHEDULE_DATE_FORMATS = ("%Y-%m-%d", "%m/%d/%Y", "%m-%d-%Y", "%Y/%m/%d")


def parse_schedule_date(value):
    """Schedule date string -> date, or None"""
    if not value:
        return None
    for fmt in SCHEDULE_DATE_FORMATS:
        try:
            return datetime.strptime(str(value).strip(), fmt).date()
        except ValueError:
            continue
    return None


class FetchStatus:
    OK = "ok"  # games returned
    EMPTY = "empty"  # request succeeded, nothing scheduled
    FAILED = "failed"  # network / HTTP / body error


@dataclass
class ScoreboardResult:
    status: str
    games: list = field(default_factory=list)
    url: str = None
    error: str = None

    @property
    def failed(self):
        return self.status == FetchStatus.FAILED


class ScoreboardError(Exception):
    """A scoreboard response that cannot be used"""


class ScoreboardClient:
    """Fetches raw scoreboard records for one sport and date/week at a time"""

    def __init__(self, base_url=None, timeout=15, min_request_interval=0.5):
        self.base_url = (base_url or DEFAULT_BASE_URL).rstrip("/")
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update({"User-Agent": "NCAA-Pickem-App/1.0"})

        # Politeness towards the public API
        self.min_request_interval = min_request_interval
        self.last_request_time = 0
        self.request_count = 0

    @classmethod
    def from_config(cls, app_config):
        return cls(
            base_url=app_config.get("NCAA_API_BASE_URL"),
            timeout=app_config.get("SCOREBOARD_TIMEOUT", 15),
            min_request_interval=app_config.get("SCOREBOARD_MIN_INTERVAL", 0.5),
        )

    def _enforce_rate_limit(self):
        """Keep a minimum interval between requests"""
        time_since_last = time.time() - self.last_request_time
        if time_since_last < self.min_request_interval:
            time.sleep(self.min_request_interval - time_since_last)

        self.last_request_time = time.time()
        self.request_count += 1

    def _get_json(self, url):
        """GET a URL and decode its JSON body; raises on any failure"""
        self._enforce_rate_limit()

        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.Timeout:
            logger.warning(f"Request timeout for {url}")
            raise
        except requests.exceptions.ConnectionError:
            logger.warning(f"Connection error for {url}")
            raise
        except requests.exceptions.HTTPError as e:
            logger.warning(f"HTTP error {e.response.status_code}: {url}")
            raise

        try:
            return response.json()
        except ValueError as e:
            raise ScoreboardError(f"Malformed JSON from {url}") from e

    def _fetch_scoreboard(self, url):
        try:
            data = self._get_json(url)
            if not isinstance(data, dict):
                raise ScoreboardError(f"Unexpected scoreboard body from {url}")

            entries = data.get("games")
            if entries is None:
                entries = []
            if not isinstance(entries, list):
                raise ScoreboardError(f"'games' is not a list in {url}")

        except (requests.exceptions.RequestException, ScoreboardError) as e:
            logger.error(f"Scoreboard fetch failed for {url}: {e}")
            return ScoreboardResult(status=FetchStatus.FAILED, url=url, error=str(e))

        # Each entry wraps the record: {"game": {...}}
        games = [
            entry["game"]
            for entry in entries
            if isinstance(entry, dict) and isinstance(entry.get("game"), dict)
        ]

        if entries and not games:
            error = f"None of {len(entries)} scoreboard entries hold a game object"
            logger.error(f"Scoreboard fetch failed for {url}: {error}")
            return ScoreboardResult(status=FetchStatus.FAILED, url=url, error=error)

        if not games:
            logger.info(f"No games on scoreboard {url}")
            return ScoreboardResult(status=FetchStatus.EMPTY, url=url)

        if len(games) < len(entries):
            logger.warning(
                f"Dropped {len(entries) - len(games)} malformed scoreboard entries from {url}"
            )

        logger.debug(f"Fetched {len(games)} games from {url}")
        return ScoreboardResult(status=FetchStatus.OK, games=games, url=url)

    def football_url(self, year, week, conference="all-conf"):
        return f"{self.base_url}/scoreboard/{FOOTBALL_PATH}/{year}/{int(week)}/{conference}"

    def basketball_url(self, day):
        return (
            f"{self.base_url}/scoreboard/{BASKETBALL_PATH}/"
            f"{day.year}/{day.month:02d}/{day.day:02d}"
        )

    def fetch_football(self, year, week, conference="all-conf"):
        """Scoreboard for one FBS week"""
        return self._fetch_scoreboard(self.football_url(year, week, conference))

    def fetch_basketball(self, day):
        """Scoreboard for one men's D1 basketball date"""
        return self._fetch_scoreboard(self.basketball_url(day))

    def fetch_basketball_schedule(self, year, month):
        """Days (date objects) in a month that have basketball games, or None on failure"""
        url = f"{self.base_url}/schedule/{BASKETBALL_PATH}/{year}/{month:02d}"
        try:
            data = self._get_json(url)
        except (requests.exceptions.RequestException, ScoreboardError) as e:
            logger.error(f"Schedule fetch failed for {url}: {e}")
            return None

        dates = data.get("dates") if isinstance(data, dict) else None
        if not isinstance(dates, list):
            logger.error(f"Unexpected schedule body from {url}")
            return None

        game_days = []
        for entry in dates:
            if not isinstance(entry, dict) or not entry.get("games"):
                continue
            day = parse_schedule_date(entry.get("date"))
            if day is None:
                logger.debug(f"Unparsable schedule date {entry.get('date')!r} in {url}")
                continue
            game_days.append(day)
        return game_days

    def close(self):
        self.session.close()
