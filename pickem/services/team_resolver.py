"""
Team name resolution for scoreboard data.

The scoreboard identifies teams by an SEO slug ("ohio-st", "miami-fl").
Internally teams are keyed by abbreviation within a sport, so every slug
is translated through a lookup table before the team row is fetched.
"""

import json
import logging
import re
from types import MappingProxyType

logger = logging.getLogger(__name__)

# Slug -> abbreviation for every seeded team
DEFAULT_TEAM_MAPPINGS = MappingProxyType(
    {
        # SEC
        "alabama": "ALA",
        "arkansas": "ARK",
        "auburn": "AUB",
        "florida": "FLA",
        "georgia": "UGA",
        "kentucky": "UK",
        "lsu": "LSU",
        "mississippi-st": "MSST",
        "missouri": "MIZ",
        "oklahoma": "OU",
        "ole-miss": "MISS",
        "south-carolina": "SC",
        "tennessee": "TENN",
        "texas": "TEX",
        "texas-am": "TAMU",
        "vanderbilt": "VAN",
        # Big Ten
        "illinois": "ILL",
        "indiana": "IND",
        "iowa": "IOWA",
        "maryland": "MD",
        "michigan": "MICH",
        "michigan-st": "MSU",
        "minnesota": "MINN",
        "nebraska": "NEB",
        "northwestern": "NW",
        "ohio-st": "OSU",
        "oregon": "ORE",
        "penn-st": "PSU",
        "purdue": "PUR",
        "rutgers": "RUT",
        "ucla": "UCLA",
        "usc": "USC",
        "washington": "WASH",
        "wisconsin": "WIS",
        # Big 12
        "arizona": "ARIZ",
        "arizona-st": "ASU",
        "baylor": "BAY",
        "byu": "BYU",
        "cincinnati": "CIN",
        "colorado": "COLO",
        "houston": "HOU",
        "iowa-st": "ISU",
        "kansas": "KU",
        "kansas-st": "KSU",
        "oklahoma-st": "OKST",
        "tcu": "TCU",
        "texas-tech": "TTU",
        "ucf": "UCF",
        "utah": "UTAH",
        "west-virginia": "WVU",
        # ACC
        "boston-college": "BC",
        "california": "CAL",
        "clemson": "CLEM",
        "duke": "DUKE",
        "florida-st": "FSU",
        "georgia-tech": "GT",
        "louisville": "LOU",
        "miami-fl": "MIA",
        "nc-state": "NCST",
        "north-carolina": "UNC",
        "notre-dame": "ND",
        "pittsburgh": "PITT",
        "smu": "SMU",
        "stanford": "STAN",
        "syracuse": "SYR",
        "virginia": "UVA",
        "virginia-tech": "VT",
        "wake-forest": "WAKE",
        # Big East (basketball)
        "butler": "BUT",
        "uconn": "CONN",
        "creighton": "CREI",
        "depaul": "DEP",
        "georgetown": "GTWN",
        "marquette": "MARQ",
        "providence": "PROV",
        "st-johns": "SJU",
        "seton-hall": "HALL",
        "villanova": "NOVA",
        "xavier": "XAV",
        # WCC
        "gonzaga": "GONZ",
        "saint-marys-ca": "SMC",
        "pepperdine": "PEPP",
    }
)

SURROGATE_LENGTH = 4


def normalize_slug(value):
    """Lower-case a team name and hyphenate its whitespace"""
    if not value:
        return ""
    return re.sub(r"\s+", "-", str(value).strip().lower())


class TeamNameResolver:
    """Maps scoreboard team slugs to internal team abbreviations.

    Unknown slugs are not an error: they resolve to a surrogate (the
    upper-cased slug cut to four characters) that usually matches no team,
    which the sync engine then counts as a skip.
    """

    def __init__(self, mappings=None):
        table = DEFAULT_TEAM_MAPPINGS if mappings is None else mappings
        self._mappings = MappingProxyType(
            {normalize_slug(slug): abbr.upper() for slug, abbr in table.items()}
        )

    @property
    def mappings(self):
        return self._mappings

    def resolve(self, slug):
        """Return the abbreviation for a slug, or its surrogate"""
        key = normalize_slug(slug)
        abbreviation = self._mappings.get(key)
        if abbreviation is None:
            abbreviation = key.upper()[:SURROGATE_LENGTH]
            logger.debug(f"No team mapping for '{key}', using surrogate '{abbreviation}'")
        return abbreviation

    @classmethod
    def from_config(cls, app_config):
        """Build the resolver from the default table plus TEAM_MAPPINGS_FILE"""
        mappings = dict(DEFAULT_TEAM_MAPPINGS)
        path = app_config.get("TEAM_MAPPINGS_FILE")

        if path:
            with open(path, encoding="utf-8") as fh:
                overrides = json.load(fh)
            if not isinstance(overrides, dict):
                raise ValueError(f"{path} must contain a JSON object of slug -> abbreviation")
            loaded = 0
            for slug, abbreviation in overrides.items():
                if not isinstance(abbreviation, str) or not abbreviation.strip():
                    logger.warning(
                        f"Ignoring team mapping '{slug}' in {path}: "
                        f"abbreviation must be a non-empty string, got {abbreviation!r}"
                    )
                    continue
                mappings[slug] = abbreviation.strip()
                loaded += 1
            logger.info(f"Loaded {loaded} team mapping overrides from {path}")

        return cls(mappings)
