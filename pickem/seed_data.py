"""
Reference data: sports, active 2024-25 seasons and power-conference teams.

Every abbreviation in the team resolver's default table has a team here, so
a fresh database can match scoreboard games right after `manage.py seed`.
"""

import logging
from datetime import date, datetime, timezone

from pickem import db
from pickem.models import Game, Season, Sport, Team

logger = logging.getLogger(__name__)

SPORTS = (("football", "Football"), ("basketball", "Basketball"))

# sport slug -> (year, name, start, end)
SEASONS = {
    "football": (2024, "2024-25", date(2024, 8, 24), date(2025, 1, 20)),
    "basketball": (2024, "2024-25", date(2024, 11, 4), date(2025, 4, 7)),
}

# (abbreviation, name, short name, primary color)
CONFERENCES = {
    "SEC": [
        ("ALA", "Alabama Crimson Tide", "Alabama", "#9E1B32"),
        ("ARK", "Arkansas Razorbacks", "Arkansas", "#9D2235"),
        ("AUB", "Auburn Tigers", "Auburn", "#0C2340"),
        ("FLA", "Florida Gators", "Florida", "#0021A5"),
        ("UGA", "Georgia Bulldogs", "Georgia", "#BA0C2F"),
        ("UK", "Kentucky Wildcats", "Kentucky", "#0033A0"),
        ("LSU", "LSU Tigers", "LSU", "#461D7C"),
        ("MSST", "Mississippi State Bulldogs", "Mississippi St", "#660000"),
        ("MIZ", "Missouri Tigers", "Missouri", "#F1B82D"),
        ("OU", "Oklahoma Sooners", "Oklahoma", "#841617"),
        ("MISS", "Ole Miss Rebels", "Ole Miss", "#CE1126"),
        ("SC", "South Carolina Gamecocks", "South Carolina", "#73000A"),
        ("TENN", "Tennessee Volunteers", "Tennessee", "#FF8200"),
        ("TEX", "Texas Longhorns", "Texas", "#BF5700"),
        ("TAMU", "Texas A&M Aggies", "Texas A&M", "#500000"),
        ("VAN", "Vanderbilt Commodores", "Vanderbilt", "#866D4B"),
    ],
    "Big Ten": [
        ("ILL", "Illinois Fighting Illini", "Illinois", "#E84A27"),
        ("IND", "Indiana Hoosiers", "Indiana", "#990000"),
        ("IOWA", "Iowa Hawkeyes", "Iowa", "#FFCD00"),
        ("MD", "Maryland Terrapins", "Maryland", "#E03A3E"),
        ("MICH", "Michigan Wolverines", "Michigan", "#00274C"),
        ("MSU", "Michigan State Spartans", "Michigan St", "#18453B"),
        ("MINN", "Minnesota Golden Gophers", "Minnesota", "#7A0019"),
        ("NEB", "Nebraska Cornhuskers", "Nebraska", "#E41C38"),
        ("NW", "Northwestern Wildcats", "Northwestern", "#4E2A84"),
        ("OSU", "Ohio State Buckeyes", "Ohio State", "#BB0000"),
        ("ORE", "Oregon Ducks", "Oregon", "#154733"),
        ("PSU", "Penn State Nittany Lions", "Penn State", "#041E42"),
        ("PUR", "Purdue Boilermakers", "Purdue", "#CEB888"),
        ("RUT", "Rutgers Scarlet Knights", "Rutgers", "#CC0033"),
        ("UCLA", "UCLA Bruins", "UCLA", "#2D68C4"),
        ("USC", "USC Trojans", "USC", "#990000"),
        ("WASH", "Washington Huskies", "Washington", "#4B2E83"),
        ("WIS", "Wisconsin Badgers", "Wisconsin", "#C5050C"),
    ],
    "Big 12": [
        ("ARIZ", "Arizona Wildcats", "Arizona", "#CC0033"),
        ("ASU", "Arizona State Sun Devils", "Arizona St", "#8C1D40"),
        ("BAY", "Baylor Bears", "Baylor", "#154734"),
        ("BYU", "BYU Cougars", "BYU", "#002E5D"),
        ("CIN", "Cincinnati Bearcats", "Cincinnati", "#E00122"),
        ("COLO", "Colorado Buffaloes", "Colorado", "#CFB87C"),
        ("HOU", "Houston Cougars", "Houston", "#C8102E"),
        ("ISU", "Iowa State Cyclones", "Iowa State", "#C8102E"),
        ("KU", "Kansas Jayhawks", "Kansas", "#0051BA"),
        ("KSU", "Kansas State Wildcats", "Kansas St", "#512888"),
        ("OKST", "Oklahoma State Cowboys", "Oklahoma St", "#FF7300"),
        ("TCU", "TCU Horned Frogs", "TCU", "#4D1979"),
        ("TTU", "Texas Tech Red Raiders", "Texas Tech", "#CC0000"),
        ("UCF", "UCF Knights", "UCF", "#BA9B37"),
        ("UTAH", "Utah Utes", "Utah", "#CC0000"),
        ("WVU", "West Virginia Mountaineers", "West Virginia", "#002855"),
    ],
    "ACC": [
        ("BC", "Boston College Eagles", "Boston College", "#98002E"),
        ("CAL", "California Golden Bears", "California", "#003262"),
        ("CLEM", "Clemson Tigers", "Clemson", "#F56600"),
        ("DUKE", "Duke Blue Devils", "Duke", "#003087"),
        ("FSU", "Florida State Seminoles", "Florida St", "#782F40"),
        ("GT", "Georgia Tech Yellow Jackets", "Georgia Tech", "#B3A369"),
        ("LOU", "Louisville Cardinals", "Louisville", "#AD0000"),
        ("MIA", "Miami Hurricanes", "Miami", "#F47321"),
        ("NCST", "NC State Wolfpack", "NC State", "#CC0000"),
        ("UNC", "North Carolina Tar Heels", "North Carolina", "#7BAFD4"),
        ("ND", "Notre Dame Fighting Irish", "Notre Dame", "#0C2340"),
        ("PITT", "Pittsburgh Panthers", "Pitt", "#003594"),
        ("SMU", "SMU Mustangs", "SMU", "#CC0035"),
        ("STAN", "Stanford Cardinal", "Stanford", "#8C1515"),
        ("SYR", "Syracuse Orange", "Syracuse", "#F76900"),
        ("UVA", "Virginia Cavaliers", "Virginia", "#232D4B"),
        ("VT", "Virginia Tech Hokies", "Virginia Tech", "#630031"),
        ("WAKE", "Wake Forest Demon Deacons", "Wake Forest", "#9E7E38"),
    ],
    "Big East": [
        ("BUT", "Butler Bulldogs", "Butler", "#13294B"),
        ("CONN", "UConn Huskies", "UConn", "#000E2F"),
        ("CREI", "Creighton Bluejays", "Creighton", "#005CA9"),
        ("DEP", "DePaul Blue Demons", "DePaul", "#005EB8"),
        ("GTWN", "Georgetown Hoyas", "Georgetown", "#041E42"),
        ("MARQ", "Marquette Golden Eagles", "Marquette", "#003366"),
        ("PROV", "Providence Friars", "Providence", "#000000"),
        ("SJU", "St. John's Red Storm", "St. John's", "#BA0C2F"),
        ("HALL", "Seton Hall Pirates", "Seton Hall", "#004488"),
        ("NOVA", "Villanova Wildcats", "Villanova", "#00205B"),
        ("XAV", "Xavier Musketeers", "Xavier", "#0C2340"),
    ],
    "WCC": [
        ("GONZ", "Gonzaga Bulldogs", "Gonzaga", "#041E42"),
        ("SMC", "Saint Mary's Gaels", "Saint Mary's", "#D80024"),
        ("PEPP", "Pepperdine Waves", "Pepperdine", "#00205B"),
    ],
}

SPORT_CONFERENCES = {
    "football": ("SEC", "Big Ten", "Big 12", "ACC"),
    "basketball": ("SEC", "Big Ten", "Big 12", "ACC", "Big East", "WCC"),
}

# Fictional week 1 matchups for trying out picks locally: (home, away, kickoff UTC)
SAMPLE_FOOTBALL_GAMES = (
    ("UGA", "CLEM", datetime(2025, 8, 30, 15, 30, tzinfo=timezone.utc)),
    ("OSU", "TEX", datetime(2025, 8, 30, 19, 0, tzinfo=timezone.utc)),
    ("MICH", "ND", datetime(2025, 8, 30, 19, 30, tzinfo=timezone.utc)),
    ("ALA", "FSU", datetime(2025, 8, 30, 20, 0, tzinfo=timezone.utc)),
    ("LSU", "USC", datetime(2025, 8, 30, 20, 30, tzinfo=timezone.utc)),
    ("ORE", "TENN", datetime(2025, 8, 31, 16, 0, tzinfo=timezone.utc)),
    ("PSU", "WIS", datetime(2025, 8, 31, 12, 0, tzinfo=timezone.utc)),
    ("MIA", "FLA", datetime(2025, 8, 31, 15, 30, tzinfo=timezone.utc)),
)


def seed_sport(slug, name):
    sport = Sport.get_by_slug(slug)
    if not sport:
        sport = Sport(slug=slug, name=name)
        db.session.add(sport)
        db.session.flush()
    return sport


def seed_season(sport):
    year, name, start_date, end_date = SEASONS[sport.slug]
    season = Season.query.filter_by(sport_id=sport.id, year=year).first()
    if not season:
        season = Season.create_season(sport, year, start_date, end_date, name=name)
        db.session.flush()
    season.activate()
    return season


def seed_teams(sport):
    """Insert or refresh the sport's teams; returns how many were written"""
    count = 0
    for conference in SPORT_CONFERENCES[sport.slug]:
        for abbreviation, name, short_name, color in CONFERENCES[conference]:
            team = Team.get_by_abbreviation(abbreviation, sport.id)
            if not team:
                team = Team(sport_id=sport.id, abbreviation=abbreviation)
                db.session.add(team)
            team.name = name
            team.short_name = short_name
            team.conference = conference
            team.primary_color = color
            count += 1
    db.session.flush()
    return count


def seed_sample_games(sport, season):
    """Add the sample week 1 football games that do not exist yet"""
    teams = Team.get_map_for_sport(sport.id)
    created = 0
    for home, away, kickoff in SAMPLE_FOOTBALL_GAMES:
        home_team, away_team = teams.get(home), teams.get(away)
        if not home_team or not away_team:
            continue

        exists = Game.query.filter_by(
            season_id=season.id,
            week=1,
            home_team_id=home_team.id,
            away_team_id=away_team.id,
        ).first()
        if exists:
            continue

        db.session.add(
            Game(
                sport_id=sport.id,
                season_id=season.id,
                week=1,
                home_team_id=home_team.id,
                away_team_id=away_team.id,
                game_time=kickoff,
                venue=f"{home_team.short_name} Stadium",
            )
        )
        created += 1
    return created


def seed_all(sample_games=False):
    """Seed sports, active seasons and teams; safe to run repeatedly"""
    summary = {}
    for slug, name in SPORTS:
        sport = seed_sport(slug, name)
        season = seed_season(sport)
        summary[slug] = {"season": season.name, "teams": seed_teams(sport)}

        if sample_games and slug == "football":
            summary[slug]["sample_games"] = seed_sample_games(sport, season)

    db.session.commit()
    logger.info(f"Seed completed: {summary}")
    return summary
