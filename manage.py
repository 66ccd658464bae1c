#!/usr/bin/env python3
"""
NCAA Pick'em Management CLI

Seeding, season management, scoreboard syncs, grading and user accounts.
"""

import logging
from datetime import date

import click
from flask import current_app
from flask.cli import with_appcontext
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from pickem import create_app, db
from pickem.models import Game, GameStatus, Pick, Season, Sport, User
from pickem.seed_data import seed_all
from pickem.services.pick_grader import PickGrader
from pickem.services.scheduler_service import run_scheduled_sync
from pickem.services.sync_engine import BASKETBALL, FOOTBALL, FootballWeek, SyncEngine
from pickem.utils.cache_utils import invalidate_model_cache
from pickem.utils.timezone_utils import get_current_time

logger = logging.getLogger(__name__)

SPORT_CHOICE = click.Choice([FOOTBALL, BASKETBALL], case_sensitive=False)


@click.group()
def cli():
    """NCAA Pick'em Management CLI"""
    pass


@cli.command()
@click.option("--sample-games", is_flag=True, help="Also add sample week 1 football games")
@with_appcontext
def seed(sample_games):
    """Seed sports, active seasons and teams (safe to re-run)"""
    try:
        summary = seed_all(sample_games=sample_games)
    except SQLAlchemyError as e:
        db.session.rollback()
        click.echo(f"❌ Database error while seeding: {str(e)}")
        logging.error(f"Seed failed - SQL error: {e}")
        return

    for slug, info in summary.items():
        line = f"✅ {slug}: season {info['season']}, {info['teams']} teams"
        if "sample_games" in info:
            line += f", {info['sample_games']} sample games"
        click.echo(line)


# Season Management Commands
@cli.group()
def season():
    """Season management commands"""
    pass


@season.command()
@click.argument("sport", type=SPORT_CHOICE)
@click.argument("year", type=int)
@click.option(
    "--start-date",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    help="Season start date (YYYY-MM-DD)",
)
@click.option(
    "--end-date",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    help="Season end date (YYYY-MM-DD)",
)
@click.option("--name", help='Display name, defaults to e.g. "2024-25"')
@click.option("--activate", is_flag=True, help="Activate this season")
@with_appcontext
def create(sport, year, start_date, end_date, name, activate):
    """Create a new season for a sport"""
    sport_record = Sport.get_by_slug(sport)
    if not sport_record:
        click.echo(f"❌ Sport {sport} not found! Run seed first.")
        return

    # Default dates follow the usual calendar of each sport
    if not start_date:
        start_date = date(year, 8, 24) if sport_record.slug == FOOTBALL else date(year, 11, 4)
    else:
        start_date = start_date.date()

    if not end_date:
        end_date = date(year + 1, 1, 20) if sport_record.slug == FOOTBALL else date(year + 1, 4, 7)
    else:
        end_date = end_date.date()

    try:
        existing = Season.query.filter_by(sport_id=sport_record.id, year=year).first()
        if existing:
            click.echo(f"Season {year} already exists for {sport}!")
            return

        new_season = Season.create_season(sport_record, year, start_date, end_date, name=name)
        db.session.flush()

        if activate:
            new_season.activate()

        db.session.commit()
        click.echo(f"✅ Created {sport} season {new_season.name} ({start_date} to {end_date})")

        if activate:
            click.echo(f"✅ Activated {sport} season {year}")

    except IntegrityError as e:
        db.session.rollback()
        click.echo(f"❌ Season {year} already exists for {sport}!")
        logging.error(f"Season creation failed - integrity error: {e}")
    except SQLAlchemyError as e:
        db.session.rollback()
        click.echo(f"❌ Database error creating season: {str(e)}")
        logging.error(f"Season creation failed - SQL error: {e}")


@season.command()
@click.argument("sport", type=SPORT_CHOICE)
@click.argument("year", type=int)
@with_appcontext
def activate(sport, year):
    """Activate a season (deactivates the sport's other seasons)"""
    try:
        sport_record = Sport.get_by_slug(sport)
        target = (
            Season.query.filter_by(sport_id=sport_record.id, year=year).first()
            if sport_record
            else None
        )
        if not target:
            click.echo(f"❌ Season {year} not found for {sport}!")
            return

        target.activate()
        db.session.commit()
        click.echo(f"✅ Activated {sport} season {year}")

    except SQLAlchemyError as e:
        db.session.rollback()
        click.echo(f"❌ Database error activating season: {str(e)}")
        logging.error(f"Season activation failed - SQL error: {e}")


@season.command("list")
@click.option("--sport", type=SPORT_CHOICE, help="Only this sport")
@with_appcontext
def list_seasons(sport):
    """List seasons"""
    query = Season.query.join(Sport, Season.sport_id == Sport.id)
    if sport:
        query = query.filter(Sport.slug == sport.lower())
    seasons = query.order_by(Sport.slug, Season.year.desc()).all()

    if not seasons:
        click.echo("No seasons found.")
        return

    click.echo("Seasons:")
    for s in seasons:
        status = "🟢 ACTIVE" if s.is_active else "⚪ Inactive"
        click.echo(f"  {s.sport.slug} {s.year} ({s.name}): {status}")


# Data Sync Commands
@cli.group()
def sync():
    """Scoreboard synchronization commands"""
    pass


def _echo_result(result):
    if result.success:
        click.echo(
            f"✅ {result.unit}: {result.synced} synced, {result.skipped} skipped, "
            f"{result.total} total ({result.fetch_status})"
        )
    else:
        label = f"{result.unit}: " if result.unit else ""
        click.echo(f"❌ {label}{result.error}")


def _engine():
    return SyncEngine.from_config(current_app.config)


@sync.command()
@click.argument("year", type=int)
@click.argument("week", type=int)
@with_appcontext
def football(year, week):
    """Sync one FBS football week"""
    engine = _engine()
    try:
        result = engine.sync(FOOTBALL, FootballWeek(week=week, year=year))
    finally:
        engine.close()

    if result.synced:
        invalidate_model_cache("Game")
    _echo_result(result)


@sync.command()
@click.option(
    "--date",
    "day",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    help="Day to sync (YYYY-MM-DD), defaults to today",
)
@with_appcontext
def basketball(day):
    """Sync one day of men's D1 basketball"""
    day = day.date() if day else get_current_time().date()

    engine = _engine()
    try:
        result = engine.sync(BASKETBALL, day)
    finally:
        engine.close()

    if result.synced:
        invalidate_model_cache("Game")
    _echo_result(result)


@sync.command("basketball-month")
@click.argument("year", type=int)
@click.argument("month", type=click.IntRange(1, 12))
@with_appcontext
def basketball_month(year, month):
    """Sync every basketball game day of a month"""
    engine = _engine()
    try:
        days = engine.client.fetch_basketball_schedule(year, month)
        if days is None:
            click.echo(f"❌ Could not fetch the basketball schedule for {year}-{month:02d}")
            return
        if not days:
            click.echo(f"No basketball games scheduled in {year}-{month:02d}")
            return

        click.echo(f"Syncing {len(days)} game days...")
        batch = engine.sync_units(BASKETBALL, days)
    finally:
        engine.close()

    if batch.error:
        click.echo(f"❌ {batch.error}")
        return

    for result in batch.results:
        _echo_result(result)

    if batch.synced:
        invalidate_model_cache("Game")
    click.echo(f"Total: {batch.synced} synced, {batch.skipped} skipped of {batch.total}")


@sync.command()
@with_appcontext
def scheduled():
    """Run the scheduled sync now (basketball yesterday + today, then grade)"""
    engine = _engine()
    try:
        summary = run_scheduled_sync(engine=engine)
    finally:
        engine.close()

    batch = summary["results"][BASKETBALL]
    for unit in batch["units"]:
        status = "✅" if unit["success"] else "❌"
        click.echo(
            f"{status} {unit['unit']}: {unit['synced']} synced, {unit['skipped']} skipped"
        )
    if batch.get("error"):
        click.echo(f"❌ {batch['error']}")
    click.echo(f"🎯 Picks graded: {summary['picks_updated']}")


@cli.command()
@with_appcontext
def grade():
    """Grade pending picks on final games"""
    try:
        picks_updated = PickGrader().grade_completed_picks()
    except SQLAlchemyError as e:
        click.echo(f"❌ Database error grading picks: {str(e)}")
        return

    if picks_updated:
        invalidate_model_cache("Pick")
    click.echo(f"✅ Graded {picks_updated} picks")


# User Management Commands
@cli.group()
def user():
    """User management commands"""
    pass


@user.command("create")
@click.argument("username")
@click.argument("email")
@click.password_option()
@click.option("--display-name", help="Display name")
@click.option("--admin", is_flag=True, help="Grant admin rights (sync and grade endpoints)")
@with_appcontext
def create_user(username, email, password, display_name, admin):
    """Create a user account"""
    existing = User.query.filter(
        (User.username == username) | (User.email == email)
    ).first()

    if existing:
        click.echo(
            f"❌ User with username '{username}' or email '{email}' already exists!"
        )
        return

    try:
        new_user = User(username=username, email=email, is_active=True, is_admin=admin)
        new_user.set_password(password)
        if display_name:
            new_user.set_display_name(display_name)

        db.session.add(new_user)
        db.session.commit()

    except SQLAlchemyError as e:
        db.session.rollback()
        click.echo(f"❌ Error creating user: {str(e)}")
        return

    role = "admin user" if admin else "user"
    click.echo(f"✅ Created {role} '{username}' ({email})")


@user.command("list")
@with_appcontext
def list_users():
    """List all users"""
    users = User.query.order_by(User.created_at.desc()).all()

    if not users:
        click.echo("No users found.")
        return

    click.echo("Users:")
    for u in users:
        status = "🟢" if u.is_active else "🔴"
        role = " (admin)" if u.is_admin else ""
        click.echo(f"  {status} {u.username} ({u.email}) - {u.full_name}{role}")


# Database Commands
@cli.group()
def db_cmd():
    """Database commands"""
    pass


@db_cmd.command("init")
@with_appcontext
def init_db():
    """Initialize database tables"""
    try:
        db.create_all()
        click.echo("✅ Database tables created successfully!")
    except SQLAlchemyError as e:
        click.echo(f"❌ Error initializing database: {str(e)}")


@db_cmd.command()
@with_appcontext
def reset():
    """⚠️  DANGER: Drop and recreate all tables"""
    if not click.confirm("This will DELETE ALL DATA. Are you sure?"):
        click.echo("Cancelled.")
        return

    try:
        db.drop_all()
        db.create_all()
        click.echo("✅ Database reset successfully!")
    except SQLAlchemyError as e:
        click.echo(f"❌ Error resetting database: {str(e)}")


@cli.command()
@with_appcontext
def status():
    """Show application status"""
    click.echo("🏀 NCAA Pick'em Application Status")
    click.echo("=" * 40)

    try:
        db.session.execute(text("SELECT 1"))
        click.echo("✅ Database: Connected")
    except SQLAlchemyError as e:
        click.echo(f"❌ Database: Error - {str(e)}")
        return

    for sport in Sport.query.order_by(Sport.slug).all():
        active = Season.get_active(sport)
        if not active:
            click.echo(f"⚠️  {sport.name}: no active season")
            continue

        game_count = Game.query.filter_by(season_id=active.id).count()
        final_count = Game.query.filter_by(
            season_id=active.id, status=GameStatus.FINAL
        ).count()
        click.echo(
            f"✅ {sport.name} {active.name}: {final_count}/{game_count} games final"
        )

    pending = Pick.query.filter(Pick.is_correct.is_(None)).count()
    click.echo(f"🎯 Ungraded picks: {pending}")

    user_count = User.query.filter_by(is_active=True).count()
    click.echo(f"👥 Active Users: {user_count}")


if __name__ == "__main__":
    app = create_app(start_scheduler=False)
    with app.app_context():
        cli()
