"""
NCAA Pick'em automatic sync scheduler

Runs the scheduled sync in the background with APScheduler: basketball
scoreboards for yesterday and today, then grading of finished picks. The same
entry point backs the cron endpoint and the `manage.py sync scheduled` command.
"""

import atexit
import logging
from datetime import datetime, timezone

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger
from flask import current_app

from pickem import db
from pickem.services.pick_grader import PickGrader
from pickem.services.sync_engine import BASKETBALL, SyncEngine
from pickem.utils.cache_utils import invalidate_model_cache
from pickem.utils.timezone_utils import today_and_yesterday

logger = logging.getLogger(__name__)

SCHEDULED_SYNC_JOB = "scheduled_sync"


def run_scheduled_sync(engine=None, grader=None, now=None):
    """
    Sync basketball for yesterday and today, then grade finished picks.

    Needs an application context. Days are calendar days in the configured
    TIMEZONE. Returns a JSON-ready summary.
    """
    if engine is None:
        engine = SyncEngine.from_config(current_app.config)
    if grader is None:
        grader = PickGrader()

    yesterday, today = today_and_yesterday(now)
    batch = engine.sync_units(BASKETBALL, [yesterday, today])
    if batch.synced:
        invalidate_model_cache("Game")

    picks_updated = grader.grade_completed_picks()
    if picks_updated:
        invalidate_model_cache("Pick")

    if batch.success:
        logger.info(
            f"Scheduled sync: {batch.synced} synced, {batch.skipped} skipped, "
            f"{picks_updated} picks graded"
        )
    else:
        logger.warning(
            f"Scheduled sync finished with errors: {batch.error or batch.failed_units}"
        )

    return {
        "success": batch.success,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "results": {BASKETBALL: batch.to_dict()},
        "picks_updated": picks_updated,
    }


class SchedulerService:
    """Manages automatic background scheduling of scoreboard syncs"""

    def __init__(self, app=None):
        self.scheduler = None
        self.app = app
        self.engine = None
        self.grader = None
        self.is_running = False
        self.sync_stats = {
            "last_sync": None,
            "total_syncs": 0,
            "successful_syncs": 0,
            "failed_syncs": 0,
            "last_error": None,
            "games_synced": 0,
            "picks_graded": 0,
        }

        if app:
            self.init_app(app)

    def init_app(self, app):
        """Initialize scheduler with Flask app"""
        self.app = app
        self.scheduler = BackgroundScheduler(daemon=True, timezone="UTC")

        self.engine = SyncEngine.from_config(app.config)
        self.grader = PickGrader()

        # Register shutdown
        atexit.register(self.shutdown)

        # Start scheduler if enabled
        if app.config.get("SCHEDULER_ENABLED", True):
            self.start()

    def start(self):
        """Start the background scheduler"""
        if self.is_running:
            return

        try:
            # Clear any existing jobs
            self.scheduler.remove_all_jobs()

            self._add_core_jobs()

            self.scheduler.start()
            self.is_running = True

            logger.info("Scheduler started successfully")

        except Exception as e:
            logger.error(f"Failed to start scheduler: {e}")
            raise

    def stop(self):
        """Stop the background scheduler"""
        if not self.is_running:
            return

        try:
            self.scheduler.shutdown(wait=False)
            self.is_running = False
            logger.info("Scheduler stopped")

        except Exception as e:
            logger.error(f"Error stopping scheduler: {e}")

    def shutdown(self):
        """Graceful shutdown"""
        self.stop()

    def _add_core_jobs(self):
        """Add scheduled jobs"""
        hours = self.app.config.get("SYNC_INTERVAL_HOURS", 4)

        self.scheduler.add_job(
            func=self._scheduled_sync,
            trigger=IntervalTrigger(hours=hours),
            id=SCHEDULED_SYNC_JOB,
            name="Sync Basketball Scores And Grade Picks",
            max_instances=1,
            coalesce=True,
            misfire_grace_time=600,
        )

        logger.info(f"Scheduled sync every {hours} hours")

    def _scheduled_sync(self):
        """Job body: scheduled sync inside an app context, never raises"""
        with self.app.app_context():
            try:
                summary = run_scheduled_sync(engine=self.engine, grader=self.grader)
                results = summary["results"][BASKETBALL]

                if summary["success"]:
                    self._update_stats(True, results["synced"], summary["picks_updated"])
                else:
                    self._update_stats(False)
                    self.sync_stats["last_error"] = results.get("error") or (
                        f"Failed units: {[u['unit'] for u in results['units'] if not u['success']]}"
                    )
                return summary

            except Exception as e:
                db.session.rollback()
                self._update_stats(False)
                self.sync_stats["last_error"] = str(e)
                logger.error(f"Error in scheduled sync: {e}", exc_info=True)
                return None

    def _update_stats(self, success, games_synced=0, picks_graded=0):
        """Update sync statistics"""
        self.sync_stats["last_sync"] = datetime.now(timezone.utc)
        self.sync_stats["total_syncs"] += 1

        if success:
            self.sync_stats["successful_syncs"] += 1
            self.sync_stats["games_synced"] += games_synced
            self.sync_stats["picks_graded"] += picks_graded
            self.sync_stats["last_error"] = None
        else:
            self.sync_stats["failed_syncs"] += 1

    def get_status(self):
        """Get scheduler status information"""
        jobs = []
        if self.scheduler:
            for job in self.scheduler.get_jobs():
                next_run = getattr(job, "next_run_time", None)
                jobs.append(
                    {
                        "id": job.id,
                        "name": job.name,
                        "next_run": next_run.isoformat() if next_run else None,
                        "trigger": str(job.trigger),
                    }
                )

        stats = dict(self.sync_stats)
        if stats["last_sync"]:
            stats["last_sync"] = stats["last_sync"].isoformat()

        return {"is_running": self.is_running, "jobs": jobs, "stats": stats}

    def force_sync(self):
        """Manually run the scheduled sync now"""
        if self.app is None:
            return False, "Scheduler is not initialized"

        summary = self._scheduled_sync()
        if summary is None:
            return False, f"Manual sync failed: {self.sync_stats['last_error']}"
        if not summary["success"]:
            return False, f"Manual sync finished with errors: {self.sync_stats['last_error']}"
        return True, "Manual sync completed"

    def pause_job(self, job_id=SCHEDULED_SYNC_JOB):
        """Pause a specific job"""
        try:
            self.scheduler.pause_job(job_id)
            return True, f"Job {job_id} paused"
        except Exception as e:
            return False, f"Failed to pause job: {e}"

    def resume_job(self, job_id=SCHEDULED_SYNC_JOB):
        """Resume a specific job"""
        try:
            self.scheduler.resume_job(job_id)
            return True, f"Job {job_id} resumed"
        except Exception as e:
            return False, f"Failed to resume job: {e}"


# Global scheduler instance
scheduler_service = SchedulerService()
