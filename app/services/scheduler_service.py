"""
Spread Pick'em Automatic Scoring Scheduler

Runs the settlement sweep in the background with APScheduler: every few
minutes, any final game that still has pending picks gets scored.
"""

import atexit
import logging
from datetime import datetime, timezone

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger

from app import db
from app.services.settlement_service import SettlementService, summarize

logger = logging.getLogger(__name__)


class SchedulerService:
    """Manages the background scoring jobs"""

    def __init__(self, app=None):
        self.scheduler = None
        self.app = app
        self.settlement = None
        self.is_running = False
        self.sweep_stats = self._empty_stats()

        if app:
            self.init_app(app)

    @staticmethod
    def _empty_stats():
        return {
            "last_run": None,
            "total_runs": 0,
            "successful_runs": 0,
            "failed_runs": 0,
            "last_error": None,
            "picks_scored": 0,
        }

    def init_app(self, app):
        """Initialize scheduler with Flask app"""
        self.app = app
        self.scheduler = BackgroundScheduler(daemon=True, timezone="UTC")
        self.settlement = SettlementService()

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
        """Add core scheduled jobs"""
        interval = self.app.config.get("SCORING_SWEEP_INTERVAL_MINUTES", 30)

        # Settle newly completed games
        self.scheduler.add_job(
            func=self._score_completed_games,
            trigger=IntervalTrigger(minutes=interval),
            id="score_completed_games",
            name="Score Completed Games",
            max_instances=1,
            coalesce=True,
            misfire_grace_time=60,
        )

        # Nightly full recalculation (4 AM UTC) to catch corrected scores
        self.scheduler.add_job(
            func=self._nightly_recalculation,
            trigger=CronTrigger(hour=4, minute=0),
            id="nightly_recalculation",
            name="Nightly Score Recalculation",
            max_instances=1,
            coalesce=True,
            misfire_grace_time=3600,
        )

        logger.info(f"Scoring jobs added (sweep every {interval} minutes)")

    def _score_completed_games(self):
        """Sweep for final games with pending picks"""
        with self.app.app_context():
            try:
                outcomes = self.settlement.score_completed_games()
                self._update_stats(True, len(outcomes))

                if outcomes:
                    summary = summarize(outcomes)
                    logger.info(
                        f"Sweep scored {summary['total']} picks "
                        f"({summary['errors']} failed)"
                    )

            except Exception as e:
                db.session.rollback()
                self._update_stats(False)
                self.sweep_stats["last_error"] = str(e)
                logger.error(f"Error in scoring sweep: {e}", exc_info=True)

    def _nightly_recalculation(self):
        """Rescore every game with picks"""
        with self.app.app_context():
            try:
                logger.info("Running nightly recalculation...")
                outcomes = self.settlement.recalculate_all()
                self._update_stats(True, len(outcomes))
                logger.info(f"Nightly recalculation rescored {len(outcomes)} picks")

            except Exception as e:
                db.session.rollback()
                self._update_stats(False)
                self.sweep_stats["last_error"] = str(e)
                logger.error(f"Error in nightly recalculation: {e}", exc_info=True)

    def _update_stats(self, success, picks_scored=0):
        """Update sweep statistics"""
        self.sweep_stats["last_run"] = datetime.now(timezone.utc)
        self.sweep_stats["total_runs"] += 1

        if success:
            self.sweep_stats["successful_runs"] += 1
            self.sweep_stats["picks_scored"] += picks_scored
            self.sweep_stats["last_error"] = None
        else:
            self.sweep_stats["failed_runs"] += 1

    def get_status(self):
        """Get scheduler status information"""
        jobs = []
        if self.scheduler:
            for job in self.scheduler.get_jobs():
                next_run = job.next_run_time
                jobs.append(
                    {
                        "id": job.id,
                        "name": job.name,
                        "next_run": next_run.isoformat() if next_run else None,
                        "trigger": str(job.trigger),
                    }
                )

        return {"is_running": self.is_running, "jobs": jobs, "stats": self.sweep_stats}

    def force_run(self, job_type="sweep"):
        """Manually trigger a job"""
        if job_type == "sweep":
            self._score_completed_games()
        elif job_type == "recalc":
            self._nightly_recalculation()
        else:
            raise ValueError(f"Unknown job type: {job_type}")

        return self.sweep_stats["last_error"] is None, f"Manual {job_type} completed"


# Global scheduler instance
scheduler_service = SchedulerService()
