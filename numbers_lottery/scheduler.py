"""APScheduler cron job for automatic draws."""

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from loguru import logger

from numbers_lottery.errors import LotteryError, OpenDrawConflictError
from numbers_lottery.services.access_policy import Identity
from numbers_lottery.services.lottery_service import LotteryLedger

DRAW_JOB_ID = "auto_draw"


class DrawScheduler:
    """Runs ``execute_draw`` on a cron schedule as a system admin identity.

    A run with no pending tickets creates nothing.
    """

    def __init__(
        self,
        ledger: LotteryLedger,
        *,
        admin_role: str,
        day_of_week: str = "tue,fri",
        hour: int = 21,
        minute: int = 0,
    ):
        self.ledger = ledger
        self.identity = Identity(id="scheduler", role=admin_role)
        self.day_of_week = day_of_week
        self.hour = hour
        self.minute = minute
        self._scheduler: AsyncIOScheduler | None = None

    async def run_draw(self) -> None:
        """One scheduled draw; failures are logged and retried at the next run."""
        try:
            draw = await self.ledger.execute_draw(self.identity, require_pending=True)
            if draw is not None:
                logger.info("Scheduled draw {} completed", draw.id)
        except OpenDrawConflictError as e:
            logger.info("Scheduled draw skipped: draw {} is still open", e.draw_id)
        except LotteryError as e:
            logger.error("Scheduled draw refused: {}", e.message)
        except Exception as e:
            logger.exception("Scheduled draw failed: {}", e)

    def start(self) -> None:
        if self._scheduler is not None:
            return

        self._scheduler = AsyncIOScheduler()
        self._scheduler.add_job(
            self.run_draw, "cron",
            day_of_week=self.day_of_week,
            hour=self.hour, minute=self.minute,
            id=DRAW_JOB_ID,
        )
        self._scheduler.start()
        logger.info("Scheduler started with {} jobs", len(self._scheduler.get_jobs()))

    def stop(self) -> None:
        if self._scheduler:
            self._scheduler.shutdown(wait=False)
            self._scheduler = None
            logger.info("Scheduler stopped")

    def status(self) -> list[dict]:
        """Get status of all scheduled jobs."""
        if not self._scheduler:
            return []

        jobs = []
        for job in self._scheduler.get_jobs():
            jobs.append({
                "id": job.id,
                "name": job.name,
                "next_run": str(job.next_run_time) if job.next_run_time else None,
                "trigger": str(job.trigger),
            })
        return jobs
