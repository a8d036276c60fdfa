"""APScheduler based scheduler implementation."""

import logging
from collections.abc import Callable
from datetime import datetime

from apscheduler.jobstores.base import JobLookupError
from apscheduler.jobstores.memory import MemoryJobStore
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.date import DateTrigger

from vakit_period.services.ports import SchedulerPort

logger = logging.getLogger(__name__)


class APSchedulerAdapter(SchedulerPort):
    """Bildirim işlerini APScheduler ile zamanlayan adaptör."""

    def __init__(self, misfire_grace_seconds: int = 60) -> None:
        """
        Initialize scheduler.

        Args:
            misfire_grace_seconds: Geç kalan işler için tolerans
        """
        self._scheduler = AsyncIOScheduler(jobstores={"default": MemoryJobStore()})
        self._misfire_grace_seconds = misfire_grace_seconds
        self._started = False

    @property
    def running(self) -> bool:
        """APScheduler çalışıyor mu?"""
        return self._started

    def start(self) -> None:
        """Scheduler'ı başlat."""
        if not self._started:
            self._scheduler.start()
            self._started = True
            logger.info("APScheduler başlatıldı.")

    def shutdown(self) -> None:
        """Scheduler'ı kapat."""
        if self._started:
            self._scheduler.shutdown(wait=False)
            self._started = False
            logger.info("APScheduler kapatıldı.")

    def schedule_at(
        self,
        run_time: datetime,
        callback: Callable[[], None],
        job_id: str,
    ) -> None:
        """Belirtilen zamanda çalıştırılacak iş planla (aynı ID'li iş değiştirilir)."""
        self._scheduler.add_job(
            callback,
            trigger=DateTrigger(run_date=run_time),
            id=job_id,
            replace_existing=True,
            misfire_grace_time=self._misfire_grace_seconds,
        )
        logger.debug(f"İş planlandı: {job_id} -> {run_time}")

    def cancel(self, job_id: str) -> bool:
        """Planlanmış işi iptal et."""
        try:
            self._scheduler.remove_job(job_id)
        except JobLookupError:
            return False
        logger.debug(f"İş iptal edildi: {job_id}")
        return True

    def cancel_all(self) -> None:
        """Tüm işleri iptal et."""
        self._scheduler.remove_all_jobs()
        logger.debug("Tüm planlanmış işler iptal edildi.")

    def get_scheduled_jobs(self) -> list[tuple[str, datetime]]:
        """Planlanmış işleri çalışma zamanına göre sıralı listele."""
        result = []
        for job in self._scheduler.get_jobs():
            run_time = getattr(job, "next_run_time", None) or job.trigger.run_date
            result.append((job.id, run_time))
        return sorted(result, key=lambda x: x[1])
