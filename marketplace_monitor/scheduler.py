"""
Periodic ping scheduler.

Runs the ping pipeline on an APScheduler background thread, then broadcasts
the newest record and refreshed stats. The cadence comes from settings:
PING_CRON (crontab expression) when set, otherwise PING_INTERVAL_SECONDS.
"""

from __future__ import annotations

import threading
from datetime import datetime, timezone
from typing import Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.base import BaseTrigger
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger

from marketplace_monitor.config import Settings, get_settings
from marketplace_monitor.exceptions import ConfigurationError
from marketplace_monitor.notifier import LiveNotifier
from marketplace_monitor.pipeline import PingPipeline
from marketplace_monitor.store.abstract import RecordStore
from marketplace_monitor.utils.logging import get_logger

log = get_logger(__name__)

JOB_ID = "marketplace-ping"

IDLE = "idle"
RUNNING = "running"


def build_trigger(settings: Settings) -> BaseTrigger:
    """Cron trigger when PING_CRON is set, interval trigger otherwise."""
    if settings.ping_cron:
        try:
            return CronTrigger.from_crontab(settings.ping_cron, timezone=timezone.utc)
        except ValueError as exc:
            raise ConfigurationError(f"Invalid PING_CRON '{settings.ping_cron}': {exc}") from exc
    return IntervalTrigger(seconds=settings.ping_interval_seconds, timezone=timezone.utc)


class PingScheduler:
    """
    Owns the background scheduler that drives every write in the system.

    Each tick moves Idle → Running → Idle. Errors inside a tick are logged and
    never stop later ticks.
    """

    def __init__(
        self,
        pipeline: PingPipeline,
        store: RecordStore,
        notifier: LiveNotifier,
        settings: Optional[Settings] = None,
        scheduler: Optional[BackgroundScheduler] = None,
    ) -> None:
        self.pipeline = pipeline
        self.store = store
        self.notifier = notifier
        self.settings = settings or get_settings()
        self._scheduler = scheduler or BackgroundScheduler(timezone=timezone.utc)
        self._state = IDLE
        self._state_lock = threading.Lock()

    @property
    def state(self) -> str:
        with self._state_lock:
            return self._state

    @property
    def running(self) -> bool:
        return bool(self._scheduler.running)

    def _set_state(self, state: str) -> None:
        with self._state_lock:
            self._state = state

    def tick(self) -> None:
        """Run one ping and broadcast its outcome."""
        self._set_state(RUNNING)
        log.info("Starting scheduled ping", extra={"url": self.pipeline.url})
        try:
            if self.pipeline.run() is None:
                log.warning("Ping outcome was not stored; skipping broadcast")
                return
            latest = self.store.find_latest()
            if latest is not None:
                self.notifier.broadcast_new_record(latest)
                self.notifier.broadcast_stats()
            log.info("Completed scheduled ping and broadcast")
        except Exception:
            log.exception("Error in scheduled ping")
        finally:
            self._set_state(IDLE)

    def start(self) -> None:
        trigger = build_trigger(self.settings)
        job_kwargs = {}
        if self.settings.ping_on_startup:
            log.info("Performing initial ping on startup")
            job_kwargs["next_run_time"] = datetime.now(timezone.utc)
        self._scheduler.add_job(
            self.tick,
            trigger,
            id=JOB_ID,
            max_instances=1,
            coalesce=True,
            replace_existing=True,
            **job_kwargs,
        )
        self._scheduler.start()
        log.info(f"Ping scheduler started ({trigger})")

    def shutdown(self, wait: bool = False) -> None:
        if self._scheduler.running:
            self._scheduler.shutdown(wait=wait)
            log.info("Ping scheduler stopped")


__all__ = ["PingScheduler", "build_trigger", "JOB_ID", "IDLE", "RUNNING"]
