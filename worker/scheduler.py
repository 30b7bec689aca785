"""
Fixed-interval batch trigger.

Runs ``ProcessingOrchestrator.run_batch`` immediately and then every
``BATCH_INTERVAL_HOURS`` (default 6) until stopped.  A failed batch is
logged and the loop waits for the next tick.

    python -m worker.scheduler
"""

from __future__ import annotations

import signal
import sys
import threading
from typing import Callable, Optional

from domain.models import BatchReport
from shared_utils.config_loader import get_settings
from shared_utils.constants import LogScope
from shared_utils.logging_utils import configure_logging, get_scoped_logger
from shared_utils.di_container import get_di_container

logger = get_scoped_logger(LogScope.WORKER)


class BatchScheduler:
    """Calls *run_batch* every *interval_seconds* on the calling thread."""

    def __init__(
        self,
        run_batch: Callable[[], BatchReport],
        interval_seconds: float,
        stop_event: Optional[threading.Event] = None,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be greater than zero")
        self._run_batch = run_batch
        self._interval = interval_seconds
        self._stop = stop_event or threading.Event()
        self.runs = 0

    def stop(self) -> None:
        self._stop.set()

    def tick(self) -> Optional[BatchReport]:
        """Run one batch; failures are logged and yield None."""
        self.runs += 1
        try:
            return self._run_batch()
        except Exception as exc:
            logger.error("scheduled_batch_failed", run=self.runs, error=str(exc))
            return None

    def run_forever(self, max_runs: Optional[int] = None) -> None:
        logger.info("scheduler_started", interval_seconds=self._interval)
        while not self._stop.is_set():
            self.tick()
            if max_runs is not None and self.runs >= max_runs:
                break
            # Event.wait returns True once stop() is called
            if self._stop.wait(self._interval):
                break
        logger.info("scheduler_stopped", runs=self.runs)


def main() -> int:
    settings = get_settings()
    configure_logging(settings.environment, settings.log_level)

    scheduler = BatchScheduler(
        run_batch=get_di_container().get_orchestrator().run_batch,
        interval_seconds=settings.batch_interval_hours * 3600,
    )
    signal.signal(signal.SIGTERM, lambda *_: scheduler.stop())
    signal.signal(signal.SIGINT, lambda *_: scheduler.stop())
    scheduler.run_forever()
    return 0


if __name__ == "__main__":
    sys.exit(main())
