"""
Worker entrypoint for ECS Fargate tasks.

Two modes, selected by the environment:
    TRANSCRIPT_ID set    single-item run; process that stored transcript
                         (launched by the API's /process endpoint).
    TRANSCRIPT_ID unset  batch run; retrieve new transcripts and process
                         each (launched by the scheduled rule).

Exit code 0 on success, 1 on failure, so the launching infrastructure can
apply its own retry policy.  An unknown TRANSCRIPT_ID is not a failure.

All logging is JSON (structlog) and ships to CloudWatch via the awslogs driver.
"""

from __future__ import annotations

import os
import sys

from shared_utils.config_loader import get_settings
from shared_utils.constants import LogScope
from shared_utils.logging_utils import configure_logging, get_scoped_logger, log_execution
from shared_utils.di_container import get_di_container

logger = get_scoped_logger(LogScope.WORKER)


@log_execution(scope=LogScope.WORKER)
def run_single(transcript_id: str) -> int:
    orchestrator = get_di_container().get_orchestrator()
    transcript = orchestrator.run_one(transcript_id)
    if transcript is None:
        logger.warning("worker_transcript_not_found", transcript_id=transcript_id)
        return 0
    logger.info(
        "worker_completed",
        transcript_id=transcript_id,
        status=transcript.status.value,
    )
    return 0


@log_execution(scope=LogScope.WORKER)
def run_batch() -> int:
    report = get_di_container().get_orchestrator().run_batch()
    logger.info(
        "worker_batch_completed",
        retrieved=report.retrieved,
        completed=len(report.completed_ids),
        failed=len(report.failed_ids),
        duration_ms=report.duration_ms,
    )
    # Item failures are recorded on the transcripts; the batch itself succeeded.
    return 0


def main() -> int:
    """Worker main: read env vars, build deps, run one trigger."""
    settings = get_settings()
    configure_logging(settings.environment, settings.log_level)

    transcript_id = os.environ.get("TRANSCRIPT_ID", "").strip()
    logger.info(
        "worker_started",
        mode="single" if transcript_id else "batch",
        transcript_id=transcript_id or None,
    )

    try:
        if transcript_id:
            return run_single(transcript_id)
        return run_batch()
    except Exception as exc:
        logger.error(
            "worker_failed",
            transcript_id=transcript_id or None,
            error=str(exc),
        )
        return 1


if __name__ == "__main__":
    sys.exit(main())
