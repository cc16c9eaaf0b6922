from __future__ import annotations

from reminderly.core.config import settings
from reminderly.core.logger import init_logging
from reminderly.workers.celery_app import celery_app


def worker_argv() -> list[str]:
    """Worker plus embedded beat, so a single process runs both daily reminder jobs."""
    return [
        "worker",
        "--beat",
        f"--loglevel={settings.LOG_LEVEL.lower()}",
        "--hostname=reminderly@%h",
        "--queues=default",
        "--concurrency=1",
    ]


def main() -> None:
    init_logging()
    celery_app.worker_main(worker_argv())


if __name__ == "__main__":
    main()
