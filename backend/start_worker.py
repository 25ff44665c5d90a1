#!/usr/bin/env python3
"""
Ensure a ledger maintenance worker is running.

    python start_worker.py              # start worker + beat if none answers
    python start_worker.py --check      # only report whether one is up
"""

import argparse
import logging
import os
import subprocess
import sys

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from app.celery_config import celery_app
from app.core.config import CELERY_TASK_QUEUE
from app.core.logging import configure_logging

logger = logging.getLogger(__name__)


def worker_is_alive(timeout: float = 2.0) -> bool:
    try:
        replies = celery_app.control.ping(timeout=timeout)
    except Exception as e:
        logger.error(f"[WORKER] Broker unreachable: {e}")
        return False
    if replies:
        logger.info(f"[WORKER] {len(replies)} worker(s) answered")
        return True
    logger.warning("[WORKER] No worker answered the ping")
    return False


def worker_command(concurrency: int, beat: bool) -> list:
    cmd = [
        "celery", "-A", "app.celery_worker.celery", "worker",
        "-Q", CELERY_TASK_QUEUE,
        f"--concurrency={concurrency}",
        "--loglevel=info",
    ]
    if beat:
        cmd.append("--beat")
    return cmd


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("--check", action="store_true", help="only check for a running worker")
    parser.add_argument("--concurrency", type=int, default=1)
    parser.add_argument("--no-beat", action="store_true", help="do not embed the periodic scheduler")
    args = parser.parse_args(argv)

    configure_logging()
    if worker_is_alive():
        return 0
    if args.check:
        return 1

    cmd = worker_command(args.concurrency, beat=not args.no_beat)
    logger.info(f"[WORKER] Starting: {' '.join(cmd)}")
    process = subprocess.Popen(cmd, cwd=os.path.dirname(os.path.abspath(__file__)))
    try:
        return process.wait()
    except KeyboardInterrupt:
        logger.info("[WORKER] Stopping worker")
        process.terminate()
        return process.wait()


if __name__ == "__main__":
    sys.exit(main())
