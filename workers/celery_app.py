# =============================================================================
# workers/celery_app.py - Celery Application Configuration
# =============================================================================
# This module creates and configures the Celery application instance that
# delivers push notifications outside the request/response cycle.
#
# Usage:
#   # Start worker (both queues)
#   celery -A workers.celery_app worker -Q default,push --loglevel=info
#
#   # Check status
#   celery -A workers.celery_app status
# =============================================================================

import logging
import os

from celery import Celery
from celery.signals import task_failure, task_postrun, task_prerun, worker_ready
from dotenv import load_dotenv

# Workers run outside uvicorn, so load .env before reading the broker URL
load_dotenv()

# Set up logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def _redact(url: str) -> str:
    """Drop credentials from a broker URL before logging it."""
    return url.split("@")[-1] if "@" in url else url


def create_celery_app() -> Celery:
    """
    Create and configure Celery application.

    Returns:
        Configured Celery app instance
    """
    redis_url = os.getenv("REDIS_URL", "redis://localhost:6379/0")

    app = Celery(
        "lucky_love_worker",
        broker=redis_url,
        backend=redis_url,
        include=["workers.tasks"],
    )

    app.config_from_object("workers.config:CeleryConfig")

    logger.info(f"Celery app created with broker: {_redact(redis_url)}")

    return app


# Create the Celery app instance
celery_app = create_celery_app()


@celery_app.task(name="workers.ping")
def ping() -> str:
    """
    Liveness check for the worker.

    Usage:
        from workers.celery_app import ping
        ping.delay().get(timeout=5)  # "pong"
    """
    return "pong"


# =============================================================================
# Celery Signals (Lifecycle Hooks)
# =============================================================================

@worker_ready.connect
def worker_ready_handler(sender=None, **extra):
    """Log once the worker is consuming."""
    logger.info("Worker ready: consuming push notifications")


@task_prerun.connect
def task_prerun_handler(sender=None, task_id=None, task=None, args=None, kwargs=None, **extra):
    """Log when a task starts."""
    logger.info(f"Task started: {task.name} [{task_id}]")


@task_postrun.connect
def task_postrun_handler(sender=None, task_id=None, task=None, args=None, kwargs=None, retval=None, state=None, **extra):
    """Log when a task completes."""
    logger.info(f"Task completed: {task.name} [{task_id}] - State: {state}")


@task_failure.connect
def task_failure_handler(sender=None, task_id=None, exception=None, traceback=None, **extra):
    """Log when a task fails."""
    logger.error(f"Task failed: {sender.name} [{task_id}] - Error: {exception}")


# =============================================================================
# CLI Entry Point
# =============================================================================

if __name__ == "__main__":
    celery_app.start()
