# =============================================================================
# workers/ - Celery Background Task Workers
# =============================================================================
# This package contains the Celery configuration and task definitions for
# fire-and-forget side effects of API requests (push notifications).
#
# Components:
# - celery_app.py: Celery application configuration
# - tasks.py: Task definitions (push delivery)
# - config.py: Worker-specific settings
#
# Usage:
#   # Start worker
#   celery -A workers.celery_app worker -Q default,push --loglevel=info
#
#   # Submit task (from API)
#   from workers.tasks import send_push_notification
#   send_push_notification.delay(token, "Nuevo reto", "Tu pareja creo el reto: ...")
# =============================================================================

from .celery_app import celery_app
from . import tasks

__all__ = [
    "celery_app",
    "tasks",
]
