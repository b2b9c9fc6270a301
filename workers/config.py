# =============================================================================
# workers/config.py - Celery Worker Configuration
# =============================================================================
# Settings specific to Celery workers. Broker and result backend both point
# at REDIS_URL from app.config.
# =============================================================================

from app.config import settings


class CeleryConfig:
    """
    Celery configuration settings.

    These are applied to the Celery app via app.config_from_object().
    """

    # -------------------------------------------------------------------------
    # Broker Settings (Redis)
    # -------------------------------------------------------------------------

    # Redis URL for message broker
    broker_url = settings.REDIS_URL

    # Redis URL for result backend (store task results)
    result_backend = settings.REDIS_URL

    # -------------------------------------------------------------------------
    # Task Settings
    # -------------------------------------------------------------------------

    # Acknowledge tasks after they complete (not before)
    # This prevents task loss if worker crashes mid-task
    task_acks_late = True

    # Only prefetch one task at a time
    # This ensures fair distribution across workers
    worker_prefetch_multiplier = 1

    # Task results expire after 1 hour
    result_expires = 3600

    # A push is a single HTTP call; anything longer is stuck
    task_time_limit = 60

    # Soft timeout - gives task time to log before being killed
    task_soft_time_limit = 45

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    # Use JSON for task serialization (safer than pickle)
    task_serializer = "json"
    result_serializer = "json"
    accept_content = ["json"]

    # -------------------------------------------------------------------------
    # Task Routing
    # -------------------------------------------------------------------------

    # Define task queues
    task_queues = {
        "default": {
            "exchange": "default",
            "routing_key": "default",
        },
        "push": {
            "exchange": "push",
            "routing_key": "push",
        },
    }

    # Push delivery gets its own queue so a slow Expo API can't starve
    # other work
    task_routes = {
        "workers.tasks.send_push_notification": {"queue": "push"},
    }

    # Default queue for unrouted tasks
    task_default_queue = "default"

    # -------------------------------------------------------------------------
    # Retry Settings
    # -------------------------------------------------------------------------

    # Push tasks report delivery failures in their result; no retries
    task_annotations = {
        "*": {
            "max_retries": 0,
        }
    }

    # -------------------------------------------------------------------------
    # Monitoring
    # -------------------------------------------------------------------------

    # Send task events for monitoring (Flower, etc.)
    worker_send_task_events = True
    task_send_sent_event = True

    # -------------------------------------------------------------------------
    # Timezone
    # -------------------------------------------------------------------------

    timezone = "UTC"
    enable_utc = True
