"""
Lambda entry point for the notification worker (SQS trigger).

Handler: inspection_platform.worker.handler
"""
import json
import logging
from functools import lru_cache

from .config import configure_logging, get_settings
from .dependencies import build_worker
from .services.notification_worker import NotificationWorker

logger = logging.getLogger(__name__)


@lru_cache
def get_worker() -> NotificationWorker:
    settings = get_settings()
    configure_logging(settings)
    return build_worker(settings)


def handler(event, context=None):
    records = (event.get("Records") if isinstance(event, dict) else None) or []
    logger.info(f"Received {len(records)} record(s)")

    summary = get_worker().process_batch(records)

    return {
        "statusCode": 200,
        "body": json.dumps(summary.model_dump(by_alias=True, exclude_none=True)),
    }
