# SNS publisher for report-generated events
from __future__ import annotations
import logging
from typing import Optional

from .schemas import NotificationEvent

logger = logging.getLogger(__name__)

SUBJECT = "Inspection Report Generated"


class NotificationPublisher:
    """Publishes events to the notification topic. Subscribers filter on the eventType attribute."""

    def __init__(self, sns_client, topic_arn: str):
        self.sns = sns_client
        self.topic_arn = topic_arn

    @property
    def configured(self) -> bool:
        return bool(self.topic_arn)

    def publish(self, event: NotificationEvent) -> Optional[str]:
        """Single attempt, no retry. Returns the SNS message id."""
        response = self.sns.publish(
            TopicArn=self.topic_arn,
            Subject=SUBJECT,
            Message=event.model_dump_json(by_alias=True),
            MessageAttributes={
                "eventType": {"DataType": "String", "StringValue": event.type},
            },
        )
        message_id = response.get("MessageId")
        logger.info(f"Published {event.type} for {event.inspection_id} (message {message_id})")
        return message_id
