# Notification worker: turns report events from the queue into outbound messages
from __future__ import annotations
import json
import logging
from typing import Any, Dict, Iterable, List, Optional

from ..lib.clock import parse_iso
from ..schemas import (
    REPORT_GENERATED_EVENT,
    Notification,
    NotificationEvent,
    NotificationOutcome,
    WorkerSummary,
)

logger = logging.getLogger(__name__)

TIME_FORMAT = "%B %d, %Y %I:%M %p UTC"


def format_generated_at(value: str) -> str:
    dt = parse_iso(value)
    return dt.strftime(TIME_FORMAT) if dt else value


def build_notifications(event: NotificationEvent) -> List[Notification]:
    """Inspector always gets a message; the client only when an email is on file."""
    generated = format_generated_at(event.generated_at)
    notifications = [
        Notification(
            to=event.inspector_email,
            subject=f"Inspection Report Ready - {event.property_address}",
            body=(
                f"Your inspection report for {event.property_address} has been generated.\n\n"
                f"Inspection ID: {event.inspection_id}\n"
                f"Generated At: {generated}\n\n"
                "You can view the full report in the inspection platform."
            ),
        )
    ]
    if event.client_email:
        notifications.append(
            Notification(
                to=event.client_email,
                subject=f"Property Inspection Report Available - {event.property_address}",
                body=(
                    f"The inspection report for {event.property_address} is now available.\n\n"
                    f"Inspection ID: {event.inspection_id}\n"
                    f"Generated At: {generated}\n\n"
                    "Please log in to view the detailed report."
                ),
            )
        )
    return notifications


def extract_message(record: Dict[str, Any]) -> str:
    """
    Pull the published event JSON out of a delivered record.
    SQS records carry the SNS notification as a JSON body ({"Message": "..."});
    direct SNS subscriptions carry it under record["Sns"]["Message"].
    """
    if not isinstance(record, dict):
        raise ValueError(f"Unsupported record type: {type(record).__name__}")
    if "Sns" in record:
        return record["Sns"]["Message"]
    body = json.loads(record["body"])
    return body["Message"]


def record_id(record: Any) -> Optional[str]:
    """Message id from whichever envelope delivered the record."""
    if not isinstance(record, dict):
        return None
    if isinstance(record.get("Sns"), dict):
        return record["Sns"].get("MessageId")
    return record.get("messageId")


# ---------- Dispatchers ----------

class LoggingDispatcher:
    """Default: log what would be sent."""

    outcome_status = "notifications_logged"

    def send(self, notification: Notification) -> None:
        logger.info(f"Would send to {notification.to}: {notification.subject}")
        logger.debug(notification.body)


class SesDispatcher:
    """Send plain-text email through Amazon SES."""

    outcome_status = "notifications_sent"

    def __init__(self, ses_client, sender: str):
        self.ses = ses_client
        self.sender = sender

    def send(self, notification: Notification) -> None:
        self.ses.send_email(
            Source=self.sender,
            Destination={"ToAddresses": [notification.to]},
            Message={
                "Subject": {"Data": notification.subject},
                "Body": {"Text": {"Data": notification.body}},
            },
        )
        logger.info(f"Sent email to {notification.to}: {notification.subject}")


# ---------- Worker ----------

class NotificationWorker:
    def __init__(self, dispatcher: Optional[Any] = None):
        self.dispatcher = dispatcher or LoggingDispatcher()

    def process_batch(self, records: Iterable[Dict[str, Any]]) -> WorkerSummary:
        """Each record is handled on its own; one bad message never blocks the rest."""
        results: List[NotificationOutcome] = []
        for record in records:
            try:
                results.append(self.process_record(record))
            except Exception as e:
                rid = record_id(record)
                logger.exception(f"Error processing record {rid}")
                results.append(NotificationOutcome(record_id=rid, status="error", error=str(e)))

        logger.info(f"Processing complete: {len(results)} record(s)")
        return WorkerSummary(processed=len(results), results=results)

    def process_record(self, record: Dict[str, Any]) -> NotificationOutcome:
        payload = json.loads(extract_message(record))
        event_type = payload.get("type")
        if event_type != REPORT_GENERATED_EVENT:
            logger.warning(f"Ignoring unsupported event type {event_type}")
            return NotificationOutcome(inspection_id=payload.get("inspectionId"), status="skipped")

        event = NotificationEvent.model_validate(payload)
        logger.info(f"Processing {event.type} for {event.inspection_id}")

        notifications = build_notifications(event)
        for notification in notifications:
            self.dispatcher.send(notification)

        return NotificationOutcome(
            inspection_id=event.inspection_id,
            status=self.dispatcher.outcome_status,
            recipients=[n.to for n in notifications],
        )
