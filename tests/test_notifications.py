"""SNS publisher for report-generated events."""
import json
from unittest.mock import MagicMock

from inspection_platform.notifications import NotificationPublisher
from inspection_platform.schemas import NotificationEvent


def test_publish_sends_camel_case_event_with_type_attribute():
    sns = MagicMock()
    sns.publish.return_value = {"MessageId": "abc-123"}
    publisher = NotificationPublisher(sns, "arn:aws:sns:us-east-1:123456789012:inspection-events")
    event = NotificationEvent(
        type="REPORT_GENERATED",
        inspection_id="insp_1",
        report_id="report_insp_1",
        property_address="12 Elm Street",
        inspector_email="dana@inspections.example.com",
        generated_at="2024-05-01T12:00:00.000Z",
    )

    assert publisher.publish(event) == "abc-123"

    kwargs = sns.publish.call_args.kwargs
    assert kwargs["TopicArn"] == "arn:aws:sns:us-east-1:123456789012:inspection-events"
    assert kwargs["Subject"] == "Inspection Report Generated"
    assert kwargs["MessageAttributes"] == {"eventType": {"DataType": "String", "StringValue": "REPORT_GENERATED"}}
    message = json.loads(kwargs["Message"])
    assert message["inspectionId"] == "insp_1"
    assert message["propertyAddress"] == "12 Elm Street"
    assert message["clientEmail"] is None


def test_configured():
    assert not NotificationPublisher(MagicMock(), "").configured
    assert NotificationPublisher(MagicMock(), "arn:aws:sns:us-east-1:1:t").configured
