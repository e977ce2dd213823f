"""DynamoDB repository: key layout, update expressions, pagination and conditional failures."""
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from inspection_platform.errors import NotFoundError
from inspection_platform.records import InspectionRepository, primary_key, status_key, strip_internal_keys

from conftest import make_record


@pytest.fixture
def table():
    return MagicMock()


@pytest.fixture
def repo(table):
    return InspectionRepository(table, status_index_name="GSI1")


def _stored(record):
    return {
        "PK": f"INSPECTION#{record['inspectionId']}",
        "SK": "METADATA",
        "GSI1PK": f"STATUS#{record['status']}",
        "GSI1SK": record["createdAt"],
        **record,
    }


def test_key_helpers():
    assert primary_key("insp_1") == {"PK": "INSPECTION#insp_1", "SK": "METADATA"}
    assert status_key("DRAFT") == "STATUS#DRAFT"
    assert strip_internal_keys({"PK": 1, "SK": 2, "GSI1PK": 3, "GSI1SK": 4, "notes": ""}) == {"notes": ""}


def test_get_strips_internal_keys(repo, table):
    record = make_record()
    table.get_item.return_value = {"Item": _stored(record)}

    assert repo.get("insp_1234abcd") == record
    table.get_item.assert_called_once_with(Key={"PK": "INSPECTION#insp_1234abcd", "SK": "METADATA"})


def test_get_missing(repo, table):
    table.get_item.return_value = {}
    assert repo.get("insp_missing") is None


def test_put_writes_keys_and_status_index(repo, table):
    record = make_record(status="DRAFT")

    repo.put(record)

    kwargs = table.put_item.call_args.kwargs
    assert kwargs["Item"] == _stored(record)
    assert kwargs["ConditionExpression"] == "attribute_not_exists(PK)"


def test_update_status_sets_only_status_fields(repo, table):
    table.update_item.return_value = {"Attributes": _stored(make_record(status="REPORT_GENERATED"))}

    result = repo.update_status(
        "insp_1234abcd",
        "REPORT_GENERATED",
        {"reportGeneratedAt": "2024-05-01T12:00:00.000Z", "updatedAt": "2024-05-01T12:00:00.000Z"},
    )

    kwargs = table.update_item.call_args.kwargs
    assert kwargs["Key"] == {"PK": "INSPECTION#insp_1234abcd", "SK": "METADATA"}
    assert kwargs["ConditionExpression"] == "attribute_exists(PK)"
    assert kwargs["ReturnValues"] == "ALL_NEW"

    written = {
        kwargs["ExpressionAttributeNames"][name]: kwargs["ExpressionAttributeValues"][value]
        for name, value in (a.split(" = ") for a in kwargs["UpdateExpression"][len("SET "):].split(", "))
    }
    assert written == {
        "status": "REPORT_GENERATED",
        "GSI1PK": "STATUS#REPORT_GENERATED",
        "reportGeneratedAt": "2024-05-01T12:00:00.000Z",
        "updatedAt": "2024-05-01T12:00:00.000Z",
    }
    assert "PK" not in result


def test_update_without_status_leaves_index_alone(repo, table):
    table.update_item.return_value = {"Attributes": {}}

    repo.update_fields("insp_1234abcd", {"notes": "n", "updatedAt": "t"})

    names = table.update_item.call_args.kwargs["ExpressionAttributeNames"]
    assert sorted(names.values()) == ["notes", "updatedAt"]


def test_update_of_vanished_record_is_not_found(repo, table):
    table.update_item.side_effect = ClientError(
        {"Error": {"Code": "ConditionalCheckFailedException", "Message": "The conditional request failed"}},
        "UpdateItem",
    )
    with pytest.raises(NotFoundError):
        repo.update_fields("insp_gone", {"notes": "x"})


def test_other_client_errors_propagate(repo, table):
    table.update_item.side_effect = ClientError(
        {"Error": {"Code": "ProvisionedThroughputExceededException", "Message": "slow down"}},
        "UpdateItem",
    )
    with pytest.raises(ClientError):
        repo.update_fields("insp_1", {"notes": "x"})


def test_update_requires_fields(repo):
    with pytest.raises(ValueError):
        repo.update_fields("insp_1", {})


def test_query_by_status_reads_every_page(repo, table):
    first = make_record(inspectionId="insp_1", status="DRAFT")
    second = make_record(inspectionId="insp_2", status="DRAFT")
    table.query.side_effect = [
        {"Items": [_stored(first)], "LastEvaluatedKey": {"PK": "INSPECTION#insp_1"}},
        {"Items": [_stored(second)]},
    ]

    items = repo.query_by_status("DRAFT")

    assert [i["inspectionId"] for i in items] == ["insp_1", "insp_2"]
    first_call, second_call = table.query.call_args_list
    assert first_call.kwargs["IndexName"] == "GSI1"
    assert first_call.kwargs["ScanIndexForward"] is False
    assert "ExclusiveStartKey" not in first_call.kwargs
    assert second_call.kwargs["ExclusiveStartKey"] == {"PK": "INSPECTION#insp_1"}


def test_scan_all(repo, table):
    table.scan.return_value = {"Items": [_stored(make_record())]}

    items = repo.scan_all()

    assert items == [make_record()]
    assert "FilterExpression" in table.scan.call_args.kwargs
